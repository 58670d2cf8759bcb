import logging

import pytest
import sqlalchemy as sa
from sqlalchemy.exc import IntegrityError

from tictactoe import db, socketio
from tictactoe.models import PlayerStats
from tictactoe.services.stats import PlayerStatsStore, ResultRecorder


def test_ensure_creates_zeroed_record(flask_app):
    store = PlayerStatsStore()
    stats = store.ensure_player_stats('  Alice  ')
    assert stats == {'name': 'Alice', 'wins': 0, 'losses': 0, 'draws': 0, 'games': 0, 'score': 0}
    # idempotent
    assert store.ensure_player_stats('Alice') == stats
    assert PlayerStats.query.count() == 1


def test_blank_names_are_ignored(flask_app):
    store = PlayerStatsStore()
    assert store.ensure_player_stats('   ') is None
    assert store.get_player_stats('') is None
    store.add_win('  ')
    assert PlayerStats.query.count() == 0


def test_get_does_not_create(flask_app):
    store = PlayerStatsStore()
    assert store.get_player_stats('nobody') is None
    assert PlayerStats.query.count() == 0


def test_counters_create_missing_records(flask_app):
    store = PlayerStatsStore()
    store.add_win('Alice')
    store.add_win('Alice')
    store.add_loss('Bob')
    store.add_draw('Alice')
    alice = store.get_player_stats('Alice')
    assert (alice['wins'], alice['losses'], alice['draws']) == (2, 0, 1)
    assert alice['games'] == 3
    assert alice['score'] == 7
    assert store.get_player_stats('Bob')['losses'] == 1


def test_names_are_truncated(flask_app):
    store = PlayerStatsStore(name_max_length=64)
    store.add_win('x' * 80)
    assert store.get_player_stats('x' * 64)['wins'] == 1


def test_leaderboard_order(flask_app):
    store = PlayerStatsStore()
    # score 3 each, tie broken by wins, then draws, then losses, then name
    for _ in range(3):
        store.add_draw('drawer')
    store.add_win('winner')
    store.add_win('loser_b')
    store.add_loss('loser_b')
    store.add_win('loser_a')
    store.add_loss('loser_a')
    store.add_win('top')
    store.add_win('top')

    names = [row['name'] for row in store.get_leaderboard()]
    assert names == ['top', 'winner', 'loser_a', 'loser_b', 'drawer']


def test_leaderboard_limit(flask_app):
    store = PlayerStatsStore()
    for i in range(12):
        store.ensure_player_stats(f'p{i:02d}')
    assert len(store.get_leaderboard(limit=10)) == 10


def test_recorder_persists_win_and_draw(flask_app):
    store = PlayerStatsStore()
    recorder = ResultRecorder(flask_app, store)
    recorder.record_win('Alice', 'Bob')
    recorder.record_draw('Alice', 'Bob')
    assert store.get_player_stats('Alice')['wins'] == 1
    assert store.get_player_stats('Alice')['draws'] == 1
    assert store.get_player_stats('Bob')['losses'] == 1
    assert store.get_player_stats('Bob')['draws'] == 1


def test_recorder_swallows_and_logs_failures(flask_app, caplog):
    class BrokenStore:
        def add_win(self, name):
            raise RuntimeError('db down')

        def add_loss(self, name):
            raise RuntimeError('db down')

    recorder = ResultRecorder(flask_app, BrokenStore())
    with caplog.at_level(logging.ERROR):
        recorder.record_win('Alice', 'Bob')
    assert 'Failed to persist result' in caplog.text


class _HalfBrokenStore:
    """add_win and the first add_draw fail; every call is recorded."""

    def __init__(self):
        self.calls = []

    def add_win(self, name):
        self.calls.append(('win', name))
        raise RuntimeError('db down')

    def add_loss(self, name):
        self.calls.append(('loss', name))

    def add_draw(self, name):
        self.calls.append(('draw', name))
        if len([c for c in self.calls if c[0] == 'draw']) == 1:
            raise RuntimeError('db down')


def test_failed_win_write_still_records_loss(flask_app, caplog):
    store = _HalfBrokenStore()
    recorder = ResultRecorder(flask_app, store)
    with caplog.at_level(logging.ERROR):
        recorder.record_win('Alice', 'Bob')
    assert store.calls == [('win', 'Alice'), ('loss', 'Bob')]
    assert 'add_win' in caplog.text


def test_failed_draw_write_still_records_other_draw(flask_app):
    store = _HalfBrokenStore()
    ResultRecorder(flask_app, store).record_draw('Alice', 'Bob')
    assert store.calls == [('draw', 'Alice'), ('draw', 'Bob')]


def test_failed_write_leaves_session_usable(flask_app):
    store = PlayerStatsStore()
    real_add_win = store.add_win

    def _boom(name):
        raise RuntimeError('db down')

    store.add_win = _boom
    ResultRecorder(flask_app, store).record_win('Alice', 'Bob')
    assert store.get_player_stats('Alice') is None
    assert store.get_player_stats('Bob')['losses'] == 1
    real_add_win('Alice')
    assert store.get_player_stats('Alice')['wins'] == 1


def test_results_are_handed_to_a_background_task(flask_app, monkeypatch):
    monkeypatch.setitem(flask_app.config, 'TESTING', False)
    scheduled = []
    monkeypatch.setattr(socketio, 'start_background_task', lambda fn, *args: scheduled.append((fn, args)))

    store = _HalfBrokenStore()
    recorder = ResultRecorder(flask_app, store)
    recorder.record_win('Alice', 'Bob')
    recorder.record_draw('Cara', 'Dan')

    # nothing touched the store on the caller's thread
    assert store.calls == []
    assert len(scheduled) == 2

    for fn, args in scheduled:
        fn(*args)
    assert store.calls == [
        ('win', 'Alice'), ('loss', 'Bob'), ('draw', 'Cara'), ('draw', 'Dan'),
    ]


def test_coordinator_result_does_not_block_on_store(flask_app, monkeypatch):
    monkeypatch.setitem(flask_app.config, 'TESTING', False)
    scheduled = []
    monkeypatch.setattr(socketio, 'start_background_task', lambda fn, *args: scheduled.append((fn, args)))

    coordinator = flask_app.extensions['session_coordinator']
    store = flask_app.extensions['player_stats']
    for pid, name in (('a', 'Alice'), ('b', 'Bob')):
        coordinator.connect(pid)
        coordinator.join(pid, name)
    coordinator.disconnect('a')

    assert len(scheduled) == 1
    assert store.get_player_stats('Bob')['wins'] == 0
    fn, args = scheduled[0]
    fn(*args)
    assert store.get_player_stats('Bob')['wins'] == 1
    assert store.get_player_stats('Alice')['losses'] == 1


def test_created_schema_matches_migration(flask_app):
    inspector = sa.inspect(db.engine)
    assert 'idx_leaderboard' in {ix['name'] for ix in inspector.get_indexes('players')}

    db.session.add(PlayerStats(name='Neg', wins=-1))
    with pytest.raises(IntegrityError):
        db.session.commit()
    db.session.rollback()
