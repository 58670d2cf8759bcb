from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError

from tictactoe import db
from tictactoe.models import PlayerStats


class PlayerStatsStore:
    """Win/loss/draw counters keyed by normalized player name.

    Every call needs an application context. Blank names are ignored.
    """

    def __init__(self, name_max_length: int = 64):
        self.name_max_length = name_max_length

    def normalize_name(self, name) -> str:
        return (name or '').strip()[:self.name_max_length]

    def get_player_stats(self, name) -> Optional[Dict[str, Any]]:
        """Stats for ``name`` without creating a record."""
        n = self.normalize_name(name)
        if not n:
            return None
        row = db.session.get(PlayerStats, n)
        return row.to_dict() if row else None

    def ensure_player_stats(self, name) -> Optional[Dict[str, Any]]:
        """Get-or-create the record for ``name`` and return its stats."""
        n = self.normalize_name(name)
        if not n:
            return None
        if db.session.get(PlayerStats, n) is None:
            db.session.add(PlayerStats(name=n))
            try:
                db.session.commit()
            except IntegrityError:
                # Created concurrently by another join
                db.session.rollback()
        return self.get_player_stats(n)

    def add_win(self, name) -> None:
        self._increment(name, PlayerStats.wins)

    def add_loss(self, name) -> None:
        self._increment(name, PlayerStats.losses)

    def add_draw(self, name) -> None:
        self._increment(name, PlayerStats.draws)

    def _increment(self, name, column) -> None:
        n = self.normalize_name(name)
        if not n:
            return
        if self._bump(n, column):
            db.session.commit()
            return
        db.session.add(PlayerStats(name=n, **{column.key: 1}))
        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            self._bump(n, column)
            db.session.commit()

    def _bump(self, name: str, column) -> bool:
        updated = PlayerStats.query.filter_by(name=name).update(
            {column: column + 1}, synchronize_session=False
        )
        return bool(updated)

    def get_leaderboard(self, limit: int = 10) -> List[Dict[str, Any]]:
        rows = (
            PlayerStats.query
            .order_by(
                PlayerStats.score.desc(),
                PlayerStats.wins.desc(),
                PlayerStats.draws.desc(),
                PlayerStats.losses.asc(),
                PlayerStats.name.asc(),
            )
            .limit(limit)
            .all()
        )
        return [row.to_dict() for row in rows]
