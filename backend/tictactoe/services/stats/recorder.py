import logging

from tictactoe import db, socketio

logger = logging.getLogger(__name__)


class ResultRecorder:
    """Writes finished match results to the stats store off the game path.

    Each result runs as one detached background task inside its own app
    context. Every counter write in it commits or fails on its own, so a
    failed win does not lose the matching loss. Failures are logged and
    dropped: the match outcome has already been broadcast and nothing here
    may change it. In TESTING mode tasks run inline so results are visible
    as soon as the event handler returns.
    """

    def __init__(self, app, store):
        self.app = app
        self.store = store

    def record_win(self, winner: str, loser: str) -> None:
        self._dispatch(('add_win', winner), ('add_loss', loser))

    def record_draw(self, name_a: str, name_b: str) -> None:
        self._dispatch(('add_draw', name_a), ('add_draw', name_b))

    def _dispatch(self, *writes) -> None:
        if self.app.config.get('TESTING'):
            self._run(writes)
        else:
            socketio.start_background_task(self._run, writes)

    def _run(self, writes) -> None:
        with self.app.app_context():
            for method, name in writes:
                try:
                    getattr(self.store, method)(name)
                except Exception:
                    db.session.rollback()
                    logger.exception("Failed to persist result %s(%r)", method, name)
