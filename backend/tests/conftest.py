import os
import random
import sys
import pytest

# Ensure the backend root (containing the `tictactoe` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from tictactoe import create_app, db, socketio
from tictactoe.services.match import BroadcastGateway, SessionCoordinator, SessionRegistry


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    INSTANCE_ID = 'TEST'
    NAME_MAX_LENGTH = 64
    LEADERBOARD_LIMIT = 10
    SOCKETIO_NAMESPACE = '/'
    CORS_ORIGINS = '*'
    LOG_LEVEL = 'DEBUG'


class RecordingTransport:
    """Collects outbound events instead of sending them."""

    def __init__(self):
        self.sent = []

    def send(self, connection_id, event, payload):
        self.sent.append((connection_id, event, payload))

    def events_for(self, connection_id, event=None):
        return [
            payload for cid, name, payload in self.sent
            if cid == connection_id and (event is None or name == event)
        ]

    def clear(self):
        self.sent.clear()


class FakeRecorder:
    def __init__(self):
        self.wins = []
        self.draws = []

    def record_win(self, winner, loser):
        self.wins.append((winner, loser))

    def record_draw(self, name_a, name_b):
        self.draws.append((name_a, name_b))


@pytest.fixture()
def transport():
    return RecordingTransport()


@pytest.fixture()
def recorder():
    return FakeRecorder()


@pytest.fixture()
def coordinator(transport, recorder):
    return SessionCoordinator(
        gateway=BroadcastGateway(transport),
        recorder=recorder,
        registry=SessionRegistry(rng=random.Random(7)),
    )


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        # Ensure models are imported so tables are created
        import tictactoe.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_factory(flask_app):
    clients = []

    def _connect():
        test_client = socketio.test_client(
            flask_app,
            flask_test_client=flask_app.test_client(),
        )
        clients.append(test_client)
        return test_client

    yield _connect
    for test_client in clients:
        try:
            if test_client.is_connected():
                test_client.disconnect()
        except Exception:
            pass


@pytest.fixture()
def make_app():
    return lambda: create_app(TestConfig)
