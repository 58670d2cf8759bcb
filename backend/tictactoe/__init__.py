import logging
import time
from datetime import datetime, timezone

from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import click
from config import Config

db = SQLAlchemy()
migrate = Migrate()
socketio = SocketIO(async_mode=None)


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    logging.basicConfig(
        level=flask_app.config.get('LOG_LEVEL', 'INFO'),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    flask_app.config['STARTED_AT'] = datetime.now(timezone.utc).isoformat()
    flask_app.config['STARTED_TS'] = time.time()

    origins = flask_app.config.get('CORS_ORIGINS', '*')
    if origins != '*':
        origins = [o.strip() for o in origins.split(',') if o.strip()]
    db.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, origins=origins)
    socketio.init_app(flask_app, cors_allowed_origins=origins)

    from tictactoe.main import main
    flask_app.register_blueprint(main, url_prefix='/api')

    from tictactoe.api.players import players
    flask_app.register_blueprint(players, url_prefix='/api')

    # One coordinator per app; handlers get it by reference
    from tictactoe.services.match import BroadcastGateway, SessionCoordinator, SocketIOTransport
    from tictactoe.services.stats import PlayerStatsStore, ResultRecorder
    from tictactoe.socketio_events import register_socketio_handlers

    name_max_length = int(flask_app.config.get('NAME_MAX_LENGTH', 64))
    namespace = flask_app.config.get('SOCKETIO_NAMESPACE', '/')
    store = PlayerStatsStore(name_max_length=name_max_length)
    coordinator = SessionCoordinator(
        gateway=BroadcastGateway(SocketIOTransport(socketio, namespace=namespace)),
        recorder=ResultRecorder(flask_app, store),
        profiles=store,
        name_max_length=name_max_length,
    )
    flask_app.extensions['player_stats'] = store
    flask_app.extensions['session_coordinator'] = coordinator
    register_socketio_handlers(coordinator, namespace=namespace)

    @click.command('init-db')
    def init_db_command():
        """Creates the database tables."""
        import tictactoe.models  # noqa: F401
        with flask_app.app_context():
            db.create_all()
            print('Database tables created!')

    flask_app.cli.add_command(init_db_command)

    flask_app.logger.info(
        f"[boot] instance={flask_app.config.get('INSTANCE_ID')} started at {flask_app.config['STARTED_AT']}"
    )
    return flask_app
