import os
import socket
import time
from datetime import datetime, timezone

from flask import Blueprint, current_app, jsonify

main = Blueprint('main', __name__)


@main.route('/health')
def health():
    cfg = current_app.config
    return jsonify({
        'status': 'ok',
        'instanceId': cfg.get('INSTANCE_ID'),
        'uptime': time.time() - cfg.get('STARTED_TS', time.time()),
        'startedAt': cfg.get('STARTED_AT'),
        'timestamp': datetime.now(timezone.utc).isoformat(),
    }), 200


@main.route('/instance')
def instance():
    cfg = current_app.config
    return jsonify({
        'instanceId': cfg.get('INSTANCE_ID'),
        'startedAt': cfg.get('STARTED_AT'),
        'pid': os.getpid(),
        'hostname': os.environ.get('HOSTNAME') or socket.gethostname(),
    })
