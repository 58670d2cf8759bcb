from flask import current_app, request
from flask_socketio import emit

from tictactoe import socketio


def _get_sid() -> str:
    # request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def register_socketio_handlers(coordinator, namespace: str = '/') -> None:
    """Bind Socket.IO events to ``coordinator``.

    Payloads come straight from clients, so anything that is not a dict
    is treated as empty instead of raising inside the handler.
    """

    def handle_connect(auth=None):
        coordinator.connect(_get_sid())
        emit('instance', {'instanceId': current_app.config.get('INSTANCE_ID')})

    def handle_disconnect(reason=None):
        coordinator.disconnect(_get_sid())

    def handle_join(data=None):
        payload = data if isinstance(data, dict) else {}
        coordinator.join(_get_sid(), payload.get('name'))

    def handle_move(data=None):
        if not isinstance(data, dict):
            return
        coordinator.move(_get_sid(), data.get('gameId'), data.get('index'))

    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event('join', handle_join, namespace=namespace)
    socketio.on_event('move', handle_move, namespace=namespace)
