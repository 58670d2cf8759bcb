import logging
from typing import Any, Dict, Optional, Protocol

from .registry import Match

logger = logging.getLogger(__name__)


class EventTransport(Protocol):
    """Anything that can send a named event to a connection by its id."""

    def send(self, connection_id: str, event: str, payload: Dict[str, Any]) -> None:
        ...


class SocketIOTransport:
    def __init__(self, socketio, namespace: str = '/'):
        self.socketio = socketio
        self.namespace = namespace

    def send(self, connection_id: str, event: str, payload: Dict[str, Any]) -> None:
        # Every Socket.IO client sits in a room named after its sid
        self.socketio.emit(event, payload, to=connection_id, namespace=self.namespace)


class BroadcastGateway:
    def __init__(self, transport: EventTransport):
        self.transport = transport

    def send(self, connection_id: str, event: str, payload: Optional[Dict[str, Any]] = None) -> bool:
        try:
            self.transport.send(connection_id, event, payload if payload is not None else {})
            return True
        except Exception as e:
            logger.warning("send %s to %s failed: %s", event, connection_id, e)
            return False

    def send_error(self, connection_id: str, message: str) -> bool:
        return self.send(connection_id, 'error', {'message': message})

    def send_to_match(self, match: Match, event: str, payload: Dict[str, Any]) -> None:
        for pid in match.participant_ids():
            self.send(pid, event, payload)
