"""Match services: board rules, matchmaking and live sessions.

Transport-free: Socket.IO handlers and tests drive these through the
SessionCoordinator, and outbound events leave through a BroadcastGateway.
"""

from .coordinator import SessionCoordinator
from .gateway import BroadcastGateway, EventTransport, SocketIOTransport
from .queue import MatchmakingQueue
from .registry import Match, Participant, SessionRegistry

__all__ = [
    'BroadcastGateway',
    'EventTransport',
    'Match',
    'MatchmakingQueue',
    'Participant',
    'SessionCoordinator',
    'SessionRegistry',
    'SocketIOTransport',
]
