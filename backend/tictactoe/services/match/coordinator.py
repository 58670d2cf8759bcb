"""Matchmaking and match arbitration for connected players.

The coordinator is the single writer of the waiting queue and the match
registry. Every inbound event (connect, join, move, disconnect) runs to
completion under one lock, outbound events included, so no handler ever
sees another event's half-applied changes. Recording results in the
statistics store is handed to a recorder that runs detached and is never
waited on.
"""

import logging
import threading
from typing import Any, Dict, Optional, Set

from . import engine
from .gateway import BroadcastGateway
from .queue import MatchmakingQueue
from .registry import DECIDED, FORFEITED, Match, Participant, SessionRegistry

logger = logging.getLogger(__name__)

NOT_YOUR_TURN = 'not your turn'
INVALID_POSITION = 'invalid position'
CELL_OCCUPIED = 'cell occupied'
ALREADY_IN_MATCH = 'already in a match'


class SessionCoordinator:
    def __init__(
        self,
        gateway: BroadcastGateway,
        recorder,
        profiles=None,
        queue: Optional[MatchmakingQueue] = None,
        registry: Optional[SessionRegistry] = None,
        name_max_length: int = 64,
    ):
        self.gateway = gateway
        self.recorder = recorder
        self.profiles = profiles
        self.queue = queue if queue is not None else MatchmakingQueue()
        self.registry = registry if registry is not None else SessionRegistry()
        self.name_max_length = name_max_length
        self._connected: Set[str] = set()
        self._participants: Dict[str, Participant] = {}
        self._lock = threading.Lock()

    # ---- helpers ----

    def normalize_name(self, requested, participant_id: str) -> str:
        name = requested.strip()[:self.name_max_length] if isinstance(requested, str) else ''
        return name or participant_id[:self.name_max_length]

    def participant(self, participant_id: str) -> Optional[Participant]:
        return self._participants.get(participant_id)

    def _name_of(self, participant_id: str) -> str:
        p = self._participants.get(participant_id)
        return p.name if p else participant_id

    def _state_payload(self, match: Match) -> Dict[str, Any]:
        return {'gameId': match.id, 'board': list(match.board), 'turn': match.turn}

    def _load_profile(self, name: str) -> Optional[Dict[str, Any]]:
        if self.profiles is None:
            return None
        try:
            return self.profiles.ensure_player_stats(name)
        except Exception:
            logger.exception("Failed to load stats for %s", name)
            return None

    def _release(self, match: Match) -> None:
        for pid in match.participant_ids():
            p = self._participants.get(pid)
            if p and p.match_id == match.id:
                p.match_id = None
                p.mark = None

    # ---- inbound events ----

    def connect(self, participant_id: str) -> None:
        with self._lock:
            self._connected.add(participant_id)

    def _reject_join(self, participant_id: str) -> bool:
        # Caller holds the lock
        if participant_id not in self._connected:
            logger.info("join from closed connection %s ignored", participant_id)
            return True
        if self.registry.active_match_id(participant_id) is not None:
            self.gateway.send_error(participant_id, ALREADY_IN_MATCH)
            return True
        return False

    def join(self, participant_id: str, requested_name=None) -> Optional[Match]:
        """Queue the participant and start a match if an opponent is waiting.

        Returns the new Match when this join completed a pair.
        """
        name = self.normalize_name(requested_name, participant_id)
        with self._lock:
            if self._reject_join(participant_id):
                return None
        # Blocking store call stays outside the lock
        stats = self._load_profile(name)

        with self._lock:
            # State may have changed while the store was busy
            if self._reject_join(participant_id):
                return None

            participant = self._participants.get(participant_id)
            if participant is None:
                participant = Participant(id=participant_id, name=name)
                self._participants[participant_id] = participant
            else:
                participant.name = name

            self.gateway.send(participant_id, 'profile', {
                'name': participant.name,
                'exists': bool(stats),
                'stats': stats,
            })
            self.queue.enqueue(participant)
            self.gateway.send(participant_id, 'waiting', {})
            logger.info("join %s as %r (waiting=%d)", participant_id, participant.name, len(self.queue))

            pair = self.queue.try_dequeue_pair()
            if pair is None:
                return None
            match = self.registry.create_match(*pair)
            self._announce(match)
            return match

    def _announce(self, match: Match) -> None:
        x_id, o_id = match.participant_ids()
        self.gateway.send(x_id, 'matchStarted', {
            'gameId': match.id, 'youAre': engine.X, 'opponent': self._name_of(o_id),
        })
        self.gateway.send(o_id, 'matchStarted', {
            'gameId': match.id, 'youAre': engine.O, 'opponent': self._name_of(x_id),
        })
        self.gateway.send_to_match(match, 'state', self._state_payload(match))
        logger.info("match %s started: X=%s O=%s turn=%s", match.id, x_id, o_id, match.turn)

    def move(self, participant_id: str, match_id, index) -> bool:
        """Apply a move. Returns True only when the board changed."""
        with self._lock:
            if not isinstance(match_id, str):
                return False
            match = self.registry.lookup_by_id(match_id)
            if match is None or match.finished:
                # Late message for a match that already ended
                return False
            mark = match.mark_of(participant_id)
            if mark is None or self.registry.active_match_id(participant_id) != match_id:
                return False

            if match.turn != mark:
                self.gateway.send_error(participant_id, NOT_YOUR_TURN)
                return False
            if not engine.is_cell_index(index):
                self.gateway.send_error(participant_id, INVALID_POSITION)
                return False
            if match.board[index] != engine.EMPTY:
                self.gateway.send_error(participant_id, CELL_OCCUPIED)
                return False

            match.board = engine.apply_move(match.board, index, mark)
            match.turn = engine.other_mark(mark)
            self.gateway.send_to_match(match, 'state', self._state_payload(match))

            result = engine.evaluate(match.board)
            if result is not None:
                self._finish_decided(match, result)
            return True

    def _finish_decided(self, match: Match, result: str) -> None:
        if not self.registry.finish(match.id, DECIDED):
            return
        self.gateway.send_to_match(match, 'gameOver', {'gameId': match.id, 'result': result})
        name_x = self._name_of(match.players[engine.X])
        name_o = self._name_of(match.players[engine.O])
        if result == engine.DRAW:
            self.recorder.record_draw(name_x, name_o)
        elif result == engine.X:
            self.recorder.record_win(name_x, name_o)
        else:
            self.recorder.record_win(name_o, name_x)
        self._release(match)
        logger.info("match %s decided: %s", match.id, result)

    def disconnect(self, participant_id: str) -> None:
        with self._lock:
            self._connected.discard(participant_id)
            self.queue.remove(participant_id)

            match = self.registry.lookup_by_participant(participant_id)
            if match is not None and self.registry.finish(match.id, FORFEITED):
                winner_mark = engine.other_mark(match.mark_of(participant_id))
                winner_id = match.players[winner_mark]
                self.gateway.send(winner_id, 'gameOver', {'gameId': match.id, 'result': winner_mark})
                self.recorder.record_win(self._name_of(winner_id), self._name_of(participant_id))
                self._release(match)
                logger.info("match %s forfeited by %s, %s wins", match.id, participant_id, winner_mark)

            self._participants.pop(participant_id, None)
