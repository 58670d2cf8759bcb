import random
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .engine import X, O, empty_board, other_mark

IN_PROGRESS = 'in_progress'
FINISHED = 'finished'

# Why a match finished
DECIDED = 'decided'
FORFEITED = 'forfeited'

# X always moves first; the coin flip decides who gets it
FIRST_MARK = X


@dataclass
class Participant:
    id: str
    name: str
    mark: Optional[str] = None
    match_id: Optional[str] = None


@dataclass
class Match:
    id: str
    players: Dict[str, str]  # mark -> participant id
    turn: str = FIRST_MARK
    board: List[str] = field(default_factory=empty_board)
    status: str = IN_PROGRESS
    finish_cause: Optional[str] = None

    @property
    def finished(self) -> bool:
        return self.status == FINISHED

    def mark_of(self, participant_id: str) -> Optional[str]:
        for mark, pid in self.players.items():
            if pid == participant_id:
                return mark
        return None

    def participant_ids(self) -> List[str]:
        return [self.players[X], self.players[O]]


class SessionRegistry:
    """Live matches by id plus each participant's active match id.

    Matches and participants only refer to each other by id; the registry
    is where a match id resolves back to its Match.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self._rng = rng or random.Random()
        self._matches: Dict[str, Match] = {}
        self._active: Dict[str, str] = {}  # participant id -> match id

    def __len__(self) -> int:
        return len(self._matches)

    def _new_match_id(self, a: Participant, b: Participant) -> str:
        base = f"g_{a.id[:5]}_{b.id[:5]}"
        match_id = base
        n = 2
        while match_id in self._matches:
            match_id = f"{base}_{n}"
            n += 1
        return match_id

    def create_match(self, a: Participant, b: Participant) -> Match:
        if self._rng.random() < 0.5:
            first, second = a, b
        else:
            first, second = b, a
        first.mark = FIRST_MARK
        second.mark = other_mark(FIRST_MARK)

        match = Match(
            id=self._new_match_id(a, b),
            players={first.mark: first.id, second.mark: second.id},
            turn=FIRST_MARK,
        )
        self._matches[match.id] = match
        for p in (a, b):
            p.match_id = match.id
            self._active[p.id] = match.id
        return match

    def lookup_by_id(self, match_id: str) -> Optional[Match]:
        return self._matches.get(match_id)

    def lookup_by_participant(self, participant_id: str) -> Optional[Match]:
        match_id = self._active.get(participant_id)
        if match_id is None:
            return None
        return self._matches.get(match_id)

    def active_match_id(self, participant_id: str) -> Optional[str]:
        return self._active.get(participant_id)

    def finish(self, match_id: str, cause: str = DECIDED) -> bool:
        """Mark the match finished and drop it from the registry.

        Returns False when the match is unknown or already finished, so
        callers can tell whether they performed the terminal transition.
        """
        match = self._matches.get(match_id)
        if match is None or match.finished:
            return False
        match.status = FINISHED
        match.finish_cause = cause
        del self._matches[match_id]
        for pid in match.participant_ids():
            if self._active.get(pid) == match_id:
                del self._active[pid]
        return True
