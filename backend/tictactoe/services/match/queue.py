from collections import OrderedDict
from typing import Optional, Tuple

from .registry import Participant


class MatchmakingQueue:
    """Participants waiting for an opponent, oldest first."""

    def __init__(self):
        self._waiting: "OrderedDict[str, Participant]" = OrderedDict()

    def __len__(self) -> int:
        return len(self._waiting)

    def __contains__(self, participant_id) -> bool:
        return participant_id in self._waiting

    def enqueue(self, participant: Participant) -> None:
        # Re-enqueueing keeps the original position
        if participant.id not in self._waiting:
            self._waiting[participant.id] = participant

    def try_dequeue_pair(self) -> Optional[Tuple[Participant, Participant]]:
        if len(self._waiting) < 2:
            return None
        _, first = self._waiting.popitem(last=False)
        _, second = self._waiting.popitem(last=False)
        return first, second

    def remove(self, participant_id: str) -> None:
        self._waiting.pop(participant_id, None)
