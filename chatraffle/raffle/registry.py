"""
Participant Registry

In-memory, insertion-ordered pool of raffle entrants for one operator
session. Keys are the platform user id, or a synthesized per-entry key when
the same user may enter more than once.
"""

from __future__ import annotations

import itertools
import random
import time
from dataclasses import dataclass
from typing import Dict, List, Optional, Union

from chatraffle.errors import EmptyRegistryError, RejectionReason
from chatraffle.schemas.events import Participant


@dataclass(frozen=True)
class Added:
    participant: Participant
    count: int


@dataclass(frozen=True)
class Rejected:
    reason: RejectionReason


AddOutcome = Union[Added, Rejected]


class ParticipantRegistry:
    """Keyed collection of participants with dedup policy and random draw."""

    def __init__(self, rng: Optional[random.Random] = None):
        self._entries: Dict[str, Participant] = {}
        self._rng = rng or random.SystemRandom()
        self._sequence = itertools.count()

    def try_add(self, candidate: Participant, allow_duplicates: bool) -> AddOutcome:
        """
        Insert a participant under the configured duplicate policy.

        Args:
            candidate: Participant built from a qualifying chat message
            allow_duplicates: Whether one user may hold several entries

        Returns:
            Added with the stored participant and the new count, or
            Rejected(DUPLICATE_USER) with the registry left untouched
        """
        if allow_duplicates:
            key = self._synthesize_key(candidate.user_id)
        else:
            key = candidate.user_id
            if key in self._entries:
                return Rejected(RejectionReason.DUPLICATE_USER)

        self._entries[key] = candidate
        return Added(participant=candidate, count=len(self._entries))

    def _synthesize_key(self, user_id: str) -> str:
        # Arrival time alone can collide within a millisecond
        return f"{user_id}_{int(time.time() * 1000)}_{next(self._sequence)}"

    def clear(self) -> None:
        self._entries.clear()

    def size(self) -> int:
        return len(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, user_id: object) -> bool:
        return any(p.user_id == user_id for p in self._entries.values())

    def participants(self) -> List[Participant]:
        """Snapshot of current entries in insertion order."""
        return list(self._entries.values())

    def draw_winner(self) -> Participant:
        """
        Pick one entry uniformly at random without removing it.

        Raises:
            EmptyRegistryError: If nobody has entered yet
        """
        if not self._entries:
            raise EmptyRegistryError("no participants to draw from")
        return self._rng.choice(list(self._entries.values()))
