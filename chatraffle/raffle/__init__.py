"""
Raffle layer: participant registry, per-operator sessions and their manager
"""

from .registry import ParticipantRegistry, Added, Rejected
from .session import RaffleSession, SessionState
from .manager import SessionManager

__all__ = [
    "ParticipantRegistry",
    "Added",
    "Rejected",
    "RaffleSession",
    "SessionState",
    "SessionManager",
]
