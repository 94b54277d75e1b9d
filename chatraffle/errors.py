"""
Error taxonomy for the raffle service.

Everything raised by a live source is caught at the session boundary and
turned into an operator notification; these types only travel inside the
process.
"""

from enum import Enum


class RaffleError(Exception):
    """Base class for raffle service errors."""


class ConnectionFailure(RaffleError):
    """The live source could not be reached, is not live, or does not exist."""


class TransportDrop(RaffleError):
    """An established live connection was dropped mid-session."""


class EmptyRegistryError(RaffleError):
    """A winner was requested while nobody has entered yet."""


class RejectionReason(str, Enum):
    """Why a chat entry was not added. Expected outcomes, not errors."""

    DUPLICATE_USER = "duplicate_user"
