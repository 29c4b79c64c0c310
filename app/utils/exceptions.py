"""
Exception handling utilities.

Defines the domain exception hierarchy and categorized exception types
for proper error handling.
"""

import asyncio

from aiohttp import ClientError


class MatrixLedgerError(Exception):
    """Base class for all domain errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(MatrixLedgerError):
    """Input rejected before any write (bad percentages, amount, handle)."""


class NotFoundError(MatrixLedgerError):
    """Referenced entity does not exist."""


class ReferrerNotFoundError(NotFoundError):
    """Referrer handle does not resolve or has no open matrix."""


class EntityNotFoundError(NotFoundError):
    """Entity requested by id does not exist."""


class ConcurrencyConflictError(MatrixLedgerError):
    """Row changed under us; caller should move to the next candidate."""


class SideEffectFailure(MatrixLedgerError):
    """Notification or email delivery failed."""


class InvariantViolationError(MatrixLedgerError):
    """Operation would break a ledger invariant; nothing was written."""


class ParticipantAlreadyPlacedError(InvariantViolationError):
    """Participant already occupies a matrix slot."""


class PayoutAlreadySettledError(InvariantViolationError):
    """Queue entry was already settled into payout history."""


class MatrixNotFoundError(InvariantViolationError):
    """Matrix does not exist."""


# Exception categories based on handling strategy

# Safe to ignore - side effects that fail gracefully
SAFE_TO_IGNORE = (
    SideEffectFailure,
    ClientError,             # Email API transport errors
    asyncio.TimeoutError,    # Email API timeouts
)


def is_safe_to_ignore(exc: Exception) -> bool:
    """
    Check if exception can be safely ignored.

    Args:
        exc: Exception to check

    Returns:
        True if exception is safe to ignore
    """
    return isinstance(exc, SAFE_TO_IGNORE)
