"""
Enumerations shared by models and services.
"""

from enum import Enum


class PayoutStatus(str, Enum):
    """Payout status of a completed matrix."""

    PENDING = "pending"
    PAID = "paid"


class PayoutReferenceType(str, Enum):
    """Origin of a payout queue entry."""

    MATRIX = "matrix"
    WEEKLY_PRIZE = "weekly_prize"
    GAME = "game"


class PrizePayoutStatus(str, Enum):
    """Weekly prize win lifecycle."""

    PENDING = "pending"
    VERIFIED = "verified"
    PAID = "paid"


class PartnerTransactionType(str, Enum):
    """Partner ledger line type."""

    ALLOCATION = "allocation"
    WITHDRAWAL = "withdrawal"


class ReconciliationStatus(str, Enum):
    """Payout period reconciliation status."""

    MATCHED = "matched"
    DISCREPANCY = "discrepancy"
    RESOLVED = "resolved"


class NotificationType(str, Enum):
    """In-app notification types."""

    MATRIX_DIRECT_REFERRAL = "matrix_direct_referral"
    MATRIX_GROWTH = "matrix_growth"
    MATRIX_COMPLETE = "matrix_complete"
    PAYOUT_SENT = "payout_sent"
