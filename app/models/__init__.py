"""
Database models.

Exports all SQLAlchemy models for easy imports.
"""

from app.models.ad_campaign import AdCampaign
from app.models.admin_audit_log import AdminAuditLog
from app.models.app_setting import AppSetting
from app.models.base import Base
from app.models.cash_position import CashPosition
from app.models.cash_reconciliation import CashReconciliation
from app.models.enums import (
    NotificationType,
    PartnerTransactionType,
    PayoutReferenceType,
    PayoutStatus,
    PrizePayoutStatus,
    ReconciliationStatus,
)
from app.models.expense import Expense
from app.models.finance_allocation import FinanceAllocation

# Matrix
from app.models.matrix_entry import MatrixEntry
from app.models.matrix_slot import MatrixSlot
from app.models.notification import Notification

# Partners
from app.models.partner import Partner
from app.models.partner_transaction import PartnerTransaction

# Payouts
from app.models.payout_history import PayoutHistory
from app.models.payout_queue_entry import PayoutQueueEntry
from app.models.payout_reconciliation import PayoutReconciliation
from app.models.prize_payout import PrizePayout
from app.models.user import User


__all__ = [
    "AdCampaign",
    "AdminAuditLog",
    "AppSetting",
    "Base",
    "CashPosition",
    "CashReconciliation",
    "Expense",
    "FinanceAllocation",
    "MatrixEntry",
    "MatrixSlot",
    "Notification",
    "NotificationType",
    "Partner",
    "PartnerTransaction",
    "PartnerTransactionType",
    "PayoutHistory",
    "PayoutQueueEntry",
    "PayoutReconciliation",
    "PayoutReferenceType",
    "PayoutStatus",
    "PrizePayout",
    "PrizePayoutStatus",
    "ReconciliationStatus",
    "User",
]
