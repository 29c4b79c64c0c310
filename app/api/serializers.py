"""
JSON serializers.

Money is rendered as 2-decimal strings and timestamps as ISO-8601 with
timezone.
"""

from typing import Any

from app.models.cash_reconciliation import CashReconciliation
from app.models.matrix_entry import MatrixEntry
from app.models.partner_transaction import PartnerTransaction
from app.models.payout_history import PayoutHistory
from app.models.payout_queue_entry import PayoutQueueEntry
from app.models.payout_reconciliation import PayoutReconciliation
from app.models.prize_payout import PrizePayout
from app.services.accounting import (
    CashPositionView,
    FinancialSummary,
    ReconciliationResult,
)
from app.services.matrix import PlacementResult
from app.services.partner import PartnerBalance
from app.services.payout import PayoutQueueStats
from app.utils.formatters import iso, money_str


def matrix_to_dict(entry: MatrixEntry) -> dict[str, Any]:
    """Matrix with its slot-state array."""
    return {
        "id": entry.id,
        "owner_id": entry.user_id,
        "campaign_id": entry.campaign_id,
        "slots": entry.slot_states(),
        "filled": entry.filled_count,
        "is_active": entry.is_active,
        "is_completed": entry.is_completed,
        "payout_amount": money_str(entry.payout_amount),
        "payout_status": entry.payout_status,
        "payout_sent_at": iso(entry.payout_sent_at),
        "created_at": iso(entry.created_at),
        "completed_at": iso(entry.completed_at),
    }


def placement_to_dict(result: PlacementResult) -> dict[str, Any]:
    return {
        "placed": result.placed,
        "matrix_id": result.matrix_id,
        "slot_index": result.slot_index,
        "was_auto_placed": result.was_auto_placed,
    }


def queue_entry_to_dict(entry: PayoutQueueEntry) -> dict[str, Any]:
    return {
        "id": entry.id,
        "user_id": entry.user_id,
        "amount": money_str(entry.amount),
        "reason": entry.reason,
        "reference_type": entry.reference_type,
        "reference_id": entry.reference_id,
        "payment_method": entry.payment_method,
        "payment_handle": entry.payment_handle,
        "status": entry.status,
        "queued_at": iso(entry.queued_at),
    }


def prize_to_dict(prize: PrizePayout) -> dict[str, Any]:
    return {
        "id": prize.id,
        "user_id": prize.user_id,
        "prize_label": prize.prize_label,
        "amount": money_str(prize.amount),
        "status": prize.status,
        "verified_at": iso(prize.verified_at),
        "paid_at": iso(prize.paid_at),
        "created_at": iso(prize.created_at),
    }


def history_to_dict(record: PayoutHistory) -> dict[str, Any]:
    return {
        "id": record.id,
        "queue_entry_id": record.queue_entry_id,
        "user_id": record.user_id,
        "amount": money_str(record.amount),
        "reason": record.reason,
        "reference_type": record.reference_type,
        "reference_id": record.reference_id,
        "payment_method": record.payment_method,
        "payment_handle": record.payment_handle,
        "confirmation_number": record.confirmation_number,
        "notes": record.notes,
        "queued_at": iso(record.queued_at),
        "paid_at": iso(record.paid_at),
        "paid_by": record.paid_by,
    }


def queue_stats_to_dict(stats: PayoutQueueStats) -> dict[str, Any]:
    return {
        "pending_count": stats.pending_count,
        "pending_amount": money_str(stats.pending_amount),
        "paid_today_count": stats.paid_today_count,
        "paid_today_amount": money_str(stats.paid_today_amount),
    }


def payout_reconciliation_to_dict(rec: PayoutReconciliation) -> dict[str, Any]:
    return {
        "id": rec.id,
        "period_label": rec.period_label,
        "period_start": iso(rec.period_start),
        "period_end": iso(rec.period_end),
        "payment_method": rec.payment_method,
        "system_total": money_str(rec.system_total),
        "verified_total": money_str(rec.verified_total),
        "discrepancy_amount": money_str(rec.discrepancy_amount),
        "status": rec.status,
        "resolution_notes": rec.resolution_notes,
        "resolved_at": iso(rec.resolved_at),
        "created_by": rec.created_by,
        "created_at": iso(rec.created_at),
    }


def partner_balance_to_dict(summary: PartnerBalance) -> dict[str, Any]:
    partner = summary.partner
    return {
        "id": partner.id,
        "name": partner.name,
        "percentage": str(partner.percentage),
        "is_active": partner.is_active,
        "is_owner": partner.is_owner,
        "total_allocated": money_str(summary.total_allocated),
        "total_withdrawn": money_str(summary.total_withdrawn),
        "balance": money_str(summary.balance),
    }


def partner_transaction_to_dict(tx: PartnerTransaction) -> dict[str, Any]:
    return {
        "id": tx.id,
        "partner_id": tx.partner_id,
        "type": tx.type,
        "amount": money_str(tx.amount),
        "description": tx.description,
        "payment_method": tx.payment_method,
        "payment_handle": tx.payment_handle,
        "confirmation_number": tx.confirmation_number,
        "created_at": iso(tx.created_at),
    }


def summary_to_dict(summary: FinancialSummary) -> dict[str, Any]:
    return {
        "gross_revenue": money_str(summary.gross_revenue),
        "paid_campaigns": summary.paid_campaigns,
        "processing_fees": money_str(summary.processing_fees),
        "net_revenue": money_str(summary.net_revenue),
        "total_expenses": money_str(summary.total_expenses),
        "matrix_payouts_sent": money_str(summary.matrix_payouts_sent),
        "total_payouts_sent": money_str(summary.total_payouts_sent),
        "pending_payouts": money_str(summary.pending_payouts),
        "owner_retained_percentage": str(summary.owner_retained_percentage),
        "already_allocated": money_str(summary.already_allocated),
        "available_profit": money_str(summary.available_profit),
    }


def cash_position_to_dict(view: CashPositionView) -> dict[str, Any]:
    return {
        "starting_balance": money_str(view.starting_balance),
        "income": money_str(view.income),
        "expenses": money_str(view.expenses),
        "payouts_sent": money_str(view.payouts_sent),
        "calculated_balance": money_str(view.calculated_balance),
        "actual_balance": money_str(view.actual_balance),
        "difference": money_str(view.difference),
        "last_verified_at": iso(view.last_verified_at),
    }


def cash_reconciliation_result_to_dict(result: ReconciliationResult) -> dict[str, Any]:
    return {
        "calculated_balance": money_str(result.calculated_balance),
        "observed_balance": money_str(result.observed_balance),
        "difference": money_str(result.difference),
        "new_starting_balance": money_str(result.new_starting_balance),
        "reconciled_at": iso(result.reconciled_at),
    }


def cash_reconciliation_to_dict(rec: CashReconciliation) -> dict[str, Any]:
    return {
        "id": rec.id,
        "calculated_balance": money_str(rec.calculated_balance),
        "observed_balance": money_str(rec.observed_balance),
        "difference": money_str(rec.difference),
        "previous_starting_balance": money_str(rec.previous_starting_balance),
        "new_starting_balance": money_str(rec.new_starting_balance),
        "reconciled_by": rec.reconciled_by,
        "reconciled_at": iso(rec.reconciled_at),
    }
