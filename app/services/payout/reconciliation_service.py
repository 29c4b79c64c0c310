"""
Payout period reconciliation.

Compares what the system recorded as paid in a period with the total
the operator verified at the payment provider.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from app.config.business_constants import RECONCILIATION_MATCH_TOLERANCE
from app.config.operational_constants import RECONCILIATION_LIST_LIMIT
from app.models.enums import ReconciliationStatus
from app.models.payout_reconciliation import PayoutReconciliation
from app.repositories.audit_log_repository import AdminAuditLogRepository
from app.repositories.payout_repository import (
    PayoutHistoryRepository,
    PayoutReconciliationRepository,
)
from app.services.base_service import BaseService, transaction
from app.utils.datetime_utils import utc_now
from app.utils.exceptions import (
    EntityNotFoundError,
    InvariantViolationError,
    ValidationError,
)
from app.utils.money import quantize_money


class PayoutReconciliationService(BaseService):
    """Payout period reconciliation operations."""

    def __init__(self, session: AsyncSession, publisher=None) -> None:
        """
        Initialize payout reconciliation service.

        Args:
            session: Database session
            publisher: Event publisher
        """
        super().__init__(session, publisher)
        self.history_repo = PayoutHistoryRepository(session)
        self.reconciliation_repo = PayoutReconciliationRepository(session)
        self.audit_repo = AdminAuditLogRepository(session)

    @transaction
    async def create_reconciliation(
        self,
        period_label: str,
        period_start: datetime,
        period_end: datetime,
        verified_total: Decimal,
        payment_method: str | None = None,
        created_by: str | None = None,
    ) -> PayoutReconciliation:
        """
        Record a period reconciliation.

        Status is matched when |verified - system| < 0.01, otherwise
        discrepancy.

        Args:
            period_label: Label such as "Week 42"
            period_start: Inclusive period start
            period_end: Exclusive period end
            verified_total: Total confirmed at the payment provider
            payment_method: Restrict to one payment method
            created_by: Operator handle

        Returns:
            Created reconciliation

        Raises:
            ValidationError: Empty label or inverted period
        """
        if not period_label or not period_label.strip():
            raise ValidationError("Period label is required")
        if period_end <= period_start:
            raise ValidationError("Period end must be after period start")

        _, system_total = await self.history_repo.totals_between(
            start=period_start, end=period_end, payment_method=payment_method
        )
        verified_total = quantize_money(verified_total)
        discrepancy = verified_total - system_total
        status = (
            ReconciliationStatus.MATCHED
            if abs(discrepancy) < RECONCILIATION_MATCH_TOLERANCE
            else ReconciliationStatus.DISCREPANCY
        )

        reconciliation = await self.reconciliation_repo.create(
            period_label=period_label.strip(),
            period_start=period_start,
            period_end=period_end,
            payment_method=payment_method,
            system_total=system_total,
            verified_total=verified_total,
            discrepancy_amount=discrepancy,
            status=status.value,
            created_by=created_by,
        )
        await self.audit_repo.record(
            action="payout_reconciliation_created",
            table_name="payout_reconciliations",
            record_id=reconciliation.id,
            new_value={
                "system_total": system_total,
                "verified_total": verified_total,
                "status": status.value,
            },
            actor=created_by,
        )

        self.logger.info(
            "Payout reconciliation recorded",
            extra={
                "reconciliation_id": reconciliation.id,
                "period": period_label,
                "system_total": str(system_total),
                "verified_total": str(verified_total),
                "status": status.value,
            },
        )
        return reconciliation

    @transaction
    async def resolve(
        self,
        reconciliation_id: int,
        resolution_notes: str,
        resolved_by: str | None = None,
    ) -> PayoutReconciliation:
        """
        Resolve a discrepancy with operator notes.

        Raises:
            ValidationError: Notes missing
            EntityNotFoundError: Reconciliation does not exist
            InvariantViolationError: Reconciliation is not a discrepancy
        """
        if not resolution_notes or not resolution_notes.strip():
            raise ValidationError("Resolution notes are required")

        reconciliation = await self.reconciliation_repo.get_for_update(
            reconciliation_id
        )
        if reconciliation is None:
            raise EntityNotFoundError(
                f"Reconciliation {reconciliation_id} not found"
            )
        if reconciliation.status != ReconciliationStatus.DISCREPANCY.value:
            raise InvariantViolationError(
                f"Reconciliation {reconciliation_id} is {reconciliation.status}, "
                f"only discrepancies can be resolved"
            )

        reconciliation.status = ReconciliationStatus.RESOLVED.value
        reconciliation.resolution_notes = resolution_notes.strip()
        reconciliation.resolved_at = utc_now()
        await self.session.flush()

        await self.audit_repo.record(
            action="payout_reconciliation_resolved",
            table_name="payout_reconciliations",
            record_id=reconciliation.id,
            new_value={"resolution_notes": reconciliation.resolution_notes},
            actor=resolved_by,
        )
        return reconciliation

    async def list_reconciliations(
        self, limit: int = RECONCILIATION_LIST_LIMIT
    ) -> list[PayoutReconciliation]:
        """Most recent reconciliations, newest first."""
        return await self.reconciliation_repo.list_recent(
            max(1, min(limit, RECONCILIATION_LIST_LIMIT))
        )
