"""
Cash reconciliation.

calculated balance = starting balance + net campaign income
                     - expenses - payouts sent

Reconciling against an observed bank balance folds the difference into
the starting balance, so the calculated balance equals the observed one
right afterwards. Every reconciliation is also appended to
cash_reconciliations.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from app.config.settings import Settings
from app.models.cash_position import CashPosition
from app.models.cash_reconciliation import CashReconciliation
from app.repositories.audit_log_repository import AdminAuditLogRepository
from app.repositories.cash_repository import (
    CashPositionRepository,
    CashReconciliationRepository,
)
from app.repositories.finance_repository import ExpenseRepository
from app.repositories.payout_repository import PayoutHistoryRepository
from app.services.accounting.profit_calculator import ProfitCalculator
from app.services.base_service import BaseService, transaction
from app.utils.datetime_utils import utc_now
from app.utils.money import quantize_money


@dataclass
class CashPositionView:
    """Calculated vs. actual cash balance."""

    starting_balance: Decimal
    income: Decimal
    expenses: Decimal
    payouts_sent: Decimal
    calculated_balance: Decimal
    actual_balance: Decimal | None
    last_verified_at: datetime | None

    @property
    def difference(self) -> Decimal | None:
        """Actual minus calculated, when an actual balance was recorded."""
        if self.actual_balance is None:
            return None
        return self.actual_balance - self.calculated_balance


@dataclass
class ReconciliationResult:
    """Result of reconcile()."""

    difference: Decimal
    new_starting_balance: Decimal
    calculated_balance: Decimal
    observed_balance: Decimal
    reconciled_at: datetime


class CashReconciliationService(BaseService):
    """Cash position and reconciliation."""

    def __init__(
        self,
        session: AsyncSession,
        publisher=None,
        settings: Settings | None = None,
    ) -> None:
        """
        Initialize cash reconciliation service.

        Args:
            session: Database session
            publisher: Event publisher
            settings: Settings with processing fee configuration
        """
        super().__init__(session, publisher)
        self.position_repo = CashPositionRepository(session)
        self.reconciliation_repo = CashReconciliationRepository(session)
        self.expense_repo = ExpenseRepository(session)
        self.history_repo = PayoutHistoryRepository(session)
        self.audit_repo = AdminAuditLogRepository(session)
        self.profit_calculator = ProfitCalculator(session, settings)

    async def _build_view(self, position: CashPosition | None) -> CashPositionView:
        _, _, _, income = await self.profit_calculator.net_revenue()
        expenses = await self.expense_repo.total()
        _, payouts = await self.history_repo.totals_between()
        if position is None:
            starting, actual, verified_at = Decimal("0.00"), None, None
        else:
            starting = quantize_money(position.starting_balance)
            actual = (
                quantize_money(position.actual_balance)
                if position.actual_balance is not None
                else None
            )
            verified_at = position.last_verified_at

        return CashPositionView(
            starting_balance=starting,
            income=income,
            expenses=expenses,
            payouts_sent=payouts,
            calculated_balance=starting + income - expenses - payouts,
            actual_balance=actual,
            last_verified_at=verified_at,
        )

    async def get_position(self) -> CashPositionView:
        """
        Current calculated and actual balance.

        Read only. A fresh database reports a zero starting balance.

        Returns:
            CashPositionView
        """
        position = await self.position_repo.get_current()
        return await self._build_view(position)

    async def calculated_balance(self) -> Decimal:
        """Derived cash balance."""
        return (await self.get_position()).calculated_balance

    @transaction
    async def reconcile(
        self,
        observed_balance: Decimal,
        reconciled_by: str | None = None,
    ) -> ReconciliationResult:
        """
        Reconcile against an observed bank balance.

        A zero difference only records the verification timestamp.

        Args:
            observed_balance: Balance read from the bank
            reconciled_by: Operator handle

        Returns:
            ReconciliationResult
        """
        observed = quantize_money(observed_balance)
        position = await self.position_repo.get_or_create(for_update=True)
        view = await self._build_view(position)

        previous_starting = view.starting_balance
        difference = observed - view.calculated_balance
        new_starting = previous_starting + difference
        reconciled_at = utc_now()

        if difference != 0:
            position.starting_balance = new_starting
        position.actual_balance = observed
        position.last_verified_at = reconciled_at
        await self.session.flush()

        log_entry = CashReconciliation(
            calculated_balance=view.calculated_balance,
            observed_balance=observed,
            difference=difference,
            previous_starting_balance=previous_starting,
            new_starting_balance=new_starting,
            reconciled_by=reconciled_by,
            reconciled_at=reconciled_at,
        )
        self.session.add(log_entry)
        await self.session.flush()

        await self.audit_repo.record(
            action="cash_reconciled",
            table_name="cash_position",
            record_id=position.id,
            new_value={
                "observed_balance": observed,
                "difference": difference,
                "new_starting_balance": new_starting,
            },
            actor=reconciled_by,
        )

        self.logger.info(
            "Cash reconciled",
            extra={
                "calculated_balance": str(view.calculated_balance),
                "observed_balance": str(observed),
                "difference": str(difference),
            },
        )

        return ReconciliationResult(
            difference=difference,
            new_starting_balance=new_starting,
            calculated_balance=view.calculated_balance,
            observed_balance=observed,
            reconciled_at=reconciled_at,
        )

    async def list_reconciliations(self, limit: int = 100) -> list[CashReconciliation]:
        """Reconciliation log, newest first."""
        return await self.reconciliation_repo.list_recent(limit)
