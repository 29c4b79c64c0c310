"""
Cash repositories.

Data access layer for the single CashPosition row and the
CashReconciliation log.
"""

from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.cash_position import CashPosition
from app.models.cash_reconciliation import CashReconciliation
from app.repositories.base import BaseRepository


class CashPositionRepository(BaseRepository[CashPosition]):
    """Cash position repository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize cash position repository."""
        super().__init__(CashPosition, session)

    async def get_current(self, for_update: bool = False) -> CashPosition | None:
        """
        Get the cash position row without creating it.

        Args:
            for_update: Lock the row (reconciliation)

        Returns:
            Cash position or None on a fresh database
        """
        stmt = select(CashPosition).order_by(CashPosition.id).limit(1)
        if for_update:
            stmt = stmt.with_for_update()
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_or_create(self, for_update: bool = False) -> CashPosition:
        """
        Get the cash position row, creating it with a zero baseline.

        Args:
            for_update: Lock the row (reconciliation)

        Returns:
            Cash position
        """
        position = await self.get_current(for_update=for_update)
        if position is None:
            position = await self.create(starting_balance=Decimal("0.00"))
        return position


class CashReconciliationRepository(BaseRepository[CashReconciliation]):
    """Cash reconciliation log repository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize cash reconciliation repository."""
        super().__init__(CashReconciliation, session)

    async def list_recent(self, limit: int) -> list[CashReconciliation]:
        """Reconciliations, newest first."""
        stmt = (
            select(CashReconciliation)
            .order_by(
                CashReconciliation.reconciled_at.desc(),
                CashReconciliation.id.desc(),
            )
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
