"""
Finance repositories.

Revenue, expense and set-aside allocation totals used by the profit
calculator and cash reconciliation.
"""

from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.ad_campaign import AdCampaign
from app.models.expense import Expense
from app.models.finance_allocation import FinanceAllocation
from app.repositories.base import BaseRepository


class CampaignRepository(BaseRepository[AdCampaign]):
    """Ad campaign repository (revenue side)."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize campaign repository."""
        super().__init__(AdCampaign, session)

    async def revenue_totals(self) -> tuple[Decimal, int]:
        """
        Gross revenue and number of paid campaigns.

        Returns:
            Tuple of (gross_revenue, paid_campaign_count)
        """
        gross = await self._sum(select(func.sum(AdCampaign.amount_paid)))
        count_stmt = select(func.count()).select_from(AdCampaign).where(
            AdCampaign.amount_paid > 0
        )
        result = await self.session.execute(count_stmt)
        return gross, result.scalar() or 0


class ExpenseRepository(BaseRepository[Expense]):
    """Expense repository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize expense repository."""
        super().__init__(Expense, session)

    async def total(self) -> Decimal:
        """Sum of all expenses."""
        return await self._sum(select(func.sum(Expense.amount)))


class FinanceAllocationRepository(BaseRepository[FinanceAllocation]):
    """Set-aside allocation repository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize finance allocation repository."""
        super().__init__(FinanceAllocation, session)

    async def manual_percentage_total(self) -> Decimal:
        """
        Sum of percentages of allocations that are not auto-calculated.

        Returns:
            Percentage total (e.g. Decimal("25.00"))
        """
        result = await self.session.execute(
            select(func.sum(FinanceAllocation.percentage)).where(
                FinanceAllocation.is_auto_calculated.is_(False)
            )
        )
        value = result.scalar()
        return Decimal(str(value)) if value is not None else Decimal("0")
