"""
Profit calculator.

Derives the P&L summary and the profit still available for partner
allocation.
"""

from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from app.config.business_constants import FULL_PERCENTAGE
from app.config.settings import Settings, settings as default_settings
from app.models.enums import PartnerTransactionType
from app.repositories.finance_repository import (
    CampaignRepository,
    ExpenseRepository,
    FinanceAllocationRepository,
)
from app.repositories.matrix_repository import MatrixRepository
from app.repositories.partner_repository import PartnerTransactionRepository
from app.repositories.payout_repository import (
    PayoutHistoryRepository,
    PayoutQueueRepository,
)
from app.utils.money import quantize_money


@dataclass
class FinancialSummary:
    """P&L numbers behind the finance dashboard."""

    gross_revenue: Decimal
    paid_campaigns: int
    processing_fees: Decimal
    net_revenue: Decimal
    total_expenses: Decimal
    matrix_payouts_sent: Decimal
    total_payouts_sent: Decimal
    pending_payouts: Decimal
    owner_retained_percentage: Decimal
    already_allocated: Decimal
    available_profit: Decimal


def calculate_processing_fees(
    gross_revenue: Decimal,
    paid_campaigns: int,
    fee_percent: Decimal,
    fee_fixed: Decimal,
) -> Decimal:
    """
    Payment processor fees.

    Args:
        gross_revenue: Sum of campaign payments
        paid_campaigns: Number of paid campaigns
        fee_percent: Percentage fee (2.9 means 2.9%)
        fee_fixed: Fixed fee per campaign

    Returns:
        gross * fee_percent / 100 + campaigns * fee_fixed, in cents
    """
    return quantize_money(
        gross_revenue * fee_percent / FULL_PERCENTAGE + fee_fixed * paid_campaigns
    )


def calculate_available_profit(
    net_revenue: Decimal,
    total_expenses: Decimal,
    matrix_payouts_sent: Decimal,
    owner_retained_percentage: Decimal,
    already_allocated: Decimal,
) -> Decimal:
    """
    Profit that can still be allocated to partners.

    max(0, (net - expenses - matrix payouts) * owner% / 100 - allocated)

    Returns:
        Available profit in cents, never negative
    """
    pool = (net_revenue - total_expenses - matrix_payouts_sent) * (
        owner_retained_percentage / FULL_PERCENTAGE
    )
    available = quantize_money(pool - already_allocated)
    return max(Decimal("0.00"), available)


class ProfitCalculator:
    """Builds the FinancialSummary from the ledgers."""

    def __init__(self, session: AsyncSession, settings: Settings | None = None) -> None:
        """
        Initialize profit calculator.

        Args:
            session: Database session
            settings: Settings with processing fee configuration
        """
        self.session = session
        self.settings = settings or default_settings
        self.campaign_repo = CampaignRepository(session)
        self.expense_repo = ExpenseRepository(session)
        self.allocation_repo = FinanceAllocationRepository(session)
        self.matrix_repo = MatrixRepository(session)
        self.history_repo = PayoutHistoryRepository(session)
        self.queue_repo = PayoutQueueRepository(session)
        self.partner_tx_repo = PartnerTransactionRepository(session)

    async def net_revenue(self) -> tuple[Decimal, int, Decimal, Decimal]:
        """
        Revenue after processing fees.

        Returns:
            Tuple of (gross_revenue, paid_campaigns, processing_fees, net_revenue)
        """
        gross, campaigns = await self.campaign_repo.revenue_totals()
        fees = calculate_processing_fees(
            gross,
            campaigns,
            self.settings.processing_fee_percent,
            self.settings.processing_fee_fixed,
        )
        return gross, campaigns, fees, gross - fees

    async def summary(self) -> FinancialSummary:
        """
        Compute the full summary.

        Returns:
            FinancialSummary
        """
        gross, campaigns, fees, net = await self.net_revenue()
        expenses = await self.expense_repo.total()
        matrix_paid = await self.matrix_repo.total_paid_bonuses()
        _, total_paid = await self.history_repo.totals_between()
        _, pending = await self.queue_repo.pending_totals()
        owner_pct = FULL_PERCENTAGE - await self.allocation_repo.manual_percentage_total()
        allocated = await self.partner_tx_repo.total_by_type(
            PartnerTransactionType.ALLOCATION
        )

        return FinancialSummary(
            gross_revenue=gross,
            paid_campaigns=campaigns,
            processing_fees=fees,
            net_revenue=net,
            total_expenses=expenses,
            matrix_payouts_sent=matrix_paid,
            total_payouts_sent=total_paid,
            pending_payouts=pending,
            owner_retained_percentage=owner_pct,
            already_allocated=allocated,
            available_profit=calculate_available_profit(
                net, expenses, matrix_paid, owner_pct, allocated
            ),
        )
