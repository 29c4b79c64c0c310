"""
Partner ledger.

Balance views. A balance is always sum(allocations) - sum(withdrawals),
recomputed from partner_transactions on every read.
"""

from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.enums import PartnerTransactionType
from app.models.partner import Partner
from app.repositories.partner_repository import (
    PartnerRepository,
    PartnerTransactionRepository,
)


@dataclass
class PartnerBalance:
    """Partner with derived ledger totals."""

    partner: Partner
    total_allocated: Decimal
    total_withdrawn: Decimal

    @property
    def balance(self) -> Decimal:
        """Allocated minus withdrawn."""
        return self.total_allocated - self.total_withdrawn


class PartnerLedger:
    """Read side of the partner ledger."""

    def __init__(self, session: AsyncSession) -> None:
        """
        Initialize partner ledger.

        Args:
            session: Database session
        """
        self.session = session
        self.partner_repo = PartnerRepository(session)
        self.transaction_repo = PartnerTransactionRepository(session)

    async def balance(self, partner_id: int) -> Decimal:
        """
        Current balance of a partner.

        Args:
            partner_id: Partner ID

        Returns:
            Allocated minus withdrawn
        """
        allocated = await self.transaction_repo.total_by_type(
            PartnerTransactionType.ALLOCATION, partner_id
        )
        withdrawn = await self.transaction_repo.total_by_type(
            PartnerTransactionType.WITHDRAWAL, partner_id
        )
        return allocated - withdrawn

    async def summaries(self) -> list[PartnerBalance]:
        """
        Balance summary of every partner, ordered by ID.

        Returns:
            List of PartnerBalance
        """
        partners = await self.partner_repo.find_all()
        totals = await self.transaction_repo.totals_by_partner()
        zero = Decimal("0.00")

        return [
            PartnerBalance(
                partner=partner,
                total_allocated=totals.get(partner.id, (zero, zero))[0],
                total_withdrawn=totals.get(partner.id, (zero, zero))[1],
            )
            for partner in partners
        ]
