"""
Partner repositories.

Data access layer for Partner and PartnerTransaction models.
Balances are always aggregated from transactions, never stored.
"""

from decimal import Decimal

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.enums import PartnerTransactionType
from app.models.partner import Partner
from app.models.partner_transaction import PartnerTransaction
from app.repositories.base import BaseRepository
from app.utils.money import quantize_money


class PartnerRepository(BaseRepository[Partner]):
    """Partner repository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize partner repository."""
        super().__init__(Partner, session)

    async def list_active(self, for_update: bool = False) -> list[Partner]:
        """
        Active partners ordered by ID.

        Args:
            for_update: Lock the rows in ID order (allocation)

        Returns:
            Active partners
        """
        stmt = select(Partner).where(Partner.is_active.is_(True)).order_by(Partner.id)
        if for_update:
            stmt = stmt.with_for_update().execution_options(populate_existing=True)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())


class PartnerTransactionRepository(BaseRepository[PartnerTransaction]):
    """Partner ledger repository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize partner transaction repository."""
        super().__init__(PartnerTransaction, session)

    async def list_for_partner(self, partner_id: int) -> list[PartnerTransaction]:
        """Ledger lines of a partner, newest first."""
        stmt = (
            select(PartnerTransaction)
            .where(PartnerTransaction.partner_id == partner_id)
            .order_by(
                PartnerTransaction.created_at.desc(), PartnerTransaction.id.desc()
            )
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def total_by_type(
        self,
        transaction_type: PartnerTransactionType,
        partner_id: int | None = None,
    ) -> Decimal:
        """
        Sum ledger lines of one type.

        Args:
            transaction_type: allocation or withdrawal
            partner_id: Restrict to one partner

        Returns:
            Total amount
        """
        stmt = select(func.sum(PartnerTransaction.amount)).where(
            PartnerTransaction.type == transaction_type.value
        )
        if partner_id is not None:
            stmt = stmt.where(PartnerTransaction.partner_id == partner_id)
        return await self._sum(stmt)

    async def totals_by_partner(self) -> dict[int, tuple[Decimal, Decimal]]:
        """
        Allocation and withdrawal totals of every partner with ledger lines.

        Returns:
            Mapping partner_id -> (allocated, withdrawn)
        """
        allocated = func.sum(
            case(
                (
                    PartnerTransaction.type == PartnerTransactionType.ALLOCATION.value,
                    PartnerTransaction.amount,
                ),
                else_=0,
            )
        )
        withdrawn = func.sum(
            case(
                (
                    PartnerTransaction.type == PartnerTransactionType.WITHDRAWAL.value,
                    PartnerTransaction.amount,
                ),
                else_=0,
            )
        )
        stmt = select(
            PartnerTransaction.partner_id, allocated, withdrawn
        ).group_by(PartnerTransaction.partner_id)
        result = await self.session.execute(stmt)

        return {
            partner_id: (
                quantize_money(Decimal(str(alloc or 0))),
                quantize_money(Decimal(str(withdr or 0))),
            )
            for partner_id, alloc, withdr in result.all()
        }
