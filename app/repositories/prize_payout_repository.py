"""
Prize payout repository.

Data access layer for PrizePayout model.
"""

from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.enums import PrizePayoutStatus
from app.models.prize_payout import PrizePayout
from app.repositories.base import BaseRepository


class PrizePayoutRepository(BaseRepository[PrizePayout]):
    """Prize payout repository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize prize payout repository."""
        super().__init__(PrizePayout, session)

    async def mark_verified(self, prize_id: int, verified_at: datetime) -> bool:
        """
        Move a prize from pending to verified.

        Returns:
            True if the status changed
        """
        stmt = (
            update(PrizePayout)
            .where(
                PrizePayout.id == prize_id,
                PrizePayout.status == PrizePayoutStatus.PENDING.value,
            )
            .values(status=PrizePayoutStatus.VERIFIED.value, verified_at=verified_at)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def mark_paid(self, prize_id: int, paid_at: datetime) -> bool:
        """
        Move a verified prize to paid.

        Returns:
            True if the status changed, False if missing or already paid
        """
        stmt = (
            update(PrizePayout)
            .where(
                PrizePayout.id == prize_id,
                PrizePayout.status == PrizePayoutStatus.VERIFIED.value,
            )
            .values(status=PrizePayoutStatus.PAID.value, paid_at=paid_at)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def list_by_status(
        self, status: PrizePayoutStatus | None = None, limit: int | None = None
    ) -> list[PrizePayout]:
        """Prize wins, newest first, optionally of one status."""
        stmt = select(PrizePayout)
        if status is not None:
            stmt = stmt.where(PrizePayout.status == status.value)
        stmt = stmt.order_by(PrizePayout.created_at.desc(), PrizePayout.id.desc())
        if limit:
            stmt = stmt.limit(limit)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
