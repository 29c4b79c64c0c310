"""
Payout repositories.

Data access layer for the payout queue, payout history and payout
period reconciliations.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.payout_history import PayoutHistory
from app.models.payout_queue_entry import PayoutQueueEntry
from app.models.payout_reconciliation import PayoutReconciliation
from app.repositories.base import BaseRepository


class PayoutQueueRepository(BaseRepository[PayoutQueueEntry]):
    """Payout queue repository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize payout queue repository."""
        super().__init__(PayoutQueueEntry, session)

    async def list_pending(self, limit: int | None = None) -> list[PayoutQueueEntry]:
        """
        List queued payouts, oldest first.

        Args:
            limit: Max number of results

        Returns:
            Queue entries ordered by queued_at ascending
        """
        stmt = select(PayoutQueueEntry).order_by(
            PayoutQueueEntry.queued_at, PayoutQueueEntry.id
        )
        if limit:
            stmt = stmt.limit(limit)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def exists_for_reference(
        self, reference_type: str, reference_id: int
    ) -> bool:
        """Check whether an obligation for this origin is already queued."""
        return await self.exists(
            reference_type=reference_type, reference_id=reference_id
        )

    async def delete_settled(self, entry_id: int) -> bool:
        """
        Remove a queue entry that has just been archived.

        Args:
            entry_id: Queue entry ID

        Returns:
            True if the row was deleted by this call
        """
        stmt = (
            delete(PayoutQueueEntry)
            .where(PayoutQueueEntry.id == entry_id)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def pending_totals(self) -> tuple[int, Decimal]:
        """
        Count and total amount of queued payouts.

        Returns:
            Tuple of (count, total_amount)
        """
        count = await self.count()
        total = await self._sum(select(func.sum(PayoutQueueEntry.amount)))
        return count, total


class PayoutHistoryRepository(BaseRepository[PayoutHistory]):
    """Payout history repository. Insert and read only."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize payout history repository."""
        super().__init__(PayoutHistory, session)

    async def list_recent(self, limit: int) -> list[PayoutHistory]:
        """
        List settled payouts, newest first.

        Args:
            limit: Page size cap

        Returns:
            History records ordered by paid_at descending
        """
        stmt = (
            select(PayoutHistory)
            .order_by(PayoutHistory.paid_at.desc(), PayoutHistory.id.desc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_by_queue_entry(self, queue_entry_id: int) -> PayoutHistory | None:
        """Get the history record a queue entry was settled into."""
        return await self.get_by(queue_entry_id=queue_entry_id)

    async def totals_between(
        self,
        start: datetime | None = None,
        end: datetime | None = None,
        payment_method: str | None = None,
    ) -> tuple[int, Decimal]:
        """
        Count and total of payouts settled in a period.

        Args:
            start: Inclusive lower bound on paid_at
            end: Exclusive upper bound on paid_at
            payment_method: Only this payment method (case-insensitive)

        Returns:
            Tuple of (count, total_amount)
        """
        conditions = []
        if start is not None:
            conditions.append(PayoutHistory.paid_at >= start)
        if end is not None:
            conditions.append(PayoutHistory.paid_at < end)
        if payment_method:
            conditions.append(
                func.lower(PayoutHistory.payment_method) == payment_method.lower()
            )

        count_stmt = select(func.count()).select_from(PayoutHistory).where(*conditions)
        count_result = await self.session.execute(count_stmt)
        total = await self._sum(
            select(func.sum(PayoutHistory.amount)).where(*conditions)
        )
        return count_result.scalar() or 0, total


class PayoutReconciliationRepository(BaseRepository[PayoutReconciliation]):
    """Payout period reconciliation repository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize payout reconciliation repository."""
        super().__init__(PayoutReconciliation, session)

    async def list_recent(self, limit: int) -> list[PayoutReconciliation]:
        """List reconciliations, newest first."""
        stmt = (
            select(PayoutReconciliation)
            .order_by(
                PayoutReconciliation.created_at.desc(),
                PayoutReconciliation.id.desc(),
            )
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
