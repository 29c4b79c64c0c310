"""
Matrix repository.

Data access layer for MatrixEntry and MatrixSlot models.
"""

from datetime import datetime
from decimal import Decimal
from typing import Literal

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.config.business_constants import FILL_ORDER, OWNER_SLOT
from app.models.enums import PayoutStatus
from app.models.matrix_entry import MatrixEntry
from app.models.matrix_slot import MatrixSlot
from app.repositories.base import BaseRepository


MatrixFilter = Literal["all", "active", "completed", "pending-payout"]


class MatrixRepository(BaseRepository[MatrixEntry]):
    """Matrix repository with placement and completion queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize matrix repository."""
        super().__init__(MatrixEntry, session)

    async def create_matrix(
        self,
        owner_id: int,
        payout_amount: Decimal,
        campaign_id: int | None = None,
    ) -> MatrixEntry:
        """
        Create a matrix with the owner in slot 1.

        Args:
            owner_id: Owner user ID
            payout_amount: Bonus paid when the matrix completes
            campaign_id: Campaign purchase that opened the matrix

        Returns:
            Created matrix with slots loaded
        """
        entry = MatrixEntry(
            user_id=owner_id,
            campaign_id=campaign_id,
            payout_amount=payout_amount,
        )
        self.session.add(entry)
        await self.session.flush()

        self.session.add(
            MatrixSlot(
                matrix_id=entry.id,
                slot_index=OWNER_SLOT,
                participant_id=owner_id,
            )
        )
        await self.session.flush()
        await self.session.refresh(entry, attribute_names=["slots"])
        return entry

    async def get_open_matrix_for_owner(self, owner_id: int) -> MatrixEntry | None:
        """
        Get the owner's active, non-completed matrix.

        Args:
            owner_id: Owner user ID

        Returns:
            Oldest open matrix of the owner or None
        """
        stmt = (
            select(MatrixEntry)
            .where(
                MatrixEntry.user_id == owner_id,
                MatrixEntry.is_active.is_(True),
                MatrixEntry.is_completed.is_(False),
            )
            .order_by(MatrixEntry.created_at, MatrixEntry.id)
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def find_open_candidate_ids(
        self, exclude_owner_id: int | None = None
    ) -> list[int]:
        """
        IDs of active, non-completed matrices, oldest first.

        Args:
            exclude_owner_id: Skip matrices owned by this user

        Returns:
            Matrix IDs ordered by creation time, then ID
        """
        stmt = select(MatrixEntry.id).where(
            MatrixEntry.is_active.is_(True),
            MatrixEntry.is_completed.is_(False),
        )
        if exclude_owner_id is not None:
            stmt = stmt.where(MatrixEntry.user_id != exclude_owner_id)
        stmt = stmt.order_by(MatrixEntry.created_at, MatrixEntry.id)

        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def lock_for_placement(self, matrix_id: int) -> bool:
        """
        Claim a matrix for one placement.

        Bumps the version with a conditional UPDATE that only matches an
        active, non-completed matrix. The updated row stays locked until
        the transaction ends, so concurrent placers into the same matrix
        are serialized.

        Args:
            matrix_id: Matrix ID

        Returns:
            True if the matrix was claimed, False if it is gone,
            inactive or already completed
        """
        stmt = (
            update(MatrixEntry)
            .where(
                MatrixEntry.id == matrix_id,
                MatrixEntry.is_active.is_(True),
                MatrixEntry.is_completed.is_(False),
            )
            .values(version=MatrixEntry.version + 1)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def load_slots(self, entry: MatrixEntry) -> MatrixEntry:
        """
        Reload the slot collection of a matrix from the database.

        Args:
            entry: Matrix entry

        Returns:
            The same entry with fresh slots
        """
        await self.session.refresh(entry, attribute_names=["slots"])
        return entry

    async def add_slot(
        self,
        matrix_id: int,
        slot_index: int,
        participant_id: int,
        was_auto_placed: bool,
    ) -> MatrixSlot:
        """
        Write a participant into a slot.

        Unique constraints on (matrix_id, slot_index) and participant_id
        raise IntegrityError on flush if the slot or participant is taken.

        Args:
            matrix_id: Matrix ID
            slot_index: Slot index (2..7)
            participant_id: Participant user ID
            was_auto_placed: True for FIFO placement

        Returns:
            Created slot
        """
        slot = MatrixSlot(
            matrix_id=matrix_id,
            slot_index=slot_index,
            participant_id=participant_id,
            was_auto_placed=was_auto_placed,
        )
        self.session.add(slot)
        await self.session.flush()
        return slot

    async def is_participant_placed(self, participant_id: int) -> bool:
        """
        Check whether a participant occupies any slot (slot 1 included).

        Args:
            participant_id: Participant user ID

        Returns:
            True if placed anywhere
        """
        stmt = select(func.count()).select_from(MatrixSlot).where(
            MatrixSlot.participant_id == participant_id
        )
        result = await self.session.execute(stmt)
        return (result.scalar() or 0) > 0

    async def count_filled_growth_slots(self, matrix_id: int) -> int:
        """
        Count occupied slots among 2..7.

        Args:
            matrix_id: Matrix ID

        Returns:
            Number of filled non-owner slots
        """
        stmt = select(func.count()).select_from(MatrixSlot).where(
            MatrixSlot.matrix_id == matrix_id,
            MatrixSlot.slot_index.in_(FILL_ORDER),
        )
        result = await self.session.execute(stmt)
        return result.scalar() or 0

    async def mark_completed(self, matrix_id: int, completed_at: datetime) -> bool:
        """
        Flip a matrix to completed with its payout pending.

        Conditional on is_completed = false, so only one caller wins.

        Args:
            matrix_id: Matrix ID
            completed_at: Completion timestamp

        Returns:
            True if this call completed the matrix
        """
        stmt = (
            update(MatrixEntry)
            .where(
                MatrixEntry.id == matrix_id,
                MatrixEntry.is_completed.is_(False),
            )
            .values(
                is_completed=True,
                completed_at=completed_at,
                payout_status=PayoutStatus.PENDING.value,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def mark_payout_paid(
        self,
        matrix_id: int,
        sent_at: datetime,
        payout_method: str | None,
        payout_handle: str | None,
    ) -> bool:
        """
        Flip a completed matrix's payout status from pending to paid.

        Args:
            matrix_id: Matrix ID
            sent_at: Settlement timestamp
            payout_method: Method the bonus was paid with
            payout_handle: Handle the bonus was paid to

        Returns:
            True if the status changed, False if the matrix is missing,
            not completed or already paid
        """
        stmt = (
            update(MatrixEntry)
            .where(
                MatrixEntry.id == matrix_id,
                MatrixEntry.is_completed.is_(True),
                MatrixEntry.payout_status == PayoutStatus.PENDING.value,
            )
            .values(
                payout_status=PayoutStatus.PAID.value,
                payout_sent_at=sent_at,
                payout_method=payout_method,
                payout_handle=payout_handle,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def list_matrices(
        self,
        matrix_filter: MatrixFilter = "all",
        limit: int | None = None,
    ) -> list[MatrixEntry]:
        """
        List matrices with their slots, newest first.

        Args:
            matrix_filter: all, active, completed or pending-payout
            limit: Max number of results

        Returns:
            List of matrices
        """
        stmt = select(MatrixEntry)
        if matrix_filter == "active":
            stmt = stmt.where(
                MatrixEntry.is_active.is_(True),
                MatrixEntry.is_completed.is_(False),
            )
        elif matrix_filter == "completed":
            stmt = stmt.where(MatrixEntry.is_completed.is_(True))
        elif matrix_filter == "pending-payout":
            stmt = stmt.where(
                MatrixEntry.payout_status == PayoutStatus.PENDING.value
            )
        stmt = stmt.order_by(MatrixEntry.created_at.desc(), MatrixEntry.id.desc())
        if limit:
            stmt = stmt.limit(limit)

        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_stats(self) -> dict[str, int]:
        """
        Count matrices by state.

        Returns:
            Dict with active, completed and pending_payouts counts
        """
        active = await self.session.execute(
            select(func.count()).select_from(MatrixEntry).where(
                MatrixEntry.is_active.is_(True),
                MatrixEntry.is_completed.is_(False),
            )
        )
        completed = await self.session.execute(
            select(func.count()).select_from(MatrixEntry).where(
                MatrixEntry.is_completed.is_(True)
            )
        )
        pending = await self.session.execute(
            select(func.count()).select_from(MatrixEntry).where(
                MatrixEntry.payout_status == PayoutStatus.PENDING.value
            )
        )
        return {
            "active": active.scalar() or 0,
            "completed": completed.scalar() or 0,
            "pending_payouts": pending.scalar() or 0,
        }

    async def total_paid_bonuses(self) -> Decimal:
        """
        Sum of bonuses on matrices whose payout was sent.

        Returns:
            Total matrix payouts sent
        """
        stmt = select(func.sum(MatrixEntry.payout_amount)).where(
            MatrixEntry.payout_status == PayoutStatus.PAID.value
        )
        return await self._sum(stmt)
