"""
Payout queue service.

Adds obligations to the payout queue and serves the operator views of it.
"""

from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.enums import PayoutReferenceType, PrizePayoutStatus
from app.models.payout_queue_entry import PayoutQueueEntry
from app.models.prize_payout import PrizePayout
from app.repositories.payout_repository import (
    PayoutHistoryRepository,
    PayoutQueueRepository,
)
from app.repositories.prize_payout_repository import PrizePayoutRepository
from app.repositories.user_repository import UserRepository
from app.services.base_service import BaseService, transaction
from app.utils.datetime_utils import start_of_utc_day, utc_now
from app.utils.exceptions import (
    EntityNotFoundError,
    InvariantViolationError,
    ValidationError,
)


@dataclass
class PayoutQueueStats:
    """Payout queue dashboard numbers."""

    pending_count: int
    pending_amount: Decimal
    paid_today_count: int
    paid_today_amount: Decimal


class PayoutQueueService(BaseService):
    """Payout queue operations."""

    def __init__(self, session: AsyncSession, publisher=None) -> None:
        """
        Initialize payout queue service.

        Args:
            session: Database session
            publisher: Event publisher
        """
        super().__init__(session, publisher)
        self.queue_repo = PayoutQueueRepository(session)
        self.history_repo = PayoutHistoryRepository(session)
        self.prize_repo = PrizePayoutRepository(session)
        self.user_repo = UserRepository(session)

    async def list_queue(self, limit: int | None = None) -> list[PayoutQueueEntry]:
        """Queued payouts, oldest first."""
        return await self.queue_repo.list_pending(limit=limit)

    async def get_stats(self) -> PayoutQueueStats:
        """
        Pending totals and what was paid since midnight UTC.

        Returns:
            PayoutQueueStats
        """
        pending_count, pending_amount = await self.queue_repo.pending_totals()
        paid_count, paid_amount = await self.history_repo.totals_between(
            start=start_of_utc_day()
        )
        return PayoutQueueStats(
            pending_count=pending_count,
            pending_amount=pending_amount,
            paid_today_count=paid_count,
            paid_today_amount=paid_amount,
        )

    @transaction
    async def enqueue(
        self,
        user_id: int,
        amount: Decimal,
        reason: str,
        reference_type: PayoutReferenceType,
        reference_id: int | None = None,
    ) -> PayoutQueueEntry:
        """
        Queue an obligation from a reward source (prize win, game payout).

        The beneficiary's payment method and handle are snapshotted.

        Args:
            user_id: Beneficiary
            amount: Amount owed
            reason: Reason shown to operators
            reference_type: Origin type
            reference_id: Origin ID

        Returns:
            Created queue entry

        Raises:
            ValidationError: Non-positive amount or empty reason
            EntityNotFoundError: Beneficiary does not exist
            InvariantViolationError: Origin already queued
        """
        return await self._add(user_id, amount, reason, reference_type, reference_id)

    @transaction
    async def record_prize(
        self,
        user_id: int,
        amount: Decimal,
        prize_label: str,
    ) -> PrizePayout:
        """
        Record a weekly prize win, pending verification.

        Args:
            user_id: Winner
            amount: Prize amount
            prize_label: Prize description, e.g. "Week 12 top referrer"

        Returns:
            Created prize payout

        Raises:
            ValidationError: Non-positive amount or empty label
            EntityNotFoundError: Winner does not exist
        """
        if amount is None or amount <= 0:
            raise ValidationError("Prize amount must be greater than 0")
        if not prize_label or not prize_label.strip():
            raise ValidationError("Prize label is required")

        if await self.user_repo.get_by_id(user_id) is None:
            raise EntityNotFoundError(f"User {user_id} not found")

        prize = await self.prize_repo.create(
            user_id=user_id,
            prize_label=prize_label.strip(),
            amount=amount,
            status=PrizePayoutStatus.PENDING.value,
        )
        self.logger.info(
            "Prize win recorded",
            extra={"prize_id": prize.id, "user_id": user_id, "amount": str(amount)},
        )
        return prize

    async def list_prizes(
        self, status: PrizePayoutStatus | None = None, limit: int | None = None
    ) -> list[PrizePayout]:
        """Prize wins, newest first."""
        return await self.prize_repo.list_by_status(status, limit=limit)

    @transaction
    async def queue_prize(self, prize_id: int) -> PayoutQueueEntry:
        """
        Verify a weekly prize win and queue its payout.

        Args:
            prize_id: Prize payout ID

        Returns:
            Created queue entry

        Raises:
            EntityNotFoundError: Prize does not exist
            InvariantViolationError: Prize is not pending verification
        """
        prize = await self.prize_repo.get_by_id(prize_id)
        if prize is None:
            raise EntityNotFoundError(f"Prize {prize_id} not found")

        if not await self.prize_repo.mark_verified(prize_id, utc_now()):
            raise InvariantViolationError(
                f"Prize {prize_id} is not pending verification"
            )

        return await self._add(
            prize.user_id,
            prize.amount,
            f"Weekly prize: {prize.prize_label}",
            PayoutReferenceType.WEEKLY_PRIZE,
            prize.id,
        )

    async def _add(
        self,
        user_id: int,
        amount: Decimal,
        reason: str,
        reference_type: PayoutReferenceType,
        reference_id: int | None,
    ) -> PayoutQueueEntry:
        if amount is None or amount <= 0:
            raise ValidationError("Payout amount must be greater than 0")
        if not reason or not reason.strip():
            raise ValidationError("Payout reason is required")

        user = await self.user_repo.get_by_id(user_id)
        if user is None:
            raise EntityNotFoundError(f"User {user_id} not found")

        if reference_id is not None and await self.queue_repo.exists_for_reference(
            reference_type.value, reference_id
        ):
            raise InvariantViolationError(
                f"{reference_type.value} {reference_id} is already queued"
            )

        entry = await self.queue_repo.create(
            user_id=user_id,
            amount=amount,
            reason=reason.strip(),
            reference_type=reference_type.value,
            reference_id=reference_id,
            payment_method=user.payment_method,
            payment_handle=user.payment_handle,
        )

        self.logger.info(
            "Payout queued",
            extra={
                "queue_entry_id": entry.id,
                "user_id": user_id,
                "amount": str(amount),
                "reference_type": reference_type.value,
                "reference_id": reference_id,
            },
        )
        return entry
