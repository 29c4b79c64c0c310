"""
Matrix completion detector.

Flips a full matrix to completed and queues the owner's bonus.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from app.config.business_constants import FILL_ORDER
from app.models.enums import NotificationType, PayoutReferenceType
from app.repositories.matrix_repository import MatrixRepository
from app.repositories.payout_repository import PayoutQueueRepository
from app.repositories.user_repository import UserRepository
from app.services.base_service import BaseService, transaction
from app.services.events import DomainEvent, EmailEvent, NotificationEvent
from app.utils.datetime_utils import utc_now
from app.utils.exceptions import MatrixNotFoundError
from app.utils.formatters import money_str


class CompletionDetector(BaseService):
    """Detects completed matrices and emits their payout obligation."""

    def __init__(self, session: AsyncSession, publisher=None) -> None:
        """
        Initialize completion detector.

        Args:
            session: Database session
            publisher: Event publisher
        """
        super().__init__(session, publisher)
        self.matrix_repo = MatrixRepository(session)
        self.queue_repo = PayoutQueueRepository(session)
        self.user_repo = UserRepository(session)

    async def check_completion(self, matrix_id: int) -> bool:
        """
        Evaluate a matrix in its own transaction and publish the events.

        Args:
            matrix_id: Matrix ID

        Returns:
            True if this call completed the matrix

        Raises:
            MatrixNotFoundError: Matrix does not exist
        """
        events = await self._check_completion(matrix_id)
        await self.publish(events)
        return bool(events)

    @transaction
    async def _check_completion(self, matrix_id: int) -> list[DomainEvent]:
        return await self.evaluate(matrix_id)

    async def evaluate(self, matrix_id: int) -> list[DomainEvent]:
        """
        Complete the matrix if slots 2-7 are all filled.

        Runs inside the caller's transaction and does not commit. The
        completion flag flips with a conditional update, so a matrix is
        completed and its bonus queued at most once.

        Args:
            matrix_id: Matrix ID

        Returns:
            Events to publish after commit (empty if nothing changed)

        Raises:
            MatrixNotFoundError: Matrix does not exist
        """
        entry = await self.matrix_repo.get_by_id(matrix_id)
        if entry is None:
            raise MatrixNotFoundError(f"Matrix {matrix_id} not found")

        filled = await self.matrix_repo.count_filled_growth_slots(matrix_id)
        if filled < len(FILL_ORDER):
            return []

        completed_at = utc_now()
        if not await self.matrix_repo.mark_completed(matrix_id, completed_at):
            return []

        await self.session.refresh(entry)
        owner = await self.user_repo.get_by_id(entry.user_id)

        queue_entry = await self.queue_repo.create(
            user_id=entry.user_id,
            amount=entry.payout_amount,
            reason=f"Matrix #{entry.id} completed",
            reference_type=PayoutReferenceType.MATRIX.value,
            reference_id=entry.id,
            payment_method=owner.payment_method if owner else None,
            payment_handle=owner.payment_handle if owner else None,
        )

        self.logger.info(
            "Matrix completed, payout queued",
            extra={
                "matrix_id": matrix_id,
                "owner_id": entry.user_id,
                "queue_entry_id": queue_entry.id,
                "amount": str(entry.payout_amount),
            },
        )

        amount = money_str(entry.payout_amount)
        events: list[DomainEvent] = [
            NotificationEvent(
                user_id=entry.user_id,
                notification_type=NotificationType.MATRIX_COMPLETE,
                title="Matrix complete!",
                message=(
                    f"All 7 spots are filled. Your ${amount} bonus "
                    f"is in the payout queue."
                ),
                reference_id=entry.id,
            )
        ]
        if owner and owner.email:
            events.append(
                EmailEvent(
                    user_id=owner.id,
                    template="matrix_complete",
                    context={
                        "first_name": owner.display_name,
                        "amount": amount,
                        "payment_handle": owner.payment_handle or "your payout handle",
                    },
                )
            )
        return events
