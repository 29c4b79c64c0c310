"""
Payout settlement service.

Moves a queue entry into payout history once an operator confirms the
real-world payment was sent.
"""

from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from app.config.operational_constants import PAYOUT_HISTORY_PAGE_SIZE
from app.models.enums import NotificationType, PayoutReferenceType
from app.models.payout_history import PayoutHistory
from app.repositories.audit_log_repository import AdminAuditLogRepository
from app.repositories.matrix_repository import MatrixRepository
from app.repositories.payout_repository import (
    PayoutHistoryRepository,
    PayoutQueueRepository,
)
from app.repositories.prize_payout_repository import PrizePayoutRepository
from app.repositories.user_repository import UserRepository
from app.services.base_service import BaseService, transaction
from app.services.events import DomainEvent, EmailEvent, NotificationEvent
from app.utils.datetime_utils import utc_now
from app.utils.exceptions import (
    ConcurrencyConflictError,
    EntityNotFoundError,
    InvariantViolationError,
    PayoutAlreadySettledError,
    ValidationError,
)
from app.utils.formatters import format_user_identifier, money_str


class SettlementService(BaseService):
    """
    Settles payout queue entries.

    One transaction: insert history, flip the origin's status to paid,
    delete the queue entry, write the audit row. Any failure rolls all of
    it back and the entry stays queued.
    """

    def __init__(self, session: AsyncSession, publisher=None) -> None:
        """
        Initialize settlement service.

        Args:
            session: Database session
            publisher: Event publisher
        """
        super().__init__(session, publisher)
        self.queue_repo = PayoutQueueRepository(session)
        self.history_repo = PayoutHistoryRepository(session)
        self.matrix_repo = MatrixRepository(session)
        self.prize_repo = PrizePayoutRepository(session)
        self.user_repo = UserRepository(session)
        self.audit_repo = AdminAuditLogRepository(session)

    async def settle(
        self,
        queue_entry_id: int,
        confirmation_number: str | None = None,
        notes: str | None = None,
        payment_method: str | None = None,
        paid_by: str | None = None,
    ) -> PayoutHistory:
        """
        Settle a queue entry.

        Args:
            queue_entry_id: Queue entry ID
            confirmation_number: Provider confirmation entered by the operator
            notes: Operator notes
            payment_method: Method actually used (defaults to the snapshot)
            paid_by: Operator handle

        Returns:
            The new payout history record

        Raises:
            EntityNotFoundError: Queue entry never existed
            PayoutAlreadySettledError: Queue entry was already settled
            ValidationError: No payout handle for the beneficiary
        """
        record, events = await self._settle(
            queue_entry_id,
            confirmation_number=_clean(confirmation_number),
            notes=_clean(notes),
            payment_method=_clean(payment_method),
            paid_by=_clean(paid_by),
        )
        await self.publish(events)
        return record

    @transaction
    async def _settle(
        self,
        queue_entry_id: int,
        confirmation_number: str | None,
        notes: str | None,
        payment_method: str | None,
        paid_by: str | None,
    ) -> tuple[PayoutHistory, list[DomainEvent]]:
        entry = await self.queue_repo.get_for_update(queue_entry_id)
        if entry is None:
            if await self.history_repo.get_by_queue_entry(queue_entry_id):
                raise PayoutAlreadySettledError(
                    f"Payout {queue_entry_id} has already been settled"
                )
            raise EntityNotFoundError(f"Payout {queue_entry_id} not found")

        user = await self.user_repo.get_by_id(entry.user_id)
        payment_handle = entry.payment_handle or (user.payment_handle if user else None)
        if not payment_handle:
            raise ValidationError(
                f"Payout {queue_entry_id} has no payout handle. "
                f"Ask the user to add one before settling."
            )
        method = payment_method or entry.payment_method or (
            user.payment_method if user else None
        )
        paid_at = utc_now()

        # 1. Archive
        record = await self.history_repo.create(
            queue_entry_id=entry.id,
            user_id=entry.user_id,
            amount=entry.amount,
            reason=entry.reason,
            reference_type=entry.reference_type,
            reference_id=entry.reference_id,
            payment_method=method,
            payment_handle=payment_handle,
            confirmation_number=confirmation_number,
            notes=notes,
            queued_at=entry.queued_at,
            paid_at=paid_at,
            paid_by=paid_by,
        )

        # 2. Flip origin status
        await self._mark_origin_paid(
            entry.reference_type, entry.reference_id, paid_at, method, payment_handle
        )

        # 3. Remove from queue
        if not await self.queue_repo.delete_settled(entry.id):
            raise ConcurrencyConflictError(
                f"Payout {queue_entry_id} was removed concurrently"
            )

        who = format_user_identifier(user) if user else f"ID:{entry.user_id}"
        amount = money_str(entry.amount)
        await self.audit_repo.record(
            action="payout_processed",
            table_name="payout_history",
            record_id=record.id,
            new_value={
                "user": who,
                "amount": amount,
                "payment_method": method,
                "confirmation_number": confirmation_number,
                "queue_entry_id": entry.id,
            },
            description=f"Processed ${amount} payout to {who} via {method or 'unknown method'}",
            actor=paid_by,
        )

        self.logger.info(
            "Payout settled",
            extra={
                "queue_entry_id": entry.id,
                "history_id": record.id,
                "user_id": entry.user_id,
                "amount": amount,
                "reference_type": entry.reference_type,
                "reference_id": entry.reference_id,
            },
        )

        events: list[DomainEvent] = [
            NotificationEvent(
                user_id=entry.user_id,
                notification_type=NotificationType.PAYOUT_SENT,
                title="Payout sent",
                message=f"Your ${amount} payout was sent to {payment_handle}.",
                reference_id=record.id,
            )
        ]
        if user and user.email:
            events.append(
                EmailEvent(
                    user_id=user.id,
                    template="payout_initiated",
                    context={
                        "first_name": user.display_name,
                        "amount": amount,
                        "payment_method": method or "N/A",
                        "payment_handle": payment_handle,
                        "confirmation_number": confirmation_number or "N/A",
                        "date": paid_at.strftime("%B %d, %Y"),
                    },
                )
            )
        return record, events

    async def _mark_origin_paid(
        self,
        reference_type: str,
        reference_id: int | None,
        paid_at: datetime,
        method: str | None,
        payment_handle: str,
    ) -> None:
        """Flip the originating matrix or prize to paid, failing closed."""
        if reference_type == PayoutReferenceType.MATRIX.value:
            if reference_id is None or not await self.matrix_repo.mark_payout_paid(
                reference_id, paid_at, method, payment_handle
            ):
                raise InvariantViolationError(
                    f"Matrix {reference_id} has no pending payout"
                )
        elif reference_type == PayoutReferenceType.WEEKLY_PRIZE.value:
            if reference_id is None or not await self.prize_repo.mark_paid(
                reference_id, paid_at
            ):
                raise InvariantViolationError(
                    f"Prize {reference_id} is not awaiting payment"
                )

    async def list_history(
        self, limit: int = PAYOUT_HISTORY_PAGE_SIZE
    ) -> list[PayoutHistory]:
        """
        Settled payouts, newest first.

        Args:
            limit: Page size, capped at PAYOUT_HISTORY_PAGE_SIZE
        """
        limit = max(1, min(limit, PAYOUT_HISTORY_PAGE_SIZE))
        return await self.history_repo.list_recent(limit)


def _clean(value: str | None) -> str | None:
    """Strip operator input; empty becomes None."""
    if value is None:
        return None
    value = value.strip()
    return value or None
