"""
Placement resolver.

Decides which matrix receives a new participant: the referrer's own
matrix first (slots 2 and 3), then the oldest open matrix (FIFO).
"""

from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config.business_constants import GROWTH_SLOTS, MATRIX_SLOT_COUNT
from app.models.enums import NotificationType
from app.models.matrix_entry import MatrixEntry
from app.models.user import User
from app.repositories.matrix_repository import MatrixRepository
from app.repositories.user_repository import UserRepository
from app.services.base_service import BaseService, transaction
from app.services.events import DomainEvent, NotificationEvent
from app.services.matrix.completion_detector import CompletionDetector
from app.services.matrix.config import MatrixConfig, load_matrix_config
from app.utils.exceptions import (
    ConcurrencyConflictError,
    EntityNotFoundError,
    ParticipantAlreadyPlacedError,
    ReferrerNotFoundError,
)


@dataclass
class PlacementResult:
    """Result of a place() call."""

    placed: bool
    matrix_id: int | None = None
    slot_index: int | None = None
    was_auto_placed: bool = False


class PlacementResolver(BaseService):
    """
    Places participants into matrices.

    Order of attempts:
    1. Referrer's active, non-completed matrix, slot 2 then slot 3
    2. Every active, non-completed matrix by creation time (oldest
       first), skipping the participant's own, slots 2..7
    3. Nothing free: not placed

    Each attempt claims the matrix with a conditional version bump inside
    a SAVEPOINT. A matrix that completed or filled up under us is a
    concurrency conflict and the scan moves on to the next candidate.
    """

    def __init__(self, session: AsyncSession, publisher=None) -> None:
        """
        Initialize placement resolver.

        Args:
            session: Database session
            publisher: Event publisher
        """
        super().__init__(session, publisher)
        self.matrix_repo = MatrixRepository(session)
        self.user_repo = UserRepository(session)
        self.completion_detector = CompletionDetector(session, self.publisher)

    async def place(
        self,
        participant_id: int,
        referrer_handle: str | None = None,
        config: MatrixConfig | None = None,
    ) -> PlacementResult:
        """
        Place a participant.

        Args:
            participant_id: New participant user ID
            referrer_handle: Username or referral code of the referrer
            config: Matrix configuration (loaded if omitted)

        Returns:
            PlacementResult

        Raises:
            EntityNotFoundError: Participant does not exist
            ParticipantAlreadyPlacedError: Participant already has a slot
        """
        config = config or await load_matrix_config(self.session)
        result, events = await self._place(participant_id, referrer_handle, config)
        await self.publish(events)
        return result

    @transaction
    async def _place(
        self,
        participant_id: int,
        referrer_handle: str | None,
        config: MatrixConfig,
    ) -> tuple[PlacementResult, list[DomainEvent]]:
        participant = await self.user_repo.get_by_id(participant_id)
        if participant is None:
            raise EntityNotFoundError(f"User {participant_id} not found")

        if await self.matrix_repo.is_participant_placed(participant_id):
            raise ParticipantAlreadyPlacedError(
                f"User {participant_id} already occupies a matrix slot"
            )

        if referrer_handle:
            referrer_matrix_id = await self._find_referrer_matrix(
                referrer_handle, participant_id
            )
            if referrer_matrix_id is not None:
                placed = await self._try_place(
                    referrer_matrix_id,
                    participant_id,
                    config.direct_referral_slots,
                    was_auto_placed=False,
                )
                if placed:
                    return await self._finish(participant, *placed, was_auto_placed=False)

        for matrix_id in await self.matrix_repo.find_open_candidate_ids(
            exclude_owner_id=participant_id
        ):
            placed = await self._try_place(
                matrix_id,
                participant_id,
                config.fill_order,
                was_auto_placed=True,
            )
            if placed:
                return await self._finish(participant, *placed, was_auto_placed=True)

        self.logger.info(
            "No open matrix has a free slot, participant not placed",
            extra={"participant_id": participant_id},
        )
        return PlacementResult(placed=False), []

    async def _find_referrer_matrix(
        self, referrer_handle: str, participant_id: int
    ) -> int | None:
        """Referrer's open matrix ID, or None to fall through to FIFO."""
        try:
            referrer = await self.user_repo.get_by_handle(referrer_handle)
            if referrer is None:
                raise ReferrerNotFoundError(
                    f"Referrer {referrer_handle!r} not found"
                )
            if referrer.id == participant_id:
                raise ReferrerNotFoundError("Participant cannot refer themselves")

            matrix = await self.matrix_repo.get_open_matrix_for_owner(referrer.id)
            if matrix is None:
                raise ReferrerNotFoundError(
                    f"Referrer {referrer_handle!r} has no active matrix"
                )
            return matrix.id
        except ReferrerNotFoundError as e:
            self.logger.info(
                "Referrer unavailable, falling back to FIFO placement",
                extra={
                    "participant_id": participant_id,
                    "referrer_handle": referrer_handle,
                    "reason": e.message,
                },
            )
            return None

    async def _try_place(
        self,
        matrix_id: int,
        participant_id: int,
        order: tuple[int, ...],
        was_auto_placed: bool,
    ) -> tuple[MatrixEntry, int] | None:
        """
        Try to write the participant into the first free slot of one matrix.

        Returns:
            Tuple of (matrix, slot_index) or None to try the next candidate

        Raises:
            ParticipantAlreadyPlacedError: A concurrent call placed the
                same participant first
        """
        try:
            async with self.session.begin_nested():
                if not await self.matrix_repo.lock_for_placement(matrix_id):
                    raise ConcurrencyConflictError(
                        f"Matrix {matrix_id} is no longer open"
                    )

                entry = await self.matrix_repo.get_by_id(matrix_id)
                await self.matrix_repo.load_slots(entry)
                slot_index = entry.first_free_index(order)
                if slot_index is None:
                    return None

                await self.matrix_repo.add_slot(
                    matrix_id=matrix_id,
                    slot_index=slot_index,
                    participant_id=participant_id,
                    was_auto_placed=was_auto_placed,
                )
                return entry, slot_index
        except ConcurrencyConflictError as e:
            self.logger.debug(
                "Placement conflict, trying next matrix",
                extra={"matrix_id": matrix_id, "reason": e.message},
            )
            return None
        except IntegrityError as e:
            if await self.matrix_repo.is_participant_placed(participant_id):
                raise ParticipantAlreadyPlacedError(
                    f"User {participant_id} already occupies a matrix slot"
                ) from e
            self.logger.debug(
                "Slot taken concurrently, trying next matrix",
                extra={"matrix_id": matrix_id, "participant_id": participant_id},
            )
            return None

    async def _finish(
        self,
        participant: User,
        entry: MatrixEntry,
        slot_index: int,
        was_auto_placed: bool,
    ) -> tuple[PlacementResult, list[DomainEvent]]:
        """Build the owner notification and run the completion detector."""
        self.logger.info(
            "Participant placed",
            extra={
                "participant_id": participant.id,
                "matrix_id": entry.id,
                "slot_index": slot_index,
                "was_auto_placed": was_auto_placed,
            },
        )

        filled = await self.matrix_repo.count_filled_growth_slots(entry.id) + 1
        if slot_index in GROWTH_SLOTS:
            notification = NotificationEvent(
                user_id=entry.user_id,
                notification_type=NotificationType.MATRIX_GROWTH,
                title="Your matrix is growing",
                message=(
                    f"Spot {slot_index} was filled. "
                    f"{filled} of {MATRIX_SLOT_COUNT} spots are taken."
                ),
                reference_id=entry.id,
            )
        else:
            notification = NotificationEvent(
                user_id=entry.user_id,
                notification_type=NotificationType.MATRIX_DIRECT_REFERRAL,
                title="New referral in your matrix",
                message=(
                    f"{participant.display_name} joined your matrix "
                    f"in spot {slot_index}."
                ),
                reference_id=entry.id,
            )

        events: list[DomainEvent] = [notification]
        events.extend(await self.completion_detector.evaluate(entry.id))

        return (
            PlacementResult(
                placed=True,
                matrix_id=entry.id,
                slot_index=slot_index,
                was_auto_placed=was_auto_placed,
            ),
            events,
        )
