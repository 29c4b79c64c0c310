"""
Integration tests for matrix placement and completion.

Tests cover:
- Matrix creation (owner in slot 1, configured payout)
- Referral priority (slots 2 and 3 of the referrer's matrix)
- FIFO fallback across matrices
- Stale FIFO candidates (completed or slot taken concurrently)
- Single occupancy per participant
- Completion after six placements with exactly one queued payout
"""

from decimal import Decimal
from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy import func, select, update

from app.config.business_constants import APP_SETTING_MATRIX_PAYOUT, FILL_ORDER
from app.models import MatrixEntry, MatrixSlot, NotificationType, PayoutQueueEntry
from app.repositories.app_setting_repository import AppSettingRepository
from app.repositories.matrix_repository import MatrixRepository
from app.services.events import EmailEvent, NotificationEvent
from app.services.matrix import CompletionDetector, MatrixStore, PlacementResolver
from app.utils.exceptions import (
    EntityNotFoundError,
    MatrixNotFoundError,
    ParticipantAlreadyPlacedError,
    ValidationError,
)


async def slot_states(session_maker, matrix_id: int) -> list[int | None]:
    """Slot states read through a fresh session."""
    async with session_maker() as check:
        entry = await MatrixRepository(check).get_by_id(matrix_id)
        return entry.slot_states()


class TestCreateMatrix:
    """Test opening matrices."""

    @pytest.mark.asyncio
    async def test_owner_takes_slot_one(self, session, publisher, make_user, session_maker):
        """Test new matrix has the owner in slot 1 and default payout."""
        owner = await make_user("owner")
        entry = await MatrixStore(session, publisher).create_matrix(owner.id)

        assert entry.payout_amount == Decimal("200.00")
        assert entry.is_completed is False
        assert entry.payout_status is None
        assert await slot_states(session_maker, entry.id) == [
            owner.id, None, None, None, None, None, None
        ]

    @pytest.mark.asyncio
    async def test_payout_from_app_setting(self, session, publisher, make_user):
        """Test matrix_payout runtime setting overrides the default."""
        await AppSettingRepository(session).set_value(APP_SETTING_MATRIX_PAYOUT, "150")
        await session.commit()
        owner = await make_user("owner")

        entry = await MatrixStore(session, publisher).create_matrix(owner.id)

        assert entry.payout_amount == Decimal("150.00")

    @pytest.mark.asyncio
    async def test_invalid_app_setting_falls_back(self, session, publisher, make_user):
        """Test garbage setting uses the default."""
        await AppSettingRepository(session).set_value(APP_SETTING_MATRIX_PAYOUT, "lots")
        await session.commit()
        owner = await make_user("owner")

        entry = await MatrixStore(session, publisher).create_matrix(owner.id)

        assert entry.payout_amount == Decimal("200.00")

    @pytest.mark.asyncio
    async def test_unknown_owner(self, session, publisher):
        """Test missing owner."""
        with pytest.raises(EntityNotFoundError):
            await MatrixStore(session, publisher).create_matrix(999)

    @pytest.mark.asyncio
    async def test_placed_participant_cannot_open_matrix(
        self, session, publisher, make_user
    ):
        """Test an owner already in a slot cannot open a second matrix."""
        owner = await make_user("owner")
        store = MatrixStore(session, publisher)
        await store.create_matrix(owner.id)

        with pytest.raises(ParticipantAlreadyPlacedError):
            await store.create_matrix(owner.id)

    @pytest.mark.asyncio
    async def test_unknown_filter(self, session, publisher):
        """Test list filter validation."""
        with pytest.raises(ValidationError):
            await MatrixStore(session, publisher).list_matrices("paid")


class TestReferralPriority:
    """Test placement into the referrer's matrix."""

    @pytest.mark.asyncio
    async def test_referrer_slots_then_fifo(self, session, publisher, make_user, session_maker):
        """Test slots 2 and 3 go to direct referrals, then FIFO takes over."""
        older_owner = await make_user("older")
        referrer = await make_user("alice", referral_code="ALICE1")
        store = MatrixStore(session, publisher)
        older = await store.create_matrix(older_owner.id)
        referrer_matrix = await store.create_matrix(referrer.id)
        resolver = PlacementResolver(session, publisher)

        first, second, third = (
            await make_user("p1"),
            await make_user("p2"),
            await make_user("p3"),
        )
        r1 = await resolver.place(first.id, referrer_handle="alice")
        r2 = await resolver.place(second.id, referrer_handle="@ALICE")
        r3 = await resolver.place(third.id, referrer_handle="alice1")

        assert (r1.matrix_id, r1.slot_index, r1.was_auto_placed) == (
            referrer_matrix.id, 2, False
        )
        assert (r2.matrix_id, r2.slot_index, r2.was_auto_placed) == (
            referrer_matrix.id, 3, False
        )
        # Referrer's direct slots are full: oldest open matrix, auto-placed
        assert (r3.matrix_id, r3.slot_index, r3.was_auto_placed) == (older.id, 2, True)

        assert await slot_states(session_maker, referrer_matrix.id) == [
            referrer.id, first.id, second.id, None, None, None, None
        ]

    @pytest.mark.asyncio
    async def test_direct_referral_notification(self, session, publisher, make_user):
        """Test owner is told about a direct referral."""
        referrer = await make_user("alice")
        matrix = await MatrixStore(session, publisher).create_matrix(referrer.id)
        participant = await make_user("bob")

        await PlacementResolver(session, publisher).place(
            participant.id, referrer_handle="alice"
        )

        [event] = publisher.of_type(NotificationEvent)
        assert event.user_id == referrer.id
        assert event.notification_type == NotificationType.MATRIX_DIRECT_REFERRAL
        assert event.reference_id == matrix.id
        assert "Bob" in event.message

    @pytest.mark.asyncio
    async def test_unknown_referrer_falls_back_to_fifo(self, session, publisher, make_user):
        """Test unresolved handle does not fail placement."""
        owner = await make_user("owner")
        matrix = await MatrixStore(session, publisher).create_matrix(owner.id)
        participant = await make_user("p1")

        result = await PlacementResolver(session, publisher).place(
            participant.id, referrer_handle="ghost"
        )

        assert result.placed is True
        assert result.matrix_id == matrix.id
        assert result.was_auto_placed is True

    @pytest.mark.asyncio
    async def test_referrer_without_matrix_falls_back(self, session, publisher, make_user):
        """Test referrer who never opted in."""
        owner = await make_user("owner")
        await make_user("alice")
        matrix = await MatrixStore(session, publisher).create_matrix(owner.id)
        participant = await make_user("p1")

        result = await PlacementResolver(session, publisher).place(
            participant.id, referrer_handle="alice"
        )

        assert result.matrix_id == matrix.id
        assert result.was_auto_placed is True


class TestFifoPlacement:
    """Test FIFO placement."""

    @pytest.mark.asyncio
    async def test_oldest_matrix_filled_first(self, session, publisher, make_user, session_maker):
        """Test FIFO fills the oldest matrix in order 2..7 before the next."""
        store = MatrixStore(session, publisher)
        first_owner, second_owner = await make_user("o1"), await make_user("o2")
        first = await store.create_matrix(first_owner.id)
        second = await store.create_matrix(second_owner.id)
        resolver = PlacementResolver(session, publisher)

        results = []
        for i in range(3):
            participant = await make_user(f"p{i}")
            results.append(await resolver.place(participant.id))

        assert [(r.matrix_id, r.slot_index) for r in results] == [
            (first.id, 2),
            (first.id, 3),
            (first.id, 4),
        ]
        states = await slot_states(session_maker, second.id)
        assert states[1:] == [None] * 6

    @pytest.mark.asyncio
    async def test_no_open_matrix(self, session, publisher, make_user):
        """Test nothing free means not placed."""
        participant = await make_user("p1")

        result = await PlacementResolver(session, publisher).place(participant.id)

        assert result.placed is False
        assert result.matrix_id is None
        assert publisher.events == []

    @pytest.mark.asyncio
    async def test_growth_notification(self, session, publisher, make_user):
        """Test slots 4-7 notify matrix growth."""
        owner = await make_user("owner")
        await MatrixStore(session, publisher).create_matrix(owner.id)
        resolver = PlacementResolver(session, publisher)
        for i in range(3):
            await resolver.place((await make_user(f"p{i}")).id)

        types = [e.notification_type for e in publisher.of_type(NotificationEvent)]
        assert types == [
            NotificationType.MATRIX_DIRECT_REFERRAL,
            NotificationType.MATRIX_DIRECT_REFERRAL,
            NotificationType.MATRIX_GROWTH,
        ]


class TestStaleCandidates:
    """Test placement moves on when a candidate changed after it was read."""

    async def two_matrices(self, session, publisher, make_user) -> tuple[int, int]:
        store = MatrixStore(session, publisher)
        older = await store.create_matrix((await make_user("old_owner")).id)
        newer = await store.create_matrix((await make_user("new_owner")).id)
        return older.id, newer.id

    @pytest.mark.asyncio
    async def test_completed_candidate_skipped(
        self, session, publisher, make_user, session_maker
    ):
        """Test a matrix completed by another writer is passed over."""
        older_id, newer_id = await self.two_matrices(session, publisher, make_user)
        participant_id = (await make_user("p1")).id

        async with session_maker() as other:
            await other.execute(
                update(MatrixEntry)
                .where(MatrixEntry.id == older_id)
                .values(is_completed=True)
            )
            await other.commit()

        resolver = PlacementResolver(session, publisher)
        with patch.object(
            resolver.matrix_repo,
            "find_open_candidate_ids",
            AsyncMock(return_value=[older_id, newer_id]),
        ):
            result = await resolver.place(participant_id)

        assert result.placed is True
        assert result.matrix_id == newer_id
        assert result.slot_index == 2
        assert (await slot_states(session_maker, older_id))[1:] == [None] * 6

    @pytest.mark.asyncio
    async def test_only_stale_candidate_leaves_participant_unplaced(
        self, session, publisher, make_user, session_maker
    ):
        """Test nothing is written when every candidate is gone."""
        older_id, _ = await self.two_matrices(session, publisher, make_user)
        participant_id = (await make_user("p1")).id

        async with session_maker() as other:
            await other.execute(
                update(MatrixEntry)
                .where(MatrixEntry.id == older_id)
                .values(is_completed=True)
            )
            await other.commit()

        resolver = PlacementResolver(session, publisher)
        with patch.object(
            resolver.matrix_repo,
            "find_open_candidate_ids",
            AsyncMock(return_value=[older_id]),
        ):
            result = await resolver.place(participant_id)

        assert result.placed is False
        async with session_maker() as check:
            assert not await MatrixRepository(check).is_participant_placed(
                participant_id
            )

    @pytest.mark.asyncio
    async def test_slot_taken_falls_through_to_next_matrix(
        self, session, publisher, make_user, session_maker
    ):
        """Test a unique-slot violation moves on to the next candidate."""
        older_id, newer_id = await self.two_matrices(session, publisher, make_user)
        first = await PlacementResolver(session, publisher).place(
            (await make_user("p0")).id
        )
        assert (first.matrix_id, first.slot_index) == (older_id, 2)
        participant_id = (await make_user("p1")).id

        first_free_index = MatrixEntry.first_free_index
        calls = []

        def stale_first_free_index(self, order=FILL_ORDER):
            calls.append(self.id)
            # First lookup reports the slot p0 already holds
            if len(calls) == 1:
                return 2
            return first_free_index(self, order)

        with patch.object(MatrixEntry, "first_free_index", stale_first_free_index):
            result = await PlacementResolver(session, publisher).place(participant_id)

        assert calls == [older_id, newer_id]
        assert result.placed is True
        assert (result.matrix_id, result.slot_index) == (newer_id, 2)
        assert (await slot_states(session_maker, older_id))[2] is None


class TestSingleOccupancy:
    """Test a participant holds at most one slot."""

    @pytest.mark.asyncio
    async def test_second_placement_rejected(self, session, publisher, make_user):
        """Test placing the same participant twice."""
        owner = await make_user("owner")
        await MatrixStore(session, publisher).create_matrix(owner.id)
        participant = await make_user("p1")
        participant_id = participant.id
        resolver = PlacementResolver(session, publisher)
        await resolver.place(participant_id)

        with pytest.raises(ParticipantAlreadyPlacedError):
            await resolver.place(participant_id)

        count = await session.scalar(
            select(func.count()).select_from(MatrixSlot).where(
                MatrixSlot.participant_id == participant_id
            )
        )
        assert count == 1

    @pytest.mark.asyncio
    async def test_owner_cannot_be_placed(self, session, publisher, make_user):
        """Test a matrix owner already occupies slot 1."""
        first, second = await make_user("o1"), await make_user("o2")
        store = MatrixStore(session, publisher)
        await store.create_matrix(first.id)
        await store.create_matrix(second.id)

        with pytest.raises(ParticipantAlreadyPlacedError):
            await PlacementResolver(session, publisher).place(second.id)

    @pytest.mark.asyncio
    async def test_unknown_participant(self, session, publisher):
        """Test missing participant."""
        with pytest.raises(EntityNotFoundError):
            await PlacementResolver(session, publisher).place(12345)


class TestCompletion:
    """Test completion after six placements."""

    async def fill(self, session, publisher, make_user, owner_email=None):
        owner = await make_user("owner", email=owner_email)
        matrix = await MatrixStore(session, publisher).create_matrix(owner.id)
        resolver = PlacementResolver(session, publisher)
        results = []
        for i in range(6):
            results.append(await resolver.place((await make_user(f"p{i}")).id))
        return owner, matrix, results

    @pytest.mark.asyncio
    async def test_six_placements_complete_matrix(
        self, session, publisher, make_user, session_maker
    ):
        """Test the matrix completes and exactly one payout is queued."""
        owner, matrix, results = await self.fill(session, publisher, make_user)

        assert [r.slot_index for r in results] == [2, 3, 4, 5, 6, 7]

        async with session_maker() as check:
            entry = await MatrixRepository(check).get_by_id(matrix.id)
            assert entry.is_completed is True
            assert entry.completed_at is not None
            assert entry.payout_status == "pending"
            assert entry.is_full is True

            queue = list(
                (await check.execute(select(PayoutQueueEntry))).scalars().all()
            )
        assert len(queue) == 1
        assert queue[0].user_id == owner.id
        assert queue[0].amount == Decimal("200.00")
        assert queue[0].reference_type == "matrix"
        assert queue[0].reference_id == matrix.id
        assert queue[0].payment_handle == "@payme"
        assert queue[0].reason == f"Matrix #{matrix.id} completed"

    @pytest.mark.asyncio
    async def test_completion_events(self, session, publisher, make_user):
        """Test completion notification and email are published once."""
        owner, matrix, _ = await self.fill(
            session, publisher, make_user, owner_email="owner@example.com"
        )

        complete = [
            e for e in publisher.of_type(NotificationEvent)
            if e.notification_type == NotificationType.MATRIX_COMPLETE
        ]
        assert len(complete) == 1
        assert complete[0].user_id == owner.id

        [email] = publisher.of_type(EmailEvent)
        assert email.template == "matrix_complete"
        assert email.context["amount"] == "200.00"

    @pytest.mark.asyncio
    async def test_completed_matrix_takes_no_placements(
        self, session, publisher, make_user
    ):
        """Test a completed matrix is skipped by FIFO."""
        await self.fill(session, publisher, make_user)
        late = await make_user("late")

        result = await PlacementResolver(session, publisher).place(late.id)

        assert result.placed is False

    @pytest.mark.asyncio
    async def test_check_completion_is_idempotent(self, session, publisher, make_user):
        """Test re-running detection never queues a second payout."""
        _, matrix, _ = await self.fill(session, publisher, make_user)
        detector = CompletionDetector(session, publisher)

        assert await detector.check_completion(matrix.id) is False

        count = await session.scalar(select(func.count()).select_from(PayoutQueueEntry))
        assert count == 1

    @pytest.mark.asyncio
    async def test_check_completion_on_partial_matrix(self, session, publisher, make_user):
        """Test a matrix with free slots is not completed."""
        owner = await make_user("owner")
        matrix = await MatrixStore(session, publisher).create_matrix(owner.id)

        assert await CompletionDetector(session, publisher).check_completion(matrix.id) is False

    @pytest.mark.asyncio
    async def test_check_completion_unknown_matrix(self, session, publisher):
        """Test missing matrix."""
        with pytest.raises(MatrixNotFoundError):
            await CompletionDetector(session, publisher).check_completion(404)

    @pytest.mark.asyncio
    async def test_stats_and_filters(self, session, publisher, make_user):
        """Test matrix counts and list filters after a completion."""
        await self.fill(session, publisher, make_user)
        await MatrixStore(session, publisher).create_matrix((await make_user("o2")).id)
        store = MatrixStore(session, publisher)

        stats = await store.get_stats()
        assert stats == {"active": 1, "completed": 1, "pending_payouts": 1}
        assert len(await store.list_matrices("pending-payout")) == 1
        assert len(await store.list_matrices("active")) == 1
        assert len(await store.list_matrices("all")) == 2
