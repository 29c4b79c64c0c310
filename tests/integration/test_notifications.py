"""
Integration tests for notification delivery.

Tests cover:
- Storing in-app notifications
- Template emails through a mocked EmailClient
- Event publishing to dramatiq actors
- Daily payout reminder for admins
"""

from decimal import Decimal
from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy import select

from app.models import Notification, NotificationType, PayoutReferenceType
from app.services.base_service import BaseService
from app.services.events import DramatiqEventPublisher, EmailEvent, NotificationEvent
from app.services.notification_service import NotificationService
from app.services.payout import PayoutQueueService
from jobs.tasks import notification_delivery
from jobs.tasks.payout_reminder import remind_admins


class TestNotificationService:
    """Test NotificationService."""

    @pytest.mark.asyncio
    async def test_store_notification(self, session, make_user, mock_email_client, session_maker):
        """Test notification row is committed."""
        user = await make_user()
        service = NotificationService(session, mock_email_client)

        notification = await service.store_notification(
            user.id,
            NotificationType.MATRIX_GROWTH.value,
            "Your matrix is growing",
            "Spot 4 was filled.",
            reference_id=3,
        )

        async with session_maker() as check:
            stored = (await check.execute(select(Notification))).scalar_one()
        assert stored.id == notification.id
        assert stored.type == "matrix_growth"
        assert stored.reference_id == 3
        assert stored.is_read is False

    @pytest.mark.asyncio
    async def test_send_template_email(self, session, make_user, mock_email_client):
        """Test rendered template goes to the user's address."""
        user = await make_user("dana", email="dana@example.com")
        service = NotificationService(session, mock_email_client)

        sent = await service.send_template_email(
            user.id,
            "matrix_complete",
            {"first_name": "Dana", "amount": "200.00", "payment_handle": "@dana"},
        )

        assert sent is True
        to, subject, html = mock_email_client.send.await_args.args
        assert to == "dana@example.com"
        assert "200.00" in subject + html

    @pytest.mark.asyncio
    async def test_user_without_email(self, session, make_user, mock_email_client):
        """Test no email address means nothing is sent."""
        user = await make_user()
        service = NotificationService(session, mock_email_client)

        assert await service.send_template_email(user.id, "matrix_complete", {}) is False
        mock_email_client.send.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_template_failure_is_not_raised(
        self, session, make_user, mock_email_client
    ):
        """Test a broken template is logged and reported as not sent."""
        user = await make_user(email="x@example.com")
        service = NotificationService(session, mock_email_client)

        assert await service.send_template_email(user.id, "no_such_template", {}) is False
        mock_email_client.send.assert_not_awaited()


class TestEventPublishing:
    """Test events reach the dramatiq actors."""

    @pytest.mark.asyncio
    async def test_events_are_sent_to_actors(self):
        """Test each event type maps to its actor."""
        notification = NotificationEvent(
            user_id=1,
            notification_type=NotificationType.PAYOUT_SENT,
            title="Payout sent",
            message="Your $5.00 payout was sent.",
            reference_id=9,
        )
        email = EmailEvent(user_id=1, template="payout_initiated", context={"a": "b"})

        with patch.object(
            notification_delivery.deliver_notification, "send"
        ) as deliver, patch.object(
            notification_delivery.send_user_email, "send"
        ) as send_email:
            await DramatiqEventPublisher().publish([notification, email])

        deliver.assert_called_once_with(
            1, "payout_sent", "Payout sent", "Your $5.00 payout was sent.", 9
        )
        send_email.assert_called_once_with(1, "payout_initiated", {"a": "b"})

    @pytest.mark.asyncio
    async def test_broker_failure_is_swallowed(self):
        """Test a broker error does not reach the caller."""
        event = EmailEvent(user_id=1, template="payout_initiated")

        with patch.object(
            notification_delivery.send_user_email,
            "send",
            side_effect=ConnectionError("redis down"),
        ):
            await DramatiqEventPublisher().publish([event])

    @pytest.mark.asyncio
    async def test_service_publish_never_raises(self, mock_session):
        """Test BaseService.publish logs a failing publisher."""
        publisher = AsyncMock()
        publisher.publish.side_effect = RuntimeError("boom")
        service = BaseService(mock_session, publisher)

        await service.publish([EmailEvent(user_id=1, template="x")])

        publisher.publish.assert_awaited_once()


class TestPayoutReminder:
    """Test the daily admin reminder."""

    @pytest.mark.asyncio
    async def test_reminder_sent_to_admins(
        self, session, publisher, make_user, mock_email_client
    ):
        """Test count and total are emailed to each admin."""
        user = await make_user()
        queue = PayoutQueueService(session, publisher)
        await queue.enqueue(user.id, Decimal("200.00"), "Matrix bonus", PayoutReferenceType.GAME)
        await queue.enqueue(user.id, Decimal("15.50"), "Trivia win", PayoutReferenceType.GAME)

        result = await remind_admins(
            session, mock_email_client, ["a@example.com", "b@example.com"]
        )

        assert result == {"pending_count": 2, "total_amount": "215.50", "sent": 2}
        subject = mock_email_client.send.await_args.args[1]
        assert subject == "2 payout(s) waiting - $215.50"

    @pytest.mark.asyncio
    async def test_empty_queue(self, session, mock_email_client):
        """Test nothing is sent without pending payouts."""
        result = await remind_admins(session, mock_email_client, ["a@example.com"])

        assert result == {"pending_count": 0, "total_amount": "0.00", "sent": 0}
        mock_email_client.send.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_no_admins_configured(
        self, session, publisher, make_user, mock_email_client
    ):
        """Test pending payouts without recipients."""
        user = await make_user()
        await PayoutQueueService(session, publisher).enqueue(
            user.id, Decimal("5.00"), "Trivia win", PayoutReferenceType.GAME
        )

        result = await remind_admins(session, mock_email_client, [])

        assert result["sent"] == 0
        mock_email_client.send.assert_not_awaited()
