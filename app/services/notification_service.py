"""
Notification service.

Delivers committed domain events on the worker side: stores in-app
notifications and sends template emails.
"""

from typing import Any

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.notification import Notification
from app.repositories.notification_repository import NotificationRepository
from app.repositories.user_repository import UserRepository
from app.services.email import EmailClient, render_template
from app.utils.exceptions import SideEffectFailure


class NotificationService:
    """Stores notifications and sends user emails."""

    def __init__(
        self,
        session: AsyncSession,
        email_client: EmailClient | None = None,
    ) -> None:
        """
        Initialize notification service.

        Args:
            session: Database session
            email_client: Email client (default settings if omitted)
        """
        self.session = session
        self.email_client = email_client or EmailClient()
        self.notification_repo = NotificationRepository(session)
        self.user_repo = UserRepository(session)

    async def store_notification(
        self,
        user_id: int,
        notification_type: str,
        title: str,
        message: str,
        reference_id: int | None = None,
    ) -> Notification:
        """
        Write an in-app notification and commit.

        Args:
            user_id: Recipient
            notification_type: NotificationType value
            title: Title
            message: Message text
            reference_id: Related matrix / payout ID

        Returns:
            Stored notification
        """
        notification = await self.notification_repo.create(
            user_id=user_id,
            type=notification_type,
            title=title,
            message=message,
            reference_id=reference_id,
        )
        await self.session.commit()

        logger.info(
            "Notification stored",
            extra={
                "notification_id": notification.id,
                "user_id": user_id,
                "type": notification_type,
            },
        )
        return notification

    async def send_template_email(
        self,
        user_id: int,
        template: str,
        context: dict[str, Any],
    ) -> bool:
        """
        Email a user with a template.

        Args:
            user_id: Recipient
            template: Template name
            context: Placeholder values

        Returns:
            True if the email API accepted it
        """
        user = await self.user_repo.get_by_id(user_id)
        if user is None or not user.email:
            logger.info(
                "User has no email, skipping",
                extra={"user_id": user_id, "template": template},
            )
            return False

        try:
            subject, html = render_template(template, context)
        except SideEffectFailure as e:
            logger.warning(
                f"Email template rendering failed: {e.message}",
                extra={"user_id": user_id, "template": template},
            )
            return False

        return await self.email_client.send(user.email, subject, html)
