"""
Notification delivery tasks.

Consume the domain events published after a core transaction commits.
Failures are logged; the Retries middleware bounds the attempts.
"""

from typing import Any

import dramatiq
from loguru import logger

from app.config.operational_constants import (
    DRAMATIQ_TIME_LIMIT_SHORT,
    NOTIFICATION_MAX_RETRIES,
)
from app.services.notification_service import NotificationService
from jobs.async_runner import run_async
from jobs.broker import broker  # noqa: F401
from jobs.utils.database import task_session_maker


@dramatiq.actor(max_retries=NOTIFICATION_MAX_RETRIES, time_limit=DRAMATIQ_TIME_LIMIT_SHORT)
def deliver_notification(
    user_id: int,
    notification_type: str,
    title: str,
    message: str,
    reference_id: int | None = None,
) -> None:
    """
    Store an in-app notification.

    Args:
        user_id: Recipient
        notification_type: NotificationType value
        title: Title
        message: Message text
        reference_id: Related matrix / payout ID
    """
    run_async(
        _deliver_notification_async(
            user_id, notification_type, title, message, reference_id
        )
    )


async def _deliver_notification_async(
    user_id: int,
    notification_type: str,
    title: str,
    message: str,
    reference_id: int | None,
) -> None:
    """Async implementation of notification delivery."""
    async with task_session_maker() as session:
        service = NotificationService(session)
        await service.store_notification(
            user_id, notification_type, title, message, reference_id
        )


@dramatiq.actor(max_retries=0, time_limit=DRAMATIQ_TIME_LIMIT_SHORT)
def send_user_email(user_id: int, template: str, context: dict[str, Any]) -> None:
    """
    Send a template email to a user. Best effort, never retried.

    Args:
        user_id: Recipient
        template: Template name
        context: Placeholder values
    """
    try:
        sent = run_async(_send_user_email_async(user_id, template, context))
    except Exception as e:
        logger.warning(
            f"Email task failed: {e}",
            extra={"user_id": user_id, "template": template},
        )
        return

    if not sent:
        logger.info(
            "Email not sent",
            extra={"user_id": user_id, "template": template},
        )


async def _send_user_email_async(
    user_id: int, template: str, context: dict[str, Any]
) -> bool:
    """Async implementation of user email."""
    async with task_session_maker() as session:
        service = NotificationService(session)
        return await service.send_template_email(user_id, template, context)
