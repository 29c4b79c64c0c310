"""
Daily payout reminder task.

Emails the admins how many payouts are waiting in the queue and their
total. Nothing is sent when the queue is empty.
"""

import dramatiq
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.config.operational_constants import DRAMATIQ_TIME_LIMIT_STANDARD
from app.config.settings import settings
from app.repositories.payout_repository import PayoutQueueRepository
from app.services.email import EmailClient, render_template
from app.utils.formatters import money_str
from jobs.async_runner import run_async
from jobs.broker import broker  # noqa: F401
from jobs.utils.database import task_session_maker


@dramatiq.actor(max_retries=1, time_limit=DRAMATIQ_TIME_LIMIT_STANDARD)
def send_daily_payout_reminder() -> None:
    """Send the daily payout reminder to every admin email."""
    logger.info("Starting daily payout reminder...")

    try:
        result = run_async(_send_daily_payout_reminder_async())
        logger.info(
            f"Payout reminder complete: {result['sent']} sent, "
            f"{result['pending_count']} pending"
        )
    except Exception as e:
        logger.exception(f"Payout reminder failed: {e}")


async def _send_daily_payout_reminder_async() -> dict:
    """Async implementation of the payout reminder."""
    async with task_session_maker() as session:
        return await remind_admins(session, EmailClient(), settings.get_admin_emails())


async def remind_admins(
    session: AsyncSession,
    email_client: EmailClient,
    admin_emails: list[str],
) -> dict:
    """
    Email the pending payout count and total to admins.

    Args:
        session: Database session
        email_client: Email client
        admin_emails: Recipients

    Returns:
        Dict with pending_count, total_amount and sent
    """
    count, total = await PayoutQueueRepository(session).pending_totals()
    result = {"pending_count": count, "total_amount": money_str(total), "sent": 0}

    if count == 0:
        logger.info("No pending payouts, reminder not sent")
        return result

    if not admin_emails:
        logger.warning("Pending payouts but no ADMIN_EMAILS configured")
        return result

    subject, html = render_template(
        "daily_payout_reminder",
        {"count": count, "total_amount": result["total_amount"]},
    )
    for email in admin_emails:
        if await email_client.send(email, subject, html):
            result["sent"] += 1

    return result
