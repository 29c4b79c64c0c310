"""
Scheduler entry point.

Enqueues the daily payout reminder on a cron trigger and serves the
health endpoints. Tasks themselves run in dramatiq workers.
"""

import asyncio
import sys

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from loguru import logger

from app.config.database import async_engine
from app.config.logging import setup_logging
from app.config.settings import settings
from jobs import health

scheduler_instance: AsyncIOScheduler | None = None


def enqueue_payout_reminder() -> None:
    """Hand the reminder over to a worker."""
    from jobs.tasks.payout_reminder import send_daily_payout_reminder

    send_daily_payout_reminder.send()
    logger.info("Daily payout reminder enqueued")


def create_scheduler() -> AsyncIOScheduler:
    scheduler = AsyncIOScheduler(timezone="UTC")
    scheduler.add_job(
        enqueue_payout_reminder,
        CronTrigger(hour=settings.payout_reminder_hour, minute=0, timezone="UTC"),
        id="daily_payout_reminder",
        replace_existing=True,
        misfire_grace_time=3600,
    )
    return scheduler


async def main() -> None:
    """Run the scheduler until cancelled."""
    global scheduler_instance

    setup_logging("logs/scheduler.log")

    scheduler_instance = create_scheduler()
    scheduler_instance.start()
    logger.info(
        f"Scheduler started, payout reminder at {settings.payout_reminder_hour:02d}:00 UTC"
    )

    health.register(scheduler_instance, async_engine)
    runner = await health.start_health_server(port=settings.health_check_port)

    try:
        await asyncio.Event().wait()
    finally:
        scheduler_instance.shutdown(wait=False)
        await health.stop_health_server(runner)
        await async_engine.dispose()
        logger.info("Scheduler stopped")


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Scheduler stopped by user (KeyboardInterrupt)")
    except Exception as e:
        logger.exception(f"Scheduler crashed: {e}")
        sys.exit(1)
