"""
Worker entry point.

Run with: dramatiq jobs.worker
"""

from jobs.broker import broker  # noqa: F401
from jobs.tasks import notification_delivery, payout_reminder  # noqa: F401
