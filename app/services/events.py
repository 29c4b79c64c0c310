"""
Domain events.

Side effects (in-app notifications, emails) are collected as events while
a transaction runs and published only after it commits. Publishing hands
them to dramatiq workers; a failure to publish is logged and swallowed.
"""

import asyncio
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol

from loguru import logger

from app.models.enums import NotificationType


@dataclass(frozen=True)
class NotificationEvent:
    """In-app notification for a user."""

    user_id: int
    notification_type: NotificationType
    title: str
    message: str
    reference_id: int | None = None


@dataclass(frozen=True)
class EmailEvent:
    """Template email to a user."""

    user_id: int
    template: str
    context: dict[str, Any] = field(default_factory=dict)


DomainEvent = NotificationEvent | EmailEvent


class EventPublisher(Protocol):
    """Publishes committed domain events."""

    async def publish(self, events: Sequence[DomainEvent]) -> None:
        """Publish events; must not raise."""
        ...


class DramatiqEventPublisher:
    """Publishes events as dramatiq messages."""

    async def publish(self, events: Sequence[DomainEvent]) -> None:
        """
        Enqueue one message per event.

        Args:
            events: Events collected by a committed transaction
        """
        for event in events:
            try:
                await asyncio.to_thread(self._send, event)
            except Exception as e:
                logger.warning(
                    "Failed to publish event",
                    extra={
                        "event": type(event).__name__,
                        "user_id": event.user_id,
                        "error": str(e),
                    },
                )

    @staticmethod
    def _send(event: DomainEvent) -> None:
        # Imported here so the core never needs a broker at import time
        from jobs.tasks.notification_delivery import (
            deliver_notification,
            send_user_email,
        )

        if isinstance(event, NotificationEvent):
            deliver_notification.send(
                event.user_id,
                event.notification_type.value,
                event.title,
                event.message,
                event.reference_id,
            )
        else:
            send_user_email.send(event.user_id, event.template, event.context)


def get_default_publisher() -> EventPublisher:
    """Publisher used when a service is built without one."""
    return DramatiqEventPublisher()
