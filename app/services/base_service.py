"""
Base service class.

Provides common functionality for all service classes including session
management, event publishing and the transaction decorator.
"""

import functools
from collections.abc import Callable, Sequence
from typing import Any, TypeVar

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.services.events import DomainEvent, EventPublisher, get_default_publisher


# Type variable for generic decorator return types
T = TypeVar("T")


class BaseService:
    """
    Base service class.

    Provides common functionality for all service classes:
    - Session management
    - Logging with bound service context
    - Publishing of committed domain events
    """

    def __init__(
        self,
        session: AsyncSession,
        publisher: EventPublisher | None = None,
    ) -> None:
        """
        Initialize base service.

        Args:
            session: Async database session
            publisher: Event publisher (dramatiq by default)
        """
        self.session = session
        self.publisher = publisher or get_default_publisher()
        self.logger = logger.bind(service=self.__class__.__name__)

    async def publish(self, events: Sequence[DomainEvent]) -> None:
        """
        Publish events of a committed transaction.

        Never raises: side-effect failures must not reach the caller.

        Args:
            events: Events to publish
        """
        if not events:
            return
        try:
            await self.publisher.publish(events)
        except Exception as e:
            self.logger.warning(
                "Event publishing failed",
                extra={"events": len(events), "error": str(e)},
            )


def transaction(func: Callable[..., T]) -> Callable[..., T]:
    """
    Decorator to wrap method in transaction with automatic commit/rollback.

    Commits on success, rolls back on exception and re-raises.

    Usage:
        @transaction
        async def _settle(self, ...):
            # Your code here
            pass

    Args:
        func: Async method to wrap

    Returns:
        Wrapped async method
    """
    @functools.wraps(func)
    async def wrapper(self: BaseService, *args: Any, **kwargs: Any) -> Any:
        try:
            result = await func(self, *args, **kwargs)
            await self.session.commit()
            return result
        except Exception as e:
            await self.session.rollback()
            self.logger.info(
                f"Rollback performed in {func.__name__}",
                extra={
                    "error": str(e),
                    "error_type": type(e).__name__,
                    "function": func.__name__,
                },
            )
            raise

    return wrapper
