"""
Application factory.

Each request gets its own AsyncSession; domain errors map to HTTP
statuses in one middleware.
"""

from collections.abc import Awaitable, Callable

from aiohttp import web
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.api.helpers import PUBLISHER, SESSION_MAKER
from app.api.routes import finance, health, matrices, partners, payouts
from app.services.events import EventPublisher, get_default_publisher
from app.utils.exceptions import (
    ConcurrencyConflictError,
    InvariantViolationError,
    MatrixLedgerError,
    NotFoundError,
    ValidationError,
)


Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]


def error_status(error: MatrixLedgerError) -> int:
    """
    HTTP status for a domain error.

    Args:
        error: Domain error

    Returns:
        400 for validation, 404 for missing entities, 409 for invariant
        violations and conflicts
    """
    if isinstance(error, ValidationError):
        return 400
    if isinstance(error, NotFoundError):
        return 404
    if isinstance(error, (InvariantViolationError, ConcurrencyConflictError)):
        return 409
    return 400


@web.middleware
async def error_middleware(request: web.Request, handler: Handler) -> web.StreamResponse:
    """Render domain errors as JSON."""
    try:
        return await handler(request)
    except MatrixLedgerError as e:
        status = error_status(e)
        logger.info(
            f"Request rejected: {e.message}",
            extra={
                "path": request.path,
                "status": status,
                "error_type": type(e).__name__,
            },
        )
        return web.json_response(
            {"error": type(e).__name__, "message": e.message}, status=status
        )


@web.middleware
async def session_middleware(request: web.Request, handler: Handler) -> web.StreamResponse:
    """Open one session per request."""
    if not request.path.startswith("/api/"):
        return await handler(request)
    async with request.app[SESSION_MAKER]() as session:
        request["session"] = session
        return await handler(request)


def create_app(
    session_maker: async_sessionmaker[AsyncSession] | None = None,
    publisher: EventPublisher | None = None,
) -> web.Application:
    """
    Build the API application.

    Args:
        session_maker: Session factory (shared engine by default)
        publisher: Event publisher (dramatiq by default)

    Returns:
        aiohttp Application
    """
    if session_maker is None:
        from app.config.database import async_session_maker

        session_maker = async_session_maker

    app = web.Application(middlewares=[error_middleware, session_middleware])
    app[SESSION_MAKER] = session_maker
    app[PUBLISHER] = publisher or get_default_publisher()

    app.add_routes(matrices.routes)
    app.add_routes(payouts.routes)
    app.add_routes(partners.routes)
    app.add_routes(finance.routes)
    app.add_routes(health.routes)
    return app
