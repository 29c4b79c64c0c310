"""Health check routes of the API process."""

from aiohttp import web
from loguru import logger
from sqlalchemy import text

from app.api.helpers import SESSION_MAKER


routes = web.RouteTableDef()


@routes.get("/health")
async def health(request: web.Request) -> web.Response:
    """Database reachability."""
    try:
        async with request.app[SESSION_MAKER]() as session:
            await session.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(f"Health check failed: {e}")
        return web.json_response(
            {"status": "unhealthy", "database": False}, status=503
        )
    return web.json_response({"status": "healthy", "database": True})


@routes.get("/liveness")
async def liveness(request: web.Request) -> web.Response:
    return web.json_response({"status": "alive", "alive": True})
