"""
Health check server for the scheduler process.

/health reports scheduler jobs and database reachability, /liveness only
confirms the process answers.
"""

import asyncio

from aiohttp import web
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from loguru import logger
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine

_scheduler: AsyncIOScheduler | None = None
_engine: AsyncEngine | None = None


def register(scheduler: AsyncIOScheduler | None, engine: AsyncEngine | None) -> None:
    """
    Register the objects the health endpoint inspects.

    Args:
        scheduler: Running scheduler, if any
        engine: Database engine to ping
    """
    global _scheduler, _engine
    _scheduler = scheduler
    _engine = engine
    logger.info("Health checks registered")


async def _database_ok() -> bool:
    if _engine is None:
        return False
    try:
        async with _engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.warning(f"Database health check failed: {e}")
        return False


async def health_handler(request: web.Request) -> web.Response:
    """Report scheduler and database state."""
    database_ok = await _database_ok()
    scheduler_running = bool(_scheduler and _scheduler.running)

    jobs = []
    if _scheduler is not None:
        jobs = [
            {
                "id": job.id,
                "next_run_time": (
                    job.next_run_time.isoformat() if job.next_run_time else None
                ),
            }
            for job in _scheduler.get_jobs()
        ]

    healthy = database_ok and (_scheduler is None or scheduler_running)
    return web.json_response(
        {
            "status": "healthy" if healthy else "unhealthy",
            "database": database_ok,
            "scheduler_running": scheduler_running,
            "jobs": jobs,
        },
        status=200 if healthy else 503,
    )


async def liveness_handler(request: web.Request) -> web.Response:
    """Liveness check endpoint."""
    return web.json_response({"status": "alive", "alive": True})


def create_health_app() -> web.Application:
    app = web.Application()
    app.router.add_get("/health", health_handler)
    app.router.add_get("/liveness", liveness_handler)
    return app


async def start_health_server(
    host: str = "0.0.0.0",
    port: int = 8080,
) -> web.AppRunner:
    """
    Start health check server.

    Args:
        host: Host to bind to
        port: Port to bind to

    Returns:
        AppRunner for cleanup
    """
    runner = web.AppRunner(create_health_app())
    await runner.setup()
    site = web.TCPSite(runner, host, port)
    await site.start()

    logger.info(f"Health check server started on {host}:{port}")
    return runner


async def stop_health_server(runner: web.AppRunner, timeout: int = 5) -> None:
    """Stop health check server gracefully."""
    logger.info("Stopping health check server...")
    try:
        await asyncio.wait_for(runner.cleanup(), timeout=timeout)
    except TimeoutError:
        logger.warning(f"Health check server cleanup timed out after {timeout}s")
