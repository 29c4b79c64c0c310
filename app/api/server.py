"""
API server entry point.

Run with: python -m app.api.server
"""

from aiohttp import web
from loguru import logger

from app.api.app import create_app
from app.config.logging import setup_logging
from app.config.settings import settings


def main() -> None:
    """Run the admin API until interrupted."""
    setup_logging()
    logger.info(
        f"Starting admin API on {settings.api_host}:{settings.api_port} "
        f"(environment={settings.environment})"
    )
    web.run_app(
        create_app(),
        host=settings.api_host,
        port=settings.api_port,
        print=None,
    )


if __name__ == "__main__":
    main()
