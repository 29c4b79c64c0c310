#!/usr/bin/env python3
"""Initialize database tables and the cash position row."""

import asyncio
import sys

from loguru import logger
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from app.config.settings import settings
from app.models import Base
from app.repositories.cash_repository import CashPositionRepository

# Configure logger for script
logger.remove()
logger.add(sys.stderr, level="INFO")


async def init_database() -> None:
    """Create all database tables."""
    logger.info("Connecting to database...")
    engine = create_async_engine(settings.database_url, echo=False)

    async with engine.begin() as conn:
        logger.info("Creating tables (checkfirst=True)...")
        await conn.run_sync(
            Base.metadata.create_all,
            checkfirst=True
        )

    session_maker = async_sessionmaker(engine, expire_on_commit=False)
    async with session_maker() as session:
        position = await CashPositionRepository(session).get_or_create()
        await session.commit()
        logger.info(f"Cash position ready (starting balance {position.starting_balance})")

    await engine.dispose()
    logger.success("Database tables created successfully!")


if __name__ == "__main__":
    asyncio.run(init_database())
