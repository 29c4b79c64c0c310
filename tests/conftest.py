"""Pytest configuration and shared fixtures for all tests."""

import os
import sys
from pathlib import Path

# Minimal environment for Settings
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("EMAIL_TEST_MODE", "false")

# Add project root to PYTHONPATH
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.models import AdCampaign, Base, Expense, Partner, User


class RecordingPublisher:
    """Event publisher that keeps published events for assertions."""

    def __init__(self) -> None:
        self.events = []

    async def publish(self, events) -> None:
        self.events.extend(events)

    def of_type(self, event_type):
        return [event for event in self.events if isinstance(event, event_type)]


@pytest_asyncio.fixture
async def engine(tmp_path):
    """SQLite database with the full schema."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'ledger.db'}")

    # pysqlite's own transaction handling breaks SAVEPOINT; emit BEGIN ourselves
    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    """Session factory bound to the test database."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture
async def session(session_maker):
    """Database session for one test."""
    async with session_maker() as session:
        yield session


@pytest.fixture
def publisher():
    """Recording event publisher."""
    return RecordingPublisher()


@pytest.fixture
def make_user(session):
    """Factory creating committed users."""
    counter = {"n": 0}

    async def _make_user(
        username: str | None = None,
        email: str | None = None,
        payment_method: str | None = "venmo",
        payment_handle: str | None = "@payme",
        referral_code: str | None = None,
    ) -> User:
        counter["n"] += 1
        user = User(
            username=username or f"user{counter['n']}",
            email=email,
            first_name=(username or f"user{counter['n']}").title(),
            payment_method=payment_method,
            payment_handle=payment_handle,
            referral_code=referral_code,
        )
        session.add(user)
        await session.commit()
        return user

    return _make_user


@pytest.fixture
def make_partner(session):
    """Factory creating committed partners."""

    async def _make_partner(
        name: str,
        percentage: str,
        is_active: bool = True,
        is_owner: bool = False,
    ) -> Partner:
        partner = Partner(
            name=name,
            percentage=Decimal(percentage),
            is_active=is_active,
            is_owner=is_owner,
            payment_method="zelle",
            payment_handle=f"{name.lower()}@example.com",
        )
        session.add(partner)
        await session.commit()
        return partner

    return _make_partner


@pytest.fixture
def add_revenue(session):
    """Factory recording paid campaigns and expenses."""

    async def _add_revenue(
        user: User,
        amounts: list[str],
        expenses: list[str] | None = None,
    ) -> None:
        for amount in amounts:
            session.add(
                AdCampaign(user_id=user.id, name="Campaign", amount_paid=Decimal(amount))
            )
        for amount in expenses or []:
            session.add(Expense(description="Hosting", amount=Decimal(amount)))
        await session.commit()

    return _add_revenue


@pytest.fixture
def mock_session():
    """Mock AsyncSession for tests without a database."""
    session = AsyncMock()
    session.execute = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    session.refresh = AsyncMock()
    return session


@pytest.fixture
def mock_email_client():
    """Mock EmailClient."""
    client = AsyncMock()
    client.send = AsyncMock(return_value=True)
    return client
