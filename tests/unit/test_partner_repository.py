"""
Unit tests for partner row locking.

Statements are compiled against the PostgreSQL dialect, since SQLite
drops FOR UPDATE.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.dialects import postgresql

from app.repositories.partner_repository import PartnerRepository


def compiled_sql(session: AsyncMock) -> str:
    stmt = session.execute.call_args.args[0]
    return str(stmt.compile(dialect=postgresql.dialect()))


@pytest.fixture
def session():
    """Session mock whose execute returns no rows."""
    result = MagicMock()
    result.scalars.return_value.all.return_value = []
    mock = AsyncMock()
    mock.execute = AsyncMock(return_value=result)
    return mock


class TestListActive:
    """Test active partner lookup."""

    @pytest.mark.asyncio
    async def test_plain_read_takes_no_lock(self, session):
        """Test the default read."""
        assert await PartnerRepository(session).list_active() == []

        sql = compiled_sql(session)
        assert "FOR UPDATE" not in sql
        assert "ORDER BY partners.id" in sql

    @pytest.mark.asyncio
    async def test_for_update_locks_in_id_order(self, session):
        """Test rows are locked in a stable order."""
        await PartnerRepository(session).list_active(for_update=True)

        sql = compiled_sql(session)
        assert sql.rstrip().endswith("FOR UPDATE")
        assert "ORDER BY partners.id" in sql
