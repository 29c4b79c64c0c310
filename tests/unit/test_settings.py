"""
Unit tests for settings validation.

Tests cover:
- Database URL schemes
- Production checks
- Admin email parsing
"""

import pytest

from app.config.settings import Settings


def make_settings(**overrides) -> Settings:
    values = {
        "database_url": "sqlite+aiosqlite:///:memory:",
        "environment": "test",
    }
    values.update(overrides)
    return Settings(**values)


class TestDatabaseUrl:
    """Test DATABASE_URL validation."""

    def test_plain_postgres_gets_async_driver(self):
        """Test postgresql:// is rewritten for asyncpg."""
        settings = make_settings(database_url="postgresql://u:p@db/ledger")
        assert settings.database_url == "postgresql+asyncpg://u:p@db/ledger"

    def test_asyncpg_kept(self):
        """Test postgresql+asyncpg:// is kept."""
        settings = make_settings(database_url="postgresql+asyncpg://u:p@db/ledger")
        assert settings.database_url == "postgresql+asyncpg://u:p@db/ledger"

    def test_unsupported_scheme(self):
        """Test other schemes are rejected."""
        with pytest.raises(ValueError):
            make_settings(database_url="mysql://u:p@db/ledger")


class TestProduction:
    """Test production-only checks."""

    def test_debug_rejected_in_production(self):
        """Test DEBUG=true fails in production."""
        with pytest.raises(ValueError):
            make_settings(environment="production", debug=True)

    def test_production_without_email_key_loads(self):
        """Test missing email key only warns."""
        settings = make_settings(environment="production", email_api_key=None)
        assert settings.email_api_key is None


class TestAdminEmails:
    """Test ADMIN_EMAILS parsing."""

    def test_parses_list(self):
        """Test comma-separated list with blanks and invalid entries."""
        settings = make_settings(admin_emails=" a@example.com, ,nope, b@example.com ")
        assert settings.get_admin_emails() == ["a@example.com", "b@example.com"]

    def test_empty(self):
        """Test empty value."""
        assert make_settings(admin_emails="").get_admin_emails() == []


class TestDefaults:
    """Test business defaults."""

    def test_matrix_and_fee_defaults(self):
        """Test payout and fee defaults."""
        settings = make_settings()
        assert str(settings.matrix_payout_default) == "200.00"
        assert str(settings.processing_fee_percent) == "2.9"
        assert str(settings.processing_fee_fixed) == "0.30"
