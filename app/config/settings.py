"""
Application settings.

Loads configuration from environment variables using pydantic-settings.
"""

from decimal import Decimal

from loguru import logger
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str
    database_echo: bool = False

    # Redis (for Dramatiq)
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_password: str | None = None
    redis_db: int = 0

    # Application
    environment: str = "production"
    debug: bool = False
    log_level: str = "INFO"
    api_host: str = "0.0.0.0"
    api_port: int = Field(
        default=8000, ge=1, le=65535, description="Admin API HTTP server port"
    )
    health_check_port: int = Field(
        default=8080, ge=1, le=65535, description="Health check HTTP server port"
    )

    # Matrix
    matrix_payout_default: Decimal = Field(
        default=Decimal("200.00"),
        gt=0,
        description="Bonus paid to the owner of a completed matrix",
    )

    # Payment processor fees applied to campaign revenue
    processing_fee_percent: Decimal = Field(
        default=Decimal("2.9"),
        ge=0,
        le=100,
        description="Percentage fee charged on gross campaign revenue",
    )
    processing_fee_fixed: Decimal = Field(
        default=Decimal("0.30"),
        ge=0,
        description="Fixed fee charged per paid campaign",
    )

    # Outbound email (Resend-compatible HTTP API)
    email_api_url: str = "https://api.resend.com/emails"
    email_api_key: str | None = None
    email_from: str = "Promo Matrix <noreply@example.com>"
    email_test_mode: bool = False
    email_test_recipient: str | None = None
    email_timeout_seconds: float = Field(
        default=10.0, gt=0, le=60, description="Email API request timeout"
    )

    # Admin
    admin_emails: str = ""  # Comma-separated list
    payout_reminder_hour: int = Field(
        default=9, ge=0, le=23, description="UTC hour of the daily payout reminder"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @model_validator(mode='after')
    def validate_email_test_mode(self) -> 'Settings':
        """Test mode needs somewhere to redirect mail to."""
        if self.email_test_mode and not self.email_test_recipient:
            raise ValueError(
                'EMAIL_TEST_RECIPIENT is required when EMAIL_TEST_MODE is enabled.'
            )
        return self

    @model_validator(mode='after')
    def validate_production(self) -> 'Settings':
        """Validate production-specific requirements."""
        if self.environment == 'production':
            # DEBUG must be False in production
            if self.debug:
                raise ValueError(
                    'DEBUG must be False in production environment. '
                    'Set DEBUG=false in your .env file.'
                )

            if not self.email_api_key:
                logger.warning(
                    'EMAIL_API_KEY is not set. '
                    'Payout and matrix emails will be skipped.'
                )

        return self

    @field_validator('database_url')
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        """Validate database URL."""
        if not v.startswith(
            ('postgresql://', 'postgresql+asyncpg://', 'sqlite+aiosqlite://')
        ):
            raise ValueError(
                'DATABASE_URL must start with postgresql://, '
                'postgresql+asyncpg:// or sqlite+aiosqlite://'
            )
        if v.startswith('postgresql://'):
            # Async engine needs the asyncpg driver
            return v.replace('postgresql://', 'postgresql+asyncpg://', 1)
        return v

    def get_admin_emails(self) -> list[str]:
        """Parse admin emails from comma-separated string."""
        if not self.admin_emails:
            return []

        result = []
        for email in self.admin_emails.split(","):
            email_stripped = email.strip()
            if not email_stripped:
                continue
            if "@" not in email_stripped:
                logger.warning(f"Invalid admin email: {email_stripped}")
                continue
            result.append(email_stripped)
        return result


# Global settings instance
settings = Settings()
