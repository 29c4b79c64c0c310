"""
User model.

Minimal participant record written by the registration workflow.
"""

from datetime import UTC, datetime

from sqlalchemy import Boolean, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base


class User(Base):
    """User model - registered participants and advertisers."""

    __tablename__ = "users"

    # Primary key
    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )

    # Identity
    username: Mapped[str | None] = mapped_column(
        String(255), nullable=True, unique=True, index=True
    )
    referral_code: Mapped[str | None] = mapped_column(
        String(20), nullable=True, unique=True, index=True
    )
    email: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )
    first_name: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )

    # Preferred payout destination (e.g. "venmo" / "@handle")
    payment_method: Mapped[str | None] = mapped_column(
        String(50), nullable=True
    )
    payment_handle: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean, default=True, nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )

    def __repr__(self) -> str:
        """String representation."""
        return f"<User(id={self.id}, username={self.username!r})>"

    @property
    def display_name(self) -> str:
        """Name used in emails and notifications."""
        return self.first_name or self.username or f"user {self.id}"
