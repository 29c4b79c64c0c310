"""
CashPosition model.

Single row holding the persisted overrides of the cash balance. The
calculated balance itself is derived on every read.
"""

from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import DateTime, Integer
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base
from app.models.types import MoneyType


class CashPosition(Base):
    """Starting and last observed bank balance."""

    __tablename__ = "cash_position"

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    starting_balance: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
    )
    actual_balance: Mapped[Decimal | None] = mapped_column(
        MoneyType, nullable=True
    )
    last_verified_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False,
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<CashPosition(starting={self.starting_balance}, "
            f"actual={self.actual_balance})>"
        )
