"""
Partner model.

Profit-sharing partner. The balance is never stored; it is derived from
partner_transactions.
"""

from datetime import UTC, datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, CheckConstraint, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base
from app.models.types import PercentType


if TYPE_CHECKING:
    from app.models.partner_transaction import PartnerTransaction


class Partner(Base):
    """Partner entitled to a percentage of allocated profit."""

    __tablename__ = "partners"
    __table_args__ = (
        CheckConstraint(
            "percentage >= 0 AND percentage <= 100",
            name="check_partner_percentage_range",
        ),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    percentage: Mapped[Decimal] = mapped_column(PercentType, nullable=False)
    is_active: Mapped[bool] = mapped_column(
        Boolean, default=True, nullable=False
    )
    is_owner: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )
    payment_method: Mapped[str | None] = mapped_column(
        String(50), nullable=True
    )
    payment_handle: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )

    transactions: Mapped[list["PartnerTransaction"]] = relationship(
        "PartnerTransaction", back_populates="partner", lazy="noload"
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<Partner(id={self.id}, name={self.name!r}, "
            f"percentage={self.percentage}, active={self.is_active})>"
        )
