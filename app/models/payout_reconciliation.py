"""
PayoutReconciliation model.

Operator check of system payout totals for a period against a verified
total from the payment provider.
"""

from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base
from app.models.types import MoneyType


class PayoutReconciliation(Base):
    """Payout period reconciliation."""

    __tablename__ = "payout_reconciliations"

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    period_label: Mapped[str] = mapped_column(String(100), nullable=False)
    period_start: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    period_end: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    payment_method: Mapped[str | None] = mapped_column(
        String(50), nullable=True
    )
    system_total: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    verified_total: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    discrepancy_amount: Mapped[Decimal] = mapped_column(
        MoneyType, nullable=False
    )
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    resolution_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    resolved_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_by: Mapped[str | None] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<PayoutReconciliation(id={self.id}, period={self.period_label!r}, "
            f"status={self.status})>"
        )
