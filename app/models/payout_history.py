"""
PayoutHistory model.

Append-only record of settled payouts. Never updated after insert.
"""

from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import (
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base
from app.models.types import MoneyType


class PayoutHistory(Base):
    """
    PayoutHistory entity.

    Immutable copy of a settled queue entry plus confirmation metadata.
    queue_entry_id is unique so one queue entry settles exactly once.
    """

    __tablename__ = "payout_history"
    __table_args__ = (
        Index("idx_payout_history_paid_at", "paid_at"),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    queue_entry_id: Mapped[int] = mapped_column(
        Integer, nullable=False, unique=True
    )
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    amount: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    reason: Mapped[str] = mapped_column(Text, nullable=False)
    reference_type: Mapped[str] = mapped_column(String(20), nullable=False)
    reference_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    payment_method: Mapped[str | None] = mapped_column(
        String(50), nullable=True
    )
    payment_handle: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )
    confirmation_number: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    queued_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    paid_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )
    paid_by: Mapped[str | None] = mapped_column(String(255), nullable=True)

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<PayoutHistory(id={self.id}, queue_entry_id={self.queue_entry_id}, "
            f"amount={self.amount}, paid_at={self.paid_at})>"
        )
