"""
PayoutQueueEntry model.

Outstanding monetary obligation awaiting manual settlement.
"""

from datetime import UTC, datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base
from app.models.types import MoneyType


if TYPE_CHECKING:
    from app.models.user import User


class PayoutQueueEntry(Base):
    """
    PayoutQueueEntry entity.

    Created by the completion detector (matrix bonus) or by other reward
    sources (weekly prize, game payout). Its only terminal transition is
    deletion when an operator settles it into payout_history.

    Attributes:
        id: Primary key
        user_id: Beneficiary
        amount: Amount owed; paid in full or not at all
        reason: Human readable reason shown to operators
        reference_type: matrix, weekly_prize or game
        reference_id: Id of the originating matrix / prize / game
        payment_method: Method snapshot at queue time
        payment_handle: Handle snapshot at queue time
        status: Always pending while the row exists
        queued_at: Queue time (oldest first)
    """

    __tablename__ = "payout_queue"
    __table_args__ = (
        CheckConstraint("amount > 0", name="check_payout_queue_amount_positive"),
        Index("idx_payout_queue_queued_at", "queued_at"),
        Index(
            "idx_payout_queue_reference", "reference_type", "reference_id"
        ),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
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
    status: Mapped[str] = mapped_column(
        String(20), default="pending", nullable=False
    )
    queued_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )

    user: Mapped["User"] = relationship("User", lazy="selectin")

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<PayoutQueueEntry(id={self.id}, user_id={self.user_id}, "
            f"amount={self.amount}, ref={self.reference_type}:{self.reference_id})>"
        )
