"""
MatrixEntry model.

One 7-slot referral matrix per participant who opted in.
"""

from datetime import UTC, datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.config.business_constants import FILL_ORDER, MATRIX_SLOT_COUNT
from app.models.base import Base
from app.models.types import MoneyType


if TYPE_CHECKING:
    from app.models.matrix_slot import MatrixSlot
    from app.models.user import User


class MatrixEntry(Base):
    """
    MatrixEntry entity.

    Slot occupancy lives in matrix_slots rows; slot 1 is always the owner.
    The entry carries the state flags and payout fields:
    - is_active: eligible to receive placements
    - is_completed: slots 2-7 are all filled
    - payout_status: NULL until completion, then pending, then paid
    - version: bumped on every placement (optimistic concurrency)

    Attributes:
        id: Primary key
        user_id: Matrix owner
        campaign_id: Campaign purchase that opened the matrix
        payout_amount: Bonus configured when the matrix was created
        payout_method: Method used when the bonus was paid
        payout_handle: Destination handle the bonus was paid to
        payout_sent_at: When the bonus was settled
        created_at: Creation time (FIFO order)
        completed_at: When slot 7 of the tree was filled
    """

    __tablename__ = "matrix_entries"
    __table_args__ = (
        CheckConstraint(
            "payout_status IS NULL OR payout_status = 'pending' "
            "OR is_completed = true",
            name="check_matrix_paid_implies_completed",
        ),
        CheckConstraint(
            "payout_amount > 0", name="check_matrix_payout_positive"
        ),
        Index(
            "idx_matrix_entries_open",
            "is_active",
            "is_completed",
            "created_at",
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
    campaign_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("ad_campaigns.id", ondelete="SET NULL"),
        nullable=True,
    )

    # State
    is_active: Mapped[bool] = mapped_column(
        Boolean, default=True, nullable=False
    )
    is_completed: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )
    version: Mapped[int] = mapped_column(
        Integer, default=0, nullable=False
    )

    # Payout
    payout_amount: Mapped[Decimal] = mapped_column(
        MoneyType, nullable=False
    )
    payout_status: Mapped[str | None] = mapped_column(
        String(20), nullable=True, index=True
    )
    payout_method: Mapped[str | None] = mapped_column(
        String(50), nullable=True
    )
    payout_handle: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )
    payout_sent_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # Relationships
    owner: Mapped["User"] = relationship("User", lazy="selectin")
    slots: Mapped[list["MatrixSlot"]] = relationship(
        "MatrixSlot",
        back_populates="matrix",
        order_by="MatrixSlot.slot_index",
        lazy="selectin",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<MatrixEntry(id={self.id}, user_id={self.user_id}, "
            f"filled={self.filled_count}, completed={self.is_completed})>"
        )

    def slot_states(self) -> list[int | None]:
        """
        Ordered slot-state array.

        Returns:
            List of length 7; index 0 is slot 1. Each item is the
            participant id or None when the slot is empty.
        """
        states: list[int | None] = [None] * MATRIX_SLOT_COUNT
        for slot in self.slots:
            states[slot.slot_index - 1] = slot.participant_id
        return states

    def first_free_index(
        self, order: tuple[int, ...] = FILL_ORDER
    ) -> int | None:
        """
        First empty slot in the given fill order.

        Args:
            order: Slot indexes (1-based) to try, in order

        Returns:
            Slot index or None if every slot in the order is taken
        """
        states = self.slot_states()
        for index in order:
            if states[index - 1] is None:
                return index
        return None

    @property
    def filled_count(self) -> int:
        """Number of occupied slots including the owner slot."""
        return sum(1 for state in self.slot_states() if state is not None)

    @property
    def is_full(self) -> bool:
        """True when slots 2-7 are all occupied."""
        return self.first_free_index() is None
