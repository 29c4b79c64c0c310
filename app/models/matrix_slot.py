"""
MatrixSlot model.

One occupied slot of a matrix. Empty slots have no row.
"""

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base


if TYPE_CHECKING:
    from app.models.matrix_entry import MatrixEntry


class MatrixSlot(Base):
    """
    MatrixSlot entity.

    participant_id is unique across the whole table, so a participant
    occupies at most one slot in the system (their own slot 1 included).
    """

    __tablename__ = "matrix_slots"
    __table_args__ = (
        UniqueConstraint(
            "matrix_id", "slot_index", name="uq_matrix_slots_matrix_slot"
        ),
        UniqueConstraint(
            "participant_id", name="uq_matrix_slots_participant"
        ),
        CheckConstraint(
            "slot_index >= 1 AND slot_index <= 7",
            name="check_matrix_slot_index_range",
        ),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    matrix_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("matrix_entries.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    slot_index: Mapped[int] = mapped_column(Integer, nullable=False)
    participant_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    was_auto_placed: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )
    placed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )

    matrix: Mapped["MatrixEntry"] = relationship(
        "MatrixEntry", back_populates="slots"
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<MatrixSlot(matrix_id={self.matrix_id}, "
            f"slot={self.slot_index}, participant_id={self.participant_id})>"
        )
