"""
CashReconciliation model.

Immutable log of every cash reconciliation, so discrepancies folded into
the starting balance stay reconstructable.
"""

from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base
from app.models.types import MoneyType


class CashReconciliation(Base):
    """One reconcile() call."""

    __tablename__ = "cash_reconciliations"

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    calculated_balance: Mapped[Decimal] = mapped_column(
        MoneyType, nullable=False
    )
    observed_balance: Mapped[Decimal] = mapped_column(
        MoneyType, nullable=False
    )
    difference: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    previous_starting_balance: Mapped[Decimal] = mapped_column(
        MoneyType, nullable=False
    )
    new_starting_balance: Mapped[Decimal] = mapped_column(
        MoneyType, nullable=False
    )
    reconciled_by: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )
    reconciled_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<CashReconciliation(id={self.id}, difference={self.difference})>"
        )
