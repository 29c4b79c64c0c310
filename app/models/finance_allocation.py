"""
FinanceAllocation model.

Named set-aside percentage of profit (taxes, reserves, ...).
"""

from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import Boolean, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base
from app.models.types import PercentType


class FinanceAllocation(Base):
    """
    Set-aside percentage.

    Rows with is_auto_calculated = false reduce the owner-retained
    percentage; auto-calculated rows are informational.
    """

    __tablename__ = "finance_allocations"

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    percentage: Mapped[Decimal] = mapped_column(PercentType, nullable=False)
    is_auto_calculated: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<FinanceAllocation(id={self.id}, name={self.name!r}, "
            f"percentage={self.percentage})>"
        )
