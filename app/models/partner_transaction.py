"""
PartnerTransaction model.

Signed ledger line of a partner: allocation (+) or withdrawal (-).
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
    from app.models.partner import Partner


class PartnerTransaction(Base):
    """
    PartnerTransaction entity.

    amount is always positive; the sign comes from type.
    """

    __tablename__ = "partner_transactions"
    __table_args__ = (
        CheckConstraint(
            "amount > 0", name="check_partner_transaction_amount_positive"
        ),
        CheckConstraint(
            "type IN ('allocation', 'withdrawal')",
            name="check_partner_transaction_type",
        ),
        Index("idx_partner_transactions_partner_type", "partner_id", "type"),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    partner_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("partners.id", ondelete="CASCADE"),
        nullable=False,
    )
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    amount: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
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
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )

    partner: Mapped["Partner"] = relationship(
        "Partner", back_populates="transactions"
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<PartnerTransaction(id={self.id}, partner_id={self.partner_id}, "
            f"type={self.type}, amount={self.amount})>"
        )

    @property
    def signed_amount(self) -> Decimal:
        """Amount with the ledger sign applied."""
        if self.type == "withdrawal":
            return -self.amount
        return self.amount
