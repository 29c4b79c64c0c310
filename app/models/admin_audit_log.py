"""
AdminAuditLog model.

Record of operator actions on financial data.
"""

from datetime import UTC, datetime

from sqlalchemy import DateTime, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base


class AdminAuditLog(Base):
    """Operator action audit row."""

    __tablename__ = "admin_audit_log"
    __table_args__ = (
        Index("idx_admin_audit_log_table_record", "table_name", "record_id"),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    actor: Mapped[str | None] = mapped_column(String(255), nullable=True)
    action: Mapped[str] = mapped_column(String(100), nullable=False)
    table_name: Mapped[str] = mapped_column(String(100), nullable=False)
    record_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    new_value: Mapped[str | None] = mapped_column(
        Text, nullable=True, comment="JSON snapshot of the written values"
    )
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<AdminAuditLog(id={self.id}, action={self.action}, "
            f"table={self.table_name}, record_id={self.record_id})>"
        )
