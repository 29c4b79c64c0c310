"""
Admin audit log repository.
"""

import json
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.admin_audit_log import AdminAuditLog
from app.repositories.base import BaseRepository


class AdminAuditLogRepository(BaseRepository[AdminAuditLog]):
    """Audit log repository. Insert only."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize audit log repository."""
        super().__init__(AdminAuditLog, session)

    async def record(
        self,
        action: str,
        table_name: str,
        record_id: int | None,
        new_value: dict[str, Any] | None = None,
        description: str | None = None,
        actor: str | None = None,
    ) -> AdminAuditLog:
        """
        Write an audit row.

        Args:
            action: Action name (e.g. payout_processed)
            table_name: Table the action changed
            record_id: Row the action changed
            new_value: Values written, stored as JSON
            description: Human readable summary
            actor: Operator handle

        Returns:
            Created audit row
        """
        return await self.create(
            action=action,
            table_name=table_name,
            record_id=record_id,
            new_value=json.dumps(new_value, default=str) if new_value else None,
            description=description,
            actor=actor,
        )
