"""
User repository.

Data access layer for User model.
"""

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import User
from app.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """User repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize user repository."""
        super().__init__(User, session)

    async def get_by_handle(self, handle: str) -> User | None:
        """
        Resolve a referrer handle to a user.

        Matches username or referral code, case-insensitively. A leading
        "@" is ignored.

        Args:
            handle: Username or referral code as typed by the participant

        Returns:
            User or None if the handle does not resolve
        """
        normalized = handle.strip().lstrip("@").lower()
        if not normalized:
            return None

        stmt = (
            select(User)
            .where(
                or_(
                    func.lower(User.username) == normalized,
                    func.lower(User.referral_code) == normalized,
                )
            )
            .order_by(User.id)
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()
