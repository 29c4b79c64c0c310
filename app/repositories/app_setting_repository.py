"""
App setting repository.

Key/value runtime settings.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.app_setting import AppSetting
from app.repositories.base import BaseRepository


class AppSettingRepository(BaseRepository[AppSetting]):
    """Runtime settings repository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize app setting repository."""
        super().__init__(AppSetting, session)

    async def get_value(self, key: str) -> str | None:
        """
        Get a setting value.

        Args:
            key: Setting key

        Returns:
            Stored value or None if unset
        """
        setting = await self.session.get(AppSetting, key)
        return setting.value if setting else None

    async def set_value(self, key: str, value: str) -> AppSetting:
        """
        Insert or update a setting.

        Args:
            key: Setting key
            value: New value

        Returns:
            Stored setting
        """
        setting = await self.session.get(AppSetting, key)
        if setting is None:
            setting = AppSetting(key=key, value=value)
            self.session.add(setting)
        else:
            setting.value = value
        await self.session.flush()
        return setting
