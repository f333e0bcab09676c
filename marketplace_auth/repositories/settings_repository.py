"""Repository for the marketplace settings row."""

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace_auth.models.system_settings import SETTINGS_ID, SystemSettings


class SystemSettingsRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_or_create(self) -> SystemSettings:
        """Return the settings row, inserting the defaults if it is missing."""
        settings = await self.session.get(SystemSettings, SETTINGS_ID)
        if settings is not None:
            return settings

        settings = SystemSettings.with_defaults()
        try:
            async with self.session.begin_nested():
                self.session.add(settings)
        except IntegrityError:
            # A concurrent first read inserted it.
            existing = await self.session.get(SystemSettings, SETTINGS_ID)
            if existing is None:
                raise
            return existing
        return settings

    async def save(self, settings: SystemSettings) -> SystemSettings:
        self.session.add(settings)
        await self.session.flush()
        return settings
