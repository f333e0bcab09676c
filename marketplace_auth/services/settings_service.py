"""Service layer for the marketplace-wide settings."""

import enum

from marketplace_auth.models.account import Account
from marketplace_auth.models.audit_log import AuditLevel
from marketplace_auth.models.system_settings import SystemSettings
from marketplace_auth.repositories.base import SettingsStore
from marketplace_auth.schemas.settings import SystemSettingsUpdate
from marketplace_auth.services import audit_service
from marketplace_auth.services.audit_service import AuditTrail
from marketplace_auth.utils.logging import get_logger

logger = get_logger(__name__)

# Settings an explicit null resets; a null for any other field is ignored.
CLEARABLE_FIELDS = {"last_backup_at", "custom_settings"}


class SystemSettingsService:
    def __init__(self, settings: SettingsStore, audit: AuditTrail) -> None:
        self.settings = settings
        self.audit = audit

    async def get(self) -> SystemSettings:
        return await self.settings.get_or_create()

    async def update(self, actor: Account, data: SystemSettingsUpdate) -> SystemSettings:
        """Apply the fields present in ``data``.

        Only changed fields are written. A failed audit write propagates.
        """
        settings = await self.settings.get_or_create()
        changed: list[str] = []
        for field, value in data.model_dump(exclude_unset=True).items():
            if value is None and field not in CLEARABLE_FIELDS:
                continue
            if isinstance(value, enum.Enum):
                value = value.value
            if getattr(settings, field) != value:
                setattr(settings, field, value)
                changed.append(field)
        if not changed:
            return settings

        settings = await self.settings.save(settings)
        logger.info("System settings %s updated by %s", changed, actor.id)
        await self.audit.record(
            AuditLevel.info,
            "System settings updated",
            actor_id=actor.id,
            action=audit_service.SETTINGS_UPDATE,
            details={"fields": changed},
        )
        return settings
