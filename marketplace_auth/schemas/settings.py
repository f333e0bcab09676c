"""Pydantic schemas for the marketplace settings."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from marketplace_auth.models.system_settings import BackupFrequency, Theme


class SystemSettingsUpdate(BaseModel):
    """Partial update; omitted fields keep their stored value."""

    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    site_name: str | None = Field(default=None, min_length=1, max_length=255)
    maintenance_mode: bool | None = None
    email_notifications: bool | None = None
    backup_frequency: BackupFrequency | None = None
    analytics_enabled: bool | None = None
    theme: Theme | None = None
    last_backup_at: datetime | None = None
    custom_settings: dict[str, Any] | None = None


class SystemSettingsResponse(BaseModel):
    site_name: str
    maintenance_mode: bool
    email_notifications: bool
    backup_frequency: str
    analytics_enabled: bool
    theme: str
    last_backup_at: datetime | None
    custom_settings: dict[str, Any] | None
    updated_at: datetime | None

    model_config = {"from_attributes": True}
