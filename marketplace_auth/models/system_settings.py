"""Marketplace-wide settings, stored as a single row."""

import enum
from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Boolean, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from marketplace_auth.models.base import Base, TimestampMixin

SETTINGS_ID = "global"


class BackupFrequency(enum.StrEnum):
    hourly = "hourly"
    daily = "daily"
    weekly = "weekly"
    monthly = "monthly"


class Theme(enum.StrEnum):
    light = "light"
    dark = "dark"


DEFAULT_SETTINGS: dict[str, Any] = {
    "site_name": "PharmaLink",
    "maintenance_mode": False,
    "email_notifications": True,
    "backup_frequency": BackupFrequency.daily.value,
    "analytics_enabled": True,
    "theme": Theme.light.value,
    "last_backup_at": None,
    "custom_settings": {},
}


class SystemSettings(TimestampMixin, Base):
    """The one settings row. Created with defaults on first read."""

    __tablename__ = "system_settings"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=SETTINGS_ID)
    site_name: Mapped[str] = mapped_column(String(255), nullable=False)
    maintenance_mode: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    email_notifications: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    backup_frequency: Mapped[str] = mapped_column(
        String(20), nullable=False, default=BackupFrequency.daily.value
    )
    analytics_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    theme: Mapped[str] = mapped_column(String(10), nullable=False, default=Theme.light.value)
    last_backup_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    custom_settings: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)

    @classmethod
    def with_defaults(cls) -> "SystemSettings":
        return cls(id=SETTINGS_ID, **dict(DEFAULT_SETTINGS, custom_settings={}))

    def __repr__(self) -> str:
        return f"<SystemSettings {self.site_name}>"
