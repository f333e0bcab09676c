"""Database models package."""

from marketplace_auth.models.account import (
    ADMIN_ROLES,
    ROLE_PERMISSIONS,
    Account,
    AccountRole,
    AccountStatus,
    AccountStatusChange,
    Permission,
    PermissionSet,
    StoreProfile,
    permissions_for_role,
)
from marketplace_auth.models.audit_log import AuditLevel, AuditLog
from marketplace_auth.models.base import Base
from marketplace_auth.models.system_settings import BackupFrequency, SystemSettings, Theme

__all__ = [
    "Base",
    "Account",
    "AccountStatusChange",
    "StoreProfile",
    "AuditLog",
    "SystemSettings",
    "AccountRole",
    "AccountStatus",
    "AuditLevel",
    "BackupFrequency",
    "Theme",
    "Permission",
    "PermissionSet",
    "ROLE_PERMISSIONS",
    "ADMIN_ROLES",
    "permissions_for_role",
]
