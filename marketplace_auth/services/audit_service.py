"""Audit trail: persists audit entries and mirrors them to the audit logger."""

import logging
from typing import Any

from marketplace_auth.models.audit_log import AuditLevel, AuditLog
from marketplace_auth.models.base import new_id, utcnow
from marketplace_auth.repositories.base import AuditStore
from marketplace_auth.utils.logging import get_logger

logger = get_logger("audit")

# Action tags written by the workflows.
USER_REGISTERED = "USER_REGISTERED"
LOGIN_SUCCESS = "LOGIN_SUCCESS"
LOGIN_FAILED = "LOGIN_FAILED"
PROFILE_UPDATED = "PROFILE_UPDATED"
ACCOUNT_UPDATED = "ACCOUNT_UPDATED"
ACCOUNT_DELETED = "ACCOUNT_DELETED"
PERMISSIONS_OVERRIDE = "PERMISSIONS_OVERRIDE"
SETTINGS_UPDATE = "SETTINGS_UPDATE"
MANUAL_ENTRY = "MANUAL_ENTRY"

_LOG_LEVELS = {
    AuditLevel.info: logging.INFO,
    AuditLevel.warning: logging.WARNING,
    AuditLevel.error: logging.ERROR,
}


class AuditTrail:
    def __init__(self, repo: AuditStore) -> None:
        self.repo = repo

    async def record(
        self,
        level: AuditLevel | str,
        message: str,
        *,
        actor_id: str | None = None,
        action: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> AuditLog:
        """Append an entry. Storage errors propagate to the caller."""
        level = AuditLevel(level)
        entry = AuditLog(
            id=new_id(),
            level=level.value,
            message=message,
            actor_id=actor_id,
            action=action,
            details=details,
            created_at=utcnow(),
        )
        await self.repo.append(entry)
        logger.log(
            _LOG_LEVELS[level],
            "AUDIT action=%s actor=%s message=%s",
            action or "-",
            actor_id or "-",
            message,
        )
        return entry

    async def record_best_effort(
        self,
        level: AuditLevel | str,
        message: str,
        *,
        actor_id: str | None = None,
        action: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> AuditLog | None:
        """Like ``record`` but a failed write is only logged."""
        try:
            return await self.record(
                level, message, actor_id=actor_id, action=action, details=details
            )
        except Exception:
            logger.warning("Failed to write audit entry action=%s", action, exc_info=True)
            return None
