"""Pydantic schemas for audit log entries."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from marketplace_auth.models.audit_log import AuditLevel


class AuditLogCreate(BaseModel):
    """Manual audit entry posted by an administrator."""

    level: AuditLevel = AuditLevel.info
    message: str = Field(min_length=1, max_length=2000)
    action: str | None = Field(default=None, max_length=100)
    details: dict[str, Any] | None = None


class AuditLogResponse(BaseModel):
    id: str
    level: str
    message: str
    actor_id: str | None
    action: str | None
    details: dict[str, Any] | None
    created_at: datetime

    model_config = {"from_attributes": True}
