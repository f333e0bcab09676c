"""Audit log model: append-only record of security-relevant events."""

import enum
from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from marketplace_auth.models.base import Base, UUIDMixin, utcnow


class AuditLevel(enum.StrEnum):
    info = "info"
    warning = "warning"
    error = "error"


class AuditLog(UUIDMixin, Base):
    """Immutable audit entry. Never updated after insert."""

    __tablename__ = "audit_logs"

    level: Mapped[str] = mapped_column(String(10), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    actor_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    action: Mapped[str | None] = mapped_column(String(100), nullable=True)
    details: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    __table_args__ = (
        Index("idx_audit_created", "created_at"),
        Index("idx_audit_level", "level"),
        Index("idx_audit_actor", "actor_id"),
    )

    def __repr__(self) -> str:
        return f"<AuditLog {self.level} {self.action}>"
