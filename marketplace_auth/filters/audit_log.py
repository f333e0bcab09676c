"""Declarative filters for AuditLog queries."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from fastapi_filter.contrib.sqlalchemy import Filter

from marketplace_auth.models.audit_log import AuditLog


class AuditLogFilter(Filter):
    """FilterSet for audit log queries. Results are newest first.

    Supported query params::

        ?level=warning
        ?action=LOGIN_FAILED
        ?actor_id=<account id>
        ?created_at__gte=2024-01-01T00:00:00
        ?created_at__lte=2024-12-31T23:59:59
    """

    level: Optional[str] = None
    action: Optional[str] = None
    actor_id: Optional[str] = None
    created_at__gte: Optional[datetime] = None
    created_at__lte: Optional[datetime] = None
    order_by: Optional[list[str]] = ["-created_at"]

    class Constants(Filter.Constants):
        model = AuditLog
