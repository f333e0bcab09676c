"""Repository for audit log data access."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace_auth.filters.audit_log import AuditLogFilter
from marketplace_auth.models.audit_log import AuditLog


class AuditLogRepository:
    """Append-only access to the audit log."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def append(self, entry: AuditLog) -> AuditLog:
        # Savepoint so a failed audit insert leaves the surrounding transaction usable.
        async with self.session.begin_nested():
            self.session.add(entry)
        return entry

    async def get_all(self, filters: AuditLogFilter, limit: int = 100) -> list[AuditLog]:
        query = filters.sort(filters.filter(select(AuditLog))).limit(limit)
        result = await self.session.execute(query)
        return list(result.scalars().all())
