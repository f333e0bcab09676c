"""Storage interfaces the workflows depend on.

``AccountRepository``, ``AuditLogRepository`` and ``SystemSettingsRepository``
(SQLAlchemy) and the in-memory implementations in ``memory.py`` satisfy these.
"""

from typing import Protocol

from marketplace_auth.filters.account import AccountFilter
from marketplace_auth.filters.audit_log import AuditLogFilter
from marketplace_auth.models.account import Account
from marketplace_auth.models.audit_log import AuditLog
from marketplace_auth.models.system_settings import SystemSettings


class AccountStore(Protocol):
    async def get_by_id(self, account_id: str) -> Account | None: ...

    async def get_by_email(self, email: str) -> Account | None: ...

    async def get_all(
        self, filters: AccountFilter, page: int = 1, size: int = 50
    ) -> tuple[list[Account], int]: ...

    async def create(self, account: Account) -> Account: ...

    async def save(self, account: Account) -> Account: ...

    async def delete(self, account: Account) -> None: ...


class AuditStore(Protocol):
    async def append(self, entry: AuditLog) -> AuditLog: ...

    async def get_all(self, filters: AuditLogFilter, limit: int = 100) -> list[AuditLog]: ...


class SettingsStore(Protocol):
    async def get_or_create(self) -> SystemSettings: ...

    async def save(self, settings: SystemSettings) -> SystemSettings: ...
