"""In-process account, audit and settings stores.

Same interface as the SQLAlchemy repositories, keyed by id in plain dicts.
Used to embed the workflows without a database and by the test-suite.
"""

from datetime import UTC, datetime

from marketplace_auth.errors import DuplicateEmailError
from marketplace_auth.filters.account import AccountFilter
from marketplace_auth.filters.audit_log import AuditLogFilter
from marketplace_auth.models.account import Account
from marketplace_auth.models.audit_log import AuditLog
from marketplace_auth.models.base import new_id, utcnow
from marketplace_auth.models.system_settings import SystemSettings


def _aware(value: datetime) -> datetime:
    return value if value.tzinfo is not None else value.replace(tzinfo=UTC)


class InMemoryAccountRepository:
    def __init__(self) -> None:
        self._accounts: dict[str, Account] = {}

    async def get_by_id(self, account_id: str) -> Account | None:
        return self._accounts.get(account_id)

    async def get_by_email(self, email: str) -> Account | None:
        normalized = email.strip().lower()
        for account in self._accounts.values():
            if account.email.lower() == normalized:
                return account
        return None

    async def get_all(
        self,
        filters: AccountFilter,
        page: int = 1,
        size: int = 50,
    ) -> tuple[list[Account], int]:
        items = list(self._accounts.values())
        if filters.status:
            items = [a for a in items if a.status == filters.status]
        if filters.role:
            items = [a for a in items if a.role == filters.role]
        if filters.search:
            needle = filters.search.lower()
            items = [a for a in items if needle in a.name.lower() or needle in a.email.lower()]
        items.sort(key=lambda a: a.created_at, reverse=True)
        start = (page - 1) * size
        return items[start : start + size], len(items)

    async def create(self, account: Account) -> Account:
        if account.id is None:
            account.id = new_id()
        self._check_email_free(account)
        self._accounts[account.id] = account
        return account

    async def save(self, account: Account) -> Account:
        self._check_email_free(account)
        account.updated_at = utcnow()
        self._accounts[account.id] = account
        return account

    async def delete(self, account: Account) -> None:
        self._accounts.pop(account.id, None)

    def _check_email_free(self, account: Account) -> None:
        normalized = account.email.lower()
        for other in self._accounts.values():
            if other.id != account.id and other.email.lower() == normalized:
                raise DuplicateEmailError(account.email)


class InMemoryAuditLogRepository:
    def __init__(self) -> None:
        self.entries: list[AuditLog] = []

    async def append(self, entry: AuditLog) -> AuditLog:
        if entry.id is None:
            entry.id = new_id()
        if entry.created_at is None:
            entry.created_at = utcnow()
        self.entries.append(entry)
        return entry

    async def get_all(self, filters: AuditLogFilter, limit: int = 100) -> list[AuditLog]:
        items = list(self.entries)
        if filters.level:
            items = [e for e in items if e.level == filters.level]
        if filters.action:
            items = [e for e in items if e.action == filters.action]
        if filters.actor_id:
            items = [e for e in items if e.actor_id == filters.actor_id]
        if filters.created_at__gte:
            since = _aware(filters.created_at__gte)
            items = [e for e in items if _aware(e.created_at) >= since]
        if filters.created_at__lte:
            until = _aware(filters.created_at__lte)
            items = [e for e in items if _aware(e.created_at) <= until]
        # Stable sort keeps insertion order for identical timestamps; reverse for newest first.
        items.sort(key=lambda e: e.created_at)
        items.reverse()
        return items[:limit]


class InMemorySettingsRepository:
    def __init__(self) -> None:
        self.settings: SystemSettings | None = None

    async def get_or_create(self) -> SystemSettings:
        if self.settings is None:
            self.settings = SystemSettings.with_defaults()
            self.settings.created_at = self.settings.updated_at = utcnow()
        return self.settings

    async def save(self, settings: SystemSettings) -> SystemSettings:
        settings.updated_at = utcnow()
        self.settings = settings
        return settings
