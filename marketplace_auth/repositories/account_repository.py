"""Repository for account data access."""

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace_auth.errors import DuplicateEmailError
from marketplace_auth.filters.account import AccountFilter
from marketplace_auth.models.account import Account

# PostgreSQL reports the index name, SQLite the column.
EMAIL_CONSTRAINT_MARKERS = ("ix_accounts_email", "accounts_email_key", "unique constraint failed: accounts.email")


class AccountRepository:
    """Data access layer for accounts."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_by_id(self, account_id: str) -> Account | None:
        result = await self.session.execute(select(Account).where(Account.id == account_id))
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> Account | None:
        normalized = email.strip().lower()
        result = await self.session.execute(
            select(Account).where(func.lower(Account.email) == normalized)
        )
        return result.scalar_one_or_none()

    async def get_all(
        self,
        filters: AccountFilter,
        page: int = 1,
        size: int = 50,
    ) -> tuple[list[Account], int]:
        query = filters.filter(select(Account))
        count_query = filters.filter(select(func.count()).select_from(Account))

        total = (await self.session.execute(count_query)).scalar() or 0

        query = filters.sort(query)
        query = query.offset((page - 1) * size).limit(size)

        result = await self.session.execute(query)
        return list(result.scalars().all()), total

    async def create(self, account: Account) -> Account:
        """Insert a new account; the unique email index decides races."""
        self.session.add(account)
        await self._flush(account)
        await self.session.refresh(account)
        return account

    async def save(self, account: Account) -> Account:
        self.session.add(account)
        await self._flush(account)
        return account

    async def delete(self, account: Account) -> None:
        await self.session.delete(account)
        await self.session.flush()

    async def _flush(self, account: Account) -> None:
        # Read before flushing: a failed flush leaves the object unusable until
        # the request session rolls back.
        email = account.email
        try:
            await self.session.flush()
        except IntegrityError as err:
            if is_email_conflict(err):
                raise DuplicateEmailError(email) from err
            raise


def is_email_conflict(err: IntegrityError) -> bool:
    """True when ``err`` comes from one of the unique email indexes."""
    message = str(err.orig).lower()
    return any(marker in message for marker in EMAIL_CONSTRAINT_MARKERS)
