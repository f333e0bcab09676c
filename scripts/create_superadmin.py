"""Create the default superadmin, or upgrade an existing account to superadmin.

Reads SUPERADMIN_EMAIL, SUPERADMIN_NAME and SUPERADMIN_PASSWORD from the
environment. Without a password a random one is generated and printed once.
Run: python -m scripts.create_superadmin
"""

import asyncio
import logging
import os
import secrets

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from marketplace_auth.config import get_settings
from marketplace_auth.models.account import AccountRole, AccountStatus
from marketplace_auth.repositories.account_repository import AccountRepository
from marketplace_auth.services.account_policy import (
    apply_status_change,
    change_role,
    create_account_with_plaintext,
)

logger = logging.getLogger(__name__)

DEFAULT_EMAIL = "admin@marketplace.co.za"
DEFAULT_NAME = "Super Admin"


async def ensure_superadmin(
    session: AsyncSession, email: str, name: str, password: str | None
) -> bool:
    """Return True if a new account was created, False if one was upgraded."""
    repo = AccountRepository(session)
    account = await repo.get_by_email(email)

    if account is not None:
        if change_role(account, AccountRole.superadmin):
            account.name = name
            apply_status_change(account, AccountStatus.active, reason="Upgraded to superadmin role")
        elif account.status != AccountStatus.active:
            apply_status_change(account, AccountStatus.active, reason="Superadmin reactivated")
        await repo.save(account)
        await session.commit()
        logger.info("Existing account %s is now superadmin", email)
        return False

    if not password:
        password = secrets.token_urlsafe(16)
        print(f"Generated superadmin password: {password}")

    account = create_account_with_plaintext(
        name,
        email,
        password,
        AccountRole.superadmin,
        status=AccountStatus.active,
    )
    await repo.create(account)
    await session.commit()
    logger.info("Created superadmin %s", email)
    return True


async def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")

    settings = get_settings()
    engine = create_async_engine(settings.database_url)
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with session_factory() as session:
        await ensure_superadmin(
            session,
            os.environ.get("SUPERADMIN_EMAIL", DEFAULT_EMAIL).strip().lower(),
            os.environ.get("SUPERADMIN_NAME", DEFAULT_NAME),
            os.environ.get("SUPERADMIN_PASSWORD"),
        )

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
