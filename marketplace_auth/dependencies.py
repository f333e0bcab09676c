"""Resource factories and FastAPI dependencies.

Shared resources (engine, session factory, Redis, Kafka producer) are created
in the application lifespan and kept on ``app.state``. Request-scoped objects
(sessions, repositories, services) are built from them here.
"""

import asyncio
from collections.abc import AsyncGenerator
from typing import Annotated

from aiokafka import AIOKafkaProducer
from fastapi import Depends, Request
from redis.asyncio import Redis
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from marketplace_auth.auth.refresh_store import RefreshTokenStore
from marketplace_auth.config import Settings, get_settings
from marketplace_auth.errors import AuthError, StorageUnavailableError
from marketplace_auth.repositories.account_repository import AccountRepository
from marketplace_auth.repositories.audit_repository import AuditLogRepository
from marketplace_auth.repositories.settings_repository import SystemSettingsRepository
from marketplace_auth.services.admin_service import AccountAdminService
from marketplace_auth.services.audit_service import AuditTrail
from marketplace_auth.services.auth_service import AuthService
from marketplace_auth.services.settings_service import SystemSettingsService
from marketplace_auth.utils.logging import get_logger

logger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Factories (called from the lifespan)
# ---------------------------------------------------------------------------


def create_engine(settings: Settings) -> AsyncEngine:
    return create_async_engine(
        settings.database_url,
        echo=settings.debug,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_pre_ping=True,
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


def create_redis(settings: Settings) -> Redis:
    return Redis.from_url(settings.redis_url, decode_responses=True)


def backoff_delay(attempt: int, settings: Settings) -> float:
    """Delay before retry ``attempt`` (0-based): doubling, capped."""
    return min(settings.db_connect_base_delay * 2**attempt, settings.db_connect_max_delay)


async def connect_with_backoff(engine: AsyncEngine, settings: Settings) -> None:
    """Wait until the database answers ``SELECT 1``.

    Raises StorageUnavailableError after ``db_connect_max_attempts`` failures.
    """
    attempts = settings.db_connect_max_attempts
    for attempt in range(attempts):
        try:
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except (SQLAlchemyError, OSError) as err:
            if attempt + 1 >= attempts:
                raise StorageUnavailableError(
                    f"Database unreachable after {attempts} attempts"
                ) from err
            delay = backoff_delay(attempt, settings)
            logger.warning(
                "Database connection attempt %d/%d failed (%s), retrying in %.1fs",
                attempt + 1,
                attempts,
                err,
                delay,
            )
            await asyncio.sleep(delay)
        else:
            logger.info("Database connection established")
            return


# ---------------------------------------------------------------------------
# Request-scoped dependencies
# ---------------------------------------------------------------------------


async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """One session per request: commit on success, roll back on error.

    A domain refusal (``AuthError``) still commits: the workflows check before
    they mutate, so the only pending writes are the audit entries describing
    the refusal, such as a failed login. A refusal raised out of a failed flush
    (a lost unique email race) leaves nothing to keep and rolls back.
    """
    async with request.app.state.session_factory() as session:
        try:
            yield session
            await session.commit()
        except AuthError:
            if session.is_active:
                await session.commit()
            else:
                await session.rollback()
            raise
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


DBSession = Annotated[AsyncSession, Depends(get_db_session)]


def get_account_repo(db: DBSession) -> AccountRepository:
    return AccountRepository(db)


def get_audit_repo(db: DBSession) -> AuditLogRepository:
    return AuditLogRepository(db)


def get_settings_repo(db: DBSession) -> SystemSettingsRepository:
    return SystemSettingsRepository(db)


AccountRepo = Annotated[AccountRepository, Depends(get_account_repo)]
AuditRepo = Annotated[AuditLogRepository, Depends(get_audit_repo)]
SettingsRepo = Annotated[SystemSettingsRepository, Depends(get_settings_repo)]


def get_redis(request: Request) -> Redis:
    return request.app.state.redis


def get_refresh_store(redis: Annotated[Redis, Depends(get_redis)]) -> RefreshTokenStore:
    return RefreshTokenStore(redis, get_settings().refresh_token_ttl_seconds)


def get_event_producer(request: Request) -> AIOKafkaProducer | None:
    return getattr(request.app.state, "kafka_producer", None)


RefreshStore = Annotated[RefreshTokenStore, Depends(get_refresh_store)]
EventProducer = Annotated[AIOKafkaProducer | None, Depends(get_event_producer)]


def get_auth_service(
    accounts: AccountRepo,
    audit_repo: AuditRepo,
    refresh_store: RefreshStore,
    producer: EventProducer,
) -> AuthService:
    return AuthService(
        accounts,
        AuditTrail(audit_repo),
        refresh_store=refresh_store,
        event_producer=producer,
    )


def get_admin_service(
    accounts: AccountRepo,
    audit_repo: AuditRepo,
    refresh_store: RefreshStore,
    producer: EventProducer,
) -> AccountAdminService:
    return AccountAdminService(
        accounts,
        AuditTrail(audit_repo),
        refresh_store=refresh_store,
        event_producer=producer,
    )


def get_settings_service(
    settings_repo: SettingsRepo, audit_repo: AuditRepo
) -> SystemSettingsService:
    return SystemSettingsService(settings_repo, AuditTrail(audit_repo))


AuthSvc = Annotated[AuthService, Depends(get_auth_service)]
AdminSvc = Annotated[AccountAdminService, Depends(get_admin_service)]
SettingsSvc = Annotated[SystemSettingsService, Depends(get_settings_service)]
