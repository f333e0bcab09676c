"""Redis-backed refresh token rotation and revocation.

Every refresh token may be exchanged once. A used token id is recorded until
the token would have expired anyway, and revoking an account stores a cutoff:
refresh tokens issued at or before it are refused. Each session rotates its
own token, so several devices stay signed in side by side.

Nothing is stored for live tokens. An emptied Redis (flush, eviction) and a
Redis outage are handled the same way: the exchange is allowed and the event
is logged.
"""

from datetime import UTC, datetime

from redis.asyncio import Redis
from redis.exceptions import RedisError

from marketplace_auth.auth.security import issue_stamp
from marketplace_auth.utils.logging import get_logger

logger = get_logger(__name__)

USED_PREFIX = "refresh_token:used"
REVOKED_PREFIX = "refresh_token:revoked"


def _used_key(account_id: str, token_id: str) -> str:
    return f"{USED_PREFIX}:{account_id}:{token_id}"


def _revoked_key(account_id: str) -> str:
    return f"{REVOKED_PREFIX}:{account_id}"


class RefreshTokenStore:
    def __init__(self, redis: Redis, ttl_seconds: int) -> None:
        self.redis = redis
        self.ttl_seconds = ttl_seconds

    async def consume(self, account_id: str, token_id: str, issued_ver: int | None) -> bool:
        """Mark a refresh token as used. False if it was used or revoked before."""
        try:
            cutoff = await self.redis.get(_revoked_key(account_id))
            if cutoff is not None and (issued_ver or 0) <= int(cutoff):
                return False
            # SET NX makes two concurrent exchanges of the same token race safely.
            first_use = await self.redis.set(
                _used_key(account_id, token_id), 1, ex=self.ttl_seconds, nx=True
            )
        except RedisError:
            logger.warning("Could not verify refresh token for %s", account_id, exc_info=True)
            return True
        return bool(first_use)

    async def revoke(self, account_id: str, now: datetime | None = None) -> None:
        """Refuse every refresh token of ``account_id`` issued up to ``now``."""
        stamp = issue_stamp(now or datetime.now(UTC))
        try:
            await self.redis.set(_revoked_key(account_id), stamp, ex=self.ttl_seconds)
        except RedisError:
            logger.warning("Could not revoke refresh tokens for %s", account_id, exc_info=True)
