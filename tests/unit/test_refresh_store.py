"""Unit tests for refresh token rotation and the audit trail."""

import logging
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from marketplace_auth.auth.refresh_store import RefreshTokenStore
from marketplace_auth.auth.security import issue_stamp
from marketplace_auth.services.audit_service import AuditTrail


_ISSUED = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


@pytest.mark.asyncio
class TestRefreshTokenStore:
    async def test_token_is_single_use(self, redis_client):
        store = RefreshTokenStore(redis_client, ttl_seconds=60)
        ver = issue_stamp(_ISSUED)
        assert await store.consume("acc-1", "jti-1", ver) is True
        assert await store.consume("acc-1", "jti-1", ver) is False

    async def test_sessions_rotate_independently(self, redis_client):
        store = RefreshTokenStore(redis_client, ttl_seconds=60)
        ver = issue_stamp(_ISSUED)
        assert await store.consume("acc-1", "laptop", ver) is True
        assert await store.consume("acc-1", "phone", ver) is True

    async def test_used_marker_expires_with_token(self, redis_client):
        store = RefreshTokenStore(redis_client, ttl_seconds=60)
        await store.consume("acc-1", "jti-1", issue_stamp(_ISSUED))
        ttl = await redis_client.ttl("refresh_token:used:acc-1:jti-1")
        assert 0 < ttl <= 60

    async def test_revoke_refuses_earlier_tokens_only(self, redis_client):
        store = RefreshTokenStore(redis_client, ttl_seconds=60)
        await store.revoke("acc-1", now=_ISSUED)
        assert await store.consume("acc-1", "old", issue_stamp(_ISSUED)) is False
        later = issue_stamp(_ISSUED + timedelta(seconds=1))
        assert await store.consume("acc-1", "new", later) is True
        assert await store.consume("acc-2", "other", issue_stamp(_ISSUED)) is True

    async def test_emptied_store_allows_refresh(self, redis_client):
        store = RefreshTokenStore(redis_client, ttl_seconds=60)
        await store.revoke("acc-1", now=_ISSUED - timedelta(days=1))
        await redis_client.flushall()
        assert await store.consume("acc-1", "jti-1", issue_stamp(_ISSUED)) is True

    async def test_outage_does_not_block_refresh(self):
        redis = AsyncMock()
        redis.get.side_effect = RedisConnectionError("down")
        redis.set.side_effect = RedisConnectionError("down")
        store = RefreshTokenStore(redis, ttl_seconds=60)
        await store.revoke("acc-1")
        assert await store.consume("acc-1", "jti-1", issue_stamp(_ISSUED)) is True


@pytest.mark.asyncio
class TestAuditTrail:
    async def test_record_persists_and_logs(self, audit_repo, caplog):
        trail = AuditTrail(audit_repo)
        with caplog.at_level(logging.WARNING, logger="marketplace_auth.audit"):
            entry = await trail.record(
                "warning", "Failed login", actor_id="acc-1", action="LOGIN_FAILED"
            )
        assert audit_repo.entries == [entry]
        assert entry.id and entry.created_at is not None
        assert "action=LOGIN_FAILED" in caplog.text

    async def test_record_rejects_unknown_level(self, audit_repo):
        with pytest.raises(ValueError):
            await AuditTrail(audit_repo).record("debug", "nope")

    async def test_best_effort_swallows_store_failure(self):
        failing = AsyncMock()
        failing.append.side_effect = RuntimeError("audit store down")
        assert await AuditTrail(failing).record_best_effort("info", "hello") is None
