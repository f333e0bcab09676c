"""Async Kafka producer for publishing account lifecycle events."""

import json
from datetime import UTC, datetime
from typing import Any

from aiokafka import AIOKafkaProducer

from marketplace_auth.config import Settings
from marketplace_auth.utils.logging import get_logger

logger = get_logger(__name__)

TOPIC_ACCOUNT_EVENTS = "accounts.events"

ACCOUNT_REGISTERED = "account.registered"
ACCOUNT_UPDATED = "account.updated"
ACCOUNT_DELETED = "account.deleted"


async def create_kafka_producer(settings: Settings) -> AIOKafkaProducer | None:
    """Create and start a producer, or return None when Kafka is disabled."""
    if not settings.kafka_enabled:
        logger.info("Kafka disabled, account events will not be published")
        return None
    producer = AIOKafkaProducer(
        bootstrap_servers=settings.kafka_bootstrap_servers,
        value_serializer=lambda v: json.dumps(v, default=str).encode("utf-8"),
        key_serializer=lambda k: k.encode("utf-8") if k else None,
    )
    await producer.start()
    logger.info("Kafka producer started")
    return producer


async def publish_account_event(
    producer: AIOKafkaProducer | None,
    event_type: str,
    payload: dict[str, Any],
) -> bool:
    """Publish an account event keyed by account id.

    Returns False when nothing was sent. Failures are logged, never raised.
    """
    if producer is None:
        return False
    key = str(payload.get("account_id", ""))
    event = {
        "type": event_type,
        "occurred_at": datetime.now(UTC).isoformat(),
        "data": payload,
    }
    try:
        await producer.send_and_wait(topic=TOPIC_ACCOUNT_EVENTS, key=key, value=event)
    except Exception:
        logger.warning("Failed to publish %s for %s", event_type, key, exc_info=True)
        return False
    logger.info("Published %s for %s to %s", event_type, key, TOPIC_ACCOUNT_EVENTS)
    return True
