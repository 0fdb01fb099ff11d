"""
Kafka event publisher — fire-and-forget.

Publishes waste analysis events for downstream consumers
(dashboards, alerting, data warehouse sync).
Gracefully degrades if Kafka is unavailable.
"""
from __future__ import annotations

import json
import structlog
from app.core.config import get_settings
from app.schemas.waste import ScoredWasteEvent

logger = structlog.get_logger()

_producer = None


async def _get_producer():
    global _producer
    settings = get_settings()
    if not settings.kafka_enabled:
        return None
    if _producer is None:
        from aiokafka import AIOKafkaProducer
        producer = AIOKafkaProducer(bootstrap_servers=settings.kafka_bootstrap)
        try:
            await producer.start()
        except Exception:
            await producer.stop()
            raise
        _producer = producer
    return _producer


async def close_producer() -> None:
    global _producer
    if _producer is not None:
        producer, _producer = _producer, None
        await producer.stop()
        logger.info("kafka_producer_stopped")



def build_event_payload(scored: ScoredWasteEvent) -> dict:
    return {
        "event_type": "WASTE_ANALYSIS_COMPLETED",
        "event_id": scored.id,
        "tenant_id": scored.tenant_id,
        "department": scored.department.value,
        "waste_type": scored.waste_type.value,
        "quantity": scored.quantity,
        "risk_score": scored.analysis.risk_score,
        "anomaly_detected": scored.analysis.anomaly_detected,
        "alert_message": scored.analysis.alert_message,
        "timestamp": scored.timestamp.isoformat(),
    }


async def publish_waste_event(scored: ScoredWasteEvent) -> None:
    settings = get_settings()
    if not settings.kafka_enabled:
        return

    try:
        producer = await _get_producer()
        if producer:
            await producer.send_and_wait(
                settings.kafka_topic_waste_events,
                json.dumps(build_event_payload(scored)).encode("utf-8"),
                key=scored.tenant_id.encode("utf-8"),
            )
            logger.info("kafka_event_published", event_id=scored.id)
    except Exception as e:
        # Fire-and-forget: log but don't fail the request
        logger.warning("kafka_publish_failed", error=str(e))
