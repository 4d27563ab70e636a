"""Asynchronous tasks of the core module."""

import json

import structlog
from celery import shared_task
from django.core.serializers.json import DjangoJSONEncoder
from django.db import transaction

from modules.core.models import OutboxEvent

logger = structlog.get_logger(__name__)

OUTBOX_BATCH_SIZE = 100
OUTBOX_MAX_RETRIES = 5


def _publish(event: OutboxEvent) -> None:
    message = json.dumps(
        {
            "event_id": str(event.id),
            "event_type": event.event_type,
            "aggregate_id": event.aggregate_id,
            "payload": event.payload,
        },
        cls=DjangoJSONEncoder,
    )
    logger.info("outbox.event_published", topic=event.topic, message=message)


@shared_task(name="core.relay_outbox_events")
def relay_outbox_events(batch_size: int = OUTBOX_BATCH_SIZE) -> dict:
    """Relay pending outbox events, oldest first.

    Events go out as ``outbox.event_published`` log lines, which the log shipper
    forwards to downstream consumers. ``FAILED`` events are picked up again
    until they reach ``OUTBOX_MAX_RETRIES``.
    """
    published = failed = 0
    with transaction.atomic():
        events = list(
            OutboxEvent.objects.select_for_update(skip_locked=True).relayable(
                OUTBOX_MAX_RETRIES
            )[:batch_size]
        )
        for event in events:
            try:
                _publish(event)
            except (TypeError, ValueError) as exc:
                logger.warning(
                    "outbox.event_failed", event_id=str(event.id), error=str(exc)
                )
                event.mark_as_failed(str(exc))
                failed += 1
                continue
            event.mark_as_published()
            published += 1

    logger.info("outbox.relay_completed", published=published, failed=failed)
    return {"published": published, "failed": failed}
