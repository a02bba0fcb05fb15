"""Background tasks for the core module.

``relay_outbox_events`` drains the transactional outbox into the
in-process event bus, where the notification collaborator subscribes.
"""

from __future__ import annotations

from typing import Optional

import structlog
from celery import shared_task
from django.conf import settings

from modules.core.models import EventStatus, OutboxEvent
from shared.domain.events import DomainEvent
from shared.infrastructure.bus import event_bus

logger = structlog.get_logger(__name__)


@shared_task(name="core.relay_outbox_events")
def relay_outbox_events(batch_size: Optional[int] = None) -> dict:
    """Publish pending outbox rows in creation order.

    A row whose payload cannot be rebuilt, or whose handler raises, is
    marked FAILED with the error text; the rest of the batch continues.
    """
    size = batch_size or settings.OUTBOX_RELAY_BATCH_SIZE
    pending = list(
        OutboxEvent.objects.filter(status=EventStatus.PENDING).order_by("created_at")[
            :size
        ]
    )

    published = 0
    failed = 0
    for row in pending:
        log = logger.bind(
            outbox_id=str(row.id),
            event_type=row.event_type,
            aggregate_id=row.aggregate_id,
        )
        try:
            event = DomainEvent.from_payload(row.payload)
            event_bus.publish(event)
        except Exception as exc:  # noqa: BLE001
            row.mark_as_failed(f"{exc.__class__.__name__}: {exc}")
            log.warning("outbox.relay_failed", error=str(exc))
            failed += 1
            continue
        row.mark_as_published()
        log.info("outbox.relayed")
        published += 1

    logger.info("outbox.relay_completed", published=published, failed=failed)
    return {"published": published, "failed": failed}
