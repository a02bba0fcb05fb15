"""Writes an aggregate's collected domain events to the outbox table.

Called from every repository ``save()`` so that event rows share the
transaction of the state change that produced them.
"""

from __future__ import annotations

import json
from dataclasses import asdict
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List
from uuid import UUID

from modules.core.middleware import correlation_id_var
from modules.core.models import OutboxEvent
from shared.domain.events import DomainEvent


def write_domain_events(entity: Any, topic: str) -> List[OutboxEvent]:
    """Persist and clear the pending events of *entity*."""
    events = entity.domain_events if hasattr(entity, "domain_events") else []
    rows = [
        OutboxEvent.objects.create(
            event_type=event.event_name,
            aggregate_id=str(event.aggregate_id),
            payload=serialize_event_payload(event),
            topic=topic,
            correlation_id=correlation_id_var.get(),
        )
        for event in events
    ]
    if hasattr(entity, "clear_domain_events"):
        entity.clear_domain_events()
    return rows


def serialize_event_payload(event: DomainEvent) -> Dict[str, Any]:
    data = asdict(event)
    normalized = _normalize_for_json(data)
    return json.loads(json.dumps(normalized))


def _normalize_for_json(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (list, tuple)):
        return [_normalize_for_json(item) for item in value]
    if isinstance(value, dict):
        return {key: _normalize_for_json(val) for key, val in value.items()}
    return value
