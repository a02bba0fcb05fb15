"""Domain events for the Returns bounded context."""

from __future__ import annotations

from dataclasses import dataclass

from shared.domain.events import DomainEvent


@dataclass(frozen=True)
class ReturnRequested(DomainEvent):
    """Raised when an RTO mirror shipment is created."""

    original_shipment_id: str = ""
    original_tracking_number: str = ""
    return_shipment_id: str = ""
    return_tracking_number: str = ""
    reason: str = ""
