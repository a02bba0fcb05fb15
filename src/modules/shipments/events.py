"""Domain events for the Shipments bounded context."""

from __future__ import annotations

from dataclasses import dataclass

from shared.domain.events import DomainEvent


@dataclass(frozen=True)
class ShipmentCreated(DomainEvent):
    """Raised when a shipment is created (merchant action or RTO mirror)."""

    tracking_number: str = ""
    merchant_id: str = ""


@dataclass(frozen=True)
class ShipmentStatusChanged(DomainEvent):
    """Raised on every status transition."""

    tracking_number: str = ""
    old_status: str = ""
    new_status: str = ""
    notes: str = ""


@dataclass(frozen=True)
class ManifestStatusChanged(DomainEvent):
    """Raised when a courier manifest changes status."""

    manifest_number: str = ""
    courier_id: str = ""
    old_status: str = ""
    new_status: str = ""
