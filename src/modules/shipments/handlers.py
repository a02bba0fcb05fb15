"""Event handlers for Shipments domain events.

These are the hand-off points to the notification collaborator; they
only record that a notification is due.
"""

from __future__ import annotations

import structlog

from modules.shipments.events import (
    ManifestStatusChanged,
    ShipmentCreated,
    ShipmentStatusChanged,
)
from shared.domain.bus import IEventHandler

logger = structlog.get_logger(__name__)


class ShipmentCreatedHandler(IEventHandler[ShipmentCreated]):
    def handle(self, event: ShipmentCreated) -> None:
        logger.info(
            f"Notifying merchant about new shipment {event.tracking_number}",
            shipment_id=str(event.aggregate_id),
            merchant_id=event.merchant_id,
        )


class ShipmentStatusChangedHandler(IEventHandler[ShipmentStatusChanged]):
    def handle(self, event: ShipmentStatusChanged) -> None:
        logger.info(
            f"Notifying recipient: shipment {event.tracking_number} "
            f"is now {event.new_status}",
            shipment_id=str(event.aggregate_id),
            old_status=event.old_status,
            new_status=event.new_status,
        )


class ManifestStatusChangedHandler(IEventHandler[ManifestStatusChanged]):
    def handle(self, event: ManifestStatusChanged) -> None:
        logger.info(
            f"Notifying courier: manifest {event.manifest_number} "
            f"is now {event.new_status}",
            manifest_id=str(event.aggregate_id),
            courier_id=event.courier_id,
        )


shipment_created_handler = ShipmentCreatedHandler()
shipment_status_changed_handler = ShipmentStatusChangedHandler()
manifest_status_changed_handler = ManifestStatusChangedHandler()
