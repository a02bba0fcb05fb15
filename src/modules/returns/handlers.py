"""Event handlers for Returns domain events."""

from __future__ import annotations

import structlog

from modules.returns.events import ReturnRequested
from shared.domain.bus import IEventHandler

logger = structlog.get_logger(__name__)


class ReturnRequestedHandler(IEventHandler[ReturnRequested]):
    def handle(self, event: ReturnRequested) -> None:
        logger.info(
            f"Notifying merchant: shipment {event.original_tracking_number} "
            f"returns as {event.return_tracking_number}",
            return_id=str(event.aggregate_id),
            original_shipment_id=event.original_shipment_id,
        )


return_requested_handler = ReturnRequestedHandler()
