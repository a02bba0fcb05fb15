"""Event handlers for Payout domain events."""

from __future__ import annotations

import structlog

from modules.payouts.constants import PAID_STATUS
from modules.payouts.events import PayoutCreated, PayoutStatusChanged
from shared.domain.bus import IEventHandler

logger = structlog.get_logger(__name__)


class PayoutCreatedHandler(IEventHandler[PayoutCreated]):
    def handle(self, event: PayoutCreated) -> None:
        logger.info(
            f"Notifying payee {event.user_id}: {event.payout_type} of "
            f"{event.net_amount} created",
            payout_id=str(event.aggregate_id),
            item_count=event.item_count,
        )


class PayoutStatusChangedHandler(IEventHandler[PayoutStatusChanged]):
    def handle(self, event: PayoutStatusChanged) -> None:
        if event.new_status == PAID_STATUS:
            message = f"Notifying payee {event.user_id}: payout paid"
        else:
            message = f"Payout {event.old_status} -> {event.new_status}"
        logger.info(message, payout_id=str(event.aggregate_id))


payout_created_handler = PayoutCreatedHandler()
payout_status_changed_handler = PayoutStatusChangedHandler()
