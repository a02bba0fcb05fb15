"""Return-to-origin (RTO) process.

``create_return`` runs as one transaction:

1. Lock the original, check eligibility and move it to
   RETURNED_TO_ORIGIN with note ``"Return requested: <reason>"``.
2. Create the mirror shipment (fee copied, fresh tracking number,
   initial status from the registry).
3. Persist the ``ReturnShipment`` link and its ``ReturnRequested`` event.

Any failure rolls back all three steps.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List
from uuid import UUID

import structlog
from django.db import transaction

from modules.returns.events import ReturnRequested
from modules.returns.exceptions import (
    MissingReturnReason,
    NotEligibleForReturn,
    ReturnNotFound,
)
from modules.shipments.constants import ShipmentStatusName, TERMINAL_STATES

if TYPE_CHECKING:
    from modules.returns.models import ReturnShipment
    from modules.returns.repositories import IReturnRepository
    from modules.shipments.models import Shipment
    from modules.shipments.services import ShipmentService

logger = structlog.get_logger(__name__)


class ReturnService:
    def __init__(
        self,
        shipment_service: ShipmentService,
        return_repository: IReturnRepository,
    ) -> None:
        self._shipments = shipment_service
        self._return_repo = return_repository

    @staticmethod
    def is_eligible_for_return(shipment: Shipment) -> bool:
        return shipment.status.name not in TERMINAL_STATES

    @transaction.atomic
    def create_return(self, original_id: UUID | str, reason: str) -> ReturnShipment:
        """Raises:
        MissingReturnReason: blank reason.
        ShipmentNotFound: the original does not exist.
        NotEligibleForReturn: the original is in a terminal state.
        """
        reason = (reason or "").strip()
        if not reason:
            raise MissingReturnReason("A reason is required to request a return.")

        original = self._shipments.lock_shipment(original_id)
        log = logger.bind(
            original_id=str(original.id),
            tracking_number=original.tracking_number,
            current_status=original.status.name,
        )
        if not self.is_eligible_for_return(original):
            log.warning("return.not_eligible")
            raise NotEligibleForReturn(
                f"Shipment {original.tracking_number} is {original.status.name} "
                "and cannot be returned."
            )

        self._shipments.apply_transition(
            original,
            ShipmentStatusName.RETURNED_TO_ORIGIN,
            f"Return requested: {reason}",
        )
        mirror = self._shipments.create_return_shipment(original)

        link = self._return_repo.build(original, mirror, reason)
        link.add_domain_event(
            ReturnRequested(
                aggregate_id=link.id,
                original_shipment_id=str(original.id),
                original_tracking_number=original.tracking_number,
                return_shipment_id=str(mirror.id),
                return_tracking_number=mirror.tracking_number,
                reason=reason,
            )
        )
        self._return_repo.save(link)

        log.info("return.created", return_shipment_id=str(mirror.id))
        return link

    def get_return(self, return_id: UUID | str) -> ReturnShipment:
        link = self._return_repo.get_by_id(str(return_id))
        if link is None:
            raise ReturnNotFound(f"Return {return_id} not found.")
        return link

    def list_for_shipment(self, shipment_id: UUID | str) -> List[ReturnShipment]:
        return self._return_repo.list_for_original(shipment_id)
