"""Return link repository (interface + Django ORM implementation)."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional
from uuid import UUID

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction

from modules.core.outbox import write_domain_events
from modules.returns.models import ReturnShipment
from modules.shipments.models import Shipment

logger = structlog.get_logger(__name__)


class IReturnRepository(ABC):
    @abstractmethod
    def build(
        self, original: Shipment, return_shipment: Shipment, reason: str
    ) -> ReturnShipment:
        """Instantiate an unsaved link."""

    @abstractmethod
    def save(self, link: ReturnShipment) -> ReturnShipment:
        """Insert the link and write its pending events."""

    @abstractmethod
    def get_by_id(self, id: str) -> Optional[ReturnShipment]:
        """Retrieve a link with both shipments."""

    @abstractmethod
    def list_for_original(self, shipment_id: UUID | str) -> List[ReturnShipment]:
        """Links whose original is *shipment_id*."""


class ReturnDjangoRepository(IReturnRepository):
    def build(
        self, original: Shipment, return_shipment: Shipment, reason: str
    ) -> ReturnShipment:
        return ReturnShipment(
            original_shipment=original,
            return_shipment=return_shipment,
            reason=reason,
        )

    @transaction.atomic
    def save(self, link: ReturnShipment) -> ReturnShipment:
        link.save()
        rows = write_domain_events(link, topic="returns")
        logger.info("return.saved", return_id=str(link.id), event_count=len(rows))
        return link

    def get_by_id(self, id: str) -> Optional[ReturnShipment]:
        try:
            return (
                ReturnShipment.objects.select_related(
                    "original_shipment", "return_shipment"
                )
                .filter(id=id)
                .first()
            )
        except (ValueError, ValidationError):
            return None

    def list_for_original(self, shipment_id: UUID | str) -> List[ReturnShipment]:
        try:
            return list(
                ReturnShipment.objects.select_related(
                    "original_shipment", "return_shipment"
                ).filter(original_shipment_id=shipment_id)
            )
        except (ValueError, ValidationError):
            return []
