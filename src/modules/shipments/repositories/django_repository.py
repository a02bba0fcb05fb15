"""Django ORM implementations of the shipment repositories.

Concurrency control on transitions uses ``select_for_update(of=("self",))``
so only the shipment row is locked even when nullable references such as
the manifest are joined in.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional
from uuid import UUID

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Max, Q, QuerySet

from modules.accounts.models import Account
from modules.core.outbox import write_domain_events
from modules.shipments.constants import HUB_STATES
from modules.shipments.models import (
    Recipient,
    Shipment,
    ShipmentManifest,
    ShipmentStatus,
    ShipmentStatusHistory,
)
from modules.shipments.repositories.interfaces import (
    IManifestRepository,
    IShipmentRepository,
    IStatusRepository,
)

logger = structlog.get_logger(__name__)

_SHIPMENT_RELATIONS = ("merchant", "zone", "recipient", "status", "manifest")


class StatusDjangoRepository(IStatusRepository):
    def get_by_id(self, id: str) -> Optional[ShipmentStatus]:
        try:
            return ShipmentStatus.objects.filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_by_name(self, name: str) -> Optional[ShipmentStatus]:
        status = ShipmentStatus.objects.filter(name=name).first()
        # Guard against case-insensitive collations (MySQL default).
        if status is not None and status.name != name:
            return None
        return status

    def list_all(self) -> List[ShipmentStatus]:
        return list(ShipmentStatus.objects.all())

    def create(self, name: str, description: str, position: int) -> ShipmentStatus:
        status = ShipmentStatus.objects.create(
            name=name, description=description, position=position
        )
        logger.info("shipment_status.created", name=name, position=position)
        return status

    def save(self, status: ShipmentStatus) -> ShipmentStatus:
        status.save()
        logger.info("shipment_status.saved", status_id=str(status.id), name=status.name)
        return status

    def delete(self, status: ShipmentStatus) -> None:
        status.delete()
        logger.info("shipment_status.deleted", name=status.name)

    def is_referenced(self, status: ShipmentStatus) -> bool:
        if Shipment.objects.filter(status=status).exists():
            return True
        return ShipmentStatusHistory.objects.filter(
            Q(status=status) | Q(old_status=status)
        ).exists()

    def next_position(self) -> int:
        current = ShipmentStatus.objects.aggregate(top=Max("position"))["top"]
        return 0 if current is None else current + 1


class ShipmentDjangoRepository(IShipmentRepository):
    """Concrete Shipment repository backed by Django ORM."""

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    @transaction.atomic
    def create(self, data: Dict[str, Any]) -> Shipment:
        """Create a shipment.

        ``data`` keys: ``merchant``, ``zone``, ``recipient``, ``status``,
        ``delivery_fee`` (required); ``item_value``, ``cod_amount``,
        ``source_type``, ``shipping_fee_paid_by`` (optional).
        """
        shipment = Shipment(**data)
        shipment.save()
        logger.info(
            "shipment.persisted",
            shipment_id=str(shipment.id),
            tracking_number=shipment.tracking_number,
        )
        return shipment

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get_by_id(self, id: str) -> Optional[Shipment]:
        try:
            return (
                Shipment.objects.select_related(*_SHIPMENT_RELATIONS)
                .filter(id=id)
                .first()
            )
        except (ValueError, ValidationError):
            return None

    def get_for_update(self, id: str) -> Optional[Shipment]:
        """Retrieve a shipment with a row-level lock (SELECT FOR UPDATE).

        Returns ``None`` for non-existent or invalid IDs.
        """
        try:
            return (
                Shipment.objects.select_for_update(of=("self",))
                .select_related(*_SHIPMENT_RELATIONS)
                .filter(id=id)
                .first()
            )
        except (ValueError, ValidationError):
            return None

    def get_by_tracking_number(self, tracking_number: str) -> Optional[Shipment]:
        return (
            Shipment.objects.select_related(*_SHIPMENT_RELATIONS)
            .filter(tracking_number=tracking_number)
            .first()
        )

    def get_by_tracking_number_for_update(
        self, tracking_number: str
    ) -> Optional[Shipment]:
        return (
            Shipment.objects.select_for_update(of=("self",))
            .select_related(*_SHIPMENT_RELATIONS)
            .filter(tracking_number=tracking_number)
            .first()
        )

    def list(self, filters: Optional[Dict[str, Any]] = None) -> QuerySet:
        """Supported filter keys are any Django look-ups, e.g.
        ``status__name``, ``merchant_id``, ``manifest__courier_id``.
        """
        queryset = Shipment.objects.select_related(*_SHIPMENT_RELATIONS)
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    def list_at_hub(self) -> List[Shipment]:
        return list(
            Shipment.objects.select_related(*_SHIPMENT_RELATIONS)
            .filter(status__name__in=HUB_STATES)
            .order_by("updated_at")
        )

    # ------------------------------------------------------------------
    # Save (IRepository contract)
    # ------------------------------------------------------------------

    @transaction.atomic
    def save(self, entity: Shipment) -> Shipment:
        """Persist a shipment and write its pending domain events."""
        entity.save()
        rows = write_domain_events(entity, topic="shipments")
        logger.info(
            "shipment.saved", shipment_id=str(entity.id), event_count=len(rows)
        )
        return entity

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    @transaction.atomic
    def add_history(
        self,
        shipment: Shipment,
        status: ShipmentStatus,
        notes: str = "",
        old_status: Optional[ShipmentStatus] = None,
    ) -> ShipmentStatusHistory:
        history = ShipmentStatusHistory.objects.create(
            shipment=shipment,
            status=status,
            old_status=old_status,
            notes=notes,
        )
        logger.info(
            "shipment.history_added",
            shipment_id=str(shipment.id),
            old_status=old_status.name if old_status else None,
            new_status=status.name,
        )
        return history

    def get_history(self, shipment_id: UUID | str) -> List[ShipmentStatusHistory]:
        try:
            return list(
                ShipmentStatusHistory.objects.select_related("status", "old_status")
                .filter(shipment_id=shipment_id)
                .order_by("created_at", "id")
            )
        except (ValueError, ValidationError):
            return []

    # ------------------------------------------------------------------
    # Recipients
    # ------------------------------------------------------------------

    def get_or_create_recipient(
        self, name: str, phone: str, address: str = ""
    ) -> Recipient:
        recipient, created = Recipient.objects.get_or_create(
            phone=phone,
            defaults={"name": name, "address": address},
        )
        if created:
            logger.info("recipient.created", recipient_id=str(recipient.id))
        return recipient


class ManifestDjangoRepository(IManifestRepository):
    @transaction.atomic
    def create(self, courier: Account) -> ShipmentManifest:
        manifest = ShipmentManifest(courier=courier)
        manifest.save()
        logger.info(
            "manifest.created",
            manifest_id=str(manifest.id),
            manifest_number=manifest.manifest_number,
            courier_id=str(courier.id),
        )
        return manifest

    def get_by_id(self, id: str) -> Optional[ShipmentManifest]:
        try:
            return (
                ShipmentManifest.objects.select_related("courier").filter(id=id).first()
            )
        except (ValueError, ValidationError):
            return None

    def get_for_update(self, id: str) -> Optional[ShipmentManifest]:
        try:
            return (
                ShipmentManifest.objects.select_for_update()
                .select_related("courier")
                .filter(id=id)
                .first()
            )
        except (ValueError, ValidationError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[ShipmentManifest]:
        queryset = ShipmentManifest.objects.select_related("courier")
        if filters:
            queryset = queryset.filter(**filters)
        return list(queryset)

    @transaction.atomic
    def save(self, entity: ShipmentManifest) -> ShipmentManifest:
        entity.save()
        rows = write_domain_events(entity, topic="manifests")
        logger.info(
            "manifest.saved",
            manifest_id=str(entity.id),
            status=entity.status,
            event_count=len(rows),
        )
        return entity
