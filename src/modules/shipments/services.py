"""Shipment service layer (Use Cases).

Orchestrates shipment creation and the status transition engine.  All
write operations are atomic: a status change and its history row commit
or fail together.

Rules enforced:
- Creation: merchant must be an active MERCHANT account; the zone must
  exist and be active; the fee is resolved once by ``PricingResolver``;
  the initial status is PENDING_APPROVAL (fallback PENDING).
- Transitions lock the shipment row (``SELECT FOR UPDATE``) before the
  current status is read.
- DELIVERED, CANCELLED and RETURNED_TO_ORIGIN are terminal: any
  transition out of them raises ``InvalidStatusTransition``.
- FAILED_ATTEMPT is never stored; its reason text is classified into
  POSTPONED / PENDING_UPDATE / PENDING_RETURN.
- Every transition appends exactly one history row and one
  ``ShipmentStatusChanged`` outbox event.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Optional
from uuid import UUID

import structlog
from django.db import transaction
from django.db.models import QuerySet
from django.utils import timezone

from modules.accounts.models import Role
from modules.pricing.exceptions import InactiveZone
from modules.shipments.classifier import FailureReasonClassifier
from modules.shipments.constants import (
    MANIFEST_TRANSITIONS,
    TERMINAL_STATES,
    ManifestStatus,
    ShipmentStatusName,
    ShippingFeePaidBy,
    SourceType,
)
from modules.shipments.events import (
    ManifestStatusChanged,
    ShipmentCreated,
    ShipmentStatusChanged,
)
from modules.shipments.exceptions import (
    InvalidManifestStatus,
    InvalidManifestTransition,
    InvalidStatusTransition,
    ManifestNotFound,
    MissingFailureReason,
    ShipmentNotFound,
)

if TYPE_CHECKING:
    from modules.accounts.models import Account
    from modules.accounts.services import AccountService
    from modules.pricing.resolver import PricingResolver
    from modules.shipments.classifier import ReasonClassifier
    from modules.shipments.dtos import CreateShipmentDTO
    from modules.shipments.models import (
        Shipment,
        ShipmentManifest,
        ShipmentStatus,
        ShipmentStatusHistory,
    )
    from modules.shipments.registry import StatusRegistry
    from modules.shipments.repositories.interfaces import (
        IManifestRepository,
        IShipmentRepository,
    )

logger = structlog.get_logger(__name__)


class ShipmentService:
    """Application service for the shipment lifecycle.

    Receives repositories and collaborators via constructor injection.
    ``classifier`` defaults to the keyword-based
    ``FailureReasonClassifier``.
    """

    def __init__(
        self,
        shipment_repository: IShipmentRepository,
        status_registry: StatusRegistry,
        pricing_resolver: PricingResolver,
        account_service: AccountService,
        classifier: Optional[ReasonClassifier] = None,
    ) -> None:
        self._shipment_repo = shipment_repository
        self._registry = status_registry
        self._pricing = pricing_resolver
        self._accounts = account_service
        self._classifier = classifier or FailureReasonClassifier()

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_shipment(self, dto: CreateShipmentDTO) -> Shipment:
        """Create a shipment with a resolved fee and its first history row.

        Raises:
            AccountNotFound / InactiveAccount / RoleMismatch: bad merchant.
            ZoneNotFound: the zone does not exist.
            InactiveZone: the zone does not accept shipments.
        """
        log = logger.bind(merchant_id=str(dto.merchant_id), zone_id=str(dto.zone_id))
        log.info("shipment.creation_started")

        merchant = self._accounts.require_role(dto.merchant_id, Role.MERCHANT)
        zone = self._pricing.get_zone(dto.zone_id)
        if not zone.is_active:
            raise InactiveZone(f"Zone {zone.name} is not accepting shipments.")

        recipient = self._shipment_repo.get_or_create_recipient(
            name=dto.recipient_name,
            phone=dto.recipient_phone,
            address=dto.recipient_address,
        )
        fee = self._pricing.resolve(merchant.id, zone)

        shipment = self._register(
            {
                "merchant": merchant,
                "zone": zone,
                "recipient": recipient,
                "item_value": dto.item_value,
                "cod_amount": dto.cod_amount,
                "delivery_fee": fee,
                "source_type": dto.source_type,
                "shipping_fee_paid_by": dto.shipping_fee_paid_by,
            },
            notes="Shipment created",
        )
        log.info(
            "shipment.created",
            shipment_id=str(shipment.id),
            tracking_number=shipment.tracking_number,
            delivery_fee=str(fee),
        )
        return shipment

    @transaction.atomic
    def create_return_shipment(self, original: Shipment) -> Shipment:
        """Create the mirror shipment that carries *original* back.

        Merchant, zone, recipient, item value, COD amount and delivery
        fee are copied (the fee is not re-resolved).
        """
        shipment = self._register(
            {
                "merchant": original.merchant,
                "zone": original.zone,
                "recipient": original.recipient,
                "item_value": original.item_value,
                "cod_amount": original.cod_amount,
                "delivery_fee": original.delivery_fee,
                "source_type": SourceType.MERCHANT,
                "shipping_fee_paid_by": ShippingFeePaidBy.MERCHANT,
                "cash_reconciled": False,
            },
            notes=f"Return shipment created for: {original.tracking_number}",
        )
        logger.info(
            "shipment.return_created",
            original_id=str(original.id),
            return_id=str(shipment.id),
            tracking_number=shipment.tracking_number,
        )
        return shipment

    def _register(self, data: Dict[str, Any], notes: str) -> Shipment:
        status = self._registry.initial_status()
        shipment = self._shipment_repo.create({**data, "status": status})
        shipment.add_domain_event(
            ShipmentCreated(
                aggregate_id=shipment.id,
                tracking_number=shipment.tracking_number,
                merchant_id=str(shipment.merchant_id),
            )
        )
        self._shipment_repo.save(shipment)
        self._shipment_repo.add_history(shipment, status, notes, old_status=None)
        return shipment

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    @transaction.atomic
    def update_status(
        self,
        shipment_id: UUID | str,
        new_status: str,
        reason: Optional[str] = None,
    ) -> Shipment:
        """Advance a shipment to *new_status*.

        When *new_status* is FAILED_ATTEMPT the stored status comes from
        classifying *reason*.  The history note is ``"Reason: <reason>"``
        when a reason is supplied, otherwise ``"Status updated"``.

        Raises:
            ShipmentNotFound: shipment does not exist.
            StatusNotFound: *new_status* is not in the registry.
            MissingFailureReason: FAILED_ATTEMPT without reason text.
            InvalidStatusTransition: the shipment is in a terminal state.
        """
        reason = (reason or "").strip() or None
        if new_status == ShipmentStatusName.FAILED_ATTEMPT:
            if reason is None:
                raise MissingFailureReason(
                    "A reason is required when reporting a failed attempt."
                )
            target = self._registry.require(self._classifier.classify(reason))
            logger.info(
                "shipment.failure_reason_classified",
                shipment_id=str(shipment_id),
                target=target.name,
            )
        else:
            target = self._registry.get(new_status)

        shipment = self.lock_shipment(shipment_id)
        notes = f"Reason: {reason}" if reason else "Status updated"
        return self._apply(shipment, target, notes)

    @transaction.atomic
    def apply_transition(
        self, shipment: Shipment, status_name: str, notes: str
    ) -> Shipment:
        """Move an already-locked *shipment* to a workflow-required status."""
        return self._apply(shipment, self._registry.require(status_name), notes)

    @transaction.atomic
    def record_note(self, shipment: Shipment, notes: str) -> ShipmentStatusHistory:
        """Append a history row at the current status without changing it."""
        history = self._shipment_repo.add_history(
            shipment, shipment.status, notes, old_status=shipment.status
        )
        logger.info(
            "shipment.note_recorded",
            shipment_id=str(shipment.id),
            status=shipment.status.name,
        )
        return history

    def _apply(
        self, shipment: Shipment, target: ShipmentStatus, notes: str
    ) -> Shipment:
        old_status = shipment.status
        log = logger.bind(
            shipment_id=str(shipment.id),
            tracking_number=shipment.tracking_number,
            current_status=old_status.name,
            new_status=target.name,
        )

        if old_status.name in TERMINAL_STATES:
            log.warning("shipment.invalid_transition")
            raise InvalidStatusTransition(
                f"Shipment {shipment.tracking_number} is {old_status.name} "
                f"and cannot move to {target.name}."
            )

        shipment.status = target
        if target.name == ShipmentStatusName.DELIVERED:
            shipment.delivered_at = timezone.now()
        shipment.add_domain_event(
            ShipmentStatusChanged(
                aggregate_id=shipment.id,
                tracking_number=shipment.tracking_number,
                old_status=old_status.name,
                new_status=target.name,
                notes=notes,
            )
        )
        self._shipment_repo.save(shipment)
        self._shipment_repo.add_history(shipment, target, notes, old_status=old_status)

        log.info("shipment.status_updated")
        return shipment

    # ------------------------------------------------------------------
    # Locking look-ups (callers must be inside a transaction)
    # ------------------------------------------------------------------

    def lock_shipment(self, shipment_id: UUID | str) -> Shipment:
        shipment = self._shipment_repo.get_for_update(str(shipment_id))
        if shipment is None:
            raise ShipmentNotFound(f"Shipment not found: {shipment_id}")
        return shipment

    def lock_by_tracking_number(self, tracking_number: str) -> Shipment:
        shipment = self._shipment_repo.get_by_tracking_number_for_update(
            tracking_number
        )
        if shipment is None:
            raise ShipmentNotFound(f"Shipment not found: {tracking_number}")
        return shipment

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_shipment(self, shipment_id: UUID | str) -> Shipment:
        shipment = self._shipment_repo.get_by_id(str(shipment_id))
        if shipment is None:
            raise ShipmentNotFound(f"Shipment not found: {shipment_id}")
        return shipment

    def get_by_tracking_number(self, tracking_number: str) -> Shipment:
        shipment = self._shipment_repo.get_by_tracking_number(tracking_number)
        if shipment is None:
            raise ShipmentNotFound(f"Shipment not found: {tracking_number}")
        return shipment

    def list_shipments(self, filters: Optional[Dict[str, Any]] = None) -> QuerySet:
        return self._shipment_repo.list(filters)

    def list_at_hub(self) -> List[Shipment]:
        return self._shipment_repo.list_at_hub()

    def get_history(self, shipment_id: UUID | str) -> List[ShipmentStatusHistory]:
        shipment = self.get_shipment(shipment_id)
        return self._shipment_repo.get_history(shipment.id)


class ManifestService:
    """Courier manifests: CREATED -> IN_PROGRESS -> COMPLETED / CANCELLED."""

    def __init__(self, manifest_repository: IManifestRepository) -> None:
        self._manifest_repo = manifest_repository

    @transaction.atomic
    def open_for_courier(self, courier: Account) -> ShipmentManifest:
        """Create a manifest for *courier* already marked IN_PROGRESS."""
        manifest = self._manifest_repo.create(courier)
        return self._move(manifest, ManifestStatus.IN_PROGRESS)

    @transaction.atomic
    def update_status(
        self, manifest_id: UUID | str, status_name: str
    ) -> ShipmentManifest:
        """Raises:
        InvalidManifestStatus: unknown status value.
        ManifestNotFound: manifest does not exist.
        InvalidManifestTransition: transition not allowed from current state.
        """
        if status_name not in ManifestStatus.values:
            raise InvalidManifestStatus(f"Invalid manifest status: {status_name}")
        manifest = self._manifest_repo.get_for_update(str(manifest_id))
        if manifest is None:
            raise ManifestNotFound(f"Manifest {manifest_id} not found.")
        return self._move(manifest, status_name)

    def get_manifest(self, manifest_id: UUID | str) -> ShipmentManifest:
        manifest = self._manifest_repo.get_by_id(str(manifest_id))
        if manifest is None:
            raise ManifestNotFound(f"Manifest {manifest_id} not found.")
        return manifest

    def list_for_courier(self, courier_id: UUID | str) -> List[ShipmentManifest]:
        return self._manifest_repo.list({"courier_id": courier_id})

    def _move(self, manifest: ShipmentManifest, status_name: str) -> ShipmentManifest:
        old_status = manifest.status
        if status_name not in MANIFEST_TRANSITIONS.get(old_status, set()):
            raise InvalidManifestTransition(
                f"Cannot transition manifest {manifest.manifest_number} "
                f"from {old_status} to {status_name}."
            )
        manifest.status = status_name
        if status_name == ManifestStatus.IN_PROGRESS and manifest.assigned_at is None:
            manifest.assigned_at = timezone.now()
        manifest.add_domain_event(
            ManifestStatusChanged(
                aggregate_id=manifest.id,
                manifest_number=manifest.manifest_number,
                courier_id=str(manifest.courier_id),
                old_status=str(old_status),
                new_status=str(status_name),
            )
        )
        self._manifest_repo.save(manifest)
        logger.info(
            "manifest.status_updated",
            manifest_id=str(manifest.id),
            old_status=str(old_status),
            new_status=str(status_name),
        )
        return manifest
