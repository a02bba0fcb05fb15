"""Warehouse workflows: receive, dispatch, reconcile.

Batches are partial-success: every item runs in its own transaction, a
``DomainError`` on one item is recorded (``str(exc)``) and the batch
moves on.  Courier validation happens once, up front, and fails the
whole call.  ``MissingRequiredStatus`` is never caught.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, List, Optional
from uuid import UUID

import structlog
from django.db import transaction

from modules.accounts.models import Role
from modules.core.exceptions import DomainError
from modules.shipments.constants import ShipmentStatusName
from modules.shipments.exceptions import (
    ShipmentNotInWarehouse,
    ShipmentNotOwnedByCourier,
)
from modules.warehouse.dtos import WarehouseBatchResult

if TYPE_CHECKING:
    from modules.accounts.models import Account
    from modules.accounts.services import AccountService
    from modules.shipments.models import Shipment, ShipmentManifest
    from modules.shipments.services import ManifestService, ShipmentService

logger = structlog.get_logger(__name__)

RECEIVED_NOTE = "Received at warehouse by manager"
CASH_CONFIRMED_NOTE = "Cash reconciliation confirmed by warehouse manager"


class WarehouseService:
    def __init__(
        self,
        shipment_service: ShipmentService,
        manifest_service: ManifestService,
        account_service: AccountService,
    ) -> None:
        self._shipments = shipment_service
        self._manifests = manifest_service
        self._accounts = account_service

    # ------------------------------------------------------------------
    # Receive
    # ------------------------------------------------------------------

    def receive(self, tracking_numbers: Iterable[str]) -> WarehouseBatchResult:
        """Mark each shipment RECEIVED_AT_HUB."""
        processed = 0
        errors: List[str] = []
        for tracking_number in tracking_numbers:
            try:
                with transaction.atomic():
                    shipment = self._shipments.lock_by_tracking_number(tracking_number)
                    self._shipments.apply_transition(
                        shipment, ShipmentStatusName.RECEIVED_AT_HUB, RECEIVED_NOTE
                    )
            except DomainError as exc:
                errors.append(str(exc))
                continue
            processed += 1

        logger.info("warehouse.received", processed=processed, failed=len(errors))
        return WarehouseBatchResult(processed=processed, errors=errors)

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def dispatch_to_courier(
        self, courier_id: UUID | str, shipment_ids: Iterable[UUID | str]
    ) -> WarehouseBatchResult:
        """Hand hub shipments to *courier_id* on one new manifest.

        The manifest is opened with the first shipment that dispatches
        successfully; a batch where nothing moves creates none.

        Raises:
            AccountNotFound / InactiveAccount / RoleMismatch: bad courier.
        """
        courier = self._accounts.require_role(courier_id, Role.COURIER)
        log = logger.bind(courier_id=str(courier.id))

        manifest: Optional[ShipmentManifest] = None
        processed = 0
        errors: List[str] = []
        for shipment_id in shipment_ids:
            try:
                with transaction.atomic():
                    shipment = self._shipments.lock_shipment(shipment_id)
                    self._ensure_at_hub(shipment)
                    current = manifest or self._manifests.open_for_courier(courier)
                    shipment.manifest = current
                    self._shipments.apply_transition(
                        shipment,
                        ShipmentStatusName.ASSIGNED_TO_COURIER,
                        f"Dispatched to courier: {courier.name}",
                    )
            except DomainError as exc:
                errors.append(str(exc))
                continue
            manifest = current
            processed += 1

        log.info(
            "warehouse.dispatched",
            manifest_id=str(manifest.id) if manifest else None,
            processed=processed,
            failed=len(errors),
        )
        return WarehouseBatchResult(
            processed=processed,
            errors=errors,
            manifest_id=manifest.id if manifest else None,
        )

    # ------------------------------------------------------------------
    # Reconcile
    # ------------------------------------------------------------------

    def reconcile_with_courier(
        self,
        courier_id: UUID | str,
        cash_confirmed_ids: Iterable[UUID | str] = (),
        returned_ids: Iterable[UUID | str] = (),
    ) -> WarehouseBatchResult:
        """End-of-day reconciliation.

        Cash-confirmed shipments get a history note at their current
        status; ``cash_reconciled`` is not changed here.  Returned
        shipments move to RETURNED_TO_HUB.

        Raises:
            AccountNotFound / InactiveAccount / RoleMismatch: bad courier.
        """
        courier = self._accounts.require_role(courier_id, Role.COURIER)
        errors: List[str] = []

        cash_confirmed = 0
        for shipment_id in cash_confirmed_ids:
            try:
                with transaction.atomic():
                    shipment = self._lock_owned(shipment_id, courier)
                    self._shipments.record_note(shipment, CASH_CONFIRMED_NOTE)
            except DomainError as exc:
                errors.append(str(exc))
                continue
            cash_confirmed += 1

        returned = 0
        for shipment_id in returned_ids:
            try:
                with transaction.atomic():
                    shipment = self._lock_owned(shipment_id, courier)
                    self._shipments.apply_transition(
                        shipment,
                        ShipmentStatusName.RETURNED_TO_HUB,
                        f"Returned to warehouse from courier: {courier.name}",
                    )
            except DomainError as exc:
                errors.append(str(exc))
                continue
            returned += 1

        logger.info(
            "warehouse.reconciled",
            courier_id=str(courier.id),
            cash_confirmed=cash_confirmed,
            returned=returned,
            failed=len(errors),
        )
        return WarehouseBatchResult(
            processed=cash_confirmed + returned,
            errors=errors,
            cash_confirmed=cash_confirmed,
            returned=returned,
        )

    # ------------------------------------------------------------------
    # Inventory
    # ------------------------------------------------------------------

    def inventory(self) -> List[Shipment]:
        return self._shipments.list_at_hub()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _ensure_at_hub(shipment: Shipment) -> None:
        if not shipment.is_at_hub:
            raise ShipmentNotInWarehouse(
                f"Shipment {shipment.tracking_number} is not in warehouse"
            )

    def _lock_owned(self, shipment_id: UUID | str, courier: Account) -> Shipment:
        shipment = self._shipments.lock_shipment(shipment_id)
        if shipment.courier_id != courier.id:
            raise ShipmentNotOwnedByCourier(
                f"Shipment {shipment.tracking_number} does not belong to this courier"
            )
        return shipment
