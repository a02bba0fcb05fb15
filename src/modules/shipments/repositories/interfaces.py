"""Shipment repository interfaces.

``IShipmentRepository`` covers the Shipment aggregate (shipment, its
recipient and its append-only status history).  ``IStatusRepository``
backs the status registry and ``IManifestRepository`` the courier
manifests.  The Service Layer depends exclusively on these contracts.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Dict, List, Optional
from uuid import UUID

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from django.db.models import QuerySet

    from modules.accounts.models import Account
    from modules.shipments.models import (
        Recipient,
        Shipment,
        ShipmentManifest,
        ShipmentStatus,
        ShipmentStatusHistory,
    )


class IStatusRepository(ABC):
    @abstractmethod
    def get_by_id(self, id: str) -> Optional[ShipmentStatus]:
        """Retrieve a status by primary key."""

    @abstractmethod
    def get_by_name(self, name: str) -> Optional[ShipmentStatus]:
        """Exact, case-sensitive name look-up."""

    @abstractmethod
    def list_all(self) -> List[ShipmentStatus]:
        """All statuses in display order."""

    @abstractmethod
    def create(self, name: str, description: str, position: int) -> ShipmentStatus:
        """Insert a new status row."""

    @abstractmethod
    def save(self, status: ShipmentStatus) -> ShipmentStatus:
        """Persist changes to a status row."""

    @abstractmethod
    def delete(self, status: ShipmentStatus) -> None:
        """Physically remove a status row."""

    @abstractmethod
    def is_referenced(self, status: ShipmentStatus) -> bool:
        """``True`` when shipments or history rows point at *status*."""

    @abstractmethod
    def next_position(self) -> int:
        """Position for a status appended after the existing ones."""


class IShipmentRepository(IRepository["Shipment"]):
    @abstractmethod
    def create(self, data: Dict[str, Any]) -> Shipment:
        """Create a shipment (tracking number assigned on save)."""

    @abstractmethod
    def get_by_tracking_number(self, tracking_number: str) -> Optional[Shipment]:
        """Retrieve a shipment by tracking number."""

    @abstractmethod
    def get_by_tracking_number_for_update(
        self, tracking_number: str
    ) -> Optional[Shipment]:
        """Retrieve and lock a shipment by tracking number."""

    @abstractmethod
    def list(self, filters: Optional[Dict[str, Any]] = None) -> QuerySet:
        """Shipments with eager-loaded references, optionally filtered."""

    @abstractmethod
    def list_at_hub(self) -> List[Shipment]:
        """Shipments whose current status is a hub state."""

    @abstractmethod
    def add_history(
        self,
        shipment: Shipment,
        status: ShipmentStatus,
        notes: str = "",
        old_status: Optional[ShipmentStatus] = None,
    ) -> ShipmentStatusHistory:
        """Append one row to the shipment's audit trail."""

    @abstractmethod
    def get_history(self, shipment_id: UUID | str) -> List[ShipmentStatusHistory]:
        """History rows in creation order."""

    @abstractmethod
    def get_or_create_recipient(
        self, name: str, phone: str, address: str = ""
    ) -> Recipient:
        """Reuse the recipient with *phone* or create it."""


class IManifestRepository(IRepository["ShipmentManifest"]):
    @abstractmethod
    def create(self, courier: Account) -> ShipmentManifest:
        """Create a manifest for *courier* (number assigned on save)."""

    @abstractmethod
    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[ShipmentManifest]:
        """List manifests with optional filters."""
