"""Status registry: the canonical vocabulary of shipment states.

Look-ups are exact and case-sensitive.  Statuses the workflows depend on
are fetched with ``require``; a miss there means the deployment was never
seeded and raises ``MissingRequiredStatus`` instead of a domain error.
The same set is verified at startup by the ``shipments.E001`` system
check (see ``modules.shipments.checks``).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional
from uuid import UUID

import structlog
from django.db import transaction

from modules.shipments.constants import REQUIRED_STATUSES, ShipmentStatusName
from modules.shipments.exceptions import (
    DuplicateStatusName,
    InvalidStatusName,
    MissingRequiredStatus,
    StatusInUse,
    StatusNotFound,
)

if TYPE_CHECKING:
    from modules.shipments.models import ShipmentStatus
    from modules.shipments.repositories.interfaces import IStatusRepository

logger = structlog.get_logger(__name__)


class StatusRegistry:
    def __init__(self, status_repository: IStatusRepository) -> None:
        self._status_repo = status_repository

    # ------------------------------------------------------------------
    # Look-ups
    # ------------------------------------------------------------------

    def find(self, name: str) -> Optional[ShipmentStatus]:
        return self._status_repo.get_by_name(name)

    def exists(self, name: str) -> bool:
        return self.find(name) is not None

    def get(self, name: str) -> ShipmentStatus:
        """Raises ``StatusNotFound`` for unknown names."""
        status = self.find(name)
        if status is None:
            raise StatusNotFound(f"Status not found: {name}")
        return status

    def require(self, name: str) -> ShipmentStatus:
        """Look up a status the workflows cannot run without."""
        status = self.find(name)
        if status is None:
            logger.critical("shipment_status.required_missing", name=name)
            raise MissingRequiredStatus(
                f"Required shipment status {name} is not configured; "
                "run the seed_data management command."
            )
        return status

    def initial_status(self) -> ShipmentStatus:
        """PENDING_APPROVAL, falling back to PENDING."""
        status = self.find(ShipmentStatusName.PENDING_APPROVAL)
        if status is not None:
            return status
        return self.require(ShipmentStatusName.PENDING)

    def all(self) -> List[ShipmentStatus]:
        return self._status_repo.list_all()

    def missing_required(self) -> List[str]:
        return [name for name in REQUIRED_STATUSES if not self.exists(name)]

    # ------------------------------------------------------------------
    # Administration
    # ------------------------------------------------------------------

    @transaction.atomic
    def create(self, name: str, description: str = "") -> ShipmentStatus:
        name = self._validate_name(name)
        if self.exists(name):
            raise DuplicateStatusName(f"Status {name} already exists.")
        return self._status_repo.create(
            name, description, self._status_repo.next_position()
        )

    @transaction.atomic
    def rename(
        self, status_id: UUID | str, name: str, description: Optional[str] = None
    ) -> ShipmentStatus:
        status = self._get_by_id(status_id)
        name = self._validate_name(name)
        clash = self.find(name)
        if clash is not None and clash.id != status.id:
            raise DuplicateStatusName(f"Status {name} already exists.")

        log = logger.bind(status_id=str(status.id), old_name=status.name, new_name=name)
        status.name = name
        if description is not None:
            status.description = description
        self._status_repo.save(status)
        log.info("shipment_status.renamed")
        return status

    @transaction.atomic
    def delete(self, status_id: UUID | str) -> None:
        status = self._get_by_id(status_id)
        if self._status_repo.is_referenced(status):
            raise StatusInUse(f"Status {status.name} is in use and cannot be deleted.")
        self._status_repo.delete(status)

    @transaction.atomic
    def ensure_canonical(self) -> int:
        """Seed any missing canonical status; returns how many were created."""
        created = 0
        for position, choice in enumerate(ShipmentStatusName):
            if self.exists(choice.value):
                continue
            self._status_repo.create(choice.value, str(choice.label), position)
            created += 1
        if created:
            logger.info("shipment_status.seeded", created=created)
        return created

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _get_by_id(self, status_id: UUID | str) -> ShipmentStatus:
        status = self._status_repo.get_by_id(str(status_id))
        if status is None:
            raise StatusNotFound(f"Status {status_id} not found.")
        return status

    @staticmethod
    def _validate_name(name: str) -> str:
        cleaned = (name or "").strip()
        if not cleaned:
            raise InvalidStatusName("Status name must not be blank.")
        return cleaned
