"""Shipment repositories package."""

from modules.shipments.repositories.django_repository import (
    ManifestDjangoRepository,
    ShipmentDjangoRepository,
    StatusDjangoRepository,
)
from modules.shipments.repositories.interfaces import (
    IManifestRepository,
    IShipmentRepository,
    IStatusRepository,
)

__all__ = [
    "IManifestRepository",
    "IShipmentRepository",
    "IStatusRepository",
    "ManifestDjangoRepository",
    "ShipmentDjangoRepository",
    "StatusDjangoRepository",
]
