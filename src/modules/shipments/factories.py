"""Wiring of shipment services to their Django ORM repositories.

Views and other modules' services use these builders so every caller
gets the same collaborators.
"""

from __future__ import annotations

from modules.accounts.repositories.django_repository import AccountDjangoRepository
from modules.accounts.services import AccountService
from modules.core.repositories.django_repository import SettingsDjangoRepository
from modules.pricing.repositories.django_repository import PricingDjangoRepository
from modules.pricing.resolver import PricingResolver
from modules.shipments.registry import StatusRegistry
from modules.shipments.repositories.django_repository import (
    ManifestDjangoRepository,
    ShipmentDjangoRepository,
    StatusDjangoRepository,
)
from modules.shipments.services import ManifestService, ShipmentService


def build_status_registry() -> StatusRegistry:
    return StatusRegistry(status_repository=StatusDjangoRepository())


def build_pricing_resolver() -> PricingResolver:
    return PricingResolver(
        pricing_repository=PricingDjangoRepository(),
        settings_repository=SettingsDjangoRepository(),
    )


def build_account_service() -> AccountService:
    return AccountService(account_repository=AccountDjangoRepository())


def build_shipment_service() -> ShipmentService:
    return ShipmentService(
        shipment_repository=ShipmentDjangoRepository(),
        status_registry=build_status_registry(),
        pricing_resolver=build_pricing_resolver(),
        account_service=build_account_service(),
    )


def build_manifest_service() -> ManifestService:
    return ManifestService(manifest_repository=ManifestDjangoRepository())
