from decimal import Decimal

import pytest

from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from modules.accounts.models import Account, Role
from modules.pricing.models import Zone
from modules.shipments.constants import ShipmentStatusName
from modules.shipments.dtos import CreateShipmentDTO
from modules.shipments.factories import (
    build_account_service,
    build_manifest_service,
    build_shipment_service,
    build_status_registry,
)


@pytest.fixture(autouse=True)
def _use_db(db):
    """Automatically use the test database for all tests."""


@pytest.fixture(autouse=True)
def _canonical_statuses(_use_db):
    """Seed the status vocabulary the workflows look up by name."""
    build_status_registry().ensure_canonical()


@pytest.fixture()
def api_client():
    """DRF APIClient for testing API endpoints."""
    return APIClient()


@pytest.fixture()
def api_client_with_correlation(api_client):
    """APIClient pre-configured with a known correlation ID header."""
    cid = "test-correlation-id-fixture"
    api_client.defaults["HTTP_X_REQUEST_ID"] = cid
    return api_client, cid


# ---------------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------------


@pytest.fixture()
def make_account():
    """Factory for accounts, each linked to its own login."""
    counter = {"n": 0}

    def _make(role: Role, name: str | None = None, **overrides) -> Account:
        counter["n"] += 1
        n = counter["n"]
        user = get_user_model().objects.create_user(
            username=f"{role.value.lower()}-{n}", password="pass12345"
        )
        defaults = {
            "name": name or f"{role.label} {n}",
            "phone": f"+2010{n:08d}",
            "role": role,
            "user": user,
        }
        defaults.update(overrides)
        return Account.objects.create(**defaults)

    return _make


@pytest.fixture()
def merchant(make_account):
    return make_account(Role.MERCHANT, "Nile Gadgets")


@pytest.fixture()
def courier(make_account):
    return make_account(Role.COURIER, "Karim Courier")


@pytest.fixture()
def other_courier(make_account):
    return make_account(Role.COURIER, "Mona Courier")


@pytest.fixture()
def warehouse_manager(make_account):
    return make_account(Role.WAREHOUSE_MANAGER, "Hana Hub")


@pytest.fixture()
def admin_account(make_account):
    return make_account(Role.ADMIN, "Adam Admin")


@pytest.fixture()
def client_for(api_client):
    """Return an APIClient authenticated as the user behind an account."""

    def _client(account: Account) -> APIClient:
        api_client.force_authenticate(user=account.user)
        return api_client

    return _client


# ---------------------------------------------------------------------------
# Pricing
# ---------------------------------------------------------------------------


@pytest.fixture()
def zone():
    return Zone.objects.create(name="Downtown", default_fee=Decimal("50.00"))


# ---------------------------------------------------------------------------
# Services
# ---------------------------------------------------------------------------


@pytest.fixture()
def shipment_service():
    return build_shipment_service()


@pytest.fixture()
def manifest_service():
    return build_manifest_service()


@pytest.fixture()
def account_service():
    return build_account_service()


@pytest.fixture()
def status_registry():
    return build_status_registry()


# ---------------------------------------------------------------------------
# Shipments
# ---------------------------------------------------------------------------


@pytest.fixture()
def make_shipment(shipment_service, merchant, zone):
    """Factory creating shipments through the service (fee resolved)."""
    counter = {"n": 0}

    def _make(**overrides):
        counter["n"] += 1
        data = {
            "merchant_id": merchant.id,
            "zone_id": zone.id,
            "recipient_name": f"Recipient {counter['n']}",
            "recipient_phone": f"+20111{counter['n']:07d}",
            "recipient_address": "1 Corniche Street",
            "item_value": Decimal("300.00"),
            "cod_amount": Decimal("200.00"),
        }
        data.update(overrides)
        return shipment_service.create_shipment(CreateShipmentDTO(**data))

    return _make


@pytest.fixture()
def move_to(shipment_service):
    """Apply a chain of status transitions to a shipment."""

    def _move(shipment, *statuses: str):
        for name in statuses:
            shipment = shipment_service.update_status(shipment.id, name)
        return shipment

    return _move


@pytest.fixture()
def delivered_by(shipment_service, manifest_service, move_to):
    """Put a shipment on a courier manifest and mark it DELIVERED."""

    def _deliver(shipment, courier, manifest=None):
        manifest = manifest or manifest_service.open_for_courier(courier)
        shipment.manifest = manifest
        shipment.save(update_fields=["manifest"])
        return move_to(
            shipment,
            ShipmentStatusName.ASSIGNED_TO_COURIER,
            ShipmentStatusName.OUT_FOR_DELIVERY,
            ShipmentStatusName.DELIVERED,
        )

    return _deliver
