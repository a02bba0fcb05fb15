"""Integration tests for the warehouse API.

Covers:
- receive / dispatch / reconcile answer 200 with per-item errors.
- A bad courier fails the whole request with 403.
- Only warehouse managers and staff may call the endpoints.
- inventory lists hub shipments.
"""

from __future__ import annotations

import pytest

from modules.shipments.models import Shipment

pytestmark = pytest.mark.integration

WAREHOUSE_URL = "/api/v1/warehouse/"


@pytest.fixture()
def hub_client(client_for, warehouse_manager):
    return client_for(warehouse_manager)


def _receive(client, *tracking_numbers):
    return client.post(
        f"{WAREHOUSE_URL}receive/",
        {"tracking_numbers": list(tracking_numbers)},
        format="json",
    )


class TestWarehouseApi:
    def test_receive_partial_success(self, hub_client, make_shipment):
        a = make_shipment()
        response = _receive(hub_client, a.tracking_number, "B")

        assert response.status_code == 200
        body = response.json()
        assert body["processed"] == 1
        assert len(body["errors"]) == 1
        assert "B" in body["errors"][0]

    def test_receive_requires_items(self, hub_client):
        response = _receive(hub_client)
        assert response.status_code == 400

    def test_dispatch_opens_manifest(self, hub_client, make_shipment, courier):
        a = make_shipment()
        _receive(hub_client, a.tracking_number)

        response = hub_client.post(
            f"{WAREHOUSE_URL}dispatch/",
            {"courier_id": str(courier.id), "shipment_ids": [str(a.id)]},
            format="json",
        )

        assert response.status_code == 200
        body = response.json()
        assert body["processed"] == 1
        assert body["manifest_id"] is not None
        assert str(Shipment.objects.get(pk=a.pk).manifest_id) == body["manifest_id"]

    def test_dispatch_to_non_courier_is_forbidden(
        self, hub_client, make_shipment, merchant
    ):
        a = make_shipment()
        _receive(hub_client, a.tracking_number)
        response = hub_client.post(
            f"{WAREHOUSE_URL}dispatch/",
            {"courier_id": str(merchant.id), "shipment_ids": [str(a.id)]},
            format="json",
        )
        assert response.status_code == 403
        assert response.json()["code"] == "RoleMismatch"

    def test_reconcile_returned(self, hub_client, make_shipment, courier):
        a = make_shipment()
        _receive(hub_client, a.tracking_number)
        hub_client.post(
            f"{WAREHOUSE_URL}dispatch/",
            {"courier_id": str(courier.id), "shipment_ids": [str(a.id)]},
            format="json",
        )

        response = hub_client.post(
            f"{WAREHOUSE_URL}reconcile/",
            {"courier_id": str(courier.id), "returned_ids": [str(a.id)]},
            format="json",
        )

        assert response.status_code == 200
        assert response.json()["returned"] == 1
        assert Shipment.objects.get(pk=a.pk).status.name == "RETURNED_TO_HUB"

    def test_reconcile_needs_a_list(self, hub_client, courier):
        response = hub_client.post(
            f"{WAREHOUSE_URL}reconcile/",
            {"courier_id": str(courier.id)},
            format="json",
        )
        assert response.status_code == 400

    def test_inventory(self, hub_client, make_shipment):
        a = make_shipment()
        make_shipment()
        _receive(hub_client, a.tracking_number)

        response = hub_client.get(f"{WAREHOUSE_URL}inventory/")
        assert [row["id"] for row in response.json()] == [str(a.id)]

    @pytest.mark.parametrize("role_fixture", ["merchant", "courier"])
    def test_other_roles_forbidden(self, request, client_for, role_fixture):
        account = request.getfixturevalue(role_fixture)
        response = client_for(account).get(f"{WAREHOUSE_URL}inventory/")
        assert response.status_code == 403
