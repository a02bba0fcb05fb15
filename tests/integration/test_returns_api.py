"""Integration tests for the return-to-origin API."""

from __future__ import annotations

import pytest

from modules.returns.models import ReturnShipment
from modules.shipments.constants import ShipmentStatusName

pytestmark = pytest.mark.integration

RETURNS_URL = "/api/v1/returns/"


class TestReturnsApi:
    def test_merchant_requests_return(
        self, client_for, merchant, make_shipment, move_to
    ):
        original = move_to(make_shipment(), ShipmentStatusName.OUT_FOR_DELIVERY)
        response = client_for(merchant).post(
            RETURNS_URL,
            {"shipment_id": str(original.id), "reason": "Customer refused"},
            format="json",
        )

        assert response.status_code == 201
        body = response.json()
        assert body["original_shipment"]["status"] == "RETURNED_TO_ORIGIN"
        assert body["return_shipment"]["status"] == "PENDING_APPROVAL"
        assert body["return_shipment"]["delivery_fee"] == "50.00"
        assert body["reason"] == "Customer refused"

    def test_delivered_is_conflict(self, client_for, merchant, make_shipment, move_to):
        delivered = move_to(make_shipment(), ShipmentStatusName.DELIVERED)
        response = client_for(merchant).post(
            RETURNS_URL,
            {"shipment_id": str(delivered.id), "reason": "late"},
            format="json",
        )
        assert response.status_code == 409
        assert response.json()["code"] == "NotEligibleForReturn"

    def test_blank_reason(self, client_for, merchant, make_shipment):
        response = client_for(merchant).post(
            RETURNS_URL,
            {"shipment_id": str(make_shipment().id), "reason": " "},
            format="json",
        )
        assert response.status_code == 400
        assert response.json()["code"] == "MissingReturnReason"

    def test_other_merchant_gets_404(self, client_for, make_account, make_shipment):
        from modules.accounts.models import Role

        stranger = make_account(Role.MERCHANT)
        response = client_for(stranger).post(
            RETURNS_URL,
            {"shipment_id": str(make_shipment().id), "reason": "refused"},
            format="json",
        )
        assert response.status_code == 404
        assert not ReturnShipment.objects.exists()

    def test_courier_cannot_request(self, client_for, courier, make_shipment):
        response = client_for(courier).post(
            RETURNS_URL,
            {"shipment_id": str(make_shipment().id), "reason": "refused"},
            format="json",
        )
        assert response.status_code == 403

    def test_retrieve(self, client_for, merchant, make_shipment, move_to):
        original = move_to(make_shipment(), ShipmentStatusName.OUT_FOR_DELIVERY)
        client = client_for(merchant)
        created = client.post(
            RETURNS_URL,
            {"shipment_id": str(original.id), "reason": "refused"},
            format="json",
        ).json()

        response = client.get(f"{RETURNS_URL}{created['id']}/")
        assert response.status_code == 200
        assert response.json()["original_shipment"]["id"] == str(original.id)
