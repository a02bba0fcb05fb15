"""Integration tests for status vocabulary and manifest endpoints."""

from __future__ import annotations

import pytest

from modules.shipments.models import ShipmentStatus

pytestmark = pytest.mark.integration

STATUSES_URL = "/api/v1/statuses/"
MANIFESTS_URL = "/api/v1/manifests/"


class TestStatusesApi:
    def test_any_user_can_list(self, client_for, courier):
        response = client_for(courier).get(STATUSES_URL)
        assert response.status_code == 200
        names = [row["name"] for row in response.json()]
        assert "PENDING_APPROVAL" in names
        assert "RETURNED_TO_ORIGIN" in names

    def test_admin_creates_status(self, client_for, admin_account):
        response = client_for(admin_account).post(
            STATUSES_URL, {"name": "LOST", "description": "Lost"}, format="json"
        )
        assert response.status_code == 201
        assert ShipmentStatus.objects.filter(name="LOST").exists()

    def test_duplicate_is_conflict(self, client_for, admin_account):
        response = client_for(admin_account).post(
            STATUSES_URL, {"name": "DELIVERED"}, format="json"
        )
        assert response.status_code == 409
        assert response.json()["code"] == "DuplicateStatusName"

    def test_merchant_cannot_create(self, client_for, merchant):
        response = client_for(merchant).post(
            STATUSES_URL, {"name": "LOST"}, format="json"
        )
        assert response.status_code == 403

    def test_rename(self, client_for, admin_account):
        status = ShipmentStatus.objects.create(name="LOST", position=99)
        response = client_for(admin_account).patch(
            f"{STATUSES_URL}{status.id}/", {"name": "MISSING"}, format="json"
        )
        assert response.status_code == 200
        assert response.json()["name"] == "MISSING"

    def test_delete_in_use_is_conflict(self, client_for, admin_account, make_shipment):
        shipment = make_shipment()
        response = client_for(admin_account).delete(
            f"{STATUSES_URL}{shipment.status_id}/"
        )
        assert response.status_code == 409
        assert response.json()["code"] == "StatusInUse"

    def test_delete_unused(self, client_for, admin_account):
        status = ShipmentStatus.objects.create(name="LOST", position=99)
        response = client_for(admin_account).delete(f"{STATUSES_URL}{status.id}/")
        assert response.status_code == 204


class TestManifestsApi:
    @pytest.fixture()
    def manifest(self, manifest_service, courier):
        return manifest_service.open_for_courier(courier)

    def test_courier_lists_own(self, client_for, courier, manifest):
        response = client_for(courier).get(MANIFESTS_URL)
        assert [row["id"] for row in response.json()] == [str(manifest.id)]

    def test_staff_filter_by_courier(
        self, client_for, admin_account, courier, manifest
    ):
        response = client_for(admin_account).get(
            MANIFESTS_URL, {"courier": str(courier.id)}
        )
        assert [row["id"] for row in response.json()] == [str(manifest.id)]

    def test_other_courier_cannot_see(self, client_for, other_courier, manifest):
        response = client_for(other_courier).get(f"{MANIFESTS_URL}{manifest.id}/")
        assert response.status_code == 404

    def test_complete_manifest(self, client_for, courier, manifest):
        response = client_for(courier).post(
            f"{MANIFESTS_URL}{manifest.id}/status/",
            {"status": "COMPLETED"},
            format="json",
        )
        assert response.status_code == 200
        assert response.json()["status"] == "COMPLETED"

    def test_completed_manifest_cannot_reopen(
        self, client_for, courier, manifest, manifest_service
    ):
        manifest_service.update_status(manifest.id, "COMPLETED")
        response = client_for(courier).post(
            f"{MANIFESTS_URL}{manifest.id}/status/",
            {"status": "IN_PROGRESS"},
            format="json",
        )
        assert response.status_code == 409
        assert response.json()["code"] == "InvalidManifestTransition"
