"""Warehouse API views (WAREHOUSE_MANAGER, ADMIN and OWNER only).

Batch endpoints always answer 200 with the per-item error list; only a
bad courier or a malformed payload fails the whole request.
"""

from __future__ import annotations

from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import ViewSet

from modules.accounts.models import Role
from modules.accounts.permissions import HasRole
from modules.core.api import domain_error_response
from modules.core.exceptions import DomainError
from modules.shipments.factories import (
    build_account_service,
    build_manifest_service,
    build_shipment_service,
)
from modules.shipments.serializers import ShipmentListSerializer
from modules.warehouse.serializers import (
    DispatchSerializer,
    ReceiveSerializer,
    ReconcileSerializer,
)
from modules.warehouse.services import WarehouseService


class WarehouseViewSet(ViewSet):
    permission_classes = [
        IsAuthenticated,
        HasRole.of(Role.WAREHOUSE_MANAGER, Role.ADMIN, Role.OWNER),
    ]
    throttle_scope = "warehouse"

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = WarehouseService(
            shipment_service=build_shipment_service(),
            manifest_service=build_manifest_service(),
            account_service=build_account_service(),
        )

    @action(detail=False, methods=["post"])
    def receive(self, request: Request) -> Response:
        """POST /api/v1/warehouse/receive/"""
        serializer = ReceiveSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = self._service.receive(serializer.validated_data["tracking_numbers"])
        return Response(result.model_dump(mode="json"))

    @action(detail=False, methods=["post"], url_path="dispatch")
    def dispatch_to_courier(self, request: Request) -> Response:
        """POST /api/v1/warehouse/dispatch/"""
        serializer = DispatchSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            result = self._service.dispatch_to_courier(
                serializer.validated_data["courier_id"],
                serializer.validated_data["shipment_ids"],
            )
        except DomainError as exc:
            return domain_error_response(exc)
        return Response(result.model_dump(mode="json"))

    @action(detail=False, methods=["post"])
    def reconcile(self, request: Request) -> Response:
        """POST /api/v1/warehouse/reconcile/"""
        serializer = ReconcileSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            result = self._service.reconcile_with_courier(
                serializer.validated_data["courier_id"],
                cash_confirmed_ids=serializer.validated_data["cash_confirmed_ids"],
                returned_ids=serializer.validated_data["returned_ids"],
            )
        except DomainError as exc:
            return domain_error_response(exc)
        return Response(result.model_dump(mode="json"))

    @action(detail=False, methods=["get"])
    def inventory(self, request: Request) -> Response:
        """GET /api/v1/warehouse/inventory/"""
        shipments = self._service.inventory()
        return Response(ShipmentListSerializer(shipments, many=True).data)
