"""Return-to-origin API views."""

from __future__ import annotations

from rest_framework import serializers, status
from rest_framework.permissions import BasePermission, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from modules.accounts.models import Role
from modules.accounts.permissions import HasRole
from modules.core.api import domain_error_response
from modules.core.exceptions import DomainError
from modules.returns.models import ReturnShipment
from modules.returns.repositories import ReturnDjangoRepository
from modules.returns.services import ReturnService
from modules.shipments.factories import build_shipment_service
from modules.shipments.serializers import ShipmentSerializer
from modules.shipments.views import scope_to_caller


class CreateReturnSerializer(serializers.Serializer):
    shipment_id = serializers.UUIDField()
    reason = serializers.CharField(allow_blank=True)


class ReturnShipmentSerializer(serializers.ModelSerializer):
    original_shipment = ShipmentSerializer(read_only=True)
    return_shipment = ShipmentSerializer(read_only=True)

    class Meta:
        model = ReturnShipment
        fields = ["id", "reason", "original_shipment", "return_shipment", "created_at"]
        read_only_fields = fields


class ReturnViewSet(GenericViewSet):
    """POST /api/v1/returns/ requests an RTO; GET retrieves the link."""

    pagination_class = None

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._shipments = build_shipment_service()
        self._service = ReturnService(
            shipment_service=self._shipments,
            return_repository=ReturnDjangoRepository(),
        )

    def get_permissions(self) -> list[BasePermission]:
        if self.action == "create":
            return [
                IsAuthenticated(),
                HasRole.of(
                    Role.MERCHANT, Role.WAREHOUSE_MANAGER, Role.ADMIN, Role.OWNER
                )(),
            ]
        return [IsAuthenticated()]

    def _visible(self, request: Request, shipment_id) -> bool:
        queryset = scope_to_caller(request, self._shipments.list_shipments())
        return queryset.filter(pk=shipment_id).exists()

    def create(self, request: Request) -> Response:
        serializer = CreateReturnSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        shipment_id = serializer.validated_data["shipment_id"]

        if not self._visible(request, shipment_id):
            return Response(
                {"detail": f"Shipment not found: {shipment_id}"},
                status=status.HTTP_404_NOT_FOUND,
            )
        try:
            link = self._service.create_return(
                shipment_id, serializer.validated_data["reason"]
            )
        except DomainError as exc:
            return domain_error_response(exc)

        return Response(
            ReturnShipmentSerializer(link).data, status=status.HTTP_201_CREATED
        )

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        try:
            link = self._service.get_return(pk)
        except DomainError as exc:
            return domain_error_response(exc)
        if not self._visible(request, link.original_shipment_id):
            return Response(
                {"detail": "Return not found."}, status=status.HTTP_404_NOT_FOUND
            )
        return Response(ReturnShipmentSerializer(link).data)
