"""Shipment API views.

Exposes ``ShipmentService``, ``StatusRegistry`` and ``ManifestService``
via DRF ViewSets.  Domain errors are translated by
``domain_error_response``; anything else propagates to DRF.
"""

from __future__ import annotations

from django.db.models import QuerySet
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter, SearchFilter
from rest_framework.permissions import BasePermission, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.throttling import BaseThrottle
from rest_framework.viewsets import GenericViewSet

from modules.accounts.models import Role
from modules.accounts.permissions import HasRole, account_for_request
from modules.core.api import domain_error_response
from modules.core.exceptions import DomainError
from modules.core.pagination import StandardResultsSetPagination
from modules.shipments.dtos import CreateShipmentDTO
from modules.shipments.exceptions import ShipmentNotFound
from modules.shipments.factories import (
    build_manifest_service,
    build_shipment_service,
    build_status_registry,
)
from modules.shipments.filters import ShipmentFilter
from modules.shipments.models import Shipment
from modules.shipments.serializers import (
    CreateShipmentSerializer,
    ManifestSerializer,
    ShipmentListSerializer,
    ShipmentSerializer,
    ShipmentStatusSerializer,
    StatusHistorySerializer,
    StatusWriteSerializer,
    UpdateManifestStatusSerializer,
    UpdateShipmentStatusSerializer,
)

SHIPMENT_WRITERS = (Role.MERCHANT, Role.ADMIN, Role.OWNER)
STATUS_REPORTERS = (Role.COURIER, Role.WAREHOUSE_MANAGER, Role.ADMIN, Role.OWNER)


def scope_to_caller(request: Request, queryset: QuerySet) -> QuerySet:
    """Merchants see their own shipments, couriers those on their manifests."""
    account = account_for_request(request)
    if account is None:
        if request.user.is_superuser:
            return queryset
        return queryset.none()
    if account.has_role(Role.MERCHANT):
        return queryset.filter(merchant_id=account.id)
    if account.has_role(Role.COURIER):
        return queryset.filter(manifest__courier_id=account.id)
    return queryset


class ShipmentViewSet(GenericViewSet):
    """ViewSet for shipment operations.

    Does **not** extend ``ModelViewSet``: all writes go through
    ``ShipmentService``.
    """

    queryset = Shipment.objects.all()
    filterset_class = ShipmentFilter
    search_fields = ["tracking_number", "recipient__name", "recipient__phone"]
    ordering_fields = ["created_at", "delivery_fee", "cod_amount"]
    ordering = ["-created_at", "-id"]
    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = build_shipment_service()

    def get_permissions(self) -> list[BasePermission]:
        if self.action == "create":
            return [IsAuthenticated(), HasRole.of(*SHIPMENT_WRITERS)()]
        if self.action == "update_status":
            return [IsAuthenticated(), HasRole.of(*STATUS_REPORTERS)()]
        return [IsAuthenticated()]

    def get_throttles(self) -> list[BaseThrottle]:
        """Throttling scopes per action."""
        throttle_scope: str | None
        if self.action == "create":
            throttle_scope = "shipment_creation"
        elif self.action in {"list", "retrieve", "history"}:
            throttle_scope = "shipment_listing"
        else:
            throttle_scope = None
        self.throttle_scope = throttle_scope
        return super().get_throttles()

    def get_queryset(self):
        return scope_to_caller(self.request, self._service.list_shipments())

    def _get_visible(self, pk: str) -> Shipment:
        shipment = self._service.get_shipment(pk)
        if not self.get_queryset().filter(pk=shipment.pk).exists():
            raise ShipmentNotFound(f"Shipment not found: {pk}")
        return shipment

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    def create(self, request: Request) -> Response:
        """POST /api/v1/shipments/

        Merchants create for themselves; staff must name ``merchant_id``.
        """
        serializer = CreateShipmentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)

        account = account_for_request(request)
        if account is not None and account.has_role(Role.MERCHANT):
            data["merchant_id"] = account.id
        elif "merchant_id" not in data:
            return Response(
                {"detail": "Field 'merchant_id' is required."},
                status=status.HTTP_400_BAD_REQUEST,
            )

        try:
            shipment = self._service.create_shipment(CreateShipmentDTO(**data))
        except DomainError as exc:
            return domain_error_response(exc)

        return Response(
            ShipmentSerializer(shipment).data, status=status.HTTP_201_CREATED
        )

    # ------------------------------------------------------------------
    # List / Retrieve
    # ------------------------------------------------------------------

    def list(self, request: Request) -> Response:
        """GET /api/v1/shipments/"""
        queryset = self.filter_queryset(self.get_queryset())

        paginator = StandardResultsSetPagination()
        page = paginator.paginate_queryset(queryset, request)
        serializer = ShipmentListSerializer(page, many=True)
        return paginator.get_paginated_response(serializer.data)

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/shipments/{pk}/"""
        try:
            shipment = self._get_visible(pk)
        except DomainError as exc:
            return domain_error_response(exc)
        return Response(ShipmentSerializer(shipment).data)

    @action(
        detail=False,
        methods=["get"],
        url_path=r"track/(?P<tracking_number>[^/]+)",
    )
    def track(self, request: Request, tracking_number: str | None = None) -> Response:
        """GET /api/v1/shipments/track/{tracking_number}/"""
        try:
            shipment = self._service.get_by_tracking_number(tracking_number)
            shipment = self._get_visible(str(shipment.pk))
        except DomainError as exc:
            return domain_error_response(exc)
        return Response(ShipmentSerializer(shipment).data)

    @action(detail=True, methods=["get"])
    def history(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/shipments/{pk}/history/"""
        try:
            shipment = self._get_visible(pk)
            entries = self._service.get_history(shipment.id)
        except DomainError as exc:
            return domain_error_response(exc)
        return Response(StatusHistorySerializer(entries, many=True).data)

    # ------------------------------------------------------------------
    # Status Update
    # ------------------------------------------------------------------

    @action(detail=True, methods=["post"], url_path="status")
    def update_status(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/shipments/{pk}/status/

        ``{"status": "FAILED_ATTEMPT", "reason": "..."}`` stores the
        classified outcome instead of FAILED_ATTEMPT.  Couriers may only
        report on shipments of their own manifests.
        """
        serializer = UpdateShipmentStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            self._get_visible(pk)
            shipment = self._service.update_status(
                shipment_id=pk,
                new_status=serializer.validated_data["status"],
                reason=serializer.validated_data["reason"],
            )
        except DomainError as exc:
            return domain_error_response(exc)

        return Response(ShipmentSerializer(shipment).data)


class StatusViewSet(GenericViewSet):
    """Administration of the status vocabulary (OWNER/ADMIN for writes)."""

    pagination_class = None

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._registry = build_status_registry()

    def get_permissions(self) -> list[BasePermission]:
        if self.action in {"create", "partial_update", "destroy"}:
            return [IsAuthenticated(), HasRole.of(Role.ADMIN, Role.OWNER)()]
        return [IsAuthenticated()]

    def list(self, request: Request) -> Response:
        """GET /api/v1/statuses/"""
        return Response(ShipmentStatusSerializer(self._registry.all(), many=True).data)

    def create(self, request: Request) -> Response:
        """POST /api/v1/statuses/"""
        serializer = StatusWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            created = self._registry.create(
                serializer.validated_data["name"],
                serializer.validated_data.get("description", ""),
            )
        except DomainError as exc:
            return domain_error_response(exc)
        return Response(
            ShipmentStatusSerializer(created).data, status=status.HTTP_201_CREATED
        )

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/statuses/{pk}/ (rename)"""
        serializer = StatusWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            renamed = self._registry.rename(
                pk,
                serializer.validated_data["name"],
                serializer.validated_data.get("description"),
            )
        except DomainError as exc:
            return domain_error_response(exc)
        return Response(ShipmentStatusSerializer(renamed).data)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/v1/statuses/{pk}/"""
        try:
            self._registry.delete(pk)
        except DomainError as exc:
            return domain_error_response(exc)
        return Response(status=status.HTTP_204_NO_CONTENT)


class ManifestViewSet(GenericViewSet):
    """Courier manifests: couriers see their own, staff see all."""

    pagination_class = None

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = build_manifest_service()

    def get_permissions(self) -> list[BasePermission]:
        if self.action == "update_status":
            return [
                IsAuthenticated(),
                HasRole.of(*STATUS_REPORTERS)(),
            ]
        return [IsAuthenticated()]

    def _may_see(self, request: Request, courier_id) -> bool:
        account = account_for_request(request)
        if account is None:
            return request.user.is_superuser
        if account.has_role(Role.COURIER):
            return account.id == courier_id
        return not account.has_role(Role.MERCHANT)

    def list(self, request: Request) -> Response:
        """GET /api/v1/manifests/?courier=<id>"""
        account = account_for_request(request)
        if account is not None and account.has_role(Role.COURIER):
            courier_id = account.id
        else:
            courier_id = request.query_params.get("courier")
        if not courier_id or not self._may_see(request, courier_id):
            return Response([])
        manifests = self._service.list_for_courier(courier_id)
        return Response(ManifestSerializer(manifests, many=True).data)

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/manifests/{pk}/"""
        try:
            manifest = self._service.get_manifest(pk)
        except DomainError as exc:
            return domain_error_response(exc)
        if not self._may_see(request, manifest.courier_id):
            return Response(
                {"detail": "Manifest not found."}, status=status.HTTP_404_NOT_FOUND
            )
        return Response(ManifestSerializer(manifest).data)

    @action(detail=True, methods=["post"], url_path="status")
    def update_status(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/manifests/{pk}/status/"""
        serializer = UpdateManifestStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            manifest = self._service.get_manifest(pk)
            if not self._may_see(request, manifest.courier_id):
                return Response(
                    {"detail": "Manifest not found."},
                    status=status.HTTP_404_NOT_FOUND,
                )
            manifest = self._service.update_status(
                pk, serializer.validated_data["status"]
            )
        except DomainError as exc:
            return domain_error_response(exc)
        return Response(ManifestSerializer(manifest).data)
