"""Payout API views.

OWNER/ADMIN create payouts and move their status; couriers and
merchants read their own payouts.
"""

from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import action
from rest_framework.permissions import BasePermission, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from modules.accounts.models import STAFF_ROLES, Role
from modules.accounts.permissions import HasRole, account_for_request
from modules.core.api import domain_error_response
from modules.core.exceptions import DomainError
from modules.core.pagination import StandardResultsSetPagination
from modules.payouts.constants import PayoutType
from modules.payouts.repositories import PayoutDjangoRepository
from modules.payouts.serializers import (
    CourierEarningsSerializer,
    CreatePayoutSerializer,
    PayoutItemSerializer,
    PayoutSerializer,
    UpdatePayoutStatusSerializer,
)
from modules.payouts.services import PayoutService
from modules.shipments.factories import build_account_service

STAFF_ONLY_ACTIONS = {"create", "update_status", "pending"}


class PayoutViewSet(GenericViewSet):
    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = PayoutService(
            payout_repository=PayoutDjangoRepository(),
            account_service=build_account_service(),
        )

    def get_permissions(self) -> list[BasePermission]:
        if self.action in STAFF_ONLY_ACTIONS:
            return [IsAuthenticated(), HasRole.of(*STAFF_ROLES)()]
        return [IsAuthenticated()]

    def _is_staff(self, request: Request) -> bool:
        if request.user.is_superuser:
            return True
        account = account_for_request(request)
        return account is not None and account.has_role(*STAFF_ROLES)

    def _may_see(self, request: Request, user_id) -> bool:
        if self._is_staff(request):
            return True
        account = account_for_request(request)
        return account is not None and account.id == user_id

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    def create(self, request: Request) -> Response:
        """POST /api/v1/payouts/"""
        serializer = CreatePayoutSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        if data["payout_type"] == PayoutType.COURIER_SETTLEMENT:
            create = self._service.create_courier_payout
        else:
            create = self._service.create_merchant_payout

        try:
            payout = create(data["user_id"], data["period_start"], data["period_end"])
        except DomainError as exc:
            return domain_error_response(exc)
        return Response(PayoutSerializer(payout).data, status=status.HTTP_201_CREATED)

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def list(self, request: Request) -> Response:
        """GET /api/v1/payouts/?user=<id> (staff) or the caller's own payouts."""
        if self._is_staff(request):
            user_id = request.query_params.get("user")
            if not user_id:
                return Response(
                    {"detail": "Query parameter 'user' is required."},
                    status=status.HTTP_400_BAD_REQUEST,
                )
        else:
            account = account_for_request(request)
            if account is None:
                return Response([])
            user_id = account.id

        paginator = StandardResultsSetPagination()
        page = paginator.paginate_queryset(
            self._service.list_payouts_for_user(user_id), request
        )
        return paginator.get_paginated_response(PayoutSerializer(page, many=True).data)

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/payouts/{pk}/"""
        try:
            payout = self._service.get_payout(pk)
        except DomainError as exc:
            return domain_error_response(exc)
        if not self._may_see(request, payout.user_id):
            return Response(
                {"detail": "Payout not found."}, status=status.HTTP_404_NOT_FOUND
            )
        return Response(PayoutSerializer(payout).data)

    @action(detail=True, methods=["get"])
    def items(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/payouts/{pk}/items/"""
        try:
            payout = self._service.get_payout(pk)
            if not self._may_see(request, payout.user_id):
                return Response(
                    {"detail": "Payout not found."},
                    status=status.HTTP_404_NOT_FOUND,
                )
            items = self._service.get_payout_items(payout.id)
        except DomainError as exc:
            return domain_error_response(exc)
        return Response(PayoutItemSerializer(items, many=True).data)

    @action(detail=False, methods=["get"])
    def pending(self, request: Request) -> Response:
        """GET /api/v1/payouts/pending/"""
        paginator = StandardResultsSetPagination()
        pending = self._service.list_pending_payouts()
        page = paginator.paginate_queryset(pending, request)
        return paginator.get_paginated_response(PayoutSerializer(page, many=True).data)

    @action(detail=False, methods=["get"])
    def earnings(self, request: Request) -> Response:
        """GET /api/v1/payouts/earnings/?courier=<id>

        Couriers always get their own preview.
        """
        account = account_for_request(request)
        if account is not None and account.has_role(Role.COURIER):
            courier_id = account.id
        elif self._is_staff(request):
            courier_id = request.query_params.get("courier")
            if not courier_id:
                return Response(
                    {"detail": "Query parameter 'courier' is required."},
                    status=status.HTTP_400_BAD_REQUEST,
                )
        else:
            return Response(
                {"detail": "Only couriers and staff can preview earnings."},
                status=status.HTTP_403_FORBIDDEN,
            )

        try:
            preview = self._service.calculate_courier_earnings(courier_id)
        except DomainError as exc:
            return domain_error_response(exc)
        return Response(CourierEarningsSerializer(preview.model_dump()).data)

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    @action(detail=True, methods=["post"], url_path="status")
    def update_status(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/payouts/{pk}/status/"""
        serializer = UpdatePayoutStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            payout = self._service.update_payout_status(
                pk, serializer.validated_data["status"]
            )
        except DomainError as exc:
            return domain_error_response(exc)
        return Response(PayoutSerializer(payout).data)
