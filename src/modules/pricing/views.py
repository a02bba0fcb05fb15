"""Price quote endpoint.

``GET /api/v1/pricing/quote/?zone=<id>[&merchant=<id>][&priority=EXPRESS]``

* With ``priority`` the zone default fee is priced with the priority
  multiplier.
* Otherwise the three-tier precedence applies; merchants are always
  quoted their own overrides.
"""

from __future__ import annotations

from rest_framework import serializers, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from modules.accounts.models import Role
from modules.accounts.permissions import account_for_request
from modules.core.api import domain_error_response
from modules.core.exceptions import DomainError
from modules.core.repositories.django_repository import SettingsDjangoRepository
from modules.pricing.repositories.django_repository import PricingDjangoRepository
from modules.pricing.resolver import PricingResolver


class PriceQuoteQuerySerializer(serializers.Serializer):
    zone = serializers.UUIDField()
    merchant = serializers.UUIDField(required=False)
    priority = serializers.CharField(required=False, allow_blank=True)


class PriceQuoteView(APIView):
    permission_classes = [IsAuthenticated]
    throttle_scope = "price_quote"

    def get(self, request: Request) -> Response:
        query = PriceQuoteQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        params = query.validated_data

        merchant_id = params.get("merchant")
        account = account_for_request(request)
        if account is not None and account.has_role(Role.MERCHANT):
            merchant_id = account.id

        resolver = PricingResolver(
            pricing_repository=PricingDjangoRepository(),
            settings_repository=SettingsDjangoRepository(),
        )
        try:
            zone = resolver.get_zone(params["zone"])
        except DomainError as exc:
            return domain_error_response(exc)

        priority = params.get("priority")
        if priority:
            fee = resolver.resolve_for_priority(zone, priority)
        elif merchant_id is not None:
            fee = resolver.resolve(merchant_id, zone)
        else:
            return Response(
                {"detail": "Either 'merchant' or 'priority' is required."},
                status=status.HTTP_400_BAD_REQUEST,
            )

        return Response(
            {
                "zone_id": str(zone.id),
                "merchant_id": str(merchant_id) if merchant_id else None,
                "priority": priority.upper() if priority else None,
                "delivery_fee": str(fee),
            }
        )
