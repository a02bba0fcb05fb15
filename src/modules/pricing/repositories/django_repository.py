from __future__ import annotations

from typing import Optional

from django.core.exceptions import ValidationError

from modules.pricing.models import DeliveryPricing, Zone
from modules.pricing.repositories.interfaces import IPricingRepository


class PricingDjangoRepository(IPricingRepository):
    def get_zone(self, zone_id: str) -> Optional[Zone]:
        try:
            return Zone.objects.filter(id=zone_id).first()
        except (ValueError, ValidationError):
            return None

    def get_active_override(
        self, merchant_id: str, zone_id: str
    ) -> Optional[DeliveryPricing]:
        try:
            return DeliveryPricing.objects.filter(
                merchant_id=merchant_id, zone_id=zone_id, is_active=True
            ).first()
        except (ValueError, ValidationError):
            return None
