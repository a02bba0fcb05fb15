"""Pricing repository interface (zones + merchant overrides)."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from modules.pricing.models import DeliveryPricing, Zone


class IPricingRepository(ABC):
    @abstractmethod
    def get_zone(self, zone_id: str) -> Optional[Zone]:
        """Retrieve a zone by primary key."""

    @abstractmethod
    def get_active_override(
        self, merchant_id: str, zone_id: str
    ) -> Optional[DeliveryPricing]:
        """Return the active merchant+zone override, if any."""
