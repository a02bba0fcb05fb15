"""Delivery fee resolution.

A shipment's fee is resolved exactly once, at creation, with strict
first-match precedence:

1. Active merchant+zone ``DeliveryPricing`` override.
2. The zone's own ``default_fee`` when it is not null.
3. The ``DEFAULT_DELIVERY_FEE`` system setting, parsed as an exact
   decimal; when absent, malformed, non-finite or negative, the
   hardcoded fallback of 50.00.

A secondary priority mode prices a zone's default fee with a
multiplier (EXPRESS x1.5, STANDARD x1.0, ECONOMY x0.8).  All results are
``Decimal`` values quantized to two places.
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING, Optional
from uuid import UUID

import structlog

from modules.core.money import parse_money, to_money
from modules.pricing.constants import (
    DEFAULT_DELIVERY_FEE_SETTING,
    FALLBACK_DELIVERY_FEE,
    PRIORITY_MULTIPLIERS,
    DeliveryPriority,
)
from modules.pricing.exceptions import ZoneNotFound

if TYPE_CHECKING:
    from modules.core.repositories.interfaces import ISettingsRepository
    from modules.pricing.models import Zone
    from modules.pricing.repositories.interfaces import IPricingRepository

logger = structlog.get_logger(__name__)


class PricingResolver:
    def __init__(
        self,
        pricing_repository: IPricingRepository,
        settings_repository: ISettingsRepository,
    ) -> None:
        self._pricing_repo = pricing_repository
        self._settings_repo = settings_repository

    def get_zone(self, zone_id: UUID | str) -> Zone:
        """Raises ``ZoneNotFound`` when the zone does not exist."""
        zone = self._pricing_repo.get_zone(str(zone_id))
        if zone is None:
            raise ZoneNotFound(f"Zone {zone_id} not found.")
        return zone

    def resolve(self, merchant_id: UUID | str, zone: Zone) -> Decimal:
        log = logger.bind(merchant_id=str(merchant_id), zone_id=str(zone.id))

        override = self._pricing_repo.get_active_override(
            str(merchant_id), str(zone.id)
        )
        if override is not None:
            log.debug("pricing.resolved", source="merchant_override")
            return to_money(override.delivery_fee)

        if zone.default_fee is not None:
            log.debug("pricing.resolved", source="zone_default")
            return to_money(zone.default_fee)

        fee = self.system_default_fee()
        log.debug("pricing.resolved", source="system_default")
        return fee

    def resolve_for_priority(
        self, zone: Zone, priority: Optional[str] = None
    ) -> Decimal:
        """Price *zone*'s default fee for a delivery priority.

        Priority names ignore case. Unknown or missing priorities are
        priced as STANDARD; a zone without a default fee is priced from
        the hardcoded fallback.
        """
        standard = PRIORITY_MULTIPLIERS[DeliveryPriority.STANDARD.value]
        multiplier = PRIORITY_MULTIPLIERS.get((priority or "").upper(), standard)
        base = zone.default_fee
        if base is None:
            base = FALLBACK_DELIVERY_FEE
        return to_money(Decimal(base) * multiplier)

    def system_default_fee(self) -> Decimal:
        raw = self._settings_repo.get_value(DEFAULT_DELIVERY_FEE_SETTING)
        fee = parse_money(raw)
        if fee is None:
            if raw is not None:
                logger.warning(
                    "pricing.invalid_default_fee_setting",
                    key=DEFAULT_DELIVERY_FEE_SETTING,
                    value=raw,
                )
            return FALLBACK_DELIVERY_FEE
        return fee
