"""Pricing constants: delivery priorities and fee fallbacks."""

from decimal import Decimal

from django.db import models


class DeliveryPriority(models.TextChoices):
    EXPRESS = "EXPRESS", "Express"
    STANDARD = "STANDARD", "Standard"
    ECONOMY = "ECONOMY", "Economy"


PRIORITY_MULTIPLIERS: dict[str, Decimal] = {
    DeliveryPriority.EXPRESS.value: Decimal("1.5"),
    DeliveryPriority.STANDARD.value: Decimal("1.0"),
    DeliveryPriority.ECONOMY.value: Decimal("0.8"),
}

DEFAULT_DELIVERY_FEE_SETTING = "DEFAULT_DELIVERY_FEE"

FALLBACK_DELIVERY_FEE = Decimal("50.00")
