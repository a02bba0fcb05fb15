"""Zone and DeliveryPricing models.

- ``Zone.default_fee`` is nullable: a zone without its own fee defers to
  the system-wide ``DEFAULT_DELIVERY_FEE`` setting.
- ``DeliveryPricing`` is a per-merchant override for one zone; at most
  one row exists per (merchant, zone) and only active rows apply.
"""

from __future__ import annotations

from django.core.validators import MinValueValidator
from django.db import models

from modules.core.models import BaseModel


class Zone(BaseModel):
    name = models.CharField(max_length=100, unique=True)
    default_fee = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(0)],
    )
    is_active = models.BooleanField(default=True)

    class Meta:
        db_table = "zones"
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name


class DeliveryPricing(BaseModel):
    merchant = models.ForeignKey(
        "accounts.Account",
        on_delete=models.CASCADE,
        related_name="delivery_pricings",
    )
    zone = models.ForeignKey(
        "pricing.Zone",
        on_delete=models.CASCADE,
        related_name="delivery_pricings",
    )
    delivery_fee = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(0)],
    )
    is_active = models.BooleanField(default=True)

    class Meta:
        db_table = "delivery_pricing"
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["merchant", "zone"],
                name="delivery_pricing_merchant_zone_uniq",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.merchant_id} @ {self.zone_id}: {self.delivery_fee}"
