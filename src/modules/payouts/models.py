"""Payout and PayoutItem models.

Business rules implemented:
- ``net_amount`` is the sum of the payout's item amounts, fixed at creation.
- ``PayoutItem`` is the settlement ledger: append-only, one row per
  settled shipment and payout type.  The partial unique constraint on
  ``(payout_type, source_type, source_id)`` for SHIPMENT rows is what
  makes a shipment payable at most once per payout type.
- ``payout_type`` is denormalized onto the item so the constraint can
  live on a single table.
"""

from __future__ import annotations

from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models

from modules.core.models import AppendOnlyModel, BaseModel
from modules.payouts.constants import (
    LOCKED_STATES,
    PayoutItemSourceType,
    PayoutStatus,
    PayoutType,
)
from shared.domain.events import DomainEventMixin


class Payout(DomainEventMixin, BaseModel):
    user = models.ForeignKey(
        "accounts.Account",
        on_delete=models.PROTECT,
        related_name="payouts",
    )
    payout_type = models.CharField(max_length=30, choices=PayoutType.choices)
    status = models.CharField(
        max_length=20,
        choices=PayoutStatus.choices,
        default=PayoutStatus.PENDING,
    )
    period_start = models.DateField()
    period_end = models.DateField()
    net_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(0)],
    )
    paid_at = models.DateTimeField(null=True, blank=True)
    description = models.TextField(blank=True, default="")
    notes = models.TextField(blank=True, default="")

    class Meta:
        db_table = "payouts"
        ordering = ["-period_end", "-created_at"]
        indexes = [
            models.Index(
                fields=["user", "-period_end"], name="payouts_user_period_idx"
            ),
            models.Index(fields=["status"], name="payouts_status_idx"),
        ]

    @property
    def is_locked(self) -> bool:
        return self.status in LOCKED_STATES

    def __str__(self) -> str:
        return f"{self.payout_type} {self.net_amount} ({self.status})"


class PayoutItem(AppendOnlyModel):
    payout = models.ForeignKey(
        "payouts.Payout",
        on_delete=models.CASCADE,
        related_name="items",
    )
    payout_type = models.CharField(max_length=30, choices=PayoutType.choices)
    source_type = models.CharField(
        max_length=20,
        choices=PayoutItemSourceType.choices,
        default=PayoutItemSourceType.SHIPMENT,
    )
    source_id = models.UUIDField()
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    description = models.CharField(max_length=255)

    class Meta:
        db_table = "payout_items"
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(
                fields=["source_type", "source_id"], name="payout_items_source_idx"
            ),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["payout_type", "source_type", "source_id"],
                condition=models.Q(source_type=PayoutItemSourceType.SHIPMENT),
                name="payout_items_shipment_once_per_type",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.payout_type} {self.source_type}:{self.source_id} {self.amount}"
