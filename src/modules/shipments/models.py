"""ShipmentStatus, Recipient, ShipmentManifest, Shipment and history models.

Business rules implemented:
- Status names are unique; the registry compares them case-sensitively.
- Tracking and manifest numbers are generated on first save and retried
  on collision (format: ``TRK-YYYYMMDD-XXXXXXXX`` / ``MAN-...``).
- ``delivery_fee`` is fixed at creation and never recomputed.
- Status, merchant, zone and recipient FKs use PROTECT: a shipment's
  references outlive any attempt to delete them.
- ``ShipmentStatusHistory`` is append-only: one row per transition,
  never updated or deleted.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Optional
from uuid import UUID

from django.core.validators import MinValueValidator
from django.db import models

from modules.core.identifiers import generate_unique_number
from modules.core.models import AppendOnlyModel, BaseModel
from modules.shipments.constants import (
    HUB_STATES,
    MANIFEST_NUMBER_PREFIX,
    TERMINAL_STATES,
    TRACKING_NUMBER_PREFIX,
    ManifestStatus,
    ShippingFeePaidBy,
    SourceType,
)
from shared.domain.events import DomainEventMixin


class ShipmentStatus(BaseModel):
    """A row of the status vocabulary, ordered by ``position``."""

    name = models.CharField(max_length=50, unique=True)
    description = models.CharField(max_length=255, blank=True, default="")
    position = models.PositiveIntegerField(default=0)

    class Meta:
        db_table = "shipment_statuses"
        ordering = ["position", "name"]

    def __str__(self) -> str:
        return self.name


class Recipient(BaseModel):
    """Delivery recipient, reused across shipments by phone number."""

    name = models.CharField(max_length=255)
    phone = models.CharField(max_length=20, unique=True)
    address = models.TextField(blank=True, default="")

    class Meta:
        db_table = "recipients"
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name


class ShipmentManifest(DomainEventMixin, BaseModel):
    """Shipments handed to one courier for one delivery round."""

    manifest_number = models.CharField(max_length=30, unique=True, editable=False)
    courier = models.ForeignKey(
        "accounts.Account",
        on_delete=models.PROTECT,
        related_name="manifests",
    )
    status = models.CharField(
        max_length=20,
        choices=ManifestStatus.choices,
        default=ManifestStatus.CREATED,
    )
    assigned_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = "shipment_manifests"
        ordering = ["-created_at"]

    def save(self, *args: Any, **kwargs: Any) -> None:
        if not self.manifest_number:
            self.manifest_number = generate_unique_number(
                MANIFEST_NUMBER_PREFIX,
                lambda candidate: ShipmentManifest.objects.filter(
                    manifest_number=candidate
                ).exists(),
            )
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.manifest_number} ({self.status})"


class Shipment(DomainEventMixin, BaseModel):
    """Shipment aggregate root.

    ``tracking_number`` is the human-readable identifier; the UUIDv7
    ``id`` is used for internal references and API look-ups.  The
    courier responsible for a shipment is the courier of its current
    manifest.
    """

    tracking_number = models.CharField(max_length=30, unique=True, editable=False)
    merchant = models.ForeignKey(
        "accounts.Account",
        on_delete=models.PROTECT,
        related_name="shipments",
    )
    zone = models.ForeignKey(
        "pricing.Zone",
        on_delete=models.PROTECT,
        related_name="shipments",
    )
    recipient = models.ForeignKey(
        "shipments.Recipient",
        on_delete=models.PROTECT,
        related_name="shipments",
    )
    status = models.ForeignKey(
        "shipments.ShipmentStatus",
        on_delete=models.PROTECT,
        related_name="shipments",
    )
    manifest = models.ForeignKey(
        "shipments.ShipmentManifest",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="shipments",
    )
    payout = models.ForeignKey(
        "payouts.Payout",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="shipments",
    )
    item_value = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(0)],
    )
    cod_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(0)],
    )
    delivery_fee = models.DecimalField(max_digits=10, decimal_places=2)
    source_type = models.CharField(
        max_length=20,
        choices=SourceType.choices,
        default=SourceType.MERCHANT,
    )
    shipping_fee_paid_by = models.CharField(
        max_length=20,
        choices=ShippingFeePaidBy.choices,
        default=ShippingFeePaidBy.MERCHANT,
    )
    cash_reconciled = models.BooleanField(default=False)
    delivered_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = "shipments"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status"], name="shipments_status_idx"),
            models.Index(fields=["-created_at"], name="shipments_created_idx"),
        ]

    # ------------------------------------------------------------------
    # State helpers
    # ------------------------------------------------------------------

    @property
    def status_name(self) -> str:
        return self.status.name

    @property
    def is_terminal(self) -> bool:
        return self.status.name in TERMINAL_STATES

    @property
    def is_at_hub(self) -> bool:
        return self.status.name in HUB_STATES

    @property
    def courier_id(self) -> Optional[UUID]:
        if self.manifest_id is None:
            return None
        return self.manifest.courier_id

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def save(self, *args: Any, **kwargs: Any) -> None:
        if not self.tracking_number:
            self.tracking_number = generate_unique_number(
                TRACKING_NUMBER_PREFIX,
                lambda candidate: Shipment.objects.filter(
                    tracking_number=candidate
                ).exists(),
            )
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.tracking_number} ({self.status_id})"


class ShipmentStatusHistory(AppendOnlyModel):
    """Append-only audit trail: exactly one row per status transition.

    Rows for reconciliation notes repeat the current status as both
    ``old_status`` and ``status``.
    """

    shipment = models.ForeignKey(
        "shipments.Shipment",
        on_delete=models.CASCADE,
        related_name="status_history",
    )
    status = models.ForeignKey(
        "shipments.ShipmentStatus",
        on_delete=models.PROTECT,
        related_name="history_entries",
    )
    old_status = models.ForeignKey(
        "shipments.ShipmentStatus",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="+",
    )
    notes = models.TextField(blank=True, default="")

    class Meta:
        db_table = "shipment_status_history"
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(
                fields=["shipment", "created_at"],
                name="ssh_shipment_created_idx",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.shipment_id} : {self.old_status_id} -> {self.status_id}"
