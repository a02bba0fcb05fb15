"""Shipment DRF serializers for API input/output.

Input serializers only shape the payload; business rules live in the
service layer, which receives Pydantic DTOs from ``dtos.py``.
"""

from __future__ import annotations

from decimal import Decimal

from rest_framework import serializers

from modules.shipments.constants import ManifestStatus, ShippingFeePaidBy, SourceType
from modules.shipments.models import (
    Shipment,
    ShipmentManifest,
    ShipmentStatus,
    ShipmentStatusHistory,
)

# ---------------------------------------------------------------------------
# Input Serializers
# ---------------------------------------------------------------------------


class CreateShipmentSerializer(serializers.Serializer):
    """Validates the shipment creation payload.

    ``merchant_id`` is optional for merchants (their own account is used)
    and required for staff creating on a merchant's behalf.
    """

    merchant_id = serializers.UUIDField(required=False)
    zone_id = serializers.UUIDField()
    recipient_name = serializers.CharField(max_length=255)
    recipient_phone = serializers.CharField(max_length=20)
    recipient_address = serializers.CharField(
        required=False, default="", allow_blank=True
    )
    item_value = serializers.DecimalField(
        max_digits=12,
        decimal_places=2,
        min_value=0,
        required=False,
        default=Decimal("0.00"),
    )
    cod_amount = serializers.DecimalField(
        max_digits=12,
        decimal_places=2,
        min_value=0,
        required=False,
        default=Decimal("0.00"),
    )
    source_type = serializers.ChoiceField(
        choices=SourceType.choices, required=False, default=SourceType.MERCHANT
    )
    shipping_fee_paid_by = serializers.ChoiceField(
        choices=ShippingFeePaidBy.choices,
        required=False,
        default=ShippingFeePaidBy.MERCHANT,
    )


class UpdateShipmentStatusSerializer(serializers.Serializer):
    status = serializers.CharField(max_length=50)
    reason = serializers.CharField(required=False, default="", allow_blank=True)


class StatusWriteSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=50)
    description = serializers.CharField(
        max_length=255, required=False, allow_blank=True
    )


class UpdateManifestStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=ManifestStatus.choices)


# ---------------------------------------------------------------------------
# Output Serializers (Read)
# ---------------------------------------------------------------------------


class ShipmentStatusSerializer(serializers.ModelSerializer):
    class Meta:
        model = ShipmentStatus
        fields = ["id", "name", "description", "position"]
        read_only_fields = fields


class StatusHistorySerializer(serializers.ModelSerializer):
    """One row of the shipment audit trail."""

    old_status = serializers.CharField(
        source="old_status.name", read_only=True, default=None
    )
    new_status = serializers.CharField(source="status.name", read_only=True)

    class Meta:
        model = ShipmentStatusHistory
        fields = ["id", "old_status", "new_status", "notes", "created_at"]
        read_only_fields = fields


class ShipmentSerializer(serializers.ModelSerializer):
    status = serializers.CharField(source="status.name", read_only=True)
    zone_name = serializers.CharField(source="zone.name", read_only=True)
    recipient_name = serializers.CharField(source="recipient.name", read_only=True)
    recipient_phone = serializers.CharField(source="recipient.phone", read_only=True)
    recipient_address = serializers.CharField(
        source="recipient.address", read_only=True
    )

    class Meta:
        model = Shipment
        fields = [
            "id",
            "tracking_number",
            "merchant_id",
            "zone_id",
            "zone_name",
            "recipient_name",
            "recipient_phone",
            "recipient_address",
            "status",
            "item_value",
            "cod_amount",
            "delivery_fee",
            "source_type",
            "shipping_fee_paid_by",
            "manifest_id",
            "payout_id",
            "cash_reconciled",
            "delivered_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class ShipmentListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for shipment lists."""

    status = serializers.CharField(source="status.name", read_only=True)

    class Meta:
        model = Shipment
        fields = [
            "id",
            "tracking_number",
            "merchant_id",
            "zone_id",
            "status",
            "delivery_fee",
            "cod_amount",
            "created_at",
        ]
        read_only_fields = fields


class ManifestSerializer(serializers.ModelSerializer):
    courier_name = serializers.CharField(source="courier.name", read_only=True)

    class Meta:
        model = ShipmentManifest
        fields = [
            "id",
            "manifest_number",
            "courier_id",
            "courier_name",
            "status",
            "assigned_at",
            "created_at",
        ]
        read_only_fields = fields
