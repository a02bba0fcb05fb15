from __future__ import annotations

from rest_framework import serializers

from modules.payouts.constants import CREATABLE_TYPES
from modules.payouts.models import Payout, PayoutItem

# ---------------------------------------------------------------------------
# Input Serializers
# ---------------------------------------------------------------------------


class CreatePayoutSerializer(serializers.Serializer):
    payout_type = serializers.ChoiceField(choices=CREATABLE_TYPES)
    user_id = serializers.UUIDField()
    period_start = serializers.DateField()
    period_end = serializers.DateField()


class UpdatePayoutStatusSerializer(serializers.Serializer):
    # Free text: unknown values are rejected by the service as InvalidPayoutStatus.
    status = serializers.CharField(max_length=20)


# ---------------------------------------------------------------------------
# Output Serializers (Read)
# ---------------------------------------------------------------------------


class PayoutItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = PayoutItem
        fields = [
            "id",
            "payout_type",
            "source_type",
            "source_id",
            "amount",
            "description",
            "created_at",
        ]
        read_only_fields = fields


class PayoutSerializer(serializers.ModelSerializer):
    user_name = serializers.CharField(source="user.name", read_only=True)

    class Meta:
        model = Payout
        fields = [
            "id",
            "user_id",
            "user_name",
            "payout_type",
            "status",
            "period_start",
            "period_end",
            "net_amount",
            "paid_at",
            "description",
            "notes",
            "created_at",
        ]
        read_only_fields = fields


class CourierEarningsSerializer(serializers.Serializer):
    courier_id = serializers.UUIDField()
    shipment_count = serializers.IntegerField()
    total_fees = serializers.DecimalField(max_digits=12, decimal_places=2)
    earnings = serializers.DecimalField(max_digits=12, decimal_places=2)
