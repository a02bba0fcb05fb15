from __future__ import annotations

from rest_framework import serializers


class ReceiveSerializer(serializers.Serializer):
    tracking_numbers = serializers.ListField(
        child=serializers.CharField(max_length=30), allow_empty=False
    )


class DispatchSerializer(serializers.Serializer):
    courier_id = serializers.UUIDField()
    shipment_ids = serializers.ListField(
        child=serializers.UUIDField(), allow_empty=False
    )


class ReconcileSerializer(serializers.Serializer):
    courier_id = serializers.UUIDField()
    cash_confirmed_ids = serializers.ListField(
        child=serializers.UUIDField(), required=False, default=list
    )
    returned_ids = serializers.ListField(
        child=serializers.UUIDField(), required=False, default=list
    )

    def validate(self, attrs):
        if not attrs["cash_confirmed_ids"] and not attrs["returned_ids"]:
            raise serializers.ValidationError(
                "Provide cash_confirmed_ids and/or returned_ids."
            )
        return attrs
