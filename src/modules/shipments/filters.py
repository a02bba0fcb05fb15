import django_filters

from modules.shipments.models import Shipment


class ShipmentFilter(django_filters.FilterSet):
    status = django_filters.CharFilter(field_name="status__name", lookup_expr="exact")
    merchant = django_filters.UUIDFilter(field_name="merchant_id")
    zone = django_filters.UUIDFilter(field_name="zone_id")
    courier = django_filters.UUIDFilter(field_name="manifest__courier_id")
    tracking_number = django_filters.CharFilter(
        field_name="tracking_number", lookup_expr="iexact"
    )
    start_date = django_filters.DateFilter(field_name="created_at", lookup_expr="gte")
    end_date = django_filters.DateFilter(field_name="created_at", lookup_expr="lte")

    class Meta:
        model = Shipment
        fields = [
            "status",
            "merchant",
            "zone",
            "courier",
            "tracking_number",
            "start_date",
            "end_date",
        ]
