from django.apps import AppConfig


class ShipmentsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "modules.shipments"
    label = "shipments"

    def ready(self) -> None:
        from modules.shipments import checks  # noqa: F401
        from modules.shipments.events import (
            ManifestStatusChanged,
            ShipmentCreated,
            ShipmentStatusChanged,
        )
        from modules.shipments.handlers import (
            manifest_status_changed_handler,
            shipment_created_handler,
            shipment_status_changed_handler,
        )
        from shared.infrastructure.bus import event_bus

        event_bus.subscribe(ShipmentCreated, shipment_created_handler)
        event_bus.subscribe(ShipmentStatusChanged, shipment_status_changed_handler)
        event_bus.subscribe(ManifestStatusChanged, manifest_status_changed_handler)
