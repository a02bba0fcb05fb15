from django.apps import AppConfig


class PayoutsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "modules.payouts"
    label = "payouts"

    def ready(self) -> None:
        from modules.payouts.events import PayoutCreated, PayoutStatusChanged
        from modules.payouts.handlers import (
            payout_created_handler,
            payout_status_changed_handler,
        )
        from shared.infrastructure.bus import event_bus

        event_bus.subscribe(PayoutCreated, payout_created_handler)
        event_bus.subscribe(PayoutStatusChanged, payout_status_changed_handler)
