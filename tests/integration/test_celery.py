"""Integration tests for the Celery setup and the outbox relay."""

import pytest

from modules.core.models import EventStatus, OutboxEvent
from modules.core.tasks import relay_outbox_events
from modules.shipments.events import ShipmentCreated
from modules.shipments.handlers import shipment_created_handler

pytestmark = pytest.mark.integration


@pytest.fixture(autouse=True)
def _celery_eager(settings):
    """Run tasks synchronously inside the test process."""
    settings.CELERY_TASK_ALWAYS_EAGER = True
    settings.CELERY_TASK_EAGER_PROPAGATES = True


class TestCeleryConfig:
    """Celery loads its configuration through Django."""

    def test_celery_app_is_importable(self):
        from config.celery import app

        assert app.main == "courier"

    def test_celery_app_exported_from_init(self):
        from config import celery_app

        assert celery_app.main == "courier"

    def test_celery_serializer_is_json(self, settings):
        assert settings.CELERY_TASK_SERIALIZER == "json"
        assert settings.CELERY_RESULT_SERIALIZER == "json"
        assert settings.CELERY_ACCEPT_CONTENT == ["json"]

    def test_celery_timezone_matches_django(self, settings):
        assert settings.CELERY_TIMEZONE == settings.TIME_ZONE

    def test_outbox_relay_is_scheduled(self, settings):
        entry = settings.CELERY_BEAT_SCHEDULE["relay-outbox-events"]
        assert entry["task"] == "core.relay_outbox_events"


class TestRelayOutboxEvents:
    """Drains the outbox into the in-memory event bus."""

    def test_publishes_pending_rows(self, make_shipment, move_to):
        move_to(make_shipment(), "PICKED_UP")

        result = relay_outbox_events.delay()

        assert result.successful()
        assert result.result == {"published": 2, "failed": 0}
        assert not OutboxEvent.objects.filter(status=EventStatus.PENDING).exists()
        assert OutboxEvent.objects.filter(processed_at__isnull=False).count() == 2

    def test_relay_is_idempotent(self, make_shipment):
        make_shipment()
        relay_outbox_events()
        assert relay_outbox_events() == {"published": 0, "failed": 0}

    def test_batch_size_limits_the_run(self, make_shipment):
        make_shipment()
        make_shipment()
        assert relay_outbox_events(batch_size=1) == {"published": 1, "failed": 0}
        assert OutboxEvent.objects.filter(status=EventStatus.PENDING).count() == 1

    def test_failing_handler_marks_row_failed(self, make_shipment, monkeypatch):
        def explode(event: ShipmentCreated) -> None:
            raise RuntimeError("smtp down")

        monkeypatch.setattr(shipment_created_handler, "handle", explode)
        make_shipment()

        assert relay_outbox_events() == {"published": 0, "failed": 1}
        row = OutboxEvent.objects.get(event_type="ShipmentCreated")
        assert row.status == EventStatus.FAILED
        assert "smtp down" in row.error_message

    def test_unknown_event_name_marks_row_failed(self):
        OutboxEvent.objects.create(
            aggregate_id="x",
            event_type="Vanished",
            topic="shipments",
            payload={"event_name": "Vanished", "aggregate_id": "x"},
        )
        assert relay_outbox_events() == {"published": 0, "failed": 1}
