"""Unit tests for domain events registration, rebuild and the event bus."""

from __future__ import annotations

from decimal import Decimal
from uuid import uuid4

import pytest

from modules.core.outbox import serialize_event_payload
from modules.payouts.events import PayoutCreated
from modules.shipments.events import ShipmentCreated
from modules.shipments.models import Shipment
from shared.domain.events import DomainEvent
from shared.infrastructure.bus import InMemoryEventBus

pytestmark = pytest.mark.unit


def test_shipment_registers_and_clears_domain_events():
    shipment = Shipment(delivery_fee=Decimal("50.00"))

    assert shipment.domain_events == []

    event = ShipmentCreated(aggregate_id=shipment.id, tracking_number="TRK-1")
    shipment.add_domain_event(event)

    assert shipment.domain_events == [event]
    assert event.event_name == "ShipmentCreated"

    shipment.clear_domain_events()
    assert shipment.domain_events == []


def test_event_rebuilt_from_outbox_payload():
    event = PayoutCreated(
        aggregate_id=uuid4(), user_id="u-1", net_amount="420.00", item_count=3
    )
    rebuilt = DomainEvent.from_payload(serialize_event_payload(event))

    assert rebuilt == event
    assert isinstance(rebuilt, PayoutCreated)


def test_unknown_event_name_cannot_be_rebuilt():
    with pytest.raises(LookupError):
        DomainEvent.from_payload({"event_name": "NoSuchEvent", "aggregate_id": "x"})


class _Recorder:
    def __init__(self):
        self.seen = []

    def handle(self, event):
        self.seen.append(event)


class TestInMemoryEventBus:
    def test_publishes_to_subscribers_of_the_event_type(self):
        bus = InMemoryEventBus()
        recorder = _Recorder()
        bus.subscribe(ShipmentCreated, recorder)

        created = ShipmentCreated(aggregate_id=uuid4())
        bus.publish(created)
        bus.publish(PayoutCreated(aggregate_id=uuid4()))

        assert recorder.seen == [created]

    def test_subscribing_twice_registers_once(self):
        bus = InMemoryEventBus()
        recorder = _Recorder()
        bus.subscribe(ShipmentCreated, recorder)
        bus.subscribe(ShipmentCreated, recorder)
        assert bus.handlers_for(ShipmentCreated) == [recorder]

    def test_handler_errors_propagate(self):
        class Broken:
            def handle(self, event):
                raise ValueError("smtp down")

        bus = InMemoryEventBus()
        bus.subscribe(ShipmentCreated, Broken())
        with pytest.raises(ValueError):
            bus.publish(ShipmentCreated(aggregate_id=uuid4()))

    def test_app_handlers_are_subscribed(self):
        from modules.payouts.events import PayoutStatusChanged
        from modules.returns.events import ReturnRequested
        from modules.shipments.events import ShipmentStatusChanged
        from shared.infrastructure.bus import event_bus

        for event_class in (
            ShipmentCreated,
            ShipmentStatusChanged,
            ReturnRequested,
            PayoutCreated,
            PayoutStatusChanged,
        ):
            assert event_bus.handlers_for(event_class)
