"""Unit tests for PayoutService.

Covers:
- Courier settlement at 70% of each fee, rounded half-up per item.
- Merchant payouts at the full fee.
- Each shipment settles at most once per payout type.
- Eligibility: DELIVERED only, on the courier's manifests, not
  cash-reconciled.
- Validation: period order, payee role, empty runs.
- Status updates: paid timestamp, locked final states, unknown values.
- Earnings preview without writes.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from modules.accounts.exceptions import RoleMismatch
from modules.core.exceptions import ImmutableRecord
from modules.core.models import OutboxEvent
from modules.payouts.constants import PayoutStatus, PayoutType
from modules.payouts.exceptions import (
    InvalidPayoutPeriod,
    InvalidPayoutStatus,
    NoEligibleShipments,
    PayoutNotFound,
    PayoutStatusLocked,
)
from modules.payouts.models import Payout, PayoutItem
from modules.payouts.repositories import PayoutDjangoRepository
from modules.payouts.services import PayoutService, courier_earning
from modules.pricing.models import Zone
from modules.shipments.models import Shipment

pytestmark = pytest.mark.unit

START = date(2026, 10, 1)
END = date(2026, 10, 31)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def service(account_service):
    return PayoutService(
        payout_repository=PayoutDjangoRepository(),
        account_service=account_service,
    )


@pytest.fixture()
def priced_zones():
    return [
        Zone.objects.create(name=f"Zone {fee}", default_fee=Decimal(fee))
        for fee in ("100.00", "200.00", "300.00")
    ]


@pytest.fixture()
def three_deliveries(make_shipment, delivered_by, courier, priced_zones):
    return [
        delivered_by(make_shipment(zone_id=zone.id), courier)
        for zone in priced_zones
    ]


# ---------------------------------------------------------------------------
# Courier settlement
# ---------------------------------------------------------------------------


class TestCourierPayout:
    def test_net_amount_is_seventy_percent(self, service, courier, three_deliveries):
        payout = service.create_courier_payout(courier.id, START, END)

        assert payout.net_amount == Decimal("420.00")
        assert payout.payout_type == PayoutType.COURIER_SETTLEMENT
        assert payout.status == PayoutStatus.PENDING
        assert payout.user_id == courier.id
        items = service.get_payout_items(payout.id)
        assert len(items) == 3
        assert sum(item.amount for item in items) == Decimal("420.00")
        assert sorted(item.amount for item in items) == [
            Decimal("70.00"),
            Decimal("140.00"),
            Decimal("210.00"),
        ]

    def test_items_describe_their_shipment(self, service, courier, three_deliveries):
        payout = service.create_courier_payout(courier.id, START, END)
        items = service.get_payout_items(payout.id)
        descriptions = {item.description for item in items}
        assert descriptions == {
            f"Delivery fee for shipment {s.tracking_number}" for s in three_deliveries
        }

    def test_shipments_point_at_the_payout(self, service, courier, three_deliveries):
        payout = service.create_courier_payout(courier.id, START, END)
        assert Shipment.objects.filter(payout=payout).count() == 3

    def test_second_run_finds_nothing(self, service, courier, three_deliveries):
        service.create_courier_payout(courier.id, START, END)
        with pytest.raises(NoEligibleShipments):
            service.create_courier_payout(courier.id, START, END)
        assert Payout.objects.count() == 1

    def test_later_deliveries_settle_in_next_run(
        self, service, courier, three_deliveries, make_shipment, delivered_by
    ):
        service.create_courier_payout(courier.id, START, END)
        delivered_by(make_shipment(), courier)

        second = service.create_courier_payout(courier.id, START, END)
        assert second.net_amount == Decimal("35.00")
        assert len(service.get_payout_items(second.id)) == 1

    def test_only_delivered_shipments(
        self, service, courier, manifest_service, make_shipment, move_to
    ):
        shipment = make_shipment()
        shipment.manifest = manifest_service.open_for_courier(courier)
        shipment.save(update_fields=["manifest"])
        move_to(shipment, "OUT_FOR_DELIVERY")

        with pytest.raises(NoEligibleShipments):
            service.create_courier_payout(courier.id, START, END)

    def test_only_own_manifests(
        self, service, courier, other_courier, three_deliveries
    ):
        with pytest.raises(NoEligibleShipments):
            service.create_courier_payout(other_courier.id, START, END)

    def test_cash_reconciled_shipments_excluded(
        self, service, courier, three_deliveries
    ):
        Shipment.objects.filter(pk=three_deliveries[0].pk).update(
            cash_reconciled=True
        )
        payout = service.create_courier_payout(courier.id, START, END)
        assert payout.net_amount == Decimal("350.00")

    def test_payee_must_be_a_courier(self, service, merchant, three_deliveries):
        with pytest.raises(RoleMismatch):
            service.create_courier_payout(merchant.id, START, END)

    def test_period_start_after_end(self, service, courier, three_deliveries):
        with pytest.raises(InvalidPayoutPeriod):
            service.create_courier_payout(courier.id, END, START)
        assert not Payout.objects.exists()

    def test_writes_payout_created_event(self, service, courier, three_deliveries):
        payout = service.create_courier_payout(courier.id, START, END)
        event = OutboxEvent.objects.get(event_type="PayoutCreated")
        assert event.topic == "payouts"
        assert event.aggregate_id == str(payout.id)
        assert event.payload["net_amount"] == "420.00"
        assert event.payload["item_count"] == 3


@pytest.mark.parametrize(
    ("fee", "expected"),
    [
        (Decimal("33.33"), Decimal("23.33")),
        (Decimal("0.05"), Decimal("0.04")),
        (Decimal("49.99"), Decimal("34.99")),
    ],
)
def test_courier_earning_rounds_half_up(fee, expected):
    assert courier_earning(fee) == expected


# ---------------------------------------------------------------------------
# Merchant payouts
# ---------------------------------------------------------------------------


class TestMerchantPayout:
    def test_full_fee_credited(self, service, merchant, three_deliveries):
        payout = service.create_merchant_payout(merchant.id, START, END)
        assert payout.net_amount == Decimal("600.00")
        assert payout.payout_type == PayoutType.MERCHANT_PAYOUT

    def test_settled_once_per_type(self, service, merchant, courier, three_deliveries):
        service.create_courier_payout(courier.id, START, END)
        service.create_merchant_payout(merchant.id, START, END)

        with pytest.raises(NoEligibleShipments):
            service.create_merchant_payout(merchant.id, START, END)
        with pytest.raises(NoEligibleShipments):
            service.create_courier_payout(courier.id, START, END)

        for shipment in three_deliveries:
            assert PayoutItem.objects.filter(source_id=shipment.id).count() == 2

    def test_payee_must_be_a_merchant(self, service, courier, three_deliveries):
        with pytest.raises(RoleMismatch):
            service.create_merchant_payout(courier.id, START, END)


# ---------------------------------------------------------------------------
# Status
# ---------------------------------------------------------------------------


class TestUpdatePayoutStatus:
    @pytest.fixture()
    def payout(self, service, courier, three_deliveries):
        return service.create_courier_payout(courier.id, START, END)

    def test_completed_sets_paid_at(self, service, payout):
        service.update_payout_status(payout.id, "PROCESSED")
        updated = service.update_payout_status(payout.id, "COMPLETED")
        assert updated.status == PayoutStatus.COMPLETED
        assert updated.paid_at is not None

    def test_other_statuses_leave_paid_at_empty(self, service, payout):
        updated = service.update_payout_status(payout.id, "PROCESSED")
        assert updated.paid_at is None

    @pytest.mark.parametrize("final", ["COMPLETED", "CANCELLED"])
    def test_final_states_are_locked(self, service, payout, final):
        service.update_payout_status(payout.id, final)
        with pytest.raises(PayoutStatusLocked):
            service.update_payout_status(payout.id, "PENDING")

    def test_unknown_status(self, service, payout):
        with pytest.raises(InvalidPayoutStatus):
            service.update_payout_status(payout.id, "paid")

    def test_unknown_payout(self, service):
        import uuid

        with pytest.raises(PayoutNotFound):
            service.update_payout_status(uuid.uuid4(), "COMPLETED")

    def test_status_change_event(self, service, payout):
        service.update_payout_status(payout.id, "COMPLETED")
        event = OutboxEvent.objects.get(event_type="PayoutStatusChanged")
        assert event.payload["old_status"] == "PENDING"
        assert event.payload["new_status"] == "COMPLETED"

    def test_items_are_immutable(self, service, payout):
        item = service.get_payout_items(payout.id)[0]
        item.amount = Decimal("1.00")
        with pytest.raises(ImmutableRecord):
            item.save()


def test_payout_type_vocabulary():
    assert set(PayoutType.values) == {
        "COURIER_SETTLEMENT",
        "MERCHANT_PAYOUT",
        "WAREHOUSE_SETTLEMENT",
    }


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


class TestQueries:
    def test_earnings_preview(self, service, courier, three_deliveries):
        preview = service.calculate_courier_earnings(courier.id)
        assert preview.shipment_count == 3
        assert preview.total_fees == Decimal("600.00")
        assert preview.earnings == Decimal("420.00")
        assert not Payout.objects.exists()

    def test_preview_matches_payout(self, service, courier, three_deliveries):
        preview = service.calculate_courier_earnings(courier.id)
        payout = service.create_courier_payout(courier.id, START, END)
        assert payout.net_amount == preview.earnings
        assert service.calculate_courier_earnings(courier.id).shipment_count == 0

    def test_list_for_user_and_pending(self, service, courier, three_deliveries):
        payout = service.create_courier_payout(courier.id, START, END)
        assert list(service.list_payouts_for_user(courier.id)) == [payout]
        assert list(service.list_pending_payouts()) == [payout]
        service.update_payout_status(payout.id, "COMPLETED")
        assert list(service.list_pending_payouts()) == []
