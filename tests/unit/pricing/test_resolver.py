"""Unit tests for PricingResolver.

Covers:
- Three-tier precedence: merchant override, zone default, system setting.
- Inactive overrides are ignored.
- Malformed, negative or absent settings fall back to 50.00.
- Priority pricing multipliers and the STANDARD fallback.
- Results are Decimals quantized to two places.
"""

from __future__ import annotations

from decimal import Decimal

import pytest

from modules.core.repositories.django_repository import SettingsDjangoRepository
from modules.pricing.constants import DEFAULT_DELIVERY_FEE_SETTING
from modules.pricing.exceptions import ZoneNotFound
from modules.pricing.models import DeliveryPricing, Zone
from modules.shipments.factories import build_pricing_resolver

pytestmark = pytest.mark.unit


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def resolver():
    return build_pricing_resolver()


@pytest.fixture()
def bare_zone():
    return Zone.objects.create(name="Outskirts", default_fee=None)


def _set_default_fee(value: str) -> None:
    SettingsDjangoRepository().set_value(DEFAULT_DELIVERY_FEE_SETTING, value)


# ---------------------------------------------------------------------------
# Precedence
# ---------------------------------------------------------------------------


class TestResolvePrecedence:
    def test_override_wins(self, resolver, merchant, zone):
        DeliveryPricing.objects.create(
            merchant=merchant, zone=zone, delivery_fee=Decimal("75.00")
        )
        assert resolver.resolve(merchant.id, zone) == Decimal("75.00")

    def test_zone_default_without_override(self, resolver, merchant, zone):
        assert resolver.resolve(merchant.id, zone) == Decimal("50.00")

    def test_override_for_another_merchant_does_not_apply(
        self, resolver, merchant, zone, make_account
    ):
        from modules.accounts.models import Role

        other = make_account(Role.MERCHANT)
        DeliveryPricing.objects.create(
            merchant=other, zone=zone, delivery_fee=Decimal("10.00")
        )
        assert resolver.resolve(merchant.id, zone) == Decimal("50.00")

    def test_inactive_override_is_ignored(self, resolver, merchant, zone):
        DeliveryPricing.objects.create(
            merchant=merchant,
            zone=zone,
            delivery_fee=Decimal("75.00"),
            is_active=False,
        )
        assert resolver.resolve(merchant.id, zone) == Decimal("50.00")

    def test_removing_override_falls_back_to_zone(self, resolver, merchant, zone):
        override = DeliveryPricing.objects.create(
            merchant=merchant, zone=zone, delivery_fee=Decimal("75.00")
        )
        override.delete()
        assert resolver.resolve(merchant.id, zone) == Decimal("50.00")

    def test_zone_without_fee_uses_setting(self, resolver, merchant, bare_zone):
        _set_default_fee("62.5")
        assert resolver.resolve(merchant.id, bare_zone) == Decimal("62.50")

    def test_zero_zone_fee_is_used(self, resolver, merchant):
        free = Zone.objects.create(name="Free", default_fee=Decimal("0.00"))
        _set_default_fee("62.50")
        assert resolver.resolve(merchant.id, free) == Decimal("0.00")


class TestSystemDefaultFee:
    def test_absent_setting_uses_fallback(self, resolver, merchant, bare_zone):
        assert resolver.resolve(merchant.id, bare_zone) == Decimal("50.00")

    @pytest.mark.parametrize("raw", ["abc", "", "  ", "-5", "NaN", "Infinity"])
    def test_unusable_setting_uses_fallback(self, resolver, merchant, bare_zone, raw):
        _set_default_fee(raw)
        assert resolver.resolve(merchant.id, bare_zone) == Decimal("50.00")

    def test_setting_parsed_as_exact_decimal(self, resolver):
        _set_default_fee("19.995")
        assert resolver.system_default_fee() == Decimal("20.00")

    def test_result_is_quantized(self, resolver):
        _set_default_fee("45")
        fee = resolver.system_default_fee()
        assert fee == Decimal("45.00")
        assert fee.as_tuple().exponent == -2


# ---------------------------------------------------------------------------
# Priority mode
# ---------------------------------------------------------------------------


class TestResolveForPriority:
    @pytest.mark.parametrize(
        ("priority", "expected"),
        [
            ("EXPRESS", Decimal("75.00")),
            ("STANDARD", Decimal("50.00")),
            ("ECONOMY", Decimal("40.00")),
            ("express", Decimal("75.00")),
            ("OVERNIGHT", Decimal("50.00")),
            (None, Decimal("50.00")),
        ],
    )
    def test_multipliers(self, resolver, zone, priority, expected):
        assert resolver.resolve_for_priority(zone, priority) == expected

    @pytest.mark.parametrize("priority", ["economy", "Economy", "eCoNoMy"])
    def test_priority_names_ignore_case(self, resolver, zone, priority):
        assert resolver.resolve_for_priority(zone, priority) == Decimal("40.00")

    def test_zone_without_fee_prices_from_fallback(self, resolver, bare_zone):
        assert resolver.resolve_for_priority(bare_zone, "EXPRESS") == Decimal("75.00")

    def test_rounds_half_up(self, resolver):
        odd = Zone.objects.create(name="Odd", default_fee=Decimal("33.33"))
        assert resolver.resolve_for_priority(odd, "EXPRESS") == Decimal("50.00")


class TestGetZone:
    def test_unknown_zone(self, resolver):
        import uuid

        with pytest.raises(ZoneNotFound):
            resolver.get_zone(uuid.uuid4())

    def test_malformed_id(self, resolver):
        with pytest.raises(ZoneNotFound):
            resolver.get_zone("not-a-uuid")
