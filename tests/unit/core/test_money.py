"""Unit tests for currency helpers and human-legible identifiers."""

from __future__ import annotations

import re
from decimal import Decimal

import pytest

from modules.core.identifiers import generate_number, generate_unique_number
from modules.core.money import parse_money, to_money

pytestmark = pytest.mark.unit


class TestToMoney:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (Decimal("70.005"), Decimal("70.01")),
            (Decimal("70.004"), Decimal("70.00")),
            (100, Decimal("100.00")),
            ("12.5", Decimal("12.50")),
        ],
    )
    def test_quantizes_half_up(self, value, expected):
        assert to_money(value) == expected

    def test_rejects_floats(self):
        with pytest.raises(TypeError):
            to_money(0.1)


class TestParseMoney:
    @pytest.mark.parametrize("raw", [None, "", "abc", "-1", "NaN", "-Infinity"])
    def test_unusable_values(self, raw):
        assert parse_money(raw) is None

    def test_strips_whitespace(self):
        assert parse_money(" 42.1 ") == Decimal("42.10")


class TestIdentifiers:
    def test_format(self):
        assert re.fullmatch(r"TRK-\d{8}-[0-9A-F]{8}", generate_number("TRK"))

    def test_retries_on_collision(self):
        seen = []

        def exists(candidate: str) -> bool:
            seen.append(candidate)
            return len(seen) < 3

        number = generate_unique_number("MAN", exists)
        assert number == seen[-1]
        assert len(seen) == 3

    def test_gives_up_after_max_retries(self):
        with pytest.raises(RuntimeError, match="MAN"):
            generate_unique_number("MAN", lambda candidate: True, max_retries=2)
