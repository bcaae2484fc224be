# tests/test_utils.py

from __future__ import annotations

from decimal import Decimal

import pytest

from rewards.utils.clock import Clock
from rewards.utils.numbers import MAX_POINTS, parse_decimal, usd_to_points

from .fakes import FakeClock


def test_clock_without_now_cannot_be_created() -> None:
    class BrokenClock(Clock):
        pass

    with pytest.raises(TypeError):
        BrokenClock()


def test_fake_clock_reports_epoch_ms() -> None:
    clock = FakeClock()
    before = clock.now_ms()

    clock.advance(1.5)

    assert clock.now_ms() - before == 1500


@pytest.mark.parametrize(
    ("amount", "rate", "expected"),
    [
        ("19.99", 100, 1999),
        ("0.05", 10, 0),
        (str(MAX_POINTS), 1, MAX_POINTS),
        ("214748365", 10, None),
        ("1e30", 1, None),
        ("1e999999", 10, None),
    ],
)
def test_usd_to_points_bounds(amount, rate, expected) -> None:
    assert usd_to_points(parse_decimal(amount), rate) == expected


def test_parse_decimal_keeps_huge_finite_values() -> None:
    assert parse_decimal("1e999999") == Decimal("1e999999")
    assert parse_decimal("1,5") == Decimal("1.5")
    assert parse_decimal("-inf") is None
