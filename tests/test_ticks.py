from __future__ import annotations

import pytest

from roomscan_stats.core.chart_data.ticks import nice_domain, nice_tick_step, tick_increment


@pytest.mark.parametrize(
    ("max_value", "expected"),
    [
        (1.0, 0.1),
        (5.5, 0.5),
        (7.3, 1.0),
        (0.38, 0.05),
        (46.0, 5.0),
        (180.0, 20.0),
    ],
)
def test_nice_tick_step(max_value: float, expected: float) -> None:
    assert nice_tick_step(max_value) == pytest.approx(expected)


@pytest.mark.parametrize("max_value", [0.0, -3.0, float("nan"), float("inf")])
def test_nice_tick_step_degenerate(max_value: float) -> None:
    assert nice_tick_step(max_value) == 0.0


def test_tick_increment_uses_negative_inverse_below_one() -> None:
    assert tick_increment(0.0, 1.0, 10) == -10
    assert tick_increment(0.0, 100.0, 10) == 10


def test_nice_domain_extends_to_round_values() -> None:
    assert nice_domain(0.0, 0.93) == pytest.approx((0.0, 1.0))
    assert nice_domain(0.0, 97.0) == pytest.approx((0.0, 100.0))
