from __future__ import annotations

import math

import numpy as np
import pytest

from roomscan_stats.core.chart_data.histogram import (
    MAX_MAIN_BINS,
    BucketLimitError,
    HistogramConfigError,
    InvalidBinSizeError,
    InvalidBoundsError,
    InvalidRangeError,
    bin_measurements,
    histogram_bin_center,
    main_bin_count,
)
from roomscan_stats.core.types import ChartDataError


def test_layout_and_labels() -> None:
    result = bin_measurements([], 10, 0, 30)
    assert result.labels == ("< 0", "0-10", "10-20", "20-30", ">= 30")
    assert result.counts == (0, 0, 0, 0, 0)


def test_labels_respect_decimal_places() -> None:
    result = bin_measurements([], 0.5, 0, 1.5, decimal_places=1)
    assert result.labels == ("< 0.0", "0.0-0.5", "0.5-1.0", "1.0-1.5", ">= 1.5")


def test_values_routed_to_underflow_main_and_overflow() -> None:
    result = bin_measurements([-5, 0, 9.99, 10, 25, 30, 31], 10, 0, 30)
    assert result.counts == (1, 2, 1, 1, 2)


def test_boundary_values() -> None:
    at_min = bin_measurements([0.0], 10, 0, 30)
    assert at_min.counts[0] == 0
    assert at_min.counts[1] == 1
    at_max = bin_measurements([30.0], 10, 0, 30)
    assert at_max.counts[-1] == 1
    assert at_max.counts[-2] == 0


def test_non_finite_values_are_dropped() -> None:
    data = [1.0, float("nan"), float("inf"), float("-inf"), 12.0]
    result = bin_measurements(data, 10, 0, 30)
    assert sum(result.counts) == 2
    assert result.counts == (0, 1, 1, 0, 0)


def test_hide_underflow_discards_the_count() -> None:
    data = [-3, -2, 5, 15, 40]
    shown = bin_measurements(data, 10, 0, 30)
    hidden = bin_measurements(data, 10, 0, 30, hide_underflow=True)
    assert len(hidden.counts) == len(shown.counts) - 1
    assert hidden.labels == shown.labels[1:]
    assert hidden.counts == shown.counts[1:]
    assert sum(hidden.counts) == 3


def test_partial_last_bin_extends_past_max() -> None:
    result = bin_measurements([24.0, 25.0], 10, 0, 25)
    assert result.labels[-2] == "20-30"
    assert result.counts == (0, 0, 0, 1, 1)


@pytest.mark.parametrize("seed", [0, 1, 2, 3])
def test_sum_matches_finite_inputs(seed: int) -> None:
    rng = np.random.default_rng(seed)
    data = rng.normal(50.0, 30.0, 500).tolist() + [float("nan")] * 7
    shown = bin_measurements(data, 7.5, 10, 90)
    finite = [value for value in data if math.isfinite(value)]
    assert sum(shown.counts) == len(finite)
    hidden = bin_measurements(data, 7.5, 10, 90, hide_underflow=True)
    assert sum(hidden.counts) == len([value for value in finite if value >= 10])


@pytest.mark.parametrize(
    ("bin_size", "min_value", "max_value", "error"),
    [
        (0, 0, 10, InvalidBinSizeError),
        (-1, 0, 10, InvalidBinSizeError),
        (float("nan"), 0, 10, InvalidBinSizeError),
        (1, float("-inf"), 10, InvalidBoundsError),
        (1, 0, float("nan"), InvalidBoundsError),
        (1, 10, 0, InvalidRangeError),
        (1, 5, 5, InvalidRangeError),
        (1e-6, 0, 1000, BucketLimitError),
    ],
)
def test_rejects_bad_configuration(bin_size, min_value, max_value, error) -> None:
    with pytest.raises(error):
        bin_measurements([1.0, 2.0], bin_size, min_value, max_value)


def test_config_errors_share_a_base() -> None:
    with pytest.raises(HistogramConfigError):
        bin_measurements([], 0, 0, 10)
    assert issubclass(HistogramConfigError, ChartDataError)
    assert issubclass(HistogramConfigError, ValueError)


def test_safety_ceiling_is_inclusive() -> None:
    assert main_bin_count(1, 0, MAX_MAIN_BINS) == MAX_MAIN_BINS
    with pytest.raises(BucketLimitError):
        main_bin_count(1, 0, MAX_MAIN_BINS + 1)


def test_rejects_negative_decimal_places() -> None:
    with pytest.raises(ValueError):
        bin_measurements([], 1, 0, 10, decimal_places=-1)


@pytest.mark.parametrize("hide_underflow", [False, True])
def test_bin_centers_follow_bucket_layout(hide_underflow: bool) -> None:
    min_value, max_value, bin_size = 0.0, 30.0, 10.0
    result = bin_measurements([], bin_size, min_value, max_value, hide_underflow=hide_underflow)
    total = len(result.counts)
    centers = [
        histogram_bin_center(idx, min_value, max_value, bin_size, hide_underflow, total)
        for idx in range(total)
    ]
    if hide_underflow:
        assert centers == [5.0, 15.0, 25.0, 35.0]
    else:
        assert centers == [-5.0, 5.0, 15.0, 25.0, 35.0]
        assert centers[0] < min_value
    assert centers[-1] > max_value


def test_main_bin_centers_sit_inside_their_ranges() -> None:
    min_value, max_value, bin_size = 3.0, 10.0, 0.75
    total = len(bin_measurements([], bin_size, min_value, max_value).counts)
    for idx in range(1, total - 1):
        center = histogram_bin_center(idx, min_value, max_value, bin_size, False, total)
        assert min_value + (idx - 1) * bin_size < center < min_value + idx * bin_size
