from __future__ import annotations

import math
from typing import Iterable

import numpy as np

from roomscan_stats.core.types import ChartDataError, HistogramResult


# Upper limit on main bins for one histogram.
MAX_MAIN_BINS = 50_000


class HistogramConfigError(ChartDataError):
    pass


class InvalidBinSizeError(HistogramConfigError):
    pass


class InvalidBoundsError(HistogramConfigError):
    pass


class InvalidRangeError(HistogramConfigError):
    pass


class BucketLimitError(HistogramConfigError):
    pass


def main_bin_count(bin_size: float, min_value: float, max_value: float) -> int:
    """Validate a histogram layout and return its number of main bins."""

    if not math.isfinite(bin_size) or bin_size <= 0:
        raise InvalidBinSizeError(f"Invalid bin_size: {bin_size}. Must be > 0.")
    if not math.isfinite(min_value) or not math.isfinite(max_value):
        raise InvalidBoundsError(
            f"Invalid min/max: {min_value}/{max_value}. Must be finite."
        )
    if max_value <= min_value:
        raise InvalidRangeError(
            f"Invalid range: max ({max_value}) must be > min ({min_value})."
        )
    count = math.ceil((max_value - min_value) / bin_size)
    if count > MAX_MAIN_BINS:
        raise BucketLimitError(
            f"Bucket count {count} exceeds safety limit of {MAX_MAIN_BINS}. "
            "Increase bin_size or reduce range."
        )
    return count


def histogram_labels(
    num_main_bins: int,
    bin_size: float,
    min_value: float,
    max_value: float,
    decimal_places: int = 0,
) -> list[str]:
    labels = [f"< {min_value:.{decimal_places}f}"]
    for i in range(num_main_bins):
        start = min_value + i * bin_size
        end = min_value + (i + 1) * bin_size
        labels.append(f"{start:.{decimal_places}f}-{end:.{decimal_places}f}")
    labels.append(f">= {max_value:.{decimal_places}f}")
    return labels


def bin_measurements(
    data: Iterable[float],
    bin_size: float,
    min_value: float,
    max_value: float,
    decimal_places: int = 0,
    hide_underflow: bool = False,
) -> HistogramResult:
    """Count measurements into underflow, fixed-width main bins and overflow.

    Index 0 holds values below ``min_value``, indices ``1..N`` the main bins
    ``[min + (i-1)*bin_size, min + i*bin_size)`` and index ``N+1`` values at or
    above ``max_value``. Non-finite values are dropped without being counted.
    With ``hide_underflow`` the underflow bucket is removed after counting and
    its count discarded.
    """

    if decimal_places < 0:
        raise ValueError(f"decimal_places must be >= 0, got {decimal_places}")
    num_main_bins = main_bin_count(bin_size, min_value, max_value)
    labels = histogram_labels(
        num_main_bins, bin_size, min_value, max_value, decimal_places
    )

    arr = np.asarray(list(data), dtype=float)
    arr = arr[np.isfinite(arr)]
    underflow_mask = arr < min_value
    overflow_mask = arr >= max_value
    main = arr[~underflow_mask & ~overflow_mask]
    # Values just below max can round up to N + 1 in floating point.
    indices = np.clip(
        np.floor((main - min_value) / bin_size).astype(np.int64) + 1,
        1,
        num_main_bins,
    )
    buckets = np.bincount(indices, minlength=num_main_bins + 2)
    buckets[0] = int(np.count_nonzero(underflow_mask))
    buckets[-1] = int(np.count_nonzero(overflow_mask))

    counts = [int(value) for value in buckets]
    if hide_underflow:
        return HistogramResult(labels=tuple(labels[1:]), counts=tuple(counts[1:]))
    return HistogramResult(labels=tuple(labels), counts=tuple(counts))


def histogram_bin_center(
    index: int,
    min_value: float,
    max_value: float,
    bin_size: float,
    hide_underflow: bool,
    total_buckets: int,
) -> float:
    """x position of a returned bucket; ``total_buckets`` is the returned length."""

    effective_index = index + (1 if hide_underflow else 0)
    half_bin = bin_size / 2
    if effective_index == 0:
        return min_value - half_bin
    full_length = total_buckets + (1 if hide_underflow else 0)
    if effective_index == full_length - 1:
        return max_value + half_bin
    return min_value + (effective_index - 1) * bin_size + half_bin
