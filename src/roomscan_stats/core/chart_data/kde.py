from __future__ import annotations

import math
from typing import Iterable

import numpy as np

from roomscan_stats.core.chart_data.ticks import nice_tick_step
from roomscan_stats.core.types import KdeBounds, KdePoint, KdeResult


DEFAULT_RESOLUTION = 200
DEFAULT_DIFF_THRESHOLD = 0.1

_SILVERMAN_FACTOR = 1.06
_FALLBACK_BANDWIDTH = 1.0
_PADDING_RATIO = 0.05
# Crossing search needs a grid this long before "no crossing" means "no signal".
_MIN_GRID_FOR_FALLBACK = 10
_SQRT_2PI = math.sqrt(2.0 * math.pi)


def _finite(data: Iterable[float]) -> np.ndarray:
    arr = np.asarray(list(data), dtype=float)
    return arr[np.isfinite(arr)]


def _check_resolution(resolution: int) -> None:
    if int(resolution) < 1:
        raise ValueError(f"resolution must be >= 1, got {resolution}")


def silverman_bandwidth(values: np.ndarray) -> float:
    n = int(values.size)
    std = float(np.std(values, ddof=1)) if n >= 2 else 0.0
    bandwidth = _SILVERMAN_FACTOR * std * n ** -0.2 if n else 0.0
    if bandwidth <= 0 or not math.isfinite(bandwidth):
        return _FALLBACK_BANDWIDTH
    return bandwidth


def _density(values: np.ndarray, grid: np.ndarray) -> np.ndarray:
    if values.size == 0:
        return np.zeros_like(grid)
    bandwidth = silverman_bandwidth(values)
    u = (grid[:, None] - values[None, :]) / bandwidth
    kernels = np.exp(-0.5 * u * u) / _SQRT_2PI
    # Sum of kernels over the bandwidth: a density scaled by n, so the y axis
    # reads roughly as point counts.
    return kernels.sum(axis=1) / bandwidth


def kde_grid(min_value: float, max_value: float, resolution: int) -> np.ndarray:
    _check_resolution(resolution)
    return np.linspace(min_value, max_value, int(resolution))


def evaluate_kde(
    data: Iterable[float],
    min_value: float,
    max_value: float,
    resolution: int = DEFAULT_RESOLUTION,
) -> tuple[KdePoint, ...]:
    """Gaussian KDE sampled on ``resolution`` evenly spaced points."""

    grid = kde_grid(min_value, max_value, resolution)
    ys = np.maximum(_density(_finite(data), grid), 0.0)
    return tuple(KdePoint(x=float(x), y=float(y)) for x, y in zip(grid, ys))


def _clamp_to_window(
    lo: float, hi: float, initial_min: float, initial_max: float
) -> KdeBounds:
    span = initial_max - initial_min
    lo = max(lo, initial_min - span)
    hi = min(hi, initial_max + span)
    if not (math.isfinite(lo) and math.isfinite(hi)) or lo >= hi:
        return KdeBounds(min=initial_min, max=initial_max)
    return KdeBounds(min=float(lo), max=float(hi))


def dynamic_kde_bounds(
    data: Iterable[float],
    initial_min: float,
    initial_max: float,
    resolution: int = DEFAULT_RESOLUTION,
) -> KdeBounds:
    """Pick an x window where the density of ``data`` is visible.

    A first KDE over the caller's guess is thresholded at half of the first
    y-axis tick; the first upward and last downward crossings bound the
    window, padded by 5%. Without usable crossings the padded data range is
    used. The minimum never drops to zero or below when every datum is
    positive, and the result never strays more than one initial range width
    outside the guess.
    """

    grid = kde_grid(initial_min, initial_max, resolution)
    all_values = _finite(data)
    positive = all_values[all_values > 0]
    if positive.size == 0:
        return KdeBounds(min=initial_min, max=initial_max)

    data_min = float(positive.min())
    data_max = float(positive.max())

    values = _density(all_values, grid)
    max_value = float(values.max()) if values.size else 0.0
    if max_value <= 0:
        return KdeBounds(min=initial_min, max=initial_max)

    tick = nice_tick_step(max_value)
    threshold = (tick if tick > 0 else max_value) / 2

    last = values.size - 1
    min_index, found_min = 0, False
    for i in range(last):
        if values[i] < threshold and values[i + 1] >= threshold:
            min_index, found_min = i + 1, True
            break
    max_index, found_max = last, False
    for i in range(last, 0, -1):
        if values[i - 1] >= threshold and values[i] < threshold:
            max_index, found_max = i - 1, True
            break

    if min_index >= max_index or (
        not found_min and not found_max and values.size > _MIN_GRID_FOR_FALLBACK
    ):
        padding = (data_max - data_min) * _PADDING_RATIO
        return _clamp_to_window(
            data_min,
            min(initial_max, data_max + padding),
            initial_min,
            initial_max,
        )

    lo = float(grid[min_index])
    hi = float(grid[max_index])
    if lo <= 0:
        lo = data_min
    padding = (hi - lo) * _PADDING_RATIO
    return _clamp_to_window(
        max(data_min, lo - padding),
        min(initial_max, hi + padding),
        initial_min,
        initial_max,
    )


def build_dynamic_kde(
    data: Iterable[float],
    initial_min: float,
    initial_max: float,
    resolution: int = DEFAULT_RESOLUTION,
    diff_threshold: float = DEFAULT_DIFF_THRESHOLD,
) -> KdeResult:
    """Density curve on a data-driven window, refined at most once.

    Bounds are computed from the caller's guess, then recomputed seeded with
    themselves. When either endpoint moves by more than ``diff_threshold`` the
    curve is re-evaluated on the second bounds; there is no further iteration.
    """

    if not (math.isfinite(initial_min) and math.isfinite(initial_max)):
        raise ValueError(f"Invalid initial bounds: {initial_min}/{initial_max}")
    if initial_max <= initial_min:
        raise ValueError(
            f"Invalid initial range: max ({initial_max}) must be > min ({initial_min})"
        )
    values = _finite(data)

    first = dynamic_kde_bounds(values, initial_min, initial_max, resolution)
    series = evaluate_kde(values, first.min, first.max, resolution)

    second = dynamic_kde_bounds(values, first.min, first.max, resolution)
    if (
        abs(second.min - first.min) > diff_threshold
        or abs(second.max - first.max) > diff_threshold
    ):
        return KdeResult(
            bounds=second,
            series=evaluate_kde(values, second.min, second.max, resolution),
        )
    return KdeResult(bounds=first, series=series)
