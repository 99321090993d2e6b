"""Largest-remainder apportionment of confidence detections.

A category can be detected several times in one artifact, at different
confidence levels, so raw tallies count detections rather than artifacts.
These helpers turn a category's ``(high, medium, low)`` detection tally into
whole artifact counts that sum to the number of artifacts containing the
category (Hare-Niemeyer).
"""

from __future__ import annotations

import math
from typing import Any, Iterable, Mapping

from roomscan_stats.core.types import (
    CONFIDENCE_BUCKETS,
    ConfidenceBucket,
    ConfidenceTally,
)
from roomscan_stats.core.utils import lenient_apportion_enabled


Triple = tuple[int, int, int]

_BUCKET_INDEX: dict[str, int] = {name: idx for idx, name in enumerate(CONFIDENCE_BUCKETS)}


def _as_triple(raw: ConfidenceTally | Iterable[float]) -> list[float]:
    if isinstance(raw, ConfidenceTally):
        return [float(value) for value in raw.as_tuple()]
    values = [float(value) for value in raw]
    if len(values) != 3:
        raise ValueError(f"Expected (high, medium, low), got {len(values)} values")
    return values


def apportion_confidence(
    raw: ConfidenceTally | Iterable[float],
    artifact_count: int,
    *,
    lenient: bool | None = None,
) -> Triple:
    """Scale a detection tally to ``artifact_count`` whole units.

    Units left over after flooring go to the largest remainders, ties broken
    in high, medium, low order. If flooring ever overshoots the target, units
    are taken back from the smallest remainders unless ``lenient`` keeps the
    over-sum. ``lenient=None`` reads ``ROOMSCAN_STATS_LENIENT_APPORTION``.
    """

    if lenient is None:
        lenient = lenient_apportion_enabled()
    counts = [
        max(0.0, value) if math.isfinite(value) else 0.0 for value in _as_triple(raw)
    ]
    target = max(0, int(artifact_count))
    total = sum(counts)
    if total <= 0:
        return (0, 0, 0)

    scale = target / total
    scaled = [value * scale for value in counts]
    result = [math.floor(value) for value in scaled]
    remainders = [value - floor for value, floor in zip(scaled, result)]

    # sorted() is stable, so equal remainders keep high, medium, low order.
    ranked = sorted(range(3), key=lambda i: remainders[i], reverse=True)
    deficit = target - sum(result)
    if deficit > 0:
        for idx in ranked[:deficit]:
            result[idx] += 1
    elif deficit < 0 and not lenient:
        for idx in sorted(range(3), key=lambda i: remainders[i]):
            while deficit < 0 and result[idx] > 0:
                result[idx] -= 1
                deficit += 1

    high, medium, low = (max(0, int(value)) for value in result)
    return (high, medium, low)


def confidence_bucket(confidence: Mapping[str, Any] | None) -> ConfidenceBucket | None:
    """First confidence level present on a detection, checked high to low."""

    if not confidence:
        return None
    for bucket in CONFIDENCE_BUCKETS:
        if bucket in confidence:
            return bucket
    return None


class ConfidenceTallyAccumulator:
    """Per-category detection counts gathered over every artifact."""

    def __init__(self) -> None:
        self._counts: dict[str, list[int]] = {}

    def add(self, category: str, bucket: ConfidenceBucket) -> None:
        if bucket not in _BUCKET_INDEX:
            raise ValueError(f"Unknown confidence bucket: {bucket}")
        slot = self._counts.setdefault(category, [0, 0, 0])
        slot[_BUCKET_INDEX[bucket]] += 1

    def add_detection(self, category: str, confidence: Mapping[str, Any] | None) -> bool:
        bucket = confidence_bucket(confidence)
        if bucket is None:
            return False
        self.add(category, bucket)
        return True

    def __len__(self) -> int:
        return len(self._counts)

    def tallies(self) -> dict[str, ConfidenceTally]:
        return {
            category: ConfidenceTally(high=slot[0], medium=slot[1], low=slot[2])
            for category, slot in self._counts.items()
        }


def apportion_all(
    tallies: Mapping[str, ConfidenceTally | Iterable[float]],
    artifact_counts: Mapping[str, int],
    *,
    lenient: bool | None = None,
) -> dict[str, Triple]:
    out: dict[str, Triple] = {}
    for category, artifact_count in artifact_counts.items():
        raw = tallies.get(category)
        if raw is None:
            out[category] = (0, 0, 0)
            continue
        out[category] = apportion_confidence(raw, artifact_count, lenient=lenient)
    return out
