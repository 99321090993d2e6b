from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal


ConfidenceBucket = Literal["high", "medium", "low"]

CONFIDENCE_BUCKETS: tuple[ConfidenceBucket, ...] = ("high", "medium", "low")


class ChartDataError(ValueError):
    """Base class for reduction failures that skip a single chart."""


@dataclass(frozen=True)
class HistogramResult:
    labels: tuple[str, ...]
    counts: tuple[int, ...]

    def to_payload(self) -> dict[str, Any]:
        return {"labels": list(self.labels), "counts": list(self.counts)}


@dataclass(frozen=True)
class KdeBounds:
    min: float
    max: float


@dataclass(frozen=True)
class KdePoint:
    x: float
    y: float


@dataclass(frozen=True)
class KdeResult:
    bounds: KdeBounds
    series: tuple[KdePoint, ...]

    @property
    def xs(self) -> list[float]:
        return [point.x for point in self.series]

    @property
    def ys(self) -> list[float]:
        return [point.y for point in self.series]

    def labels(self, decimal_places: int = 1) -> list[str]:
        return [f"{point.x:.{decimal_places}f}" for point in self.series]

    def to_payload(self) -> dict[str, Any]:
        return {
            "bounds": {"min": self.bounds.min, "max": self.bounds.max},
            "series": [{"x": point.x, "y": point.y} for point in self.series],
        }


@dataclass(frozen=True)
class ConfidenceTally:
    high: int = 0
    medium: int = 0
    low: int = 0

    @property
    def total(self) -> int:
        return self.high + self.medium + self.low

    def as_tuple(self) -> tuple[int, int, int]:
        return (self.high, self.medium, self.low)
