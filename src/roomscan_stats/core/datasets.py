from __future__ import annotations

from typing import Any, Iterable, Mapping

import numpy as np
import pandas as pd

from roomscan_stats.core.chart_data.apportion import apportion_all
from roomscan_stats.core.chart_data.config import ChartConfigError, resolve_chart_config
from roomscan_stats.core.chart_data.histogram import bin_measurements
from roomscan_stats.core.chart_data.kde import build_dynamic_kde
from roomscan_stats.core.chart_data.series import measurement_series
from roomscan_stats.core.types import ChartDataError, ConfidenceTally
from roomscan_stats.core.utils import Logger, null_logger


_HISTOGRAM_KEYS = ("column", "bin_size", "min", "max")
_KDE_KEYS = ("column", "initial_min", "initial_max")


def _require(preset: Mapping[str, Any], keys: Iterable[str], name: str) -> None:
    missing = [key for key in keys if key not in preset]
    if missing:
        raise ChartConfigError(f"Preset {name} is missing {', '.join(missing)}")


def _tally_total(raw: ConfidenceTally | Iterable[float] | None) -> float:
    if raw is None:
        return 0.0
    if isinstance(raw, ConfidenceTally):
        return float(raw.total)
    return float(sum(raw))


def _series_for(frame: pd.DataFrame, preset: Mapping[str, Any]) -> np.ndarray:
    mode = preset.get("filter", "none")
    return measurement_series(
        frame,
        preset["column"],
        positive_only=mode == "positive",
        nonzero_only=mode == "nonzero",
    )


def _histogram_dataset(
    frame: pd.DataFrame, name: str, preset: Mapping[str, Any]
) -> dict[str, Any]:
    _require(preset, _HISTOGRAM_KEYS, name)
    values = _series_for(frame, preset)
    result = bin_measurements(
        values,
        float(preset["bin_size"]),
        float(preset["min"]),
        float(preset["max"]),
        decimal_places=int(preset.get("decimal_places", 0)),
        hide_underflow=bool(preset.get("hide_underflow", False)),
    )
    payload = result.to_payload()
    payload["n"] = int(values.size)
    return payload


def _kde_dataset(
    frame: pd.DataFrame,
    name: str,
    preset: Mapping[str, Any],
    kde_config: Mapping[str, Any],
) -> dict[str, Any]:
    _require(preset, _KDE_KEYS, name)
    values = _series_for(frame, preset)
    result = build_dynamic_kde(
        values,
        float(preset["initial_min"]),
        float(preset["initial_max"]),
        resolution=int(preset.get("resolution", kde_config["resolution"])),
        diff_threshold=float(kde_config["diff_threshold"]),
    )
    payload = result.to_payload()
    payload["labels"] = result.labels(int(kde_config["label_decimal_places"]))
    payload["n"] = int(values.size)
    return payload


def build_chart_datasets(
    frame: pd.DataFrame,
    *,
    config: dict[str, Any] | None = None,
    tallies: Mapping[str, ConfidenceTally | Iterable[float]] | None = None,
    artifact_counts: Mapping[str, int] | None = None,
    logger: Logger | None = None,
) -> dict[str, Any]:
    """Run every configured reduction over per-artifact metadata.

    One row of ``frame`` per artifact. A chart whose reduction fails is logged
    and listed under ``skipped``; the remaining charts are still built.
    Confidence tallies are apportioned only when ``artifact_counts`` is given.
    """

    log = logger or null_logger
    cfg = resolve_chart_config(config)
    out: dict[str, Any] = {"histograms": {}, "kde": {}, "confidence": {}, "skipped": []}

    for name, preset in cfg["histogram"]["presets"].items():
        try:
            out["histograms"][name] = _histogram_dataset(frame, name, preset)
        except (ChartDataError, ChartConfigError) as exc:
            log(f"[ERROR] histogram {name}: {exc}")
            out["skipped"].append({"chart": f"histogram.{name}", "error": str(exc)})

    kde_config = cfg["kde"]
    for name, preset in kde_config["presets"].items():
        try:
            out["kde"][name] = _kde_dataset(frame, name, preset, kde_config)
        except (ValueError, ChartConfigError) as exc:
            log(f"[ERROR] kde {name}: {exc}")
            out["skipped"].append({"chart": f"kde.{name}", "error": str(exc)})

    if artifact_counts is not None:
        apportioned = apportion_all(
            tallies or {},
            artifact_counts,
            lenient=cfg["apportion"]["lenient"],
        )
        out["confidence"] = {
            category: {"high": high, "medium": medium, "low": low}
            for category, (high, medium, low) in apportioned.items()
        }
        off_target = [
            category
            for category, triple in apportioned.items()
            if sum(triple) != max(0, int(artifact_counts[category]))
            and _tally_total((tallies or {}).get(category)) > 0
        ]
        if off_target:
            log(f"[WARN] confidence apportionment off target for: {', '.join(off_target)}")

    log(
        f"[INFO] chart datasets built: {len(out['histograms'])} histograms, "
        f"{len(out['kde'])} kde, {len(out['confidence'])} confidence, "
        f"{len(out['skipped'])} skipped"
    )
    return out
