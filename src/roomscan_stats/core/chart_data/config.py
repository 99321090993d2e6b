from __future__ import annotations

from copy import deepcopy
from pathlib import Path
from typing import Any

import yaml
from jsonschema import ValidationError, validate

from roomscan_stats.core.utils import chart_config_path


class ChartConfigError(ValueError):
    pass


def _histogram(
    column: str, bin_size: float, min_value: float, max_value: float, **extra: Any
) -> dict[str, Any]:
    preset = {
        "column": column,
        "bin_size": bin_size,
        "min": min_value,
        "max": max_value,
        "decimal_places": 0,
        "hide_underflow": False,
        "filter": "none",
    }
    preset.update(extra)
    return preset


def _kde(column: str, min_value: float, max_value: float, **extra: Any) -> dict[str, Any]:
    preset = {
        "column": column,
        "initial_min": min_value,
        "initial_max": max_value,
        "filter": "none",
    }
    preset.update(extra)
    return preset


DEFAULT_CHART_CONFIG: dict[str, Any] = {
    "kde": {
        "resolution": 200,
        "diff_threshold": 0.1,
        "label_decimal_places": 1,
        "presets": {
            "duration": _kde("duration", 10, 120),
            "ambient": _kde("avg_ambient_intensity", 980, 1040, filter="positive"),
            "temperature": _kde("avg_color_temperature", 3500, 6700, filter="positive"),
            "iso": _kde("avg_iso", 0, 800, filter="positive"),
            "brightness": _kde("avg_brightness", 0, 6, filter="nonzero"),
            "area": _kde("room_area_sq_ft", 0, 150, filter="positive"),
            "wall_height": _kde("wall_height", 0, 120),
            "wall_width": _kde("wall_width", 0, 300),
            "window_height": _kde("window_height", 0, 120),
            "window_width": _kde("window_width", 0, 120),
            "door_height": _kde("door_height", 0, 120),
            "door_width": _kde("door_width", 0, 60),
            "opening_height": _kde("opening_height", 0, 120),
            "opening_width": _kde("opening_width", 0, 120),
            "floor_length": _kde("floor_length", 0, 50),
            "floor_width": _kde("floor_width", 0, 50),
        },
    },
    "histogram": {
        "presets": {
            "duration": _histogram("duration", 10, 0, 120),
            "ambient": _histogram("avg_ambient_intensity", 5, 950, 1050),
            "temperature": _histogram("avg_color_temperature", 250, 4000, 5500),
            "iso": _histogram("avg_iso", 50, 100, 600),
            "brightness": _histogram("avg_brightness", 0.5, 0, 5, decimal_places=1),
            "area": _histogram("room_area_sq_ft", 10, 0, 150),
        },
    },
    "apportion": {
        # None defers to ROOMSCAN_STATS_LENIENT_APPORTION.
        "lenient": None,
    },
}

_FILTER_ENUM = ["none", "positive", "nonzero"]

CHART_CONFIG_SCHEMA: dict[str, Any] = {
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "kde": {
            "type": "object",
            "additionalProperties": False,
            "properties": {
                "resolution": {"type": "integer", "minimum": 1},
                "diff_threshold": {"type": "number", "minimum": 0},
                "label_decimal_places": {"type": "integer", "minimum": 0},
                "presets": {
                    "type": "object",
                    "additionalProperties": {
                        "type": ["object", "null"],
                        "additionalProperties": False,
                        "properties": {
                            "column": {"type": "string"},
                            "initial_min": {"type": "number"},
                            "initial_max": {"type": "number"},
                            "resolution": {"type": "integer", "minimum": 1},
                            "filter": {"enum": _FILTER_ENUM},
                        },
                    },
                },
            },
        },
        "histogram": {
            "type": "object",
            "additionalProperties": False,
            "properties": {
                "presets": {
                    "type": "object",
                    "additionalProperties": {
                        "type": ["object", "null"],
                        "additionalProperties": False,
                        "properties": {
                            "column": {"type": "string"},
                            "bin_size": {"type": "number"},
                            "min": {"type": "number"},
                            "max": {"type": "number"},
                            "decimal_places": {"type": "integer", "minimum": 0},
                            "hide_underflow": {"type": "boolean"},
                            "filter": {"enum": _FILTER_ENUM},
                        },
                    },
                },
            },
        },
        "apportion": {
            "type": "object",
            "additionalProperties": False,
            "properties": {"lenient": {"type": ["boolean", "null"]}},
        },
    },
}


def merge_config(config: dict[str, Any] | None) -> dict[str, Any]:
    merged = deepcopy(DEFAULT_CHART_CONFIG)
    if config is None:
        return merged
    _deep_merge(merged, config)
    _drop_disabled_presets(merged)
    return merged


def _deep_merge(target: dict[str, Any], incoming: dict[str, Any]) -> None:
    for key, value in incoming.items():
        if isinstance(value, dict) and isinstance(target.get(key), dict):
            _deep_merge(target[key], value)
        else:
            target[key] = deepcopy(value)


def _drop_disabled_presets(config: dict[str, Any]) -> None:
    # A null preset in an override disables the default of the same name.
    for section in ("kde", "histogram"):
        presets = config.get(section, {}).get("presets", {})
        for name in [name for name, preset in presets.items() if preset is None]:
            del presets[name]


def validate_chart_config(config: Any) -> dict[str, Any]:
    if config is None:
        return {}
    try:
        validate(instance=config, schema=CHART_CONFIG_SCHEMA)
    except ValidationError as exc:
        raise ChartConfigError(f"Invalid chart config: {exc.message}") from exc
    return config


def load_chart_config(path: Path) -> dict[str, Any]:
    try:
        payload = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ChartConfigError(f"Unreadable chart config {path}: {exc}") from exc
    return merge_config(validate_chart_config(payload))


def resolve_chart_config(config: dict[str, Any] | None = None) -> dict[str, Any]:
    """Explicit overrides win; otherwise ``ROOMSCAN_STATS_CHART_CONFIG`` or defaults."""

    if config is not None:
        return merge_config(validate_chart_config(config))
    path = chart_config_path()
    if path is not None:
        return load_chart_config(path)
    return merge_config(None)
