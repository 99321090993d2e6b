from __future__ import annotations

import json
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable


_FLOAT_PRECISION = 10

Logger = Callable[[str], None]


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def ensure_dir(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


def _canonicalize(value: Any) -> Any:
    if isinstance(value, float):
        return round(value, _FLOAT_PRECISION)
    if isinstance(value, dict):
        return {key: _canonicalize(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_canonicalize(item) for item in value]
    if isinstance(value, tuple):
        return [_canonicalize(item) for item in value]
    return value


def json_dumps(data: Any) -> str:
    return json.dumps(
        _canonicalize(data), ensure_ascii=False, indent=2, sort_keys=True
    )


def write_json(path: Path, data: Any) -> None:
    ensure_dir(path.parent)
    path.write_text(json_dumps(data), encoding="utf-8")


def null_logger(msg: str) -> None:
    return None


def run_logger(run_dir: Path) -> Logger:
    """Return a logger appending lines to ``<run_dir>/logs/run.log``."""

    log_path = run_dir / "logs" / "run.log"

    def logger(msg: str) -> None:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        with log_path.open("a", encoding="utf-8") as handle:
            handle.write(f"{now_iso()} {msg}\n")

    return logger


def _env_flag(name: str) -> bool:
    raw = os.environ.get(name, "").strip().lower()
    return raw in {"1", "true", "yes", "on"}


def lenient_apportion_enabled() -> bool:
    return _env_flag("ROOMSCAN_STATS_LENIENT_APPORTION")


def chart_config_path() -> Path | None:
    raw = os.environ.get("ROOMSCAN_STATS_CHART_CONFIG", "").strip()
    if not raw:
        return None
    return Path(raw)
