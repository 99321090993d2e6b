from __future__ import annotations

from pathlib import Path

import numpy as np
import pandas as pd
import pytest


@pytest.fixture()
def run_dir(tmp_path: Path) -> Path:
    run_dir = tmp_path / "run"
    (run_dir / "logs").mkdir(parents=True, exist_ok=True)
    return run_dir


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("ROOMSCAN_STATS_CHART_CONFIG", raising=False)
    monkeypatch.delenv("ROOMSCAN_STATS_LENIENT_APPORTION", raising=False)


def make_metadata_frame(rows: int = 40, seed: int = 1337) -> pd.DataFrame:
    rng = np.random.default_rng(seed)
    return pd.DataFrame(
        {
            "duration": rng.normal(55.0, 12.0, rows),
            "avg_ambient_intensity": rng.normal(1005.0, 6.0, rows),
            "avg_color_temperature": rng.normal(4800.0, 300.0, rows),
            "avg_iso": rng.normal(320.0, 60.0, rows),
            "avg_brightness": rng.normal(2.5, 0.6, rows),
            "room_area_sq_ft": rng.normal(48.0, 10.0, rows),
            "wall_height": rng.normal(96.0, 4.0, rows),
        }
    )


@pytest.fixture()
def metadata_frame() -> pd.DataFrame:
    return make_metadata_frame()
