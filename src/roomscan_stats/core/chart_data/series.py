from __future__ import annotations

import numpy as np
import pandas as pd


def measurement_series(
    frame: pd.DataFrame,
    column: str,
    *,
    positive_only: bool = False,
    nonzero_only: bool = False,
) -> np.ndarray:
    """Finite values of one per-artifact metadata column.

    Unparseable cells become NaN and are dropped with the other non-finite
    values. Lighting metrics report 0 when a capture had no reading, hence the
    ``positive_only`` / ``nonzero_only`` filters.
    """

    if column not in frame.columns:
        return np.empty(0, dtype=float)
    numeric = pd.to_numeric(frame[column], errors="coerce")
    values = numeric.to_numpy(dtype=float, na_value=np.nan)
    values = values[np.isfinite(values)]
    if positive_only:
        values = values[values > 0]
    if nonzero_only:
        values = values[values != 0]
    return values
