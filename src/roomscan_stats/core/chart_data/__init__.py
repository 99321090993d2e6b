from .apportion import (
    ConfidenceTallyAccumulator,
    apportion_all,
    apportion_confidence,
    confidence_bucket,
)
from .config import DEFAULT_CHART_CONFIG, ChartConfigError, merge_config
from .histogram import (
    MAX_MAIN_BINS,
    BucketLimitError,
    HistogramConfigError,
    InvalidBinSizeError,
    InvalidBoundsError,
    InvalidRangeError,
    bin_measurements,
    histogram_bin_center,
)
from .kde import build_dynamic_kde, dynamic_kde_bounds, evaluate_kde
from .series import measurement_series
from .ticks import nice_tick_step

__all__ = [
    "DEFAULT_CHART_CONFIG",
    "MAX_MAIN_BINS",
    "BucketLimitError",
    "ChartConfigError",
    "ConfidenceTallyAccumulator",
    "HistogramConfigError",
    "InvalidBinSizeError",
    "InvalidBoundsError",
    "InvalidRangeError",
    "apportion_all",
    "apportion_confidence",
    "bin_measurements",
    "build_dynamic_kde",
    "confidence_bucket",
    "dynamic_kde_bounds",
    "evaluate_kde",
    "histogram_bin_center",
    "measurement_series",
    "merge_config",
    "nice_tick_step",
]
