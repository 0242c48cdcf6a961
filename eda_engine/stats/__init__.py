"""SQL statistics used by the EDA recipes."""

from .categorical import category_counts, outcome_rate_by_category
from .descriptive import frame_descriptives, summary_statistics
from .missing import convert_sentinels_to_null, null_summary, sentinel_counts, zero_counts
from .outliers import count_outliers, detect_outliers, iqr_bounds
from .percentiles import approx_percentile, exact_percentiles, ntile_buckets, quartiles

__all__ = [
    "approx_percentile",
    "category_counts",
    "convert_sentinels_to_null",
    "count_outliers",
    "detect_outliers",
    "exact_percentiles",
    "frame_descriptives",
    "iqr_bounds",
    "ntile_buckets",
    "null_summary",
    "outcome_rate_by_category",
    "quartiles",
    "sentinel_counts",
    "summary_statistics",
    "zero_counts",
]
