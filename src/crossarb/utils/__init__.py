"""Utility functions for the arbitrage simulator."""

from crossarb.utils.math import (
    clamp,
    mean,
    moving_average,
    population_std,
    safe_divide,
)
from crossarb.utils.time import (
    LatencyTimer,
    format_duration_us,
    get_timestamp_ms,
    get_timestamp_us,
    ms_to_iso,
)


__all__ = [
    "LatencyTimer",
    "clamp",
    "format_duration_us",
    "get_timestamp_ms",
    "get_timestamp_us",
    "mean",
    "moving_average",
    "ms_to_iso",
    "population_std",
    "safe_divide",
]
