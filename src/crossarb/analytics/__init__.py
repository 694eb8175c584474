"""Analytics module: performance metrics, chart data and analysis views."""

from crossarb.analytics.analysis import (
    agent_correlations,
    agent_summary,
    exchange_impact_summary,
    filter_time_window,
)
from crossarb.analytics.charts import CHARTS, build_chart
from crossarb.analytics.performance import PerformanceAggregator


__all__ = [
    "CHARTS",
    "PerformanceAggregator",
    "agent_correlations",
    "agent_summary",
    "build_chart",
    "exchange_impact_summary",
    "filter_time_window",
]
