"""Telemetry module for logging, stage metrics, and reporting."""

from crossarb.telemetry.logger import AsyncLogger, setup_logging
from crossarb.telemetry.metrics import LatencyStats, StageMetrics
from crossarb.telemetry.reporter import CLIReporter


__all__ = [
    "AsyncLogger",
    "CLIReporter",
    "LatencyStats",
    "StageMetrics",
    "setup_logging",
]
