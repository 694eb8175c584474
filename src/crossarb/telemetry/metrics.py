"""
Metrics collection for pipeline runs.

Tracks per-stage latencies and event counters with bounded in-memory
storage. One collector is owned by each orchestrator.
"""

import time
from collections import deque
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from crossarb.utils.time import LatencyTimer


@dataclass
class LatencyStats:
    """Aggregated latency statistics."""

    min_us: int = 0
    max_us: int = 0
    avg_us: float = 0.0
    p50_us: int = 0
    p99_us: int = 0
    count: int = 0


class StageMetrics:
    """
    Collects stage latencies and counters.

    Features:
    - Rolling window latency tracking per stage
    - Counter-based event tracking
    - Timing context manager for pipeline stages
    """

    def __init__(self, latency_window_size: int = 1000) -> None:
        """
        Initialize metrics collector.

        Args:
            latency_window_size: Number of samples to keep per stage.
        """
        self._window_size = latency_window_size
        self._latencies: dict[str, deque[int]] = {}
        self._counters: dict[str, int] = {}
        self._start_time = time.time()

    def record_latency(self, stage: str, latency_us: int) -> None:
        """
        Record a latency measurement.

        Args:
            stage: Stage name (e.g., "detect", "execute").
            latency_us: Latency in microseconds.
        """
        if stage not in self._latencies:
            self._latencies[stage] = deque(maxlen=self._window_size)

        self._latencies[stage].append(latency_us)

    @contextmanager
    def time_stage(self, stage: str) -> Iterator[None]:
        """Record the wall time of the enclosed block under ``stage``."""
        timer = LatencyTimer()
        with timer:
            yield
        self.record_latency(stage, timer.latency_us)

    def increment_counter(self, name: str, value: int = 1) -> None:
        """
        Increment a counter.

        Args:
            name: Counter name.
            value: Amount to increment.
        """
        self._counters[name] = self._counters.get(name, 0) + value

    def get_counter(self, name: str) -> int:
        """Get counter value."""
        return self._counters.get(name, 0)

    def get_latency_stats(self, stage: str) -> LatencyStats:
        """
        Get latency statistics for a stage.

        Args:
            stage: Stage name.

        Returns:
            LatencyStats with aggregated values.
        """
        samples = self._latencies.get(stage)
        if not samples:
            return LatencyStats()

        sorted_samples = sorted(samples)
        n = len(sorted_samples)

        return LatencyStats(
            min_us=sorted_samples[0],
            max_us=sorted_samples[-1],
            avg_us=sum(sorted_samples) / n,
            p50_us=sorted_samples[n // 2],
            p99_us=sorted_samples[int(n * 0.99)] if n > 1 else sorted_samples[-1],
            count=n,
        )

    def get_all_latency_stats(self) -> dict[str, LatencyStats]:
        """Get latency stats for all stages."""
        return {stage: self.get_latency_stats(stage) for stage in self._latencies}

    @property
    def uptime_seconds(self) -> float:
        """Get uptime in seconds."""
        return time.time() - self._start_time

    def to_dict(self) -> dict[str, object]:
        """
        Export all metrics as a dict.

        Returns:
            Dict representation of all metrics.
        """
        return {
            "uptime_seconds": self.uptime_seconds,
            "counters": dict(self._counters),
            "latencies": {
                stage: {
                    "min": stats.min_us,
                    "max": stats.max_us,
                    "avg": stats.avg_us,
                    "p50": stats.p50_us,
                    "p99": stats.p99_us,
                    "count": stats.count,
                }
                for stage, stats in self.get_all_latency_stats().items()
            },
        }

    def reset(self) -> None:
        """Reset all metrics."""
        self._latencies.clear()
        self._counters.clear()
        self._start_time = time.time()
