"""
Unit tests for telemetry components.

Tests stage metrics, the CLI reporter and queue-based logging.
"""

import io
import logging
from pathlib import Path

import pytest

from crossarb.core.types import PerformanceMetrics, SimulationState
from crossarb.telemetry.logger import AsyncLogger
from crossarb.telemetry.metrics import StageMetrics
from crossarb.telemetry.reporter import CLIReporter


class TestStageMetrics:
    """Tests for StageMetrics."""

    def test_latency_stats(self) -> None:
        """Test aggregation over recorded samples."""
        metrics = StageMetrics()
        for value in (10, 20, 30, 40):
            metrics.record_latency("actions", value)

        stats = metrics.get_latency_stats("actions")

        assert stats.count == 4
        assert stats.min_us == 10
        assert stats.max_us == 40
        assert stats.avg_us == 25.0
        assert stats.p50_us == 30

    def test_unknown_stage_empty(self) -> None:
        """Test a stage without samples reports zeros."""
        assert StageMetrics().get_latency_stats("missing").count == 0

    def test_window_bounded(self) -> None:
        """Test only the latest samples are kept."""
        metrics = StageMetrics(latency_window_size=3)
        for value in range(10):
            metrics.record_latency("metrics", value)

        stats = metrics.get_latency_stats("metrics")

        assert stats.count == 3
        assert stats.min_us == 7

    def test_time_stage_records_on_success(self) -> None:
        """Test the timing context records one sample."""
        metrics = StageMetrics()

        with metrics.time_stage("generate"):
            pass

        assert metrics.get_latency_stats("generate").count == 1

    def test_time_stage_skips_failures(self) -> None:
        """Test a failing block is not recorded."""
        metrics = StageMetrics()

        with pytest.raises(RuntimeError):
            with metrics.time_stage("actions"):
                raise RuntimeError("boom")

        assert metrics.get_latency_stats("actions").count == 0

    def test_counters_and_export(self) -> None:
        """Test counters and dict export."""
        metrics = StageMetrics()
        metrics.increment_counter("runs")
        metrics.increment_counter("runs", 2)
        metrics.record_latency("actions", 5)

        data = metrics.to_dict()

        assert metrics.get_counter("runs") == 3
        assert data["counters"] == {"runs": 3}
        assert data["latencies"]["actions"]["count"] == 1

    def test_reset(self) -> None:
        """Test reset clears everything."""
        metrics = StageMetrics()
        metrics.increment_counter("runs")
        metrics.record_latency("actions", 5)

        metrics.reset()

        assert metrics.get_counter("runs") == 0
        assert metrics.get_all_latency_stats() == {}


class TestCLIReporter:
    """Tests for CLIReporter."""

    def test_render_before_run(self) -> None:
        """Test the panel for a state without metrics."""
        panel = CLIReporter(StageMetrics()).render(SimulationState.initial())

        assert "DETERMINISTIC" in panel
        assert "No run yet" in panel

    def test_render_with_metrics(self) -> None:
        """Test metric rows and stage latencies are shown."""
        metrics = StageMetrics()
        metrics.record_latency("actions", 1500)
        state = SimulationState(
            data_loaded=True,
            metrics=PerformanceMetrics(net_profit=12.5, total_profit=20.0, num_opportunities=4),
        )

        panel = CLIReporter(metrics, width=72).render(state)
        lines = panel.splitlines()

        assert "Net profit: +12.5000" in panel
        assert "Trades: 4" in panel
        assert "actions" in panel
        assert "avg     1.50ms" in panel
        assert "generate" not in panel
        assert all(len(line) == 72 for line in lines)

    def test_display_writes_output(self) -> None:
        """Test display writes to the configured stream."""
        output = io.StringIO()

        CLIReporter(StageMetrics(), output=output).display(SimulationState.initial())

        assert output.getvalue().endswith("\n")
        assert "CROSS-EXCHANGE ARBITRAGE" in output.getvalue()


class TestAsyncLogger:
    """Tests for AsyncLogger."""

    def test_writes_to_file(self, tmp_path: Path) -> None:
        """Test records reach the file handler after stop."""
        log_file = tmp_path / "logs" / "run.log"

        with AsyncLogger("crossarb.test.file", level=logging.INFO, log_file=log_file) as async_logger:
            async_logger.logger.info("pipeline finished")

        assert "pipeline finished" in log_file.read_text()
        assert "crossarb.test.file" in log_file.read_text()

    def test_start_idempotent(self) -> None:
        """Test repeated start attaches one handler."""
        async_logger = AsyncLogger("crossarb.test.idempotent")

        async_logger.start()
        async_logger.start()
        try:
            assert async_logger.running
            assert len(async_logger.logger.handlers) == 1
        finally:
            async_logger.stop()

        assert not async_logger.running
        assert async_logger.logger.handlers == []
