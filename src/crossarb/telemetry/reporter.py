"""
CLI reporter for run summaries.

Renders a box-drawn panel with the run's counts, performance metrics
and stage latencies.
"""

import sys
from typing import TextIO

from crossarb.core.types import PerformanceMetrics, SimulationState
from crossarb.telemetry.metrics import StageMetrics
from crossarb.utils.time import format_duration_us


class CLIReporter:
    """
    Terminal summary of a SimulationState.

    Displays:
    - Strategy and data counts
    - Profit, impact and risk metrics
    - Per-stage latencies
    """

    # Box drawing characters
    BOX_TL = "\u2554"  # ╔
    BOX_TR = "\u2557"  # ╗
    BOX_BL = "\u255a"  # ╚
    BOX_BR = "\u255d"  # ╝
    BOX_H = "\u2550"  # ═
    BOX_V = "\u2551"  # ║
    BOX_LT = "\u2560"  # ╠
    BOX_RT = "\u2563"  # ╣
    THIN_V = "\u2502"  # │

    STAGES = ("generate", "actions", "communications", "metrics")

    def __init__(
        self,
        metrics: StageMetrics,
        width: int = 64,
        output: TextIO | None = None,
    ) -> None:
        """
        Initialize CLI reporter.

        Args:
            metrics: Stage metrics of the orchestrator.
            width: Panel width in characters.
            output: Output stream (default: stdout).
        """
        self._metrics = metrics
        self._width = width
        self._output = output or sys.stdout

    def _pad(self, text: str, width: int) -> str:
        """Pad text to width."""
        return text.ljust(width)[:width]

    def _line(self, content: str) -> str:
        """Create a line with borders."""
        return f"{self.BOX_V}{self._pad(content, self._width - 2)}{self.BOX_V}"

    def _divider(self) -> str:
        """Create a horizontal divider."""
        return f"{self.BOX_LT}{self.BOX_H * (self._width - 2)}{self.BOX_RT}"

    def _metric_rows(self, m: PerformanceMetrics) -> list[str]:
        sign = "+" if m.net_profit >= 0 else ""
        return [
            f"  Net profit: {sign}{m.net_profit:.4f}  {self.THIN_V}  Gross: {m.total_profit:.4f}",
            f"  Impact cost: {m.total_impact_cost:.4f}  {self.THIN_V}  Volume: {m.total_volume:.2f}",
            f"  Success: {m.success_rate:.1%}  {self.THIN_V}  Sharpe: {m.sharpe_ratio:.3f}",
            f"  Drawdown: {m.max_drawdown:.4f}  {self.THIN_V}  ROC: {m.return_on_capital:.4%}",
            f"  Avg gap: {m.avg_execution_time / 1000:.1f}s  {self.THIN_V}  Trades: {m.num_opportunities}",
        ]

    def render(self, state: SimulationState) -> str:
        """
        Render the summary panel.

        Returns:
            Formatted panel string.
        """
        model = state.model_state
        lines = [f"{self.BOX_TL}{self.BOX_H * (self._width - 2)}{self.BOX_TR}"]
        lines.append(self._line(f"  CROSS-EXCHANGE ARBITRAGE | {model.strategy.value.upper()}"))
        lines.append(self._divider())

        lines.append(
            self._line(
                f"  Ticks: {len(state.ticks)}  |  Opportunities: {len(state.opportunities)}"
                f"  |  Actions: {len(state.actions)}"
            )
        )
        lines.append(
            self._line(
                f"  Messages: {len(state.communications)}  |  Skipped rows: {state.skipped_rows}"
            )
        )
        lines.append(self._divider())

        if state.metrics is None:
            lines.append(self._line("  No run yet"))
        else:
            lines.extend(self._line(row) for row in self._metric_rows(state.metrics))

        lines.append(self._divider())
        lines.append(self._line("  LATENCY"))
        for stage in self.STAGES:
            stats = self._metrics.get_latency_stats(stage)
            if stats.count == 0:
                continue
            avg = format_duration_us(round(stats.avg_us))
            peak = format_duration_us(stats.max_us)
            lines.append(self._line(f"  {stage:<15}avg {avg:>10}  max {peak:>10}"))

        lines.append(f"{self.BOX_BL}{self.BOX_H * (self._width - 2)}{self.BOX_BR}")
        return "\n".join(lines)

    def display(self, state: SimulationState) -> None:
        """Write the panel to the output stream."""
        self._output.write(self.render(state))
        self._output.write("\n")
        self._output.flush()
