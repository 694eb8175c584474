"""
Unit tests for PerformanceAggregator and metric helpers.

Tests sell-only aggregation, risk metrics, and degenerate inputs.
"""

import pytest

from crossarb.analytics.performance import (
    PerformanceAggregator,
    average_execution_time,
    max_drawdown,
    sharpe_ratio,
)
from crossarb.core.types import ActionKind, AgentAction, PerformanceMetrics
from tests.mocks import BASE_TS, make_action


class TestMetricHelpers:
    """Tests for Sharpe, drawdown and execution-time helpers."""

    def test_sharpe_empty(self) -> None:
        """Test no samples gives zero."""
        assert sharpe_ratio([]) == 0.0

    def test_sharpe_zero_dispersion(self) -> None:
        """Test identical samples give zero instead of infinity."""
        assert sharpe_ratio([2.0, 2.0, 2.0]) == 0.0

    def test_sharpe_population_std(self) -> None:
        """Test mean over population standard deviation."""
        # mean 2, population std 1
        assert sharpe_ratio([1.0, 3.0]) == pytest.approx(2.0)

    def test_drawdown_example(self) -> None:
        """Test peak-to-trough on a known sequence."""
        assert max_drawdown([5.0, -3.0, 2.0, -6.0]) == pytest.approx(7.0)

    def test_drawdown_from_zero_peak(self) -> None:
        """Test an initial loss counts from a zero peak."""
        assert max_drawdown([-4.0, 1.0]) == pytest.approx(4.0)

    def test_drawdown_monotonic_gain(self) -> None:
        """Test steadily rising profit has no drawdown."""
        assert max_drawdown([1.0, 2.0, 3.0]) == 0.0

    def test_execution_time_single_timestamp(self) -> None:
        """Test fewer than two timestamps gives zero."""
        actions = [make_action(ActionKind.BUY), make_action(ActionKind.SELL)]

        assert average_execution_time(actions) == 0.0

    def test_execution_time_mean_gap(self) -> None:
        """Test mean gap between distinct sorted timestamps."""
        actions = [
            make_action(ActionKind.SELL, BASE_TS + 300),
            make_action(ActionKind.SELL, BASE_TS),
            make_action(ActionKind.BUY, BASE_TS),
            make_action(ActionKind.SELL, BASE_TS + 100),
        ]

        assert average_execution_time(actions) == pytest.approx(150.0)


class TestPerformanceAggregator:
    """Tests for PerformanceAggregator."""

    @pytest.fixture
    def aggregator(self) -> PerformanceAggregator:
        """Create aggregator."""
        return PerformanceAggregator()

    def test_empty_actions(self, aggregator: PerformanceAggregator) -> None:
        """Test empty input gives all-zero metrics."""
        assert aggregator.aggregate([]) == PerformanceMetrics.empty()

    def test_no_realizing_actions(self, aggregator: PerformanceAggregator) -> None:
        """Test buys and holds only: zeros without division errors."""
        actions = [
            make_action(ActionKind.BUY, volume=2.0, impact=0.5),
            make_action(ActionKind.HOLD, BASE_TS + 1, volume=0.0),
        ]

        metrics = aggregator.aggregate(actions)

        assert metrics.total_profit == 0.0
        assert metrics.total_volume == 0.0
        assert metrics.success_rate == 0.0
        assert metrics.sharpe_ratio == 0.0
        assert metrics.max_drawdown == 0.0
        assert metrics.return_on_capital == 0.0
        assert metrics.num_opportunities == 0
        assert metrics.total_impact_cost == pytest.approx(1.0)
        assert metrics.net_profit == pytest.approx(-1.0)

    def test_sample_metrics(
        self,
        aggregator: PerformanceAggregator,
        sample_actions: list[AgentAction],
    ) -> None:
        """Test every metric on the shared sample."""
        metrics = aggregator.aggregate(sample_actions)

        assert metrics.total_profit == pytest.approx(68.0)
        assert metrics.total_volume == pytest.approx(23.0)
        assert metrics.total_impact_cost == pytest.approx(12.0)
        assert metrics.net_profit == pytest.approx(56.0)
        assert metrics.success_rate == pytest.approx(2 / 3)
        assert metrics.avg_execution_time == pytest.approx(40000.0)
        assert metrics.max_drawdown == pytest.approx(3.0)
        assert metrics.num_opportunities == 3
        assert metrics.return_on_capital == pytest.approx(56.0 / (23.0 / 3 * 100))
        assert metrics.sharpe_ratio > 0

    def test_net_profit_matches_sell_net_profits(
        self,
        aggregator: PerformanceAggregator,
        sample_actions: list[AgentAction],
    ) -> None:
        """Test aggregate net profit equals the sum of sell-leg net profits."""
        metrics = aggregator.aggregate(sample_actions)
        sells = [a for a in sample_actions if a.kind is ActionKind.SELL]

        assert metrics.net_profit == pytest.approx(sum(a.net_profit for a in sells))

    def test_idempotent(
        self,
        aggregator: PerformanceAggregator,
        sample_actions: list[AgentAction],
    ) -> None:
        """Test aggregating twice yields identical metrics."""
        assert aggregator.aggregate(sample_actions) == aggregator.aggregate(sample_actions)

    def test_capital_multiple(self, sample_actions: list[AgentAction]) -> None:
        """Test the capital base multiple scales return on capital."""
        base = PerformanceAggregator(100.0).aggregate(sample_actions)
        doubled = PerformanceAggregator(200.0).aggregate(sample_actions)

        assert doubled.return_on_capital == pytest.approx(base.return_on_capital / 2)
