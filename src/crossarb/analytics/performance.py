"""
Performance aggregation over agent actions.

Reduces a complete action set to summary metrics. Profit, volume,
success rate, Sharpe ratio and drawdown use realizing (sell) actions
only; impact cost counts every action. Recomputed wholesale each time.
"""

import logging
from collections.abc import Sequence

from crossarb.config.constants import CAPITAL_VOLUME_MULTIPLE
from crossarb.core.types import AgentAction, PerformanceMetrics
from crossarb.utils.math import mean, population_std, safe_divide


logger = logging.getLogger(__name__)


def sharpe_ratio(profits: Sequence[float]) -> float:
    """
    Mean over population standard deviation.

    Defined as 0 for no samples or zero dispersion.
    """
    if not profits:
        return 0.0
    return safe_divide(mean(profits), population_std(profits))


def max_drawdown(profits: Sequence[float]) -> float:
    """
    Largest peak-to-trough decline of cumulative profit.

    Walks ``profits`` in the given order; the running peak starts at 0.

    Example:
        >>> max_drawdown([5.0, -3.0, 2.0, -6.0])
        7.0
    """
    peak = 0.0
    cumulative = 0.0
    worst = 0.0

    for profit in profits:
        cumulative += profit
        if cumulative > peak:
            peak = cumulative
        drawdown = peak - cumulative
        if drawdown > worst:
            worst = drawdown

    return worst


def average_execution_time(actions: Sequence[AgentAction]) -> float:
    """
    Mean gap between consecutive distinct action timestamps.

    0 with fewer than two distinct timestamps.
    """
    timestamps = sorted({a.timestamp for a in actions})
    if len(timestamps) < 2:
        return 0.0
    return (timestamps[-1] - timestamps[0]) / (len(timestamps) - 1)


class PerformanceAggregator:
    """
    Computes PerformanceMetrics from an action set.

    Stateless apart from configuration: calling ``aggregate`` twice on
    the same actions yields identical metrics.
    """

    __slots__ = ("_capital_volume_multiple",)

    def __init__(self, capital_volume_multiple: float = CAPITAL_VOLUME_MULTIPLE) -> None:
        """
        Initialize aggregator.

        Args:
            capital_volume_multiple: Capital base as a multiple of
                average realizing volume.
        """
        self._capital_volume_multiple = capital_volume_multiple

    def aggregate(self, actions: Sequence[AgentAction]) -> PerformanceMetrics:
        """
        Aggregate metrics over actions.

        Realizing actions must be in time order for the drawdown to be
        meaningful; this is not validated.

        Args:
            actions: Complete action set.

        Returns:
            PerformanceMetrics (all zeros for an empty set).
        """
        if not actions:
            return PerformanceMetrics.empty()

        realizing = [a for a in actions if a.is_realizing]
        net_profits = [a.net_profit for a in realizing]

        total_profit = sum(a.profit for a in realizing)
        total_volume = sum(a.volume for a in realizing)
        total_impact_cost = sum(a.impact_cost for a in actions)
        net_profit = total_profit - total_impact_cost

        successful = sum(1 for p in net_profits if p > 0)
        success_rate = safe_divide(successful, len(realizing))

        capital_base = safe_divide(total_volume, len(realizing)) * self._capital_volume_multiple
        return_on_capital = safe_divide(net_profit, capital_base)

        metrics = PerformanceMetrics(
            total_profit=total_profit,
            total_volume=total_volume,
            total_impact_cost=total_impact_cost,
            net_profit=net_profit,
            success_rate=success_rate,
            avg_execution_time=average_execution_time(actions),
            sharpe_ratio=sharpe_ratio(net_profits),
            max_drawdown=max_drawdown(net_profits),
            return_on_capital=return_on_capital,
            num_opportunities=len(realizing),
        )

        logger.debug(
            f"Aggregated {len(actions)} actions: net={metrics.net_profit:.4f} "
            f"sharpe={metrics.sharpe_ratio:.3f} drawdown={metrics.max_drawdown:.4f}"
        )
        return metrics

    @property
    def capital_volume_multiple(self) -> float:
        """Get the capital base multiple."""
        return self._capital_volume_multiple
