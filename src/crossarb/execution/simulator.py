"""
Impact-aware execution simulation.

Turns each detected opportunity into a pair of agent actions: a buy
leg on the cheap exchange and a sell leg on the rich one, sized by the
closed-form optimum under quadratic impact.
"""

import logging
import random
from collections.abc import Iterable
from dataclasses import dataclass

from crossarb.config.constants import HOLD_OFFSET_MS, HOLD_PROBABILITY, SIZING_IMPACT_FACTOR
from crossarb.core.types import ActionKind, AgentAction, Opportunity, agent_for
from crossarb.strategy.impact import MarketImpactModel
from crossarb.utils.math import clamp


logger = logging.getLogger(__name__)


def optimal_volume(spread: float, sizing_impact_factor: float, volume_constraint: float) -> float:
    """
    Profit-maximizing trade size under quadratic impact.

    profit(q) = q * spread - k * q^2 has its maximum at q* = spread / 2k.
    The result is clamped to [0, volume_constraint].

    Example:
        >>> optimal_volume(0.5, 0.01, 100.0)
        25.0
        >>> optimal_volume(5.0, 0.01, 40.0)
        40.0
    """
    if sizing_impact_factor <= 0:
        raise ValueError(f"sizing_impact_factor must be > 0, got {sizing_impact_factor}")
    unconstrained = spread / (2 * sizing_impact_factor)
    return clamp(unconstrained, 0.0, max(volume_constraint, 0.0))


@dataclass
class ExecutionStats:
    """Statistics from simulated executions."""

    executions: int = 0
    holds: int = 0
    constrained: int = 0
    total_volume: float = 0.0
    total_net_profit: float = 0.0


class ExecutionSimulator:
    """
    Simulates executing opportunities against the impact model.

    Produces exactly two actions per opportunity plus, with probability
    ``hold_probability``, a hold action for the buying agent offset by
    ``HOLD_OFFSET_MS``.
    """

    def __init__(
        self,
        impact_model: MarketImpactModel,
        rng: random.Random,
        sizing_impact_factor: float = SIZING_IMPACT_FACTOR,
        hold_probability: float = HOLD_PROBABILITY,
        hold_offset_ms: int = HOLD_OFFSET_MS,
    ) -> None:
        """
        Initialize execution simulator.

        Args:
            impact_model: Per-run market impact model.
            rng: Random generator for hold actions.
            sizing_impact_factor: k in the optimal-volume closed form.
            hold_probability: Chance of emitting a hold action.
            hold_offset_ms: Delay of the hold action after the opportunity.
        """
        self._impact_model = impact_model
        self._rng = rng
        self._sizing_impact_factor = sizing_impact_factor
        self._hold_probability = hold_probability
        self._hold_offset_ms = hold_offset_ms
        self._stats = ExecutionStats()

    def optimal_volume(self, opportunity: Opportunity) -> float:
        """Calculate the clamped optimal volume for an opportunity."""
        return optimal_volume(
            opportunity.spread,
            self._sizing_impact_factor,
            opportunity.volume_constraint,
        )

    def simulate(self, opportunity: Opportunity) -> list[AgentAction]:
        """
        Simulate executing one opportunity.

        Args:
            opportunity: Opportunity with a positive spread.

        Returns:
            Buy leg, sell leg and an optional hold action.
        """
        volume = self.optimal_volume(opportunity)
        if volume < opportunity.spread / (2 * self._sizing_impact_factor):
            self._stats.constrained += 1

        impact_buy = self._impact_model.impact(opportunity.buy_exchange, volume)
        impact_sell = self._impact_model.impact(opportunity.sell_exchange, volume)

        gross_profit = opportunity.spread * volume
        net_profit = gross_profit - (impact_buy + impact_sell) * volume

        buy_agent = agent_for(opportunity.buy_exchange)
        actions = [
            AgentAction(
                timestamp=opportunity.timestamp,
                agent=buy_agent,
                exchange=opportunity.buy_exchange,
                kind=ActionKind.BUY,
                volume=volume,
                price=opportunity.buy_price,
                profit=0.0,
                impact=impact_buy,
                net_profit=0.0,
            ),
            AgentAction(
                timestamp=opportunity.timestamp,
                agent=agent_for(opportunity.sell_exchange),
                exchange=opportunity.sell_exchange,
                kind=ActionKind.SELL,
                volume=volume,
                price=opportunity.sell_price,
                profit=gross_profit,
                impact=impact_sell,
                net_profit=net_profit,
            ),
        ]

        if self._rng.random() < self._hold_probability:
            actions.append(
                AgentAction(
                    timestamp=opportunity.timestamp + self._hold_offset_ms,
                    agent=buy_agent,
                    exchange=opportunity.buy_exchange,
                    kind=ActionKind.HOLD,
                    volume=0.0,
                    price=opportunity.buy_price,
                )
            )
            self._stats.holds += 1

        self._stats.executions += 1
        self._stats.total_volume += volume
        self._stats.total_net_profit += net_profit

        return actions

    def simulate_all(self, opportunities: Iterable[Opportunity]) -> list[AgentAction]:
        """
        Simulate a sequence of opportunities.

        Actions keep the order of the input opportunities.
        """
        actions: list[AgentAction] = []
        for opportunity in opportunities:
            actions.extend(self.simulate(opportunity))

        logger.debug(
            f"Simulated {self._stats.executions} executions "
            f"({self._stats.constrained} liquidity-constrained, {self._stats.holds} holds)"
        )
        return actions

    @property
    def stats(self) -> ExecutionStats:
        """Get execution statistics."""
        return self._stats

    @property
    def sizing_impact_factor(self) -> float:
        """Get the sizing impact factor."""
        return self._sizing_impact_factor
