"""
Post-run analysis views.

Per-exchange impact statistics, per-agent performance with message
counts, and pairwise agent activity correlation, optionally restricted
to a time window of the run.
"""

import math
import random
from collections.abc import Sequence
from dataclasses import dataclass

from crossarb.config.constants import RESILIENCE_RANGE
from crossarb.core.types import AgentAction, AgentCommunication
from crossarb.utils.math import safe_divide


@dataclass(slots=True, frozen=True)
class ExchangeImpactSummary:
    """Impact statistics of one exchange."""

    exchange: str
    total_volume: float
    total_impact: float
    avg_impact: float
    slippage_pct: float
    resilience: float


@dataclass(slots=True, frozen=True)
class AgentSummary:
    """Performance and message traffic of one agent."""

    agent: str
    total_profit: float
    total_volume: float
    success_rate: float
    sent_messages: int
    received_messages: int

    @property
    def total_messages(self) -> int:
        """Messages sent plus received."""
        return self.sent_messages + self.received_messages

    @property
    def efficiency(self) -> float:
        """Net profit per message (total profit when there are none)."""
        return self.total_profit / (self.total_messages or 1)


@dataclass(slots=True, frozen=True)
class AgentCorrelation:
    """Co-activity of two agents."""

    agent_a: str
    agent_b: str
    messages: int
    common_actions: int
    correlation: float


def filter_time_window(
    actions: Sequence[AgentAction],
    start_pct: float = 0.0,
    end_pct: float = 100.0,
) -> list[AgentAction]:
    """
    Restrict actions to a percentage window of the distinct timestamps.

    Args:
        actions: Action set.
        start_pct: Window start in percent of the run (0 to 100).
        end_pct: Window end in percent of the run (0 to 100).

    Returns:
        Actions whose timestamp falls inside the window, in input order.

    Raises:
        ValueError: If the bounds are outside [0, 100] or inverted.
    """
    if not 0.0 <= start_pct <= end_pct <= 100.0:
        raise ValueError(f"Invalid time window: {start_pct}..{end_pct}")

    timestamps = sorted({a.timestamp for a in actions})
    if not timestamps:
        return []

    last = len(timestamps) - 1
    low = min(math.floor(len(timestamps) * start_pct / 100), last)
    high = max(math.ceil(len(timestamps) * end_pct / 100) - 1, low)

    lower, upper = timestamps[low], timestamps[high]
    return [a for a in actions if lower <= a.timestamp <= upper]


def exchange_impact_summary(
    actions: Sequence[AgentAction],
    rng: random.Random,
) -> list[ExchangeImpactSummary]:
    """
    Impact statistics per exchange, in first-seen order.

    ``avg_impact`` is impact cost per unit of volume and
    ``slippage_pct`` the same figure in percent. ``resilience`` is an
    illustrative score drawn from ``rng``; it is not derived from data.
    """
    exchanges = list(dict.fromkeys(a.exchange for a in actions))
    summaries: list[ExchangeImpactSummary] = []

    for exchange in exchanges:
        selected = [a for a in actions if a.exchange == exchange]
        total_volume = sum(a.volume for a in selected)
        total_impact = sum(a.impact_cost for a in selected)
        avg_impact = safe_divide(total_impact, total_volume)
        summaries.append(
            ExchangeImpactSummary(
                exchange=exchange,
                total_volume=total_volume,
                total_impact=total_impact,
                avg_impact=avg_impact,
                slippage_pct=avg_impact * 100,
                resilience=rng.uniform(*RESILIENCE_RANGE),
            )
        )

    return summaries


def agent_summary(
    actions: Sequence[AgentAction],
    communications: Sequence[AgentCommunication],
) -> list[AgentSummary]:
    """Per-agent net profit, volume, success rate and message counts."""
    summaries: list[AgentSummary] = []

    for agent in dict.fromkeys(a.agent for a in actions):
        selected = [a for a in actions if a.agent == agent]
        successful = sum(1 for a in selected if a.net_profit > 0)
        summaries.append(
            AgentSummary(
                agent=agent,
                total_profit=sum(a.net_profit for a in selected),
                total_volume=sum(a.volume for a in selected),
                success_rate=safe_divide(successful, len(selected)),
                sent_messages=sum(1 for c in communications if c.sender == agent),
                received_messages=sum(1 for c in communications if c.receiver == agent),
            )
        )

    return summaries


def agent_correlations(
    actions: Sequence[AgentAction],
    communications: Sequence[AgentCommunication],
) -> list[AgentCorrelation]:
    """
    Pairwise co-activity of agents.

    ``correlation`` is the number of shared action timestamps over the
    geometric mean of each agent's distinct timestamp count.
    """
    timestamps: dict[str, set[int]] = {}
    for a in actions:
        timestamps.setdefault(a.agent, set()).add(a.timestamp)

    agents = list(timestamps)
    result: list[AgentCorrelation] = []

    for i, agent_a in enumerate(agents):
        for agent_b in agents[i + 1 :]:
            pair = {agent_a, agent_b}
            messages = sum(
                1 for c in communications if {c.sender, c.receiver} == pair
            )
            common = len(timestamps[agent_a] & timestamps[agent_b])
            result.append(
                AgentCorrelation(
                    agent_a=agent_a,
                    agent_b=agent_b,
                    messages=messages,
                    common_actions=common,
                    correlation=safe_divide(
                        common,
                        math.sqrt(len(timestamps[agent_a]) * len(timestamps[agent_b])),
                    ),
                )
            )

    return result
