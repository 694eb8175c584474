"""
Chart data preparation.

Pure functions turning pipeline output into JSON-ready rows for the
dashboard charts. Rendering happens elsewhere.
"""

from collections.abc import Sequence
from typing import Any

from crossarb.config.constants import (
    BASELINE_PROFIT_SHARE,
    REWARD_SMOOTHING_WINDOW,
    STATIC_SPLIT_IMPACT_SHARE,
    STATIC_SPLIT_PROFIT_SHARE,
)
from crossarb.core.types import ActionKind, AgentAction, AgentCommunication, Opportunity, Tick
from crossarb.utils.math import moving_average, safe_divide
from crossarb.utils.time import ms_to_iso


Row = dict[str, Any]


def _unique(values: Sequence[Any]) -> list[Any]:
    """Distinct values in first-seen order."""
    return list(dict.fromkeys(values))


def arbitrage_decay(opportunities: Sequence[Opportunity]) -> list[Row]:
    """Spread, profit potential and decay rate per opportunity."""
    return [
        {
            "time": ms_to_iso(o.timestamp),
            "spread": o.spread,
            "profitPotential": o.profit_potential,
            "decayRate": o.decay_rate,
            "buyExchange": o.buy_exchange,
            "sellExchange": o.sell_exchange,
        }
        for o in opportunities
    ]


def impact_curve(actions: Sequence[AgentAction]) -> list[Row]:
    """Impact against volume for every action that traded."""
    return [
        {
            "volume": a.volume,
            "impact": a.impact,
            "netProfit": a.net_profit,
            "exchange": a.exchange,
            "action": a.kind.value,
        }
        for a in actions
        if a.volume > 0
    ]


def communication_heatmap(communications: Sequence[AgentCommunication]) -> Row:
    """
    Message counts between every ordered pair of distinct agents.

    Returns:
        ``{"agents": [...], "data": [{"from", "to", "count"}, ...]}``
    """
    agents = sorted({c.sender for c in communications} | {c.receiver for c in communications})
    counts: dict[tuple[str, str], int] = {}
    for c in communications:
        key = (c.sender, c.receiver)
        counts[key] = counts.get(key, 0) + 1

    data = [
        {"from": sender, "to": receiver, "count": counts.get((sender, receiver), 0)}
        for sender in agents
        for receiver in agents
        if sender != receiver
    ]
    return {"agents": agents, "data": data}


def trade_points(actions: Sequence[AgentAction]) -> list[Row]:
    """Volume/profit scatter points for buy and sell actions."""
    exchanges = sorted({a.exchange for a in actions})
    index = {exchange: i + 1 for i, exchange in enumerate(exchanges)}
    return [
        {
            "x": a.volume,
            "y": a.net_profit,
            "z": index[a.exchange],
            "size": a.volume * 2,
            "exchange": a.exchange,
            "action": a.kind.value,
        }
        for a in actions
        if a.kind is not ActionKind.HOLD
    ]


def cumulative_profit(actions: Sequence[AgentAction]) -> list[Row]:
    """
    Cumulative net profit of sell actions in time order.

    Two reference curves are included: a baseline capturing a fixed
    share of gross profit with no impact modelling, and a static split
    that pays half the modelled impact.
    """
    cumulative = 0.0
    baseline = 0.0
    static_split = 0.0
    rows: list[Row] = []

    for a in sorted(actions, key=lambda x: x.timestamp):
        if not a.is_realizing:
            continue
        cumulative += a.net_profit
        baseline += a.profit * BASELINE_PROFIT_SHARE
        static_split += (
            a.profit * STATIC_SPLIT_PROFIT_SHARE - a.impact_cost * STATIC_SPLIT_IMPACT_SHARE
        )
        rows.append(
            {
                "time": ms_to_iso(a.timestamp),
                "profit": cumulative,
                "baseline": baseline,
                "staticSplit": static_split,
                "exchange": a.exchange,
            }
        )

    return rows


def action_trace(actions: Sequence[AgentAction]) -> list[Row]:
    """
    One row per agent per timestamp.

    Agents without an action at a timestamp get a zero-volume hold row.
    """
    agents = _unique([a.agent for a in actions])
    by_key: dict[tuple[int, str], list[AgentAction]] = {}
    for a in actions:
        by_key.setdefault((a.timestamp, a.agent), []).append(a)

    rows: list[Row] = []
    for timestamp in sorted({a.timestamp for a in actions}):
        time = ms_to_iso(timestamp)
        for agent in agents:
            found = by_key.get((timestamp, agent))
            if not found:
                rows.append(
                    {"time": time, "agent": agent, "action": "hold", "volume": 0.0, "profit": 0.0}
                )
                continue
            for a in found:
                rows.append(
                    {
                        "time": time,
                        "agent": agent,
                        "action": a.kind.value,
                        "volume": a.volume,
                        "profit": a.net_profit,
                    }
                )

    return rows


def _per_exchange(ticks: Sequence[Tick], attribute: str) -> tuple[list[str], list[Row]]:
    exchanges = _unique([t.exchange_id for t in ticks])
    by_time: dict[int, Row] = {}
    for t in sorted(ticks, key=lambda x: x.timestamp):
        row = by_time.setdefault(t.timestamp, {"time": ms_to_iso(t.timestamp)})
        row.setdefault(t.exchange_id, getattr(t, attribute))
    return exchanges, list(by_time.values())


def liquidity_trend(ticks: Sequence[Tick]) -> list[Row]:
    """Liquidity level of every exchange per timestamp."""
    _, rows = _per_exchange(ticks, "liquidity_level")
    return rows


def price_spread(ticks: Sequence[Tick]) -> list[Row]:
    """
    Price of every exchange per timestamp, plus the absolute price
    difference of each exchange pair under ``"<A>-<B>"``.
    """
    exchanges, rows = _per_exchange(ticks, "price")
    for row in rows:
        for i in range(len(exchanges)):
            for j in range(i + 1, len(exchanges)):
                a, b = exchanges[i], exchanges[j]
                if a in row and b in row:
                    row[f"{a}-{b}"] = abs(row[a] - row[b])
    return rows


def volume_histogram(actions: Sequence[AgentAction]) -> list[Row]:
    """Traded volume and net profit per agent."""
    rows: list[Row] = []
    for agent in _unique([a.agent for a in actions]):
        traded = [a for a in actions if a.agent == agent and a.kind is not ActionKind.HOLD]
        total_volume = sum(a.volume for a in traded)
        rows.append(
            {
                "agent": agent,
                "totalVolume": total_volume,
                "totalProfit": sum(a.net_profit for a in traded),
                "avgVolumePerTrade": safe_divide(total_volume, len(traded)),
            }
        )
    return rows


def reward_convergence(
    actions: Sequence[AgentAction],
    window: int = REWARD_SMOOTHING_WINDOW,
) -> list[Row]:
    """
    Average reward per agent for each timestamp ("episode").

    ``movingAverage`` is the trailing mean of ``avgReward`` over
    ``window`` episodes.
    """
    episodes: dict[int, list[AgentAction]] = {}
    for a in actions:
        episodes.setdefault(a.timestamp, []).append(a)

    rows: list[Row] = []
    for i, timestamp in enumerate(sorted(episodes)):
        episode = episodes[timestamp]
        total_reward = sum(a.net_profit for a in episode)
        agents = {a.agent for a in episode}
        rows.append(
            {
                "episode": i + 1,
                "timestamp": ms_to_iso(timestamp),
                "totalReward": total_reward,
                "avgReward": safe_divide(total_reward, len(agents)),
            }
        )

    smoothed = moving_average([r["avgReward"] for r in rows], window)
    for row, value in zip(rows, smoothed, strict=True):
        row["movingAverage"] = value

    return rows


CHARTS = {
    "decay": "opportunities",
    "impact": "actions",
    "heatmap": "communications",
    "trades": "actions",
    "profit": "actions",
    "trace": "actions",
    "liquidity": "ticks",
    "prices": "ticks",
    "volume": "actions",
    "rewards": "actions",
}

_BUILDERS = {
    "decay": arbitrage_decay,
    "impact": impact_curve,
    "heatmap": communication_heatmap,
    "trades": trade_points,
    "profit": cumulative_profit,
    "trace": action_trace,
    "liquidity": liquidity_trend,
    "prices": price_spread,
    "volume": volume_histogram,
    "rewards": reward_convergence,
}


def build_chart(name: str, source: Sequence[Any]) -> Any:
    """
    Build chart data by name.

    Args:
        name: One of the keys of ``CHARTS``.
        source: The state field named by ``CHARTS[name]``.

    Raises:
        KeyError: If the chart name is unknown.
    """
    return _BUILDERS[name](source)
