"""
Type definitions for the arbitrage simulator.

This module contains all dataclasses, enums and Protocol definitions
used throughout the pipeline. Records are frozen with slots: every
stage produces new values and never mutates what it was given.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol, runtime_checkable

from crossarb.config.constants import AGENT_PREFIX, SNAPSHOT_VERSION


# =============================================================================
# Enums
# =============================================================================


class ActionKind(str, Enum):
    """Agent decision kind."""

    BUY = "buy"
    SELL = "sell"
    HOLD = "hold"

    @property
    def is_realizing(self) -> bool:
        """Profit is realized on the sell leg."""
        return self is ActionKind.SELL


class MessageType(str, Enum):
    """Synthetic inter-agent message type."""

    PRICE_UPDATE = "price_update"
    VOLUME_INTENT = "volume_intent"
    EXECUTION_REPORT = "execution_report"
    LIQUIDITY_INFO = "liquidity_info"


class StrategyKind(str, Enum):
    """Action-generation strategy used for a run."""

    DETERMINISTIC = "deterministic"
    ORACLE = "oracle"


def agent_for(exchange_id: str) -> str:
    """Agent identifier bound to an exchange."""
    return f"{AGENT_PREFIX}{exchange_id}"


# =============================================================================
# Market Data Types
# =============================================================================


@dataclass(slots=True, frozen=True)
class Tick:
    """
    One exchange's market snapshot at one instant.

    bid <= price <= ask is expected but not enforced; downstream
    stages tolerate crossed or inverted books.
    """

    timestamp: int
    exchange_id: str
    price: float
    volume: float
    bid: float
    ask: float
    liquidity_level: float

    @property
    def spread(self) -> float:
        """Absolute bid-ask spread."""
        return abs(self.ask - self.bid)


@dataclass(slots=True, frozen=True)
class Opportunity:
    """
    Detected cross-exchange mispricing at a timestamp.

    Buy at the ask of ``buy_exchange``, sell at the bid of
    ``sell_exchange``. The spread is strictly positive.
    """

    timestamp: int
    buy_exchange: str
    sell_exchange: str
    buy_price: float
    sell_price: float
    spread: float
    volume_constraint: float
    decay_rate: float

    @property
    def profit_potential(self) -> float:
        """Gross profit if the full volume constraint were traded."""
        return self.spread * self.volume_constraint


# =============================================================================
# Agent Types
# =============================================================================


@dataclass(slots=True, frozen=True)
class AgentAction:
    """One agent's trade or hold decision."""

    timestamp: int
    agent: str
    exchange: str
    kind: ActionKind
    volume: float
    price: float
    profit: float = 0.0
    impact: float = 0.0
    net_profit: float = 0.0

    @property
    def impact_cost(self) -> float:
        """Total impact cost of this action."""
        return self.impact * self.volume

    @property
    def is_realizing(self) -> bool:
        """Check if this action realizes profit."""
        return self.kind.is_realizing


@dataclass(slots=True, frozen=True)
class AgentCommunication:
    """
    Synthetic inter-agent message.

    Decorative output for visualizations. ``authoritative`` is always
    False: these messages never drive or describe actual coordination.
    """

    timestamp: int
    sender: str
    receiver: str
    message_type: MessageType
    content: str
    latency_ms: float
    authoritative: bool = False


# =============================================================================
# Aggregate Types
# =============================================================================


@dataclass(slots=True, frozen=True)
class PerformanceMetrics:
    """Aggregate metrics over a completed action set."""

    total_profit: float = 0.0
    total_volume: float = 0.0
    total_impact_cost: float = 0.0
    net_profit: float = 0.0
    success_rate: float = 0.0
    avg_execution_time: float = 0.0
    sharpe_ratio: float = 0.0
    max_drawdown: float = 0.0
    return_on_capital: float = 0.0
    num_opportunities: int = 0

    @classmethod
    def empty(cls) -> "PerformanceMetrics":
        """All-zero metrics for an empty action set."""
        return cls()


@dataclass(slots=True, frozen=True)
class ModelState:
    """Readiness and nominal training figures reported with a run."""

    is_model_ready: bool = False
    is_training: bool = False
    train_progress: float = 0.0
    epochs_completed: int = 0
    total_epochs: int = 100
    current_reward: float = 0.0
    cumulative_reward: float = 0.0
    learning_rate: float = 0.001
    timestamp: int = 0
    strategy: StrategyKind = StrategyKind.DETERMINISTIC


@dataclass(slots=True, frozen=True)
class SimulationState:
    """
    Complete snapshot of one pipeline run.

    Replaced wholesale after every successful run; readers never see
    a partially built state.
    """

    data_loaded: bool = False
    ticks: tuple[Tick, ...] = ()
    opportunities: tuple[Opportunity, ...] = ()
    actions: tuple[AgentAction, ...] = ()
    communications: tuple[AgentCommunication, ...] = ()
    metrics: PerformanceMetrics | None = None
    model_state: ModelState = field(default_factory=ModelState)
    skipped_rows: int = 0
    version: int = SNAPSHOT_VERSION

    @classmethod
    def initial(cls) -> "SimulationState":
        """State before any run."""
        return cls()


# =============================================================================
# Oracle Types
# =============================================================================


@dataclass(slots=True, frozen=True)
class Observation:
    """Oracle input: one tick reduced to the features an agent sees."""

    timestamp: int
    price: float
    volume: float
    liquidity: float
    spread: float
    exchange_id: str

    @classmethod
    def from_tick(cls, tick: Tick) -> "Observation":
        """Build an observation from a tick."""
        return cls(
            timestamp=tick.timestamp,
            price=tick.price,
            volume=tick.volume,
            liquidity=tick.liquidity_level,
            spread=tick.spread,
            exchange_id=tick.exchange_id,
        )


@dataclass(slots=True, frozen=True)
class OracleAction:
    """Oracle output for the latest observation of a history."""

    kind: ActionKind
    volume: float
    price: float
    timestamp: int
    confidence: float
    exchange_id: str


# =============================================================================
# Protocols (Interfaces)
# =============================================================================


@runtime_checkable
class ScoringOracle(Protocol):
    """
    External action-scoring capability.

    Two states: not ready (model still loading) and ready. ``score``
    returns an action for the last observation of ``history`` and may
    return HOLD for any input.
    """

    @property
    def is_ready(self) -> bool:
        """Check if the oracle can score."""
        ...

    async def score(self, history: Sequence[Observation]) -> OracleAction:
        """Score an ordered observation history."""
        ...
