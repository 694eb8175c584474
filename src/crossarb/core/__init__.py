"""Core module containing type definitions, errors and the run context."""

from crossarb.core.context import CancellationToken, SimulationContext
from crossarb.core.errors import (
    CrossArbError,
    OracleUnavailableError,
    SimulationCancelledError,
    SnapshotVersionError,
    TickParseError,
)
from crossarb.core.types import (
    ActionKind,
    AgentAction,
    AgentCommunication,
    MessageType,
    ModelState,
    Observation,
    Opportunity,
    OracleAction,
    PerformanceMetrics,
    ScoringOracle,
    SimulationState,
    StrategyKind,
    Tick,
)


__all__ = [
    "ActionKind",
    "AgentAction",
    "AgentCommunication",
    "CancellationToken",
    "CrossArbError",
    "MessageType",
    "ModelState",
    "Observation",
    "Opportunity",
    "OracleAction",
    "OracleUnavailableError",
    "PerformanceMetrics",
    "ScoringOracle",
    "SimulationCancelledError",
    "SimulationContext",
    "SimulationState",
    "SnapshotVersionError",
    "StrategyKind",
    "Tick",
    "TickParseError",
]
