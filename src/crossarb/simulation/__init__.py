"""Simulation module: pipeline orchestration and state snapshots."""

from crossarb.simulation.orchestrator import (
    ActionStrategy,
    DeterministicStrategy,
    OracleStrategy,
    SimulationOrchestrator,
    action_from_oracle,
)


__all__ = [
    "ActionStrategy",
    "DeterministicStrategy",
    "OracleStrategy",
    "SimulationOrchestrator",
    "action_from_oracle",
]
