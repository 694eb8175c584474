"""Execution module for impact-aware trade simulation."""

from crossarb.execution.simulator import ExecutionSimulator, optimal_volume


__all__ = [
    "ExecutionSimulator",
    "optimal_volume",
]
