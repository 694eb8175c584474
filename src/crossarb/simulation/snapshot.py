"""
Versioned SimulationState snapshots.

States are encoded with orjson, which serializes the frozen dataclasses
and string enums directly. Decoding rebuilds every record and refuses
snapshots written with a different schema version.
"""

import logging
from pathlib import Path
from typing import Any

import orjson

from crossarb.config.constants import SNAPSHOT_VERSION
from crossarb.core.errors import SnapshotVersionError
from crossarb.core.types import (
    ActionKind,
    AgentAction,
    AgentCommunication,
    MessageType,
    ModelState,
    Opportunity,
    PerformanceMetrics,
    SimulationState,
    StrategyKind,
    Tick,
)


logger = logging.getLogger(__name__)


def dumps(state: SimulationState) -> bytes:
    """Encode a state as JSON bytes."""
    return orjson.dumps(state)


def to_dict(state: SimulationState) -> dict[str, Any]:
    """Plain-dict form of a state (JSON types only)."""
    result: dict[str, Any] = orjson.loads(dumps(state))
    return result


def _action(data: dict[str, Any]) -> AgentAction:
    return AgentAction(**{**data, "kind": ActionKind(data["kind"])})


def _communication(data: dict[str, Any]) -> AgentCommunication:
    return AgentCommunication(**{**data, "message_type": MessageType(data["message_type"])})


def _model_state(data: dict[str, Any]) -> ModelState:
    return ModelState(**{**data, "strategy": StrategyKind(data["strategy"])})


def from_dict(data: dict[str, Any]) -> SimulationState:
    """
    Rebuild a state from its plain-dict form.

    Raises:
        SnapshotVersionError: If the version differs from SNAPSHOT_VERSION.
        ValueError: If the payload is structurally invalid.
    """
    version = data.get("version")
    if version != SNAPSHOT_VERSION:
        raise SnapshotVersionError(
            f"Unsupported snapshot version {version!r} (expected {SNAPSHOT_VERSION})",
            found=version,
        )

    try:
        metrics = data.get("metrics")
        return SimulationState(
            data_loaded=bool(data["data_loaded"]),
            ticks=tuple(Tick(**t) for t in data["ticks"]),
            opportunities=tuple(Opportunity(**o) for o in data["opportunities"]),
            actions=tuple(_action(a) for a in data["actions"]),
            communications=tuple(_communication(c) for c in data["communications"]),
            metrics=PerformanceMetrics(**metrics) if metrics is not None else None,
            model_state=_model_state(data["model_state"]),
            skipped_rows=int(data.get("skipped_rows", 0)),
            version=version,
        )
    except (KeyError, TypeError) as e:
        raise ValueError(f"Malformed snapshot: {e}") from e


def loads(payload: bytes | str) -> SimulationState:
    """Decode a state from JSON."""
    data = orjson.loads(payload)
    if not isinstance(data, dict):
        raise ValueError("Snapshot must be a JSON object")
    return from_dict(data)


def save(path: Path, state: SimulationState) -> None:
    """Write a snapshot file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(dumps(state))
    logger.info(f"Saved snapshot with {len(state.actions)} actions to {path}")


def load(path: Path) -> SimulationState:
    """Read a snapshot file."""
    state = loads(path.read_bytes())
    logger.info(f"Loaded snapshot with {len(state.actions)} actions from {path}")
    return state
