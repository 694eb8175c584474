"""Exceptions raised by the simulation pipeline."""


class CrossArbError(Exception):
    """Base error for the simulator."""


class OracleUnavailableError(CrossArbError):
    """The scoring oracle is not ready, or failed while scoring."""


class SimulationCancelledError(CrossArbError):
    """An oracle-backed run was cancelled between observations."""


class SnapshotVersionError(CrossArbError):
    """A snapshot was written with an incompatible schema version."""

    def __init__(self, message: str, found: object = None) -> None:
        super().__init__(message)
        self.found = found


class TickParseError(CrossArbError):
    """A row cannot be turned into a tick."""

    def __init__(self, message: str, row: dict[str, object] | None = None) -> None:
        super().__init__(message)
        self.row = row or {}
