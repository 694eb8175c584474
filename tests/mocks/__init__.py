"""Mock implementations for testing."""

from tests.mocks.market import BASE_TS, make_action, make_tick
from tests.mocks.oracle import MockOracle


__all__ = [
    "BASE_TS",
    "MockOracle",
    "make_action",
    "make_tick",
]
