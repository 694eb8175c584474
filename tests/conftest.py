"""
Pytest configuration and shared fixtures.

Provides reusable test fixtures for all test modules.
"""

import random

import pytest

from crossarb.config.settings import Settings
from crossarb.core.context import SimulationContext
from crossarb.core.types import ActionKind, AgentAction, AgentCommunication, MessageType, Tick
from crossarb.strategy.impact import MarketImpactModel
from tests.mocks.market import BASE_TS, make_action, make_tick


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture
def settings() -> Settings:
    """Deterministic settings isolated from the environment."""
    return Settings(_env_file=None, seed=1234, num_time_points=20, message_count=25)


@pytest.fixture
def rng() -> random.Random:
    """Seeded random generator."""
    return random.Random(42)


@pytest.fixture
def impact_model(rng: random.Random) -> MarketImpactModel:
    """Impact model with fixed factors for two exchanges."""
    return MarketImpactModel(rng, factors={"A": 0.002, "B": 0.001})


@pytest.fixture
def context(settings: Settings) -> SimulationContext:
    """Run context with fixed impact factors."""
    return SimulationContext.create(
        settings,
        seed=7,
        impact_factors={"A": 0.002, "B": 0.001},
    )


# =============================================================================
# Market Data Fixtures
# =============================================================================


@pytest.fixture
def crossed_ticks() -> list[Tick]:
    """Two exchanges where buying on A and selling on B earns 5."""
    return [
        make_tick("A", bid=99.0, ask=100.0),
        make_tick("B", bid=105.0, ask=106.0),
    ]


@pytest.fixture
def flat_ticks() -> list[Tick]:
    """Three exchanges with overlapping books over three timestamps."""
    ticks = []
    for step in range(3):
        ts = BASE_TS + step * 60000
        ticks.append(make_tick("A", bid=99.0, ask=101.0, timestamp=ts))
        ticks.append(make_tick("B", bid=99.5, ask=100.5, timestamp=ts))
        ticks.append(make_tick("C", bid=98.0, ask=102.0, timestamp=ts))
    return ticks


# =============================================================================
# Action Fixtures
# =============================================================================


@pytest.fixture
def sample_actions() -> list[AgentAction]:
    """Buy/sell pairs over three timestamps plus one hold."""
    return [
        make_action(ActionKind.BUY, BASE_TS, "A", volume=10.0, impact=0.2),
        make_action(
            ActionKind.SELL, BASE_TS, "B", volume=10.0, profit=50.0, impact=0.1, net_profit=47.0
        ),
        make_action(ActionKind.BUY, BASE_TS + 60000, "B", volume=5.0, impact=0.5),
        make_action(
            ActionKind.SELL,
            BASE_TS + 60000,
            "A",
            volume=5.0,
            profit=2.0,
            impact=0.5,
            net_profit=-3.0,
        ),
        make_action(ActionKind.HOLD, BASE_TS + 90000, "A", volume=0.0),
        make_action(ActionKind.BUY, BASE_TS + 120000, "A", volume=8.0, impact=0.25),
        make_action(
            ActionKind.SELL,
            BASE_TS + 120000,
            "B",
            volume=8.0,
            profit=16.0,
            impact=0.25,
            net_profit=12.0,
        ),
    ]


@pytest.fixture
def sample_communications() -> list[AgentCommunication]:
    """Three messages between two agents."""
    return [
        AgentCommunication(BASE_TS, "Agent_A", "Agent_B", MessageType.PRICE_UPDATE, "p", 10.0),
        AgentCommunication(BASE_TS, "Agent_A", "Agent_B", MessageType.VOLUME_INTENT, "v", 20.0),
        AgentCommunication(
            BASE_TS + 60000, "Agent_B", "Agent_A", MessageType.LIQUIDITY_INFO, "l", 5.0
        ),
    ]
