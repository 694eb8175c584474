"""
Synthetic market data generator.

Generates per-exchange price/liquidity ticks on a shared time grid.
Each exchange gets its own noise amplitude on top of a common slow
wave, which regularly opens cross-exchange spreads.
"""

import logging
import math
import random
from dataclasses import dataclass

from crossarb.config.constants import (
    BOOK_SPREAD_BASE_PCT,
    BOOK_SPREAD_JITTER_PCT,
    DEFAULT_BASE_PRICE,
    DEFAULT_NUM_EXCHANGES,
    DEFAULT_NUM_TIME_POINTS,
    DEFAULT_TICK_INTERVAL_MS,
    EXCHANGE_NAME_PREFIX,
    PRICE_NOISE_AMPLITUDE,
    PRICE_WAVE_AMPLITUDE,
    PRICE_WAVE_PERIOD,
    TICK_LIQUIDITY_RANGE,
    TICK_VOLUME_RANGE,
)
from crossarb.core.types import Tick
from crossarb.utils.time import get_timestamp_ms


logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SimulatedExchange:
    """Configuration for one generated exchange."""

    exchange_id: str
    noise_amplitude: float


class TickGenerator:
    """
    Generates sample ticks for demo runs.

    Features:
    - Shared sinusoidal drift across exchanges
    - Per-exchange noise growing with exchange index
    - Randomized bid-ask spread, volume and liquidity
    - bid <= price <= ask on every tick
    """

    def __init__(
        self,
        rng: random.Random,
        num_exchanges: int = DEFAULT_NUM_EXCHANGES,
        base_price: float = DEFAULT_BASE_PRICE,
        interval_ms: int = DEFAULT_TICK_INTERVAL_MS,
    ) -> None:
        """
        Initialize tick generator.

        Args:
            rng: Random generator (from the run context).
            num_exchanges: Number of exchanges to simulate.
            base_price: Reference price.
            interval_ms: Milliseconds between timestamps.
        """
        if num_exchanges < 1:
            raise ValueError(f"num_exchanges must be >= 1, got {num_exchanges}")

        self._rng = rng
        self._base_price = base_price
        self._interval_ms = interval_ms
        self._exchanges = [
            SimulatedExchange(
                exchange_id=f"{EXCHANGE_NAME_PREFIX}{i + 1}",
                noise_amplitude=PRICE_NOISE_AMPLITUDE * (i + 1),
            )
            for i in range(num_exchanges)
        ]

    def _price_at(self, exchange: SimulatedExchange, step: int) -> float:
        """Price for an exchange at a grid step."""
        noise = (self._rng.random() - 0.5) * exchange.noise_amplitude
        wave = math.sin(step / PRICE_WAVE_PERIOD) * PRICE_WAVE_AMPLITUDE
        return self._base_price + noise + wave

    def _create_tick(self, exchange: SimulatedExchange, step: int, timestamp: int) -> Tick:
        """Create one tick."""
        price = self._price_at(exchange, step)

        spread = price * BOOK_SPREAD_BASE_PCT + self._rng.random() * price * BOOK_SPREAD_JITTER_PCT
        half_spread = spread / 2

        return Tick(
            timestamp=timestamp,
            exchange_id=exchange.exchange_id,
            price=price,
            volume=self._rng.uniform(*TICK_VOLUME_RANGE),
            bid=price - half_spread,
            ask=price + half_spread,
            liquidity_level=self._rng.uniform(*TICK_LIQUIDITY_RANGE),
        )

    def generate(
        self,
        num_time_points: int = DEFAULT_NUM_TIME_POINTS,
        start_timestamp: int | None = None,
    ) -> list[Tick]:
        """
        Generate ticks for every exchange at every timestamp.

        Args:
            num_time_points: Number of timestamps.
            start_timestamp: First timestamp in ms (default: now).

        Returns:
            Ticks ordered by timestamp, then exchange.
        """
        start = get_timestamp_ms() if start_timestamp is None else start_timestamp
        ticks: list[Tick] = []

        for step in range(num_time_points):
            timestamp = start + step * self._interval_ms
            for exchange in self._exchanges:
                ticks.append(self._create_tick(exchange, step, timestamp))

        logger.debug(
            f"Generated {len(ticks)} ticks for {len(self._exchanges)} exchanges "
            f"over {num_time_points} timestamps"
        )
        return ticks

    @property
    def exchanges(self) -> list[str]:
        """Get generated exchange identifiers."""
        return [e.exchange_id for e in self._exchanges]


def generate_ticks(
    num_exchanges: int = DEFAULT_NUM_EXCHANGES,
    num_time_points: int = DEFAULT_NUM_TIME_POINTS,
    start_timestamp: int | None = None,
    *,
    rng: random.Random | None = None,
    base_price: float = DEFAULT_BASE_PRICE,
    interval_ms: int = DEFAULT_TICK_INTERVAL_MS,
) -> list[Tick]:
    """
    Generate sample ticks in one call.

    Args:
        num_exchanges: Number of exchanges.
        num_time_points: Number of timestamps.
        start_timestamp: First timestamp in ms (default: now).
        rng: Random generator (a fresh unseeded one if omitted).
        base_price: Reference price.
        interval_ms: Milliseconds between timestamps.

    Returns:
        Generated ticks.
    """
    generator = TickGenerator(
        rng or random.Random(),
        num_exchanges=num_exchanges,
        base_price=base_price,
        interval_ms=interval_ms,
    )
    return generator.generate(num_time_points, start_timestamp)
