"""
Quadratic market impact model.

Impact grows with the square of trade volume, so large single trades
are penalized superlinearly. Each exchange gets one impact factor for
the lifetime of the model; randomness is confined to that draw.
"""

import logging
import random
from collections.abc import Iterable, Mapping

from crossarb.config.constants import IMPACT_FACTOR_MAX, IMPACT_FACTOR_MIN


logger = logging.getLogger(__name__)


class MarketImpactModel:
    """
    Per-exchange quadratic impact: ``factor(exchange) * volume ** 2``.

    Factors are drawn lazily on first use (or eagerly via ``prime``)
    from ``factor_range`` and then persisted. One model belongs to one
    simulation run; never share it across runs.
    """

    __slots__ = ("_rng", "_factor_range", "_factors")

    def __init__(
        self,
        rng: random.Random,
        factor_range: tuple[float, float] = (IMPACT_FACTOR_MIN, IMPACT_FACTOR_MAX),
        factors: Mapping[str, float] | None = None,
    ) -> None:
        """
        Initialize impact model.

        Args:
            rng: Random generator used only for factor initialization.
            factor_range: Inclusive bounds for drawn factors.
            factors: Pre-assigned factors by exchange (skip the draw).
        """
        low, high = factor_range
        if low < 0 or high < low:
            raise ValueError(f"Invalid impact factor range: {factor_range}")

        self._rng = rng
        self._factor_range = (low, high)
        self._factors: dict[str, float] = {}

        for exchange, value in (factors or {}).items():
            if value < 0:
                raise ValueError(f"Impact factor for {exchange} must be >= 0, got {value}")
            self._factors[exchange] = value

    def factor(self, exchange_id: str) -> float:
        """
        Get the persisted impact factor for an exchange.

        Draws and stores it on first access.
        """
        value = self._factors.get(exchange_id)
        if value is None:
            value = self._rng.uniform(*self._factor_range)
            self._factors[exchange_id] = value
            logger.debug(f"Impact factor for {exchange_id}: {value:.6f}")
        return value

    def prime(self, exchanges: Iterable[str]) -> None:
        """Assign factors for all exchanges up front."""
        for exchange_id in exchanges:
            self.factor(exchange_id)

    def impact(self, exchange_id: str, volume: float) -> float:
        """
        Calculate impact for trading ``volume`` on an exchange.

        Args:
            exchange_id: Exchange identifier.
            volume: Trade volume (sign is ignored).

        Returns:
            Nonnegative per-unit impact coefficient.
        """
        return self.factor(exchange_id) * volume * volume

    @property
    def factors(self) -> dict[str, float]:
        """Get a copy of all assigned factors."""
        return dict(self._factors)

    @property
    def factor_range(self) -> tuple[float, float]:
        """Get factor bounds."""
        return self._factor_range
