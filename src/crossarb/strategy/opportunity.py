"""
Cross-exchange opportunity detection.

Groups ticks by exact timestamp and compares every pair of exchanges
present at that instant in both directions. No cross-time comparison
is ever made.
"""

import logging
import random
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass

from crossarb.config.constants import DECAY_RATE_RANGE, LIQUIDITY_VOLUME_SCALE
from crossarb.core.types import Opportunity, Tick


logger = logging.getLogger(__name__)


# Type alias for opportunity callbacks
OpportunityCallback = Callable[[Opportunity], None]


@dataclass
class DetectionStats:
    """Statistics for opportunity detection."""

    timestamps_scanned: int = 0
    pairs_compared: int = 0
    opportunities_found: int = 0
    crossed_pairs: int = 0
    best_spread: float = 0.0

    def record_opportunity(self, spread: float) -> None:
        """Record an emitted opportunity."""
        self.opportunities_found += 1
        if spread > self.best_spread:
            self.best_spread = spread


def group_by_timestamp(ticks: Iterable[Tick]) -> dict[int, list[Tick]]:
    """
    Group ticks by exact timestamp.

    Groups keep first-seen timestamp order and input order within a group.
    """
    groups: dict[int, list[Tick]] = {}
    for tick in ticks:
        groups.setdefault(tick.timestamp, []).append(tick)
    return groups


class OpportunityDetector:
    """
    Detects directional spread opportunities between exchanges.

    For each pair (A, B) at a timestamp, emits one opportunity per
    direction whose spread (sell.bid - buy.ask) is strictly positive.
    If an inconsistent book makes both directions positive, both are
    emitted; callers must tolerate several opportunities per pair.
    """

    def __init__(
        self,
        rng: random.Random,
        liquidity_volume_scale: float = LIQUIDITY_VOLUME_SCALE,
        decay_rate_range: tuple[float, float] = DECAY_RATE_RANGE,
    ) -> None:
        """
        Initialize opportunity detector.

        Args:
            rng: Random generator for per-opportunity decay rates.
            liquidity_volume_scale: Maps liquidity_level onto volume capacity.
            decay_rate_range: Bounds for the decay-rate draw.
        """
        self._rng = rng
        self._volume_scale = liquidity_volume_scale
        self._decay_rate_range = decay_rate_range
        self._callbacks: list[OpportunityCallback] = []
        self._stats = DetectionStats()

    def register_callback(self, callback: OpportunityCallback) -> None:
        """Register callback for opportunity notifications."""
        self._callbacks.append(callback)

    def unregister_callback(self, callback: OpportunityCallback) -> None:
        """Unregister a callback."""
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    def _notify_callbacks(self, opportunity: Opportunity) -> None:
        """Notify all registered callbacks."""
        for callback in self._callbacks:
            try:
                callback(opportunity)
            except Exception as e:
                logger.error(f"Callback error: {e}")

    def _build(self, timestamp: int, buy: Tick, sell: Tick) -> Opportunity | None:
        """Build the buy-on-``buy``, sell-on-``sell`` opportunity if profitable."""
        spread = sell.bid - buy.ask
        if not spread > 0:
            return None

        volume_constraint = (
            min(buy.liquidity_level, sell.liquidity_level) * self._volume_scale
        )

        return Opportunity(
            timestamp=timestamp,
            buy_exchange=buy.exchange_id,
            sell_exchange=sell.exchange_id,
            buy_price=buy.ask,
            sell_price=sell.bid,
            spread=spread,
            volume_constraint=volume_constraint,
            decay_rate=self._rng.uniform(*self._decay_rate_range),
        )

    def scan_timestamp(self, timestamp: int, ticks: Sequence[Tick]) -> list[Opportunity]:
        """
        Compare every pair of ticks sharing one timestamp.

        Args:
            timestamp: The shared timestamp.
            ticks: Ticks at that timestamp.

        Returns:
            Opportunities found at this timestamp.
        """
        self._stats.timestamps_scanned += 1
        opportunities: list[Opportunity] = []

        for i in range(len(ticks)):
            for j in range(i + 1, len(ticks)):
                a, b = ticks[i], ticks[j]
                if a.exchange_id == b.exchange_id:
                    continue

                self._stats.pairs_compared += 1
                forward = self._build(timestamp, a, b)
                reverse = self._build(timestamp, b, a)

                if forward and reverse:
                    self._stats.crossed_pairs += 1
                    logger.debug(
                        f"Both directions profitable for {a.exchange_id}/{b.exchange_id} "
                        f"at {timestamp}"
                    )

                for opportunity in (forward, reverse):
                    if opportunity is None:
                        continue
                    opportunities.append(opportunity)
                    self._stats.record_opportunity(opportunity.spread)
                    self._notify_callbacks(opportunity)

        return opportunities

    def detect(self, ticks: Iterable[Tick]) -> list[Opportunity]:
        """
        Scan all ticks for cross-exchange opportunities.

        Output is grouped by timestamp in first-seen order, which is
        not necessarily chronological for unsorted input.

        Args:
            ticks: Ticks in any order.

        Returns:
            Detected opportunities (empty for empty input).
        """
        opportunities: list[Opportunity] = []
        for timestamp, group in group_by_timestamp(ticks).items():
            if len(group) < 2:
                continue
            opportunities.extend(self.scan_timestamp(timestamp, group))

        logger.debug(f"Detected {len(opportunities)} opportunities")
        return opportunities

    @property
    def stats(self) -> DetectionStats:
        """Get detection statistics."""
        return self._stats

    @property
    def liquidity_volume_scale(self) -> float:
        """Get the liquidity-to-volume scale."""
        return self._volume_scale

    def reset_stats(self) -> None:
        """Reset detection statistics."""
        self._stats = DetectionStats()
