"""
Scoring oracle adapters.

The orchestrator only depends on the ``ScoringOracle`` protocol. This
module provides the adapters around it: a lazy loader with an explicit
not-ready state, a confidence-to-action mapper for classifier-style
models, and a deterministic oracle usable as a test double.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence

from crossarb.config.constants import (
    LIQUIDITY_VOLUME_SCALE,
    ORACLE_BUY_CONFIDENCE,
    ORACLE_LIQUIDITY_SHARE,
    ORACLE_SELL_CONFIDENCE,
    ORACLE_VOLUME_CAP_SHARE,
    SIZING_IMPACT_FACTOR,
)
from crossarb.core.errors import OracleUnavailableError
from crossarb.core.types import ActionKind, Observation, OracleAction, ScoringOracle
from crossarb.execution.simulator import optimal_volume
from crossarb.utils.math import clamp, mean


logger = logging.getLogger(__name__)


# Type alias for a model that maps a history to a confidence score
Scorer = Callable[[Sequence[Observation]], Awaitable[float]]

# Type alias for a one-shot oracle factory (model download, warmup, ...)
OracleLoader = Callable[[], Awaitable[ScoringOracle]]


def _latest(history: Sequence[Observation]) -> Observation:
    if not history:
        raise ValueError("Cannot score an empty observation history")
    return history[-1]


class ConfidenceOracle:
    """
    Maps a model confidence score onto an action.

    Confidence above ``buy_threshold`` buys, above ``sell_threshold``
    sells, anything else holds. Volume is a confidence-weighted share
    of liquidity, capped at a share of the observed tick volume.
    """

    def __init__(
        self,
        scorer: Scorer,
        buy_threshold: float = ORACLE_BUY_CONFIDENCE,
        sell_threshold: float = ORACLE_SELL_CONFIDENCE,
        liquidity_share: float = ORACLE_LIQUIDITY_SHARE,
        volume_cap_share: float = ORACLE_VOLUME_CAP_SHARE,
    ) -> None:
        """
        Initialize confidence oracle.

        Args:
            scorer: Async callable returning a confidence in [0, 1].
            buy_threshold: Confidence above which the agent buys.
            sell_threshold: Confidence above which the agent sells.
            liquidity_share: Share of liquidity traded at full confidence.
            volume_cap_share: Cap as a share of the observed volume.
        """
        if sell_threshold > buy_threshold:
            raise ValueError("sell_threshold must not exceed buy_threshold")

        self._scorer = scorer
        self._buy_threshold = buy_threshold
        self._sell_threshold = sell_threshold
        self._liquidity_share = liquidity_share
        self._volume_cap_share = volume_cap_share

    @property
    def is_ready(self) -> bool:
        """A wrapped scorer is always ready."""
        return True

    def classify(self, confidence: float) -> ActionKind:
        """Map a confidence to an action kind."""
        if confidence > self._buy_threshold:
            return ActionKind.BUY
        if confidence > self._sell_threshold:
            return ActionKind.SELL
        return ActionKind.HOLD

    def size(self, confidence: float, observation: Observation) -> float:
        """Confidence-weighted volume for an observation."""
        base_volume = observation.liquidity * self._liquidity_share
        return min(base_volume * confidence, observation.volume * self._volume_cap_share)

    async def score(self, history: Sequence[Observation]) -> OracleAction:
        """Score the latest observation of a history."""
        observation = _latest(history)
        confidence = clamp(float(await self._scorer(history)), 0.0, 1.0)

        return OracleAction(
            kind=self.classify(confidence),
            volume=self.size(confidence, observation),
            price=observation.price,
            timestamp=observation.timestamp,
            confidence=confidence,
            exchange_id=observation.exchange_id,
        )


class SimulatorOracle:
    """
    Deterministic oracle built on the execution sizing rule.

    Compares the latest price with the mean price of the history:
    cheap by more than the book spread buys, rich by more than the
    spread sells, otherwise holds. Volume uses the same closed-form
    optimum as the execution simulator. Suitable as a test double for
    externally loaded oracles.
    """

    def __init__(
        self,
        sizing_impact_factor: float = SIZING_IMPACT_FACTOR,
        liquidity_volume_scale: float = LIQUIDITY_VOLUME_SCALE,
    ) -> None:
        self._sizing_impact_factor = sizing_impact_factor
        self._liquidity_volume_scale = liquidity_volume_scale

    @property
    def is_ready(self) -> bool:
        """Always ready."""
        return True

    async def score(self, history: Sequence[Observation]) -> OracleAction:
        """Score the latest observation of a history."""
        observation = _latest(history)
        deviation = observation.price - mean([o.price for o in history])
        edge = abs(deviation) - observation.spread

        if edge > 0:
            kind = ActionKind.BUY if deviation < 0 else ActionKind.SELL
            volume = optimal_volume(
                edge,
                self._sizing_impact_factor,
                observation.liquidity * self._liquidity_volume_scale,
            )
            confidence = clamp(edge / abs(deviation), 0.0, 1.0)
        else:
            kind = ActionKind.HOLD
            volume = 0.0
            confidence = 0.0

        return OracleAction(
            kind=kind,
            volume=volume,
            price=observation.price,
            timestamp=observation.timestamp,
            confidence=confidence,
            exchange_id=observation.exchange_id,
        )


class LazyOracle:
    """
    Loads an oracle once and reuses it.

    Not ready until ``ensure_ready`` (or the task from ``start_loading``)
    completes. Scoring before that raises OracleUnavailableError; the
    caller decides whether to wait or reject.
    """

    def __init__(self, loader: OracleLoader) -> None:
        self._loader = loader
        self._oracle: ScoringOracle | None = None
        self._lock = asyncio.Lock()
        self._load_error: BaseException | None = None
        self._task: asyncio.Task[None] | None = None

    @property
    def is_ready(self) -> bool:
        """Check if the wrapped oracle is loaded and ready."""
        return self._oracle is not None and self._oracle.is_ready

    @property
    def load_error(self) -> BaseException | None:
        """Get the last loading error, if any."""
        return self._load_error

    async def ensure_ready(self) -> None:
        """
        Load the oracle if it is not loaded yet.

        Raises:
            OracleUnavailableError: If loading fails.
        """
        async with self._lock:
            if self._oracle is not None:
                return

            logger.info("Loading scoring oracle")
            try:
                self._oracle = await self._loader()
            except Exception as e:
                self._load_error = e
                logger.error(f"Failed to load scoring oracle: {e}")
                raise OracleUnavailableError(f"Oracle failed to load: {e}") from e

            self._load_error = None
            logger.info("Scoring oracle ready")

    def start_loading(self) -> asyncio.Task[None]:
        """Start loading in the background (eager initialization)."""
        if self._task is None:
            self._task = asyncio.create_task(self._load_quietly())
        return self._task

    async def _load_quietly(self) -> None:
        try:
            await self.ensure_ready()
        except OracleUnavailableError:
            # Recorded in load_error; is_ready stays False
            return

    async def score(self, history: Sequence[Observation]) -> OracleAction:
        """
        Score with the loaded oracle.

        Raises:
            OracleUnavailableError: If the oracle is not loaded yet.
        """
        if self._oracle is None or not self._oracle.is_ready:
            raise OracleUnavailableError("Scoring oracle is not ready")
        return await self._oracle.score(history)
