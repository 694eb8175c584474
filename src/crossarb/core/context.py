"""
Per-run simulation context.

Everything a pipeline run needs that is random or stateful lives
here: the random generator, the market impact factors and the
cancellation token. A context is built once per run and passed
explicitly to every component.
"""

import asyncio
import random
from collections.abc import Mapping
from dataclasses import dataclass, field

from crossarb.config.settings import Settings
from crossarb.core.errors import SimulationCancelledError
from crossarb.strategy.impact import MarketImpactModel


class CancellationToken:
    """
    Cooperative cancellation flag for oracle-backed runs.

    Checked between observations; an in-flight oracle call is allowed
    to finish.
    """

    __slots__ = ("_event", "_reason")

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self._reason = ""

    def cancel(self, reason: str = "cancelled") -> None:
        """Request cancellation."""
        self._reason = reason
        self._event.set()

    @property
    def cancelled(self) -> bool:
        """Check if cancellation was requested."""
        return self._event.is_set()

    @property
    def reason(self) -> str:
        """Get the cancellation reason."""
        return self._reason

    def raise_if_cancelled(self) -> None:
        """Raise SimulationCancelledError if cancelled."""
        if self._event.is_set():
            raise SimulationCancelledError(f"Simulation run {self._reason}")


@dataclass(slots=True)
class SimulationContext:
    """Random source, impact model and cancellation for one run."""

    settings: Settings
    rng: random.Random
    impact_model: MarketImpactModel
    cancel: CancellationToken = field(default_factory=CancellationToken)

    @classmethod
    def create(
        cls,
        settings: Settings,
        *,
        seed: int | None = None,
        cancel: CancellationToken | None = None,
        impact_factors: Mapping[str, float] | None = None,
    ) -> "SimulationContext":
        """
        Build a fresh context.

        Args:
            settings: Run settings.
            seed: Seed override (falls back to ``settings.seed``).
            cancel: Cancellation token (a new one if omitted).
            impact_factors: Fixed impact factors by exchange.

        Returns:
            New SimulationContext.
        """
        rng = random.Random(seed if seed is not None else settings.seed)
        impact_model = MarketImpactModel(
            rng,
            factor_range=settings.impact_factor_range,
            factors=impact_factors,
        )
        return cls(
            settings=settings,
            rng=rng,
            impact_model=impact_model,
            cancel=cancel or CancellationToken(),
        )
