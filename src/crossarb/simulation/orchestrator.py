"""
Simulation orchestrator.

Composes the pipeline into one call:

    ticks -> actions (deterministic or oracle strategy)
          -> communications -> metrics -> SimulationState

The orchestrator keeps the last valid state and replaces it wholesale
only when a run completes. Failed or cancelled runs leave it untouched.
"""

import asyncio
import logging
from collections import deque
from collections.abc import Sequence
from typing import Protocol

from crossarb.agents.communication import CommunicationSynthesizer
from crossarb.analytics.performance import PerformanceAggregator
from crossarb.config.constants import ORACLE_IMPACT_RATE
from crossarb.config.settings import Settings, get_settings
from crossarb.core.context import CancellationToken, SimulationContext
from crossarb.core.errors import OracleUnavailableError
from crossarb.core.types import (
    ActionKind,
    AgentAction,
    ModelState,
    Observation,
    Opportunity,
    OracleAction,
    ScoringOracle,
    SimulationState,
    StrategyKind,
    Tick,
    agent_for,
)
from crossarb.execution.simulator import ExecutionSimulator
from crossarb.market.generator import generate_ticks
from crossarb.strategy.opportunity import OpportunityDetector
from crossarb.telemetry.metrics import StageMetrics
from crossarb.utils.time import get_timestamp_ms


logger = logging.getLogger(__name__)


class ActionStrategy(Protocol):
    """Turns ticks into agent actions for one run."""

    kind: StrategyKind

    async def generate(
        self,
        ticks: Sequence[Tick],
        context: SimulationContext,
    ) -> list[AgentAction]:
        """Generate actions for a tick set."""
        ...


class DeterministicStrategy:
    """Detects opportunities and simulates their execution."""

    kind = StrategyKind.DETERMINISTIC

    def __init__(self) -> None:
        self._opportunities: list[Opportunity] = []

    async def generate(
        self,
        ticks: Sequence[Tick],
        context: SimulationContext,
    ) -> list[AgentAction]:
        """
        Run detection then execution simulation.

        Args:
            ticks: Market data.
            context: Per-run context (rng, impact model).

        Returns:
            Actions in chronological opportunity order.
        """
        settings = context.settings
        detector = OpportunityDetector(
            context.rng,
            liquidity_volume_scale=settings.liquidity_volume_scale,
        )
        simulator = ExecutionSimulator(
            context.impact_model,
            context.rng,
            sizing_impact_factor=settings.sizing_impact_factor,
            hold_probability=settings.hold_probability,
        )

        # Stable sort: execution must be chronological for unsorted input
        self._opportunities = sorted(detector.detect(ticks), key=lambda o: o.timestamp)
        return simulator.simulate_all(self._opportunities)

    @property
    def opportunities(self) -> list[Opportunity]:
        """Get opportunities found by the last run."""
        return self._opportunities


def action_from_oracle(result: OracleAction) -> AgentAction:
    """
    Convert an oracle decision into an agent action.

    Buys realize nothing; other kinds book price * volume * confidence.
    Holds carry no impact; other kinds a flat rate per unit of volume.
    """
    profit = 0.0 if result.kind is ActionKind.BUY else result.price * result.volume * result.confidence
    impact = 0.0 if result.kind is ActionKind.HOLD else ORACLE_IMPACT_RATE * result.volume

    return AgentAction(
        timestamp=result.timestamp,
        agent=agent_for(result.exchange_id),
        exchange=result.exchange_id,
        kind=result.kind,
        volume=result.volume,
        price=result.price,
        profit=profit,
        impact=impact,
        net_profit=profit - impact * result.volume,
    )


class OracleStrategy:
    """
    Delegates action generation to a scoring oracle.

    Every tick becomes an observation appended to its exchange's
    bounded history; the oracle scores each observation against the
    history up to and including it. Actions come back in tick order.
    """

    kind = StrategyKind.ORACLE

    def __init__(
        self,
        oracle: ScoringOracle,
        history_limit: int | None = None,
        concurrency: int | None = None,
    ) -> None:
        """
        Initialize oracle strategy.

        Args:
            oracle: Scoring oracle.
            history_limit: Observations kept per exchange (default from settings).
            concurrency: Concurrent oracle calls (default from settings).
        """
        self._oracle = oracle
        self._history_limit = history_limit
        self._concurrency = concurrency

    def build_histories(
        self,
        ticks: Sequence[Tick],
        limit: int,
    ) -> list[tuple[Observation, ...]]:
        """
        Snapshot each exchange's history at every tick.

        Returns:
            One history per tick, in tick order, ending with that tick.
        """
        histories: dict[str, deque[Observation]] = {}
        snapshots: list[tuple[Observation, ...]] = []

        for tick in ticks:
            history = histories.setdefault(tick.exchange_id, deque(maxlen=limit))
            history.append(Observation.from_tick(tick))
            snapshots.append(tuple(history))

        return snapshots

    async def _score(self, history: tuple[Observation, ...]) -> OracleAction:
        try:
            return await self._oracle.score(history)
        except Exception as e:
            raise OracleUnavailableError(f"Scoring oracle failed: {e}") from e

    async def _score_sequential(
        self,
        snapshots: Sequence[tuple[Observation, ...]],
        cancel: CancellationToken,
    ) -> list[OracleAction]:
        results: list[OracleAction] = []
        for history in snapshots:
            cancel.raise_if_cancelled()
            results.append(await self._score(history))
        return results

    async def _score_concurrent(
        self,
        snapshots: Sequence[tuple[Observation, ...]],
        cancel: CancellationToken,
        concurrency: int,
    ) -> list[OracleAction]:
        semaphore = asyncio.Semaphore(concurrency)

        async def score_one(history: tuple[Observation, ...]) -> OracleAction:
            async with semaphore:
                cancel.raise_if_cancelled()
                return await self._score(history)

        tasks = [asyncio.create_task(score_one(h)) for h in snapshots]
        try:
            return list(await asyncio.gather(*tasks))
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

    async def generate(
        self,
        ticks: Sequence[Tick],
        context: SimulationContext,
    ) -> list[AgentAction]:
        """
        Score every tick with the oracle.

        Raises:
            OracleUnavailableError: If the oracle is not ready or fails to score.
            SimulationCancelledError: If the run is cancelled.
        """
        if not self._oracle.is_ready:
            raise OracleUnavailableError("Scoring oracle is not ready")

        settings = context.settings
        limit = self._history_limit or settings.oracle_history_limit
        concurrency = self._concurrency or settings.oracle_concurrency

        snapshots = self.build_histories(ticks, limit)
        if concurrency > 1:
            results = await self._score_concurrent(snapshots, context.cancel, concurrency)
        else:
            results = await self._score_sequential(snapshots, context.cancel)

        logger.debug(f"Oracle scored {len(results)} observations (concurrency={concurrency})")
        return [action_from_oracle(r) for r in results]


class SimulationOrchestrator:
    """
    Runs the pipeline and holds the last valid SimulationState.

    One orchestrator per dashboard or CLI session. Each run gets a fresh
    SimulationContext, so no random or impact state leaks across runs.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        oracle: ScoringOracle | None = None,
    ) -> None:
        """
        Initialize orchestrator.

        Args:
            settings: Run settings (default: cached environment settings).
            oracle: Optional scoring oracle for delegated runs.
        """
        self._settings = settings or get_settings()
        self._oracle = oracle
        self._state = SimulationState.initial()
        self._metrics = StageMetrics()
        self._aggregator = PerformanceAggregator(self._settings.capital_volume_multiple)

    def _select_strategy(self, use_oracle: bool | None) -> ActionStrategy:
        if use_oracle is None:
            use_oracle = self._oracle is not None

        if not use_oracle:
            return DeterministicStrategy()

        if self._oracle is None:
            raise OracleUnavailableError("No scoring oracle configured")
        return OracleStrategy(self._oracle)

    def _model_state(self, strategy: StrategyKind, net_profit: float) -> ModelState:
        total_epochs = self._settings.total_epochs
        return ModelState(
            is_model_ready=True,
            is_training=False,
            train_progress=100.0,
            epochs_completed=total_epochs,
            total_epochs=total_epochs,
            current_reward=net_profit / total_epochs,
            cumulative_reward=net_profit,
            learning_rate=self._settings.learning_rate,
            timestamp=get_timestamp_ms(),
            strategy=strategy,
        )

    async def run(
        self,
        ticks: Sequence[Tick] | None = None,
        *,
        use_oracle: bool | None = None,
        cancel: CancellationToken | None = None,
        skipped_rows: int = 0,
        seed: int | None = None,
    ) -> SimulationState:
        """
        Run the full pipeline.

        Args:
            ticks: Market data (generated sample data if None).
            use_oracle: Force the oracle (True) or deterministic (False)
                strategy; None uses the oracle when one is configured.
            cancel: Cancellation token honoured by oracle runs.
            skipped_rows: Rows the caller dropped while parsing input.
            seed: Seed override for this run.

        Returns:
            The new SimulationState (also stored as ``state``).

        Raises:
            OracleUnavailableError: If an oracle run cannot be served.
            SimulationCancelledError: If the run is cancelled.
        """
        context = SimulationContext.create(self._settings, seed=seed, cancel=cancel)
        strategy = self._select_strategy(use_oracle)

        if ticks is None:
            with self._metrics.time_stage("generate"):
                ticks = generate_ticks(
                    self._settings.num_exchanges,
                    self._settings.num_time_points,
                    rng=context.rng,
                    base_price=self._settings.base_price,
                    interval_ms=self._settings.tick_interval_ms,
                )

        logger.info(f"Starting {strategy.kind.value} run over {len(ticks)} ticks")

        try:
            with self._metrics.time_stage("actions"):
                actions = await strategy.generate(ticks, context)
        except Exception as e:
            self._metrics.increment_counter("runs_failed")
            logger.error(f"Run failed, keeping previous state: {e}")
            raise

        with self._metrics.time_stage("communications"):
            communications = CommunicationSynthesizer(context.rng).synthesize(
                actions, self._settings.message_count
            )

        with self._metrics.time_stage("metrics"):
            metrics = self._aggregator.aggregate(actions)

        opportunities = (
            strategy.opportunities if isinstance(strategy, DeterministicStrategy) else []
        )

        state = SimulationState(
            data_loaded=True,
            ticks=tuple(ticks),
            opportunities=tuple(opportunities),
            actions=tuple(actions),
            communications=tuple(communications),
            metrics=metrics,
            model_state=self._model_state(strategy.kind, metrics.net_profit),
            skipped_rows=skipped_rows,
        )

        self._state = state
        self._metrics.increment_counter("runs_completed")
        logger.info(
            f"Run complete: {len(opportunities)} opportunities, {len(actions)} actions, "
            f"net profit {metrics.net_profit:.4f}"
        )
        return state

    def run_sync(
        self,
        ticks: Sequence[Tick] | None = None,
        *,
        use_oracle: bool | None = None,
        skipped_rows: int = 0,
        seed: int | None = None,
    ) -> SimulationState:
        """Run the pipeline from synchronous code."""
        return asyncio.run(
            self.run(ticks, use_oracle=use_oracle, skipped_rows=skipped_rows, seed=seed)
        )

    @property
    def state(self) -> SimulationState:
        """Get the last valid state."""
        return self._state

    @property
    def settings(self) -> Settings:
        """Get run settings."""
        return self._settings

    @property
    def oracle(self) -> ScoringOracle | None:
        """Get the configured oracle."""
        return self._oracle

    @property
    def metrics(self) -> StageMetrics:
        """Get stage metrics."""
        return self._metrics
