"""
FastAPI server exposing simulation state to the presentation layer.

Every request reads the orchestrator held on ``app.state``; runs swap
in a complete new state, so readers only ever see finished snapshots.
"""

import asyncio
import logging
import random
from contextlib import asynccontextmanager
from dataclasses import asdict
from typing import Any

import orjson
from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.responses import PlainTextResponse, Response

from crossarb import __version__
from crossarb.agents.oracle import LazyOracle
from crossarb.analytics.analysis import (
    agent_correlations,
    agent_summary,
    exchange_impact_summary,
    filter_time_window,
)
from crossarb.analytics.charts import CHARTS, build_chart
from crossarb.config.settings import Settings, get_settings
from crossarb.core.errors import OracleUnavailableError, SimulationCancelledError, TickParseError
from crossarb.core.types import ScoringOracle
from crossarb.market.codec import parse_csv, to_csv
from crossarb.simulation.orchestrator import SimulationOrchestrator
from crossarb.simulation.snapshot import dumps


logger = logging.getLogger(__name__)


def _json(content: Any) -> Response:
    return Response(content=orjson.dumps(content), media_type="application/json")


def _orchestrator(request: Request) -> SimulationOrchestrator:
    orchestrator: SimulationOrchestrator = request.app.state.orchestrator
    return orchestrator


def _run_summary(orchestrator: SimulationOrchestrator) -> dict[str, Any]:
    state = orchestrator.state
    return {
        "data_loaded": state.data_loaded,
        "strategy": state.model_state.strategy.value,
        "ticks": len(state.ticks),
        "opportunities": len(state.opportunities),
        "actions": len(state.actions),
        "skipped_rows": state.skipped_rows,
        "metrics": asdict(state.metrics) if state.metrics else None,
    }


async def _run(
    orchestrator: SimulationOrchestrator,
    use_oracle: bool | None,
    **kwargs: Any,
) -> dict[str, Any]:
    oracle = orchestrator.oracle
    if use_oracle is not False and isinstance(oracle, LazyOracle) and not oracle.is_ready:
        try:
            await oracle.ensure_ready()
        except OracleUnavailableError as e:
            raise HTTPException(status_code=409, detail=str(e)) from e

    try:
        await orchestrator.run(use_oracle=use_oracle, **kwargs)
    except OracleUnavailableError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    except SimulationCancelledError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e

    return _run_summary(orchestrator)


async def get_state(request: Request) -> Response:
    return Response(content=dumps(_orchestrator(request).state), media_type="application/json")


async def get_status(request: Request) -> dict[str, Any]:
    orchestrator = _orchestrator(request)
    oracle = orchestrator.oracle
    state = orchestrator.state
    return {
        "version": __version__,
        "data_loaded": state.data_loaded,
        "strategy": state.model_state.strategy.value,
        "oracle_configured": oracle is not None,
        "oracle_ready": bool(oracle and oracle.is_ready),
        "counts": {
            "ticks": len(state.ticks),
            "opportunities": len(state.opportunities),
            "actions": len(state.actions),
            "communications": len(state.communications),
        },
        "stages": orchestrator.metrics.to_dict(),
    }


async def run_simulation(
    request: Request,
    use_oracle: bool | None = None,
    seed: int | None = None,
) -> dict[str, Any]:
    return await _run(_orchestrator(request), use_oracle, seed=seed)


async def upload_csv(request: Request, use_oracle: bool | None = None) -> dict[str, Any]:
    body = await request.body()
    try:
        text = body.decode("utf-8-sig")
        parsed = parse_csv(text)
    except (UnicodeDecodeError, TickParseError) as e:
        raise HTTPException(status_code=400, detail=f"Invalid CSV: {e}") from e

    if not parsed.ticks:
        raise HTTPException(status_code=400, detail="CSV contains no valid ticks")

    return await _run(
        _orchestrator(request),
        use_oracle,
        ticks=parsed.ticks,
        skipped_rows=parsed.skipped_rows,
    )


async def export_csv(request: Request) -> PlainTextResponse:
    state = _orchestrator(request).state
    return PlainTextResponse(
        content=to_csv(state.ticks),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="ticks.csv"'},
    )


async def get_metrics(request: Request) -> dict[str, Any]:
    state = _orchestrator(request).state
    if state.metrics is None:
        raise HTTPException(status_code=404, detail="No simulation has run yet")
    return asdict(state.metrics)


async def get_chart(request: Request, name: str) -> Response:
    if name not in CHARTS:
        raise HTTPException(status_code=404, detail=f"Unknown chart: {name}")
    state = _orchestrator(request).state
    return _json(build_chart(name, getattr(state, CHARTS[name])))


async def get_analysis(
    request: Request,
    start_pct: float = Query(0.0, ge=0.0, le=100.0),
    end_pct: float = Query(100.0, ge=0.0, le=100.0),
) -> Response:
    if start_pct > end_pct:
        raise HTTPException(status_code=400, detail="start_pct must not exceed end_pct")

    state = _orchestrator(request).state
    actions = filter_time_window(state.actions, start_pct, end_pct)
    rng = request.app.state.analysis_rng
    return _json(
        {
            "exchanges": exchange_impact_summary(actions, rng),
            "agents": [
                {**asdict(s), "total_messages": s.total_messages, "efficiency": s.efficiency}
                for s in agent_summary(state.actions, state.communications)
            ],
            "correlations": agent_correlations(state.actions, state.communications),
        }
    )


def create_app(
    settings: Settings | None = None,
    oracle: ScoringOracle | None = None,
) -> FastAPI:
    """
    Build the dashboard API.

    Args:
        settings: Run settings (default: cached environment settings).
        oracle: Optional scoring oracle. A LazyOracle starts loading in
            the background at startup.

    Returns:
        Configured FastAPI application.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):  # type: ignore[no-untyped-def]
        loading: asyncio.Task[None] | None = None
        if isinstance(oracle, LazyOracle):
            loading = oracle.start_loading()
        yield
        if loading and not loading.done():
            loading.cancel()

    app = FastAPI(title="Cross-Exchange Arbitrage Simulator", version=__version__, lifespan=lifespan)
    app.state.orchestrator = SimulationOrchestrator(settings, oracle)
    app.state.analysis_rng = random.Random(settings.seed)

    app.get("/api/state")(get_state)
    app.get("/api/status")(get_status)
    app.post("/api/run")(run_simulation)
    app.post("/api/upload")(upload_csv)
    app.get("/api/export")(export_csv)
    app.get("/api/metrics")(get_metrics)
    app.get("/api/charts/{name}")(get_chart)
    app.get("/api/analysis")(get_analysis)
    return app


def main() -> None:
    import uvicorn

    settings = get_settings()
    print(
        f"""
╔═══════════════════════════════════════════════════════════════╗
║          CROSS-EXCHANGE ARBITRAGE - DASHBOARD API             ║
╚═══════════════════════════════════════════════════════════════╝

API: http://{settings.dashboard_host}:{settings.dashboard_port}/api/status
Press Ctrl+C to stop.
    """
    )
    uvicorn.run(
        create_app(settings),
        host=settings.dashboard_host,
        port=settings.dashboard_port,
        log_level="warning",
    )


if __name__ == "__main__":
    main()
