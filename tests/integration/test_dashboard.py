"""
Integration tests for the dashboard API.

Drives the FastAPI app through TestClient: runs, uploads, exports,
chart data, analysis views and oracle availability.
"""

from collections.abc import Iterator

import orjson
import pytest
from fastapi.testclient import TestClient

from crossarb.agents.oracle import LazyOracle
from crossarb.config.settings import Settings
from crossarb.core.types import ActionKind, ScoringOracle, Tick
from crossarb.dashboard.server import create_app
from crossarb.market.codec import parse_csv, to_csv
from tests.mocks import MockOracle


@pytest.fixture
def client(settings: Settings) -> Iterator[TestClient]:
    """Client for an app without an oracle."""
    with TestClient(create_app(settings)) as test_client:
        yield test_client


class TestStatusAndState:
    """Tests for read endpoints before and after a run."""

    def test_status_before_run(self, client: TestClient) -> None:
        """Test the initial status."""
        response = client.get("/api/status")

        assert response.status_code == 200
        data = response.json()
        assert data["data_loaded"] is False
        assert data["strategy"] == "deterministic"
        assert data["oracle_configured"] is False
        assert data["counts"]["actions"] == 0

    def test_metrics_before_run(self, client: TestClient) -> None:
        """Test metrics are unavailable until a run completes."""
        assert client.get("/api/metrics").status_code == 404

    def test_run_then_read(self, client: TestClient, settings: Settings) -> None:
        """Test a generated run is visible to every read endpoint."""
        run = client.post("/api/run", params={"seed": 3})

        assert run.status_code == 200
        summary = run.json()
        assert summary["data_loaded"] is True
        assert summary["ticks"] == settings.num_exchanges * settings.num_time_points

        state = orjson.loads(client.get("/api/state").content)
        assert state["version"] == 1
        assert len(state["ticks"]) == summary["ticks"]
        assert len(state["actions"]) == summary["actions"]

        metrics = client.get("/api/metrics").json()
        assert metrics == summary["metrics"]

        status = client.get("/api/status").json()
        assert status["data_loaded"] is True
        assert status["stages"]["counters"]["runs_completed"] == 1


class TestUploadAndExport:
    """Tests for CSV upload and export."""

    def test_upload_runs_on_parsed_ticks(self, client: TestClient, crossed_ticks: list[Tick]) -> None:
        """Test valid rows run and malformed rows are counted."""
        body = to_csv(crossed_ticks) + "not-a-time,C,1,1,1,1,0.5\n"

        response = client.post("/api/upload", content=body)

        assert response.status_code == 200
        summary = response.json()
        assert summary["ticks"] == 2
        assert summary["skipped_rows"] == 1
        assert summary["opportunities"] == 1

    def test_upload_with_byte_order_mark(self, client: TestClient, crossed_ticks: list[Tick]) -> None:
        """Test a BOM-prefixed upload is accepted."""
        body = b"\xef\xbb\xbf" + to_csv(crossed_ticks).encode()

        assert client.post("/api/upload", content=body).status_code == 200

    @pytest.mark.parametrize(
        "body",
        [
            b"timestamp,price\n1,2\n",
            b"timestamp,exchange_id,price,volume,bid,ask,liquidity_level\nx,A,1,1,1,1,1\n",
            b"\xff\xfe\x00\x01",
        ],
    )
    def test_upload_rejected(self, client: TestClient, body: bytes) -> None:
        """Test bad headers, no valid rows and undecodable bytes give 400."""
        response = client.post("/api/upload", content=body)

        assert response.status_code == 400
        assert client.get("/api/status").json()["data_loaded"] is False

    def test_export_round_trip(self, client: TestClient, crossed_ticks: list[Tick]) -> None:
        """Test exported CSV re-imports to the uploaded ticks."""
        client.post("/api/upload", content=to_csv(crossed_ticks))

        response = client.get("/api/export")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert "attachment" in response.headers["content-disposition"]
        assert parse_csv(response.text).ticks == crossed_ticks


class TestChartsAndAnalysis:
    """Tests for chart and analysis endpoints."""

    def test_charts(self, client: TestClient) -> None:
        """Test chart data is served by name."""
        client.post("/api/run", params={"seed": 11})

        profit = client.get("/api/charts/profit")
        heatmap = client.get("/api/charts/heatmap")

        assert profit.status_code == 200
        assert isinstance(profit.json(), list)
        assert set(heatmap.json()) == {"agents", "data"}

    def test_unknown_chart(self, client: TestClient) -> None:
        """Test unknown chart names give 404."""
        assert client.get("/api/charts/candles").status_code == 404

    def test_analysis(self, client: TestClient) -> None:
        """Test the analysis view after a run."""
        client.post("/api/run", params={"seed": 11})

        response = client.get("/api/analysis", params={"start_pct": 25, "end_pct": 75})

        assert response.status_code == 200
        data = response.json()
        assert set(data) == {"exchanges", "agents", "correlations"}
        for agent in data["agents"]:
            assert agent["total_messages"] == agent["sent_messages"] + agent["received_messages"]

    def test_analysis_bounds(self, client: TestClient) -> None:
        """Test inverted and out-of-range windows are rejected."""
        assert client.get("/api/analysis", params={"start_pct": 80, "end_pct": 20}).status_code == 400
        assert client.get("/api/analysis", params={"start_pct": 150}).status_code == 422


class TestOracleEndpoints:
    """Tests for oracle-backed runs through the API."""

    def test_oracle_requested_without_oracle(self, client: TestClient) -> None:
        """Test forcing the oracle without one gives 409."""
        response = client.post("/api/run", params={"use_oracle": True})

        assert response.status_code == 409

    def test_lazy_oracle_run(self, settings: Settings, crossed_ticks: list[Tick]) -> None:
        """Test runs wait for a lazily loaded oracle."""

        async def loader() -> ScoringOracle:
            return MockOracle(kind=ActionKind.BUY)

        with TestClient(create_app(settings, LazyOracle(loader))) as client:
            response = client.post("/api/upload", content=to_csv(crossed_ticks))
            status = client.get("/api/status").json()

        assert response.status_code == 200
        assert response.json()["strategy"] == "oracle"
        assert response.json()["actions"] == 2
        assert status["oracle_ready"] is True

    def test_lazy_oracle_failure(self, settings: Settings) -> None:
        """Test a failed oracle load gives 409 and keeps the state."""

        async def loader() -> ScoringOracle:
            raise RuntimeError("weights missing")

        with TestClient(create_app(settings, LazyOracle(loader))) as client:
            response = client.post("/api/run")
            status = client.get("/api/status").json()

        assert response.status_code == 409
        assert "weights missing" in response.json()["detail"]
        assert status["oracle_ready"] is False
        assert status["data_loaded"] is False

    def test_deterministic_override_with_oracle(self, settings: Settings) -> None:
        """Test use_oracle=false skips a failing oracle."""

        async def loader() -> ScoringOracle:
            raise RuntimeError("weights missing")

        with TestClient(create_app(settings, LazyOracle(loader))) as client:
            response = client.post("/api/run", params={"use_oracle": False})

        assert response.status_code == 200
        assert response.json()["strategy"] == "deterministic"

    def test_oracle_crash_reported(self, settings: Settings, crossed_ticks: list[Tick]) -> None:
        """Test an oracle failing mid-run gives 409 and keeps the previous state."""
        with TestClient(create_app(settings, MockOracle(fail_after=0))) as client:
            first = client.post(
                "/api/upload", params={"use_oracle": False}, content=to_csv(crossed_ticks)
            )
            before = client.get("/api/state").content

            response = client.post("/api/run", params={"use_oracle": True})

            assert first.status_code == 200
            assert response.status_code == 409
            assert "oracle crashed" in response.json()["detail"]
            assert client.get("/api/state").content == before
