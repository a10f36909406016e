"""Tests for the JSON API routes using FastAPI's TestClient."""

import asyncio
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from converter.api.app import create_app
from converter.config import SourceSettings
from converter.flow.tracker import FlowTracker
from converter.main import build_components
from converter.market_data.rate_cache import RateCache
from converter.pricing.engine import ConversionEngine
from fakes import START, FakeClock


@pytest.fixture
def engine(mock_source: AsyncMock, clock: FakeClock) -> ConversionEngine:
    settings = SourceSettings(asset_a_decimals=18, asset_b_decimals=18)
    cache = RateCache(mock_source, settings, clock=clock)
    return ConversionEngine(cache, FlowTracker(clock=clock))


@pytest.fixture
def client(engine: ConversionEngine) -> TestClient:
    return TestClient(create_app(engine))


def _refresh(engine: ConversionEngine) -> None:
    asyncio.run(engine.cache.refresh())


class TestRates:
    def test_unavailable_before_refresh(self, client: TestClient) -> None:
        body = client.get("/api/rates").json()
        assert body["last_updated"] is None
        assert body["quantities"]["rate_a_to_b"] == {
            "status": "unavailable",
            "value": None,
            "updated_at": None,
        }

    def test_values_after_refresh(self, client: TestClient, engine: ConversionEngine) -> None:
        _refresh(engine)
        body = client.get("/api/rates").json()
        assert body["last_updated"] == START
        price = body["quantities"]["price_a_usd"]
        assert price["status"] == "ok"
        assert Decimal(price["value"]) == Decimal("0.068177")


class TestConvert:
    def test_unavailable_returns_503(self, client: TestClient) -> None:
        resp = client.post("/api/convert", json={"direction": "quai_to_qi", "amount": "10"})
        assert resp.status_code == 503
        assert resp.json()["status"] == "unavailable"
        assert resp.json()["amount_out"] == "0"

    def test_priced_conversion(self, client: TestClient, engine: ConversionEngine) -> None:
        _refresh(engine)
        resp = client.post("/api/convert", json={"direction": "qi_to_quai", "amount": "1"})
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "ok"
        assert Decimal(body["amount_out"]) > 0
        assert Decimal(body["slippage_percent"]) == Decimal("3")

    @pytest.mark.parametrize(
        "payload",
        [
            {"direction": "quai_to_qi", "amount": "-1"},
            {"direction": "sideways", "amount": "1"},
            {"direction": "quai_to_qi", "amount": "lots"},
            {"direction": "quai_to_qi", "amount": -1},
            {"direction": "quai_to_qi", "amount": "1e999999"},
        ],
    )
    def test_invalid_input_returns_422(self, client: TestClient, payload: dict) -> None:
        resp = client.post("/api/convert", json=payload)
        assert resp.status_code == 422
        assert "error" in resp.json()

    def test_json_number_amount_accepted(
        self, client: TestClient, engine: ConversionEngine
    ) -> None:
        _refresh(engine)
        resp = client.post("/api/convert", json={"direction": "quai_to_qi", "amount": 10})
        assert resp.status_code == 200
        assert resp.json()["amount_in"] == "10"


class TestHistoryAndSpread:
    def test_history_after_refresh(self, client: TestClient, engine: ConversionEngine) -> None:
        _refresh(engine)
        body = client.get("/api/history/price_b_usd").json()
        assert len(body) == 1
        assert body[0]["timestamp"] == START

    def test_history_for_rate_is_404(self, client: TestClient) -> None:
        assert client.get("/api/history/rate_a_to_b").status_code == 404
        assert client.get("/api/history/unknown").status_code == 404

    def test_spread_null_without_data(self, client: TestClient) -> None:
        assert client.get("/api/spread").json() == {"spread_percent": None}


def test_build_components_wires_shared_cache(mock_settings, mock_source: AsyncMock) -> None:
    components = build_components(mock_settings, source=mock_source)
    assert components["engine"].cache is components["cache"]
    assert components["engine"].flow is components["flow"]
    assert components["source"] is mock_source
