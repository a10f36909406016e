"""Shared test fixtures for the converter engine."""

from unittest.mock import AsyncMock

import pytest

from converter.config import ApiSettings, AppSettings, HistorySettings, SourceSettings
from converter.source.base import RateSource
from fakes import FakeClock, ScriptedSource


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def script() -> ScriptedSource:
    return ScriptedSource()


@pytest.fixture
def mock_source(script: ScriptedSource) -> AsyncMock:
    """AsyncMock RateSource driven by the ``script`` fixture."""
    source = AsyncMock(spec=RateSource)
    source.fetch_rate.side_effect = script.fetch_rate
    source.fetch_usd_price.side_effect = script.fetch_usd_price
    return source


@pytest.fixture
def source_settings() -> SourceSettings:
    """Default QUAI/QI asset definitions (18 and 3 decimals)."""
    return SourceSettings()


@pytest.fixture
def history_settings() -> HistorySettings:
    return HistorySettings()


@pytest.fixture
def mock_settings() -> AppSettings:
    """AppSettings with test defaults (API disabled, debug logging)."""
    return AppSettings(log_level="DEBUG", api=ApiSettings(enabled=False))
