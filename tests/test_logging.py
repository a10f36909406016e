"""Tests for structlog setup: Decimal rendering and asset pair binding."""

import json
import logging
from decimal import Decimal

import pytest
import structlog

from converter.logging import _decimals_to_str, bind_asset_pair, get_logger, setup_logging


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    structlog.contextvars.clear_contextvars()
    structlog.reset_defaults()


def test_decimals_rendered_as_strings() -> None:
    event = {"event": "conversion_priced", "amount_out": Decimal("9.50"), "stale": False}
    assert _decimals_to_str(None, "info", event) == {
        "event": "conversion_priced",
        "amount_out": "9.50",
        "stale": False,
    }


def test_json_output_carries_pair_and_exact_decimals(restore_logging, capsys) -> None:
    setup_logging("DEBUG", "json")
    bind_asset_pair("QUAI", "QI")

    get_logger("converter.test").info("rate_seen", rate=Decimal("0.0039"))

    line = capsys.readouterr().err.strip().splitlines()[-1]
    record = json.loads(line)
    assert record["event"] == "rate_seen"
    assert record["pair"] == "QUAI/QI"
    assert record["rate"] == "0.0039"
    assert record["level"] == "info"
