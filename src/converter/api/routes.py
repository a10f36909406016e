"""JSON API endpoints exposing cached rates, price history and conversion quotes."""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from converter.exceptions import InvalidInputError
from converter.logging import get_logger
from converter.models import CachedValue, ConversionResult, PriceSample, Quantity

logger = get_logger(__name__)

router = APIRouter()

_PRICE_QUANTITIES = (Quantity.PRICE_A_USD, Quantity.PRICE_B_USD)


class ConvertRequest(BaseModel):
    """Body of POST /convert.

    Send the amount as a string to keep Decimal precision. JSON numbers are
    accepted too and normalized by parse_amount, so every bad value gets the
    same 422 body.
    """

    direction: str
    amount: str | int | float


def _cached_to_dict(value: CachedValue) -> dict[str, Any]:
    return {
        "status": value.status.value,
        "value": str(value.value) if value.is_available else None,
        "updated_at": value.updated_at,
    }


def _sample_to_dict(sample: PriceSample) -> dict[str, Any]:
    return {"timestamp": sample.timestamp, "price": str(sample.price)}


def _result_to_dict(result: ConversionResult) -> dict[str, Any]:
    return {
        "direction": result.direction.value,
        "amount_in": str(result.amount_in),
        "amount_out": str(result.amount_out),
        "effective_rate": str(result.effective_rate),
        "slippage_percent": str(result.slippage_percent),
        "status": result.status.value,
        "rate_updated_at": result.rate_updated_at,
    }


@router.get("/rates")
async def get_rates(request: Request) -> JSONResponse:
    """All cached quantities with their freshness status."""
    cache = request.app.state.engine.cache
    values = await cache.read_all()
    return JSONResponse(
        content={
            "quantities": {q.value: _cached_to_dict(v) for q, v in values.items()},
            "last_updated": cache.last_updated,
        }
    )


@router.get("/history/{quantity}")
async def get_history(request: Request, quantity: str, since: float | None = None) -> JSONResponse:
    """USD price series for asset A (fetched) or asset B (derived)."""
    try:
        parsed = Quantity(quantity)
    except ValueError:
        parsed = None
    if parsed not in _PRICE_QUANTITIES:
        return JSONResponse(status_code=404, content={"error": f"no history for {quantity}"})

    samples = await request.app.state.engine.cache.history(parsed, since=since)
    return JSONResponse(content=[_sample_to_dict(s) for s in samples])


@router.get("/spread")
async def get_spread(request: Request) -> JSONResponse:
    """Implied spread between the two independently quoted rates."""
    spread: Decimal | None = await request.app.state.engine.market_spread()
    return JSONResponse(content={"spread_percent": str(spread) if spread is not None else None})


@router.post("/convert")
async def post_convert(request: Request, body: ConvertRequest) -> JSONResponse:
    """Price a conversion. 422 on invalid input, 503 while no rate is known."""
    try:
        result = await request.app.state.engine.convert(body.direction, body.amount)
    except InvalidInputError as e:
        logger.info("convert_rejected", reason=str(e))
        return JSONResponse(status_code=422, content={"error": str(e)})

    status_code = 200 if result.is_available else 503
    return JSONResponse(status_code=status_code, content=_result_to_dict(result))
