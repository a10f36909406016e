"""Entry point for the QI/QUAI converter service.

Wires all components together, optionally serves the FastAPI JSON API,
and starts the rate poller. When the API is enabled (default), the poller
and the server share a single asyncio event loop via uvicorn's
programmatic API and FastAPI's lifespan context manager.

Handles SIGINT/SIGTERM for graceful shutdown when running without the API
(uvicorn installs its own handlers otherwise).

Component wiring order (in build_components):
1. QuaiRateSource (JSON-RPC + CoinGecko over httpx)
2. RateCache (last-known-good values and price histories)
3. FlowTracker (24h conversion flow)
4. ConversionEngine (rate + flow + slippage)
5. RatePoller (fixed-interval refresh)
"""

import asyncio
import signal
from contextlib import asynccontextmanager
from typing import Any

import uvicorn
from fastapi import FastAPI

from converter.config import AppSettings
from converter.flow.tracker import FlowTracker
from converter.logging import bind_asset_pair, get_logger, setup_logging
from converter.market_data.poller import RatePoller
from converter.market_data.rate_cache import RateCache
from converter.pricing.engine import ConversionEngine
from converter.source.base import RateSource
from converter.source.quai_source import QuaiRateSource


def build_components(
    settings: AppSettings, source: RateSource | None = None
) -> dict[str, Any]:
    """Build the component graph from settings.

    Args:
        settings: Application-wide settings.
        source: Rate source override; defaults to QuaiRateSource.

    Returns:
        Dict mapping component names to instances.
    """
    rate_source = source or QuaiRateSource(settings.source)
    cache = RateCache(rate_source, settings.source, settings.history)
    flow = FlowTracker(retention_seconds=settings.flow.retention_seconds)
    engine = ConversionEngine(cache, flow, settings.slippage, settings.flow)
    poller = RatePoller(cache, interval=settings.poller.interval_seconds)

    return {
        "source": rate_source,
        "cache": cache,
        "flow": flow,
        "engine": engine,
        "poller": poller,
    }


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start the poller on startup; stop it and close the source on shutdown."""
    logger = get_logger("converter.main")
    components = app.state.components

    app.state.engine = components["engine"]
    await components["poller"].start()
    logger.info("lifespan_started")

    yield

    await components["poller"].stop()
    await components["source"].close()
    logger.info("converter_stopped")


async def _run_poller_only(components: dict[str, Any]) -> None:
    """Run the poller until SIGINT/SIGTERM."""
    logger = get_logger("converter.main")
    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop_event.set)

    await components["poller"].start()
    try:
        await stop_event.wait()
        logger.info("graceful_shutdown_signal")
    finally:
        await components["poller"].stop()
        await components["source"].close()
        logger.info("converter_stopped")


async def run() -> None:
    """Run the converter service."""
    settings = AppSettings()
    setup_logging(settings.log_level)
    bind_asset_pair(settings.source.asset_a, settings.source.asset_b)
    logger = get_logger("converter.main")

    components = build_components(settings)

    if settings.api.enabled:
        from converter.api.app import create_app

        app = create_app(lifespan=lifespan)
        app.state.components = components

        logger.info(
            "starting_with_api",
            host=settings.api.host,
            port=settings.api.port,
            poll_interval=settings.poller.interval_seconds,
        )

        config = uvicorn.Config(
            app,
            host=settings.api.host,
            port=settings.api.port,
            log_level="warning",  # Suppress uvicorn access logs
        )
        server = uvicorn.Server(config)
        await server.serve()
    else:
        logger.info(
            "starting_without_api",
            poll_interval=settings.poller.interval_seconds,
        )
        await _run_poller_only(components)


def main() -> None:
    """Synchronous entry point."""
    asyncio.run(run())


if __name__ == "__main__":
    main()
