"""Structured logging for the converter service.

structlog events are routed through stdlib logging so uvicorn and httpx
records share one handler. Rates and amounts are Decimals; they are
rendered as strings so the JSON renderer keeps full precision.
"""

import logging
import os
from decimal import Decimal

import structlog


def _decimals_to_str(
    logger: logging.Logger, method_name: str, event_dict: structlog.types.EventDict
) -> structlog.types.EventDict:
    """Render Decimal field values as plain strings."""
    for key, value in event_dict.items():
        if isinstance(value, Decimal):
            event_dict[key] = str(value)
    return event_dict


def _select_renderer(log_format: str | None) -> structlog.types.Processor:
    """JSON when the format is "json", console otherwise."""
    fmt = (log_format or os.environ.get("LOG_FORMAT", "console")).lower()
    if fmt == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer()


def setup_logging(log_level: str = "INFO", log_format: str | None = None) -> None:
    """Configure structlog and the root logger.

    The output format comes from ``log_format`` or, when omitted, the
    LOG_FORMAT environment variable ("json" or "console", default console).
    """
    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        _decimals_to_str,
        structlog.processors.format_exc_info,
    ]

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler()
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared_processors,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _select_renderer(log_format),
            ],
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    # httpx logs every request at INFO; keep it out of the poll output
    logging.getLogger("httpx").setLevel(logging.WARNING)


def bind_asset_pair(asset_a: str, asset_b: str) -> None:
    """Tag every later event in this context with the converted pair."""
    structlog.contextvars.bind_contextvars(pair=f"{asset_a}/{asset_b}")


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a bound structlog logger with the given name."""
    return structlog.get_logger(name)
