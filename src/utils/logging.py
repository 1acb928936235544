"""structlog setup for the data layer.

``build_data_layer`` calls :func:`configure_logging` once with the
``logging.level`` and ``app.env`` values of the resolved configuration.
Every module logs through ``structlog.get_logger(logger_name=__name__)``
with snake_case event names (``cache_hit``, ``single_flight_joined``,
``circuit_breaker_tripped``, ...).

Production renders one JSON object per line; every other environment gets
the coloured console renderer.  The HTTP client libraries log through the
standard library; they are routed through the same renderer and held at
WARNING or above so per-request lines never drown the cache events.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

# Standard-library loggers of the backend transport.
_TRANSPORT_LOGGERS = ("httpx", "httpcore")


def _shared_processors() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]


def configure_logging(log_level: str = "INFO", json_output: bool = False) -> None:
    """Configure structlog and the transport loggers.

    Args:
        log_level: Minimum level for data-layer events (DEBUG shows every
            cache hit and miss).
        json_output: Render JSON lines instead of console output.
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        raise ValueError(f"unknown log level {log_level!r}")

    renderer: structlog.types.Processor
    if json_output:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())

    structlog.configure(
        processors=[
            *_shared_processors(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=_shared_processors(),
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
        )
    )
    for name in _TRANSPORT_LOGGERS:
        transport_logger = logging.getLogger(name)
        transport_logger.handlers[:] = [handler]
        transport_logger.setLevel(max(level, logging.WARNING))
        transport_logger.propagate = False


def configure_from_config(config: dict[str, Any]) -> None:
    """Apply the ``logging`` and ``app`` sections of a resolved config."""
    configure_logging(
        log_level=config["logging"]["level"],
        json_output=config["app"]["env"] == "production",
    )
