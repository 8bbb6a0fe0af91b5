"""structlog setup for coinfolio.

Everything is routed through stdlib logging, so records from plain stdlib
loggers render through the same handler as ours. Context bound with
structlog.contextvars follows the coroutine: the refresh scheduler binds
``component`` and ``refresh_cycle`` around each tick, so every line logged
by the state merge inside that tick carries the cycle number.
"""

import logging
import os

import structlog

from coinfolio import __version__

SERVICE_NAME = "coinfolio"


def _add_service(logger, method_name: str, event_dict: dict) -> dict:
    event_dict.setdefault("service", SERVICE_NAME)
    event_dict.setdefault("version", __version__)
    return event_dict


def setup_logging(log_level: str = "INFO", log_format: str | None = None) -> None:
    """Configure structlog with JSON or console rendering.

    Args:
        log_level: Root level name, e.g. "DEBUG". Unknown names fall back
            to INFO.
        log_format: "json" or "console". When omitted the LOG_FORMAT
            environment variable decides, defaulting to console.
    """
    if log_format is None:
        log_format = os.environ.get("LOG_FORMAT", "console")
    log_format = log_format.lower()

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if log_format == "json":
        # Machine-readable lines get the service stamp for log aggregation.
        shared_processors.append(_add_service)
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))


def refresh_cycle_context(cycle: int):
    """Bind refresh-cycle context for every log call made inside the block.

    Usage::

        with refresh_cycle_context(3):
            await state.refresh(source)
    """
    return structlog.contextvars.bound_contextvars(component="refresh", refresh_cycle=cycle)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a bound structlog logger with the given name."""
    return structlog.get_logger(name)
