"""
Logging Configuration

Structured logging setup using structlog. Parse anomalies, upstream
failures and persistence failures are all emitted as snake_case events;
events raised during an auction cycle carry the cycle's auction id.
"""
import logging
import sys
from contextlib import contextmanager
from typing import Any, Iterator, Optional

import structlog
from structlog.types import EventDict, Processor

from config.settings import settings

APP_NAME = "sheriffsale"


def add_app_context(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    event_dict["environment"] = settings.environment
    event_dict["app"] = APP_NAME
    return event_dict


def _renderer_chain(log_format: str) -> list:
    if log_format == "json":
        return [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    return [structlog.processors.ExceptionRenderer(), structlog.dev.ConsoleRenderer()]


def setup_logging(level: Optional[str] = None, log_format: Optional[str] = None) -> structlog.BoundLogger:
    """
    Configure structured logging for the pipeline and its scripts.

    Args:
        level: Log level name (defaults to settings.log_level)
        log_format: "json" or "console" (defaults to settings.log_format)

    Returns:
        Configured structlog logger instance
    """
    level_name = (level or settings.log_level).upper()
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level_name, logging.INFO),
    )

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        add_app_context,
    ]
    processors.extend(_renderer_chain(log_format or settings.log_format))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    return structlog.get_logger(APP_NAME)


@contextmanager
def cycle_context(auction_id: Optional[str] = None, stage: Optional[str] = None) -> Iterator[None]:
    """
    Bind the auction id and pipeline stage to every event logged inside the block.

    Usage:
        with cycle_context(auction_id="032019", stage="enrichment"):
            orchestrator.run("032019")
    """
    values = {key: value for key, value in (("auction_id", auction_id), ("stage", stage)) if value}
    with structlog.contextvars.bound_contextvars(**values):
        yield


def get_logger(name: str = None) -> structlog.BoundLogger:
    """
    Get a logger instance for a specific module.

    Args:
        name: Logger name (typically __name__)
    """
    if name:
        return structlog.get_logger(name)
    return structlog.get_logger()
