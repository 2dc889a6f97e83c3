"""
Logging setup for forum-events.

Every record, whether emitted through structlog (services, CLI) or the
stdlib ``logging`` module (library code), passes through one structlog
formatter on the root handler: JSON lines in production, a colored
console in development.
"""

import logging
import sys

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from src.config.settings import get_settings

SERVICE_NAME = "forum-events"

# Chatty third-party loggers; provider calls are already logged by geocoding.
_QUIET_LOGGERS = ("httpx", "httpcore", "asyncio", "asyncpg")


def _add_service(_: WrappedLogger, __: str, event_dict: EventDict) -> EventDict:
    event_dict.setdefault("service", SERVICE_NAME)
    return event_dict


def setup_logging(level: str | None = None, json_logs: bool | None = None) -> None:
    """
    Configure structlog and the stdlib root logger.

    Args:
        level: Log level name; defaults to ``Settings.log_level``.
        json_logs: Render JSON; defaults to True in production.

    Usage:
        setup_logging(level="DEBUG")
        logger = structlog.get_logger(__name__)
        logger.info("Indexed event", post_id=123, geocoded=True)
    """
    settings = get_settings()
    level = (level or settings.log_level).upper()
    if json_logs is None:
        json_logs = settings.is_production

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        _add_service,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]

    renderer: Processor
    if json_logs:
        renderer = structlog.processors.JSONRenderer()
        shared_processors.append(structlog.processors.format_exc_info)
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=shared_processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # stdlib records (``logging.getLogger(__name__)``) get the same processors
    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=[structlog.stdlib.ExtraAdder(), *shared_processors],
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )
    handler = logging.StreamHandler(sys.stderr)
    handler.set_name(SERVICE_NAME)
    handler.setFormatter(formatter)

    # Re-running setup replaces our handler and leaves foreign ones alone
    root = logging.getLogger()
    for existing in list(root.handlers):
        if existing.get_name() == SERVICE_NAME:
            root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
