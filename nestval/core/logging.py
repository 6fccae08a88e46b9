"""Structured Logging for nestval

structlog-based logging for rule construction, message resolution and
schema processing. Every domain logger wraps a stdlib logger under the
``nestval`` hierarchy, which carries only a ``NullHandler``: until the host
application configures stdlib logging, or calls ``configure_logging``, events
obey stdlib levels and nothing is written to stdout or stderr.

Events worth knowing:
- ``message_missing`` (warning): a failure had no template in any locale
- ``translations_loaded`` (info): a translator read its load path
- ``rule_skipped`` / ``rules_applied`` / ``schema_applied`` (debug)
"""
import logging
import sys

import structlog
from structlog.types import EventDict, Processor

from nestval.core.config import settings

logging.getLogger("nestval").addHandler(logging.NullHandler())


def _add_library_info(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    event_dict.setdefault("library", "nestval")
    return event_dict


def _truncate_inputs(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Keep validated payloads from flooding log lines."""
    for key in ("input", "value"):
        if key in event_dict:
            text = repr(event_dict[key])
            event_dict[key] = text if len(text) <= 80 else text[:77] + "..."
    return event_dict


def _processors() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        _add_library_info,
        _truncate_inputs,
    ]


def configure_logging(level: str | None = None, json_logs: bool | None = None) -> None:
    """Route nestval's events through the stdlib ``nestval`` logger.

    Args:
        level: Log level; ``NESTVAL_LOG_LEVEL`` when omitted
        json_logs: JSON lines instead of console output; ``NESTVAL_LOG_JSON`` when omitted
    """
    level = level or settings.LOG_LEVEL
    json_logs = settings.LOG_JSON if json_logs is None else json_logs

    renderer = (
        structlog.processors.JSONRenderer() if json_logs
        else structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
    )
    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=_processors(),
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
    )
    structlog.configure(
        processors=[*_processors(), structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)
    library_logger = logging.getLogger("nestval")
    library_logger.handlers = [handler]
    library_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    library_logger.propagate = False


def get_logger(name: str = __name__) -> structlog.stdlib.BoundLogger:
    """structlog logger over ``logging.getLogger(name)``.

    The stdlib logger is bound explicitly so structlog's own print-based
    default factory is never used; processors still come from the current
    structlog configuration on each call.
    """
    return structlog.wrap_logger(logging.getLogger(name), wrapper_class=structlog.stdlib.BoundLogger)


def bind_context(**kwargs) -> None:
    """Attach key-value pairs (e.g. a request id) to every event in this context."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()


class LoggerRegistry:
    """One logger per library domain, created on first use."""

    _loggers: dict[str, structlog.stdlib.BoundLogger] = {}

    @classmethod
    def get(cls, domain: str) -> structlog.stdlib.BoundLogger:
        if domain not in cls._loggers:
            cls._loggers[domain] = get_logger(f"nestval.{domain}")
        return cls._loggers[domain]


def rules_logger() -> structlog.stdlib.BoundLogger:
    """Rule construction and application."""
    return LoggerRegistry.get("rules")


def messages_logger() -> structlog.stdlib.BoundLogger:
    """Message resolution and template loading."""
    return LoggerRegistry.get("messages")


def schema_logger() -> structlog.stdlib.BoundLogger:
    """Schema processing."""
    return LoggerRegistry.get("schema")
