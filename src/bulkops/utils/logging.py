"""structlog configuration and the operation audit sink.

Usage:
    from bulkops.utils.logging import AuditLog, configure_logging

    configure_logging(load_settings())
    audit = AuditLog().bind(operation="copy")
    audit.record("batch.item", source="/src/a.txt", status="ok")

Environment:
    BULKOPS_LOG_LEVEL: DEBUG, INFO (default), WARNING, ERROR, CRITICAL
    BULKOPS_LOG_JSON: Set to '1', 'true', 'yes' for JSON log lines
"""

import logging
import sys
from typing import Any

import structlog

from bulkops.core.config import Settings


def _stderr_logger_factory(*_args: Any) -> structlog.PrintLogger:
    # Resolve sys.stderr per logger so redirected streams are honoured
    return structlog.PrintLogger(file=sys.stderr)


def configure_logging(settings: Settings) -> None:
    """Configure structlog processors, level and renderer.

    Log lines go to stderr so command output on stdout stays parseable.

    Args:
        settings: Resolved settings (level and renderer choice)
    """
    renderer: Any = (
        structlog.processors.JSONRenderer()
        if settings.log_json
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    level = logging.getLevelNamesMapping().get(settings.log_level, logging.INFO)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=_stderr_logger_factory,
        cache_logger_on_first_use=False,
    )


class AuditLog:
    """Operation audit sink backed by a structlog logger.

    A failure while logging is dropped so it can never fail a batch.
    """

    def __init__(self, logger: Any = None) -> None:
        """Initialize audit log.

        Args:
            logger: Optional structlog logger instance
        """
        self._logger = logger or structlog.get_logger("bulkops.audit")

    def bind(self, **fields: Any) -> "AuditLog":
        """Return an audit log carrying ``fields`` on every record."""
        try:
            return AuditLog(self._logger.bind(**fields))
        except Exception:
            return self

    def record(self, event: str, *, level: str = "info", **fields: Any) -> None:
        """Emit one audit record.

        Args:
            event: Dotted event name (e.g. 'batch.item')
            level: structlog method name
            **fields: Free-form record fields
        """
        try:
            getattr(self._logger, level)(event, **fields)
        except Exception:
            return
