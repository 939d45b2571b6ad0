"""Logging configuration for Shipyard."""

import logging
import re
import sys
from typing import Any, Optional

import structlog
from structlog.types import EventDict, Processor

from shipyard.config import Settings, get_settings

REDACTED = "***REDACTED***"
SENSITIVE_KEYS = {"password", "secret", "token", "authorization", "api_key"}
SHORT_ID_LENGTH = 12

# "-e NAME=value" pairs inside a rendered docker command line
_ENV_ARG = re.compile(r"(-e\s+)([^=\s]+)=(\S*)")


def _is_sensitive(name: str) -> bool:
    return any(sensitive in name.lower() for sensitive in SENSITIVE_KEYS)


def add_timestamp(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Add timestamp to log entry."""
    from datetime import datetime, timezone

    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


def shorten_container_ids(
    logger: Any, method_name: str, event_dict: EventDict
) -> EventDict:
    """Cut engine container ids to the short form ``docker ps`` shows."""
    for key in ("runtime_id", "container_id"):
        value = event_dict.get(key)
        if isinstance(value, str) and len(value) > SHORT_ID_LENGTH:
            event_dict[key] = value[:SHORT_ID_LENGTH]
    return event_dict


def censor_sensitive_keys(
    logger: Any, method_name: str, event_dict: EventDict
) -> EventDict:
    """Remove credentials from log entries.

    Container environments are checked too, both as an ``environment``
    mapping and as ``-e NAME=value`` arguments of a logged ``command``.
    """
    for key in list(event_dict.keys()):
        if _is_sensitive(key):
            event_dict[key] = REDACTED

    environment = event_dict.get("environment")
    if isinstance(environment, dict):
        event_dict["environment"] = {
            name: REDACTED if _is_sensitive(name) else value
            for name, value in environment.items()
        }

    command = event_dict.get("command")
    if isinstance(command, str):
        event_dict["command"] = _ENV_ARG.sub(
            lambda m: f"{m.group(1)}{m.group(2)}={REDACTED}"
            if _is_sensitive(m.group(2))
            else m.group(0),
            command,
        )

    return event_dict


def setup_logging(settings: Optional[Settings] = None, verbose: bool = False) -> None:
    """Configure structured logging.

    Args:
        settings: Settings to read level and format from (defaults to the global ones)
        verbose: Log at DEBUG regardless of the configured level
    """
    settings = settings or get_settings()
    level = "DEBUG" if verbose else settings.log_level

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        add_timestamp,
        shorten_container_ids,
        censor_sensitive_keys,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if settings.log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(
                colors=sys.stderr.isatty(),
                exception_formatter=structlog.dev.plain_traceback,
            )
        )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level),
    )


def bind_run_context(**values: Any) -> None:
    """Attach values (start file, state file) to every following log entry."""
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(**values)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a logger instance."""
    return structlog.get_logger(name)


def log_error(
    logger: structlog.stdlib.BoundLogger,
    error: Exception,
    operation: str,
    container_id: str | None = None,
    **kwargs: Any,
) -> None:
    """Log a failed CLI operation with its error context."""
    context = {
        "operation": operation,
        "error_type": type(error).__name__,
        "error_message": str(error),
    }
    if container_id:
        context["container_id"] = container_id
    context.update(getattr(error, "context", {}) or {})
    context.update(kwargs)

    logger.error("operation_failed", **context)
