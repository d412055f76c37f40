"""
Structured logging configuration.

Features:
- JSON format for production (machine-parseable)
- Console format for development (human-readable)
- PII filtering so emails, bearer tokens and passwords never reach the logs
- Context binding for user_id and view name
"""

import logging
import re
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor

# Keys whose values are always dropped, whatever they contain
SENSITIVE_KEYS = frozenset(
    {"password", "confirm_password", "access_token", "refresh_token", "apikey"}
)

# Patterns for PII detection
PII_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    # Email addresses
    (re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}"), "[EMAIL_REDACTED]"),
    # Bearer tokens in header dumps or error messages
    (re.compile(r"Bearer\s+[A-Za-z0-9._\-]+"), "Bearer [TOKEN_REDACTED]"),
    # Bare JWTs
    (re.compile(r"eyJ[A-Za-z0-9_\-]+\.[A-Za-z0-9_\-]+\.[A-Za-z0-9_\-]+"), "[TOKEN_REDACTED]"),
]


def _redact_pii_from_value(value: Any) -> Any:
    """Recursively redact PII from a value."""
    if isinstance(value, str):
        result = value
        for pattern, replacement in PII_PATTERNS:
            result = pattern.sub(replacement, result)
        return result
    elif isinstance(value, dict):
        return {
            k: "[REDACTED]" if k in SENSITIVE_KEYS else _redact_pii_from_value(v)
            for k, v in value.items()
        }
    elif isinstance(value, list):
        return [_redact_pii_from_value(item) for item in value]
    return value


def filter_pii(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    """
    Structlog processor that redacts PII from log events.

    Scans all string values in the event dictionary and replaces
    emails and tokens with redacted placeholders.
    """
    return {
        key: "[REDACTED]" if key in SENSITIVE_KEYS else _redact_pii_from_value(value)
        for key, value in event_dict.items()
    }


def add_service_context(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Add service-level context to all log events."""
    event_dict.setdefault("service", "straywatch")
    return event_dict


def configure_logging(
    *,
    json_format: bool = True,
    log_level: str = "INFO",
) -> None:
    """
    Configure structured logging for the application.

    Args:
        json_format: If True, output JSON logs (production).
                    If False, output colored console logs (development).
        log_level: Minimum log level to output.
    """
    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        add_service_context,
        filter_pii,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if json_format:
        processors: list[Processor] = [
            *shared_processors,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = [
            *shared_processors,
            structlog.dev.ConsoleRenderer(colors=True),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, log_level.upper())
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper()),
    )


def get_logger(
    name: str | None = None,
    *,
    user_id: str | None = None,
    view: str | None = None,
) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger with optional context binding.

    Args:
        name: Logger name (typically module name).
        user_id: Identity ID of the signed-in user, if any.
        view: Name of the view controller emitting the log.

    Returns:
        Bound logger with context.

    Example:
        logger = get_logger(__name__, view="report_form")
        logger.info("Report submitted", report_type="bite")
    """
    logger = structlog.get_logger(name)

    bindings: dict[str, Any] = {}
    if user_id:
        bindings["user_id"] = user_id
    if view:
        bindings["view"] = view

    if bindings:
        logger = logger.bind(**bindings)

    return logger


def bind_context(**kwargs: Any) -> None:
    """
    Bind context variables that will be included in all subsequent logs.

    Args:
        **kwargs: Context variables to bind.
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def unbind_context(*keys: str) -> None:
    """Remove the given context variables, leaving the others bound."""
    structlog.contextvars.unbind_contextvars(*keys)


def clear_context() -> None:
    """Clear all bound context variables."""
    structlog.contextvars.clear_contextvars()
