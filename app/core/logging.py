# app/core/logging.py
from __future__ import annotations

import logging
from typing import Any, Dict

import structlog

from app.core.config import Settings

_REDACT_KEYS = ("password", "token", "secret", "authorization")


def _redact_secrets(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Mask values whose key looks like a credential; raw tokens never reach the log sink."""
    for key, value in list(event_dict.items()):
        if key == "event":
            continue
        if any(marker in key.lower() for marker in _REDACT_KEYS) and isinstance(value, str):
            event_dict[key] = "***"
    return event_dict


def setup_logging(settings: Settings) -> None:
    level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
    logging.basicConfig(format="%(message)s", level=level)

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        _redact_secrets,
        structlog.processors.StackInfoRenderer(),
    ]
    if settings.LOG_JSON:
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        processors += [structlog.dev.ConsoleRenderer(colors=False)]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str):
    return structlog.get_logger(name)
