"""
chefbook_gate.observability.logging

Structured JSON logging for the gateway.

Responsibilities:
- Configure `structlog` on top of stdlib logging, rendering one JSON object per event.
- Scrub credentials (tokens, passwords, payment signatures) from every event,
  including inside nested dicts.
- Provide a small wrapper for obtaining bound loggers.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Mapping
from typing import Any

import structlog
from structlog.tracebacks import ExceptionDictTransformer

SENSITIVE_KEYS = frozenset(
    {"authorization", "token", "access_token", "password", "signature", "jwt_secret"}
)
REDACTED = "[redacted]"

# Third-party loggers that are noisy at INFO; the middleware already logs each request.
_QUIET_LOGGERS = ("uvicorn.access", "aiosqlite", "sqlalchemy.engine")


def configure_logging(*, service_name: str, level: str) -> None:
    log_level = logging.getLevelName(level.upper())
    if not isinstance(log_level, int):
        log_level = logging.INFO
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=log_level)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            *event_processors(service_name),
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def event_processors(service_name: str) -> list[Any]:
    """
    Logger-independent part of the pipeline. Tracebacks are rendered as dicts
    without frame locals, then the whole event (tracebacks included) is scrubbed.
    """

    return [
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        _service_name_adder(service_name),
        structlog.processors.ExceptionRenderer(ExceptionDictTransformer(show_locals=False)),
        scrub_sensitive,
    ]


def _service_name_adder(service_name: str):
    def processor(_: Any, __: str, event_dict: dict[str, Any]) -> dict[str, Any]:
        event_dict.setdefault("service", service_name)
        return event_dict

    return processor


def _scrub(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {
            k: REDACTED if str(k).lower() in SENSITIVE_KEYS else _scrub(v)
            for k, v in value.items()
        }
    if isinstance(value, list | tuple):
        return [_scrub(v) for v in value]
    return value


def scrub_sensitive(_: Any, __: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """structlog processor: replace credential-bearing values with `REDACTED`."""

    for key, value in list(event_dict.items()):
        event_dict[key] = REDACTED if key.lower() in SENSITIVE_KEYS else _scrub(value)
    return event_dict


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


# --- Module Notes -----------------------------------------------------------
# Request-scoped metadata is bound via contextvars in `observability.middleware`.
