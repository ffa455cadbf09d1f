"""
Structured JSON logging for the fleet quote kernel.

Every record under the ``fleet_kernel`` logger is written as one JSON
object per line.  Request-scoped identifiers (correlation id, the quote
being worked on, the acting user) are carried in context variables and
merged into each record, so services only bind them once:

    with LogContext.bind(quote_id=quote.id, actor_id=actor.id):
        logger.info("quote_repriced", extra={"new_total": total})

Money is emitted as a decimal string, never a float.  Status and other
enums are emitted by value.

The level defaults to ``FLEET_LOG_LEVEL`` when set, else INFO.
"""

__all__ = [
    "StructuredFormatter",
    "LogContext",
    "get_logger",
    "configure_logging",
    "reset_logging",
]

import json
import logging
import os
import sys
import threading
from collections.abc import Mapping
from contextvars import ContextVar
from datetime import UTC, date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, TextIO
from uuid import UUID

LOG_LEVEL_ENV = "FLEET_LOG_LEVEL"

_LOGGER_PREFIX = "fleet_kernel"

_CONTEXT_FIELDS = ("correlation_id", "quote_id", "actor_id")

_context: ContextVar[Mapping[str, str]] = ContextVar("fleet_log_context", default={})


class LogContext:
    """Request-scoped log fields, safe across threads and asyncio tasks."""

    @staticmethod
    def _coerce(fields: Mapping[str, Any]) -> dict[str, str]:
        unknown = set(fields) - set(_CONTEXT_FIELDS)
        if unknown:
            raise TypeError(f"Unknown log context field(s): {sorted(unknown)}")
        return {k: str(v) for k, v in fields.items() if v is not None}

    @classmethod
    def set(cls, **fields: Any) -> None:
        """Merge fields into the current context. None values are ignored."""
        _context.set({**_context.get(), **cls._coerce(fields)})

    @classmethod
    def get_all(cls) -> dict[str, str]:
        return dict(_context.get())

    @classmethod
    def clear(cls) -> None:
        _context.set({})

    @classmethod
    def bind(cls, **fields: Any) -> "_BoundContext":
        """Context manager: merge fields on entry, restore the previous set on exit."""
        return _BoundContext(cls._coerce(fields))


class _BoundContext:
    def __init__(self, fields: dict[str, str]):
        self._fields = fields
        self._token = None

    def __enter__(self) -> type[LogContext]:
        self._token = _context.set({**_context.get(), **self._fields})
        return LogContext

    def __exit__(self, *exc: Any) -> None:
        _context.reset(self._token)


def _json_value(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (Decimal, UUID)):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Mapping):
        return {str(k): _json_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_json_value(v) for v in value]
    return value


# Attributes every LogRecord carries; anything else came in through ``extra``.
_RECORD_ATTRS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "taskName"}


class StructuredFormatter(logging.Formatter):
    """Render a log record as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **LogContext.get_all(),
        }
        for key, value in vars(record).items():
            if key not in _RECORD_ATTRS:
                payload.setdefault(key, value)

        if record.exc_info and record.exc_info[1] is not None:
            payload.update(self._exception_fields(record.exc_info[1]))
            payload["traceback"] = self.formatException(record.exc_info)

        return json.dumps(_json_value(payload), default=str)

    @staticmethod
    def _exception_fields(exc: BaseException) -> dict[str, Any]:
        fields: dict[str, Any] = {
            "exc_type": type(exc).__name__,
            "exc_message": str(exc),
        }
        code = getattr(exc, "code", None)
        if code is not None:
            fields["exc_code"] = code
        # FleetQuoteError subclasses keep their context as public attributes
        for key, value in vars(exc).items():
            if not key.startswith("_") and key != "code":
                fields[f"exc_{key}"] = value
        return fields


def get_logger(name: str) -> logging.Logger:
    """Logger under the ``fleet_kernel`` namespace, e.g. ``fleet_kernel.services.quote_status``."""
    return logging.getLogger(f"{_LOGGER_PREFIX}.{name}")


def _level_from_env() -> int:
    raw = os.environ.get(LOG_LEVEL_ENV)
    if not raw:
        return logging.INFO
    level = logging.getLevelName(raw.strip().upper())
    if not isinstance(level, int):
        raise ValueError(f"{LOG_LEVEL_ENV} has an unknown level: {raw!r}")
    return level


_configured = False
_lock = threading.Lock()


def configure_logging(
    *,
    level: int | None = None,
    stream: TextIO | None = None,
    handler: logging.Handler | None = None,
) -> None:
    """Attach the JSON handler to the ``fleet_kernel`` logger. Later calls are no-ops."""
    global _configured
    if level is None:
        level = _level_from_env()
    with _lock:
        if _configured:
            return
        _configured = True

    logger = logging.getLogger(_LOGGER_PREFIX)
    logger.setLevel(level)
    logger.propagate = False

    if handler is None:
        handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(StructuredFormatter())
    logger.addHandler(handler)


def reset_logging() -> None:
    """Detach handlers and allow configure_logging to run again. Used by tests."""
    global _configured
    with _lock:
        _configured = False
    logger = logging.getLogger(_LOGGER_PREFIX)
    logger.handlers.clear()
    logger.setLevel(logging.WARNING)
