"""
``@traced_engine``: one FLEET_ENGINE_TRACE debug record per engine call.

The record names the engine and its version, the elapsed time, and a short
fingerprint of the selected inputs.  Two calls that price the same vehicle
under the same parameters and indices share a fingerprint, which is how a
repriced quote can be matched to the inputs it was priced from.  The
wrapped function's arguments and return value are left untouched.

    @traced_engine("vehicle_cost", "1.0", fingerprint_fields=("vehicle", "params"))
    def compute_vehicle_cost(vehicle, group, params, ...):
        ...
"""

from __future__ import annotations

import dataclasses
import functools
import hashlib
import inspect
import logging
import time
from collections.abc import Callable, Mapping
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

from fleet_kernel.logging_config import get_logger

TRACE_MESSAGE = "FLEET_ENGINE_TRACE"

_logger = get_logger("engines.tracer")


def _canonical(value: Any) -> str:
    match value:
        case None:
            return "null"
        case Enum():
            return str(value.value)
        case Decimal():
            # 1.50 and 1.5 price the same
            return str(value.normalize()) if value.is_finite() else str(value)
        case bool() | int() | float() | str() | UUID():
            return str(value)
        case datetime() | date():
            return value.isoformat()
        case Mapping():
            pairs = sorted((str(k), _canonical(v)) for k, v in value.items())
            return "{" + ",".join(f"{k}:{v}" for k, v in pairs) + "}"
        case list() | tuple():
            return "[" + ",".join(_canonical(v) for v in value) + "]"
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return type(value).__name__ + _canonical(
            {f.name: getattr(value, f.name) for f in dataclasses.fields(value)}
        )
    return repr(value)


def compute_input_fingerprint(
    fingerprint_fields: tuple[str, ...],
    arguments: Mapping[str, Any],
) -> str:
    """16 hex characters of SHA-256 over the named arguments. Absent names count as null."""
    canonical = "|".join(
        f"{name}={_canonical(arguments.get(name))}" for name in fingerprint_fields
    )
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:16]


def traced_engine(
    engine_name: str,
    engine_version: str,
    fingerprint_fields: tuple[str, ...] = (),
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        signature = inspect.signature(func)
        unknown = set(fingerprint_fields) - set(signature.parameters)
        if unknown:
            raise TypeError(
                f"{func.__qualname__} has no parameter(s) {sorted(unknown)} to fingerprint"
            )

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            fingerprint = ""
            if fingerprint_fields and _logger.isEnabledFor(logging.DEBUG):
                bound = signature.bind_partial(*args, **kwargs)
                fingerprint = compute_input_fingerprint(fingerprint_fields, bound.arguments)

            started = time.perf_counter()
            result = func(*args, **kwargs)
            elapsed_ms = round((time.perf_counter() - started) * 1000, 3)

            _logger.debug(
                TRACE_MESSAGE,
                extra={
                    "trace_type": TRACE_MESSAGE,
                    "engine_name": engine_name,
                    "engine_version": engine_version,
                    "input_fingerprint": fingerprint,
                    "duration_ms": elapsed_ms,
                    "function": func.__qualname__,
                },
            )
            return result

        return wrapper

    return decorator
