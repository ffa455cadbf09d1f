"""
Configuration Loader (``fleet_config.loader``).

Responsibility
--------------
Loads YAML configuration files and parses them into the kernel's frozen
value objects (``CalculationConfig``, ``TaxIndexSnapshot``).  Runtime
callers go through ``fleet_config.get_calculation_config()`` and
``fleet_config.get_default_tax_indices()``; this module is the parsing
toolkit behind them.

Architecture position
---------------------
**Config layer** -- infrastructure tooling.  Depends on
``fleet_kernel.domain`` for the target types only.

Invariants enforced
-------------------
* All parse errors raise ``ValueError`` or ``KeyError`` with descriptive
  messages; no silent defaults for required keys.
* Numeric values are converted to ``Decimal`` through ``str`` so YAML
  floats never leak binary artifacts into pricing.
* ``compute_checksum`` produces a deterministic SHA-256 hash for
  configuration identity and change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys  -> ``KeyError`` propagates.
* Non-numeric values or a wrong severity table  -> ``ValueError``.
"""

from __future__ import annotations

import hashlib
import json
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from fleet_kernel.domain.calculation_config import CalculationConfig
from fleet_kernel.domain.contract import MAX_SEVERITY, MIN_SEVERITY
from fleet_kernel.domain.reference import SelicRates, TaxIndexSnapshot
from fleet_kernel.domain.values import to_decimal


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def parse_decimal(value: Any, name: str) -> Decimal:
    """Parse a numeric YAML value (string, int or float) as Decimal."""
    if value is None or isinstance(value, bool):
        raise ValueError(f"{name}: expected a number, got {value!r}")
    try:
        return to_decimal(value if isinstance(value, (int, float, Decimal)) else str(value))
    except (InvalidOperation, TypeError) as exc:
        raise ValueError(f"{name}: expected a number, got {value!r}") from exc


def parse_severity_multipliers(data: dict[Any, Any]) -> tuple[Decimal, ...]:
    """
    Parse the severity table, keyed 1..6.

    Raises:
        ValueError: if a severity is missing or an unexpected key appears.
    """
    table = {int(k): v for k, v in data.items()}
    expected = set(range(MIN_SEVERITY, MAX_SEVERITY + 1))
    if set(table) != expected:
        raise ValueError(
            f"severity_multipliers must define severities "
            f"{MIN_SEVERITY}..{MAX_SEVERITY}, got {sorted(table)}"
        )
    return tuple(
        parse_decimal(table[s], f"severity_multipliers.{s}")
        for s in range(MIN_SEVERITY, MAX_SEVERITY + 1)
    )


def parse_calculation_config(data: dict[str, Any]) -> CalculationConfig:
    """Parse a ``CalculationConfig`` from the ``calculation`` section."""
    return CalculationConfig(
        base_rate=parse_decimal(data["base_rate"], "base_rate"),
        severity_multipliers=parse_severity_multipliers(data["severity_multipliers"]),
        tracking_cost=parse_decimal(data["tracking_cost"], "tracking_cost"),
        extra_km_percentage=parse_decimal(
            data["extra_km_percentage"], "extra_km_percentage"
        ),
    )


def parse_tax_indices(data: dict[str, Any]) -> TaxIndexSnapshot:
    """Parse a ``TaxIndexSnapshot`` from the ``tax_indices`` section."""
    selic = data["selic"]
    return TaxIndexSnapshot(
        ipca=parse_decimal(data["ipca"], "ipca"),
        igpm=parse_decimal(data["igpm"], "igpm"),
        spread=parse_decimal(data["spread"], "spread"),
        selic_rates=SelicRates(
            month12=parse_decimal(selic["month12"], "selic.month12"),
            month18=parse_decimal(selic["month18"], "selic.month18"),
            month24=parse_decimal(selic["month24"], "selic.month24"),
        ),
    )


def compute_checksum(data: dict[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Identical ``data`` always produces identical checksums.
    """
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
