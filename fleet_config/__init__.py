"""
fleet_config -- single public entrypoint for pricing configuration.

Responsibility:
    Provides the runtime way to obtain the YAML-sourced pricing constants
    (``get_calculation_config()``) and the fallback tax indices
    (``get_default_tax_indices()``).  Values persisted in the database
    take precedence; see ``ReferenceSelector.get_calculation_config``.

Architecture position:
    Configuration -- sits beside ``fleet_kernel`` and below the service
    layer.  The pure engines never import it: configuration is resolved
    by services and passed in.

Failure modes:
    - ``FileNotFoundError`` -- the configuration file does not exist.
    - ``KeyError`` / ``ValueError`` -- missing or malformed entries.

Audit relevance:
    Every successful call emits a ``FLEET_CONFIG_TRACE`` log entry with
    the config id, version, section and checksum, tying each priced quote
    back to the configuration that governed it.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from fleet_config.loader import (
    compute_checksum,
    load_yaml_file,
    parse_calculation_config,
    parse_tax_indices,
)
from fleet_kernel.domain.calculation_config import CalculationConfig
from fleet_kernel.domain.reference import TaxIndexSnapshot

_logger = logging.getLogger("fleet_kernel.config")

DEFAULT_CONFIG_PATH = Path(__file__).parent / "defaults" / "calculation.yaml"


def _load_section(path: Path | None, section: str) -> dict[str, Any]:
    config_path = path or DEFAULT_CONFIG_PATH
    data = load_yaml_file(config_path)
    section_data = data[section]
    _logger.info(
        "FLEET_CONFIG_TRACE",
        extra={
            "trace_type": "FLEET_CONFIG_TRACE",
            "config_id": data.get("config_id"),
            "config_version": data.get("version"),
            "section": section,
            "source": str(config_path),
            "checksum": compute_checksum(section_data),
        },
    )
    return section_data


def get_calculation_config(path: Path | None = None) -> CalculationConfig:
    """Load the pricing constants from YAML (packaged defaults if no path)."""
    return parse_calculation_config(_load_section(path, "calculation"))


def get_default_tax_indices(path: Path | None = None) -> TaxIndexSnapshot:
    """Load the fallback tax indices from YAML (packaged defaults if no path)."""
    return parse_tax_indices(_load_section(path, "tax_indices"))


__all__ = [
    "DEFAULT_CONFIG_PATH",
    "get_calculation_config",
    "get_default_tax_indices",
]
