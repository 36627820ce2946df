"""
erp_config -- single public entrypoint for ERP configuration.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_active_config()``.  Services receive the returned ``ErpConfig`` by
    constructor injection; no service reads configuration files directly.

Failure modes:
    - ``FileNotFoundError`` -- the configuration file does not exist.
    - ``ValueError`` -- the configuration failed validation.

Audit relevance:
    Every successful ``get_active_config()`` call emits an
    ``ERP_CONFIG_TRACE`` log entry carrying config_id, version and checksum,
    tying each posted ledger entry back to the configuration that governed
    its payable term and category routing.
"""

from __future__ import annotations

import logging
from pathlib import Path

from erp_config.loader import load_config
from erp_config.schema import (
    CategoryDef,
    ErpConfig,
    PurchasingSettings,
    ReclassificationSettings,
)
from erp_config.validator import validate_configuration

_logger = logging.getLogger("erp_kernel.config")

_DEFAULT_CONFIG_PATH = Path(__file__).parent / "sets" / "default.yaml"


def get_active_config(config_path: Path | None = None) -> ErpConfig:
    """The ONLY public configuration entrypoint.

    Args:
        config_path: Override path to a YAML configuration file.
            Defaults to erp_config/sets/default.yaml.

    Returns:
        A validated, frozen ``ErpConfig``.

    Raises:
        FileNotFoundError: If the file is missing.
        ValueError: If validation fails.
    """
    path = config_path or _DEFAULT_CONFIG_PATH
    config = load_config(path)

    errors = validate_configuration(config)
    if errors:
        raise ValueError(
            f"Configuration {config.config_id} v{config.version} is invalid: "
            + "; ".join(errors)
        )

    _logger.info(
        "ERP_CONFIG_TRACE",
        extra={
            "trace_type": "ERP_CONFIG_TRACE",
            "config_id": config.config_id,
            "config_version": config.version,
            "checksum": config.checksum,
            "category_count": len(config.category_codes()),
        },
    )
    return config


__all__ = [
    "CategoryDef",
    "ErpConfig",
    "PurchasingSettings",
    "ReclassificationSettings",
    "get_active_config",
]
