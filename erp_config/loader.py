"""
Configuration Loader (``erp_config.loader``).

Responsibility
--------------
Loads a YAML configuration file and parses it into typed
``erp_config.schema`` dataclass instances.  The single public entry point
for runtime config is ``erp_config.get_active_config()``.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys in parsed dict  -> ``KeyError`` propagates.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from erp_config.schema import (
    CategoryDef,
    ErpConfig,
    PurchasingSettings,
    ReclassificationSettings,
)


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def parse_category(data: dict[str, Any]) -> CategoryDef:
    """Parse a CategoryDef (and its children) from a dict."""
    return CategoryDef(
        code=str(data["code"]),
        name=data["name"],
        type=data["type"],
        color=data.get("color"),
        children=tuple(parse_category(c) for c in data.get("children", [])),
    )


def parse_purchasing(data: dict[str, Any]) -> PurchasingSettings:
    """Parse PurchasingSettings; absent keys keep their defaults."""
    defaults = PurchasingSettings()
    cogs = data.get("cogs_category")
    return PurchasingSettings(
        payable_term_days=int(data.get("payable_term_days", defaults.payable_term_days)),
        cogs_category=parse_category(cogs) if cogs else defaults.cogs_category,
        pricing_notification_role=data.get(
            "pricing_notification_role", defaults.pricing_notification_role
        ),
        payment_notification_role=data.get(
            "payment_notification_role", defaults.payment_notification_role
        ),
    )


def parse_reclassification(data: dict[str, Any]) -> ReclassificationSettings:
    """Parse ReclassificationSettings; routes keep YAML order."""
    defaults = ReclassificationSettings()
    routes = data.get("department_routes")
    return ReclassificationSettings(
        default_department=data.get("default_department", defaults.default_department),
        department_routes=(
            tuple((str(k).lower(), str(v)) for k, v in routes.items())
            if routes
            else defaults.department_routes
        ),
    )


def compute_checksum(data: dict[str, Any]) -> str:
    """Deterministic SHA-256 of the parsed YAML document."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def load_config(path: Path) -> ErpConfig:
    """
    Parse a configuration file into an ``ErpConfig``.

    Raises:
        FileNotFoundError: if the file does not exist.
        KeyError: if a required key is missing.
    """
    data = load_yaml_file(path)
    return ErpConfig(
        config_id=data["config_id"],
        version=int(data.get("version", 1)),
        purchasing=parse_purchasing(data.get("purchasing", {})),
        reclassification=parse_reclassification(data.get("reclassification", {})),
        chart_of_accounts=tuple(
            parse_category(c) for c in data.get("chart_of_accounts", [])
        ),
        checksum=compute_checksum(data),
    )
