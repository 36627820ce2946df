"""
Configuration validator (``erp_config.validator``).

Checks a parsed ``ErpConfig`` for internal consistency before it is handed to
any service.  Returns the list of problems; ``get_active_config`` raises
``ValueError`` when the list is non-empty.
"""

from __future__ import annotations

from erp_config.schema import ErpConfig

_CATEGORY_TYPES = frozenset({"income", "expense"})


def validate_configuration(config: ErpConfig) -> list[str]:
    """Return human-readable validation errors (empty list when valid)."""
    errors: list[str] = []

    purchasing = config.purchasing
    if purchasing.payable_term_days < 0:
        errors.append(
            f"purchasing.payable_term_days cannot be negative: {purchasing.payable_term_days}"
        )
    if not purchasing.cogs_category.code:
        errors.append("purchasing.cogs_category.code is required")
    if purchasing.cogs_category.type != "expense":
        errors.append("purchasing.cogs_category must be an expense category")

    seen: set[str] = set()
    for root in config.chart_of_accounts:
        for node in root.walk():
            if node.type not in _CATEGORY_TYPES:
                errors.append(f"category {node.code}: unknown type '{node.type}'")
            if node.code in seen:
                errors.append(f"category {node.code}: duplicate code")
            seen.add(node.code)

    routes = dict(config.reclassification.department_routes)
    if config.reclassification.default_department not in routes:
        errors.append(
            "reclassification.default_department "
            f"'{config.reclassification.default_department}' has no route"
        )
    if seen:
        for department, code in routes.items():
            if code not in seen:
                errors.append(
                    f"reclassification route {department} -> {code}: "
                    "code not in chart_of_accounts"
                )
        if purchasing.cogs_category.code not in seen:
            errors.append(
                f"purchasing.cogs_category.code {purchasing.cogs_category.code} "
                "not in chart_of_accounts"
            )

    return errors
