"""
ERP configuration schema.

Frozen dataclasses describing the human-authored configuration set: the
purchase workflow settings, the department routing table used by product
reclassification, and the seeded plan of accounts.  YAML files are parsed
into these types by ``erp_config.loader``.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class CategoryDef:
    """A plan-of-accounts node as declared in configuration."""

    code: str
    name: str
    type: str  # "income" or "expense"
    color: str | None = None
    children: tuple[CategoryDef, ...] = ()

    def walk(self):
        """Yield this node and every descendant, parents first."""
        yield self
        for child in self.children:
            yield from child.walk()


@dataclass(frozen=True)
class PurchasingSettings:
    """Settings of the purchase invoice workflow."""

    payable_term_days: int = 30
    cogs_category: CategoryDef = field(
        default_factory=lambda: CategoryDef(
            code="2.1",
            name="Cost of Goods Sold",
            type="expense",
            color="#fbbf24",
        )
    )
    pricing_notification_role: str = "COMMERCIAL"
    payment_notification_role: str = "FINANCE"


@dataclass(frozen=True)
class ReclassificationSettings:
    """Routing of internal-use product costs to operational categories."""

    default_department: str = "administrative"
    department_routes: tuple[tuple[str, str], ...] = (
        ("logistics", "2.4"),
        ("administrative", "3"),
        ("maintenance", "3"),
    )

    def route_for(self, department: str | None) -> str:
        """Category code for a department; unknown departments use the default."""
        routes = dict(self.department_routes)
        key = (department or "").strip().lower()
        if key in routes:
            return routes[key]
        return routes[self.default_department]


@dataclass(frozen=True)
class ErpConfig:
    """The complete, validated configuration set."""

    config_id: str
    version: int
    purchasing: PurchasingSettings
    reclassification: ReclassificationSettings
    chart_of_accounts: tuple[CategoryDef, ...] = ()
    checksum: str = ""

    def category_codes(self) -> set[str]:
        """Every code declared in the plan of accounts."""
        return {node.code for root in self.chart_of_accounts for node in root.walk()}
