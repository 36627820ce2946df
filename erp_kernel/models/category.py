"""
Module: erp_kernel.models.category
Responsibility: ORM persistence for plan-of-accounts categories (income and
    expense buckets) used to tag ledger entries.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - Category identity for reporting is the stable ``code`` ("2.1" = Cost of
      Goods Sold, "2.4" = Freight, "3" = Fixed/Operational Expenses), not the
      display name.
    - is_system marks seeded categories; they are never deleted by this core.

Audit relevance:
    The CMV (2.1) versus operational (2.x / 3.x) split drives the gross-margin
    line of every downstream report.  Moving a ledger entry between
    categories is therefore done only by the reclassification workflow.
"""

from __future__ import annotations

from enum import Enum
from uuid import UUID

from sqlalchemy import Boolean, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from erp_kernel.db.base import TrackedBase


class CategoryType(str, Enum):
    """Direction of the ledger bucket."""

    INCOME = "income"
    EXPENSE = "expense"


class Category(TrackedBase):
    """
    A node in the tenant's plan of accounts.

    Guarantees:
        - (tenant_id, code, is_system) is indexed for the system-code lookup.
        - (tenant_id, name, type) is indexed for the name fallback lookup.
        - level is 0 for group nodes and parent.level + 1 for children.
    """

    __tablename__ = "categories"

    __table_args__ = (
        Index("idx_category_tenant_code_system", "tenant_id", "code", "is_system"),
        Index("idx_category_tenant_name_type", "tenant_id", "name", "type"),
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    type: Mapped[CategoryType] = mapped_column(String(20), nullable=False)

    code: Mapped[str | None] = mapped_column(String(50), nullable=True)

    color: Mapped[str | None] = mapped_column(String(20), nullable=True)

    level: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    parent_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("categories.id"),
        nullable=True,
    )

    is_system: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    def __repr__(self) -> str:
        return f"<Category {self.code} {self.name} ({self.type})>"
