"""
CategoryService -- plan-of-accounts resolution and seeding.

Responsibility:
    Finds the category a ledger entry should be tagged with, creating the
    well-known system category when a tenant has never been seeded, and
    seeds the configured two-level plan of accounts on demand.

Architecture position:
    Kernel > Services.  Flush-only; the calling module facade owns the
    transaction.

Resolution order (``resolve_or_create``):
    1. A system category with the requested code.
    2. Any category with the fallback name and the requested type.
    3. A new system category with the requested code, name and color.

The name fallback keeps tenants whose plan of accounts was created by hand
(and therefore carries no system codes) working without duplicating their
buckets.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol
from uuid import UUID

from sqlalchemy import select

from erp_kernel.exceptions import CategoryNotFoundError
from erp_kernel.logging_config import get_logger
from erp_kernel.models.category import Category, CategoryType
from erp_kernel.services.base import BaseService

logger = get_logger("services.category")


class CategoryNode(Protocol):
    """Shape of a plan-of-accounts node handed to ``ensure_system_categories``."""

    code: str
    name: str
    type: str
    color: str | None
    children: tuple


def _level_of(code: str) -> int:
    return code.count(".")


class CategoryService(BaseService[Category]):
    """Resolves and seeds plan-of-accounts categories for a tenant."""

    def _find_system_by_code(self, tenant_id: UUID, code: str) -> Category | None:
        stmt = (
            select(Category)
            .where(
                Category.tenant_id == tenant_id,
                Category.code == code,
                Category.is_system.is_(True),
            )
            .order_by(Category.created_at, Category.id)
            .limit(1)
        )
        return self.session.execute(stmt).scalars().first()

    def _find_by_code(self, tenant_id: UUID, code: str) -> Category | None:
        stmt = (
            select(Category)
            .where(Category.tenant_id == tenant_id, Category.code == code)
            .order_by(Category.created_at, Category.id)
            .limit(1)
        )
        return self.session.execute(stmt).scalars().first()

    def _find_by_name_and_type(
        self,
        tenant_id: UUID,
        name: str,
        category_type: CategoryType | str,
    ) -> Category | None:
        stmt = (
            select(Category)
            .where(
                Category.tenant_id == tenant_id,
                Category.name == name,
                Category.type == CategoryType(category_type).value,
            )
            .order_by(Category.created_at, Category.id)
            .limit(1)
        )
        return self.session.execute(stmt).scalars().first()

    def resolve_or_create(
        self,
        tenant_id: UUID,
        actor_id: UUID,
        code: str,
        fallback_name: str,
        category_type: CategoryType | str,
        color: str | None = None,
    ) -> Category:
        """
        Resolve a category by system code, then by name and type, else create it.

        Args:
            tenant_id: Owning tenant.
            actor_id: Recorded as creator if a category has to be created.
            code: Stable plan-of-accounts code (e.g. "2.1").
            fallback_name: Display name used for the second lookup tier and
                for creation.
            category_type: income or expense.
            color: Display color for a created category.

        Returns:
            The resolved or newly created Category (flushed).
        """
        category = self._find_system_by_code(tenant_id, code)
        if category is not None:
            return category

        category = self._find_by_name_and_type(tenant_id, fallback_name, category_type)
        if category is not None:
            logger.info(
                "category_resolved_by_name",
                extra={"category_code": code, "category_name": fallback_name},
            )
            return category

        category = Category(
            tenant_id=tenant_id,
            name=fallback_name,
            type=CategoryType(category_type).value,
            code=code,
            color=color,
            level=_level_of(code),
            is_system=True,
            created_by_id=actor_id,
        )
        self.session.add(category)
        self.session.flush()

        logger.info(
            "category_created",
            extra={
                "category_code": code,
                "category_name": fallback_name,
                "category_id": str(category.id),
            },
        )
        return category

    def resolve_by_code(self, tenant_id: UUID, code: str) -> Category:
        """
        Resolve a category by system code, falling back to a plain code match.

        Raises:
            CategoryNotFoundError: If neither lookup finds a category.
        """
        category = self._find_system_by_code(tenant_id, code)
        if category is None:
            category = self._find_by_code(tenant_id, code)
        if category is None:
            raise CategoryNotFoundError(code)
        return category

    def ensure_system_categories(
        self,
        tenant_id: UUID,
        actor_id: UUID,
        chart: Iterable[CategoryNode],
    ) -> list[Category]:
        """
        Seed the plan of accounts for a tenant that has no system category.

        Idempotent: returns an empty list when any system category already
        exists for the tenant.

        Returns:
            The categories created, parents before children.
        """
        existing = self.session.execute(
            select(Category.id)
            .where(Category.tenant_id == tenant_id, Category.is_system.is_(True))
            .limit(1)
        ).first()
        if existing is not None:
            return []

        created: list[Category] = []

        def _create(node: CategoryNode, parent: Category | None, level: int) -> None:
            category = Category(
                tenant_id=tenant_id,
                name=node.name,
                type=CategoryType(node.type).value,
                code=node.code,
                color=node.color,
                level=level,
                parent_id=parent.id if parent is not None else None,
                is_system=True,
                created_by_id=actor_id,
            )
            self.session.add(category)
            self.session.flush()
            created.append(category)
            for child in node.children:
                _create(child, category, level + 1)

        for root in chart:
            _create(root, None, 0)

        logger.info(
            "system_categories_seeded",
            extra={"tenant_id": str(tenant_id), "category_count": len(created)},
        )
        return created
