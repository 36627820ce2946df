"""
Tests for CategoryService.

Covers:
- Three-tier resolve_or_create (system code -> name+type -> create)
- resolve_by_code (system code -> plain code -> CategoryNotFoundError)
- Plan-of-accounts seeding and its idempotence
- Tenant isolation
"""

from uuid import uuid4

import pytest
from sqlalchemy import func, select

from erp_kernel.exceptions import CategoryNotFoundError
from erp_kernel.models import Category, CategoryType
from erp_kernel.services.category_service import CategoryService


@pytest.fixture
def categories(session):
    return CategoryService(session)


@pytest.fixture
def add_category(session, tenant_id, actor_id):
    def _add(name, code=None, category_type=CategoryType.EXPENSE, is_system=False, for_tenant=None):
        category = Category(
            tenant_id=for_tenant or tenant_id,
            name=name,
            type=category_type.value,
            code=code,
            is_system=is_system,
            created_by_id=actor_id,
        )
        session.add(category)
        session.flush()
        return category

    return _add


def _resolve_cogs(categories, tenant_id, actor_id):
    return categories.resolve_or_create(
        tenant_id=tenant_id,
        actor_id=actor_id,
        code="2.1",
        fallback_name="Cost of Goods Sold",
        category_type=CategoryType.EXPENSE,
        color="#fbbf24",
    )


class TestResolveOrCreate:
    def test_prefers_system_code(self, categories, add_category, tenant_id, actor_id):
        add_category("Cost of Goods Sold")
        system = add_category("COGS (system)", code="2.1", is_system=True)

        assert _resolve_cogs(categories, tenant_id, actor_id) is system

    def test_falls_back_to_name_and_type(self, categories, add_category, tenant_id, actor_id):
        by_name = add_category("Cost of Goods Sold")

        assert _resolve_cogs(categories, tenant_id, actor_id) is by_name

    def test_name_match_requires_type(self, categories, add_category, tenant_id, actor_id):
        add_category("Cost of Goods Sold", category_type=CategoryType.INCOME)

        resolved = _resolve_cogs(categories, tenant_id, actor_id)

        assert resolved.type == CategoryType.EXPENSE
        assert resolved.is_system

    def test_non_system_code_is_not_first_tier(
        self, categories, add_category, tenant_id, actor_id,
    ):
        """A user category that merely reuses code 2.1 is not the system COGS."""
        add_category("Custom", code="2.1", is_system=False)

        resolved = _resolve_cogs(categories, tenant_id, actor_id)

        assert resolved.name == "Cost of Goods Sold"
        assert resolved.is_system

    def test_creates_with_defaults(self, session, categories, tenant_id, actor_id, captured_logs):
        created = _resolve_cogs(categories, tenant_id, actor_id)

        assert created.code == "2.1"
        assert created.color == "#fbbf24"
        assert created.is_system is True
        assert created.level == 1
        assert created.created_by_id == actor_id
        assert any(r["message"] == "category_created" for r in captured_logs())

    def test_idempotent(self, session, categories, tenant_id, actor_id):
        first = _resolve_cogs(categories, tenant_id, actor_id)
        second = _resolve_cogs(categories, tenant_id, actor_id)

        assert first.id == second.id
        count = session.execute(
            select(func.count()).select_from(Category).where(Category.tenant_id == tenant_id)
        ).scalar_one()
        assert count == 1

    def test_other_tenants_ignored(self, categories, add_category, tenant_id, actor_id):
        foreign = add_category("COGS", code="2.1", is_system=True, for_tenant=uuid4())

        resolved = _resolve_cogs(categories, tenant_id, actor_id)

        assert resolved.id != foreign.id
        assert resolved.tenant_id == tenant_id


class TestResolveByCode:
    def test_system_code_first(self, categories, add_category, tenant_id):
        add_category("Ops (custom)", code="3")
        system = add_category("Fixed/Operational Expenses", code="3", is_system=True)

        assert categories.resolve_by_code(tenant_id, "3") is system

    def test_plain_code_fallback(self, categories, add_category, tenant_id):
        plain = add_category("Freight", code="2.4")

        assert categories.resolve_by_code(tenant_id, "2.4") is plain

    def test_missing_code(self, categories, tenant_id):
        with pytest.raises(CategoryNotFoundError) as exc_info:
            categories.resolve_by_code(tenant_id, "9.9")

        assert exc_info.value.category_code == "9.9"
        assert exc_info.value.code == "CATEGORY_NOT_FOUND"


class TestEnsureSystemCategories:
    def test_seeds_two_level_chart(self, session, categories, tenant_id, actor_id, erp_config):
        created = categories.ensure_system_categories(
            tenant_id, actor_id, erp_config.chart_of_accounts,
        )

        by_code = {c.code: c for c in created}
        assert set(by_code) == {
            "1", "1.1", "1.2",
            "2", "2.1", "2.2", "2.3", "2.4",
            "3", "3.1", "3.2", "3.3",
        }
        assert by_code["2"].level == 0
        assert by_code["2.1"].level == 1
        assert by_code["2.1"].parent_id == by_code["2"].id
        assert by_code["2.1"].color == "#fbbf24"
        assert by_code["2.4"].name == "Freight and Logistics"
        assert by_code["3"].name == "Fixed/Operational Expenses"
        assert by_code["1.1"].type == CategoryType.INCOME
        assert all(c.is_system for c in created)

    def test_idempotent(self, categories, tenant_id, actor_id, erp_config):
        categories.ensure_system_categories(tenant_id, actor_id, erp_config.chart_of_accounts)

        again = categories.ensure_system_categories(
            tenant_id, actor_id, erp_config.chart_of_accounts,
        )

        assert again == []

    def test_seeded_cogs_is_resolved(self, categories, tenant_id, actor_id, erp_config):
        categories.ensure_system_categories(tenant_id, actor_id, erp_config.chart_of_accounts)

        resolved = _resolve_cogs(categories, tenant_id, actor_id)

        assert resolved.code == "2.1"
        assert resolved.level == 1
