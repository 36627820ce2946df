"""Tests for AccountsService plan-of-accounts seeding."""

from uuid import uuid4

import pytest
from sqlalchemy import func, select

from erp_kernel.exceptions import TenantRequiredError
from erp_kernel.models import Category
from erp_modules.accounts import AccountsService


@pytest.fixture
def accounts_service(session, erp_config):
    return AccountsService(session, config=erp_config)


def _codes(session, tenant_id) -> set[str]:
    return set(
        session.execute(select(Category.code).where(Category.tenant_id == tenant_id)).scalars()
    )


class TestEnsureSystemCategories:
    def test_seeds_configured_chart(self, session, accounts_service, erp_config, tenant_id, actor_id):
        created = accounts_service.ensure_system_categories(tenant_id, actor_id)

        assert created == 12
        assert _codes(session, tenant_id) == erp_config.category_codes()

    def test_second_call_creates_nothing(self, session, accounts_service, tenant_id, actor_id):
        accounts_service.ensure_system_categories(tenant_id, actor_id)

        assert accounts_service.ensure_system_categories(tenant_id, actor_id) == 0
        assert session.execute(select(func.count()).select_from(Category)).scalar_one() == 12

    def test_tenants_are_seeded_independently(self, session, accounts_service, tenant_id, actor_id):
        other_tenant = uuid4()
        accounts_service.ensure_system_categories(tenant_id, actor_id)

        assert accounts_service.ensure_system_categories(other_tenant, actor_id) == 12
        assert _codes(session, other_tenant) == _codes(session, tenant_id)

    def test_purchase_reuses_seeded_cogs(
        self, session, accounts_service, create_invoice, create_product, existing_line,
        tenant_id, actor_id,
    ):
        accounts_service.ensure_system_categories(tenant_id, actor_id)

        create_invoice([existing_line(create_product())])

        assert session.execute(select(func.count()).select_from(Category)).scalar_one() == 12

    def test_tenant_required(self, accounts_service, actor_id):
        with pytest.raises(TenantRequiredError):
            accounts_service.ensure_system_categories(None, actor_id)
