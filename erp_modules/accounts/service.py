"""
Accounts Module Service (``erp_modules.accounts.service``).

Seeds the configured plan of accounts for a tenant.  Called when a tenant
first reaches the financial workflows; a tenant that already owns any system
category is left untouched.
"""

from __future__ import annotations

from uuid import UUID

from sqlalchemy.orm import Session

from erp_config import ErpConfig, get_active_config
from erp_kernel.logging_config import LogContext, get_logger
from erp_kernel.services.category_service import CategoryService
from erp_modules._transaction_helpers import persistence_step, require_tenant

logger = get_logger("modules.accounts.service")


class AccountsService:
    """Plan-of-accounts facade.  Owns the transaction boundary."""

    def __init__(self, session: Session, config: ErpConfig | None = None):
        self._session = session
        self._config = config or get_active_config()
        self._categories = CategoryService(session)

    def ensure_system_categories(self, tenant_id: UUID | str | None, actor_id: UUID) -> int:
        """Seed the plan of accounts if missing.  Returns the number created."""
        tenant = require_tenant(tenant_id, "ensure_system_categories")

        with LogContext.bind(tenant_id=tenant, actor_id=actor_id):
            try:
                with persistence_step("category"):
                    created = self._categories.ensure_system_categories(
                        tenant, actor_id, self._config.chart_of_accounts,
                    )
                with persistence_step("commit"):
                    self._session.commit()
            except Exception:
                self._session.rollback()
                raise
            return len(created)
