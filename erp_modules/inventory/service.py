"""
Inventory Module Service (``erp_modules.inventory.service``).

Responsibility
--------------
Product cost maintenance outside the purchase flow:

* ``recompute_product_cost`` -- repair/audit entry point that rebuilds a
  product's stock quantity and average cost from its stock entries.
* ``reclassify_product`` -- moves a product from resale to internal use and
  re-tags its cost history from Cost of Goods Sold to the operational
  expense category of its department.

Architecture position
---------------------
**Modules layer** -- ``InventoryService`` owns the transaction boundary and
delegates to the kernel ``StockLedgerService`` and ``CategoryService``.

Invariants enforced
-------------------
* Reclassification only moves ledger entries between categories.  Amounts
  are never changed and entries are never deleted.
* The product update and the re-tagging commit together.  An unresolvable
  category aborts both; ledger categories are never partially migrated.

Failure modes
-------------
* ``ProductNotFoundError`` -- the tenant has no such product.
* ``CategoryNotFoundError`` -- target or source category missing; nothing
  changed.
* ``PersistenceError`` -- store failure; session rolled back.
"""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from sqlalchemy import and_, or_, select
from sqlalchemy.orm import Session

from erp_config import ErpConfig, get_active_config
from erp_kernel.exceptions import ProductNotFoundError
from erp_kernel.logging_config import LogContext, get_logger
from erp_kernel.models.ledger_entry import LedgerEntry
from erp_kernel.models.product import Product, ProductClassification
from erp_kernel.models.purchase_invoice import StockEntry
from erp_kernel.models.sale import Sale, SaleItem
from erp_kernel.services.category_service import CategoryService
from erp_kernel.services.stock_ledger_service import CostSnapshot, StockLedgerService
from erp_modules._transaction_helpers import parse_uuid, persistence_step, require_tenant

logger = get_logger("modules.inventory.service")


@dataclass(frozen=True)
class ReclassificationResult:
    """Outcome of moving a product to internal use."""

    product_id: UUID
    department: str
    target_category_code: str
    sale_entries_moved: int
    purchase_entries_moved: int
    already_internal_use: bool = False

    @property
    def entries_moved(self) -> int:
        return self.sale_entries_moved + self.purchase_entries_moved


class InventoryService:
    """
    Product cost maintenance.

    Contract
    --------
    Receives a SQLAlchemy ``Session`` and owns its commit/rollback for each
    public call.
    """

    def __init__(self, session: Session, config: ErpConfig | None = None):
        self._session = session
        self._config = config or get_active_config()
        self._stock_ledger = StockLedgerService(session)
        self._categories = CategoryService(session)

    def _get_product(self, tenant_id: UUID, product_ref: UUID | str) -> Product:
        try:
            product_id = parse_uuid(product_ref)
        except ValueError as exc:
            raise ProductNotFoundError(str(product_ref)) from exc

        product = self._session.execute(
            select(Product).where(
                Product.id == product_id,
                Product.tenant_id == tenant_id,
            )
        ).scalar_one_or_none()
        if product is None:
            raise ProductNotFoundError(str(product_ref))
        return product

    def _normalize_department(self, new_department: str | None) -> str:
        """Lower-cased caller tag; blank means the configured default department."""
        key = (new_department or "").strip().lower()
        return key or self._config.reclassification.default_department

    # =========================================================================
    # Recompute
    # =========================================================================

    def recompute_product_cost(
        self,
        tenant_id: UUID | str | None,
        product_id: UUID | str,
    ) -> CostSnapshot:
        """Rebuild one product's stock quantity and average cost, then commit."""
        tenant = require_tenant(tenant_id, "recompute_product_cost")

        with LogContext.bind(tenant_id=tenant, product_id=product_id):
            try:
                product = self._get_product(tenant, product_id)
                with persistence_step("recompute"):
                    snapshot = self._stock_ledger.recompute(product.id)
                with persistence_step("commit"):
                    self._session.commit()
            except Exception:
                self._session.rollback()
                raise
            return snapshot

    # =========================================================================
    # Reclassify
    # =========================================================================

    def reclassify_product(
        self,
        tenant_id: UUID | str | None,
        product_id: UUID | str,
        new_department: str | None,
        actor_id: UUID | None = None,
    ) -> ReclassificationResult:
        """
        Move a product from resale to internal use.

        Steps:
            1. Route the department to a target category code.  The caller's
               department is stored as given; only the route of an unknown
               department falls back to the configured default.
            2. Resolve the target category by code.
            3. Resolve the Cost of Goods Sold category by code.
            4. Re-tag CMV ledger entries of sales containing the product.
               Entries carry the product id; legacy entries without one are
               matched by the product name in their description.
            5. Re-tag CMV ledger entries of invoices that stocked the product.
            6. Zero the product's average cost.

        A product already classified internal_use only has its department
        updated; no entry is re-tagged.
        """
        tenant = require_tenant(tenant_id, "reclassify_product")

        with LogContext.bind(tenant_id=tenant, actor_id=actor_id, product_id=product_id):
            department = self._normalize_department(new_department)
            target_code = self._config.reclassification.route_for(department)

            logger.info("product_reclassification_started", extra={
                "department": department,
                "target_category_code": target_code,
            })

            try:
                product = self._get_product(tenant, product_id)
                already_internal = (
                    product.classification == ProductClassification.INTERNAL_USE
                )

                with persistence_step("product"):
                    product.classification = ProductClassification.INTERNAL_USE.value
                    product.department = department
                    if actor_id is not None:
                        product.updated_by_id = actor_id
                    self._session.flush()

                sale_moved = purchase_moved = 0
                if not already_internal:
                    sale_moved, purchase_moved = self._retag_cost_history(
                        tenant, product, target_code, actor_id,
                    )
                    with persistence_step("recompute"):
                        self._stock_ledger.clear_average_cost(product)

                with persistence_step("commit"):
                    self._session.commit()
            except Exception as exc:
                self._session.rollback()
                logger.warning("product_reclassification_rolled_back", extra={
                    "error_code": getattr(exc, "code", type(exc).__name__),
                })
                raise

            logger.info("product_reclassified", extra={
                "department": department,
                "target_category_code": target_code,
                "sale_entries_moved": sale_moved,
                "purchase_entries_moved": purchase_moved,
                "already_internal_use": already_internal,
            })
            return ReclassificationResult(
                product_id=product.id,
                department=department,
                target_category_code=target_code,
                sale_entries_moved=sale_moved,
                purchase_entries_moved=purchase_moved,
                already_internal_use=already_internal,
            )

    def _retag_cost_history(
        self,
        tenant_id: UUID,
        product: Product,
        target_code: str,
        actor_id: UUID | None,
    ) -> tuple[int, int]:
        """Move the product's CMV entries to the target category.  Flushes."""
        target = self._categories.resolve_by_code(tenant_id, target_code)
        source = self._categories.resolve_by_code(
            tenant_id, self._config.purchasing.cogs_category.code
        )

        sale_ids = (
            select(SaleItem.sale_id)
            .join(Sale, Sale.id == SaleItem.sale_id)
            .where(Sale.tenant_id == tenant_id, SaleItem.product_id == product.id)
        )
        sale_entries = self._session.execute(
            select(LedgerEntry).where(
                LedgerEntry.tenant_id == tenant_id,
                LedgerEntry.sale_id.in_(sale_ids),
                LedgerEntry.category_id == source.id,
                or_(
                    LedgerEntry.product_id == product.id,
                    and_(
                        LedgerEntry.product_id.is_(None),
                        LedgerEntry.description.contains(product.name, autoescape=True),
                    ),
                ),
            )
        ).scalars().all()

        invoice_ids = select(StockEntry.purchase_invoice_id).where(
            StockEntry.product_id == product.id
        )
        purchase_entries = self._session.execute(
            select(LedgerEntry).where(
                LedgerEntry.tenant_id == tenant_id,
                LedgerEntry.purchase_invoice_id.in_(invoice_ids),
                LedgerEntry.category_id == source.id,
            )
        ).scalars().all()

        with persistence_step("category"):
            for entry in (*sale_entries, *purchase_entries):
                entry.category_id = target.id
                if actor_id is not None:
                    entry.updated_by_id = actor_id
            self._session.flush()

        return len(sale_entries), len(purchase_entries)
