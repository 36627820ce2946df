"""
Purchasing Module Service (``erp_modules.purchasing.service``).

Responsibility
--------------
Creates and deletes purchase invoices.  Creation allocates freight, tax and
other costs across the lines, stocks every line (creating products first seen
on the invoice), recomputes the weighted-average cost of every affected
product, resolves the Cost of Goods Sold category and posts the
accounts-payable ledger entry.  Deletion removes the invoice, its stock
entries and its ledger entries, then recomputes the affected products.

Architecture position
---------------------
**Modules layer** -- ``PurchaseInvoiceService`` is the sole public entry
point for purchase invoices.  It composes the stateless
``CostAllocationEngine`` and the kernel ``StockLedgerService`` and
``CategoryService``.

Invariants enforced
-------------------
* Each public method owns the transaction boundary (``commit`` on success,
  ``rollback`` on failure or exception).  No partial invoice is ever
  visible.
* Stock quantity and average cost are written only through
  ``StockLedgerService``.
* Notifications are emitted after commit and never roll the invoice back.

Failure modes
-------------
* ``ValidationError`` subclasses -- rejected before any write.
* ``TenantRequiredError`` -- no tenant supplied.
* ``ProductNotFoundError`` / ``SupplierNotFoundError`` /
  ``InvoiceNotFoundError`` -- lookup failed; session rolled back.
* ``PersistenceError`` -- store failure; ``step`` and ``line_index`` name
  where.  Session rolled back.
* ``NotificationDeliveryError`` -- logged as
  ``notification_delivery_failed``, never raised.

Usage::

    service = PurchaseInvoiceService(session, clock=clock)
    invoice_id = service.create_invoice(
        tenant_id=tenant_id,
        actor_id=actor_id,
        lines=[InvoiceLineInput(quantity=10, raw_unit_cost=Decimal("10.00"),
                                product_id=product_id)],
        freight_cost=Decimal("50.00"),
        tax_rate=Decimal("0.10"),
        other_costs=Decimal("0"),
        entry_date=date(2024, 3, 1),
    )
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date, timedelta
from decimal import Decimal, InvalidOperation
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from erp_config import ErpConfig, get_active_config
from erp_engines.cost_allocation import CostAllocationEngine, CostLine
from erp_kernel.db.types import ZERO, round2, to_decimal
from erp_kernel.domain.clock import Clock, SystemClock
from erp_kernel.exceptions import (
    EmptyInvoiceError,
    InvalidCostComponentError,
    InvalidQuantityError,
    InvoiceNotFoundError,
    MissingLineDataError,
    NotificationDeliveryError,
    ProductNotFoundError,
    SupplierNotFoundError,
)
from erp_kernel.logging_config import LogContext, get_logger
from erp_kernel.models.ledger_entry import EntryStatus, EntryType, LedgerEntry
from erp_kernel.models.notification import NotificationType
from erp_kernel.models.product import Product, ProductClassification
from erp_kernel.models.purchase_invoice import PaymentStatus, PurchaseInvoice
from erp_kernel.models.supplier import Supplier
from erp_kernel.services.category_service import CategoryService
from erp_kernel.services.notification_service import (
    DatabaseNotificationSink,
    NotificationSink,
)
from erp_kernel.services.stock_ledger_service import StockLedgerService
from erp_modules._transaction_helpers import parse_uuid, persistence_step, require_tenant
from erp_modules.purchasing.models import InvoiceLineInput

logger = get_logger("modules.purchasing.service")


def _non_negative(
    component: str,
    value: Decimal | int | str | None,
    line_index: int | None = None,
) -> Decimal:
    if value is None:
        return ZERO
    try:
        amount = to_decimal(value)
    except (InvalidOperation, ValueError) as exc:
        raise InvalidCostComponentError(component, value, line_index=line_index) from exc
    if not amount.is_finite() or amount < ZERO:
        raise InvalidCostComponentError(component, value, line_index=line_index)
    return amount


def _has_reference(value: UUID | str | None) -> bool:
    return value is not None and bool(str(value).strip())


class PurchaseInvoiceService:
    """
    Orchestrates purchase invoice creation and reversal.

    Contract
    --------
    Receives a SQLAlchemy ``Session`` and owns its commit/rollback for each
    public call.  ``config`` defaults to the active configuration set;
    ``notification_sink`` defaults to a ``DatabaseNotificationSink`` on the
    same session.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        config: ErpConfig | None = None,
        notification_sink: NotificationSink | None = None,
    ):
        self._session = session
        self._clock = clock or SystemClock()
        self._config = config or get_active_config()
        self._notification_sink = notification_sink

        self._stock_ledger = StockLedgerService(session)
        self._categories = CategoryService(session)
        self._allocator = CostAllocationEngine()

    # =========================================================================
    # Validation
    # =========================================================================

    def _validate_lines(self, lines: Sequence[InvoiceLineInput]) -> list[Decimal]:
        """Reject malformed input before any write; returns raw unit costs."""
        if not lines:
            raise EmptyInvoiceError()

        raw_costs: list[Decimal] = []
        for index, line in enumerate(lines):
            quantity = line.quantity
            if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
                raise InvalidQuantityError(index, quantity)

            if line.raw_unit_cost is None:
                raise MissingLineDataError(index, "raw_unit_cost")
            raw_costs.append(
                _non_negative("raw_unit_cost", line.raw_unit_cost, line_index=index)
            )

            has_product = _has_reference(line.product_id)
            has_new_name = line.new_product is not None and bool(
                (line.new_product.name or "").strip()
            )
            if not has_product and not has_new_name:
                raise MissingLineDataError(index, "product_id or new_product.name")

        return raw_costs

    # =========================================================================
    # Lookups
    # =========================================================================

    def _get_supplier(self, tenant_id: UUID, supplier_ref: UUID | str | None) -> UUID | None:
        try:
            supplier_id = parse_uuid(supplier_ref)
        except ValueError as exc:
            raise SupplierNotFoundError(str(supplier_ref)) from exc
        if supplier_id is None:
            return None

        found = self._session.execute(
            select(Supplier.id).where(
                Supplier.id == supplier_id,
                Supplier.tenant_id == tenant_id,
            )
        ).scalar_one_or_none()
        if found is None:
            raise SupplierNotFoundError(str(supplier_id))
        return supplier_id

    def _get_product(
        self,
        tenant_id: UUID,
        product_ref: UUID | str,
        line_index: int,
    ) -> Product:
        try:
            product_id = parse_uuid(product_ref)
        except ValueError as exc:
            raise ProductNotFoundError(str(product_ref), line_index=line_index) from exc

        product = self._session.execute(
            select(Product).where(
                Product.id == product_id,
                Product.tenant_id == tenant_id,
            )
        ).scalar_one_or_none()
        if product is None:
            raise ProductNotFoundError(str(product_ref), line_index=line_index)
        return product

    # =========================================================================
    # Create
    # =========================================================================

    def create_invoice(
        self,
        tenant_id: UUID | str | None,
        actor_id: UUID,
        lines: Sequence[InvoiceLineInput],
        freight_cost: Decimal | int | str | None,
        tax_rate: Decimal | int | str | None,
        other_costs: Decimal | int | str | None,
        entry_date: date,
        supplier_id: UUID | str | None = None,
        invoice_number: str | None = None,
        invoice_key: str | None = None,
        notes: str | None = None,
    ) -> UUID:
        """
        Create a purchase invoice with its stock entries and payable.

        Preconditions:
            - ``tenant_id`` is present.
            - ``lines`` is non-empty; every quantity is a positive integer;
              every raw unit cost is non-negative; every line references a
              product or names a new one.
            - ``freight_cost``, ``tax_rate`` and ``other_costs`` are
              non-negative (None counts as zero).
        Postconditions:
            - On success: invoice, stock entries, new products, recomputed
              product costs and the payable are committed together; then
              PRICING_NEEDED (if products were created) and PAYMENT_REVIEW
              notifications are emitted.
            - On failure: session rolled back, typed error raised.

        Returns:
            The new invoice id.
        """
        tenant = require_tenant(tenant_id, "create_invoice")
        raw_costs = self._validate_lines(lines)
        freight = _non_negative("freight_cost", freight_cost)
        tax = _non_negative("tax_rate", tax_rate)
        other = _non_negative("other_costs", other_costs)

        with LogContext.bind(tenant_id=tenant, actor_id=actor_id):
            logger.info("purchase_invoice_creation_started", extra={
                "line_count": len(lines),
                "freight_cost": str(freight),
                "tax_rate": str(tax),
                "other_costs": str(other),
                "entry_date": entry_date.isoformat(),
            })

            try:
                invoice, new_products, payable = self._write_invoice(
                    tenant, actor_id, lines, raw_costs, freight, tax, other,
                    entry_date, supplier_id, invoice_number, invoice_key, notes,
                )
                with persistence_step("commit"):
                    self._session.commit()
            except Exception as exc:
                self._session.rollback()
                logger.warning("purchase_invoice_rolled_back", extra={
                    "error_code": getattr(exc, "code", type(exc).__name__),
                    "failed_step": getattr(exc, "step", None),
                    "line_index": getattr(exc, "line_index", None),
                })
                raise

            logger.info("purchase_invoice_committed", extra={
                "invoice_id": str(invoice.id),
                "subtotal": str(invoice.subtotal),
                "total_cost": str(invoice.total_cost),
                "new_product_count": len(new_products),
                "due_date": payable.due_date.isoformat(),
            })

            self._emit_notifications(
                tenant, actor_id, invoice.id, invoice.label,
                [p.name for p in new_products],
                payable.amount, payable.due_date,
            )
            return invoice.id

    def _write_invoice(
        self,
        tenant_id: UUID,
        actor_id: UUID,
        lines: Sequence[InvoiceLineInput],
        raw_costs: list[Decimal],
        freight: Decimal,
        tax: Decimal,
        other: Decimal,
        entry_date: date,
        supplier_ref: UUID | str | None,
        invoice_number: str | None,
        invoice_key: str | None,
        notes: str | None,
    ) -> tuple[PurchaseInvoice, list[Product], LedgerEntry]:
        """Steps 1-6 of invoice creation.  Flushes; the caller commits."""
        supplier_id = self._get_supplier(tenant_id, supplier_ref)

        allocation = self._allocator.allocate(
            lines=[
                CostLine(quantity=line.quantity, raw_unit_cost=raw)
                for line, raw in zip(lines, raw_costs)
            ],
            freight_cost=freight,
            tax_rate=tax,
            other_costs=other,
        )

        with persistence_step("invoice"):
            invoice = PurchaseInvoice(
                tenant_id=tenant_id,
                invoice_number=invoice_number or None,
                invoice_key=invoice_key or None,
                supplier_id=supplier_id,
                entry_date=entry_date,
                subtotal=allocation.subtotal,
                freight_cost=round2(freight),
                tax_rate=tax,
                other_costs=round2(other),
                total_cost=allocation.total_cost,
                notes=notes,
                payment_status=PaymentStatus.PENDING.value,
                created_by_id=actor_id,
            )
            self._session.add(invoice)
            self._session.flush()

        new_products: list[Product] = []
        affected: set[UUID] = set()
        for index, (line, allocated) in enumerate(zip(lines, allocation.lines)):
            if _has_reference(line.product_id):
                product = self._get_product(tenant_id, line.product_id, index)
            else:
                with persistence_step("product", line_index=index):
                    product = Product(
                        tenant_id=tenant_id,
                        name=line.new_product.name.strip(),
                        sku=line.new_product.sku or None,
                        ncm=line.new_product.ncm or None,
                        price=ZERO,
                        manage_stock=True,
                        classification=ProductClassification.FOR_RESALE.value,
                        created_by_id=actor_id,
                    )
                    self._session.add(product)
                    self._session.flush()
                new_products.append(product)

            with persistence_step("stock_entry", line_index=index):
                self._stock_ledger.record_entry(
                    tenant_id=tenant_id,
                    actor_id=actor_id,
                    product_id=product.id,
                    invoice=invoice,
                    quantity=line.quantity,
                    unit_cost=allocated.allocated_unit_cost,
                    raw_unit_cost=allocated.raw_unit_cost,
                )
            affected.add(product.id)

        with persistence_step("recompute"):
            self._stock_ledger.recompute_many(affected)

        purchasing = self._config.purchasing
        with persistence_step("category"):
            cogs = self._categories.resolve_or_create(
                tenant_id=tenant_id,
                actor_id=actor_id,
                code=purchasing.cogs_category.code,
                fallback_name=purchasing.cogs_category.name,
                category_type=purchasing.cogs_category.type,
                color=purchasing.cogs_category.color,
            )

        with persistence_step("payable"):
            payable = LedgerEntry(
                tenant_id=tenant_id,
                description=f"Merchandise purchase - {invoice.label}",
                amount=allocation.total_cost,
                entry_type=EntryType.EXPENSE.value,
                status=EntryStatus.PENDING.value,
                due_date=entry_date + timedelta(days=purchasing.payable_term_days),
                competence_date=entry_date,
                category_id=cogs.id,
                purchase_invoice_id=invoice.id,
                supplier_id=supplier_id,
                created_by_id=actor_id,
            )
            self._session.add(payable)
            self._session.flush()

        return invoice, new_products, payable

    # =========================================================================
    # Notifications (post-commit, best effort)
    # =========================================================================

    def _emit_notifications(
        self,
        tenant_id: UUID,
        actor_id: UUID,
        invoice_id: UUID,
        label: str,
        new_product_names: list[str],
        amount: Decimal,
        due_date: date,
    ) -> None:
        sink = self._notification_sink or DatabaseNotificationSink(self._session, actor_id)
        purchasing = self._config.purchasing
        now = self._clock.now()

        if new_product_names:
            if len(new_product_names) == 1:
                title = "Product without sale price"
                description = (
                    f'Product "{new_product_names[0]}" was registered via {label}. '
                    "Set its sale price."
                )
            else:
                title = f"{len(new_product_names)} products without sale price"
                description = (
                    f"Products registered via {label}: {', '.join(new_product_names)}. "
                    "Set their sale prices."
                )
            self._deliver(
                sink,
                tenant_id=tenant_id,
                type=NotificationType.PRICING_NEEDED,
                target_role=purchasing.pricing_notification_role,
                title=title,
                description=description,
                linked_invoice_id=invoice_id,
                expected_amount=None,
                due_at=now,
            )

        self._deliver(
            sink,
            tenant_id=tenant_id,
            type=NotificationType.PAYMENT_REVIEW,
            target_role=purchasing.payment_notification_role,
            title=f"Accounts payable - {label}",
            description=(
                f"Review the due date of the merchandise purchase "
                f"({amount:.2f}, due {due_date.isoformat()})."
            ),
            linked_invoice_id=invoice_id,
            expected_amount=amount,
            due_at=now,
        )

    def _deliver(self, sink: NotificationSink, **fields) -> None:
        notification_type = NotificationType(fields["type"]).value
        try:
            sink.create(**fields)
        except Exception as exc:
            # Sinks are external collaborators; the invoice is already committed.
            error = (
                exc
                if isinstance(exc, NotificationDeliveryError)
                else NotificationDeliveryError(notification_type, str(exc))
            )
            logger.warning(
                "notification_delivery_failed",
                exc_info=error,
                extra={
                    "notification_type": notification_type,
                    "invoice_id": str(fields["linked_invoice_id"]),
                },
            )

    # =========================================================================
    # Delete
    # =========================================================================

    def delete_invoice(self, tenant_id: UUID | str | None, invoice_id: UUID | str) -> None:
        """
        Delete an invoice and restore the affected products' derived cost.

        Postconditions:
            - On success: the invoice, its stock entries and every ledger
              entry referencing it are gone; every affected product has been
              recomputed from its remaining entries.  Session committed.
            - On failure: session rolled back, typed error raised.

        Raises:
            InvoiceNotFoundError: If the tenant has no such invoice.
        """
        tenant = require_tenant(tenant_id, "delete_invoice")

        with LogContext.bind(tenant_id=tenant, invoice_id=invoice_id):
            logger.info("purchase_invoice_deletion_started", extra={
                "invoice_id": str(invoice_id),
            })
            try:
                try:
                    invoice_uuid = parse_uuid(invoice_id)
                except ValueError as exc:
                    raise InvoiceNotFoundError(str(invoice_id)) from exc

                invoice = self._session.execute(
                    select(PurchaseInvoice).where(
                        PurchaseInvoice.id == invoice_uuid,
                        PurchaseInvoice.tenant_id == tenant,
                    )
                ).scalar_one_or_none()
                if invoice is None:
                    raise InvoiceNotFoundError(str(invoice_id))

                affected = {entry.product_id for entry in invoice.stock_entries}

                with persistence_step("payable"):
                    removed = self._session.execute(
                        delete(LedgerEntry).where(
                            LedgerEntry.tenant_id == tenant,
                            LedgerEntry.purchase_invoice_id == invoice.id,
                        )
                    ).rowcount

                with persistence_step("invoice"):
                    self._session.delete(invoice)
                    self._session.flush()

                with persistence_step("recompute"):
                    self._stock_ledger.recompute_many(affected)

                with persistence_step("commit"):
                    self._session.commit()
            except Exception as exc:
                self._session.rollback()
                logger.warning("purchase_invoice_deletion_rolled_back", extra={
                    "error_code": getattr(exc, "code", type(exc).__name__),
                    "failed_step": getattr(exc, "step", None),
                })
                raise

            logger.info("purchase_invoice_deleted", extra={
                "invoice_id": str(invoice_uuid),
                "affected_product_count": len(affected),
                "ledger_entries_removed": removed,
            })
