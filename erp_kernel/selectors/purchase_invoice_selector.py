"""
Module: erp_kernel.selectors.purchase_invoice_selector
Responsibility: Read-only queries over purchase invoices, their stock entries
    and the payables they produced.
Architecture position: Kernel > Selectors.

Results are frozen DTOs; ORM instances never leave this module.  Money values
are returned as stored (Decimal), already rounded to cents by the writers.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import select

from erp_kernel.models.ledger_entry import EntryStatus, LedgerEntry
from erp_kernel.models.product import Product
from erp_kernel.models.purchase_invoice import PaymentStatus, PurchaseInvoice
from erp_kernel.models.supplier import Supplier
from erp_kernel.selectors.base import BaseSelector


@dataclass(frozen=True)
class InvoiceLineView:
    """A stock entry of an invoice, with the product it stocked."""

    stock_entry_id: UUID
    product_id: UUID
    product_name: str | None
    product_sku: str | None
    quantity: int
    remaining_quantity: int
    unit_cost: Decimal
    raw_unit_cost: Decimal


@dataclass(frozen=True)
class PayableView:
    """A ledger entry produced by an invoice."""

    ledger_entry_id: UUID
    description: str
    amount: Decimal
    due_date: date
    status: str


@dataclass(frozen=True)
class InvoiceView:
    """A purchase invoice with line and payable detail."""

    id: UUID
    label: str
    invoice_number: str | None
    invoice_key: str | None
    supplier_id: UUID | None
    supplier_name: str | None
    entry_date: date
    subtotal: Decimal
    freight_cost: Decimal
    tax_rate: Decimal
    other_costs: Decimal
    total_cost: Decimal
    payment_status: str
    notes: str | None
    lines: tuple[InvoiceLineView, ...]
    payables: tuple[PayableView, ...]

    @property
    def line_count(self) -> int:
        return len(self.lines)


class PurchaseInvoiceSelector(BaseSelector[PurchaseInvoice]):
    """Tenant-scoped reads of purchase invoices."""

    def _to_view(self, invoice: PurchaseInvoice) -> InvoiceView:
        product_ids = {e.product_id for e in invoice.stock_entries}
        products: dict[UUID, Product] = {}
        if product_ids:
            products = {
                p.id: p
                for p in self.session.execute(
                    select(Product).where(Product.id.in_(product_ids))
                ).scalars()
            }

        supplier_name = None
        if invoice.supplier_id is not None:
            supplier = self.session.get(Supplier, invoice.supplier_id)
            supplier_name = supplier.name if supplier is not None else None

        payables = self.session.execute(
            select(LedgerEntry)
            .where(LedgerEntry.purchase_invoice_id == invoice.id)
            .order_by(LedgerEntry.due_date)
        ).scalars()

        lines = []
        for entry in sorted(invoice.stock_entries, key=lambda e: (e.created_at, str(e.id))):
            product = products.get(entry.product_id)
            lines.append(
                InvoiceLineView(
                    stock_entry_id=entry.id,
                    product_id=entry.product_id,
                    product_name=product.name if product else None,
                    product_sku=product.sku if product else None,
                    quantity=entry.quantity,
                    remaining_quantity=entry.remaining_quantity,
                    unit_cost=entry.unit_cost,
                    raw_unit_cost=entry.raw_unit_cost,
                )
            )

        return InvoiceView(
            id=invoice.id,
            label=invoice.label,
            invoice_number=invoice.invoice_number,
            invoice_key=invoice.invoice_key,
            supplier_id=invoice.supplier_id,
            supplier_name=supplier_name,
            entry_date=invoice.entry_date,
            subtotal=invoice.subtotal,
            freight_cost=invoice.freight_cost,
            tax_rate=invoice.tax_rate,
            other_costs=invoice.other_costs,
            total_cost=invoice.total_cost,
            payment_status=PaymentStatus(invoice.payment_status).value,
            notes=invoice.notes,
            lines=tuple(lines),
            payables=tuple(
                PayableView(
                    ledger_entry_id=p.id,
                    description=p.description,
                    amount=p.amount,
                    due_date=p.due_date,
                    status=EntryStatus(p.status).value,
                )
                for p in payables
            ),
        )

    def get_invoice(self, tenant_id: UUID, invoice_id: UUID) -> InvoiceView | None:
        """Return the tenant's invoice, or None if it does not exist."""
        invoice = self.session.execute(
            select(PurchaseInvoice).where(
                PurchaseInvoice.id == invoice_id,
                PurchaseInvoice.tenant_id == tenant_id,
            )
        ).scalar_one_or_none()
        return self._to_view(invoice) if invoice is not None else None

    def list_invoices(self, tenant_id: UUID) -> list[InvoiceView]:
        """All of the tenant's invoices, newest entry date first."""
        invoices = self.session.execute(
            select(PurchaseInvoice)
            .where(PurchaseInvoice.tenant_id == tenant_id)
            .order_by(PurchaseInvoice.entry_date.desc(), PurchaseInvoice.created_at.desc())
        ).scalars()
        return [self._to_view(inv) for inv in invoices]
