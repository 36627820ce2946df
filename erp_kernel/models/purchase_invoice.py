"""
Module: erp_kernel.models.purchase_invoice
Responsibility: ORM persistence for purchase (supplier) invoices and the stock
    entries (cost lots) they create -- one entry per invoice line.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - quantity > 0 on every stock entry (check constraint).
    - 0 <= remaining_quantity <= quantity (check constraint).  Consumption by
      sales is external to this core; remaining_quantity is the contract
      point for it.
    - Stock entries live and die with their invoice: ORM cascade
      "all, delete-orphan" plus ON DELETE CASCADE on the foreign key.
    - unit_cost is the cost AFTER allocation of freight, other costs and tax;
      raw_unit_cost is the unit price as printed on the invoice.

Audit relevance:
    Entries are append-only lots.  A product's cost can always be rebuilt
    from its live entries without replaying history, which is what makes
    invoice deletion safe.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from enum import Enum
from uuid import UUID

from sqlalchemy import (
    CheckConstraint,
    Date,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from erp_kernel.db.base import TrackedBase


class PaymentStatus(str, Enum):
    """Payment state of a purchase invoice."""

    PENDING = "PENDING"
    PAID = "PAID"


class PurchaseInvoice(TrackedBase):
    """
    A supplier invoice as entered into stock.

    Guarantees:
        - subtotal == sum(quantity * raw_unit_cost) over lines, rounded.
        - total_cost == sum of the allocated line totals.
        - stock_entries are deleted together with the invoice.
    """

    __tablename__ = "purchase_invoices"

    __table_args__ = (
        Index("idx_purchase_invoice_tenant_entry_date", "tenant_id", "entry_date"),
        Index("idx_purchase_invoice_supplier", "supplier_id"),
    )

    invoice_number: Mapped[str | None] = mapped_column(String(100), nullable=True)

    # Electronic invoice access key
    invoice_key: Mapped[str | None] = mapped_column(String(100), nullable=True)

    supplier_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("suppliers.id"),
        nullable=True,
    )

    entry_date: Mapped[date] = mapped_column(Date, nullable=False)

    subtotal: Mapped[Decimal] = mapped_column(nullable=False)
    freight_cost: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    tax_rate: Mapped[Decimal] = mapped_column(
        Numeric(38, 18), nullable=False, default=Decimal("0")
    )
    other_costs: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    total_cost: Mapped[Decimal] = mapped_column(nullable=False)

    notes: Mapped[str | None] = mapped_column(String(4000), nullable=True)

    payment_status: Mapped[PaymentStatus] = mapped_column(
        String(20),
        nullable=False,
        default=PaymentStatus.PENDING,
    )

    stock_entries: Mapped[list["StockEntry"]] = relationship(
        back_populates="purchase_invoice",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
    )

    @property
    def label(self) -> str:
        """Human label: "Invoice <number>" or "Entry #<last six id chars>"."""
        if self.invoice_number:
            return f"Invoice {self.invoice_number}"
        return f"Entry #{str(self.id)[-6:].upper()}"

    def __repr__(self) -> str:
        return (
            f"<PurchaseInvoice {self.label} "
            f"total={self.total_cost} status={self.payment_status}>"
        )


class StockEntry(TrackedBase):
    """
    One acquisition lot: N units of a product acquired at an allocated unit cost.

    Guarantees:
        - remaining_quantity starts equal to quantity.
        - (product_id) is indexed for the stock ledger recompute scan.
    """

    __tablename__ = "stock_entries"

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_stock_entry_quantity_positive"),
        CheckConstraint(
            "remaining_quantity >= 0 AND remaining_quantity <= quantity",
            name="ck_stock_entry_remaining_bounds",
        ),
        Index("idx_stock_entry_product", "product_id"),
        Index("idx_stock_entry_invoice", "purchase_invoice_id"),
    )

    product_id: Mapped[UUID] = mapped_column(
        ForeignKey("products.id"),
        nullable=False,
    )

    purchase_invoice_id: Mapped[UUID] = mapped_column(
        ForeignKey("purchase_invoices.id", ondelete="CASCADE"),
        nullable=False,
    )

    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    remaining_quantity: Mapped[int] = mapped_column(Integer, nullable=False)

    unit_cost: Mapped[Decimal] = mapped_column(nullable=False)
    raw_unit_cost: Mapped[Decimal] = mapped_column(nullable=False)

    purchase_invoice: Mapped[PurchaseInvoice] = relationship(
        back_populates="stock_entries",
    )

    def __repr__(self) -> str:
        return (
            f"<StockEntry product={self.product_id} "
            f"qty={self.remaining_quantity}/{self.quantity} @ {self.unit_cost}>"
        )
