"""
Module: erp_kernel.models.ledger_entry
Responsibility: ORM persistence for ledger entries ("transactions"): payables,
    receivables and expense/income records tagged with a plan-of-accounts
    category.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - due_date (cash basis) and competence_date (accrual basis) are tracked
      separately.
    - Reclassification may change category_id but never amount, and never
      deletes an entry.
    - product_id is the explicit product link used by reclassification.
      Legacy rows without it are matched by product name in the description.

Audit relevance:
    Ledger entries created by the purchase workflow carry
    purchase_invoice_id so that invoice reversal removes exactly the entries
    the invoice produced.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID

from sqlalchemy import Date, DateTime, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from erp_kernel.db.base import TrackedBase


class EntryType(str, Enum):
    """Direction of the ledger entry."""

    INCOME = "income"
    EXPENSE = "expense"


class EntryStatus(str, Enum):
    """Settlement state of the ledger entry."""

    PENDING = "pending"
    PAID = "paid"


class LedgerEntry(TrackedBase):
    """A single financial transaction in the tenant's ledger."""

    __tablename__ = "ledger_entries"

    __table_args__ = (
        Index("idx_ledger_entry_tenant_due", "tenant_id", "due_date"),
        Index("idx_ledger_entry_invoice", "purchase_invoice_id"),
        Index("idx_ledger_entry_sale", "sale_id"),
        Index("idx_ledger_entry_category", "category_id"),
        Index("idx_ledger_entry_product", "product_id"),
    )

    description: Mapped[str] = mapped_column(String(500), nullable=False)

    amount: Mapped[Decimal] = mapped_column(nullable=False)

    entry_type: Mapped[EntryType] = mapped_column(String(20), nullable=False)

    status: Mapped[EntryStatus] = mapped_column(
        String(20),
        nullable=False,
        default=EntryStatus.PENDING,
    )

    # Cash-basis date (payment due)
    due_date: Mapped[date] = mapped_column(Date, nullable=False)

    # Accrual-basis date
    competence_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    paid_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    category_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("categories.id"),
        nullable=True,
    )

    purchase_invoice_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("purchase_invoices.id"),
        nullable=True,
    )

    sale_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("sales.id"),
        nullable=True,
    )

    product_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("products.id"),
        nullable=True,
    )

    supplier_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("suppliers.id"),
        nullable=True,
    )

    def __repr__(self) -> str:
        return (
            f"<LedgerEntry {self.entry_type} {self.amount} "
            f"due={self.due_date} status={self.status}>"
        )
