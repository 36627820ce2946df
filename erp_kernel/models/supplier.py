"""
Module: erp_kernel.models.supplier
Responsibility: ORM persistence for suppliers, the counterparty of purchase
    invoices and accounts-payable ledger entries.
Architecture position: Kernel > Models.  May import from db/base.py only.

Supplier records are owned by the catalog/contacts collaborator; this core
only looks them up by id.
"""

from sqlalchemy import Index, String
from sqlalchemy.orm import Mapped, mapped_column

from erp_kernel.db.base import TrackedBase


class Supplier(TrackedBase):
    """A vendor that issues purchase invoices."""

    __tablename__ = "suppliers"

    __table_args__ = (
        Index("idx_supplier_tenant_name", "tenant_id", "name"),
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    # Tax document (CNPJ / EIN), free-form
    document: Mapped[str | None] = mapped_column(String(50), nullable=True)

    def __repr__(self) -> str:
        return f"<Supplier {self.name}>"
