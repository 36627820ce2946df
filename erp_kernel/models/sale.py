"""
Module: erp_kernel.models.sale
Responsibility: Minimal ORM mapping of sales and sale items.  Sales are
    recorded by the point-of-sale collaborator; this core only reads them to
    find the ledger entries that carried a product's cost of goods sold.
Architecture position: Kernel > Models.  May import from db/base.py only.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import Date, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from erp_kernel.db.base import TrackedBase


class Sale(TrackedBase):
    """A completed sale."""

    __tablename__ = "sales"

    __table_args__ = (
        Index("idx_sale_tenant_date", "tenant_id", "sale_date"),
    )

    sale_date: Mapped[date] = mapped_column(Date, nullable=False)
    total_amount: Mapped[Decimal] = mapped_column(nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="COMPLETED")

    items: Mapped[list["SaleItem"]] = relationship(
        back_populates="sale",
        cascade="all, delete-orphan",
        lazy="selectin",
    )


class SaleItem(TrackedBase):
    """A product line of a sale."""

    __tablename__ = "sale_items"

    __table_args__ = (
        Index("idx_sale_item_product", "product_id"),
    )

    sale_id: Mapped[UUID] = mapped_column(
        ForeignKey("sales.id", ondelete="CASCADE"),
        nullable=False,
    )

    product_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("products.id"),
        nullable=True,
    )

    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(nullable=False)

    sale: Mapped[Sale] = relationship(back_populates="items")
