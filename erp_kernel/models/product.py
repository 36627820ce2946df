"""
Module: erp_kernel.models.product
Responsibility: ORM persistence for catalog products, including the derived
    stock quantity and weighted-average cost cached on each product.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - stock_quantity and average_cost are DERIVED values owned exclusively by
      StockLedgerService.  They are exposed as read-only properties; the
      backing columns are private attributes that only the stock ledger
      assigns.  Any other writer would let the cache drift from the stock
      entry set.
    - classification is either for_resale or internal_use.

Audit relevance:
    average_cost is the cost basis used for COGS of every sale of a resale
    product.  Because it is always recomputed wholesale from stock entries,
    an auditor can verify it by re-running StockLedgerService.recompute().
"""

from decimal import Decimal
from enum import Enum

from sqlalchemy import Boolean, Index, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from erp_kernel.db.base import TrackedBase


class ProductClassification(str, Enum):
    """Purpose of a product.

    Contract: Resale products carry a cost basis (average_cost) feeding COGS.
    Internal-use products are consumed by the business; their purchases are
    operational expenses and their average cost is zero.
    """

    FOR_RESALE = "for_resale"
    INTERNAL_USE = "internal_use"


class Product(TrackedBase):
    """
    A catalog product.

    Contract:
        Catalog fields (name, sku, price, ...) belong to the catalog
        collaborator.  The cost fields are written only by the stock ledger.

    Guarantees:
        - stock_quantity == sum of remaining_quantity over the product's
          stock entries, as of the last recompute.
        - average_cost == quantity-weighted mean unit cost of entries with
          remaining quantity, rounded half-up to cents.

    Non-goals:
        - No public setter for stock_quantity / average_cost.
    """

    __tablename__ = "products"

    __table_args__ = (
        Index("idx_product_tenant_name", "tenant_id", "name"),
        Index("idx_product_classification", "classification"),
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    sku: Mapped[str | None] = mapped_column(String(100), nullable=True)
    ncm: Mapped[str | None] = mapped_column(String(20), nullable=True)
    description: Mapped[str | None] = mapped_column(String(2000), nullable=True)

    # Sale price; zero means "pricing pending"
    price: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))

    manage_stock: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    classification: Mapped[ProductClassification] = mapped_column(
        String(20),
        nullable=False,
        default=ProductClassification.FOR_RESALE,
    )

    department: Mapped[str | None] = mapped_column(String(50), nullable=True)

    # Derived cache -- written only by StockLedgerService
    _stock_quantity: Mapped[int] = mapped_column(
        "stock_quantity",
        Integer,
        nullable=False,
        default=0,
    )

    _average_cost: Mapped[Decimal] = mapped_column(
        "average_cost",
        Numeric(38, 9),
        nullable=False,
        default=Decimal("0"),
    )

    @property
    def stock_quantity(self) -> int:
        """Units on hand, derived from live stock entries."""
        return self._stock_quantity or 0

    @property
    def average_cost(self) -> Decimal:
        """Weighted-average unit cost, derived from live stock entries."""
        if self._average_cost is None:
            return Decimal("0")
        return self._average_cost

    def __repr__(self) -> str:
        return (
            f"<Product {self.name}: qty={self._stock_quantity} "
            f"avg={self._average_cost} {self.classification}>"
        )
