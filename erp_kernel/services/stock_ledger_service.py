"""
StockLedgerService -- the stock entry ledger and its derived product cache.

Responsibility:
    Appends stock entries (one acquisition lot per purchase invoice line) and
    recomputes each product's stock quantity and weighted-average unit cost
    from the complete set of its live entries.

Architecture position:
    Kernel > Services.  Flush-only; the calling module facade owns the
    transaction.  This is the ONLY writer of ``Product.stock_quantity`` and
    ``Product.average_cost``.

Invariants enforced:
    - After ``recompute(p)``:
          stock_quantity == sum(remaining_quantity)
          average_cost   == round2(sum(remaining * unit_cost) / stock_quantity)
      or 0 when no units remain.
    - Recompute is a full overwrite, never an incremental update, so it is
      idempotent and safe after deletions.
    - The formula does not depend on classification.  Reclassification zeroes
      the cost once through ``clear_average_cost``; a later recompute restores
      the weighted mean of the live entries.

Failure modes:
    - ProductNotFoundError if the product id does not exist.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID

from sqlalchemy import select

from erp_kernel.db.types import ZERO, round2, to_decimal
from erp_kernel.exceptions import ProductNotFoundError
from erp_kernel.logging_config import get_logger
from erp_kernel.models.product import Product
from erp_kernel.models.purchase_invoice import PurchaseInvoice, StockEntry
from erp_kernel.services.base import BaseService

logger = get_logger("services.stock_ledger")


@dataclass(frozen=True)
class CostSnapshot:
    """Derived cost state of a product after a recompute."""

    product_id: UUID
    stock_quantity: int
    average_cost: Decimal


class StockLedgerService(BaseService[StockEntry]):
    """Stock entry writer and weighted-average cost recompute."""

    def record_entry(
        self,
        tenant_id: UUID,
        actor_id: UUID,
        product_id: UUID,
        invoice: PurchaseInvoice,
        quantity: int,
        unit_cost: Decimal,
        raw_unit_cost: Decimal,
    ) -> StockEntry:
        """
        Append a stock entry for an invoice line.

        remaining_quantity starts equal to quantity.  The entry is attached
        to ``invoice.stock_entries`` so that deleting the invoice removes it.
        """
        entry = StockEntry(
            tenant_id=tenant_id,
            product_id=product_id,
            quantity=quantity,
            remaining_quantity=quantity,
            unit_cost=unit_cost,
            raw_unit_cost=raw_unit_cost,
            created_by_id=actor_id,
        )
        invoice.stock_entries.append(entry)
        self.session.add(entry)
        self.session.flush()
        return entry

    def _get_product(self, product_id: UUID) -> Product:
        product = self.session.get(Product, product_id)
        if product is None:
            raise ProductNotFoundError(str(product_id))
        return product

    def recompute(self, product_id: UUID) -> CostSnapshot:
        """
        Rebuild stock quantity and average cost from the product's live entries.

        Returns:
            CostSnapshot with the values written to the product.

        Raises:
            ProductNotFoundError: If the product does not exist.
        """
        product = self._get_product(product_id)

        # Pending deletes must be visible to the scan below
        self.session.flush()

        rows = self.session.execute(
            select(StockEntry.remaining_quantity, StockEntry.unit_cost).where(
                StockEntry.product_id == product_id
            )
        ).all()

        total_quantity = 0
        total_value = ZERO
        for remaining, unit_cost in rows:
            total_quantity += remaining
            total_value += remaining * to_decimal(unit_cost)

        if total_quantity > 0:
            average_cost = round2(total_value / total_quantity)
        else:
            average_cost = round2(ZERO)

        product._stock_quantity = total_quantity
        product._average_cost = average_cost
        self.session.flush()

        logger.info(
            "stock_ledger_recomputed",
            extra={
                "product_id": str(product_id),
                "entry_count": len(rows),
                "stock_quantity": total_quantity,
                "average_cost": str(average_cost),
            },
        )
        return CostSnapshot(
            product_id=product_id,
            stock_quantity=total_quantity,
            average_cost=average_cost,
        )

    def recompute_many(self, product_ids: Iterable[UUID]) -> list[CostSnapshot]:
        """Recompute each distinct product once, in a stable order."""
        return [self.recompute(pid) for pid in sorted(set(product_ids), key=str)]

    def clear_average_cost(self, product: Product) -> None:
        """Zero the average cost of a product leaving the resale inventory."""
        product._average_cost = round2(ZERO)
        self.session.flush()

        logger.info(
            "stock_ledger_average_cost_cleared",
            extra={"product_id": str(product.id)},
        )
