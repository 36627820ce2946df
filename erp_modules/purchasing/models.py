"""
Purchasing input types.

Frozen DTOs accepted by ``PurchaseInvoiceService.create_invoice``.  A line
either references an existing product by id or describes a new product to be
created together with the invoice.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID


@dataclass(frozen=True)
class NewProductSpec:
    """Catalog data for a product first seen on this invoice."""

    name: str
    sku: str | None = None
    ncm: str | None = None


@dataclass(frozen=True)
class InvoiceLineInput:
    """One line of a purchase invoice as entered by the user."""

    quantity: int
    raw_unit_cost: Decimal
    product_id: UUID | str | None = None
    new_product: NewProductSpec | None = None
