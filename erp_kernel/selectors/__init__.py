"""Read-only query selectors returning frozen DTOs."""

from erp_kernel.selectors.purchase_invoice_selector import (
    InvoiceLineView,
    InvoiceView,
    PayableView,
    PurchaseInvoiceSelector,
)

__all__ = [
    "InvoiceLineView",
    "InvoiceView",
    "PayableView",
    "PurchaseInvoiceSelector",
]
