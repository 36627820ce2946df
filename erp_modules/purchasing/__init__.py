"""
Purchasing Module (``erp_modules.purchasing``).

Responsibility
--------------
Purchase invoice intake and reversal: landed-cost allocation, stock entry
creation, weighted-average cost recompute, accounts-payable posting and
post-commit notifications.

Architecture position
---------------------
**Modules layer** -- ``PurchaseInvoiceService`` owns the transaction
boundary and delegates computation to ``erp_engines`` and persistence to
``erp_kernel`` services.
"""

from erp_modules.purchasing.models import InvoiceLineInput, NewProductSpec
from erp_modules.purchasing.service import PurchaseInvoiceService

__all__ = [
    "InvoiceLineInput",
    "NewProductSpec",
    "PurchaseInvoiceService",
]
