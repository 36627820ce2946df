"""
Inventory Module (``erp_modules.inventory``).

Product cost maintenance: ad-hoc weighted-average recompute and
reclassification of products from resale to internal use.
"""

from erp_modules.inventory.service import InventoryService, ReclassificationResult

__all__ = [
    "InventoryService",
    "ReclassificationResult",
]
