"""Domain models for the ERP kernel."""

from erp_kernel.models.category import Category, CategoryType
from erp_kernel.models.ledger_entry import EntryStatus, EntryType, LedgerEntry
from erp_kernel.models.notification import (
    Notification,
    NotificationStatus,
    NotificationType,
)
from erp_kernel.models.product import Product, ProductClassification
from erp_kernel.models.purchase_invoice import PaymentStatus, PurchaseInvoice, StockEntry
from erp_kernel.models.sale import Sale, SaleItem
from erp_kernel.models.supplier import Supplier

__all__ = [
    "Category",
    "CategoryType",
    "EntryStatus",
    "EntryType",
    "LedgerEntry",
    "Notification",
    "NotificationStatus",
    "NotificationType",
    "PaymentStatus",
    "Product",
    "ProductClassification",
    "PurchaseInvoice",
    "Sale",
    "SaleItem",
    "StockEntry",
    "Supplier",
]
