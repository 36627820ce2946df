"""Kernel services.  Flush-only; module facades own the transaction."""

from erp_kernel.services.category_service import CategoryService
from erp_kernel.services.notification_service import (
    DatabaseNotificationSink,
    NotificationSink,
)
from erp_kernel.services.stock_ledger_service import CostSnapshot, StockLedgerService

__all__ = [
    "CategoryService",
    "CostSnapshot",
    "DatabaseNotificationSink",
    "NotificationSink",
    "StockLedgerService",
]
