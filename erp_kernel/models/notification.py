"""
Module: erp_kernel.models.notification
Responsibility: ORM persistence for work-queue notifications addressed to a
    team role (commercial, finance).
Architecture position: Kernel > Models.  May import from db/base.py only.

Notifications are written outside the invoice transaction and are not part
of invoice correctness.  purchase_invoice_id is therefore a plain column,
not a foreign key: a notification may outlive the invoice it mentions.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID

from sqlalchemy import DateTime, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from erp_kernel.db.base import TrackedBase, UUIDString


class NotificationType(str, Enum):
    """Kinds of notification emitted by the purchase workflow."""

    PRICING_NEEDED = "PRICING_NEEDED"
    PAYMENT_REVIEW = "PAYMENT_REVIEW"


class NotificationStatus(str, Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    DISMISSED = "DISMISSED"


class Notification(TrackedBase):
    """A typed message for a target role."""

    __tablename__ = "notifications"

    __table_args__ = (
        Index("idx_notification_tenant_due", "tenant_id", "due_at"),
        Index("idx_notification_invoice", "purchase_invoice_id"),
    )

    type: Mapped[NotificationType] = mapped_column(String(30), nullable=False)
    target_role: Mapped[str] = mapped_column(String(30), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(String(2000), nullable=False)

    purchase_invoice_id: Mapped[UUID | None] = mapped_column(
        UUIDString(),
        nullable=True,
    )

    expected_amount: Mapped[Decimal | None] = mapped_column(nullable=True)

    status: Mapped[NotificationStatus] = mapped_column(
        String(20),
        nullable=False,
        default=NotificationStatus.PENDING,
    )

    due_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    def __repr__(self) -> str:
        return f"<Notification {self.type} -> {self.target_role}: {self.title}>"
