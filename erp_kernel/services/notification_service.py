"""
Notification sink -- best-effort work-queue messages for team roles.

Responsibility:
    Defines the ``NotificationSink`` port used by the purchase workflow and
    a database-backed implementation that writes ``Notification`` rows.

Architecture position:
    Kernel > Services (outbound adapter).  Unlike the other kernel services
    the database sink commits its own unit of work: it is only ever invoked
    after the invoice transaction has committed, and a failed notification
    must not undo a committed invoice.

Failure modes:
    - NotificationDeliveryError when the row cannot be written.  The sink
      rolls its own work back before raising.  Callers log and drop it.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Protocol, runtime_checkable
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from erp_kernel.exceptions import NotificationDeliveryError
from erp_kernel.logging_config import get_logger
from erp_kernel.models.notification import (
    Notification,
    NotificationStatus,
    NotificationType,
)

logger = get_logger("services.notification")


@runtime_checkable
class NotificationSink(Protocol):
    """Port for emitting a typed notification to a target role."""

    def create(
        self,
        tenant_id: UUID,
        type: NotificationType,
        target_role: str,
        title: str,
        description: str,
        linked_invoice_id: UUID | None,
        expected_amount: Decimal | None,
        due_at: datetime,
    ) -> None: ...


class DatabaseNotificationSink:
    """Writes notifications to the ``notifications`` table, one commit each."""

    def __init__(self, session: Session, actor_id: UUID):
        self.session = session
        self.actor_id = actor_id

    def create(
        self,
        tenant_id: UUID,
        type: NotificationType,
        target_role: str,
        title: str,
        description: str,
        linked_invoice_id: UUID | None,
        expected_amount: Decimal | None,
        due_at: datetime,
    ) -> None:
        notification = Notification(
            tenant_id=tenant_id,
            type=NotificationType(type).value,
            target_role=target_role,
            title=title,
            description=description,
            purchase_invoice_id=linked_invoice_id,
            expected_amount=expected_amount,
            status=NotificationStatus.PENDING.value,
            due_at=due_at,
            created_by_id=self.actor_id,
        )
        try:
            self.session.add(notification)
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise NotificationDeliveryError(NotificationType(type).value, str(exc)) from exc

        logger.info(
            "notification_created",
            extra={
                "notification_type": NotificationType(type).value,
                "target_role": target_role,
                "notification_id": str(notification.id),
            },
        )
