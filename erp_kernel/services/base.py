"""
BaseService -- common shape of the kernel services.

Kernel services receive the caller's SQLAlchemy ``Session`` and persist with
``session.flush()`` only.  The module facade in ``erp_modules`` that invoked
them decides whether the unit of work commits or rolls back, so a purchase
invoice is written completely or not at all.

Reads that return DTOs live in ``erp_kernel/selectors/`` instead.
"""

from abc import ABC
from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from erp_kernel.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseService(ABC, Generic[ModelType]):
    """Flush-only service bound to the caller's session."""

    def __init__(self, session: Session):
        self.session = session
