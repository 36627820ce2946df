"""
Shared helpers for module transaction flows.

Used by erp_modules/*/service.py to translate store failures into typed
kernel errors that name the failing workflow step, and to normalize the
identifier arguments callers hand in.

Architecture: Modules layer. Imports only from erp_kernel.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError

from erp_kernel.exceptions import PersistenceError, TenantRequiredError


@contextmanager
def persistence_step(step: str, line_index: int | None = None) -> Iterator[None]:
    """Re-raise store failures inside the block as PersistenceError(step)."""
    try:
        yield
    except SQLAlchemyError as exc:
        raise PersistenceError(step, str(exc), line_index=line_index) from exc


def parse_uuid(value: UUID | str | None) -> UUID | None:
    """UUID or UUID string to UUID; None and blank strings to None.

    Raises:
        ValueError: if a non-blank string is not a UUID.
    """
    if value is None:
        return None
    if isinstance(value, UUID):
        return value
    text = str(value).strip()
    if not text:
        return None
    return UUID(text)


def require_tenant(tenant_id: UUID | str | None, operation: str) -> UUID:
    """Resolve the tenant id or raise TenantRequiredError."""
    try:
        tenant = parse_uuid(tenant_id)
    except ValueError:
        tenant = None
    if tenant is None:
        raise TenantRequiredError(operation)
    return tenant
