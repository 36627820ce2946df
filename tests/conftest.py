"""
Pytest fixtures for the ERP purchase ledger test suite.

Provides:
- A fresh database per test (tables created and dropped around each test)
- Tenant/actor ids, a deterministic clock and the default configuration
- Factories for the external records the core consumes (products,
  suppliers, sales with their CMV ledger entries)
- Workflow services with a recording notification sink, plus invoice line
  and invoice factories shared by module and selector tests
- Structured log capture

Environment Variables:
- DATABASE_URL: SQLAlchemy URL of the test database.  Defaults to an
  in-memory SQLite database; point it at PostgreSQL to run the suite
  against the production backend.
"""

import json
import logging
import os
from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from decimal import Decimal
from io import StringIO
from uuid import uuid4

import pytest

from erp_config import get_active_config
from erp_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_session,
    init_engine_from_url,
    reset_engine,
)
from erp_kernel.domain.clock import DeterministicClock
from erp_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from erp_kernel.models import (
    Category,
    EntryStatus,
    EntryType,
    LedgerEntry,
    Product,
    ProductClassification,
    Sale,
    SaleItem,
    Supplier,
)
from erp_kernel.services.category_service import CategoryService
from erp_modules.inventory import InventoryService
from erp_modules.purchasing import InvoiceLineInput, NewProductSpec, PurchaseInvoiceService

DEFAULT_DATABASE_URL = "sqlite://"


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture erp_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, purchase_service):
            purchase_service.create_invoice(...)
            logs = captured_logs()
            assert any(r["message"] == "purchase_invoice_committed" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("erp_kernel")
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)


# =============================================================================
# Database fixtures
# =============================================================================


@pytest.fixture
def session():
    """A session on a freshly created schema.  Tables are dropped afterwards."""
    init_engine_from_url(os.environ.get("DATABASE_URL", DEFAULT_DATABASE_URL))
    create_tables()
    db_session = get_session()
    try:
        yield db_session
    finally:
        db_session.rollback()
        db_session.close()
        drop_tables()
        reset_engine()


# =============================================================================
# Identity, clock and configuration
# =============================================================================


@pytest.fixture
def tenant_id():
    return uuid4()


@pytest.fixture
def actor_id():
    return uuid4()


@pytest.fixture
def deterministic_clock():
    return DeterministicClock(datetime(2024, 3, 1, 12, 0, tzinfo=UTC))


@pytest.fixture
def erp_config():
    return get_active_config()


@pytest.fixture
def entry_date():
    return date(2024, 3, 1)


# =============================================================================
# Collaborator record factories
# =============================================================================


@pytest.fixture
def create_product(session, tenant_id, actor_id):
    """Factory for catalog products owned by the test tenant."""

    def _create(
        name: str = "Widget",
        classification: ProductClassification = ProductClassification.FOR_RESALE,
        department: str | None = None,
        price: Decimal = Decimal("0"),
        for_tenant=None,
    ) -> Product:
        product = Product(
            tenant_id=for_tenant or tenant_id,
            name=name,
            price=price,
            manage_stock=True,
            classification=classification.value,
            department=department,
            created_by_id=actor_id,
        )
        session.add(product)
        session.commit()
        return product

    return _create


@pytest.fixture
def create_supplier(session, tenant_id, actor_id):
    """Factory for suppliers owned by the test tenant."""

    def _create(name: str = "Acme Supplies", for_tenant=None) -> Supplier:
        supplier = Supplier(
            tenant_id=for_tenant or tenant_id,
            name=name,
            created_by_id=actor_id,
        )
        session.add(supplier)
        session.commit()
        return supplier

    return _create


@pytest.fixture
def chart_of_accounts(session, tenant_id, actor_id, erp_config) -> dict[str, Category]:
    """The default plan of accounts seeded for the test tenant, keyed by code."""
    created = CategoryService(session).ensure_system_categories(
        tenant_id, actor_id, erp_config.chart_of_accounts,
    )
    session.commit()
    return {c.code: c for c in created}


@pytest.fixture
def record_sale(session, tenant_id, actor_id):
    """
    Factory for a completed sale of one product plus its CMV ledger entry.

    ``link_product=False`` produces a legacy entry that names the product
    only in its description.
    """

    def _record(
        product: Product,
        cmv_category: Category,
        amount: Decimal = Decimal("50.00"),
        quantity: int = 1,
        link_product: bool = True,
        description: str | None = None,
        sale_date: date = date(2024, 3, 10),
    ) -> LedgerEntry:
        sale = Sale(
            tenant_id=tenant_id,
            sale_date=sale_date,
            total_amount=amount * 2,
            created_by_id=actor_id,
        )
        sale.items.append(
            SaleItem(
                tenant_id=tenant_id,
                product_id=product.id,
                quantity=quantity,
                unit_price=amount * 2 / quantity,
                created_by_id=actor_id,
            )
        )
        session.add(sale)
        session.flush()

        entry = LedgerEntry(
            tenant_id=tenant_id,
            description=description or f"COGS - {product.name}",
            amount=amount,
            entry_type=EntryType.EXPENSE.value,
            status=EntryStatus.PAID.value,
            due_date=sale_date,
            competence_date=sale_date,
            category_id=cmv_category.id,
            sale_id=sale.id,
            product_id=product.id if link_product else None,
            created_by_id=actor_id,
        )
        session.add(entry)
        session.commit()
        return entry

    return _record


# =============================================================================
# Workflow services and invoice factories
# =============================================================================


@dataclass
class RecordingNotificationSink:
    """In-memory sink that records every notification it is handed."""

    notifications: list[dict] = field(default_factory=list)

    def create(self, **fields) -> None:
        self.notifications.append(fields)

    def of_type(self, notification_type) -> list[dict]:
        return [n for n in self.notifications if n["type"] == notification_type]


@pytest.fixture
def notification_sink():
    return RecordingNotificationSink()


@pytest.fixture
def purchase_service(session, deterministic_clock, erp_config, notification_sink):
    return PurchaseInvoiceService(
        session,
        clock=deterministic_clock,
        config=erp_config,
        notification_sink=notification_sink,
    )


@pytest.fixture
def inventory_service(session, erp_config):
    return InventoryService(session, config=erp_config)


@pytest.fixture
def existing_line():
    """Line factory for an existing product."""

    def _line(product, quantity=10, cost="10.00") -> InvoiceLineInput:
        return InvoiceLineInput(
            quantity=quantity,
            raw_unit_cost=Decimal(cost),
            product_id=product.id,
        )

    return _line


@pytest.fixture
def new_product_line():
    """Line factory for a product first seen on the invoice."""

    def _line(name, quantity=1, cost="1.00", sku=None) -> InvoiceLineInput:
        return InvoiceLineInput(
            quantity=quantity,
            raw_unit_cost=Decimal(cost),
            new_product=NewProductSpec(name=name, sku=sku),
        )

    return _line


@pytest.fixture
def create_invoice(purchase_service, tenant_id, actor_id, entry_date):
    """Create an invoice with zero indirect costs unless overridden."""

    def _create(lines, freight="0", tax="0", other="0", **kwargs):
        return purchase_service.create_invoice(
            tenant_id=tenant_id,
            actor_id=actor_id,
            lines=lines,
            freight_cost=Decimal(freight),
            tax_rate=Decimal(tax),
            other_costs=Decimal(other),
            entry_date=kwargs.pop("entry_date", entry_date),
            **kwargs,
        )

    return _create
