"""
Typed Exception Hierarchy for the ERP Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Callers of the purchase ledger (HTTP handlers, jobs, repair tooling) must be
able to tell a rejected invoice from a missing record from a database outage
without parsing messages.  Every error therefore:
  1. Has its own class (catch by type, not message)
  2. Carries a CODE class attribute (machine-readable, API-safe)
  3. Stores its context as attributes (not just a message string)

Example:
    try:
        invoice_id = purchasing.create_invoice(...)
    except InvalidQuantityError as e:
        return {"error": e.code, "line": e.line_index}
    except PersistenceError as e:
        return {"error": e.code, "step": e.step}

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    ErpKernelError (base)
    |
    +-- AuthorizationError
    |   +-- TenantRequiredError
    |
    +-- ValidationError
    |   +-- EmptyInvoiceError
    |   +-- InvalidQuantityError
    |   +-- MissingLineDataError
    |   +-- InvalidCostComponentError
    |
    +-- NotFoundError
    |   +-- InvoiceNotFoundError
    |   +-- ProductNotFoundError
    |   +-- SupplierNotFoundError
    |   +-- CategoryNotFoundError
    |
    +-- PersistenceError
    |
    +-- NotificationDeliveryError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category      | Code                     | When Raised
--------------|--------------------------|-------------------------------------------
Authorization | TENANT_REQUIRED          | Operation called without a tenant id
--------------|--------------------------|-------------------------------------------
Validation    | EMPTY_INVOICE            | Invoice has no lines
              | INVALID_QUANTITY         | Line quantity is not a positive integer
              | MISSING_LINE_DATA        | Line has neither product nor new-product name
              | INVALID_COST_COMPONENT   | Negative freight / tax / other / raw cost
--------------|--------------------------|-------------------------------------------
Not found     | INVOICE_NOT_FOUND        | Invoice id unknown for the tenant
              | PRODUCT_NOT_FOUND        | Product id unknown for the tenant
              | SUPPLIER_NOT_FOUND       | Supplier id unknown for the tenant
              | CATEGORY_NOT_FOUND       | Category code cannot be resolved
--------------|--------------------------|-------------------------------------------
Persistence   | PERSISTENCE_ERROR        | Store failure mid-transaction (rolled back)
--------------|--------------------------|-------------------------------------------
Notification  | NOTIFICATION_DELIVERY    | Post-commit notification failed (logged only)

===============================================================================
HANDLING PATTERNS
===============================================================================

1. VALIDATION errors are raised before any write.  Nothing to clean up.

2. NOT FOUND and PERSISTENCE errors abort the enclosing transaction.  The
   module facade has already rolled back by the time the caller sees them;
   no partially applied invoice is ever observable.

3. NotificationDeliveryError never reaches the caller of create_invoice.
   The invoice is committed before notifications fire, so the error is
   logged and dropped.
"""


class ErpKernelError(Exception):
    """
    Base exception for all ERP kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "ERP_KERNEL_ERROR"


# Authorization


class AuthorizationError(ErpKernelError):
    """Base exception for authorization failures."""

    code: str = "AUTHORIZATION_ERROR"


class TenantRequiredError(AuthorizationError):
    """Operation invoked without a resolved tenant."""

    code: str = "TENANT_REQUIRED"

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"Tenant is required for {operation}")


# Validation


class ValidationError(ErpKernelError):
    """Base exception for input rejected before any write."""

    code: str = "VALIDATION_ERROR"


class EmptyInvoiceError(ValidationError):
    """Purchase invoice submitted without lines."""

    code: str = "EMPTY_INVOICE"

    def __init__(self):
        super().__init__("empty invoice: a purchase invoice needs at least one line")


class InvalidQuantityError(ValidationError):
    """Line quantity is not a positive integer."""

    code: str = "INVALID_QUANTITY"

    def __init__(self, line_index: int, quantity: object):
        self.line_index = line_index
        self.quantity = quantity
        super().__init__(
            f"Line {line_index}: quantity must be a positive integer, got {quantity!r}"
        )


class MissingLineDataError(ValidationError):
    """Line neither references a product nor names a new one."""

    code: str = "MISSING_LINE_DATA"

    def __init__(self, line_index: int, field: str):
        self.line_index = line_index
        self.field = field
        super().__init__(f"Line {line_index}: missing required data '{field}'")


class InvalidCostComponentError(ValidationError):
    """A cost component (freight, tax rate, other costs, raw cost) is negative."""

    code: str = "INVALID_COST_COMPONENT"

    def __init__(self, component: str, value: object, line_index: int | None = None):
        self.component = component
        self.value = value
        self.line_index = line_index
        where = f"Line {line_index}: " if line_index is not None else ""
        super().__init__(f"{where}{component} cannot be negative, got {value}")


# Not found


class NotFoundError(ErpKernelError):
    """Base exception for records missing at lookup time."""

    code: str = "NOT_FOUND"


class InvoiceNotFoundError(NotFoundError):
    """Purchase invoice does not exist for the tenant."""

    code: str = "INVOICE_NOT_FOUND"

    def __init__(self, invoice_id: str):
        self.invoice_id = invoice_id
        super().__init__(f"Purchase invoice not found: {invoice_id}")


class ProductNotFoundError(NotFoundError):
    """Product does not exist for the tenant."""

    code: str = "PRODUCT_NOT_FOUND"

    def __init__(self, product_id: str, line_index: int | None = None):
        self.product_id = product_id
        self.line_index = line_index
        where = f" (line {line_index})" if line_index is not None else ""
        super().__init__(f"Product not found: {product_id}{where}")


class SupplierNotFoundError(NotFoundError):
    """Supplier does not exist for the tenant."""

    code: str = "SUPPLIER_NOT_FOUND"

    def __init__(self, supplier_id: str):
        self.supplier_id = supplier_id
        super().__init__(f"Supplier not found: {supplier_id}")


class CategoryNotFoundError(NotFoundError):
    """No category with the given code could be resolved."""

    code: str = "CATEGORY_NOT_FOUND"

    def __init__(self, category_code: str):
        self.category_code = category_code
        super().__init__(f"Category not found for code: {category_code}")


# Persistence


class PersistenceError(ErpKernelError):
    """
    Underlying store failure inside a transaction.

    The transaction has been rolled back.  ``step`` names the workflow step
    that failed and ``line_index`` the invoice line, when one applies.
    """

    code: str = "PERSISTENCE_ERROR"

    def __init__(self, step: str, detail: str, line_index: int | None = None):
        self.step = step
        self.detail = detail
        self.line_index = line_index
        where = f" at line {line_index}" if line_index is not None else ""
        super().__init__(f"Persistence failure in step '{step}'{where}: {detail}")


# Notifications


class NotificationDeliveryError(ErpKernelError):
    """Best-effort notification could not be written.  Logged, never propagated."""

    code: str = "NOTIFICATION_DELIVERY"

    def __init__(self, notification_type: str, detail: str):
        self.notification_type = notification_type
        self.detail = detail
        super().__init__(f"Failed to deliver {notification_type} notification: {detail}")
