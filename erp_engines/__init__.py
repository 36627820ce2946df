"""
Module: erp_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    calculation engines.  Canonical import surface for erp_modules.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May import erp_kernel.db.types and erp_kernel.logging_config only.
    MUST NOT import erp_kernel services, selectors or erp_modules.

Invariants enforced:
    - Decimal-only arithmetic: floats are never used for money.
    - Determinism: identical inputs always produce identical outputs.
    - Every engine invocation is traced through ``@traced_engine``.
"""

from erp_engines.cost_allocation import (
    AllocatedLine,
    CostAllocationEngine,
    CostAllocationResult,
    CostLine,
)
from erp_engines.tracer import compute_input_fingerprint, traced_engine

__all__ = [
    "AllocatedLine",
    "CostAllocationEngine",
    "CostAllocationResult",
    "CostLine",
    "compute_input_fingerprint",
    "traced_engine",
]
