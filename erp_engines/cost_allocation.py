"""
Module: erp_engines.cost_allocation
Responsibility:
    Distribute the indirect costs of a purchase invoice (freight, other
    charges) across its lines in proportion to each line's share of the
    pre-allocation subtotal, apply the tax rate, and derive the allocated
    unit cost that enters the stock ledger.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - Conservation: ``total_cost == sum(line.total_line_cost)`` exactly,
      because the total is summed from already-rounded line totals.
    - Rounding happens once per line total and once per unit cost
      (``round2``, ROUND_HALF_UP).  Shares and proportions keep full
      Decimal precision.
    - A zero subtotal (every line free) yields zero proportions, so indirect
      costs are not allocated to any line.
    - Purity: same inputs always produce the same result.

Failure modes:
    - ValueError on an empty line list.
    - ValueError on a non-positive or non-integer quantity.
    - ValueError on a negative raw unit cost, freight, tax rate or other costs.

Usage:
    from erp_engines.cost_allocation import CostAllocationEngine, CostLine

    result = CostAllocationEngine().allocate(
        lines=[CostLine(quantity=10, raw_unit_cost=Decimal("10.00"))],
        freight_cost=Decimal("50.00"),
        tax_rate=Decimal("0.10"),
        other_costs=Decimal("0"),
    )
    result.lines[0].allocated_unit_cost  # Decimal("16.50")
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal

from erp_engines.tracer import traced_engine
from erp_kernel.db.types import ZERO, round2, to_decimal
from erp_kernel.logging_config import get_logger

logger = get_logger("engines.cost_allocation")

ONE = Decimal("1")


@dataclass(frozen=True)
class CostLine:
    """One invoice line as printed by the supplier."""

    quantity: int
    raw_unit_cost: Decimal


@dataclass(frozen=True)
class AllocatedLine:
    """
    Allocation outcome for one invoice line.

    Guarantees:
        - total_line_cost and allocated_unit_cost are rounded to cents.
        - proportion, freight_share and other_share are unrounded.
    """

    quantity: int
    raw_unit_cost: Decimal
    proportion: Decimal
    freight_share: Decimal
    other_share: Decimal
    total_line_cost: Decimal
    allocated_unit_cost: Decimal


@dataclass(frozen=True)
class CostAllocationResult:
    """Complete allocation of one invoice."""

    subtotal: Decimal
    total_cost: Decimal
    lines: tuple[AllocatedLine, ...]

    @property
    def allocated_overhead(self) -> Decimal:
        """Everything the invoice costs beyond the printed subtotal."""
        return self.total_cost - self.subtotal


def _require_non_negative(name: str, value: Decimal) -> None:
    if value < ZERO:
        raise ValueError(f"{name} cannot be negative: {value}")


class CostAllocationEngine:
    """
    Proportional landed-cost allocator.

    Contract:
        Pure function over Decimal inputs.  No I/O, no database access.

    Non-goals:
        - Does not decide which product a line stocks; the caller maps the
          returned lines back to its own input positionally.
    """

    @traced_engine(
        "cost_allocation",
        "1.0",
        fingerprint_fields=("lines", "freight_cost", "tax_rate", "other_costs"),
    )
    def allocate(
        self,
        *,
        lines: Sequence[CostLine],
        freight_cost: Decimal,
        tax_rate: Decimal,
        other_costs: Decimal,
    ) -> CostAllocationResult:
        """
        Allocate freight and other costs across lines and apply tax.

        Args:
            lines: Invoice lines, in invoice order.
            freight_cost: Freight for the whole invoice.
            tax_rate: Fraction applied on top of each line (0.15 = 15%).
            other_costs: Any other invoice-level charge.

        Returns:
            CostAllocationResult with one AllocatedLine per input line, in
            input order.
        """
        if not lines:
            raise ValueError("Cannot allocate an invoice without lines")

        freight = to_decimal(freight_cost)
        tax = to_decimal(tax_rate)
        other = to_decimal(other_costs)
        _require_non_negative("freight_cost", freight)
        _require_non_negative("tax_rate", tax)
        _require_non_negative("other_costs", other)

        line_subtotals: list[Decimal] = []
        for index, line in enumerate(lines):
            quantity = line.quantity
            if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
                raise ValueError(
                    f"Line {index}: quantity must be a positive integer, got {quantity!r}"
                )
            raw = to_decimal(line.raw_unit_cost)
            _require_non_negative(f"Line {index}: raw_unit_cost", raw)
            line_subtotals.append(quantity * raw)

        subtotal = sum(line_subtotals, ZERO)
        tax_factor = ONE + tax

        allocated: list[AllocatedLine] = []
        for line, line_subtotal in zip(lines, line_subtotals):
            proportion = line_subtotal / subtotal if subtotal > ZERO else ZERO
            freight_share = freight * proportion
            other_share = other * proportion
            total_line_cost = round2(
                (line_subtotal + freight_share + other_share) * tax_factor
            )
            allocated.append(
                AllocatedLine(
                    quantity=line.quantity,
                    raw_unit_cost=to_decimal(line.raw_unit_cost),
                    proportion=proportion,
                    freight_share=freight_share,
                    other_share=other_share,
                    total_line_cost=total_line_cost,
                    allocated_unit_cost=round2(total_line_cost / line.quantity),
                )
            )

        total_cost = sum((a.total_line_cost for a in allocated), ZERO)
        result = CostAllocationResult(
            subtotal=round2(subtotal),
            total_cost=total_cost,
            lines=tuple(allocated),
        )

        logger.info(
            "cost_allocation_completed",
            extra={
                "line_count": len(allocated),
                "subtotal": str(result.subtotal),
                "total_cost": str(result.total_cost),
            },
        )
        return result
