"""
Hypothesis-based property tests for the cost allocator.

Properties:
- Conservation: total_cost equals the sum of the allocated line totals, and
  stays within one cent per line of the unrounded landed cost.
- Proportions sum to one whenever the subtotal is positive.
- A zero-cost invoice allocates nothing.
- Allocated unit costs are never negative.
"""

from decimal import Decimal

import pytest
from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from erp_engines.cost_allocation import CostAllocationEngine, CostLine

pytestmark = pytest.mark.slow

money = st.decimals(
    min_value=Decimal("0"),
    max_value=Decimal("100000"),
    places=2,
    allow_nan=False,
    allow_infinity=False,
)
rates = st.decimals(
    min_value=Decimal("0"),
    max_value=Decimal("1"),
    places=4,
    allow_nan=False,
    allow_infinity=False,
)
cost_lines = st.lists(
    st.builds(
        CostLine,
        quantity=st.integers(min_value=1, max_value=10_000),
        raw_unit_cost=money,
    ),
    min_size=1,
    max_size=25,
)

ENGINE = CostAllocationEngine()


@settings(max_examples=200, deadline=None, suppress_health_check=[HealthCheck.too_slow])
@given(lines=cost_lines, freight=money, tax=rates, other=money)
def test_total_is_conserved(lines, freight, tax, other):
    result = ENGINE.allocate(
        lines=lines, freight_cost=freight, tax_rate=tax, other_costs=other,
    )

    assert result.total_cost == sum(l.total_line_cost for l in result.lines)

    subtotal = sum(l.quantity * l.raw_unit_cost for l in lines)
    if subtotal > 0:
        exact = (subtotal + freight + other) * (1 + tax)
        assert abs(result.total_cost - exact) <= Decimal("0.01") * len(lines)


@settings(max_examples=200, deadline=None)
@given(lines=cost_lines, freight=money)
def test_proportions_sum_to_one(lines, freight):
    result = ENGINE.allocate(
        lines=lines, freight_cost=freight, tax_rate=Decimal("0"), other_costs=Decimal("0"),
    )

    if result.subtotal > 0:
        total = sum(l.proportion for l in result.lines)
        assert abs(total - Decimal("1")) < Decimal("1e-20")
    else:
        assert all(l.proportion == 0 for l in result.lines)


@settings(max_examples=100, deadline=None)
@given(
    quantities=st.lists(st.integers(min_value=1, max_value=1000), min_size=1, max_size=10),
    freight=money,
    tax=rates,
    other=money,
)
def test_zero_subtotal_allocates_nothing(quantities, freight, tax, other):
    lines = [CostLine(quantity=q, raw_unit_cost=Decimal("0")) for q in quantities]
    result = ENGINE.allocate(
        lines=lines, freight_cost=freight, tax_rate=tax, other_costs=other,
    )

    assert result.total_cost == 0
    assert all(l.allocated_unit_cost == 0 for l in result.lines)


@settings(max_examples=200, deadline=None)
@given(lines=cost_lines, freight=money, tax=rates, other=money)
def test_unit_costs_non_negative_and_rounded(lines, freight, tax, other):
    result = ENGINE.allocate(
        lines=lines, freight_cost=freight, tax_rate=tax, other_costs=other,
    )

    for line in result.lines:
        assert line.allocated_unit_cost >= 0
        assert line.allocated_unit_cost.as_tuple().exponent == -2
        assert line.total_line_cost.as_tuple().exponent == -2
