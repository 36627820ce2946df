"""
Module: erp_kernel.db.types
Responsibility: The money rounding utility and Decimal coercion.
    Centralizes precision and rounding so that every model, engine and
    service uses identical definitions.
Architecture position: Kernel > DB.  May be imported by models/, services/,
    selectors/ and erp_engines.  MUST NOT import from any of those layers.

Invariants enforced:
    - round_money() is the ONLY sanctioned rounding function for currency.
      Half-up to 2 decimal places, applied at write/display boundaries only,
      never during summation.
    - No floats for money.  Non-Decimal inputs are converted through str()
      so that 0.1 becomes Decimal("0.1"), not its binary approximation.
"""

from decimal import Decimal, ROUND_HALF_UP

MONEY_DECIMAL_PLACES = 2
DEFAULT_ROUNDING = ROUND_HALF_UP

ZERO = Decimal("0")


def to_decimal(value: Decimal | int | float | str) -> Decimal:
    """
    Coerce a numeric input to Decimal without binary float artifacts.

    Raises:
        decimal.InvalidOperation: if value is not numeric.
    """
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_money(
    value: Decimal | int | float | str,
    decimal_places: int = MONEY_DECIMAL_PLACES,
    rounding: str = DEFAULT_ROUNDING,
) -> Decimal:
    """
    Round a monetary value to the given number of decimal places.

    This is the ONLY sanctioned rounding function for currency values.
    All other code MUST delegate rounding to this function.

    Args:
        value: The value to round.
        decimal_places: Number of decimal places to round to.
        rounding: Rounding mode (default: ROUND_HALF_UP).

    Returns:
        Rounded Decimal value.
    """
    quantize_str = "1." + "0" * decimal_places if decimal_places else "1"
    return to_decimal(value).quantize(Decimal(quantize_str), rounding=rounding)


def round2(value: Decimal | int | float | str) -> Decimal:
    """Half-up rounding to cents: round2(x) = round(x * 100) / 100."""
    return round_money(value, 2)
