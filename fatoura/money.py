"""
Money helpers shared by the calculators.

Amounts are Decimal. Anything that is not a finite number, or is negative,
coerces to zero instead of raising.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

ZERO = Decimal('0')
CENT = Decimal('0.01')
FILS = Decimal('0.001')


def to_decimal(value, default: Decimal = ZERO) -> Decimal:
    """Convert to Decimal; non-numeric, NaN and infinite values give default."""
    if value is None or value == '' or isinstance(value, bool):
        return default
    try:
        result = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        return default
    if not result.is_finite():
        return default
    return result


def to_amount(value) -> Decimal:
    """Non-negative amount: negatives and garbage become 0."""
    result = to_decimal(value)
    return result if result > ZERO else ZERO


def to_quantity(value) -> int:
    """Non-negative whole quantity."""
    amount = to_amount(value)
    return int(amount.to_integral_value(rounding=ROUND_HALF_UP))


def round_cents(value: Decimal) -> Decimal:
    """Round half-up to 2 places (discount arithmetic)."""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def round_fils(value: Decimal) -> Decimal:
    """Round half-up to 3 places (stored KWD amounts)."""
    return to_decimal(value).quantize(FILS, rounding=ROUND_HALF_UP)


def clamp(value: Decimal) -> Decimal:
    """Clamp at zero (display and persisted order totals)."""
    return value if value > ZERO else ZERO


def format_amount(value, decimal_places: int = 3) -> str:
    """
    Format an amount for display.

    Returns:
        Formatted string (e.g., "90.000")
    """
    if value is None:
        return "-"
    return f"{to_decimal(value):.{decimal_places}f}"
