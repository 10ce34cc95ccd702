"""
Discount engine and balance arithmetic.

Discount modes are mutually exclusive:
- flat / referral / loyalty: a percentage of the subtotal, rounded half-up
  to 2 places
- by_value: a cash amount entered directly

Totals and balances are kept unclamped. Only display values (and the
persisted order_total) are clamped at zero.
"""

from dataclasses import dataclass
from decimal import Decimal

from fatoura.models.enums import DiscountType
from fatoura.money import ZERO, clamp, round_cents, to_amount, to_decimal

PERCENTAGE_MODES = frozenset({DiscountType.FLAT, DiscountType.REFERRAL, DiscountType.LOYALTY})


def percentage_of(subtotal, percentage) -> Decimal:
    """round(subtotal x percentage / 100, 2)."""
    return round_cents(to_decimal(subtotal) * to_decimal(percentage) / Decimal(100))


@dataclass
class DiscountState:
    """
    Discount selection of an order being edited.

    Changing the type wipes everything derived from the previous mode.
    In percentage modes ``value`` is derived and recomputed whenever the
    percentage or the subtotal changes.
    """

    type: str | None = None
    percentage: Decimal = ZERO
    value: Decimal = ZERO
    referral_code: str = ""

    @property
    def is_percentage_mode(self) -> bool:
        return self.type in PERCENTAGE_MODES

    def switch_type(self, discount_type) -> None:
        if discount_type is not None and discount_type not in DiscountType.values:
            discount_type = None
        self.type = discount_type
        self.percentage = ZERO
        self.value = ZERO
        self.referral_code = ""

    def set_percentage(self, percentage, subtotal) -> None:
        """Percentage modes only; ignored for by_value."""
        if not self.is_percentage_mode:
            return
        self.percentage = to_decimal(percentage)
        self.recompute(subtotal)

    def set_value(self, value) -> None:
        """by_value only; the value of percentage modes is derived."""
        if self.type != DiscountType.BY_VALUE:
            return
        self.value = to_amount(value)

    def recompute(self, subtotal) -> None:
        if self.is_percentage_mode:
            self.value = percentage_of(subtotal, self.percentage)

    def as_order_fields(self) -> dict:
        return {
            "discount_type": self.type,
            "discount_value": self.value,
            "discount_percentage": self.percentage if self.is_percentage_mode else None,
            "referral_code": self.referral_code if self.type == DiscountType.REFERRAL else "",
        }

    @classmethod
    def from_order(cls, row: dict) -> "DiscountState":
        discount_type = row.get("discount_type") or None
        return cls(
            type=discount_type,
            percentage=to_decimal(row.get("discount_percentage")),
            value=to_decimal(row.get("discount_value")),
            referral_code=row.get("referral_code") or "",
        )


@dataclass(frozen=True)
class DiscountResult:
    """
    Outcome of applying a discount.

    final_total is the raw subtotal - discount and may be negative.
    """

    discount_amount: Decimal
    final_total: Decimal

    @property
    def display_total(self) -> Decimal:
        return clamp(self.final_total)

    @property
    def persisted_total(self) -> Decimal:
        """Value written to order_total (never negative)."""
        return clamp(self.final_total)


def apply_discount(subtotal, state: DiscountState | None) -> DiscountResult:
    """
    Apply the selected discount to a subtotal.

    Percentages outside 0..100 are not rejected here.
    """
    subtotal = to_decimal(subtotal)
    if state is None or not state.type:
        discount = ZERO
    elif state.is_percentage_mode:
        discount = percentage_of(subtotal, state.percentage)
    elif state.type == DiscountType.BY_VALUE:
        discount = to_amount(state.value)
    else:
        discount = ZERO
    return DiscountResult(discount_amount=discount, final_total=subtotal - discount)


def compute_balance(final_total, paid) -> Decimal:
    """final_total - paid; paid None counts as 0. Negative means overpaid."""
    return to_decimal(final_total) - to_decimal(paid)


def display_balance(balance) -> Decimal:
    return clamp(to_decimal(balance))
