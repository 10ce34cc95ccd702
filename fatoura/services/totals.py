"""
Order charge aggregation.

Two distinct ways to price a garment:

- quote_garment(): live price from the current price table and fabric
  rate. Used while the order is a draft.
- settled_price(): the snapshot captured when the garment was saved. Used
  once the order is confirmed; never recomputed from current prices.

Every input is coerced: negative or non-numeric values count as 0.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from fatoura.conf import fatoura_settings
from fatoura.money import ZERO, to_amount
from fatoura.services.prices import PriceTable
from fatoura.services.styles import compute_style_price


@dataclass(frozen=True)
class GarmentQuote:
    """Price of one garment."""

    fabric: Decimal = ZERO
    stitching: Decimal = ZERO
    style: Decimal = ZERO

    @property
    def total(self) -> Decimal:
        return self.fabric + self.stitching + self.style


@dataclass(frozen=True)
class OrderCharges:
    """Charge breakdown of an order."""

    fabric: Decimal = ZERO
    stitching: Decimal = ZERO
    style: Decimal = ZERO
    delivery: Decimal = ZERO
    express: Decimal = ZERO
    shelf: Decimal = ZERO

    @property
    def total(self) -> Decimal:
        return self.fabric + self.stitching + self.style + self.delivery + self.express + self.shelf

    def as_order_fields(self) -> dict[str, Decimal]:
        """Column values for the order row."""
        return {
            "fabric_charge": self.fabric,
            "stitching_charge": self.stitching,
            "style_charge": self.style,
            "delivery_charge": self.delivery,
            "express_charge": self.express,
            "shelf_charge": self.shelf,
        }


# ══════════════════════════════════════════════════════════════
# PER GARMENT
# ══════════════════════════════════════════════════════════════


def fabric_amount_for(garment, price_per_meter) -> Decimal:
    """Shop fabric costs rate x length; customer-supplied fabric costs 0."""
    if not garment.uses_shop_fabric:
        return ZERO
    return to_amount(price_per_meter) * to_amount(garment.fabric_length)


def stitching_for(garment, table: PriceTable, stitching_base=None) -> Decimal:
    """
    Stitching of one garment.

    Design garments always cost the design stitching price, whatever
    negotiated rate the order carries.
    """
    if garment.is_design:
        return to_amount(fatoura_settings.DESIGN_STITCHING_PRICE)
    if stitching_base is not None:
        return to_amount(stitching_base)
    return table.stitching_standard()


def quote_garment(garment, table: PriceTable, price_per_meter=None, stitching_base=None) -> GarmentQuote:
    """
    Live price of a draft garment.

    When price_per_meter is None the garment's current fabric_amount is
    used as-is.
    """
    if price_per_meter is None:
        fabric = to_amount(garment.fabric_amount) if garment.uses_shop_fabric else ZERO
    else:
        fabric = fabric_amount_for(garment, price_per_meter)
    return GarmentQuote(
        fabric=fabric,
        stitching=stitching_for(garment, table, stitching_base),
        style=compute_style_price(garment, table),
    )


def settled_price(garment) -> GarmentQuote:
    """Price frozen on the garment when it was saved."""
    return GarmentQuote(
        fabric=to_amount(garment.fabric_price_snapshot),
        stitching=to_amount(garment.stitching_price_snapshot),
        style=to_amount(garment.style_price_snapshot),
    )


def capture_snapshot(garment, quote: GarmentQuote) -> None:
    """Store a quote on the garment as its price snapshot."""
    garment.fabric_amount = quote.fabric
    garment.fabric_price_snapshot = quote.fabric
    garment.stitching_price_snapshot = quote.stitching
    garment.style_price_snapshot = quote.style


# ══════════════════════════════════════════════════════════════
# PER ORDER
# ══════════════════════════════════════════════════════════════


def resolve_delivery_flags(garments: Iterable, home_delivery=False, express=False) -> tuple[bool, bool]:
    """
    Order-level (home_delivery, express).

    Any garment flagged for home delivery turns home delivery on for the
    whole order. Express works the same way.
    """
    garments = list(garments)
    home = bool(home_delivery) or any(g.home_delivery for g in garments)
    rush = bool(express) or any(g.express for g in garments)
    return home, rush


def shelf_total(shelf_lines: Iterable) -> Decimal:
    """Sum of quantity x unit price."""
    return sum((line.line_total for line in shelf_lines), ZERO)


def _fabric_value(garment) -> Decimal:
    if garment.fabric_amount is not None:
        return to_amount(garment.fabric_amount)
    return to_amount(garment.fabric_price_snapshot)


def compute_order_totals(
    garments: Iterable,
    shelf_lines: Iterable,
    home_delivery: bool,
    express: bool,
    table: PriceTable,
    stitching_base=None,
) -> OrderCharges:
    """
    Aggregate every charge category of a draft order.

    Args:
        garments: GarmentLine items; fabric uses each line's fabric_amount
            (live value, or snapshot when no live value is set)
        shelf_lines: ShelfLine items
        home_delivery: Order home-delivery flag (already resolved)
        express: Order express flag (already resolved)
        table: Price table
        stitching_base: Negotiated stitching rate; None uses the
            standard stitching price

    Returns:
        OrderCharges
    """
    garments = list(garments)
    return OrderCharges(
        fabric=sum((_fabric_value(g) for g in garments), ZERO),
        stitching=sum((stitching_for(g, table, stitching_base) for g in garments), ZERO),
        style=sum((compute_style_price(g, table) for g in garments), ZERO),
        delivery=table.home_delivery() if home_delivery else ZERO,
        express=table.express_surcharge() if express else ZERO,
        shelf=shelf_total(shelf_lines),
    )


def settled_order_totals(garments: Iterable, shelf_lines: Iterable, delivery=ZERO, express=ZERO) -> OrderCharges:
    """Charges of a confirmed order, from snapshots and recorded fees only."""
    quotes = [settled_price(g) for g in garments]
    return OrderCharges(
        fabric=sum((q.fabric for q in quotes), ZERO),
        stitching=sum((q.stitching for q in quotes), ZERO),
        style=sum((q.style for q in quotes), ZERO),
        delivery=to_amount(delivery),
        express=to_amount(express),
        shelf=shelf_total(shelf_lines),
    )
