"""
Fatoura services — modular organization of the pricing and checkout engine.

    from fatoura.services import PriceTable, compute_style_price, compute_order_totals
"""

from fatoura.services.discounts import (
    DiscountResult,
    DiscountState,
    apply_discount,
    compute_balance,
    display_balance,
)
from fatoura.services.prices import PriceEntry, PriceKey, PriceTable
from fatoura.services.styles import assign_style_groups, compute_style_price
from fatoura.services.totals import (
    GarmentQuote,
    OrderCharges,
    compute_order_totals,
    quote_garment,
    resolve_delivery_flags,
    settled_order_totals,
    settled_price,
)

__all__ = [
    'DiscountResult',
    'DiscountState',
    'GarmentQuote',
    'OrderCharges',
    'PriceEntry',
    'PriceKey',
    'PriceTable',
    'apply_discount',
    'assign_style_groups',
    'compute_balance',
    'compute_order_totals',
    'compute_style_price',
    'display_balance',
    'quote_garment',
    'resolve_delivery_flags',
    'settled_order_totals',
    'settled_price',
]
