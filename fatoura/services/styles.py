"""
Style pricing — surcharge of one garment's style selections.
"""

from decimal import Decimal
from typing import Iterable

from fatoura.money import ZERO, to_quantity
from fatoura.services.prices import PriceTable


def compute_style_price(garment, table: PriceTable) -> Decimal:
    """
    Style surcharge of one garment.

    A "design" garment costs the flat design-style price; its other
    selections are kept for production but not priced. Otherwise the sum
    of: line price x line count (1 or 2), collar type, collar button,
    jabzour, front pocket and cuffs. Unpriced codes add 0.

    Pure: same garment and table always give the same result.
    """
    if garment.is_design:
        return table.design_style()

    total = ZERO
    lines = to_quantity(garment.lines)
    if lines in (1, 2):
        total += table.line_price() * lines
    for code in (
        garment.collar_type,
        garment.collar_button,
        garment.jabzour,
        garment.front_pocket_type,
        garment.cuffs_type,
    ):
        total += table.surcharge(code)
    return total


def assign_style_groups(garments: Iterable) -> list[str]:
    """
    Give garments with identical style selections the same group id.

    Groups are numbered S-1, S-2, ... in first-seen order. Sets
    garment.style_id in place and returns the ids in garment order.
    """
    groups: dict[tuple, str] = {}
    assigned = []
    for garment in garments:
        signature = garment.style_signature()
        if signature not in groups:
            groups[signature] = f"S-{len(groups) + 1}"
        garment.style_id = groups[signature]
        assigned.append(garment.style_id)
    return assigned
