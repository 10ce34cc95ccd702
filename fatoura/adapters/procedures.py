"""
Rules shared by every implementation of the completion procedures.

Both adapters run the same steps; only storage and locking differ:

1. The order exists, belongs to the brand, has the expected type and is
   still a draft. Anything else is ORDER_ACCESS_DENIED.
2. Requested shelf quantities and shop fabric lengths are checked against
   current stock. Any shortfall fails the whole call before mutation.
3. Stock is decremented, shelf items recorded, checkout fields written,
   the order confirmed and the next invoice number assigned.
"""

from decimal import Decimal
from typing import Any, Iterable, Mapping

from fatoura.money import ZERO, to_decimal, to_quantity

# Checkout details never overwrite these
PROTECTED_ORDER_FIELDS = frozenset({
    "id",
    "brand",
    "order_type",
    "checkout_status",
    "invoice_number",
    "customer_id",
    "created_at",
    "updated_at",
})


def checkout_fields(details: Mapping[str, Any] | None) -> dict[str, Any]:
    """Writable subset of checkout details."""
    return {k: v for k, v in (details or {}).items() if k not in PROTECTED_ORDER_FIELDS}


def shelf_demand(items: Iterable[Mapping[str, Any]] | None) -> dict[Any, int]:
    """Requested quantity per shelf id (repeated ids are summed)."""
    demand: dict[Any, int] = {}
    for item in items or ():
        quantity = to_quantity(item.get("quantity"))
        if item.get("id") is None or quantity <= 0:
            continue
        demand[item["id"]] = demand.get(item["id"], 0) + quantity
    return demand


def fabric_demand(items: Iterable[Mapping[str, Any]] | None) -> dict[Any, Decimal]:
    """Requested length per fabric id (repeated ids are summed)."""
    demand: dict[Any, Decimal] = {}
    for item in items or ():
        length = to_decimal(item.get("length"))
        if item.get("id") is None or length <= ZERO:
            continue
        demand[item["id"]] = demand.get(item["id"], ZERO) + length
    return demand


def shortfall(
    shelf: Mapping[Any, int],
    fabrics: Mapping[Any, Decimal],
    shelf_stock: Mapping[Any, Any],
    fabric_stock: Mapping[Any, Any],
) -> str | None:
    """
    First stock problem, or None when everything is covered.

    Args:
        shelf: Demand per shelf id
        fabrics: Demand per fabric id
        shelf_stock: Current stock per shelf id (missing ids are unknown)
        fabric_stock: Current real_stock per fabric id
    """
    for shelf_id, quantity in shelf.items():
        if shelf_id not in shelf_stock:
            return f"Shelf item {shelf_id} not found"
        available = to_quantity(shelf_stock[shelf_id])
        if available - quantity < 0:
            return (
                f"Insufficient stock for shelf item {shelf_id}: "
                f"available {available}, requested {quantity}"
            )
    for fabric_id, length in fabrics.items():
        if fabric_id not in fabric_stock:
            return f"Fabric {fabric_id} not found"
        available = to_decimal(fabric_stock[fabric_id])
        if available - length < ZERO:
            return (
                f"Insufficient stock for fabric {fabric_id}: "
                f"available {available}, requested {length}"
            )
    return None


def unit_prices(items: Iterable[Mapping[str, Any]] | None) -> dict[Any, Decimal]:
    """Unit price per shelf id as sent by the caller (last one wins)."""
    return {
        item["id"]: to_decimal(item["unit_price"])
        for item in items or ()
        if item.get("id") is not None and item.get("unit_price") is not None
    }
