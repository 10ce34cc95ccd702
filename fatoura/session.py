"""
Wizard session — the order being built, owned by one Checkout.

A session is created when the wizard opens, mutated only through its
setters, and reset when the wizard closes. Nothing here talks to the
backend; Checkout does that.

Steps:
    CUSTOMER → ITEMS (garments or shelf) → PAYMENT

A step can only be entered once every earlier step has been saved.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, replace
from decimal import Decimal
from enum import IntEnum
from typing import Any, Iterable

from fatoura.exceptions import CheckoutError, SelectionError
from fatoura.lines import GarmentLine, ShelfLine
from fatoura.models.enums import CheckoutStatus, OrderType
from fatoura.money import ZERO, to_amount, to_decimal, to_quantity
from fatoura.services.discounts import DiscountState
from fatoura.stages import is_terminal

logger = logging.getLogger('fatoura')


class WizardStep(IntEnum):
    CUSTOMER = 0
    ITEMS = 1
    PAYMENT = 2


# ══════════════════════════════════════════════════════════════
# SHELF SELECTION
# ══════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class SelectionResult:
    """
    Outcome of a shelf row edit.

    A rejected edit carries the warning and leaves every row unchanged.
    """

    accepted: bool
    warning: SelectionError | None = None

    @property
    def message(self) -> str | None:
        return self.warning.message if self.warning else None


ACCEPTED = SelectionResult(accepted=True)


class ShelfSelection:
    """
    Shelf rows of one order.

    Rows may be incomplete while the operator picks type and brand. No two
    rows may hold the same (product type, brand) pair, and a row's
    quantity may not exceed the product's stock.
    """

    def __init__(self, catalogue: Iterable[dict] | None = None):
        self.rows: list[ShelfLine] = []
        self._catalogue: dict[tuple[str, str], dict] = {}
        if catalogue is not None:
            self.set_catalogue(catalogue)

    def __len__(self) -> int:
        return len(self.rows)

    # ── Catalogue ──

    def set_catalogue(self, rows: Iterable[dict]) -> None:
        self._catalogue = {((r.get("type") or ""), (r.get("brand") or "")): dict(r) for r in rows}
        for line in self.rows:
            product = self._catalogue.get(line.key)
            if product is not None:
                line.stock = to_quantity(product.get("stock"))

    def product(self, product_type: str, brand: str) -> dict | None:
        return self._catalogue.get((product_type, brand))

    def product_types(self) -> list[str]:
        return sorted({key[0] for key in self._catalogue})

    def brands_for(self, product_type: str) -> list[str]:
        return sorted(brand for (ptype, brand) in self._catalogue if ptype == product_type)

    # ── Validation ──

    def check(self, line: ShelfLine, index: int | None = None) -> SelectionError | None:
        """First problem with a complete line, ignoring the row at index."""
        for i, other in enumerate(self.rows):
            if i != index and other.is_complete and other.key == line.key:
                return SelectionError(
                    'DUPLICATE_SELECTION', product_type=line.product_type, brand=line.brand,
                )
        product = self.product(*line.key)
        if product is None:
            return SelectionError('UNKNOWN_PRODUCT', product_type=line.product_type, brand=line.brand)
        stock = to_quantity(product.get("stock"))
        if stock <= 0:
            return SelectionError('OUT_OF_STOCK', product_type=line.product_type, brand=line.brand)
        quantity = to_decimal(line.quantity, None)
        if quantity is None or quantity < 1 or quantity != quantity.to_integral_value():
            return SelectionError('INVALID_QUANTITY', requested=line.quantity)
        if int(quantity) > stock:
            return SelectionError('INSUFFICIENT_STOCK', available=stock, requested=int(quantity))
        return None

    def _reject(self, warning: SelectionError) -> SelectionResult:
        logger.warning("selection.rejected", extra={"code": warning.code, "detail": warning.message})
        return SelectionResult(accepted=False, warning=warning)

    def _fill(self, line: ShelfLine) -> ShelfLine:
        product = self.product(*line.key)
        return replace(
            line,
            shelf_id=product.get("id"),
            quantity=to_quantity(line.quantity),
            unit_price=to_amount(product.get("price")),
            stock=to_quantity(product.get("stock")),
        )

    # ── Row editing ──

    def add_row(self) -> int:
        """Append an empty row; returns its index."""
        self.rows.append(ShelfLine())
        return len(self.rows) - 1

    def update_row(self, index: int, **changes: Any) -> SelectionResult:
        """
        Edit one row.

        Accepts product_type, brand and quantity. Choosing a product type
        whose only brand is unambiguous selects that brand too.
        """
        candidate = copy.copy(self.rows[index])
        if "product_type" in changes:
            candidate.product_type = changes["product_type"] or ""
            if "brand" not in changes:
                brands = self.brands_for(candidate.product_type)
                candidate.brand = brands[0] if len(brands) == 1 else ""
        if "brand" in changes:
            candidate.brand = changes["brand"] or ""
        if "quantity" in changes:
            candidate.quantity = changes["quantity"]

        if candidate.is_complete:
            warning = self.check(candidate, index)
            if warning:
                return self._reject(warning)
            candidate = self._fill(candidate)
        self.rows[index] = candidate
        return ACCEPTED

    def remove_row(self, index: int) -> ShelfLine:
        return self.rows.pop(index)

    def add_product(self, product_type: str, brand: str, quantity: int = 1) -> SelectionResult:
        """Add a fully specified row; nothing is added when rejected."""
        line = ShelfLine(product_type=product_type, brand=brand, quantity=quantity)
        warning = self.check(line)
        if warning:
            return self._reject(warning)
        self.rows.append(self._fill(line))
        return ACCEPTED

    def add_line(self, line: ShelfLine) -> None:
        """
        Add a prepared line.

        Raises:
            SelectionError: The line is a duplicate, unknown or exceeds stock
        """
        warning = self.check(line)
        if warning:
            raise warning
        self.rows.append(self._fill(line))

    def clear(self) -> None:
        self.rows = []

    # ── Read ──

    @property
    def lines(self) -> list[ShelfLine]:
        """Complete rows with a positive quantity."""
        return [r for r in self.rows if r.is_complete and to_quantity(r.quantity) > 0]

    def items(self) -> list[dict]:
        """Payload for the completion procedures."""
        return [line.to_item() for line in self.lines]


# ══════════════════════════════════════════════════════════════
# SESSION
# ══════════════════════════════════════════════════════════════


class WizardSession:
    """
    Client-held draft state of one order.

    Financial setters refuse to touch a confirmed or cancelled order with
    CheckoutError('ORDER_NOT_FOUND').
    """

    def __init__(self, order_type: str = OrderType.WORK):
        self.order_type = order_type
        self.reset()

    def reset(self) -> None:
        """Back to an empty wizard (same order type)."""
        self.order_id: int | None = None
        self.checkout_status: str = CheckoutStatus.DRAFT
        self.production_stage: str | None = None
        self.invoice_number: int | None = None
        self.customer: dict | None = None
        self.garments: list[GarmentLine] = []
        self.shelf = ShelfSelection()
        self.home_delivery = False
        self.express = False
        self.delivery_date = None
        self.notes = ""
        self.stitching_price: Decimal | None = None
        self.discount = DiscountState()
        self.payment_type: str | None = None
        self.payment_ref_no = ""
        self.payment_note = ""
        self.paid: Decimal | None = None
        self.delivery_charge = ZERO
        self.express_charge = ZERO
        self.current_step = WizardStep.CUSTOMER
        self.saved_steps: list[WizardStep] = []

    def __repr__(self) -> str:
        return f"<WizardSession {self.order_type} order={self.order_id} {self.checkout_status}>"

    # ── State ──

    @property
    def customer_id(self):
        return (self.customer or {}).get("id")

    @property
    def is_terminal(self) -> bool:
        return is_terminal(self.checkout_status)

    @property
    def is_work_order(self) -> bool:
        return self.order_type == OrderType.WORK

    @property
    def has_progress(self) -> bool:
        """Anything worth a confirmation before discarding."""
        return bool(
            self.order_id
            or self.customer
            or self.garments
            or self.shelf.lines
            or self.saved_steps
        )

    def ensure_editable(self) -> None:
        if self.is_terminal:
            raise CheckoutError('ORDER_NOT_FOUND', order_id=self.order_id, status=self.checkout_status)

    # ── Steps ──

    def mark_saved(self, step: WizardStep) -> None:
        self.saved_steps = sorted(set(self.saved_steps) | {WizardStep(step)})

    def can_enter(self, step: WizardStep) -> bool:
        return all(s in self.saved_steps for s in WizardStep if s < step)

    def go_to(self, step: WizardStep) -> None:
        step = WizardStep(step)
        if not self.can_enter(step):
            raise CheckoutError('STEP_NOT_READY', step=step.name)
        self.current_step = step

    # ── Setters ──

    def set_customer(self, customer: dict | None) -> None:
        self.ensure_editable()
        self.customer = dict(customer) if customer else None

    def set_garments(self, garments: Iterable[GarmentLine]) -> None:
        self.ensure_editable()
        self.garments = list(garments)

    def add_garment(self, garment: GarmentLine) -> None:
        self.ensure_editable()
        self.garments.append(garment)

    def remove_garment(self, index: int) -> GarmentLine:
        self.ensure_editable()
        return self.garments.pop(index)

    def set_delivery(self, home_delivery=None, express=None, delivery_date=None) -> None:
        self.ensure_editable()
        if home_delivery is not None:
            self.home_delivery = bool(home_delivery)
        if express is not None:
            self.express = bool(express)
        if delivery_date is not None:
            self.delivery_date = delivery_date

    def set_stitching_price(self, price) -> None:
        """Negotiated stitching rate; None restores the standard price."""
        self.ensure_editable()
        self.stitching_price = None if price is None else to_amount(price)

    def set_payment(self, payment_type=None, paid=None, ref_no=None, note=None) -> None:
        self.ensure_editable()
        if payment_type is not None:
            self.payment_type = payment_type or None
        if paid is not None:
            self.paid = to_decimal(paid)
        if ref_no is not None:
            self.payment_ref_no = ref_no
        if note is not None:
            self.payment_note = note

    def switch_discount(self, discount_type) -> None:
        self.ensure_editable()
        self.discount.switch_type(discount_type)

    def set_discount_percentage(self, percentage, subtotal) -> None:
        self.ensure_editable()
        self.discount.set_percentage(percentage, subtotal)

    def set_discount_value(self, value) -> None:
        self.ensure_editable()
        self.discount.set_value(value)

    def set_referral_code(self, code: str) -> None:
        self.ensure_editable()
        self.discount.referral_code = code or ""

    # ── Loading ──

    def load(self, order: dict, garments: Iterable[dict] = (), shelf_lines: Iterable[ShelfLine] = (),
             customer: dict | None = None) -> None:
        """Replace the session with a persisted order."""
        self.reset()
        self.order_type = order.get("order_type") or self.order_type
        self.order_id = order.get("id")
        self.checkout_status = order.get("checkout_status") or CheckoutStatus.DRAFT
        self.production_stage = order.get("production_stage")
        self.invoice_number = order.get("invoice_number")
        self.customer = dict(customer) if customer else (
            {"id": order["customer_id"]} if order.get("customer_id") is not None else None
        )
        self.garments = [GarmentLine.from_record(row) for row in garments]
        self.shelf.rows = list(shelf_lines)
        self.home_delivery = bool(order.get("home_delivery"))
        self.express = bool(order.get("express"))
        self.delivery_date = order.get("delivery_date")
        self.notes = order.get("notes") or ""
        stitching = order.get("stitching_price")
        self.stitching_price = None if stitching is None else to_amount(stitching)
        self.discount = DiscountState.from_order(order)
        self.payment_type = order.get("payment_type") or None
        self.payment_ref_no = order.get("payment_ref_no") or ""
        self.payment_note = order.get("payment_note") or ""
        paid = order.get("paid")
        self.paid = None if paid is None else to_decimal(paid)
        self.delivery_charge = to_amount(order.get("delivery_charge"))
        self.express_charge = to_amount(order.get("express_charge"))

        if self.customer:
            self.mark_saved(WizardStep.CUSTOMER)
        if self.garments or self.shelf.rows:
            self.mark_saved(WizardStep.ITEMS)
        if self.is_terminal:
            self.mark_saved(WizardStep.PAYMENT)
        self.current_step = max(self.saved_steps + [WizardStep.CUSTOMER])
        if not self.is_terminal and self.current_step < WizardStep.PAYMENT and self.can_enter(self.current_step + 1):
            self.current_step = WizardStep(self.current_step + 1)
