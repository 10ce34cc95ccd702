"""
Checkout Service — the single public interface of the order wizard.

Usage:
    from fatoura import Checkout, CheckoutError

    checkout = Checkout(order_type=OrderType.WORK)
    checkout.save_customer({"name": "Ali", "phone": "55512345"})
    checkout.proceed_from_customer()              # draft order created
    checkout.session.add_garment(GarmentLine(fabric_id=3, fabric_length=Decimal("3.5")))
    checkout.save_garments()
    checkout.set_payment(payment_type="cash", paid=Decimal("20"))
    checkout.submit()                             # stock decremented, invoice assigned
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from django.utils import timezone

from fatoura.conf import fatoura_settings
from fatoura.adapters.procedures import fabric_demand
from fatoura.exceptions import BackendError, CheckoutError, SelectionError
from fatoura.lines import GarmentLine, ShelfLine
from fatoura.models.enums import CheckoutStatus, OrderType, PaymentType, ProductionStage
from fatoura.money import ZERO, to_amount, to_decimal
from fatoura.protocols.backend import ORDER_ACCESS_DENIED, PersistenceBackend
from fatoura.protocols.notifier import InvoiceNotifier
from fatoura.services.discounts import DiscountResult, apply_discount, compute_balance, display_balance
from fatoura.services.polling import InvoicePoller
from fatoura.services.prices import PriceTable
from fatoura.services.settlement import SettlementReport, settle_stock
from fatoura.services.styles import assign_style_groups
from fatoura.services.totals import (
    OrderCharges,
    capture_snapshot,
    compute_order_totals,
    quote_garment,
    resolve_delivery_flags,
    settled_order_totals,
)
from fatoura.session import SelectionResult, WizardSession, WizardStep
from fatoura.stages import validate_checkout_transition

logger = logging.getLogger('fatoura')

PENDING_ORDERS_LIMIT = 5
ADDRESS_FIELDS = ("city", "area", "block", "street", "house_no")


@dataclass(frozen=True)
class Quote:
    """Everything the payment step displays."""

    charges: OrderCharges
    discount: DiscountResult
    paid: Decimal
    balance: Decimal

    @property
    def subtotal(self) -> Decimal:
        return self.charges.total

    @property
    def final_total(self) -> Decimal:
        return self.discount.final_total

    @property
    def display_total(self) -> Decimal:
        return self.discount.display_total

    @property
    def display_balance(self) -> Decimal:
        return display_balance(self.balance)


def _unwrap(result, operation: str):
    if not result.ok:
        raise BackendError.from_result(result, operation)
    return result.data


class Checkout:
    """
    Orchestrates the three-step order wizard over a WizardSession.

    Stock never changes during the wizard. It changes only in the single
    completion call made by complete().
    """

    def __init__(
        self,
        session: WizardSession | None = None,
        order_type: str = OrderType.WORK,
        backend: PersistenceBackend | None = None,
        notifier: InvoiceNotifier | None = None,
        price_table: PriceTable | None = None,
        brand: str | None = None,
    ):
        if backend is None or notifier is None:
            from fatoura.adapters import get_backend, get_notifier
            backend = backend or get_backend()
            notifier = notifier or get_notifier()
        self.session = session or WizardSession(order_type)
        self.backend = backend
        self.notifier = notifier
        self.brand = brand or fatoura_settings.BRAND
        self._prices = price_table
        self.poller: InvoicePoller | None = None

    def __repr__(self) -> str:
        return f"<Checkout {self.session!r} brand={self.brand}>"

    # ══════════════════════════════════════════════════════════════
    # REFERENCE DATA
    # ══════════════════════════════════════════════════════════════

    @property
    def prices(self) -> PriceTable:
        if self._prices is None:
            self.load_prices()
        return self._prices

    def load_prices(self) -> PriceTable:
        """(Re)load the price table from the backend."""
        self._prices = PriceTable.from_rows(_unwrap(self.backend.select("prices"), "load_prices"))
        return self._prices

    def load_shelf_catalogue(self) -> list[dict]:
        rows = _unwrap(self.backend.select("shelf", order_by=["type", "brand"]), "load_shelf")
        self.session.shelf.set_catalogue(rows)
        return rows

    # ══════════════════════════════════════════════════════════════
    # STEP 1: CUSTOMER
    # ══════════════════════════════════════════════════════════════

    def search_customers(self, query: str, limit: int = 20) -> list[dict]:
        """Case-insensitive substring match on phone or name."""
        query = (query or "").strip()
        if not query:
            return []
        found: dict[Any, dict] = {}
        for lookup in ("phone__icontains", "name__icontains"):
            rows = _unwrap(
                self.backend.select("customers", {lookup: query}, order_by=["name"], limit=limit),
                "search_customers",
            )
            for row in rows:
                found.setdefault(row["id"], row)
        return list(found.values())[:limit]

    def select_customer(self, customer_id) -> dict:
        customer = _unwrap(self.backend.get("customers", customer_id), "select_customer")
        self.session.set_customer(customer)
        return customer

    def save_customer(self, values: dict) -> dict:
        """Create or update the customer and attach it to the session."""
        self.session.ensure_editable()
        values = dict(values)
        if values.get("id") is None and self.session.customer_id is not None:
            values["id"] = self.session.customer_id
        customer = _unwrap(self.backend.upsert("customers", values), "save_customer")
        self.session.set_customer(customer)
        return customer

    def proceed_from_customer(self) -> dict | None:
        """
        Leave the customer step.

        Work orders are persisted as a draft here (created the first time,
        re-pointed to the customer afterwards). Sales orders are created at
        completion unless a draft already exists.

        Raises:
            CheckoutError('CUSTOMER_REQUIRED'): No persisted customer
        """
        session = self.session
        session.ensure_editable()
        if session.customer_id is None:
            raise CheckoutError('CUSTOMER_REQUIRED')

        order = None
        if session.order_id is None:
            if session.is_work_order:
                order = self._create_draft()
        else:
            order = self._update_order({"customer_id": session.customer_id})

        session.mark_saved(WizardStep.CUSTOMER)
        session.go_to(WizardStep.ITEMS)
        return order

    def _create_draft(self) -> dict:
        session = self.session
        values = {
            "customer_id": session.customer_id,
            "brand": self.brand,
            "order_type": session.order_type,
            "checkout_status": CheckoutStatus.DRAFT,
            "order_date": timezone.now(),
        }
        if session.is_work_order:
            values["production_stage"] = ProductionStage.ORDER_AT_SHOP
        order = _unwrap(self.backend.insert("orders", values), "create_order")
        session.order_id = order["id"]
        session.checkout_status = order.get("checkout_status") or CheckoutStatus.DRAFT
        session.production_stage = order.get("production_stage")
        logger.info(
            "checkout.draft",
            extra={"order_id": order["id"], "order_type": session.order_type, "customer": session.customer_id},
        )
        return order

    def _update_order(self, values: dict) -> dict:
        """Write fields of the draft order."""
        self.session.ensure_editable()
        if self.session.order_id is None:
            raise CheckoutError('ORDER_REQUIRED')
        return _unwrap(self.backend.update("orders", self.session.order_id, values), "update_order")

    # ══════════════════════════════════════════════════════════════
    # STEP 2: GARMENTS / SHELF
    # ══════════════════════════════════════════════════════════════

    def _shop_fabrics(self, garments) -> dict[Any, dict]:
        ids = sorted({g.fabric_id for g in garments if g.uses_shop_fabric and g.fabric_id is not None})
        if not ids:
            return {}
        rows = _unwrap(self.backend.select("fabrics", {"id__in": ids}), "load_fabrics")
        return {row["id"]: row for row in rows}

    def _fabric_rates(self, garments) -> dict[Any, Decimal]:
        return {pk: to_amount(row.get("price_per_meter")) for pk, row in self._shop_fabrics(garments).items()}

    def _check_fabric_stock(self, garments) -> dict[Any, dict]:
        """
        Load the shop fabrics of garments and check the length cut from each.

        Raises:
            SelectionError('UNKNOWN_PRODUCT'): Shop fabric missing or not found
            SelectionError('INSUFFICIENT_STOCK'): Total length of one fabric
                exceeds its real stock
        """
        shop = [g for g in garments if g.uses_shop_fabric]
        fabrics = self._shop_fabrics(shop)
        for garment in shop:
            if garment.fabric_id not in fabrics:
                raise SelectionError('UNKNOWN_PRODUCT', 'Fabric not found.', fabric_id=garment.fabric_id)
        demand = fabric_demand({"id": g.fabric_id, "length": g.fabric_length} for g in shop)
        for fabric_id, length in demand.items():
            available = to_decimal(fabrics[fabric_id].get("real_stock"))
            if length > available:
                raise SelectionError(
                    'INSUFFICIENT_STOCK',
                    f"Not enough {fabrics[fabric_id].get('name') or 'fabric'}: "
                    f"available {available} m, requested {length} m",
                    fabric_id=fabric_id,
                    available=available,
                    requested=length,
                )
        return fabrics

    def quote_garments(self) -> None:
        """Refresh live fabric amounts of the session's garments."""
        rates = self._fabric_rates(self.session.garments)
        for garment in self.session.garments:
            if garment.uses_shop_fabric and garment.fabric_id in rates:
                garment.fabric_amount = rates[garment.fabric_id] * to_amount(garment.fabric_length)
            elif not garment.uses_shop_fabric:
                garment.fabric_amount = ZERO

    def save_garments(self, garments: list[GarmentLine] | None = None) -> list[dict]:
        """
        Price, number and persist the garments of a draft work order.

        Each garment's live quote becomes its price snapshot. Garments
        removed from the session are deleted.

        Raises:
            SelectionError: A shop fabric is unknown or short of the total
                length cut from it; the session garments are unchanged
        """
        session = self.session
        session.ensure_editable()
        if not session.is_work_order:
            raise CheckoutError('WRONG_ORDER_TYPE', order_type=session.order_type)
        if session.order_id is None:
            raise CheckoutError('ORDER_REQUIRED')
        candidates = list(garments) if garments is not None else list(session.garments)
        if not candidates:
            raise CheckoutError('NO_ITEMS')
        fabrics = self._check_fabric_stock(candidates)
        if garments is not None:
            session.set_garments(candidates)

        rates = {pk: to_amount(row.get("price_per_meter")) for pk, row in fabrics.items()}
        assign_style_groups(session.garments)
        for n, garment in enumerate(session.garments, start=1):
            quote = quote_garment(
                garment,
                self.prices,
                price_per_meter=rates.get(garment.fabric_id),
                stitching_base=session.stitching_price,
            )
            capture_snapshot(garment, quote)
            garment.garment_id = f"{session.order_id}-{n}"

        existing = _unwrap(self.backend.select("garments", {"order_id": session.order_id}), "load_garments")
        saved = []
        for garment in session.garments:
            row = _unwrap(self.backend.upsert("garments", garment.to_record(session.order_id)), "save_garment")
            garment.id = str(row["id"])
            saved.append(row)
        kept = {g.id for g in session.garments}
        for row in existing:
            if str(row["id"]) not in kept:
                _unwrap(self.backend.delete("garments", row["id"]), "delete_garment")

        session.home_delivery, session.express = resolve_delivery_flags(
            session.garments, session.home_delivery, session.express,
        )
        self._save_charges()
        session.mark_saved(WizardStep.ITEMS)
        return saved

    def add_shelf_row(self) -> int:
        self.session.ensure_editable()
        return self.session.shelf.add_row()

    def update_shelf_row(self, index: int, **changes) -> SelectionResult:
        self.session.ensure_editable()
        return self.session.shelf.update_row(index, **changes)

    def remove_shelf_row(self, index: int) -> ShelfLine:
        self.session.ensure_editable()
        return self.session.shelf.remove_row(index)

    def add_shelf_product(self, product_type: str, brand: str, quantity: int = 1) -> SelectionResult:
        self.session.ensure_editable()
        return self.session.shelf.add_product(product_type, brand, quantity)

    def save_items(self) -> None:
        """
        Finish the items step.

        Work orders need saved garments or shelf lines; sales orders need
        at least one shelf line. A draft order gets its charges updated.
        """
        session = self.session
        session.ensure_editable()
        if not session.can_enter(WizardStep.ITEMS):
            raise CheckoutError('STEP_NOT_READY', step=WizardStep.ITEMS.name)
        if not session.garments and not session.shelf.lines:
            raise CheckoutError('NO_ITEMS')
        if not session.is_work_order and session.garments:
            raise CheckoutError('WRONG_ORDER_TYPE', order_type=session.order_type)
        if session.order_id is not None:
            self._save_charges()
        session.mark_saved(WizardStep.ITEMS)
        session.go_to(WizardStep.PAYMENT)

    # ══════════════════════════════════════════════════════════════
    # STEP 3: REVIEW & PAYMENT
    # ══════════════════════════════════════════════════════════════

    def charges(self) -> OrderCharges:
        session = self.session
        if session.is_terminal:
            return settled_order_totals(
                session.garments, session.shelf.lines, session.delivery_charge, session.express_charge,
            )
        home, rush = resolve_delivery_flags(session.garments, session.home_delivery, session.express)
        return compute_order_totals(
            session.garments,
            session.shelf.lines,
            home,
            rush,
            self.prices,
            stitching_base=session.stitching_price,
        )

    def quote(self) -> Quote:
        """Current totals, discount and balance."""
        charges = self.charges()
        discount = self.session.discount
        if not self.session.is_terminal:
            discount.recompute(charges.total)
        result = apply_discount(charges.total, discount)
        paid = to_decimal(self.session.paid)
        return Quote(
            charges=charges,
            discount=result,
            paid=paid,
            balance=compute_balance(result.final_total, paid),
        )

    def _save_charges(self) -> dict | None:
        session = self.session
        if session.order_id is None:
            return None
        quote = self.quote()
        values = quote.charges.as_order_fields()
        values.update({
            "home_delivery": session.home_delivery or any(g.home_delivery for g in session.garments),
            "express": session.express or any(g.express for g in session.garments),
            "stitching_price": session.stitching_price,
            "order_total": quote.discount.persisted_total,
        })
        return self._update_order(values)

    def set_delivery(self, home_delivery=None, express=None, delivery_date=None) -> None:
        self.session.set_delivery(home_delivery, express, delivery_date)

    def set_stitching_price(self, price) -> None:
        self.session.set_stitching_price(price)

    def set_discount_type(self, discount_type) -> None:
        self.session.switch_discount(discount_type)

    def set_discount_percentage(self, percentage) -> None:
        self.session.set_discount_percentage(percentage, self.charges().total)

    def set_discount_value(self, value) -> None:
        self.session.set_discount_value(value)

    def set_referral_code(self, code: str) -> None:
        self.session.set_referral_code(code)

    def set_payment(self, payment_type=None, paid=None, ref_no=None, note=None) -> None:
        self.session.set_payment(payment_type, paid, ref_no, note)

    def _has_address(self) -> bool:
        customer = self.session.customer or {}
        return any((customer.get(f) or "").strip() for f in ADDRESS_FIELDS)

    def validate_payment(self, quote: Quote | None = None) -> Quote:
        """
        Check the payment step before completion.

        Raises:
            CheckoutError: NO_ITEMS, PAYMENT_TYPE_REQUIRED,
                PAYMENT_REF_REQUIRED, PAYMENT_NOTE_REQUIRED, OVERPAYMENT,
                ADDRESS_REQUIRED
        """
        session = self.session
        quote = quote or self.quote()
        if not session.garments and not session.shelf.lines:
            raise CheckoutError('NO_ITEMS')
        if not session.payment_type:
            raise CheckoutError('PAYMENT_TYPE_REQUIRED')
        if session.payment_type != PaymentType.CASH and not (session.payment_ref_no or "").strip():
            raise CheckoutError('PAYMENT_REF_REQUIRED', payment_type=session.payment_type)
        if session.payment_type == PaymentType.OTHERS and not (session.payment_note or "").strip():
            raise CheckoutError('PAYMENT_NOTE_REQUIRED')
        if quote.final_total > ZERO and quote.paid > quote.final_total:
            raise CheckoutError('OVERPAYMENT', paid=quote.paid, total=quote.final_total)
        home, _ = resolve_delivery_flags(session.garments, session.home_delivery, session.express)
        if home and not self._has_address():
            raise CheckoutError('ADDRESS_REQUIRED', customer=session.customer_id)
        return quote

    def submit(self, confirm_zero_payment: bool = False) -> dict:
        """
        Validate the payment step and complete the order.

        Args:
            confirm_zero_payment: Explicit confirmation to complete an
                order with nothing paid

        Raises:
            CheckoutError('ZERO_PAYMENT_UNCONFIRMED'): paid is 0 and not
                confirmed
        """
        self.session.ensure_editable()
        quote = self.validate_payment()
        if quote.paid == ZERO and not confirm_zero_payment:
            raise CheckoutError('ZERO_PAYMENT_UNCONFIRMED', total=quote.final_total)
        return self.complete(quote)

    # ══════════════════════════════════════════════════════════════
    # COMPLETION
    # ══════════════════════════════════════════════════════════════

    def _checkout_details(self, quote: Quote) -> dict:
        session = self.session
        home, rush = resolve_delivery_flags(session.garments, session.home_delivery, session.express)
        details = quote.charges.as_order_fields()
        details.update(session.discount.as_order_fields())
        details.update({
            "home_delivery": home,
            "express": rush,
            "delivery_date": session.delivery_date,
            "notes": session.notes,
            "stitching_price": session.stitching_price,
            "payment_type": session.payment_type,
            "payment_ref_no": session.payment_ref_no,
            "payment_note": session.payment_note,
            "paid": quote.paid,
            "order_total": quote.discount.persisted_total,
        })
        if session.is_work_order:
            details["production_stage"] = session.production_stage or ProductionStage.ORDER_AT_SHOP
        return details

    def _verify_draft(self) -> None:
        """Order exists, belongs to this brand and is still a draft."""
        result = self.backend.get("orders", self.session.order_id)
        order = result.data if result.ok else None
        if (
            order is None
            or order.get("brand") != self.brand
            or order.get("checkout_status") != CheckoutStatus.DRAFT
        ):
            raise CheckoutError('ORDER_NOT_FOUND', order_id=self.session.order_id)

    def complete(self, quote: Quote | None = None) -> dict:
        """
        Finalize the order with one completion call.

        The backend decrements shelf and fabric stock, confirms the order
        and assigns the invoice number, atomically.

        Raises:
            CheckoutError('ORDER_NOT_FOUND'): Session or stored order is not
                an accessible draft (no completion call is made)
            CheckoutError('ORDER_REQUIRED'): Work order without a draft
            CheckoutError('CUSTOMER_REQUIRED'): Sales order without customer
            BackendError: The completion call failed (message verbatim)
        """
        session = self.session
        if session.is_terminal:
            raise CheckoutError('ORDER_NOT_FOUND', order_id=session.order_id, status=session.checkout_status)
        validate_checkout_transition(session.checkout_status, CheckoutStatus.CONFIRMED)

        quote = quote or self.quote()
        details = self._checkout_details(quote)
        shelf_items = session.shelf.items()

        if session.is_work_order:
            if session.order_id is None:
                raise CheckoutError('ORDER_REQUIRED')
            self._verify_draft()
            fabric_items = [
                {"id": g.fabric_id, "length": to_amount(g.fabric_length)}
                for g in session.garments
                if g.uses_shop_fabric and g.fabric_id is not None
            ]
            result = self.backend.complete_work_order(
                session.order_id, details, shelf_items, fabric_items, brand=self.brand,
            )
        elif session.order_id is not None:
            self._verify_draft()
            result = self.backend.complete_sales_order(
                session.order_id, details, shelf_items, brand=self.brand,
            )
        else:
            if session.customer_id is None:
                raise CheckoutError('CUSTOMER_REQUIRED')
            result = self.backend.create_complete_sales_order(
                session.customer_id, details, shelf_items, brand=self.brand,
            )

        if not result.ok:
            logger.warning(
                "checkout.complete_failed",
                extra={"order_id": session.order_id, "detail": result.message},
            )
            if result.message == ORDER_ACCESS_DENIED:
                raise CheckoutError('ORDER_NOT_FOUND', order_id=session.order_id)
            raise BackendError.from_result(result, "complete")

        order = result.data
        session.order_id = order["id"]
        session.checkout_status = order.get("checkout_status") or CheckoutStatus.CONFIRMED
        session.production_stage = order.get("production_stage")
        session.invoice_number = order.get("invoice_number")
        session.delivery_charge = quote.charges.delivery
        session.express_charge = quote.charges.express
        session.mark_saved(WizardStep.PAYMENT)

        logger.info(
            "checkout.complete",
            extra={
                "order_id": order["id"],
                "order_type": session.order_type,
                "invoice_number": session.invoice_number,
                "total": str(quote.final_total),
                "paid": str(quote.paid),
                "shelf_lines": len(shelf_items),
            },
        )

        if session.invoice_number is not None:
            self.notifier.invoice_ready(order["id"], session.invoice_number)
        else:
            self.start_invoice_polling()
        return order

    # ══════════════════════════════════════════════════════════════
    # INVOICE POLLING
    # ══════════════════════════════════════════════════════════════

    def _invoice_assigned(self, invoice_number: int) -> None:
        self.session.invoice_number = invoice_number

    def start_invoice_polling(self, interval: float | None = None, max_attempts: int | None = None) -> InvoicePoller:
        if self.poller is None or self.poller.order_id != self.session.order_id:
            if self.poller is not None:
                self.poller.reset()
            self.poller = InvoicePoller(
                self.backend,
                self.session.order_id,
                notifier=self.notifier,
                interval=interval,
                max_attempts=max_attempts,
                on_invoice=self._invoice_assigned,
            )
        self.poller.sync(self.session.checkout_status, self.session.invoice_number)
        return self.poller

    def stop_invoice_polling(self) -> None:
        if self.poller is not None:
            self.poller.reset()

    # ══════════════════════════════════════════════════════════════
    # CANCEL / LEAVE
    # ══════════════════════════════════════════════════════════════

    def cancel(self) -> dict | None:
        """
        Cancel the order before completion.

        A persisted draft becomes cancelled; nothing else is written and
        stock is untouched. Without a persisted order the session is just
        reset.

        Raises:
            StageError('TERMINAL_STATUS'): Already confirmed or cancelled
            CheckoutError('ORDER_NOT_FOUND'): The stored order is not an
                accessible draft (nothing is written)
        """
        session = self.session
        validate_checkout_transition(session.checkout_status, CheckoutStatus.CANCELLED)

        if session.order_id is None:
            self.stop_invoice_polling()
            session.reset()
            logger.info("checkout.cancel", extra={"order_id": None})
            return None

        self._verify_draft()
        self.stop_invoice_polling()
        order = _unwrap(
            self.backend.update("orders", session.order_id, {"checkout_status": CheckoutStatus.CANCELLED}),
            "cancel_order",
        )
        session.checkout_status = CheckoutStatus.CANCELLED
        logger.info("checkout.cancel", extra={"order_id": session.order_id})
        return order

    def leave(self, confirm: bool = False) -> bool:
        """
        Close the wizard.

        An in-progress order is only discarded with confirm=True; a draft
        already persisted stays resumable. Returns whether the wizard was
        closed.
        """
        session = self.session
        if session.has_progress and not session.is_terminal and not confirm:
            return False
        self.stop_invoice_polling()
        session.reset()
        return True

    # ══════════════════════════════════════════════════════════════
    # RESUME / LOOKUP
    # ══════════════════════════════════════════════════════════════

    def pending_orders(self, customer_id=None) -> list[dict]:
        """A customer's draft orders of this wizard's type, newest first."""
        customer_id = customer_id if customer_id is not None else self.session.customer_id
        if customer_id is None:
            raise CheckoutError('CUSTOMER_REQUIRED')
        return _unwrap(
            self.backend.select(
                "orders",
                filters={
                    "customer_id": customer_id,
                    "brand": self.brand,
                    "order_type": self.session.order_type,
                    "checkout_status": CheckoutStatus.DRAFT,
                },
                order_by=["-created_at", "-id"],
                limit=PENDING_ORDERS_LIMIT,
            ),
            "pending_orders",
        )

    def find_order(self, term) -> dict | None:
        """Order of this brand by id or invoice number (id wins)."""
        try:
            number = int(str(term).strip())
        except (TypeError, ValueError):
            return None
        for lookup in ("id", "invoice_number"):
            rows = _unwrap(
                self.backend.select("orders", {lookup: number, "brand": self.brand}, limit=1),
                "find_order",
            )
            if rows:
                return rows[0]
        return None

    def load_order(self, order_id) -> dict:
        """
        Load an order (with garments, shelf lines and customer) into the
        session.

        Raises:
            CheckoutError('ORDER_NOT_FOUND'): Missing or other brand
        """
        result = self.backend.get("orders", order_id)
        if not result.ok or result.data.get("brand") != self.brand:
            raise CheckoutError('ORDER_NOT_FOUND', order_id=order_id)
        order = result.data

        garments = _unwrap(self.backend.select("garments", {"order_id": order_id}, order_by=["garment_id"]), "load_garments")
        items = _unwrap(self.backend.select("order_shelf_items", {"order_id": order_id}), "load_shelf_items")
        products = {}
        if items:
            rows = _unwrap(
                self.backend.select("shelf", {"id__in": [i["shelf_id"] for i in items]}),
                "load_shelf",
            )
            products = {row["id"]: row for row in rows}
        shelf_lines = [ShelfLine.from_record(i, products.get(i["shelf_id"])) for i in items]

        customer = None
        if order.get("customer_id") is not None:
            customer_result = self.backend.get("customers", order["customer_id"])
            customer = customer_result.data if customer_result.ok else None

        self.stop_invoice_polling()
        self.session.load(order, garments, shelf_lines, customer)
        return order

    def resume(self, order_id) -> dict:
        """
        Continue a pending draft.

        Raises:
            CheckoutError('ORDER_NOT_FOUND'): Not an accessible draft
        """
        order = self.load_order(order_id)
        if self.session.is_terminal:
            self.session.reset()
            raise CheckoutError('ORDER_NOT_FOUND', order_id=order_id, status=order.get("checkout_status"))
        self.load_shelf_catalogue()
        return order

    # ══════════════════════════════════════════════════════════════
    # STOCK ADJUSTMENT
    # ══════════════════════════════════════════════════════════════

    def settle_stock(self, shelf_items=None, fabric_items=None) -> SettlementReport:
        """
        Decrement stock line by line outside the completion call.

        The shelf catalogue is refreshed afterwards, partial failure or not.
        """
        report = settle_stock(self.backend, shelf_items, fabric_items)
        if report.succeeded:
            self.load_shelf_catalogue()
        return report
