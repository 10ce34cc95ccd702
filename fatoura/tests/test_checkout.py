"""
Tests for the Checkout service (work and sales orders) over InMemoryBackend.
"""

from decimal import Decimal

import pytest

from fatoura.adapters.memory import InMemoryBackend
from fatoura.exceptions import BackendError, CheckoutError, SelectionError, StageError
from fatoura.lines import GarmentLine, ShelfLine
from fatoura.models import CheckoutStatus, DiscountType, FabricSource, JabzourType, OrderType, PaymentType
from fatoura.protocols.backend import ORDER_ACCESS_DENIED
from fatoura.service import Checkout
from fatoura.session import WizardStep

from .conftest import seed_backend


class TestCustomerStep:
    """Tests for the customer step."""

    def test_proceed_requires_customer(self, checkout):
        """No customer, no draft."""
        with pytest.raises(CheckoutError) as exc:
            checkout.proceed_from_customer()

        assert exc.value.code == 'CUSTOMER_REQUIRED'

    def test_work_order_draft_created(self, checkout, backend):
        """Leaving the customer step creates the draft work order."""
        checkout.select_customer(1)
        order = checkout.proceed_from_customer()

        stored = backend.row('orders', order['id'])
        assert stored['checkout_status'] == CheckoutStatus.DRAFT
        assert stored['brand'] == 'erth'
        assert stored['order_type'] == OrderType.WORK
        assert stored['production_stage'] == 'order_at_shop'
        assert stored['invoice_number'] is None
        assert checkout.session.order_id == order['id']
        assert checkout.session.current_step == WizardStep.ITEMS

    def test_second_pass_updates_draft(self, checkout, backend):
        """Coming back to the customer step re-points the same draft."""
        checkout.select_customer(1)
        first = checkout.proceed_from_customer()
        checkout.select_customer(2)
        checkout.proceed_from_customer()

        assert len(backend.rows('orders')) == 1
        assert backend.row('orders', first['id'])['customer_id'] == 2

    def test_sales_order_not_persisted_yet(self, sales_checkout, backend):
        """Sales orders are created at completion."""
        sales_checkout.select_customer(1)
        assert sales_checkout.proceed_from_customer() is None
        assert backend.rows('orders') == []

    def test_search_customers(self, checkout):
        """Phone and name substrings, no duplicates."""
        assert [c['id'] for c in checkout.search_customers('555')] == [1]
        assert [c['id'] for c in checkout.search_customers('FAH')] == [2]
        assert sorted(c['id'] for c in checkout.search_customers('a')) == [1, 2]
        assert checkout.search_customers('  ') == []

    def test_save_customer(self, checkout, backend):
        """New customers are created and attached."""
        customer = checkout.save_customer({'name': 'Yousef', 'phone': '60001111'})

        assert checkout.session.customer_id == customer['id']
        assert backend.row('customers', customer['id'])['name'] == 'Yousef'

    def test_save_customer_updates_attached(self, checkout, backend):
        """Editing the attached customer updates it in place."""
        checkout.select_customer(2)
        checkout.save_customer({'name': 'Fahad Saleh', 'city': 'Hawalli'})

        assert backend.row('customers', 2)['city'] == 'Hawalli'
        assert len(backend.rows('customers')) == 2


class TestGarments:
    """Tests for saving garments."""

    def test_snapshot_and_numbering(self, checkout, backend, qallabi_garment):
        """Saved garments carry their price snapshot and number."""
        checkout.select_customer(1)
        order = checkout.proceed_from_customer()

        checkout.save_garments([qallabi_garment, GarmentLine(fabric_id=1, fabric_length=Decimal('3.5'),
                                                            collar_type='COL_QALLABI')])

        rows = sorted(backend.rows('garments'), key=lambda r: r['garment_id'])
        assert [r['garment_id'] for r in rows] == [f"{order['id']}-1", f"{order['id']}-2"]
        assert [r['style_id'] for r in rows] == ['S-1', 'S-1']
        assert rows[0]['fabric_price_snapshot'] == Decimal('14')
        assert rows[0]['stitching_price_snapshot'] == Decimal('9')
        assert rows[0]['style_price_snapshot'] == Decimal('5')
        assert backend.row('orders', order['id'])['order_total'] == Decimal('56')

    def test_removed_garments_deleted(self, checkout, backend, qallabi_garment):
        """A garment removed from the session is deleted on save."""
        checkout.select_customer(1)
        checkout.proceed_from_customer()
        checkout.save_garments([qallabi_garment, GarmentLine(fabric_source=FabricSource.EXTERNAL)])

        checkout.session.remove_garment(1)
        checkout.save_garments()

        assert len(backend.rows('garments')) == 1

    def test_garment_delivery_flag_adds_fee(self, checkout, backend):
        """One garment for home delivery charges the order."""
        checkout.select_customer(1)
        order = checkout.proceed_from_customer()
        checkout.save_garments([GarmentLine(fabric_source=FabricSource.EXTERNAL, home_delivery=True)])

        stored = backend.row('orders', order['id'])
        assert stored['home_delivery'] is True
        assert stored['delivery_charge'] == Decimal('2')
        assert checkout.session.home_delivery is True

    def test_negotiated_stitching(self, checkout, backend):
        """A negotiated rate applies to non-design garments."""
        checkout.select_customer(1)
        checkout.proceed_from_customer()
        checkout.set_stitching_price(Decimal('7'))
        checkout.save_garments([
            GarmentLine(fabric_source=FabricSource.EXTERNAL),
            GarmentLine(fabric_source=FabricSource.EXTERNAL, style='design'),
        ])

        assert checkout.charges().stitching == Decimal('16')

    def test_jabzour_stored_as_type_and_code(self, checkout, backend):
        """The zipper code is stored as jabzour type ZIPPER."""
        checkout.select_customer(1)
        checkout.proceed_from_customer()
        checkout.save_garments([GarmentLine(fabric_source=FabricSource.EXTERNAL, jabzour='JAB_SHAAB')])

        assert backend.rows('garments')[0]['jabzour_1'] == JabzourType.ZIPPER

    def test_fabric_stock_checked_per_fabric(self, checkout, backend):
        """Grey Wool has 2 m; two 1.5 m cuts are rejected together."""
        checkout.select_customer(1)
        checkout.proceed_from_customer()

        with pytest.raises(SelectionError) as exc:
            checkout.save_garments([
                GarmentLine(fabric_id=2, fabric_length=Decimal('1.5')),
                GarmentLine(fabric_id=2, fabric_length=Decimal('1.5')),
            ])

        assert exc.value.code == 'INSUFFICIENT_STOCK'
        assert exc.value.data['requested'] == Decimal('3')
        assert checkout.session.garments == []
        assert backend.rows('garments') == []

    def test_short_fabric_keeps_saved_garments(self, checkout, backend, qallabi_garment):
        """A rejected save leaves the session and step where they were."""
        checkout.select_customer(1)
        checkout.proceed_from_customer()
        checkout.save_garments([qallabi_garment])

        with pytest.raises(SelectionError):
            checkout.save_garments([qallabi_garment, GarmentLine(fabric_id=2, fabric_length=Decimal('3'))])

        assert checkout.session.garments == [qallabi_garment]
        assert len(backend.rows('garments')) == 1

    def test_fabric_exactly_used_up(self, checkout, backend):
        checkout.select_customer(1)
        checkout.proceed_from_customer()

        checkout.save_garments([GarmentLine(fabric_id=2, fabric_length=Decimal('2'))])

        assert backend.rows('garments')[0]['fabric_price_snapshot'] == Decimal('13')

    def test_unknown_fabric_rejected(self, checkout, backend):
        """Shop fabric must exist; it is never priced at zero."""
        checkout.select_customer(1)
        checkout.proceed_from_customer()

        for fabric_id in (99, None):
            with pytest.raises(SelectionError) as exc:
                checkout.save_garments([GarmentLine(fabric_id=fabric_id, fabric_length=Decimal('1'))])
            assert exc.value.code == 'UNKNOWN_PRODUCT'

        assert backend.rows('garments') == []

    def test_garments_need_draft(self, checkout, qallabi_garment):
        """No draft order, no garments."""
        with pytest.raises(CheckoutError) as exc:
            checkout.save_garments([qallabi_garment])

        assert exc.value.code == 'ORDER_REQUIRED'

    def test_sales_orders_have_no_garments(self, sales_checkout, qallabi_garment):
        """Garments belong to work orders."""
        with pytest.raises(CheckoutError) as exc:
            sales_checkout.save_garments([qallabi_garment])

        assert exc.value.code == 'WRONG_ORDER_TYPE'

    def test_items_step_needs_customer_step(self, checkout):
        """Items cannot be saved before the customer step."""
        with pytest.raises(CheckoutError) as exc:
            checkout.save_items()

        assert exc.value.code == 'STEP_NOT_READY'


class TestQuote:
    """Tests for Checkout.quote()."""

    def test_discount_and_balance(self, ready_checkout):
        """10% off 28 is 2.80; paying 20 leaves 5.20."""
        ready_checkout.set_discount_type(DiscountType.FLAT)
        ready_checkout.set_discount_percentage(10)
        ready_checkout.set_payment(paid=Decimal('20'))

        quote = ready_checkout.quote()

        assert quote.subtotal == Decimal('28')
        assert quote.discount.discount_amount == Decimal('2.80')
        assert quote.final_total == Decimal('25.20')
        assert quote.balance == Decimal('5.20')

    def test_cash_discount_over_total(self, ready_checkout):
        """A cash discount above the subtotal displays 0."""
        ready_checkout.set_discount_type(DiscountType.BY_VALUE)
        ready_checkout.set_discount_value(Decimal('40'))

        quote = ready_checkout.quote()

        assert quote.final_total == Decimal('-12')
        assert quote.display_total == Decimal('0')
        assert quote.display_balance == Decimal('0')

    def test_live_prices_for_drafts(self, ready_checkout, backend):
        """Drafts are re-quoted from the current price table."""
        backend.update('prices', 'COL_QALLABI', {'value': Decimal('8')})
        ready_checkout.load_prices()

        assert ready_checkout.quote().subtotal == Decimal('31')


class TestPaymentValidation:
    """Tests for Checkout.submit() preconditions."""

    def test_payment_type_required(self, ready_checkout, backend):
        with pytest.raises(CheckoutError) as exc:
            ready_checkout.submit()

        assert exc.value.code == 'PAYMENT_TYPE_REQUIRED'
        assert backend.called('complete_work_order') == 0

    def test_reference_required_for_non_cash(self, ready_checkout):
        ready_checkout.set_payment(payment_type=PaymentType.KNET, paid=Decimal('10'))

        with pytest.raises(CheckoutError) as exc:
            ready_checkout.submit()

        assert exc.value.code == 'PAYMENT_REF_REQUIRED'

    def test_note_required_for_others(self, ready_checkout):
        ready_checkout.set_payment(payment_type=PaymentType.OTHERS, paid=Decimal('10'), ref_no='R-1')

        with pytest.raises(CheckoutError) as exc:
            ready_checkout.submit()

        assert exc.value.code == 'PAYMENT_NOTE_REQUIRED'

    def test_overpayment_rejected(self, ready_checkout):
        ready_checkout.set_payment(payment_type=PaymentType.CASH, paid=Decimal('28.001'))

        with pytest.raises(CheckoutError) as exc:
            ready_checkout.submit()

        assert exc.value.code == 'OVERPAYMENT'

    def test_home_delivery_needs_address(self, checkout, qallabi_garment):
        """Customer 2 has no address."""
        checkout.select_customer(2)
        checkout.proceed_from_customer()
        checkout.save_garments([qallabi_garment])
        checkout.save_items()
        checkout.set_delivery(home_delivery=True)
        checkout.set_payment(payment_type=PaymentType.CASH, paid=Decimal('10'))

        with pytest.raises(CheckoutError) as exc:
            checkout.submit()

        assert exc.value.code == 'ADDRESS_REQUIRED'

    def test_zero_payment_needs_confirmation(self, ready_checkout, backend):
        """Nothing paid completes only when confirmed."""
        ready_checkout.set_payment(payment_type=PaymentType.CASH, paid=0)

        with pytest.raises(CheckoutError) as exc:
            ready_checkout.submit()
        assert exc.value.code == 'ZERO_PAYMENT_UNCONFIRMED'

        ready_checkout.submit(confirm_zero_payment=True)
        assert ready_checkout.session.checkout_status == CheckoutStatus.CONFIRMED

    def test_no_items(self, sales_checkout):
        sales_checkout.set_payment(payment_type=PaymentType.CASH, paid=Decimal('1'))

        with pytest.raises(CheckoutError) as exc:
            sales_checkout.submit()

        assert exc.value.code == 'NO_ITEMS'


class TestWorkOrderCompletion:
    """Tests for completing work orders."""

    def test_complete(self, ready_checkout, backend, notifier):
        """Completion confirms, decrements fabric and assigns the invoice."""
        ready_checkout.set_payment(payment_type=PaymentType.CASH, paid=Decimal('20'))

        order = ready_checkout.submit()

        stored = backend.row('orders', order['id'])
        assert stored['checkout_status'] == CheckoutStatus.CONFIRMED
        assert stored['invoice_number'] == 1
        assert stored['order_total'] == Decimal('28')
        assert stored['paid'] == Decimal('20')
        assert backend.row('fabrics', 1)['real_stock'] == Decimal('16.5')
        assert backend.called('complete_work_order') == 1
        assert ready_checkout.session.invoice_number == 1
        assert notifier.calls == [(order['id'], 1)]

    def test_completed_order_uses_settled_prices(self, ready_checkout, backend):
        """After confirmation totals come from snapshots only."""
        ready_checkout.set_payment(payment_type=PaymentType.CASH, paid=Decimal('20'))
        ready_checkout.submit()

        backend.update('prices', 'COL_QALLABI', {'value': Decimal('50')})
        ready_checkout.load_prices()

        quote = ready_checkout.quote()
        assert quote.subtotal == Decimal('28')
        assert quote.balance == Decimal('8')

    def test_confirmed_session_never_calls_completion(self, ready_checkout, backend):
        """An already confirmed order is rejected before the completion call."""
        ready_checkout.session.checkout_status = CheckoutStatus.CONFIRMED

        with pytest.raises(CheckoutError) as exc:
            ready_checkout.complete()

        assert exc.value.code == 'ORDER_NOT_FOUND'
        assert backend.called('complete_work_order') == 0

    def test_order_confirmed_elsewhere(self, ready_checkout, backend):
        """A stored order that is no longer a draft is rejected up front."""
        backend.update('orders', ready_checkout.session.order_id, {'checkout_status': CheckoutStatus.CONFIRMED})
        ready_checkout.set_payment(payment_type=PaymentType.CASH, paid=Decimal('20'))

        with pytest.raises(CheckoutError) as exc:
            ready_checkout.submit()

        assert exc.value.code == 'ORDER_NOT_FOUND'
        assert backend.called('complete_work_order') == 0

    def test_second_submit_rejected(self, ready_checkout, backend):
        """Completion happens once."""
        ready_checkout.set_payment(payment_type=PaymentType.CASH, paid=Decimal('20'))
        ready_checkout.submit()

        with pytest.raises(CheckoutError):
            ready_checkout.submit()
        assert backend.called('complete_work_order') == 1

    def test_backend_message_verbatim(self, notifier, qallabi_garment):
        """Backend failures surface their message and leave the draft."""
        failing = seed_backend(InMemoryBackend(fail_on={'complete_work_order': 'Connection reset by peer'}))
        checkout = Checkout(backend=failing, notifier=notifier, brand='erth')
        checkout.select_customer(1)
        checkout.proceed_from_customer()
        checkout.save_garments([qallabi_garment])
        checkout.set_payment(payment_type=PaymentType.CASH, paid=Decimal('1'))

        with pytest.raises(BackendError) as exc:
            checkout.submit()

        assert exc.value.message == 'Connection reset by peer'
        assert checkout.session.checkout_status == CheckoutStatus.DRAFT
        assert notifier.calls == []

    def test_access_denied_maps_to_not_found(self, notifier, qallabi_garment):
        """The procedure's access-denied message is an access error."""
        failing = seed_backend(InMemoryBackend(fail_on={'complete_work_order': ORDER_ACCESS_DENIED}))
        checkout = Checkout(backend=failing, notifier=notifier, brand='erth')
        checkout.select_customer(1)
        checkout.proceed_from_customer()
        checkout.save_garments([qallabi_garment])
        checkout.set_payment(payment_type=PaymentType.CASH, paid=Decimal('1'))

        with pytest.raises(CheckoutError) as exc:
            checkout.submit()

        assert exc.value.is_access_error

    def test_fabric_shortfall_fails_whole_order(self, checkout, backend):
        """Grey Wool drops below the cut after the garments step; nothing changes."""
        checkout.select_customer(1)
        order = checkout.proceed_from_customer()
        checkout.save_garments([GarmentLine(fabric_id=2, fabric_length=Decimal('1.5'))])
        backend.update('fabrics', 2, {'real_stock': Decimal('1')})
        checkout.load_shelf_catalogue()
        checkout.add_shelf_product('Cap', 'Classic', 1)
        checkout.set_payment(payment_type=PaymentType.CASH, paid=Decimal('1'))

        with pytest.raises(BackendError) as exc:
            checkout.submit()

        assert exc.value.message == 'Insufficient stock for fabric 2: available 1, requested 1.5'
        assert backend.row('shelf', 3)['stock'] == 10
        assert backend.row('orders', order['id'])['checkout_status'] == CheckoutStatus.DRAFT

    def test_other_brand_cannot_complete(self, ready_checkout, backend, notifier):
        """An order of another brand is not accessible."""
        other = Checkout(ready_checkout.session, backend=backend, notifier=notifier, brand='qurtuba')
        ready_checkout.set_payment(payment_type=PaymentType.CASH, paid=Decimal('20'))

        with pytest.raises(CheckoutError) as exc:
            other.submit()

        assert exc.value.code == 'ORDER_NOT_FOUND'


class TestSalesOrderCompletion:
    """Tests for completing sales orders."""

    def test_create_and_complete(self, sales_checkout, backend, notifier):
        """A sales order is created and completed in one call."""
        sales_checkout.select_customer(1)
        sales_checkout.proceed_from_customer()
        sales_checkout.load_shelf_catalogue()
        assert sales_checkout.add_shelf_product('Shimagh', 'Al Shaheen', 2).accepted
        sales_checkout.save_items()
        sales_checkout.set_payment(payment_type=PaymentType.KNET, paid=Decimal('9'), ref_no='K-123')

        order = sales_checkout.submit()

        assert backend.called('create_complete_sales_order') == 1
        assert order['order_type'] == OrderType.SALES
        assert order['shelf_charge'] == Decimal('9')
        assert backend.row('shelf', 1)['stock'] == 3
        items = backend.rows('order_shelf_items')
        assert [(i['shelf_id'], i['quantity']) for i in items] == [(1, 2)]
        assert sales_checkout.session.order_id == order['id']
        assert notifier.count == 1

    def test_existing_sales_draft_completed(self, sales_checkout, backend):
        """A persisted sales draft goes through complete_sales_order."""
        draft = backend.insert('orders', {
            'customer_id': 1, 'brand': 'erth', 'order_type': OrderType.SALES,
            'checkout_status': CheckoutStatus.DRAFT,
        }).data
        sales_checkout.resume(draft['id'])
        sales_checkout.add_shelf_product('Cap', 'Classic', 1)
        sales_checkout.set_payment(payment_type=PaymentType.CASH, paid=Decimal('10'))

        sales_checkout.submit()

        assert backend.called('complete_sales_order') == 1
        assert backend.row('orders', draft['id'])['checkout_status'] == CheckoutStatus.CONFIRMED

    def test_shelf_shortfall(self, sales_checkout, backend):
        """Stock sold elsewhere in the meantime fails the order."""
        sales_checkout.select_customer(1)
        sales_checkout.load_shelf_catalogue()
        sales_checkout.add_shelf_product('Cap', 'Classic', 4)
        backend.update('shelf', 3, {'stock': 3})
        sales_checkout.set_payment(payment_type=PaymentType.CASH, paid=Decimal('1'))

        with pytest.raises(BackendError) as exc:
            sales_checkout.submit()

        assert 'Insufficient stock for shelf item 3' in exc.value.message
        assert backend.rows('orders') == []


class TestCancelAndLeave:
    """Tests for cancel() and leave()."""

    def test_cancel_draft(self, ready_checkout, backend):
        """The draft becomes cancelled; stock is untouched."""
        order_id = ready_checkout.session.order_id

        ready_checkout.cancel()

        assert backend.row('orders', order_id)['checkout_status'] == CheckoutStatus.CANCELLED
        assert backend.row('fabrics', 1)['real_stock'] == Decimal('20')
        with pytest.raises(CheckoutError):
            ready_checkout.set_payment(paid=Decimal('1'))

    def test_cancel_twice(self, ready_checkout):
        """Cancelled is terminal."""
        ready_checkout.cancel()

        with pytest.raises(StageError) as exc:
            ready_checkout.cancel()

        assert exc.value.code == 'TERMINAL_STATUS'

    def test_stale_session_cannot_cancel_confirmed_order(self, ready_checkout, backend, notifier):
        """An order completed by another wizard stays confirmed."""
        other = Checkout(backend=backend, notifier=notifier, brand='erth')
        other.resume(ready_checkout.session.order_id)
        other.set_payment(payment_type=PaymentType.CASH, paid=Decimal('28'))
        order = other.submit()

        with pytest.raises(CheckoutError) as exc:
            ready_checkout.cancel()

        assert exc.value.code == 'ORDER_NOT_FOUND'
        assert backend.row('orders', order['id'])['checkout_status'] == CheckoutStatus.CONFIRMED
        assert backend.row('orders', order['id'])['invoice_number'] == 1
        assert ready_checkout.session.checkout_status == CheckoutStatus.DRAFT

    def test_other_brand_cannot_cancel(self, ready_checkout, backend):
        backend.update('orders', ready_checkout.session.order_id, {'brand': 'qurtuba'})

        with pytest.raises(CheckoutError):
            ready_checkout.cancel()

        assert backend.row('orders', ready_checkout.session.order_id)['checkout_status'] == CheckoutStatus.DRAFT

    def test_cancel_without_order_resets(self, sales_checkout, backend):
        """Nothing persisted: cancel just clears the wizard."""
        sales_checkout.select_customer(1)

        assert sales_checkout.cancel() is None
        assert sales_checkout.session.customer is None
        assert backend.called('update') == 0

    def test_leave_needs_confirmation(self, ready_checkout, backend):
        """Leaving with progress asks first; the draft stays resumable."""
        order_id = ready_checkout.session.order_id

        assert ready_checkout.leave() is False
        assert ready_checkout.session.order_id == order_id

        assert ready_checkout.leave(confirm=True) is True
        assert ready_checkout.session.order_id is None
        assert backend.row('orders', order_id)['checkout_status'] == CheckoutStatus.DRAFT

    def test_leave_empty_wizard(self, checkout):
        assert checkout.leave() is True


class TestResume:
    """Tests for pending orders, resume and lookup."""

    def test_pending_orders_newest_first(self, checkout, backend):
        """Drafts of this customer, brand and type, newest first, at most 5."""
        for _ in range(6):
            backend.insert('orders', {'customer_id': 1, 'brand': 'erth', 'order_type': OrderType.WORK,
                                      'checkout_status': CheckoutStatus.DRAFT})
        backend.insert('orders', {'customer_id': 1, 'brand': 'qurtuba', 'order_type': OrderType.WORK,
                                  'checkout_status': CheckoutStatus.DRAFT})

        pending = checkout.pending_orders(1)

        assert len(pending) == 5
        assert all(o['brand'] == 'erth' for o in pending)
        assert pending[0]['id'] > pending[-1]['id']

    def test_resume_restores_garments(self, ready_checkout, backend, notifier):
        """A new wizard picks up the draft where it was left."""
        order_id = ready_checkout.session.order_id
        ready_checkout.leave(confirm=True)

        resumed = Checkout(backend=backend, notifier=notifier, brand='erth')
        resumed.resume(order_id)

        session = resumed.session
        assert session.customer_id == 1
        assert len(session.garments) == 1
        assert session.garments[0].fabric_price_snapshot == Decimal('14')
        assert session.current_step == WizardStep.PAYMENT
        assert resumed.quote().subtotal == Decimal('28')

    def test_resume_confirmed_rejected(self, ready_checkout, backend, notifier):
        """Only drafts can be resumed."""
        ready_checkout.set_payment(payment_type=PaymentType.CASH, paid=Decimal('28'))
        order = ready_checkout.submit()

        with pytest.raises(CheckoutError) as exc:
            Checkout(backend=backend, notifier=notifier, brand='erth').resume(order['id'])

        assert exc.value.code == 'ORDER_NOT_FOUND'

    def test_load_confirmed_order_read_only(self, ready_checkout, backend, notifier):
        """A confirmed order loads for display but cannot be edited."""
        ready_checkout.set_payment(payment_type=PaymentType.CASH, paid=Decimal('28'))
        order = ready_checkout.submit()

        viewer = Checkout(backend=backend, notifier=notifier, brand='erth')
        viewer.load_order(order['id'])

        assert viewer.session.invoice_number == 1
        assert viewer.quote().balance == Decimal('0')
        with pytest.raises(CheckoutError):
            viewer.set_discount_type(DiscountType.FLAT)

    def test_confirmed_totals_ignore_incomplete_rows(self, ready_checkout, backend, notifier):
        """Settled totals count only complete shelf lines."""
        ready_checkout.set_payment(payment_type=PaymentType.CASH, paid=Decimal('28'))
        order = ready_checkout.submit()
        viewer = Checkout(backend=backend, notifier=notifier, brand='erth')
        viewer.load_order(order['id'])

        viewer.session.shelf.rows.append(ShelfLine(product_type='Cap', unit_price=Decimal('10')))

        assert viewer.charges().shelf == Decimal('0')
        assert viewer.quote().subtotal == Decimal('28')

    def test_find_order(self, checkout, backend):
        """By id first, then by invoice number."""
        backend.seed('orders', [
            {'id': 5, 'brand': 'erth', 'invoice_number': 40},
            {'id': 40, 'brand': 'erth', 'invoice_number': 41},
            {'id': 41, 'brand': 'qurtuba', 'invoice_number': 99},
        ])

        assert checkout.find_order('40')['id'] == 40
        assert checkout.find_order(99) is None
        assert checkout.find_order('41')['id'] == 40
        assert checkout.find_order('abc') is None


class TestDeferredInvoice:
    """Tests for invoice numbers assigned after completion."""

    def test_polling_delivers_invoice(self, notifier, qallabi_garment):
        """The poller notifies once when the number appears."""
        backend = seed_backend(InMemoryBackend(defer_invoice=2))
        checkout = Checkout(backend=backend, notifier=notifier, brand='erth')
        checkout.select_customer(1)
        checkout.proceed_from_customer()
        checkout.save_garments([qallabi_garment])
        checkout.set_payment(payment_type=PaymentType.CASH, paid=Decimal('28'))

        order = checkout.submit()

        assert order['invoice_number'] is None
        assert checkout.poller is not None
        checkout.poller._thread.join(timeout=5)
        assert checkout.poller.attempts == 2
        assert checkout.session.invoice_number == 1
        assert notifier.calls == [(order['id'], 1)]

    def test_leave_stops_polling(self, notifier, qallabi_garment):
        backend = seed_backend(InMemoryBackend(defer_invoice=1000))
        checkout = Checkout(backend=backend, notifier=notifier, brand='erth')
        checkout.select_customer(1)
        checkout.proceed_from_customer()
        checkout.save_garments([qallabi_garment])
        checkout.set_payment(payment_type=PaymentType.CASH, paid=Decimal('28'))
        checkout.submit()
        poller = checkout.poller

        assert checkout.leave() is True
        poller.stop(wait=True)

        assert not poller.running
        assert notifier.calls == []


class TestStockAdjustment:
    """Tests for Checkout.settle_stock()."""

    def test_catalogue_refreshed(self, sales_checkout):
        sales_checkout.load_shelf_catalogue()

        report = sales_checkout.settle_stock(shelf_items=[{'id': 3, 'quantity': 4}])

        assert report.ok
        assert sales_checkout.session.shelf.product('Cap', 'Classic')['stock'] == 6
