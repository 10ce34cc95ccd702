"""
Tests for InMemoryBackend.
"""

from decimal import Decimal

from fatoura.adapters.memory import DEFAULT_FAILURE, InMemoryBackend, matches
from fatoura.models import CheckoutStatus, OrderType
from fatoura.protocols.backend import ORDER_ACCESS_DENIED


def _draft(backend, **values):
    row = {'customer_id': 1, 'brand': 'erth', 'order_type': OrderType.WORK,
           'checkout_status': CheckoutStatus.DRAFT}
    row.update(values)
    return backend.insert('orders', row).data


class TestLookups:
    """Tests for filter evaluation."""

    def test_exact_and_icontains(self):
        row = {'name': 'Ali Hassan', 'phone': '55512345'}

        assert matches(row, {'name': 'Ali Hassan'})
        assert matches(row, {'name__icontains': 'hass'})
        assert not matches(row, {'phone__icontains': '999'})

    def test_in_isnull_and_ranges(self):
        row = {'id': 3, 'invoice_number': None, 'stock': 5}

        assert matches(row, {'id__in': [1, 3]})
        assert matches(row, {'invoice_number__isnull': True})
        assert matches(row, {'stock__gte': 5, 'stock__lt': Decimal('5.5')})
        assert not matches(row, {'invoice_number__gt': 0})

    def test_unsupported_lookup_is_an_error_result(self, backend):
        result = backend.select('shelf', {'type__regex': '.*'})

        assert not result.ok
        assert 'Unsupported lookup' in result.message


class TestCrud:
    """Tests for the generic operations."""

    def test_select_order_and_limit(self, backend):
        rows = backend.select('shelf', order_by=['type', '-brand'], limit=2).data

        assert [r['id'] for r in rows] == [3, 2]

    def test_rows_are_copies(self, backend):
        backend.get('shelf', 1).data['stock'] = 99

        assert backend.row('shelf', 1)['stock'] == 5

    def test_insert_assigns_next_id(self, backend):
        assert backend.insert('shelf', {'type': 'Cap', 'brand': 'Sport', 'stock': 1}).data['id'] == 4

    def test_insert_duplicate_key(self, backend):
        result = backend.insert('prices', {'key': 'COL_QALLABI', 'value': 1})

        assert not result.ok

    def test_garments_get_uuid_keys(self, backend):
        row = backend.insert('garments', {'order_id': 1}).data

        assert isinstance(row['id'], str) and len(row['id']) == 36

    def test_update_missing(self, backend):
        result = backend.update('fabrics', 9, {'real_stock': 1})

        assert result.message == 'fabrics 9 not found'

    def test_upsert(self, backend):
        backend.upsert('prices', {'key': 'COL_QALLABI', 'value': Decimal('6')})
        backend.upsert('prices', {'key': 'NEW_OPTION', 'value': Decimal('1')})

        assert backend.row('prices', 'COL_QALLABI')['value'] == Decimal('6')
        assert backend.row('prices', 'NEW_OPTION')['value'] == Decimal('1')

    def test_delete(self, backend):
        assert backend.delete('shelf', 2).count == 1
        assert backend.delete('shelf', 2).count == 0

    def test_unknown_resource(self, backend):
        result = backend.select('invoices')

        assert result.message == 'Unknown resource: invoices'


class TestFailureInjection:
    """Tests for fail_on."""

    def test_method_resource_and_pk_keys(self):
        backend = InMemoryBackend(fail_on=['select', 'update:shelf', 'delete:fabrics:2'])
        backend.seed('fabrics', [{'id': 1}, {'id': 2}])

        assert backend.select('prices').message == DEFAULT_FAILURE
        assert not backend.update('shelf', 1, {}).ok
        assert backend.delete('fabrics', 1).ok
        assert not backend.delete('fabrics', 2).ok

    def test_custom_message(self):
        backend = InMemoryBackend(fail_on={'get:orders': 'timeout'})

        assert backend.get('orders', 1).message == 'timeout'


class TestCompletion:
    """Tests for the completion procedures."""

    def test_work_order(self, backend):
        order = _draft(backend)

        result = backend.complete_work_order(
            order['id'],
            {'paid': Decimal('10'), 'brand': 'qurtuba', 'invoice_number': 77},
            [{'id': 3, 'quantity': 2, 'unit_price': Decimal('9')}],
            [{'id': 1, 'length': Decimal('3.5')}, {'id': 1, 'length': Decimal('1')}],
            brand='erth',
        )

        assert result.ok
        stored = backend.row('orders', order['id'])
        assert stored['checkout_status'] == CheckoutStatus.CONFIRMED
        assert stored['invoice_number'] == 1
        assert stored['brand'] == 'erth'
        assert stored['paid'] == Decimal('10')
        assert backend.row('shelf', 3)['stock'] == 8
        assert backend.row('fabrics', 1)['real_stock'] == Decimal('15.5')
        item = backend.rows('order_shelf_items')[0]
        assert (item['shelf_id'], item['quantity'], item['unit_price']) == (3, 2, Decimal('9'))

    def test_invoice_numbers_increase(self, backend):
        first, second = _draft(backend), _draft(backend)

        backend.complete_work_order(first['id'], {}, [], [], brand='erth')
        backend.complete_work_order(second['id'], {}, [], [], brand='erth')

        assert backend.row('orders', second['id'])['invoice_number'] == 2

    def test_shortfall_changes_nothing(self, backend):
        order = _draft(backend)

        result = backend.complete_work_order(
            order['id'], {}, [{'id': 3, 'quantity': 1}], [{'id': 2, 'length': 5}], brand='erth',
        )

        assert result.message == 'Insufficient stock for fabric 2: available 2, requested 5'
        assert backend.row('shelf', 3)['stock'] == 10
        assert backend.row('orders', order['id'])['checkout_status'] == CheckoutStatus.DRAFT

    def test_unknown_shelf_item(self, backend):
        order = _draft(backend, order_type=OrderType.SALES)

        result = backend.complete_sales_order(order['id'], {}, [{'id': 42, 'quantity': 1}], brand='erth')

        assert result.message == 'Shelf item 42 not found'

    def test_access_denied(self, backend):
        """Wrong brand, wrong type and non-drafts are all refused alike."""
        work = _draft(backend)
        done = _draft(backend, checkout_status=CheckoutStatus.CONFIRMED)

        assert backend.complete_work_order(work['id'], {}, [], [], brand='qurtuba').message == ORDER_ACCESS_DENIED
        assert backend.complete_sales_order(work['id'], {}, [], brand='erth').message == ORDER_ACCESS_DENIED
        assert backend.complete_work_order(done['id'], {}, [], [], brand='erth').message == ORDER_ACCESS_DENIED
        assert backend.complete_work_order(999, {}, [], [], brand='erth').message == ORDER_ACCESS_DENIED

    def test_create_complete_sales_order(self, backend):
        result = backend.create_complete_sales_order(
            1, {'shelf_charge': Decimal('4.5')}, [{'id': 1, 'quantity': 1, 'unit_price': Decimal('4.5')}],
            brand='erth',
        )

        order = result.data
        assert order['order_type'] == OrderType.SALES
        assert order['customer_id'] == 1
        assert order['invoice_number'] == 1
        assert backend.row('shelf', 1)['stock'] == 4

    def test_create_for_unknown_customer(self, backend):
        result = backend.create_complete_sales_order(9, {}, [], brand='erth')

        assert result.message == 'Customer 9 not found'
        assert backend.rows('orders') == []

    def test_deferred_invoice(self):
        backend = InMemoryBackend(defer_invoice=2)
        order = _draft(backend)

        assert backend.complete_work_order(order['id'], {}, [], [], brand='erth').data['invoice_number'] is None
        assert backend.get('orders', order['id']).data['invoice_number'] is None
        assert backend.select('orders', {'id': order['id']}).data[0]['invoice_number'] == 1
