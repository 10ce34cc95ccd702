"""
Tests for per-line stock settlement.
"""

from decimal import Decimal

import pytest

from fatoura.adapters.memory import DEFAULT_FAILURE, InMemoryBackend
from fatoura.exceptions import SettlementError
from fatoura.services.settlement import FABRICS, SHELF, settle_stock

from .conftest import seed_backend


class CrashingBackend(InMemoryBackend):
    """Raises on updates of one fabric."""

    def update(self, resource, pk, values):
        if resource == FABRICS and pk == 2:
            raise RuntimeError('connection dropped')
        return super().update(resource, pk, values)


def _updates(backend):
    return [call for call in backend.calls if call[0] == 'update']


class TestSettleStock:
    """Tests for settle_stock()."""

    def test_all_lines_succeed(self, backend):
        report = settle_stock(
            backend,
            shelf_items=[{'id': 3, 'quantity': 4}],
            fabric_items=[{'id': 1, 'length': '3.5'}],
        )

        assert report.ok
        assert sorted(report.succeeded) == [(FABRICS, 1), (SHELF, 3)]
        assert backend.row('shelf', 3)['stock'] == 6
        assert backend.row('fabrics', 1)['real_stock'] == Decimal('16.5')

    def test_negative_line_never_written(self, backend):
        """Shelf 1 has 5; asking 6 fails without an update."""
        report = settle_stock(
            backend,
            shelf_items=[{'id': 1, 'quantity': 6}, {'id': 3, 'quantity': 1}],
        )

        assert not report.ok
        assert report.succeeded == [(SHELF, 3)]
        assert report.failures[0].message == 'Insufficient stock for shelf 1: available 5, requested 6'
        assert [call[2] for call in _updates(backend)] == [3]
        assert backend.row('shelf', 1)['stock'] == 5

    def test_exact_stock_reaches_zero(self, backend):
        report = settle_stock(backend, fabric_items=[{'id': 2, 'length': 2}])

        assert report.ok
        assert backend.row('fabrics', 2)['real_stock'] == Decimal('0')

    def test_skipped_lines(self, backend):
        """Lines without id or with nothing to take make no request."""
        report = settle_stock(
            backend,
            shelf_items=[{'id': None, 'quantity': 1}, {'id': 1, 'quantity': 0}],
            fabric_items=[{'id': 2, 'length': '-1'}],
        )

        assert report.ok
        assert len(report.skipped) == 3
        assert backend.calls == []

    def test_unknown_line(self, backend):
        report = settle_stock(backend, shelf_items=[{'id': 99, 'quantity': 1}])

        assert report.failures[0].message == 'shelf 99 not found'

    def test_update_failure_reported(self):
        backend = seed_backend(InMemoryBackend(fail_on=['update:shelf:3']))

        report = settle_stock(
            backend,
            shelf_items=[{'id': 3, 'quantity': 1}, {'id': 1, 'quantity': 1}],
        )

        assert report.succeeded == [(SHELF, 1)]
        assert report.failures[0].pk == 3
        assert report.failures[0].message == DEFAULT_FAILURE
        assert backend.row('shelf', 1)['stock'] == 4

    def test_adapter_crash_fails_its_line_only(self):
        backend = seed_backend(CrashingBackend())

        report = settle_stock(
            backend,
            fabric_items=[{'id': 1, 'length': 1}, {'id': 2, 'length': 1}],
            workers=2,
        )

        assert report.succeeded == [(FABRICS, 1)]
        assert report.failures[0].message == 'connection dropped'

    def test_repeated_id_summed_before_check(self, backend):
        """Two 12 m cuts from the 20 m bolt are one 24 m request."""
        report = settle_stock(
            backend,
            fabric_items=[{'id': 1, 'length': 12}, {'id': 1, 'length': 12}],
            workers=2,
        )

        assert not report.ok
        assert report.succeeded == []
        assert report.failures[0].message.endswith('requested 24')
        assert _updates(backend) == []
        assert backend.row('fabrics', 1)['real_stock'] == Decimal('20')

    def test_repeated_id_written_once(self, backend):
        report = settle_stock(
            backend,
            shelf_items=[{'id': 3, 'quantity': 2}, {'id': 3, 'quantity': 3}],
            fabric_items=[{'id': 1, 'length': 5}, {'id': 1, 'length': '0.5'}],
        )

        assert report.ok
        assert sorted(report.succeeded) == [(FABRICS, 1), (SHELF, 3)]
        assert len(_updates(backend)) == 2
        assert backend.row('shelf', 3)['stock'] == 5
        assert backend.row('fabrics', 1)['real_stock'] == Decimal('14.5')

    def test_every_failure_collected(self, backend):
        """All lines are attempted before anything is reported."""
        report = settle_stock(
            backend,
            shelf_items=[{'id': 1, 'quantity': 9}, {'id': 2, 'quantity': 1}, {'id': 3, 'quantity': 2}],
        )

        assert [f.pk for f in report.failures] == [1, 2]
        assert report.succeeded == [(SHELF, 3)]
        assert report.message.count('Insufficient stock') == 2


class TestSettlementReport:
    """Tests for SettlementReport.raise_for_failures()."""

    def test_raises_with_failures(self, backend):
        report = settle_stock(
            backend,
            shelf_items=[{'id': 2, 'quantity': 1}, {'id': 3, 'quantity': 1}],
        )

        with pytest.raises(SettlementError) as exc:
            report.raise_for_failures()

        assert exc.value.code == 'PARTIAL_SETTLEMENT'
        assert exc.value.failures == [{
            'resource': SHELF,
            'id': 2,
            'message': 'Insufficient stock for shelf 2: available 0, requested 1',
        }]
        assert exc.value.succeeded == [(SHELF, 3)]

    def test_silent_when_ok(self, backend):
        settle_stock(backend, shelf_items=[{'id': 3, 'quantity': 1}]).raise_for_failures()
