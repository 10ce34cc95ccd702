"""
Pytest fixtures for Fatoura tests.
"""

from decimal import Decimal

import pytest

from fatoura.adapters import RecordingNotifier, reset_backend, reset_notifier
from fatoura.adapters.memory import InMemoryBackend
from fatoura.lines import GarmentLine
from fatoura.models import OrderType
from fatoura.service import Checkout
from fatoura.services.prices import SEED_PRICES, PriceTable


CUSTOMERS = [
    {'id': 1, 'name': 'Ali Hassan', 'phone': '55512345', 'city': 'Kuwait City', 'area': 'Salmiya',
     'block': '', 'street': '', 'house_no': ''},
    {'id': 2, 'name': 'Fahad Saleh', 'phone': '99887766', 'city': '', 'area': '',
     'block': '', 'street': '', 'house_no': ''},
]

FABRICS = [
    {'id': 1, 'name': 'White Cotton', 'real_stock': Decimal('20'), 'price_per_meter': Decimal('4')},
    {'id': 2, 'name': 'Grey Wool', 'real_stock': Decimal('2'), 'price_per_meter': Decimal('6.5')},
]

SHELF = [
    {'id': 1, 'type': 'Shimagh', 'brand': 'Al Shaheen', 'stock': 5, 'price': Decimal('4.5')},
    {'id': 2, 'type': 'Shimagh', 'brand': 'Royal', 'stock': 0, 'price': Decimal('7')},
    {'id': 3, 'type': 'Cap', 'brand': 'Classic', 'stock': 10, 'price': Decimal('10')},
]


def seed_backend(backend):
    backend.seed('prices', [
        {'key': e.key, 'value': e.value, 'description': e.description} for e in SEED_PRICES
    ])
    backend.seed('customers', CUSTOMERS)
    backend.seed('fabrics', FABRICS)
    backend.seed('shelf', SHELF)
    return backend


@pytest.fixture(autouse=True)
def reset_adapters():
    """Drop cached adapter instances between tests."""
    reset_backend()
    reset_notifier()
    yield
    reset_backend()
    reset_notifier()


@pytest.fixture
def table():
    """Seeded price table."""
    return PriceTable.seeded()


@pytest.fixture
def backend():
    """In-memory backend with prices, two customers, fabrics and shelf products."""
    return seed_backend(InMemoryBackend())


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def checkout(backend, notifier):
    """Work-order checkout."""
    return Checkout(backend=backend, notifier=notifier, brand='erth')


@pytest.fixture
def sales_checkout(backend, notifier):
    """Sales-order checkout."""
    return Checkout(order_type=OrderType.SALES, backend=backend, notifier=notifier, brand='erth')


@pytest.fixture
def qallabi_garment():
    """3.5 m of White Cotton, qallabi collar: 14 fabric + 9 stitching + 5 style."""
    return GarmentLine(fabric_id=1, fabric_length=Decimal('3.5'), collar_type='COL_QALLABI')


@pytest.fixture
def ready_checkout(checkout, qallabi_garment):
    """Work order for customer 1 with one saved garment, at the payment step."""
    checkout.select_customer(1)
    checkout.proceed_from_customer()
    checkout.save_garments([qallabi_garment])
    checkout.save_items()
    return checkout
