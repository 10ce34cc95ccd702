"""
Fatoura Models.

Persistence for the reference Django backend:
- Price: flat key/value price list
- Customer, Employee, Campaign, Style: reference records
- Fabric, ShelfProduct: stock that the completion procedure decrements
- Order, Garment, OrderShelfItem: the checkout aggregate
"""

from fatoura.models.catalog import Campaign, Employee, Fabric, ShelfProduct, Style
from fatoura.models.customer import Customer
from fatoura.models.enums import (
    AccountType,
    CheckoutStatus,
    DiscountType,
    EmployeeRole,
    FabricSource,
    GarmentStyle,
    JabzourType,
    OrderType,
    PaymentType,
    PieceStage,
    ProductionStage,
)
from fatoura.models.garment import Garment
from fatoura.models.order import Order, OrderShelfItem
from fatoura.models.price import Price

__all__ = [
    'AccountType',
    'Campaign',
    'CheckoutStatus',
    'Customer',
    'DiscountType',
    'Employee',
    'EmployeeRole',
    'Fabric',
    'FabricSource',
    'Garment',
    'GarmentStyle',
    'JabzourType',
    'Order',
    'OrderShelfItem',
    'OrderType',
    'PaymentType',
    'PieceStage',
    'Price',
    'ProductionStage',
    'ShelfProduct',
    'Style',
]
