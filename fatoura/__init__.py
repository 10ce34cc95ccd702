"""
Django Fatoura — pricing and checkout engine for a tailoring shop.

Work orders (tailored garments) and sales orders (shelf items) go through
the same three-step wizard: customer, items, payment.

Usage:
    from fatoura import Checkout, CheckoutError

    checkout = Checkout()
    checkout.select_customer(42)
    checkout.proceed_from_customer()
    checkout.save_garments([...])
    checkout.set_payment(payment_type="cash", paid=20)
    checkout.submit()
"""


def __getattr__(name):
    """Lazy import to avoid circular imports during app loading."""
    if name == 'Checkout':
        from fatoura.service import Checkout
        return Checkout
    elif name == 'WizardSession':
        from fatoura.session import WizardSession
        return WizardSession
    elif name == 'GarmentLine':
        from fatoura.lines import GarmentLine
        return GarmentLine
    elif name == 'ShelfLine':
        from fatoura.lines import ShelfLine
        return ShelfLine
    elif name == 'PriceTable':
        from fatoura.services.prices import PriceTable
        return PriceTable
    elif name == 'ProductionFlow':
        from fatoura.services.production import ProductionFlow
        return ProductionFlow
    elif name in ('FatouraError', 'SelectionError', 'CheckoutError', 'StageError',
                  'BackendError', 'SettlementError'):
        from fatoura import exceptions
        return getattr(exceptions, name)
    elif name in ('Order', 'Garment', 'OrderShelfItem', 'Customer', 'Fabric', 'ShelfProduct', 'Price',
                  'CheckoutStatus', 'OrderType', 'ProductionStage', 'PieceStage', 'PaymentType',
                  'DiscountType'):
        from fatoura import models
        return getattr(models, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    'Checkout',
    'WizardSession',
    'GarmentLine',
    'ShelfLine',
    'PriceTable',
    'ProductionFlow',
    'FatouraError',
    'SelectionError',
    'CheckoutError',
    'StageError',
    'BackendError',
    'SettlementError',
    'Order',
    'Garment',
    'OrderShelfItem',
    'Customer',
    'Fabric',
    'ShelfProduct',
    'Price',
    'CheckoutStatus',
    'OrderType',
    'ProductionStage',
    'PieceStage',
    'PaymentType',
    'DiscountType',
]

__version__ = '0.1.0'
