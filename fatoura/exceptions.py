"""
Exceptions for Fatoura.

Every error is a FatouraError with a structured code for programmatic
handling. Subclasses follow the checkout error taxonomy:

- SelectionError: a shelf/garment line was rejected (recoverable warning)
- CheckoutError: a precondition blocked the operation
- StageError: an illegal checkout/production transition
- BackendError: the persistence collaborator reported a failure
- SettlementError: some lines of a parallel stock settlement failed
"""

from decimal import Decimal
from typing import Any


class FatouraError(Exception):
    """
    Base structured exception.

    Usage:
        try:
            checkout.complete()
        except CheckoutError as e:
            if e.code == 'ORDER_NOT_FOUND':
                notify_user(e.message)

    Attributes:
        code: Error code for programmatic handling
        message: Human-readable message
        data: Additional context data
    """

    _default_messages: dict[str, str] = {}

    def __init__(self, code: str, message: str | None = None, **data: Any):
        self.code = code
        self.message = message or self._default_messages.get(code, code)
        self.data = data
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.code!r}, {self.message!r})"

    def as_dict(self) -> dict[str, Any]:
        """Serialize to dict (useful for APIs)."""
        return {
            'code': self.code,
            'message': self.message,
            'data': {
                k: str(v) if isinstance(v, Decimal) else v
                for k, v in self.data.items()
            }
        }


class SelectionError(FatouraError):
    """A shelf or garment line was rejected; prior state is unchanged."""

    _default_messages = {
        'DUPLICATE_SELECTION': 'This product is already added in another row.',
        'OUT_OF_STOCK': 'This product is currently out of stock.',
        'INSUFFICIENT_STOCK': 'Requested quantity exceeds available stock.',
        'INVALID_QUANTITY': 'Quantity must be a positive whole number.',
        'UNKNOWN_PRODUCT': 'Product not found on the shelf.',
    }


class CheckoutError(FatouraError):
    """A checkout precondition failed; nothing was changed."""

    _default_messages = {
        'CUSTOMER_REQUIRED': 'Please save customer information first',
        'ORDER_REQUIRED': 'Order ID is missing',
        'ORDER_NOT_FOUND': 'Order not found or access denied',
        'PAYMENT_TYPE_REQUIRED': 'Payment type is required to confirm',
        'PAYMENT_REF_REQUIRED': 'Reference number is required for non-cash payments',
        'PAYMENT_NOTE_REQUIRED': "Payment note is required for 'Others' payment method",
        'OVERPAYMENT': 'Amount paid exceeds order total',
        'ADDRESS_REQUIRED': 'Home delivery requires a customer address',
        'ZERO_PAYMENT_UNCONFIRMED': 'Nothing has been paid; confirm to complete the order anyway',
        'NO_ITEMS': 'Order has no items',
        'WRONG_ORDER_TYPE': 'Operation not available for this order type',
        'STEP_NOT_READY': 'Complete the previous steps first',
    }

    @property
    def is_access_error(self) -> bool:
        """Authorization-style failure (order missing, foreign or finalized)."""
        return self.code == 'ORDER_NOT_FOUND'


class StageError(FatouraError):
    """Illegal transition in the checkout or production state machine."""

    _default_messages = {
        'INVALID_TRANSITION': 'Transition not allowed from the current stage',
        'TERMINAL_STATUS': 'Order is already finalized',
        'NOT_A_WORK_ORDER': 'Production stages apply to work orders only',
        'NOT_CONFIRMED': 'Order must be confirmed before production',
        'INCONSISTENT_PIECE_STAGE': 'Piece stage does not match the order stage',
    }

    @property
    def current(self):
        """Shortcut for data['current']."""
        return self.data.get('current')

    @property
    def target(self):
        """Shortcut for data['target']."""
        return self.data.get('target')


class BackendError(FatouraError):
    """
    The persistence collaborator returned an error.

    The backend message is surfaced verbatim.
    """

    _default_messages = {
        'BACKEND_ERROR': 'Unknown error',
    }

    @classmethod
    def from_result(cls, result, operation: str = '') -> 'BackendError':
        return cls('BACKEND_ERROR', result.message or None, operation=operation)


class SettlementError(FatouraError):
    """Some lines of a stock settlement failed while others went through."""

    _default_messages = {
        'PARTIAL_SETTLEMENT': 'Failed to update stock',
    }

    @property
    def failures(self) -> list[dict[str, Any]]:
        """Shortcut for data['failures']."""
        return self.data.get('failures', [])

    @property
    def succeeded(self) -> list:
        """Shortcut for data['succeeded']."""
        return self.data.get('succeeded', [])
