"""
Invoice Notifier Protocol.

Fire-and-forget signal raised once an order's invoice number is known.
Delivery (toast, push, email) belongs to the host application.
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class InvoiceNotifier(Protocol):

    def invoice_ready(self, order_id: int, invoice_number: int) -> None:
        ...
