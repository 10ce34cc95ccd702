"""
Notifiers — invoice-ready signal without a delivery channel.

LoggingNotifier is the default: it logs the event and lets the host
application pick it up from its log handlers.

Usage in settings.py:
    FATOURA = {
        "NOTIFIER": "fatoura.adapters.noop.LoggingNotifier",
    }

RecordingNotifier keeps every call in memory, for tests.
"""

from __future__ import annotations

import logging
import threading

logger = logging.getLogger(__name__)


class LoggingNotifier:
    """Implements InvoiceNotifier by logging."""

    def invoice_ready(self, order_id: int, invoice_number: int) -> None:
        logger.info(
            "invoice.ready",
            extra={"order_id": order_id, "invoice_number": invoice_number},
        )


class RecordingNotifier:
    """Implements InvoiceNotifier by collecting (order_id, invoice_number) pairs."""

    def __init__(self):
        self.calls: list[tuple[int, int]] = []
        self._lock = threading.Lock()

    def invoice_ready(self, order_id: int, invoice_number: int) -> None:
        with self._lock:
            self.calls.append((order_id, invoice_number))

    @property
    def count(self) -> int:
        return len(self.calls)
