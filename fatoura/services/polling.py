"""
Invoice polling.

After completion the backend may assign the invoice number a little
later. InvoicePoller re-reads the order at a fixed interval until the
number appears, then notifies once. It gives up quietly after a bounded
number of attempts, leaving the order "awaiting invoice".

The poller is a cancellable task: start() and stop() are driven by order
status changes through sync().
"""

import logging
import threading
from typing import Callable

from fatoura.conf import fatoura_settings
from fatoura.models.enums import CheckoutStatus
from fatoura.protocols.backend import PersistenceBackend
from fatoura.protocols.notifier import InvoiceNotifier

logger = logging.getLogger('fatoura')


class InvoicePoller:
    """
    Poll one order for its invoice number.

    Usage:
        poller = InvoicePoller(backend, order_id, notifier=notifier)
        poller.start()       # background thread
        ...
        poller.stop()

        poller.run()         # or block in the current thread
    """

    def __init__(
        self,
        backend: PersistenceBackend,
        order_id,
        notifier: InvoiceNotifier | None = None,
        interval: float | None = None,
        max_attempts: int | None = None,
        on_invoice: Callable[[int], None] | None = None,
    ):
        self.backend = backend
        self.order_id = order_id
        self.notifier = notifier
        self.interval = fatoura_settings.INVOICE_POLL_INTERVAL if interval is None else interval
        self.max_attempts = fatoura_settings.INVOICE_POLL_MAX_ATTEMPTS if max_attempts is None else max_attempts
        self.on_invoice = on_invoice

        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        self._lock = threading.Lock()
        self.attempts = 0
        self.invoice_number: int | None = None
        self.notified = False
        self.timed_out = False

    def __repr__(self) -> str:
        return f"<InvoicePoller order={self.order_id} attempts={self.attempts} running={self.running}>"

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    # ── Lifecycle ──

    def start(self) -> None:
        """Start polling in a daemon thread (no-op when already running)."""
        with self._lock:
            if self.running or self.notified:
                return
            self._stop.clear()
            self._thread = threading.Thread(
                target=self.run,
                name=f"fatoura-invoice-{self.order_id}",
                daemon=True,
            )
            self._thread.start()

    def stop(self, wait: bool = False) -> None:
        self._stop.set()
        thread = self._thread
        if wait and thread is not None and thread is not threading.current_thread():
            thread.join()

    def reset(self) -> None:
        """Stop and clear every flag."""
        self.stop()
        self.attempts = 0
        self.invoice_number = None
        self.notified = False
        self.timed_out = False

    def sync(self, checkout_status, invoice_number=None) -> None:
        """
        Follow the order's status.

        Polls only while the order is confirmed without an invoice number;
        in any other condition polling stops and its flags are reset.
        """
        if checkout_status == CheckoutStatus.CONFIRMED and invoice_number is None:
            self.start()
        else:
            self.reset()

    # ── Work ──

    def poll_once(self) -> int | None:
        """
        Read the order once.

        Returns the invoice number when assigned. Stops and resets the
        poller when the order is no longer confirmed.
        """
        self.attempts += 1
        result = self.backend.get("orders", self.order_id)
        if not result.ok:
            logger.debug("invoice.poll.error", extra={"order_id": self.order_id, "detail": result.message})
            return None
        order = result.data
        if order.get("checkout_status") != CheckoutStatus.CONFIRMED:
            logger.info(
                "invoice.poll.abandoned",
                extra={"order_id": self.order_id, "status": order.get("checkout_status")},
            )
            self.reset()
            return None
        return order.get("invoice_number")

    def _deliver(self, invoice_number: int) -> None:
        self.invoice_number = invoice_number
        if self.notified:
            return
        self.notified = True
        if self.notifier is not None:
            self.notifier.invoice_ready(self.order_id, invoice_number)
        if self.on_invoice is not None:
            self.on_invoice(invoice_number)
        logger.info(
            "invoice.poll.ready",
            extra={"order_id": self.order_id, "invoice_number": invoice_number, "attempts": self.attempts},
        )

    def run(self) -> int | None:
        """
        Poll until the invoice number appears, the poller is stopped or
        max_attempts is reached.

        Returns:
            The invoice number, or None
        """
        while self.attempts < self.max_attempts and not self._stop.is_set():
            invoice_number = self.poll_once()
            if invoice_number is not None:
                self._deliver(invoice_number)
                return invoice_number
            if self._stop.wait(self.interval):
                return None

        if not self._stop.is_set():
            self.timed_out = True
            logger.warning(
                "invoice.poll.timeout",
                extra={"order_id": self.order_id, "attempts": self.attempts},
            )
        return None
