"""
Stock settlement — per-line shelf and fabric decrements.

Each line is an independent backend update, issued in parallel. A line is
never written when it would leave negative stock. Results are collected
before anything is reported: a partial failure is reported with every
failure message and every line that went through.

Checkout completion does not use this module (the completion procedures
decrement stock atomically). It serves direct stock adjustments such as
returns or manual corrections.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Iterable

from fatoura.conf import fatoura_settings
from fatoura.exceptions import SettlementError
from fatoura.money import ZERO, to_decimal, to_quantity
from fatoura.protocols.backend import PersistenceBackend

logger = logging.getLogger('fatoura')

SHELF = "shelf"
FABRICS = "fabrics"

_STOCK_FIELD = {SHELF: "stock", FABRICS: "real_stock"}


@dataclass(frozen=True)
class LineFailure:
    resource: str
    pk: Any
    message: str

    def as_dict(self) -> dict[str, Any]:
        return {"resource": self.resource, "id": self.pk, "message": self.message}


@dataclass
class SettlementReport:
    """Outcome of one settlement batch."""

    succeeded: list[tuple[str, Any]] = field(default_factory=list)
    failures: list[LineFailure] = field(default_factory=list)
    skipped: list[tuple[str, Any]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    @property
    def message(self) -> str:
        """All failure messages in one line."""
        return "; ".join(f.message for f in self.failures)

    def raise_for_failures(self) -> None:
        """
        Raises:
            SettlementError: At least one line failed
        """
        if self.failures:
            raise SettlementError(
                'PARTIAL_SETTLEMENT',
                f"Failed to update stock: {self.message}",
                failures=[f.as_dict() for f in self.failures],
                succeeded=list(self.succeeded),
            )


def _settle_line(backend: PersistenceBackend, resource: str, pk, amount: Decimal) -> LineFailure | None:
    current = backend.get(resource, pk)
    if not current.ok:
        return LineFailure(resource, pk, current.message or f"{resource} {pk} not found")

    stock_field = _STOCK_FIELD[resource]
    available = to_decimal(current.data.get(stock_field))
    remaining = available - amount
    if remaining < ZERO:
        return LineFailure(
            resource, pk,
            f"Insufficient stock for {resource} {pk}: available {available}, requested {amount}",
        )

    if resource == SHELF:
        remaining = int(remaining)
    result = backend.update(resource, pk, {stock_field: remaining})
    if not result.ok:
        return LineFailure(resource, pk, result.message or "Unknown error")
    return None


def settle_stock(
    backend: PersistenceBackend,
    shelf_items: Iterable[dict] | None = None,
    fabric_items: Iterable[dict] | None = None,
    workers: int | None = None,
) -> SettlementReport:
    """
    Decrement stock line by line, in parallel.

    Lines sharing a resource and id are summed first, so each row is
    read and written by exactly one job.

    Args:
        backend: Persistence backend
        shelf_items: [{"id": shelf_id, "quantity": n}, ...]
        fabric_items: [{"id": fabric_id, "length": meters}, ...]
        workers: Thread pool size (default: SETTLEMENT_WORKERS)

    Returns:
        SettlementReport; lines with a missing id or a non-positive
        amount are skipped without a request
    """
    report = SettlementReport()
    jobs: dict[tuple[str, Any], Decimal] = {}

    for item in shelf_items or ():
        quantity = to_quantity(item.get("quantity"))
        if item.get("id") is None or quantity <= 0:
            report.skipped.append((SHELF, item.get("id")))
            continue
        key = (SHELF, item["id"])
        jobs[key] = jobs.get(key, ZERO) + Decimal(quantity)

    for item in fabric_items or ():
        length = to_decimal(item.get("length"))
        if item.get("id") is None or length <= ZERO:
            report.skipped.append((FABRICS, item.get("id")))
            continue
        key = (FABRICS, item["id"])
        jobs[key] = jobs.get(key, ZERO) + length

    if not jobs:
        return report

    max_workers = workers or fatoura_settings.SETTLEMENT_WORKERS
    with ThreadPoolExecutor(max_workers=max(1, int(max_workers))) as pool:
        futures = [
            (resource, pk, pool.submit(_settle_line, backend, resource, pk, amount))
            for (resource, pk), amount in jobs.items()
        ]
        for resource, pk, future in futures:
            try:
                failure = future.result()
            except Exception as e:  # adapter crash fails only its line
                failure = LineFailure(resource, pk, str(e) or type(e).__name__)
            if failure:
                report.failures.append(failure)
            else:
                report.succeeded.append((resource, pk))

    if report.failures:
        logger.warning(
            "settlement.failed",
            extra={
                "failed": len(report.failures),
                "succeeded": len(report.succeeded),
                "detail": report.message,
            },
        )
    else:
        logger.info("settlement.complete", extra={"lines": len(report.succeeded)})
    return report
