"""
In-Memory Backend — dict tables for development and tests.

Implements the PersistenceBackend protocol, including the completion
procedures, without a database.

Usage:
    backend = InMemoryBackend()
    backend.seed("shelf", [{"id": 1, "type": "Shimagh", "brand": "X", "stock": 5, "price": 4.5}])

Failure injection:
    InMemoryBackend(fail_on={"complete_work_order": "Connection lost"})
    InMemoryBackend(fail_on=["update:shelf:3"])

    Keys are "method", "method:resource" or "method:resource:pk".

Deferred invoices:
    InMemoryBackend(defer_invoice=2) confirms orders without an invoice
    number; it appears on the 2nd read of the order afterwards.
"""

import copy
import logging
import operator
import threading
import uuid
from datetime import datetime
from typing import Any, Iterable, Mapping

from fatoura.adapters import procedures
from fatoura.models.enums import CheckoutStatus, OrderType
from fatoura.money import to_decimal
from fatoura.protocols.backend import ORDER_ACCESS_DENIED, RESOURCES, BackendResult

logger = logging.getLogger(__name__)

PRIMARY_KEYS = {"prices": "key"}
UUID_KEYS = frozenset({"garments"})

DEFAULT_FAILURE = "Simulated backend failure"


def _pk_field(resource: str) -> str:
    return PRIMARY_KEYS.get(resource, "id")


_RANGE_LOOKUPS = {
    "gte": operator.ge,
    "gt": operator.gt,
    "lte": operator.le,
    "lt": operator.lt,
}


def _compare(op: str, value, expected) -> bool:
    if op == "exact":
        return value == expected
    if op == "icontains":
        return value is not None and str(expected).lower() in str(value).lower()
    if op == "in":
        return value in expected
    if op == "isnull":
        return (value is None) == bool(expected)
    if op in _RANGE_LOOKUPS:
        if value is None:
            return False
        compare = _RANGE_LOOKUPS[op]
        try:
            return compare(value, expected)
        except TypeError:
            return compare(to_decimal(value), to_decimal(expected))
    raise ValueError(f"Unsupported lookup: {op}")


def matches(row: Mapping[str, Any], filters: Mapping[str, Any] | None) -> bool:
    """Evaluate Django-style lookups against a row dict."""
    for lookup, expected in (filters or {}).items():
        field, _, op = lookup.partition("__")
        if not _compare(op or "exact", row.get(field), expected):
            return False
    return True


def _sort(rows: list[dict], order_by: Iterable[str] | None) -> list[dict]:
    for key in reversed(list(order_by or ())):
        desc = key.startswith("-")
        name = key.lstrip("-")
        present = [r for r in rows if r.get(name) is not None]
        missing = [r for r in rows if r.get(name) is None]
        present.sort(key=lambda r: r[name], reverse=desc)
        rows = present + missing
    return rows


class InMemoryBackend:
    """PersistenceBackend over dict tables, safe for concurrent calls."""

    def __init__(self, fail_on=None, defer_invoice: int = 0):
        self.tables: dict[str, dict[Any, dict]] = {resource: {} for resource in RESOURCES}
        if isinstance(fail_on, Mapping):
            self.fail_on = dict(fail_on)
        else:
            self.fail_on = {key: DEFAULT_FAILURE for key in fail_on or ()}
        self.defer_invoice = int(defer_invoice)
        self.calls: list[tuple] = []
        self._pending_invoices: dict[Any, int] = {}
        self._sequence: dict[str, int] = {}
        self._lock = threading.RLock()

    # ── Test helpers ──

    def seed(self, resource: str, rows: Iterable[dict]) -> list[dict]:
        """Insert rows directly (no failure injection, no call log)."""
        with self._lock:
            return [self._store(resource, dict(row)) for row in rows]

    def rows(self, resource: str) -> list[dict]:
        with self._lock:
            return [copy.deepcopy(r) for r in self.tables[resource].values()]

    def row(self, resource: str, pk) -> dict | None:
        with self._lock:
            found = self.tables[resource].get(pk)
            return copy.deepcopy(found) if found is not None else None

    def called(self, method: str) -> int:
        """How many times a method was invoked."""
        return sum(1 for call in self.calls if call[0] == method)

    # ── Internals ──

    def _fail(self, method: str, resource: str | None = None, pk=None) -> BackendResult | None:
        for key in (method, f"{method}:{resource}", f"{method}:{resource}:{pk}"):
            if key in self.fail_on:
                return BackendResult.error(self.fail_on[key])
        return None

    def _next_id(self, resource: str) -> int:
        table = self.tables[resource]
        current = max([self._sequence.get(resource, 0)] + [k for k in table if isinstance(k, int)])
        self._sequence[resource] = current + 1
        return current + 1

    def _store(self, resource: str, values: dict) -> dict:
        pk_field = _pk_field(resource)
        if values.get(pk_field) is None:
            if resource in UUID_KEYS:
                values[pk_field] = str(uuid.uuid4())
            else:
                values[pk_field] = self._next_id(resource)
        if resource == "orders":
            values.setdefault("created_at", datetime.now())
            values.setdefault("invoice_number", None)
        self.tables[resource][values[pk_field]] = values
        return copy.deepcopy(values)

    def _check_resource(self, resource: str) -> BackendResult | None:
        if resource not in RESOURCES:
            return BackendResult.error(f"Unknown resource: {resource}")
        return None

    def _next_invoice(self) -> int:
        numbers = [o.get("invoice_number") or 0 for o in self.tables["orders"].values()]
        return max(numbers, default=0) + 1

    def _resolve_deferred(self, rows: Iterable[dict]) -> None:
        for row in rows:
            order_id = row.get("id")
            if order_id not in self._pending_invoices:
                continue
            self._pending_invoices[order_id] -= 1
            if self._pending_invoices[order_id] <= 0:
                del self._pending_invoices[order_id]
                stored = self.tables["orders"][order_id]
                stored["invoice_number"] = self._next_invoice()
                row["invoice_number"] = stored["invoice_number"]

    # ══════════════════════════════════════════════════════════════
    # CRUD
    # ══════════════════════════════════════════════════════════════

    def select(self, resource, filters=None, order_by=None, limit=None) -> BackendResult:
        with self._lock:
            self.calls.append(("select", resource, filters))
            problem = self._check_resource(resource) or self._fail("select", resource)
            if problem:
                return problem
            try:
                found = [r for r in self.tables[resource].values() if matches(r, filters)]
            except ValueError as e:
                return BackendResult.error(str(e))
            found = _sort(found, order_by)
            if limit is not None:
                found = found[:limit]
            if resource == "orders":
                self._resolve_deferred(found)
            return BackendResult.success([copy.deepcopy(r) for r in found])

    def get(self, resource, pk) -> BackendResult:
        with self._lock:
            self.calls.append(("get", resource, pk))
            problem = self._check_resource(resource) or self._fail("get", resource, pk)
            if problem:
                return problem
            found = self.tables[resource].get(pk)
            if found is None:
                return BackendResult.error(f"{resource} {pk} not found")
            if resource == "orders":
                self._resolve_deferred([found])
            return BackendResult.success(copy.deepcopy(found))

    def insert(self, resource, values) -> BackendResult:
        with self._lock:
            self.calls.append(("insert", resource, dict(values)))
            problem = self._check_resource(resource) or self._fail("insert", resource)
            if problem:
                return problem
            pk = values.get(_pk_field(resource))
            if pk is not None and pk in self.tables[resource]:
                return BackendResult.error(f"duplicate key value: {resource} {pk}")
            return BackendResult.success(self._store(resource, copy.deepcopy(dict(values))))

    def update(self, resource, pk, values) -> BackendResult:
        with self._lock:
            self.calls.append(("update", resource, pk, dict(values)))
            problem = self._check_resource(resource) or self._fail("update", resource, pk)
            if problem:
                return problem
            found = self.tables[resource].get(pk)
            if found is None:
                return BackendResult.error(f"{resource} {pk} not found")
            found.update(copy.deepcopy(dict(values)))
            found[_pk_field(resource)] = pk
            return BackendResult.success(copy.deepcopy(found))

    def upsert(self, resource, values) -> BackendResult:
        pk = values.get(_pk_field(resource))
        with self._lock:
            if pk is not None and pk in self.tables.get(resource, {}):
                return self.update(resource, pk, values)
            return self.insert(resource, values)

    def delete(self, resource, pk) -> BackendResult:
        with self._lock:
            self.calls.append(("delete", resource, pk))
            problem = self._check_resource(resource) or self._fail("delete", resource, pk)
            if problem:
                return problem
            removed = self.tables[resource].pop(pk, None)
            return BackendResult.success(copy.deepcopy(removed), count=0 if removed is None else 1)

    # ══════════════════════════════════════════════════════════════
    # COMPLETION PROCEDURES
    # ══════════════════════════════════════════════════════════════

    def _draft_order(self, order_id, brand, order_type) -> dict | None:
        order = self.tables["orders"].get(order_id)
        if order is None:
            return None
        if (
            order.get("brand") != brand
            or order.get("order_type") != order_type
            or order.get("checkout_status") != CheckoutStatus.DRAFT
        ):
            return None
        return order

    def _shortfall(self, shelf_items, fabric_items) -> tuple[str | None, dict, dict]:
        shelf = procedures.shelf_demand(shelf_items)
        fabrics = procedures.fabric_demand(fabric_items)
        problem = procedures.shortfall(
            shelf,
            fabrics,
            {pk: row.get("stock") for pk, row in self.tables["shelf"].items()},
            {pk: row.get("real_stock") for pk, row in self.tables["fabrics"].items()},
        )
        return problem, shelf, fabrics

    def _finalize(self, order, checkout_details, shelf_items, shelf, fabrics) -> dict:
        prices = procedures.unit_prices(shelf_items)
        for shelf_id, quantity in shelf.items():
            product = self.tables["shelf"][shelf_id]
            product["stock"] = product["stock"] - quantity
            self._store("order_shelf_items", {
                "order_id": order["id"],
                "shelf_id": shelf_id,
                "quantity": quantity,
                "unit_price": prices.get(shelf_id, to_decimal(product.get("price"))),
            })
        for fabric_id, length in fabrics.items():
            fabric = self.tables["fabrics"][fabric_id]
            fabric["real_stock"] = to_decimal(fabric.get("real_stock")) - length

        order.update(copy.deepcopy(procedures.checkout_fields(checkout_details)))
        order["checkout_status"] = CheckoutStatus.CONFIRMED
        if self.defer_invoice > 0:
            self._pending_invoices[order["id"]] = self.defer_invoice
        else:
            order["invoice_number"] = self._next_invoice()
        logger.info(
            "backend.order_completed",
            extra={"order_id": order["id"], "invoice_number": order.get("invoice_number")},
        )
        return copy.deepcopy(order)

    def complete_work_order(self, order_id, checkout_details, shelf_items, fabric_items, brand) -> BackendResult:
        with self._lock:
            self.calls.append(("complete_work_order", order_id))
            failure = self._fail("complete_work_order")
            if failure:
                return failure
            order = self._draft_order(order_id, brand, OrderType.WORK)
            if order is None:
                return BackendResult.error(ORDER_ACCESS_DENIED)
            problem, shelf, fabrics = self._shortfall(shelf_items, fabric_items)
            if problem:
                return BackendResult.error(problem)
            return BackendResult.success(self._finalize(order, checkout_details, shelf_items, shelf, fabrics))

    def complete_sales_order(self, order_id, checkout_details, shelf_items, brand) -> BackendResult:
        with self._lock:
            self.calls.append(("complete_sales_order", order_id))
            failure = self._fail("complete_sales_order")
            if failure:
                return failure
            order = self._draft_order(order_id, brand, OrderType.SALES)
            if order is None:
                return BackendResult.error(ORDER_ACCESS_DENIED)
            problem, shelf, _ = self._shortfall(shelf_items, None)
            if problem:
                return BackendResult.error(problem)
            return BackendResult.success(self._finalize(order, checkout_details, shelf_items, shelf, {}))

    def create_complete_sales_order(self, customer_id, checkout_details, shelf_items, brand) -> BackendResult:
        with self._lock:
            self.calls.append(("create_complete_sales_order", customer_id))
            failure = self._fail("create_complete_sales_order")
            if failure:
                return failure
            if customer_id not in self.tables["customers"]:
                return BackendResult.error(f"Customer {customer_id} not found")
            problem, shelf, _ = self._shortfall(shelf_items, None)
            if problem:
                return BackendResult.error(problem)
            order = self._store("orders", {
                "customer_id": customer_id,
                "brand": brand,
                "order_type": OrderType.SALES,
                "checkout_status": CheckoutStatus.DRAFT,
                "order_date": datetime.now(),
            })
            order = self.tables["orders"][order["id"]]
            return BackendResult.success(self._finalize(order, checkout_details, shelf_items, shelf, {}))
