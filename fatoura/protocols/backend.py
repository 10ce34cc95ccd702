"""
Persistence Backend Protocol.

Opaque CRUD over named resource collections plus three remote procedures
that finalize an order atomically. Fatoura never talks to storage
directly: every read and write goes through a PersistenceBackend.

Implementations:
    - DjangoBackend: Django ORM (fatoura.models)
    - InMemoryBackend: dict tables for development and tests
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol, runtime_checkable


# ══════════════════════════════════════════════════════════════
# RESOURCES
# ══════════════════════════════════════════════════════════════


class Resource(str, Enum):
    CUSTOMERS = "customers"
    ORDERS = "orders"
    GARMENTS = "garments"
    SHELF = "shelf"
    ORDER_SHELF_ITEMS = "order_shelf_items"
    FABRICS = "fabrics"
    PRICES = "prices"
    EMPLOYEES = "employees"
    CAMPAIGNS = "campaigns"
    STYLES = "styles"


RESOURCES = frozenset(r.value for r in Resource)

ORDER_ACCESS_DENIED = "Order not found or access denied"


# ══════════════════════════════════════════════════════════════
# DATA TYPES
# ══════════════════════════════════════════════════════════════


class ResultStatus(str, Enum):
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class BackendResult:
    """
    Uniform result of every backend call.

    data is a row dict (single-row calls) or a list of row dicts (select).
    """

    status: ResultStatus
    data: Any = None
    message: str | None = None
    count: int | None = None

    @property
    def ok(self) -> bool:
        return self.status == ResultStatus.SUCCESS

    @classmethod
    def success(cls, data=None, count: int | None = None) -> BackendResult:
        if count is None and isinstance(data, list):
            count = len(data)
        return cls(status=ResultStatus.SUCCESS, data=data, count=count)

    @classmethod
    def error(cls, message: str) -> BackendResult:
        return cls(status=ResultStatus.ERROR, message=message)


# ══════════════════════════════════════════════════════════════
# PROTOCOL
# ══════════════════════════════════════════════════════════════


@runtime_checkable
class PersistenceBackend(Protocol):
    """
    Storage collaborator.

    Filters are Django-style lookups:
        {"phone": "555"}                  equality
        {"name__icontains": "ali"}        case-insensitive substring
        {"invoice_number__gte": 10}       range (gte, gt, lte, lt)
        {"id__in": [1, 2, 3]}             membership

    order_by takes field names, "-" prefix for descending.
    """

    def select(
        self,
        resource: str,
        filters: dict[str, Any] | None = None,
        order_by: list[str] | None = None,
        limit: int | None = None,
    ) -> BackendResult:
        """Rows matching every filter."""
        ...

    def get(self, resource: str, pk: Any) -> BackendResult:
        """One row by primary key; error when missing."""
        ...

    def insert(self, resource: str, values: dict[str, Any]) -> BackendResult:
        """Create a row; returns it."""
        ...

    def update(self, resource: str, pk: Any, values: dict[str, Any]) -> BackendResult:
        """Update fields of one row; returns it."""
        ...

    def upsert(self, resource: str, values: dict[str, Any]) -> BackendResult:
        """Insert, or update when values carries an existing primary key."""
        ...

    def delete(self, resource: str, pk: Any) -> BackendResult:
        ...

    def complete_work_order(
        self,
        order_id: int,
        checkout_details: dict[str, Any],
        shelf_items: list[dict[str, Any]],
        fabric_items: list[dict[str, Any]],
        brand: str,
    ) -> BackendResult:
        """
        Finalize a draft work order.

        Atomically: verifies stock for every shelf item ({id, quantity})
        and shop fabric ({id, length}), decrements it, records the shelf
        items, writes checkout_details, confirms the order and assigns the
        next invoice number. Nothing changes when any check fails.

        Returns:
            The finalized order row
        """
        ...

    def complete_sales_order(
        self,
        order_id: int,
        checkout_details: dict[str, Any],
        shelf_items: list[dict[str, Any]],
        brand: str,
    ) -> BackendResult:
        """Finalize an existing draft sales order (shelf items only)."""
        ...

    def create_complete_sales_order(
        self,
        customer_id: int,
        checkout_details: dict[str, Any],
        shelf_items: list[dict[str, Any]],
        brand: str,
    ) -> BackendResult:
        """Create and finalize a sales order in one call."""
        ...
