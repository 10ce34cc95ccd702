"""
Django Backend.

Implements PersistenceBackend over fatoura.models.

Resource → model:
    customers          →  Customer
    orders             →  Order
    garments           →  Garment
    shelf              →  ShelfProduct
    order_shelf_items  →  OrderShelfItem
    fabrics            →  Fabric
    prices             →  Price
    employees          →  Employee
    campaigns          →  Campaign
    styles             →  Style

Rows are dicts keyed by attribute name (foreign keys as ``customer_id``).
"""

import logging

from django.core.exceptions import FieldError, ObjectDoesNotExist, ValidationError
from django.db import DatabaseError, transaction
from django.db.models import Max
from django.utils import timezone

from fatoura.adapters import procedures
from fatoura.models import (
    Campaign,
    CheckoutStatus,
    Customer,
    Employee,
    Fabric,
    Garment,
    Order,
    OrderShelfItem,
    OrderType,
    Price,
    ShelfProduct,
    Style,
)
from fatoura.protocols.backend import ORDER_ACCESS_DENIED, BackendResult

logger = logging.getLogger(__name__)

MODELS = {
    "customers": Customer,
    "orders": Order,
    "garments": Garment,
    "shelf": ShelfProduct,
    "order_shelf_items": OrderShelfItem,
    "fabrics": Fabric,
    "prices": Price,
    "employees": Employee,
    "campaigns": Campaign,
    "styles": Style,
}

# Errors reported as error results instead of raised
QUERY_ERRORS = (FieldError, ValidationError, ValueError, TypeError, DatabaseError)


def to_row(instance) -> dict:
    """Concrete field values keyed by attname."""
    return {f.attname: getattr(instance, f.attname) for f in instance._meta.concrete_fields}


class DjangoBackend:
    """
    PersistenceBackend using the Django ORM.

    The completion procedures run under transaction.atomic() and lock the
    order, shelf and fabric rows with select_for_update().
    """

    def _model(self, resource):
        try:
            return MODELS[resource]
        except KeyError:
            raise ValueError(f"Unknown resource: {resource}") from None

    def _writable(self, model, values: dict) -> dict:
        known = set()
        for f in model._meta.concrete_fields:
            known.update((f.name, f.attname))
        unknown = sorted(set(values) - known)
        if unknown:
            raise ValueError(f"Unknown field(s) for {model._meta.model_name}: {', '.join(unknown)}")
        return values

    # ══════════════════════════════════════════════════════════════
    # CRUD
    # ══════════════════════════════════════════════════════════════

    def select(self, resource, filters=None, order_by=None, limit=None) -> BackendResult:
        try:
            qs = self._model(resource).objects.filter(**(filters or {}))
            if order_by:
                qs = qs.order_by(*order_by)
            if limit is not None:
                qs = qs[:limit]
            return BackendResult.success([to_row(obj) for obj in qs])
        except QUERY_ERRORS as e:
            return BackendResult.error(str(e))

    def get(self, resource, pk) -> BackendResult:
        try:
            return BackendResult.success(to_row(self._model(resource).objects.get(pk=pk)))
        except ObjectDoesNotExist:
            return BackendResult.error(f"{resource} {pk} not found")
        except QUERY_ERRORS as e:
            return BackendResult.error(str(e))

    def insert(self, resource, values) -> BackendResult:
        try:
            model = self._model(resource)
            obj = model.objects.create(**self._writable(model, dict(values)))
            return BackendResult.success(to_row(obj))
        except QUERY_ERRORS as e:
            return BackendResult.error(str(e))

    def update(self, resource, pk, values) -> BackendResult:
        try:
            model = self._model(resource)
            values = self._writable(model, dict(values))
            with transaction.atomic():
                obj = model.objects.select_for_update().get(pk=pk)
                for field, value in values.items():
                    setattr(obj, field, value)
                obj.save()
            return BackendResult.success(to_row(obj))
        except ObjectDoesNotExist:
            return BackendResult.error(f"{resource} {pk} not found")
        except QUERY_ERRORS as e:
            return BackendResult.error(str(e))

    def upsert(self, resource, values) -> BackendResult:
        try:
            model = self._model(resource)
        except ValueError as e:
            return BackendResult.error(str(e))
        pk = values.get(model._meta.pk.attname)
        if pk is not None and model.objects.filter(pk=pk).exists():
            return self.update(resource, pk, {k: v for k, v in values.items() if k != model._meta.pk.attname})
        return self.insert(resource, values)

    def delete(self, resource, pk) -> BackendResult:
        try:
            deleted, _ = self._model(resource).objects.filter(pk=pk).delete()
            return BackendResult.success(count=deleted)
        except QUERY_ERRORS as e:
            return BackendResult.error(str(e))

    # ══════════════════════════════════════════════════════════════
    # COMPLETION PROCEDURES
    # ══════════════════════════════════════════════════════════════

    def _locked_draft(self, order_id, brand, order_type):
        return (
            Order.objects.select_for_update()
            .filter(
                pk=order_id,
                brand=brand,
                order_type=order_type,
                checkout_status=CheckoutStatus.DRAFT,
            )
            .first()
        )

    def _finalize(self, order, checkout_details, shelf_items, fabric_items) -> str | None:
        """
        Check and apply stock, then confirm. Must run inside atomic().

        Returns an error message, or None after the order is confirmed.
        """
        shelf = procedures.shelf_demand(shelf_items)
        fabrics = procedures.fabric_demand(fabric_items)

        products = ShelfProduct.objects.select_for_update().in_bulk(list(shelf))
        bolts = Fabric.objects.select_for_update().in_bulk(list(fabrics))
        problem = procedures.shortfall(
            shelf,
            fabrics,
            {pk: p.stock for pk, p in products.items()},
            {pk: f.real_stock for pk, f in bolts.items()},
        )
        if problem:
            return problem

        prices = procedures.unit_prices(shelf_items)
        for shelf_id, quantity in shelf.items():
            product = products[shelf_id]
            product.stock -= quantity
            product.save(update_fields=["stock"])
            OrderShelfItem.objects.create(
                order=order,
                shelf=product,
                quantity=quantity,
                unit_price=prices.get(shelf_id, product.price),
            )
        for fabric_id, length in fabrics.items():
            bolt = bolts[fabric_id]
            bolt.real_stock -= length
            bolt.save(update_fields=["real_stock"])

        for field, value in self._writable(Order, procedures.checkout_fields(checkout_details)).items():
            setattr(order, field, value)
        last = Order.objects.aggregate(last=Max("invoice_number"))["last"] or 0
        order.invoice_number = last + 1
        order.checkout_status = CheckoutStatus.CONFIRMED
        order.save()
        logger.info(
            "backend.order_completed",
            extra={
                "order_id": order.pk,
                "invoice_number": order.invoice_number,
                "shelf_lines": len(shelf),
                "fabric_lines": len(fabrics),
            },
        )
        return None

    def _complete(self, order_id, checkout_details, shelf_items, fabric_items, brand, order_type):
        try:
            with transaction.atomic():
                order = self._locked_draft(order_id, brand, order_type)
                if order is None:
                    return BackendResult.error(ORDER_ACCESS_DENIED)
                problem = self._finalize(order, checkout_details, shelf_items, fabric_items)
                if problem:
                    return BackendResult.error(problem)
            return BackendResult.success(to_row(order))
        except QUERY_ERRORS as e:
            return BackendResult.error(str(e))

    def complete_work_order(self, order_id, checkout_details, shelf_items, fabric_items, brand) -> BackendResult:
        return self._complete(order_id, checkout_details, shelf_items, fabric_items, brand, OrderType.WORK)

    def complete_sales_order(self, order_id, checkout_details, shelf_items, brand) -> BackendResult:
        return self._complete(order_id, checkout_details, shelf_items, None, brand, OrderType.SALES)

    def create_complete_sales_order(self, customer_id, checkout_details, shelf_items, brand) -> BackendResult:
        try:
            with transaction.atomic():
                if not Customer.objects.filter(pk=customer_id).exists():
                    return BackendResult.error(f"Customer {customer_id} not found")
                order = Order.objects.create(
                    customer_id=customer_id,
                    brand=brand,
                    order_type=OrderType.SALES,
                    checkout_status=CheckoutStatus.DRAFT,
                    order_date=timezone.now(),
                )
                problem = self._finalize(order, checkout_details, shelf_items, None)
                if problem:
                    transaction.set_rollback(True)
                    return BackendResult.error(problem)
            return BackendResult.success(to_row(order))
        except QUERY_ERRORS as e:
            return BackendResult.error(str(e))
