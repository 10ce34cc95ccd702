"""
Production flow — operator actions on confirmed work orders.

Moves an order (and, where the move carries them, its garments) along the
production pipeline through the persistence backend.
"""

import logging
from typing import Any

from fatoura.conf import fatoura_settings
from fatoura.exceptions import BackendError, CheckoutError, FatouraError, StageError
from fatoura.models.enums import CheckoutStatus, OrderType, ProductionStage
from fatoura.protocols.backend import PersistenceBackend
from fatoura.stages import (
    StageAction,
    carried_piece_stage,
    is_piece_consistent,
    target_for,
    validate_piece_transition,
    validate_production_transition,
)

logger = logging.getLogger('fatoura')


def _unwrap(result, operation: str):
    if not result.ok:
        raise BackendError.from_result(result, operation)
    return result.data


class ProductionFlow:
    """
    Usage:
        flow = ProductionFlow(backend)
        for order in flow.dispatch_queue():
            ...
        flow.perform(order_id, StageAction.DISPATCH)
    """

    def __init__(self, backend: PersistenceBackend | None = None, brand: str | None = None):
        if backend is None:
            from fatoura.adapters import get_backend
            backend = get_backend()
        self.backend = backend
        self.brand = brand or fatoura_settings.BRAND

    # ══════════════════════════════════════════════════════════════
    # QUERIES
    # ══════════════════════════════════════════════════════════════

    def dispatch_queue(self, limit: int | None = None) -> list[dict]:
        """Confirmed work orders still at the shop, oldest first."""
        result = self.backend.select(
            "orders",
            filters={
                "brand": self.brand,
                "order_type": OrderType.WORK,
                "checkout_status": CheckoutStatus.CONFIRMED,
                "production_stage": ProductionStage.ORDER_AT_SHOP,
            },
            order_by=["order_date", "id"],
            limit=limit,
        )
        return _unwrap(result, "dispatch_queue")

    def _order(self, order_id) -> dict:
        result = self.backend.get("orders", order_id)
        if not result.ok or result.data.get("brand") != self.brand:
            raise CheckoutError('ORDER_NOT_FOUND', order_id=order_id)
        order = result.data
        if order.get("order_type") != OrderType.WORK:
            raise StageError('NOT_A_WORK_ORDER', order_id=order_id)
        if order.get("checkout_status") != CheckoutStatus.CONFIRMED:
            raise StageError('NOT_CONFIRMED', order_id=order_id, current=order.get("checkout_status"))
        return order

    def _garments(self, order_id) -> list[dict]:
        return _unwrap(self.backend.select("garments", {"order_id": order_id}), "load_garments")

    # ══════════════════════════════════════════════════════════════
    # TRANSITIONS
    # ══════════════════════════════════════════════════════════════

    def advance(self, order_id, target: str) -> dict:
        """
        Move a confirmed work order to target.

        Garments are carried along where the move implies it (e.g. pieces
        still at the shop reach the workshop with the order). Every
        garment must fit the new stage.

        Raises:
            CheckoutError('ORDER_NOT_FOUND'): Missing or other brand
            StageError: Not a confirmed work order, illegal move or a
                garment that would not fit the new stage
        """
        order = self._order(order_id)
        current = order.get("production_stage") or ProductionStage.ORDER_AT_SHOP
        validate_production_transition(current, target)

        garments = self._garments(order_id)
        moves = []
        for garment in garments:
            piece = garment.get("piece_stage")
            carried = carried_piece_stage(target, piece)
            if not is_piece_consistent(target, carried):
                raise StageError(
                    'INCONSISTENT_PIECE_STAGE',
                    order_id=order_id,
                    garment=garment.get("garment_id") or garment.get("id"),
                    current=current,
                    target=target,
                    piece_stage=piece,
                )
            if carried != piece:
                moves.append((garment["id"], carried))

        for garment_pk, piece_stage in moves:
            _unwrap(self.backend.update("garments", garment_pk, {"piece_stage": piece_stage}), "move_piece")
        updated = _unwrap(
            self.backend.update("orders", order_id, {"production_stage": target}),
            "advance_order",
        )
        logger.info(
            "production.advance",
            extra={"order_id": order_id, "from": current, "to": target, "pieces_moved": len(moves)},
        )
        return updated

    def perform(self, order_id, action) -> dict:
        """Apply a named operator action (see StageAction)."""
        return self.advance(order_id, target_for(action))

    def dispatch(self, order_ids) -> dict[str, Any]:
        """
        Send several orders from the shop to the workshop.

        Returns:
            {"dispatched": [order ids], "failed": {order id: message}}
        """
        dispatched, failed = [], {}
        for order_id in order_ids:
            try:
                self.perform(order_id, StageAction.DISPATCH)
                dispatched.append(order_id)
            except FatouraError as e:
                failed[order_id] = e.message
        if failed:
            logger.warning("production.dispatch_failed", extra={"failed": len(failed), "dispatched": len(dispatched)})
        return {"dispatched": dispatched, "failed": failed}

    def advance_piece(self, garment_pk, target: str) -> dict:
        """
        Move one garment to target piece stage.

        Raises:
            StageError: Illegal piece move, or target does not fit the
                order's production stage
        """
        garment = _unwrap(self.backend.get("garments", garment_pk), "load_garment")
        order = self._order(garment["order_id"])
        order_stage = order.get("production_stage") or ProductionStage.ORDER_AT_SHOP
        validate_piece_transition(order_stage, garment.get("piece_stage"), target)
        updated = _unwrap(
            self.backend.update("garments", garment_pk, {"piece_stage": target}),
            "advance_piece",
        )
        logger.info(
            "production.piece",
            extra={"garment": garment_pk, "from": garment.get("piece_stage"), "to": target},
        )
        return updated
