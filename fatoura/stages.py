"""
Order state machine.

Two orthogonal dimensions:

- checkout_status: draft → confirmed | cancelled. Both outcomes are
  terminal; the transition happens exactly once.
- production_stage (work orders only): a branching workshop pipeline moved
  by explicit operator actions. Each garment carries its own piece_stage,
  which must fit the order's stage without being equal to it.
"""

from enum import Enum

from fatoura.exceptions import StageError
from fatoura.models.enums import CheckoutStatus, PieceStage, ProductionStage

S = ProductionStage
P = PieceStage


# ══════════════════════════════════════════════════════════════
# CHECKOUT STATUS
# ══════════════════════════════════════════════════════════════


CHECKOUT_TRANSITIONS: dict[str, frozenset[str]] = {
    CheckoutStatus.DRAFT: frozenset({CheckoutStatus.CONFIRMED, CheckoutStatus.CANCELLED}),
    CheckoutStatus.CONFIRMED: frozenset(),
    CheckoutStatus.CANCELLED: frozenset(),
}


def is_terminal(status) -> bool:
    return status in (CheckoutStatus.CONFIRMED, CheckoutStatus.CANCELLED)


def can_transition(current, target) -> bool:
    return target in CHECKOUT_TRANSITIONS.get(current, frozenset())


def validate_checkout_transition(current, target) -> None:
    """
    Raises:
        StageError('TERMINAL_STATUS'): current is confirmed or cancelled
        StageError('INVALID_TRANSITION'): any other illegal move
    """
    if is_terminal(current):
        raise StageError('TERMINAL_STATUS', current=current, target=target)
    if not can_transition(current, target):
        raise StageError('INVALID_TRANSITION', current=current, target=target)


# ══════════════════════════════════════════════════════════════
# PRODUCTION STAGE (order level)
# ══════════════════════════════════════════════════════════════


PRODUCTION_TRANSITIONS: dict[str, frozenset[str]] = {
    S.ORDER_AT_SHOP: frozenset({S.SENT_TO_WORKSHOP}),
    S.SENT_TO_WORKSHOP: frozenset({S.ORDER_AT_WORKSHOP}),
    S.ORDER_AT_WORKSHOP: frozenset({
        S.SOAKING,
        S.WAITING_CUT,
        S.BROVA_AT_SHOP,
        S.FINAL_DISPATCHED_TO_SHOP,
        S.BROVA_AND_FINAL_DISPATCHED_TO_SHOP,
        S.FINAL_AT_SHOP,
        S.BROVA_AND_FINAL_AT_SHOP,
    }),
    S.SOAKING: frozenset({S.WAITING_CUT, S.ORDER_AT_WORKSHOP}),
    S.WAITING_CUT: frozenset({S.ORDER_AT_WORKSHOP}),
    S.BROVA_AT_SHOP: frozenset({
        S.BROVA_ACCEPTED,
        S.BROVA_ALTERATION,
        S.BROVA_REPAIR_AND_PRODUCTION,
        S.REDO,
    }),
    S.BROVA_ACCEPTED: frozenset({S.ORDER_AT_WORKSHOP, S.FINAL_DISPATCHED_TO_SHOP}),
    S.BROVA_ALTERATION: frozenset({S.BROVA_ALTERATION_AND_PRODUCTION, S.BROVA_AT_SHOP}),
    S.BROVA_REPAIR_AND_PRODUCTION: frozenset({S.BROVA_AT_SHOP, S.FINAL_DISPATCHED_TO_SHOP}),
    S.BROVA_ALTERATION_AND_PRODUCTION: frozenset({S.BROVA_AT_SHOP, S.FINAL_DISPATCHED_TO_SHOP}),
    S.REDO: frozenset({S.ORDER_AT_WORKSHOP}),
    S.FINAL_DISPATCHED_TO_SHOP: frozenset({S.FINAL_AT_SHOP}),
    S.BROVA_AND_FINAL_DISPATCHED_TO_SHOP: frozenset({S.BROVA_AND_FINAL_AT_SHOP}),
    S.FINAL_AT_SHOP: frozenset({S.ORDER_COLLECTED, S.ORDER_DELIVERED, S.REDO}),
    S.BROVA_AND_FINAL_AT_SHOP: frozenset({S.ORDER_COLLECTED, S.ORDER_DELIVERED, S.BROVA_ALTERATION}),
    S.ORDER_COLLECTED: frozenset(),
    S.ORDER_DELIVERED: frozenset(),
}


class StageAction(str, Enum):
    """Operator actions and the production stage each one targets."""

    DISPATCH = "dispatch"
    RECEIVE_AT_WORKSHOP = "receive_at_workshop"
    START_SOAKING = "start_soaking"
    QUEUE_FOR_CUT = "queue_for_cut"
    MARK_BROVA_READY = "mark_brova_ready"
    DISPATCH_FINAL = "dispatch_final"
    DISPATCH_BROVA_AND_FINAL = "dispatch_brova_and_final"
    RECEIVE_FINAL = "receive_final"
    RECEIVE_BROVA_AND_FINAL = "receive_brova_and_final"
    ACCEPT_BROVA = "accept_brova"
    REQUEST_ALTERATION = "request_alteration"
    ALTER_AND_PRODUCE = "alter_and_produce"
    REPAIR_AND_PRODUCE = "repair_and_produce"
    REDO = "redo"
    COLLECT = "collect"
    DELIVER = "deliver"


ACTION_TARGETS: dict[StageAction, str] = {
    StageAction.DISPATCH: S.SENT_TO_WORKSHOP,
    StageAction.RECEIVE_AT_WORKSHOP: S.ORDER_AT_WORKSHOP,
    StageAction.START_SOAKING: S.SOAKING,
    StageAction.QUEUE_FOR_CUT: S.WAITING_CUT,
    StageAction.MARK_BROVA_READY: S.BROVA_AT_SHOP,
    StageAction.DISPATCH_FINAL: S.FINAL_DISPATCHED_TO_SHOP,
    StageAction.DISPATCH_BROVA_AND_FINAL: S.BROVA_AND_FINAL_DISPATCHED_TO_SHOP,
    StageAction.RECEIVE_FINAL: S.FINAL_AT_SHOP,
    StageAction.RECEIVE_BROVA_AND_FINAL: S.BROVA_AND_FINAL_AT_SHOP,
    StageAction.ACCEPT_BROVA: S.BROVA_ACCEPTED,
    StageAction.REQUEST_ALTERATION: S.BROVA_ALTERATION,
    StageAction.ALTER_AND_PRODUCE: S.BROVA_ALTERATION_AND_PRODUCTION,
    StageAction.REPAIR_AND_PRODUCE: S.BROVA_REPAIR_AND_PRODUCTION,
    StageAction.REDO: S.REDO,
    StageAction.COLLECT: S.ORDER_COLLECTED,
    StageAction.DELIVER: S.ORDER_DELIVERED,
}


def next_stages(stage) -> frozenset[str]:
    return PRODUCTION_TRANSITIONS.get(stage, frozenset())


def is_final_stage(stage) -> bool:
    return stage in (S.ORDER_COLLECTED, S.ORDER_DELIVERED)


def can_advance(current, target) -> bool:
    return target in next_stages(current)


def validate_production_transition(current, target) -> None:
    if target not in S.values:
        raise StageError('INVALID_TRANSITION', f"Unknown production stage: {target}",
                         current=current, target=target)
    if not can_advance(current, target):
        raise StageError('INVALID_TRANSITION', current=current, target=target)


def target_for(action) -> str:
    """Production stage an operator action leads to."""
    try:
        return ACTION_TARGETS[StageAction(action)]
    except ValueError:
        raise StageError('INVALID_TRANSITION', f"Unknown action: {action}", action=action) from None


def available_actions(stage) -> list[StageAction]:
    """Actions legal from a stage, in declaration order."""
    allowed = next_stages(stage)
    return [action for action, target in ACTION_TARGETS.items() if target in allowed]


# ══════════════════════════════════════════════════════════════
# PIECE STAGE (garment level)
# ══════════════════════════════════════════════════════════════


PIECE_TRANSITIONS: dict[str, frozenset[str]] = {
    P.ORDER_AT_SHOP: frozenset({P.ORDER_AT_WORKSHOP}),
    P.ORDER_AT_WORKSHOP: frozenset({P.SOAKING, P.WAITING_CUT, P.BROVA_DISPATCHED_TO_SHOP, P.FINAL_AT_SHOP}),
    P.SOAKING: frozenset({P.WAITING_CUT, P.ORDER_AT_WORKSHOP}),
    P.WAITING_CUT: frozenset({P.ORDER_AT_WORKSHOP}),
    P.BROVA_DISPATCHED_TO_SHOP: frozenset({P.BROVA_AT_SHOP}),
    P.BROVA_AT_SHOP: frozenset({P.BROVA_ACCEPTED, P.BROVA_REPAIR_AND_PRODUCTION, P.REDO, P.BROVA_COLLECTED}),
    P.BROVA_ACCEPTED: frozenset({P.ORDER_AT_WORKSHOP, P.BROVA_COLLECTED}),
    P.BROVA_REPAIR_AND_PRODUCTION: frozenset({P.BROVA_AT_SHOP, P.FINAL_AT_SHOP}),
    P.REDO: frozenset({P.ORDER_AT_WORKSHOP}),
    P.FINAL_AT_SHOP: frozenset({P.ORDER_COLLECTED, P.REDO}),
    P.BROVA_COLLECTED: frozenset(),
    P.ORDER_COLLECTED: frozenset(),
}

_INTAKE = frozenset({P.ORDER_AT_SHOP})
_WORKSHOP = frozenset({P.ORDER_AT_WORKSHOP, P.SOAKING, P.WAITING_CUT, P.REDO, P.BROVA_REPAIR_AND_PRODUCTION})
_BROVA = frozenset({P.BROVA_DISPATCHED_TO_SHOP, P.BROVA_AT_SHOP, P.BROVA_ACCEPTED, P.BROVA_COLLECTED})
_FINAL = frozenset({P.FINAL_AT_SHOP, P.ORDER_COLLECTED})

# Piece stages a garment may be in for each order stage
PIECE_STAGES_BY_ORDER_STAGE: dict[str, frozenset[str]] = {
    S.ORDER_AT_SHOP: _INTAKE,
    S.SENT_TO_WORKSHOP: _INTAKE | _WORKSHOP,
    S.ORDER_AT_WORKSHOP: _WORKSHOP | _BROVA,
    S.SOAKING: _WORKSHOP | _BROVA,
    S.WAITING_CUT: _WORKSHOP | _BROVA,
    S.REDO: _WORKSHOP | _BROVA,
    S.BROVA_AT_SHOP: _WORKSHOP | _BROVA,
    S.BROVA_ACCEPTED: _WORKSHOP | _BROVA,
    S.BROVA_ALTERATION: _WORKSHOP | _BROVA,
    S.BROVA_REPAIR_AND_PRODUCTION: _WORKSHOP | _BROVA,
    S.BROVA_ALTERATION_AND_PRODUCTION: _WORKSHOP | _BROVA,
    S.FINAL_DISPATCHED_TO_SHOP: _WORKSHOP | _BROVA | _FINAL,
    S.BROVA_AND_FINAL_DISPATCHED_TO_SHOP: _WORKSHOP | _BROVA | _FINAL,
    S.FINAL_AT_SHOP: _BROVA | _FINAL | {P.REDO},
    S.BROVA_AND_FINAL_AT_SHOP: _BROVA | _FINAL | {P.REDO},
    S.ORDER_COLLECTED: _FINAL | {P.BROVA_ACCEPTED, P.BROVA_COLLECTED},
    S.ORDER_DELIVERED: _FINAL | {P.BROVA_ACCEPTED, P.BROVA_COLLECTED},
}


def is_piece_consistent(order_stage, piece_stage) -> bool:
    return piece_stage in PIECE_STAGES_BY_ORDER_STAGE.get(order_stage, frozenset())


def validate_piece_transition(order_stage, current, target) -> None:
    """
    A piece may move along its own graph as long as the result still fits
    the order's production stage.
    """
    if target not in PIECE_TRANSITIONS.get(current, frozenset()):
        raise StageError('INVALID_TRANSITION', current=current, target=target)
    if not is_piece_consistent(order_stage, target):
        raise StageError(
            'INCONSISTENT_PIECE_STAGE',
            order_stage=order_stage,
            current=current,
            target=target,
        )


def inconsistent_pieces(order_stage, piece_stages) -> list[str]:
    """Piece stages that no longer fit after an order stage change."""
    return [stage for stage in piece_stages if not is_piece_consistent(order_stage, stage)]


# Pieces moved along automatically when the order enters a stage
PIECE_CARRY: dict[str, dict[str, str]] = {
    S.ORDER_AT_WORKSHOP: {P.ORDER_AT_SHOP: P.ORDER_AT_WORKSHOP},
    S.ORDER_COLLECTED: {P.FINAL_AT_SHOP: P.ORDER_COLLECTED},
    S.ORDER_DELIVERED: {P.FINAL_AT_SHOP: P.ORDER_COLLECTED},
}


def carried_piece_stage(order_stage, piece_stage) -> str:
    """Piece stage after the order moves to order_stage."""
    return PIECE_CARRY.get(order_stage, {}).get(piece_stage, piece_stage)
