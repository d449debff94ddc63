"""Order status transition rules.

``cancelled`` is terminal. The only legal moves are:

    pending -> paid
    pending -> cancelled
    paid    -> cancelled

Self transitions are never legal.
"""

from types import MappingProxyType

from poscore.core.exceptions import InvalidTransitionError
from poscore.db.models.order import OrderStatus

TRANSITIONS: MappingProxyType[OrderStatus, frozenset[OrderStatus]] = MappingProxyType(
    {
        OrderStatus.PENDING: frozenset({OrderStatus.PAID, OrderStatus.CANCELLED}),
        OrderStatus.PAID: frozenset({OrderStatus.CANCELLED}),
        OrderStatus.CANCELLED: frozenset(),
    }
)


def can_transition(current: OrderStatus, requested: OrderStatus) -> bool:
    """Return True if an order may move from ``current`` to ``requested``."""
    return OrderStatus(requested) in TRANSITIONS[OrderStatus(current)]


def allowed_transitions(current: OrderStatus) -> frozenset[OrderStatus]:
    return TRANSITIONS[OrderStatus(current)]


def is_terminal(status: OrderStatus) -> bool:
    return not TRANSITIONS[OrderStatus(status)]


def assert_transition(current: OrderStatus, requested: OrderStatus) -> None:
    """Raise InvalidTransitionError unless the transition is legal."""
    if not can_transition(current, requested):
        raise InvalidTransitionError(OrderStatus(current).value, OrderStatus(requested).value)
