"""Order processing: state machine, numbering and the transaction engine."""

from .service import OrderLine, OrderService
from .state_machine import allowed_transitions, assert_transition, can_transition

__all__ = [
    "OrderLine",
    "OrderService",
    "allowed_transitions",
    "assert_transition",
    "can_transition",
]
