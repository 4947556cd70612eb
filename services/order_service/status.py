"""Order status values and the transitions allowed between them."""
from enum import Enum

from shared.errors import InvalidStatusTransitionError


class OrderStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class DeliveryMethod(str, Enum):
    DELIVERY = "delivery"
    PICKUP = "pickup"


VALID_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.CONFIRMED, OrderStatus.CANCELLED}),
    OrderStatus.CONFIRMED: frozenset({OrderStatus.SHIPPED, OrderStatus.CANCELLED}),
    OrderStatus.SHIPPED: frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED}),
    OrderStatus.DELIVERED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}

TERMINAL_STATES = frozenset(s for s, targets in VALID_TRANSITIONS.items() if not targets)


def can_transition(current: OrderStatus, requested: OrderStatus) -> bool:
    return requested in VALID_TRANSITIONS[current]


def ensure_transition(current: str, requested: OrderStatus) -> OrderStatus:
    """Returns the new status or raises InvalidStatusTransitionError."""
    current_status = OrderStatus(current)
    if not can_transition(current_status, requested):
        raise InvalidStatusTransitionError(current_status.value, requested.value)
    return requested
