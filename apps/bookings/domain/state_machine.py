"""
Booking Status Finite State Machine

State transitions:
- PENDING -> CONFIRMED (payment completed, or manager confirms)
- PENDING -> CANCELLED (payment failed, owner or manager cancels)
- CONFIRMED -> COMPLETED (manager/admin after the slot)
- CONFIRMED -> CANCELLED (refund, or manager/admin cancels)

CANCELLED and COMPLETED are terminal.
"""

from typing import Dict, FrozenSet

from shared.domain.errors import InvalidTransition, ValidationError

PENDING = 'pending'
CONFIRMED = 'confirmed'
CANCELLED = 'cancelled'
COMPLETED = 'completed'

STATUSES = (PENDING, CONFIRMED, CANCELLED, COMPLETED)
ACTIVE = frozenset({PENDING, CONFIRMED})
TERMINAL = frozenset({CANCELLED, COMPLETED})

TRANSITIONS: Dict[str, FrozenSet[str]] = {
    PENDING: frozenset({CONFIRMED, CANCELLED}),
    CONFIRMED: frozenset({COMPLETED, CANCELLED}),
    CANCELLED: frozenset(),
    COMPLETED: frozenset(),
}


def can_transition(current: str, new: str) -> bool:
    return new in TRANSITIONS.get(current, frozenset())


def ensure_transition(current: str, new: str) -> None:
    """Raise unless ``current -> new`` is a legal booking transition"""
    if new not in STATUSES:
        raise ValidationError(
            f"Unknown booking status '{new}'",
            details={'status': new, 'allowed': list(STATUSES)},
        )
    if not can_transition(current, new):
        if current in TERMINAL:
            message = f"Booking is {current} and cannot change status"
        else:
            message = f"Cannot change booking status from {current} to {new}"
        raise InvalidTransition(message, details={'from': current, 'to': new})
