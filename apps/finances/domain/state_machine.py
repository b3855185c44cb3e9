"""
Payment Status Finite State Machine

- PENDING -> COMPLETED (gateway or manager confirms)
- PENDING -> FAILED
- COMPLETED -> REFUNDED

FAILED and REFUNDED are terminal. Each payment outcome maps to the
booking status it must produce (the settlement cascade).
"""

from typing import Dict, FrozenSet, Optional

from shared.domain.errors import InvalidTransition, ValidationError

PENDING = 'pending'
COMPLETED = 'completed'
FAILED = 'failed'
REFUNDED = 'refunded'

STATUSES = (PENDING, COMPLETED, FAILED, REFUNDED)

TRANSITIONS: Dict[str, FrozenSet[str]] = {
    PENDING: frozenset({COMPLETED, FAILED}),
    COMPLETED: frozenset({REFUNDED}),
    FAILED: frozenset(),
    REFUNDED: frozenset(),
}

BOOKING_CASCADE: Dict[str, str] = {
    COMPLETED: 'confirmed',
    FAILED: 'cancelled',
    REFUNDED: 'cancelled',
}


def ensure_transition(current: str, new: str) -> None:
    if new not in STATUSES:
        raise ValidationError(
            f"Unknown payment status '{new}'",
            details={'status': new, 'allowed': list(STATUSES)},
        )
    if new not in TRANSITIONS.get(current, frozenset()):
        raise InvalidTransition(
            f"Cannot change payment status from {current} to {new}",
            details={'from': current, 'to': new},
        )


def booking_status_for(payment_status: str) -> Optional[str]:
    return BOOKING_CASCADE.get(payment_status)
