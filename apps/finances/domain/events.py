"""
Payment Domain Events
"""

from dataclasses import dataclass
from decimal import Decimal

from shared.domain.base import DomainEvent


@dataclass(kw_only=True)
class PaymentCompleted(DomainEvent):
    """
    Event: payment settled successfully

    Triggers:
    - payment receipt email (payment_success channel)
    """
    payment_id: int
    booking_id: int
    user_id: int
    amount: Decimal


@dataclass(kw_only=True)
class PaymentFailed(DomainEvent):
    """
    Event: payment failed, the booking was cancelled

    Triggers:
    - payment_failed email
    """
    payment_id: int
    booking_id: int
    user_id: int
    amount: Decimal


@dataclass(kw_only=True)
class PaymentRefunded(DomainEvent):
    """
    Event: completed payment refunded, the booking was cancelled

    Triggers:
    - payment_refund email
    """
    payment_id: int
    booking_id: int
    user_id: int
    amount: Decimal
