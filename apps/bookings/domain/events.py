"""
Booking Domain Events

Published through the message bus after the transaction commits.
"""

from dataclasses import dataclass
from datetime import date, time
from decimal import Decimal
from typing import Optional

from shared.domain.base import DomainEvent


@dataclass(kw_only=True)
class BookingCreated(DomainEvent):
    """
    Event: a booking was created in PENDING

    Triggers:
    - nothing yet, the booking is unpaid
    """
    booking_id: int
    space_id: int
    user_id: int
    date: date
    start_time: time
    end_time: time
    total_price: Decimal


@dataclass(kw_only=True)
class BookingConfirmed(DomainEvent):
    """
    Event: PENDING -> CONFIRMED

    Triggers:
    - booking confirmation email to the owner
    - push notification if the owner registered a device
    """
    booking_id: int
    user_id: int
    payment_id: Optional[int] = None


@dataclass(kw_only=True)
class BookingCancelled(DomainEvent):
    """
    Event: PENDING/CONFIRMED -> CANCELLED

    Triggers:
    - cancellation email to the owner
    """
    booking_id: int
    user_id: int
    previous_status: str
    reason: str = ''


@dataclass(kw_only=True)
class BookingCompleted(DomainEvent):
    """
    Event: CONFIRMED -> COMPLETED
    """
    booking_id: int
    user_id: int


@dataclass(kw_only=True)
class BookingDeleted(DomainEvent):
    booking_id: int
    user_id: int
