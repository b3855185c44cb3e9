"""
Booking Command Handlers

These are the use cases of the booking ledger. Each handler validates
and authorizes before opening a transaction, then runs its check and
write sequence inside one DjangoUnitOfWork. Expected outcomes are
returned as a Result.

Commands:
- CreateBookingCommand: reserve a slot (PENDING)
- TransitionBookingStatusCommand: confirm / cancel / complete
- DeleteBookingCommand: remove a PENDING or CANCELLED booking
"""

from dataclasses import dataclass
from datetime import date, time
from types import SimpleNamespace
from typing import Any, Optional
import logging

from django.contrib.auth import get_user_model
from django.utils import timezone

from shared.application.policy import AccessPolicy, Action, access_policy
from shared.application.uow import DjangoUnitOfWork
from shared.domain.errors import Conflict, NotFound, ValidationError
from shared.domain.result import as_result
from shared.domain.value_objects import TimeInterval, duration
from apps.availability.repositories import DjangoAvailabilityRepository
from apps.bookings.domain import state_machine
from apps.bookings.domain.events import (
    BookingCancelled,
    BookingCompleted,
    BookingConfirmed,
    BookingCreated,
    BookingDeleted,
)
from apps.bookings.domain.pricing import calculate_price
from apps.bookings.models import Booking
from apps.bookings.repositories import DjangoBookingRepository, DjangoSpaceRepository

logger = logging.getLogger(__name__)


# ===== Commands =====

@dataclass
class CreateBookingCommand:
    """
    Command to create a new booking

    ``user_id`` lets a manager or admin book on behalf of someone else,
    it defaults to the requester.
    """
    requester: Any
    space_id: int
    date: date
    start_time: time
    end_time: time
    notes: str = ''
    user_id: Optional[int] = None


@dataclass
class TransitionBookingStatusCommand:
    requester: Any
    booking_id: int
    status: str
    reason: str = ''


@dataclass
class DeleteBookingCommand:
    requester: Any
    booking_id: int


# ===== Shared transition =====

_TRANSITION_EVENTS = {
    state_machine.CONFIRMED: BookingConfirmed,
    state_machine.CANCELLED: BookingCancelled,
    state_machine.COMPLETED: BookingCompleted,
}


def transition_booking(
    booking: Booking,
    new_status: str,
    uow: DjangoUnitOfWork,
    booking_repo: DjangoBookingRepository,
    reason: str = '',
    payment_id: Optional[int] = None,
) -> Booking:
    """
    Apply a status change inside an open unit of work

    Used by TransitionBookingStatusHandler and by settlement, which
    cascades payment outcomes into bookings without the role check.
    Raises InvalidTransition for an illegal change.
    """
    previous = booking.status
    state_machine.ensure_transition(previous, new_status)

    booking.status = new_status
    booking_repo.save(booking, update_fields=['status', 'updated_at'])

    event_class = _TRANSITION_EVENTS[new_status]
    kwargs = {'aggregate_id': booking.pk, 'booking_id': booking.pk, 'user_id': booking.user_id}
    if event_class is BookingConfirmed:
        kwargs['payment_id'] = payment_id
    elif event_class is BookingCancelled:
        kwargs['previous_status'] = previous
        kwargs['reason'] = reason
    uow.add_event(event_class(**kwargs))

    logger.info(f"Booking {booking.pk} status {previous} -> {new_status}")
    return booking


# ===== Command Handlers =====

class CreateBookingHandler:
    """
    Handler for CreateBooking command

    Double booking prevention:
    1. Validate input and permissions (no transaction yet)
    2. Start transaction, lock the Space row (SELECT FOR UPDATE)
       so concurrent creations on one space run one after another
    3. Require an open availability block touching the interval
    4. Reject overlap with active bookings on the same date
    5. Insert PENDING booking, publish BookingCreated after commit
    """

    def __init__(
        self,
        space_repo: Optional[DjangoSpaceRepository] = None,
        booking_repo: Optional[DjangoBookingRepository] = None,
        availability_repo: Optional[DjangoAvailabilityRepository] = None,
        policy: AccessPolicy = access_policy,
    ):
        self.space_repo = space_repo or DjangoSpaceRepository()
        self.booking_repo = booking_repo or DjangoBookingRepository()
        self.availability_repo = availability_repo or DjangoAvailabilityRepository()
        self.policy = policy

    @as_result
    def handle(self, command: CreateBookingCommand) -> Booking:
        requester = command.requester
        owner_id = command.user_id or requester.pk

        if command.start_time == command.end_time:
            raise ValidationError(
                "End time must differ from start time",
                details={'start_time': str(command.start_time), 'end_time': str(command.end_time)},
            )
        if command.date < timezone.localdate():
            raise ValidationError("Cannot book a date in the past", details={'date': str(command.date)})

        space = self.space_repo.get(command.space_id)
        if space is None:
            raise NotFound(f"Space {command.space_id} not found")

        if owner_id != requester.pk and not get_user_model().objects.filter(pk=owner_id).exists():
            raise NotFound(f"User {owner_id} not found")

        self.policy.require(
            requester,
            Action.CREATE,
            SimpleNamespace(owner_id=owner_id, manager_id=space.manager_id),
            "You can only book for yourself or for spaces you manage",
        )

        interval = TimeInterval(command.start_time, command.end_time)
        hours = duration(command.start_time, command.end_time)
        price = calculate_price(hours, space.price_per_hour, space.price_per_day)

        logger.info(
            f"Creating booking for space {space.pk}, user {owner_id}, "
            f"{command.date} {interval} ({hours} h, {price})"
        )

        with DjangoUnitOfWork() as uow:
            # serializes check-then-insert on this space
            if self.space_repo.get(space.pk, lock=True) is None:
                raise NotFound(f"Space {space.pk} not found")

            if not self.availability_repo.find_available_overlapping(space.pk, command.date, interval):
                raise Conflict(
                    "Space is not available for the requested time",
                    details={'reason': 'unavailable'},
                )

            overlapping = self.booking_repo.find_active_overlapping(space.pk, command.date, interval)
            if overlapping:
                raise Conflict(
                    "Time slot overlaps an existing booking",
                    details={'reason': 'overlap', 'booking_ids': [b.pk for b in overlapping]},
                )

            booking = self.booking_repo.add(
                user_id=owner_id,
                space=space,
                date=command.date,
                start_time=command.start_time,
                end_time=command.end_time,
                total_hours=hours,
                total_price=price,
                status=Booking.Status.PENDING,
                notes=command.notes,
            )
            uow.add_event(BookingCreated(
                aggregate_id=booking.pk,
                booking_id=booking.pk,
                space_id=space.pk,
                user_id=owner_id,
                date=booking.date,
                start_time=booking.start_time,
                end_time=booking.end_time,
                total_price=price,
            ))

        logger.info(f"Booking {booking.pk} created (pending)")
        return booking


class TransitionBookingStatusHandler:
    """
    Manual status change by a manager of the space or an admin

    The owner may only cancel their own PENDING booking.
    """

    def __init__(self, booking_repo: Optional[DjangoBookingRepository] = None, policy: AccessPolicy = access_policy):
        self.booking_repo = booking_repo or DjangoBookingRepository()
        self.policy = policy

    @as_result
    def handle(self, command: TransitionBookingStatusCommand) -> Booking:
        if command.status not in state_machine.STATUSES:
            raise ValidationError(
                f"Unknown booking status '{command.status}'",
                details={'status': command.status, 'allowed': list(state_machine.STATUSES)},
            )

        booking = self.booking_repo.get(command.booking_id)
        if booking is None:
            raise NotFound(f"Booking {command.booking_id} not found")

        owner_cancel = (
            command.status == state_machine.CANCELLED
            and booking.status == state_machine.PENDING
            and self.policy.is_allowed(command.requester, Action.CANCEL, booking)
        )
        if not owner_cancel:
            self.policy.require(command.requester, Action.UPDATE_STATUS, booking)

        with DjangoUnitOfWork() as uow:
            booking = self.booking_repo.get(command.booking_id, lock=True)
            if booking is None:
                raise NotFound(f"Booking {command.booking_id} not found")
            transition_booking(booking, command.status, uow, self.booking_repo, reason=command.reason)

        return booking


class DeleteBookingHandler:
    """Owner or admin may delete a PENDING or CANCELLED booking without payments"""

    def __init__(self, booking_repo: Optional[DjangoBookingRepository] = None, policy: AccessPolicy = access_policy):
        self.booking_repo = booking_repo or DjangoBookingRepository()
        self.policy = policy

    @as_result
    def handle(self, command: DeleteBookingCommand) -> None:
        booking = self.booking_repo.get(command.booking_id)
        if booking is None:
            raise NotFound(f"Booking {command.booking_id} not found")

        self.policy.require(command.requester, Action.DELETE, booking, "Only the owner or an admin can delete a booking")

        with DjangoUnitOfWork() as uow:
            booking = self.booking_repo.get(command.booking_id, lock=True)
            if booking is None:
                raise NotFound(f"Booking {command.booking_id} not found")
            if booking.status not in Booking.DELETABLE_STATUSES:
                raise Conflict(
                    f"A {booking.status} booking cannot be deleted",
                    details={'status': booking.status},
                )
            if booking.payments.exists():
                raise Conflict(
                    "Booking has payment records and cannot be deleted",
                    details={'status': booking.status},
                )
            booking_id, user_id = booking.pk, booking.user_id
            self.booking_repo.delete(booking)
            uow.add_event(BookingDeleted(aggregate_id=booking_id, booking_id=booking_id, user_id=user_id))

        logger.info(f"Booking {booking_id} deleted by user {command.requester.pk}")
