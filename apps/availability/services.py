"""Availability management use cases.

Every public method returns a Result. Permission failures, missing
spaces, duplicate blocks and deletes blocked by active bookings come
back as failed results; the view layer unwraps them.
"""

from __future__ import annotations

import logging
from datetime import date, time, timedelta
from typing import Iterable, Optional

from django.db import IntegrityError, transaction  # type: ignore

from apps.spaces.models import Space
from shared.application.policy import AccessPolicy, Action, access_policy
from shared.application.uow import DjangoUnitOfWork
from shared.domain.errors import Conflict, NotFound, ValidationError
from shared.domain.result import as_result
from shared.domain.value_objects import TimeInterval, overlaps

from .models import AvailabilityBlock
from .repositories import DjangoAvailabilityRepository

logger = logging.getLogger(__name__)

MAX_SCHEDULE_DAYS = 366


class AvailabilityService:

    def __init__(
        self,
        repo: Optional[DjangoAvailabilityRepository] = None,
        policy: AccessPolicy = access_policy,
    ):
        self.repo = repo or DjangoAvailabilityRepository()
        self.policy = policy

    # --- queries -------------------------------------------------------

    @as_result
    def list_blocks(self, space_id, start_date: date, end_date: date):
        if start_date > end_date:
            raise ValidationError("start_date must not be after end_date")
        self._get_space(space_id)
        return list(self.repo.list_for_space(space_id, start_date, end_date))

    # --- commands ------------------------------------------------------

    @as_result
    def create_block(
        self,
        requester,
        space_id,
        day: date,
        start_time: time,
        end_time: time,
        is_available: bool = True,
        notes: str = "",
    ) -> AvailabilityBlock:
        _validate_times(start_time, end_time)
        space = self._get_space(space_id)
        self.policy.require(requester, Action.MANAGE, space, "Only the location manager can manage availability")

        interval = TimeInterval(start_time, end_time)
        if self.repo.exists(space.pk, day, interval):
            raise _duplicate(space.pk, day, interval)

        block = self._write(
            lambda: self.repo.add(
                space=space,
                date=day,
                start_time=start_time,
                end_time=end_time,
                is_available=is_available,
                notes=notes,
            ),
            space.pk, day, interval,
        )
        logger.info(f"Availability block {block.pk} created for space {space.pk} on {day} {interval}")
        return block

    @as_result
    def update_block(self, requester, block_id, **changes) -> AvailabilityBlock:
        block = self.repo.get(block_id)
        if block is None:
            raise NotFound(f"Availability block {block_id} not found")
        self.policy.require(requester, Action.MANAGE, block, "Only the location manager can manage availability")

        was_open, old_date, old_interval = block.is_available, block.date, block.interval
        for field in ("date", "start_time", "end_time", "is_available", "notes"):
            if field in changes:
                setattr(block, field, changes[field])
        _validate_times(block.start_time, block.end_time)

        if self.repo.exists(block.space_id, block.date, block.interval, exclude_id=block.pk):
            raise _duplicate(block.space_id, block.date, block.interval)

        def save():
            if was_open:
                # bookings the old block touched that the new one no longer does
                stranded = [
                    booking
                    for booking in _active_bookings_touching(block.space_id, old_date, old_interval)
                    if not (block.is_available and block.date == old_date
                            and overlaps(booking.interval, block.interval))
                ]
                if stranded:
                    raise _has_active_bookings(stranded)
            self.repo.save(block)

        self._write(save, block.space_id, block.date, block.interval)
        logger.info(f"Availability block {block.pk} updated")
        return block

    @as_result
    def delete_block(self, requester, block_id) -> None:
        block = self.repo.get(block_id)
        if block is None:
            raise NotFound(f"Availability block {block_id} not found")
        self.policy.require(requester, Action.MANAGE, block, "Only the location manager can manage availability")

        with DjangoUnitOfWork():
            blocking = _active_bookings_touching(block.space_id, block.date, block.interval)
            if blocking:
                raise _has_active_bookings(blocking)
            self.repo.delete(block)
        logger.info(f"Availability block {block_id} deleted")

    @as_result
    def generate_schedule(
        self,
        requester,
        space_id,
        start_date: date,
        end_date: date,
        start_time: time,
        end_time: time,
        exclude_weekdays: Iterable[int] = (),
    ) -> list[AvailabilityBlock]:
        """Create one open block per day, skipping excluded weekdays (0=Monday)
        and days that already have an identical block."""
        _validate_times(start_time, end_time)
        if start_date > end_date:
            raise ValidationError("start_date must not be after end_date")
        if (end_date - start_date).days >= MAX_SCHEDULE_DAYS:
            raise ValidationError(f"Schedule cannot span more than {MAX_SCHEDULE_DAYS} days")
        space = self._get_space(space_id)
        self.policy.require(requester, Action.MANAGE, space, "Only the location manager can manage availability")

        excluded = set(exclude_weekdays)
        interval = TimeInterval(start_time, end_time)
        created = []
        with DjangoUnitOfWork():
            day = start_date
            while day <= end_date:
                if day.weekday() not in excluded and not self.repo.exists(space.pk, day, interval):
                    created.append(self.repo.add(
                        space=space,
                        date=day,
                        start_time=start_time,
                        end_time=end_time,
                        is_available=True,
                    ))
                day += timedelta(days=1)
        logger.info(f"Generated {len(created)} availability blocks for space {space.pk}")
        return created

    @as_result
    def set_period_availability(self, requester, space_id, start_date: date, end_date: date, is_available: bool) -> int:
        """Open or close every block of a space in [start_date, end_date]

        Closing is refused while any open block in the period still
        touches an active booking.
        """
        if start_date > end_date:
            raise ValidationError("start_date must not be after end_date")
        space = self._get_space(space_id)
        self.policy.require(requester, Action.MANAGE, space, "Only the location manager can manage availability")

        with DjangoUnitOfWork():
            blocks = self.repo.list_for_space(space.pk, start_date, end_date)
            if not is_available:
                blocking = []
                for block in blocks.filter(is_available=True):
                    blocking.extend(_active_bookings_touching(space.pk, block.date, block.interval))
                if blocking:
                    raise _has_active_bookings(blocking)
            updated = blocks.update(is_available=is_available)
        state = "enabled" if is_available else "disabled"
        logger.info(f"{state.capitalize()} {updated} availability blocks for space {space.pk}")
        return updated

    # --- helpers -------------------------------------------------------

    def _get_space(self, space_id) -> Space:
        space = Space.objects.select_related("location").filter(pk=space_id).first()
        if space is None:
            raise NotFound(f"Space {space_id} not found")
        return space

    def _write(self, operation, space_id, day, interval):
        # the unique constraint is the final guard against a concurrent duplicate
        try:
            with transaction.atomic():
                return operation()
        except IntegrityError:
            raise _duplicate(space_id, day, interval)


def _validate_times(start_time: time, end_time: time) -> None:
    if start_time >= end_time:
        raise ValidationError(
            "end_time must be after start_time",
            details={"start_time": str(start_time), "end_time": str(end_time)},
        )


def _active_bookings_touching(space_id, day: date, interval: TimeInterval) -> list:
    from apps.bookings.models import Booking  # local import, bookings depends on this app

    active = Booking.objects.filter(space_id=space_id, date=day, status__in=Booking.ACTIVE_STATUSES)
    return [booking for booking in active if overlaps(booking.interval, interval)]


def _has_active_bookings(bookings) -> Conflict:
    return Conflict(
        "Availability block has active bookings",
        details={"reason": "active_bookings", "booking_ids": sorted({b.pk for b in bookings})},
    )


def _duplicate(space_id, day, interval) -> Conflict:
    return Conflict(
        "An availability block for this time already exists",
        details={"reason": "duplicate", "space_id": space_id, "date": str(day), "interval": str(interval)},
    )
