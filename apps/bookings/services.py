"""Read-side booking services: quotes, availability checks, slots and schedules.

Nothing here writes or locks. The answers are advisory: a slot shown as
free may still be taken before CreateBooking runs, which re-checks
everything under the space lock.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Any, Optional

from django.utils import timezone  # type: ignore

from apps.availability.repositories import DjangoAvailabilityRepository
from apps.spaces.models import Space
from shared.domain.errors import NotFound, ValidationError
from shared.domain.value_objects import TimeInterval, duration, overlaps

from .domain.pricing import calculate_price
from .models import Booking
from .repositories import DjangoBookingRepository, DjangoSpaceRepository

SLOT_MINUTES = 60
SCHEDULE_DEFAULT_DAYS = 7
SCHEDULE_MAX_DAYS = 92


def get_space(space_id) -> Space:
    space = DjangoSpaceRepository().get(space_id)
    if space is None:
        raise NotFound(f"Space {space_id} not found")
    return space


def _require_interval(start_time: time, end_time: time) -> TimeInterval:
    if start_time == end_time:
        raise ValidationError(
            "End time must differ from start time",
            details={"start_time": str(start_time), "end_time": str(end_time)},
        )
    return TimeInterval(start_time, end_time)


def quote(space: Space, start_time: time, end_time: time) -> dict[str, Any]:
    """Hours and price CreateBooking would charge for the interval."""
    _require_interval(start_time, end_time)
    hours = duration(start_time, end_time)
    return {
        "space_id": space.pk,
        "start_time": start_time.isoformat(),
        "end_time": end_time.isoformat(),
        "total_hours": str(hours),
        "price_per_hour": str(space.price_per_hour),
        "price_per_day": str(space.price_per_day) if space.price_per_day is not None else None,
        "total_price": str(calculate_price(hours, space.price_per_hour, space.price_per_day)),
    }


def find_overlapping(space: Space, day: date, start_time: time, end_time: time) -> list[Booking]:
    interval = _require_interval(start_time, end_time)
    return DjangoBookingRepository().find_active_overlapping(space.pk, day, interval)


def check_availability(space: Space, day: date, start_time: time, end_time: time) -> dict[str, Any]:
    """Run the CreateBooking preconditions without writing.

    ``reason`` is ``None`` when bookable, otherwise the same reason code
    CreateBooking would answer with (``past_date``, ``unavailable`` or
    ``overlap``).
    """
    interval = _require_interval(start_time, end_time)
    reason: Optional[str] = None
    conflicts: list[int] = []

    if day < timezone.localdate():
        reason = "past_date"
    elif not DjangoAvailabilityRepository().find_available_overlapping(space.pk, day, interval):
        reason = "unavailable"
    else:
        conflicts = [b.pk for b in DjangoBookingRepository().find_active_overlapping(space.pk, day, interval)]
        if conflicts:
            reason = "overlap"

    return {
        "available": reason is None,
        "reason": reason,
        "date": day.isoformat(),
        "conflicting_booking_ids": conflicts,
        "quote": quote(space, start_time, end_time),
    }


def available_slots(space: Space, day: date, slot_minutes: int = SLOT_MINUTES) -> dict[str, Any]:
    """Cut every open block of ``day`` into fixed slots and mark the taken ones.

    The last slot of a block is shortened to end with the block.
    """
    blocks = DjangoAvailabilityRepository().list_for_space(space.pk, day, day).filter(is_available=True)
    active = list(
        Booking.objects.filter(space_id=space.pk, date=day, status__in=Booking.ACTIVE_STATUSES)
    )
    step = timedelta(minutes=slot_minutes)

    slots = []
    for block in blocks:
        cursor = datetime.combine(day, block.start_time)
        block_end = datetime.combine(day, block.end_time)
        while cursor < block_end:
            slot_end = min(cursor + step, block_end)
            interval = TimeInterval(cursor.time(), slot_end.time())
            slots.append({
                "start_time": interval.start.isoformat(),
                "end_time": interval.end.isoformat(),
                "available": not any(overlaps(b.interval, interval) for b in active),
                "duration_minutes": int((slot_end - cursor).total_seconds() // 60),
            })
            cursor = slot_end

    return {
        "space_id": space.pk,
        "date": day.isoformat(),
        "total_slots": len(slots),
        "available_slots": [s for s in slots if s["available"]],
        "occupied_slots": [s for s in slots if not s["available"]],
    }


def space_schedule(space: Space, start_date: Optional[date] = None, end_date: Optional[date] = None) -> dict[str, Any]:
    """Active bookings of a space in [start_date, end_date].

    Defaults to the next seven days starting today.
    """
    start_date = start_date or timezone.localdate()
    end_date = end_date or start_date + timedelta(days=SCHEDULE_DEFAULT_DAYS)
    if start_date > end_date:
        raise ValidationError("start_date must not be after end_date")
    if (end_date - start_date).days > SCHEDULE_MAX_DAYS:
        raise ValidationError(f"Schedule cannot span more than {SCHEDULE_MAX_DAYS} days")

    bookings = Booking.objects.filter(
        space_id=space.pk,
        date__gte=start_date,
        date__lte=end_date,
        status__in=Booking.ACTIVE_STATUSES,
    ).order_by("date", "start_time")
    return {"space_id": space.pk, "start_date": start_date, "end_date": end_date, "bookings": bookings}
