"""ORM repositories injected into the booking command handlers."""

from __future__ import annotations

from datetime import date
from typing import List, Optional

from django.db.models import Q  # type: ignore

from apps.spaces.models import Space
from shared.infrastructure.locking import lock_queryset_if_possible
from shared.domain.value_objects import TimeInterval, overlaps

from .models import Booking


class DjangoSpaceRepository:

    def get(self, space_id, lock: bool = False) -> Optional[Space]:
        qs = Space.objects.select_related("location").filter(pk=space_id, is_active=True)
        if lock:
            qs = lock_queryset_if_possible(qs)
        return qs.first()


class DjangoBookingRepository:

    def get(self, booking_id, lock: bool = False) -> Optional[Booking]:
        qs = Booking.objects.select_related("space__location", "user").filter(pk=booking_id)
        if lock:
            qs = lock_queryset_if_possible(qs)
        return qs.first()

    def find_active_overlapping(
        self,
        space_id,
        day: date,
        interval: TimeInterval,
        exclude_id=None,
    ) -> List[Booking]:
        """Active bookings on the same space and date whose interval overlaps.

        Times crossing midnight make a plain SQL range filter wrong, so the
        candidates for the date are compared with the interval model.
        """
        qs = Booking.objects.filter(
            space_id=space_id,
            date=day,
            status__in=Booking.ACTIVE_STATUSES,
        )
        if exclude_id is not None:
            qs = qs.exclude(pk=exclude_id)
        return [booking for booking in qs if overlaps(booking.interval, interval)]

    def visible_to(self, user):
        """Bookings a user may list: own, managed spaces, or all for admins."""
        qs = Booking.objects.select_related("space__location", "user")
        if not user or not user.is_authenticated:
            return qs.none()
        if user.is_admin_role():
            return qs
        if user.is_manager():
            return qs.filter(Q(space__location__manager=user) | Q(user=user))
        return qs.filter(user=user)

    def add(self, **fields) -> Booking:
        return Booking.objects.create(**fields)

    def save(self, booking: Booking, update_fields=None) -> None:
        booking.save(update_fields=update_fields)

    def delete(self, booking: Booking) -> None:
        booking.delete()
