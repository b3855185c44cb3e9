"""Data access for availability blocks."""

from __future__ import annotations

from datetime import date
from typing import List, Optional

from shared.domain.value_objects import TimeInterval, overlaps

from .models import AvailabilityBlock


class DjangoAvailabilityRepository:
    """ORM backed repository, injected into the booking handlers."""

    def get(self, block_id) -> Optional[AvailabilityBlock]:
        return (
            AvailabilityBlock.objects.select_related("space__location")
            .filter(pk=block_id)
            .first()
        )

    def list_for_space(self, space_id, start_date: date, end_date: date):
        return AvailabilityBlock.objects.filter(
            space_id=space_id,
            date__gte=start_date,
            date__lte=end_date,
        ).order_by("date", "start_time")

    def exists(self, space_id, day: date, interval: TimeInterval, exclude_id=None) -> bool:
        qs = AvailabilityBlock.objects.filter(
            space_id=space_id,
            date=day,
            start_time=interval.start,
            end_time=interval.end,
        )
        if exclude_id is not None:
            qs = qs.exclude(pk=exclude_id)
        return qs.exists()

    def find_available_overlapping(self, space_id, day: date, interval: TimeInterval) -> List[AvailabilityBlock]:
        """Open blocks on ``day`` sharing any instant with ``interval``.

        This answers "does some open block touch the request", not "is the
        whole request covered by open blocks".
        """
        blocks = AvailabilityBlock.objects.filter(space_id=space_id, date=day, is_available=True)
        return [block for block in blocks if overlaps(block.interval, interval)]

    def add(self, **fields) -> AvailabilityBlock:
        return AvailabilityBlock.objects.create(**fields)

    def save(self, block: AvailabilityBlock) -> None:
        block.save()

    def delete(self, block: AvailabilityBlock) -> None:
        block.delete()
