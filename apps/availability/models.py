"""Availability blocks per space and calendar date."""

from __future__ import annotations

from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.domain.value_objects import TimeInterval


class AvailabilityBlock(models.Model):
    """Half-open window [start_time, end_time) on a date.

    Blocks may overlap each other, only exact duplicates are rejected.
    """

    space = models.ForeignKey(
        "spaces.Space",
        on_delete=models.CASCADE,
        related_name="availability_blocks",
    )
    date = models.DateField()
    start_time = models.TimeField()
    end_time = models.TimeField()
    is_available = models.BooleanField(default=True)
    notes = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Availability block")
        verbose_name_plural = _("Availability blocks")
        ordering = ["date", "start_time"]
        constraints = [
            models.UniqueConstraint(
                fields=["space", "date", "start_time", "end_time"],
                name="availability_unique_block",
            ),
            models.CheckConstraint(
                condition=models.Q(end_time__gt=models.F("start_time")),
                name="availability_valid_times",
            ),
        ]
        indexes = [
            models.Index(fields=["space", "date"]),
        ]

    def __str__(self) -> str:
        state = "open" if self.is_available else "closed"
        return f"{self.space_id} {self.date} {self.interval} ({state})"

    @property
    def interval(self) -> TimeInterval:
        return TimeInterval(self.start_time, self.end_time)

    @property
    def owner_id(self):
        return None

    @property
    def manager_id(self):
        return self.space.location.manager_id
