"""Catalog models: locations and bookable spaces."""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings  # type: ignore
from django.core.validators import MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class Location(models.Model):
    """A building or venue with a responsible manager."""

    name = models.CharField(_("Name"), max_length=255)
    address = models.CharField(_("Address"), max_length=255, blank=True)
    city = models.CharField(_("City"), max_length=100, blank=True)
    manager = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="managed_locations",
    )
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Location")
        verbose_name_plural = _("Locations")
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name


class Space(models.Model):
    """A bookable room, desk or hall priced by the hour and by the day."""

    class SpaceType(models.TextChoices):
        MEETING_ROOM = "meeting_room", _("Meeting room")
        DESK = "desk", _("Desk")
        OFFICE = "office", _("Private office")
        EVENT_HALL = "event_hall", _("Event hall")

    location = models.ForeignKey(Location, on_delete=models.CASCADE, related_name="spaces")
    name = models.CharField(_("Name"), max_length=255)
    description = models.TextField(blank=True)
    space_type = models.CharField(
        max_length=20,
        choices=SpaceType.choices,
        default=SpaceType.MEETING_ROOM,
    )
    capacity = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    price_per_hour = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    price_per_day = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        help_text=_("Applied per full 8 hour block, optional."),
    )
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Space")
        verbose_name_plural = _("Spaces")
        ordering = ["location__name", "name"]
        indexes = [models.Index(fields=["location", "is_active"])]

    def __str__(self) -> str:
        return f"{self.name} ({self.location})"

    @property
    def manager_id(self):
        return self.location.manager_id

    # a space has no single owner, only a manager
    owner_id = None
