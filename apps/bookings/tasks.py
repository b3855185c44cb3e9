"""Celery tasks for the booking domain."""

from __future__ import annotations

import logging

from celery import shared_task  # type: ignore
from django.utils import timezone  # type: ignore

from shared.application.uow import DjangoUnitOfWork

from .application.command_handlers import transition_booking
from .models import Booking
from .repositories import DjangoBookingRepository

logger = logging.getLogger(__name__)


# ============================================================================
# PERIODIC TASKS (Celery Beat)
# ============================================================================

@shared_task(name="bookings.complete_finished_bookings")
def complete_finished_bookings() -> dict[str, int]:
    """
    Move CONFIRMED bookings whose date has passed to COMPLETED.

    Each booking is handled in its own unit of work, one failure does
    not stop the batch.

    Returns:
        dict: {"completed": count, "failed": count}
    """
    repo = DjangoBookingRepository()
    today = timezone.localdate()
    completed = failed = 0

    booking_ids = list(
        Booking.objects.filter(status=Booking.Status.CONFIRMED, date__lt=today).values_list("pk", flat=True)
    )
    for booking_id in booking_ids:
        try:
            with DjangoUnitOfWork() as uow:
                booking = repo.get(booking_id, lock=True)
                if booking is None or booking.status != Booking.Status.CONFIRMED:
                    continue
                transition_booking(booking, Booking.Status.COMPLETED, uow, repo)
            completed += 1
        except Exception as e:
            failed += 1
            logger.error(f"Failed to complete booking {booking_id}: {e}", exc_info=True)

    logger.info(f"Completed {completed} finished bookings ({failed} failed)")
    return {"completed": completed, "failed": failed}
