import os

from celery import Celery
from celery.schedules import crontab  # type: ignore

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings.dev")

app = Celery("spacebook")

app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()


# ============================================================================
# CELERY BEAT SCHEDULE (Periodic Tasks)
# ============================================================================

app.conf.beat_schedule = {
    # Confirmed bookings whose date has passed become completed, hourly
    "complete-finished-bookings": {
        "task": "bookings.complete_finished_bookings",
        "schedule": crontab(minute=15),
    },
    # Reminders for tomorrow's bookings, once a day in the evening
    "send-booking-reminders": {
        "task": "notifications.send_booking_reminders",
        "schedule": crontab(minute=0, hour=18),
    },
    # Retry failed notifications every 10 minutes
    "resend-failed-notifications": {
        "task": "notifications.resend_failed",
        "schedule": crontab(minute="*/10"),
        "options": {"expires": 540},
    },
}
