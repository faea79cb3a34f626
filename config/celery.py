import os

from celery import Celery
from celery.schedules import crontab  # type: ignore

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings.dev")

app = Celery("resort_reservations")

app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()


# ============================================================================
# CELERY BEAT SCHEDULE (Periodic Tasks)
# ============================================================================

app.conf.beat_schedule = {
    # Complete reservations after check-out, every hour
    "complete-past-checkouts": {
        "task": "reservations.complete_past_checkouts",
        "schedule": crontab(minute=0),
    },
}

app.conf.timezone = "Asia/Manila"
