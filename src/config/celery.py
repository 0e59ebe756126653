"""Celery configuration."""
import os

from celery import Celery
from celery.schedules import crontab

os.environ.setdefault(
    "DJANGO_SETTINGS_MODULE",
    os.getenv("DJANGO_SETTINGS_MODULE", "config.settings.dev"),
)

app = Celery("marketplace")
app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()

# Beat schedule
app.conf.beat_schedule = {
    "process-scheduled-payouts": {
        "task": "payouts.tasks.process_scheduled_payouts",
        "schedule": crontab(minute=0, hour=2),  # Daily at 2am; frequency checked by the scheduler
    },
}
