import os

from celery import Celery
from celery.schedules import crontab
from celery.signals import setup_logging

# Tests and local dev set DJANGO_SETTINGS_MODULE explicitly, so this default
# only applies to deployed workers.
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings.production")

app = Celery("payrollpro")

# namespace='CELERY' means all celery-related configuration keys
# should have a `CELERY_` prefix.
app.config_from_object("django.conf:settings", namespace="CELERY")

app.conf.beat_schedule = {
    "mark-weekends-monthly": {
        "task": "attendance.mark_weekends",
        "schedule": crontab(minute=0, hour=1, day_of_month=1),
    },
    "process-current-month": {
        "task": "payroll.process_current_month",
        "schedule": crontab(minute=0, hour=2, day_of_month=28),
    },
}


@setup_logging.connect
def config_loggers(*args, **kwargs):
    from logging.config import dictConfig  # noqa: PLC0415

    from django.conf import settings  # noqa: PLC0415

    dictConfig(settings.LOGGING)


# Load task modules from all registered Django app configs.
app.autodiscover_tasks()
