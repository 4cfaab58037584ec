import logging

from celery import shared_task
from django.utils import timezone

from payrollpro.attendance.services import mark_weekends
from payrollpro.employees.models import Employee

logger = logging.getLogger(__name__)


@shared_task(name="attendance.mark_weekends")
def mark_weekends_task(year: int | None = None, month: int | None = None) -> int:
    """Pre-fill Weekend rows for every active employee.

    Args:
        year: Calendar year. Defaults to the current one in TIME_ZONE.
        month: Calendar month. Defaults to the current one.

    Returns:
        Number of attendance rows created.
    """
    today = timezone.localdate()
    year = year or today.year
    month = month or today.month
    created = mark_weekends(year, month, Employee.objects.active())
    logger.info("Marked %s weekend rows for %04d-%02d", created, year, month)
    return created
