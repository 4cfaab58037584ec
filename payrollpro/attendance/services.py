"""Attendance services: check-in/out, monthly reports and loss-of-pay days."""

from __future__ import annotations

import logging
from collections import Counter
from datetime import date
from decimal import ROUND_HALF_UP
from decimal import Decimal

from django.db import IntegrityError
from django.db import transaction
from django.db.models import Sum
from django.utils import timezone

from payrollpro.attendance.models import Attendance
from payrollpro.leaves.services import lop_leave_dates
from payrollpro.payroll.exceptions import InvalidStateError
from payrollpro.payroll.exceptions import PayrollValidationError
from payrollpro.payroll.models import PayrollGeneralSetting
from payrollpro.payroll.periods import coerce_period
from payrollpro.payroll.periods import days_in_month

logger = logging.getLogger(__name__)

HALF = Decimal("0.5")
TWO_PLACES = Decimal("0.01")


def resolve_lop_days(
    employee_id: int,
    month,
    year=None,
    *,
    assume_full_pay_without_attendance: bool | None = None,
) -> Decimal:
    """Unpaid days for one employee and month.

    ``credited = present + 0.5 * half_day + paid leave`` and
    ``expected = days_in_month - weekends - holidays``; the result is
    ``max(0, expected - credited)``. ``Leave`` rows falling on an approved
    LOP leave are not credited.

    A month without attendance rows yields 0 when
    ``assume_full_pay_without_attendance`` is true (the default taken from
    the payroll settings), otherwise every day of the month.
    """
    year, month = coerce_period(month, year)
    total_days = days_in_month(year, month)
    rows = list(
        Attendance.objects.filter(
            employee_id=employee_id, date__year=year, date__month=month
        ).values_list("date", "status")
    )

    if not rows:
        if assume_full_pay_without_attendance is None:
            assume_full_pay_without_attendance = (
                PayrollGeneralSetting.load().assume_full_pay_without_attendance
            )
        if assume_full_pay_without_attendance:
            return Decimal("0.00")
        return Decimal(total_days).quantize(TWO_PLACES)

    unpaid_leave_dates = lop_leave_dates(employee_id, year, month)
    counts: Counter = Counter()
    for day, status in rows:
        if status == Attendance.Status.LEAVE and day in unpaid_leave_dates:
            continue
        counts[status] += 1

    credited = (
        counts[Attendance.Status.PRESENT]
        + HALF * counts[Attendance.Status.HALF_DAY]
        + counts[Attendance.Status.LEAVE]
    )
    expected = (
        total_days
        - counts[Attendance.Status.WEEKEND]
        - counts[Attendance.Status.HOLIDAY]
    )
    lop = max(Decimal("0"), Decimal(expected) - credited)
    return lop.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def monthly_report(employee_id: int, month, year=None) -> dict:
    """Status counts, total work hours and late days for one month."""
    year, month = coerce_period(month, year)
    qs = Attendance.objects.filter(
        employee_id=employee_id, date__year=year, date__month=month
    )
    counts = Counter(qs.values_list("status", flat=True))
    work_hours = qs.aggregate(total=Sum("work_hours"))["total"] or Decimal("0")
    return {
        "employee": employee_id,
        "month": month,
        "year": year,
        "total_days": days_in_month(year, month),
        "records": sum(counts.values()),
        "by_status": {status: counts.get(status, 0) for status in Attendance.Status.values},
        "total_work_hours": work_hours.quantize(TWO_PLACES),
        "late_days": qs.filter(is_late=True).count(),
        "lop_days": resolve_lop_days(employee_id, month, year),
    }


@transaction.atomic
def check_in(employee, *, location: str = "", when=None) -> Attendance:
    """Open today's attendance row. Lateness is measured against office start."""
    when = when or timezone.now()
    day = timezone.localtime(when).date()
    attendance = (
        Attendance.objects.select_for_update()
        .filter(employee=employee, date=day)
        .first()
    )
    if attendance is not None and attendance.check_in:
        msg = "Already checked in today."
        raise InvalidStateError(msg)
    if attendance is None:
        attendance = Attendance(employee=employee, date=day)
    attendance.check_in = when
    attendance.check_in_location = location
    attendance.status = Attendance.Status.PRESENT
    attendance.apply_lateness(PayrollGeneralSetting.load().office_start)
    try:
        with transaction.atomic():
            attendance.save()
    except IntegrityError as exc:
        msg = "Already checked in today."
        raise InvalidStateError(msg) from exc
    logger.info(
        "Check-in %s on %s (late=%s)", employee.employee_id, day, attendance.is_late
    )
    return attendance


@transaction.atomic
def check_out(employee, *, location: str = "", when=None) -> Attendance:
    when = when or timezone.now()
    day = timezone.localtime(when).date()
    attendance = (
        Attendance.objects.select_for_update()
        .filter(employee=employee, date=day)
        .first()
    )
    if attendance is None or not attendance.check_in:
        msg = "No check-in found for today."
        raise InvalidStateError(msg)
    if attendance.check_out:
        msg = "Already checked out today."
        raise InvalidStateError(msg)
    if when < attendance.check_in:
        msg = "Check-out cannot be before check-in."
        raise PayrollValidationError(msg)
    attendance.check_out = when
    attendance.check_out_location = location
    # Re-derive the status from the worked hours.
    attendance.status = Attendance.Status.ABSENT
    attendance.save()
    return attendance


def mark_weekends(year: int, month: int, employees) -> int:
    """Create ``Weekend`` rows for Saturdays and Sundays without a row yet."""
    created = 0
    weekend_days = [
        date(year, month, day)
        for day in range(1, days_in_month(year, month) + 1)
        if date(year, month, day).weekday() >= 5  # noqa: PLR2004
    ]
    for employee in employees:
        for day in weekend_days:
            _, was_created = Attendance.objects.get_or_create(
                employee=employee,
                date=day,
                defaults={"status": Attendance.Status.WEEKEND},
            )
            created += int(was_created)
    return created
