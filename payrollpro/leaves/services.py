"""Leave applications, decisions and balances."""

from __future__ import annotations

import logging
from datetime import date
from datetime import timedelta
from decimal import Decimal

from django.db import transaction
from django.db.models import Q
from django.utils import timezone

from payrollpro.audit.utils import log_action
from payrollpro.payroll.exceptions import InvalidStateError
from payrollpro.payroll.exceptions import PayrollValidationError
from payrollpro.payroll.exceptions import RecordNotFound
from payrollpro.payroll.periods import month_bounds

from .models import LEAVE_ALLOCATIONS
from .models import LeaveRequest

logger = logging.getLogger(__name__)


def _get_leave(leave_id: int, *, lock: bool = False) -> LeaveRequest:
    qs = LeaveRequest.objects.select_related("employee__user")
    if lock:
        qs = qs.select_for_update()
    try:
        return qs.get(pk=leave_id)
    except LeaveRequest.DoesNotExist:
        msg = f"Leave request {leave_id} not found."
        raise RecordNotFound(msg) from None


def leave_balance(employee, year: int | None = None) -> dict:
    """Allocated, used and remaining days per leave type.

    Counts approved leaves starting in ``year`` (defaults to the current
    year). LOP only reports usage.
    """
    year = year or timezone.localdate().year
    balance: dict[str, dict] = {
        leave_type: {"allocated": allocated, "used": Decimal("0"), "remaining": allocated}
        for leave_type, allocated in LEAVE_ALLOCATIONS.items()
    }
    balance[LeaveRequest.Type.LOP] = {"used": Decimal("0")}
    approved = LeaveRequest.objects.filter(
        employee=employee,
        status=LeaveRequest.Status.APPROVED,
        start_date__year=year,
    ).values_list("leave_type", "total_days")
    for leave_type, days in approved:
        entry = balance.get(leave_type)
        if entry is None:
            continue
        entry["used"] += days
        if "remaining" in entry:
            entry["remaining"] -= days
    return balance


@transaction.atomic
def apply_leave(  # noqa: PLR0913
    employee,
    *,
    leave_type: str,
    start_date: date,
    end_date: date,
    reason: str,
    total_days: Decimal | None = None,
    actor=None,
) -> LeaveRequest:
    if end_date < start_date:
        msg = "End date must be on or after start date."
        raise PayrollValidationError(msg)
    days = Decimal(str(total_days)) if total_days else Decimal((end_date - start_date).days + 1)
    if days < Decimal("0.5"):
        msg = "A leave must cover at least half a day."
        raise PayrollValidationError(msg)

    overlapping = LeaveRequest.objects.filter(
        employee=employee,
        status__in=[LeaveRequest.Status.PENDING, LeaveRequest.Status.APPROVED],
        start_date__lte=end_date,
        end_date__gte=start_date,
    ).exists()
    if overlapping:
        msg = "Leave overlaps an existing pending or approved leave."
        raise PayrollValidationError(msg)

    if leave_type in LEAVE_ALLOCATIONS:
        remaining = leave_balance(employee, start_date.year)[leave_type]["remaining"]
        if remaining < days:
            msg = f"Insufficient {leave_type} leave balance. Available: {remaining} days"
            raise PayrollValidationError(msg)

    leave = LeaveRequest.objects.create(
        employee=employee,
        leave_type=leave_type,
        start_date=start_date,
        end_date=end_date,
        total_days=days,
        reason=reason,
    )
    log_action(
        "leave_applied",
        actor=actor,
        model_name="leaves.LeaveRequest",
        record_id=leave.pk,
        after={"leave_type": leave_type, "total_days": days},
    )
    logger.info(
        "Leave %s applied by %s (%s days)", leave.pk, employee.employee_id, days
    )
    return leave


@transaction.atomic
def approve_leave(leave_id: int, *, actor=None, remarks: str = "") -> LeaveRequest:
    leave = _get_leave(leave_id, lock=True)
    leave.approve(actor=actor, remarks=remarks)
    log_action(
        "leave_approved",
        actor=actor,
        model_name="leaves.LeaveRequest",
        record_id=leave.pk,
        before={"status": LeaveRequest.Status.PENDING},
        after={"status": leave.status},
    )
    return leave


@transaction.atomic
def reject_leave(leave_id: int, *, reason: str, actor=None) -> LeaveRequest:
    if not (reason or "").strip():
        msg = "A rejection reason is required."
        raise PayrollValidationError(msg)
    leave = _get_leave(leave_id, lock=True)
    leave.reject(reason, actor=actor)
    log_action(
        "leave_rejected",
        actor=actor,
        model_name="leaves.LeaveRequest",
        record_id=leave.pk,
        before={"status": LeaveRequest.Status.PENDING},
        after={"status": leave.status, "reason": reason},
    )
    return leave


@transaction.atomic
def cancel_leave(leave_id: int, *, user) -> None:
    """Withdraw a pending application; only its owner may do so."""
    leave = _get_leave(leave_id, lock=True)
    if leave.employee.user_id != getattr(user, "pk", None):
        msg = "Only the applicant can cancel a leave request."
        raise PayrollValidationError(msg)
    if leave.status != LeaveRequest.Status.PENDING:
        msg = "Only pending leaves can be cancelled"
        raise InvalidStateError(msg, current=leave.status)
    log_action(
        "leave_cancelled",
        actor=user,
        model_name="leaves.LeaveRequest",
        record_id=leave.pk,
        before={"status": leave.status},
    )
    leave.delete()


def _approved_lop_leaves(employee_id: int, year: int, month: int):
    first, last = month_bounds(year, month)
    return LeaveRequest.objects.filter(
        Q(employee_id=employee_id)
        & Q(leave_type=LeaveRequest.Type.LOP)
        & Q(status=LeaveRequest.Status.APPROVED)
        & Q(start_date__lte=last)
        & Q(end_date__gte=first)
    )


def lop_leave_dates(employee_id: int, year: int, month: int) -> set[date]:
    """Calendar days of ``year``/``month`` covered by approved LOP leaves."""
    first, last = month_bounds(year, month)
    days: set[date] = set()
    for leave in _approved_lop_leaves(employee_id, year, month):
        current = max(leave.start_date, first)
        end = min(leave.end_date, last)
        while current <= end:
            days.add(current)
            current += timedelta(days=1)
    return days


def lop_leave_days_for_month(employee_id: int, year: int, month: int) -> int:
    return len(lop_leave_dates(employee_id, year, month))
