"""Payroll workflows: batch processing, adjustments, approval and reporting.

The record lifecycle guards live on ``PayrollRecord``; the functions here
add row locks, audit entries and notifications around them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from dataclasses import field

from django.db import transaction
from django.db.models import Count
from django.db.models import Sum

from payrollpro.attendance.services import resolve_lop_days
from payrollpro.audit.utils import log_action
from payrollpro.employees.models import Employee
from payrollpro.notifications.models import Notification
from payrollpro.notifications.services import notify_admins
from payrollpro.notifications.services import notify_user
from payrollpro.realtime.events.notifications import publish_payroll_event

from .calculator import calculate_salary
from .exceptions import NothingToProcessError
from .exceptions import PayrollError
from .exceptions import PayrollValidationError
from .exceptions import RecordNotFound
from .models import PayrollGeneralSetting
from .models import PayrollRecord
from .models import SalaryStructure
from .periods import coerce_period
from .periods import format_period

logger = logging.getLogger(__name__)


@dataclass
class EmployeeError:
    employee: int
    employee_id: str
    error: str
    kind: str = "invalid_input"

    def as_dict(self) -> dict:
        return {
            "employee": self.employee,
            "employee_id": self.employee_id,
            "error": self.error,
            "kind": self.kind,
        }


@dataclass
class BatchResult:
    month: str
    processed: int = 0
    errored: int = 0
    skipped_existing: int = 0
    records: list[PayrollRecord] = field(default_factory=list)
    errors: list[EmployeeError] = field(default_factory=list)

    def as_dict(self) -> dict:
        return {
            "month": self.month,
            "processed": self.processed,
            "errored": self.errored,
            "skipped_existing": self.skipped_existing,
            "records": [record.pk for record in self.records],
            "errors": [error.as_dict() for error in self.errors],
        }


def get_record(record_id: int, *, lock: bool = False) -> PayrollRecord:
    qs = PayrollRecord.objects.select_related("employee__user")
    if lock:
        qs = qs.select_for_update(of=("self",))
    try:
        return qs.get(pk=record_id)
    except PayrollRecord.DoesNotExist:
        msg = f"Payroll record {record_id} not found."
        raise RecordNotFound(msg) from None


def _lop_days_or_zero(employee: Employee, year: int, month: int):
    try:
        return resolve_lop_days(employee.pk, month, year)
    except Exception:  # noqa: BLE001
        logger.warning(
            "LOP resolution failed for %s %s; using 0",
            employee.employee_id,
            format_period(year, month),
            exc_info=True,
        )
        return 0


def _create_record(employee, *, year, month, days_basis, actor) -> PayrollRecord:
    try:
        structure = employee.salary_structure
    except SalaryStructure.DoesNotExist:
        msg = "Salary structure not found"
        raise PayrollValidationError(msg) from None
    lop_days = _lop_days_or_zero(employee, year, month)
    breakdown = calculate_salary(
        structure, {"lop_days": lop_days}, days_basis=days_basis
    )
    record = PayrollRecord(
        employee=employee,
        month=format_period(year, month),
        year=year,
        processed_by=actor if getattr(actor, "is_authenticated", False) else None,
    )
    record.apply_breakdown(breakdown)
    record.save()
    return record


def process_period(month, year=None, *, actor=None) -> BatchResult:
    """Create Pending records for every active employee without one.

    Re-running a period only fills the gaps. Each employee is processed in
    its own savepoint; failures are collected on the result instead of
    aborting the batch.
    """
    year, month = coerce_period(month, year)
    period = format_period(year, month)
    policy = PayrollGeneralSetting.load()
    days_basis = policy.days_basis(year, month)

    active = list(
        Employee.objects.active().select_related("user", "salary_structure")
    )
    if not active:
        msg = "No active employees found"
        raise NothingToProcessError(msg, kind=NothingToProcessError.NO_ACTIVE_EMPLOYEES)

    existing = set(
        PayrollRecord.objects.filter(
            month=period, employee__in=[e.pk for e in active]
        ).values_list("employee_id", flat=True)
    )
    remaining = [e for e in active if e.pk not in existing]
    if not remaining:
        msg = f"Payroll already processed for all employees for {period}"
        raise NothingToProcessError(
            msg,
            kind=NothingToProcessError.ALREADY_PROCESSED,
            skipped_existing=len(existing),
        )

    result = BatchResult(month=period, skipped_existing=len(existing))
    for employee in remaining:
        try:
            with transaction.atomic():
                record = _create_record(
                    employee,
                    year=year,
                    month=month,
                    days_basis=days_basis,
                    actor=actor,
                )
        except PayrollError as exc:
            logger.warning(
                "Payroll for %s %s failed: %s", employee.employee_id, period, exc
            )
            result.errors.append(
                EmployeeError(employee.pk, employee.employee_id, str(exc), exc.kind)
            )
        except Exception as exc:
            logger.warning(
                "Payroll for %s %s failed unexpectedly",
                employee.employee_id,
                period,
                exc_info=True,
            )
            result.errors.append(
                EmployeeError(employee.pk, employee.employee_id, str(exc), "error")
            )
        else:
            result.records.append(record)

    result.processed = len(result.records)
    result.errored = len(result.errors)
    log_action(
        "payroll_processed",
        actor=actor,
        message=f"Processed payroll for {period}",
        model_name="payroll.PayrollRecord",
        after={
            "processed": result.processed,
            "errored": result.errored,
            "skipped_existing": result.skipped_existing,
        },
    )
    logger.info(
        "Payroll %s: processed=%s errored=%s skipped=%s",
        period,
        result.processed,
        result.errored,
        result.skipped_existing,
    )
    if result.processed:
        notify_admins(
            "Payroll Processed",
            f"Payroll for {period} has been processed",
            Notification.Type.PAYROLL_PROCESSED,
            link=f"/payroll/records/month/{period}/",
        )
        transaction.on_commit(
            lambda: publish_payroll_event("payroll_processed", result.as_dict())
        )
    return result


@transaction.atomic
def add_adjustment(  # noqa: PLR0913
    record_id: int,
    adjustment_type: str,
    amount,
    description: str = "",
    *,
    actor=None,
    request=None,
) -> PayrollRecord:
    record = get_record(record_id, lock=True)
    before = {"total_adjustment": record.total_adjustment, "net_salary": record.net_salary}
    record.add_adjustment(adjustment_type, amount, description, actor=actor)
    log_action(
        "payroll_adjustment_added",
        actor=actor,
        message=f"{adjustment_type} {amount}",
        model_name="payroll.PayrollRecord",
        record_id=record.pk,
        before=before,
        after={
            "total_adjustment": record.total_adjustment,
            "net_salary": record.net_salary,
        },
        request=request,
    )
    return record


@transaction.atomic
def approve(record_id: int, *, actor=None, request=None) -> PayrollRecord:
    record = get_record(record_id, lock=True)
    record.approve(actor=actor if getattr(actor, "is_authenticated", False) else None)
    log_action(
        "payroll_approved",
        actor=actor,
        model_name="payroll.PayrollRecord",
        record_id=record.pk,
        before={"status": PayrollRecord.Status.PENDING},
        after={"status": record.status},
        request=request,
    )
    notify_user(
        record.employee.user,
        "Payroll Approved",
        f"Your salary for {record.month} has been approved",
        Notification.Type.PAYROLL_APPROVED,
        link=f"/payroll/payslips/{record.pk}/",
    )
    return record


@transaction.atomic
def revoke(record_id: int, *, actor=None, request=None) -> PayrollRecord:
    record = get_record(record_id, lock=True)
    record.revoke()
    log_action(
        "payroll_revoked",
        actor=actor,
        model_name="payroll.PayrollRecord",
        record_id=record.pk,
        before={"status": PayrollRecord.Status.APPROVED},
        after={"status": record.status},
        request=request,
    )
    return record


def _bulk_transition(month, year, *, from_status, operation, actor) -> dict:
    year, month = coerce_period(month, year)
    period = format_period(year, month)
    ids = list(
        PayrollRecord.objects.filter(month=period, status=from_status)
        .order_by("pk")
        .values_list("pk", flat=True)
    )
    if not ids:
        msg = f"No {from_status.lower()} payroll records found for {period}"
        raise RecordNotFound(msg)
    done, failed = [], []
    for record_id in ids:
        try:
            operation(record_id, actor=actor)
        except PayrollError as exc:
            failed.append({"record": record_id, "error": str(exc), "kind": exc.kind})
        else:
            done.append(record_id)
    return {"month": period, "count": len(done), "records": done, "failed": failed}


def approve_all_for_month(month, year=None, *, actor=None) -> dict:
    """Approve every Pending record of a period."""
    return _bulk_transition(
        month,
        year,
        from_status=PayrollRecord.Status.PENDING,
        operation=approve,
        actor=actor,
    )


def revoke_all_for_month(month, year=None, *, actor=None) -> dict:
    """Send every Approved record of a period back to Pending."""
    return _bulk_transition(
        month,
        year,
        from_status=PayrollRecord.Status.APPROVED,
        operation=revoke,
        actor=actor,
    )


def monthly_summary(month, year=None) -> dict:
    year, month = coerce_period(month, year)
    period = format_period(year, month)
    summary = PayrollRecord.objects.for_period(period).summary()
    summary["month"] = period
    return summary


def payroll_stats(year: int | None = None) -> dict:
    """Status counts overall and net totals per month."""
    qs = PayrollRecord.objects.all()
    if year:
        qs = qs.filter(year=year)
    by_status = dict(qs.order_by().values_list("status").annotate(n=Count("id")))
    by_month = (
        qs.order_by("month")
        .values("month")
        .annotate(records=Count("id"), total_net=Sum("net_salary"))
    )
    return {
        "total": sum(by_status.values()),
        "by_status": {
            status: by_status.get(status, 0) for status in PayrollRecord.Status.values
        },
        "by_month": list(by_month),
    }
