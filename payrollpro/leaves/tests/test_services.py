from datetime import date
from decimal import Decimal

import pytest

from payrollpro.audit.models import AuditLog
from payrollpro.leaves import services
from payrollpro.leaves.models import LeaveRequest
from payrollpro.leaves.tests.factories import LeaveRequestFactory
from payrollpro.notifications.models import Notification
from payrollpro.payroll.exceptions import InvalidStateError
from payrollpro.payroll.exceptions import PayrollValidationError
from payrollpro.payroll.exceptions import RecordNotFound

pytestmark = pytest.mark.django_db


def _apply(employee, **overrides):
    params = {
        "leave_type": LeaveRequest.Type.CASUAL,
        "start_date": date(2024, 3, 11),
        "end_date": date(2024, 3, 13),
        "reason": "Travel",
    }
    params.update(overrides)
    return services.apply_leave(employee, **params)


class TestApplyLeave:
    def test_days_default_to_inclusive_range(self, employee):
        leave = _apply(employee)
        assert leave.total_days == Decimal("3")
        assert leave.status == LeaveRequest.Status.PENDING
        assert AuditLog.objects.filter(action="leave_applied").count() == 1

    def test_half_day(self, employee):
        leave = _apply(
            employee,
            start_date=date(2024, 3, 11),
            end_date=date(2024, 3, 11),
            total_days=Decimal("0.5"),
        )
        assert leave.total_days == Decimal("0.5")

    def test_less_than_half_day(self, employee):
        with pytest.raises(PayrollValidationError, match="half a day"):
            _apply(employee, total_days=Decimal("0.25"))

    def test_end_before_start(self, employee):
        with pytest.raises(PayrollValidationError):
            _apply(employee, start_date=date(2024, 3, 13), end_date=date(2024, 3, 11))

    def test_overlap_with_pending_leave(self, employee):
        _apply(employee)
        with pytest.raises(PayrollValidationError, match="overlaps"):
            _apply(employee, start_date=date(2024, 3, 13), end_date=date(2024, 3, 14))

    def test_rejected_leave_does_not_block(self, employee):
        LeaveRequestFactory(
            employee=employee,
            start_date=date(2024, 3, 11),
            end_date=date(2024, 3, 11),
            total_days=Decimal("1"),
            status=LeaveRequest.Status.REJECTED,
        )
        assert _apply(employee).pk

    def test_insufficient_balance(self, employee):
        LeaveRequestFactory(
            employee=employee,
            start_date=date(2024, 1, 1),
            end_date=date(2024, 1, 10),
            total_days=Decimal("10"),
            status=LeaveRequest.Status.APPROVED,
        )
        with pytest.raises(
            PayrollValidationError,
            match="Insufficient Casual leave balance. Available: 2",
        ):
            _apply(employee)

    def test_lop_leave_has_no_balance_limit(self, employee):
        leave = _apply(
            employee,
            leave_type=LeaveRequest.Type.LOP,
            start_date=date(2024, 3, 1),
            end_date=date(2024, 3, 31),
        )
        assert leave.total_days == Decimal("31")

    def test_admins_are_notified(self, employee, payroll_admin):
        _apply(employee)
        notification = Notification.objects.get(recipient=payroll_admin)
        assert notification.notification_type == Notification.Type.LEAVE_REQUEST
        assert "3 days of Casual leave" in notification.message


class TestDecisions:
    def test_approve_notifies_employee(self, employee, payroll_admin):
        leave = LeaveRequestFactory(employee=employee)
        leave = services.approve_leave(leave.pk, actor=payroll_admin, remarks="Enjoy")
        assert leave.status == LeaveRequest.Status.APPROVED
        assert leave.approved_by == payroll_admin
        assert leave.remarks == "Enjoy"
        assert Notification.objects.filter(
            recipient=employee.user,
            notification_type=Notification.Type.LEAVE_APPROVED,
        ).exists()

    def test_reject_requires_reason(self, employee):
        leave = LeaveRequestFactory(employee=employee)
        with pytest.raises(PayrollValidationError, match="reason"):
            services.reject_leave(leave.pk, reason="  ")

    def test_reject_notifies_employee(self, employee, payroll_admin):
        leave = LeaveRequestFactory(employee=employee)
        leave = services.reject_leave(leave.pk, reason="Release week", actor=payroll_admin)
        assert leave.status == LeaveRequest.Status.REJECTED
        assert leave.rejection_reason == "Release week"
        assert Notification.objects.filter(
            recipient=employee.user,
            notification_type=Notification.Type.LEAVE_REJECTED,
        ).exists()

    def test_decided_leave_cannot_be_decided_again(self, employee):
        leave = LeaveRequestFactory(employee=employee, status=LeaveRequest.Status.APPROVED)
        with pytest.raises(InvalidStateError, match="Only pending leaves can be approved"):
            services.approve_leave(leave.pk)
        with pytest.raises(InvalidStateError):
            services.reject_leave(leave.pk, reason="Too late")

    def test_missing_leave(self):
        with pytest.raises(RecordNotFound):
            services.approve_leave(999999)


class TestCancel:
    def test_owner_cancels_pending(self, employee):
        leave = LeaveRequestFactory(employee=employee)
        services.cancel_leave(leave.pk, user=employee.user)
        assert not LeaveRequest.objects.filter(pk=leave.pk).exists()

    def test_other_user_cannot_cancel(self, employee, user):
        leave = LeaveRequestFactory(employee=employee)
        with pytest.raises(PayrollValidationError, match="Only the applicant"):
            services.cancel_leave(leave.pk, user=user)

    def test_approved_leave_cannot_be_cancelled(self, employee):
        leave = LeaveRequestFactory(employee=employee, status=LeaveRequest.Status.APPROVED)
        with pytest.raises(InvalidStateError, match="Only pending leaves can be cancelled"):
            services.cancel_leave(leave.pk, user=employee.user)


def test_leave_balance(employee):
    LeaveRequestFactory(employee=employee, status=LeaveRequest.Status.APPROVED)
    LeaveRequestFactory(
        employee=employee,
        leave_type=LeaveRequest.Type.LOP,
        start_date=date(2024, 4, 1),
        end_date=date(2024, 4, 3),
        total_days=Decimal("3"),
        status=LeaveRequest.Status.APPROVED,
    )
    LeaveRequestFactory(
        employee=employee,
        start_date=date(2024, 5, 1),
        end_date=date(2024, 5, 1),
        total_days=Decimal("1"),
    )
    balance = services.leave_balance(employee, 2024)
    assert balance["Casual"] == {
        "allocated": Decimal("12"),
        "used": Decimal("2"),
        "remaining": Decimal("10"),
    }
    assert balance["Sick"]["remaining"] == Decimal("12")
    assert balance["LOP"] == {"used": Decimal("3")}


def test_lop_leave_dates_clip_to_month(employee):
    LeaveRequestFactory(
        employee=employee,
        leave_type=LeaveRequest.Type.LOP,
        start_date=date(2024, 2, 28),
        end_date=date(2024, 3, 2),
        total_days=Decimal("4"),
        status=LeaveRequest.Status.APPROVED,
    )
    LeaveRequestFactory(
        employee=employee,
        leave_type=LeaveRequest.Type.LOP,
        start_date=date(2024, 3, 20),
        end_date=date(2024, 3, 20),
        total_days=Decimal("1"),
    )
    assert services.lop_leave_dates(employee.pk, 2024, 3) == {
        date(2024, 3, 1),
        date(2024, 3, 2),
    }
    assert services.lop_leave_days_for_month(employee.pk, 2024, 2) == 2
