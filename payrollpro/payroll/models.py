"""
Payroll models.

A salary structure per employee, a runtime policy singleton, and one
``PayrollRecord`` per employee and month carrying the computed breakdown,
its adjustments and the approval/payment workflow state. Workflow guards
live on the record itself so no caller can skip a transition.
"""

from datetime import time
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator
from django.core.validators import MinValueValidator
from django.core.validators import RegexValidator
from django.db import models
from django.db import transaction
from django.db.models import Count
from django.db.models import Q
from django.db.models import Sum
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from .calculator import calculate_gross
from .calculator import calculate_yearly_ctc
from .calculator import money
from .calculator import signed_adjustment
from .exceptions import InvalidStateError
from .exceptions import NegativeNetSalaryError
from .exceptions import PayrollValidationError
from .periods import MAX_YEAR
from .periods import MIN_YEAR
from .periods import PERIOD_RE
from .periods import days_in_month

ZERO = Decimal("0.00")


def _money_field(help_text="", **kwargs):
    kwargs.setdefault("default", ZERO)
    return models.DecimalField(
        max_digits=12, decimal_places=2, help_text=help_text, **kwargs
    )


def _percentage_field(default):
    return models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal(default),
        validators=[MinValueValidator(0), MaxValueValidator(100)],
    )


class PayrollGeneralSetting(models.Model):
    """Global payroll configuration (singleton pattern)."""

    class LopDayBasis(models.TextChoices):
        FIXED_DAY = "fixed_day", _("Fixed Day")
        ACTUAL_DAYS = "actual_days", _("Actual Days")

    currency = models.CharField(
        max_length=3, default="INR", help_text=_("ISO Currency Code")
    )
    lop_day_basis = models.CharField(
        max_length=20,
        choices=LopDayBasis.choices,
        default=LopDayBasis.FIXED_DAY,
        help_text=_("Divisor used to turn gross pay into a daily rate for LOP"),
    )
    fixed_day_divisor = models.PositiveSmallIntegerField(
        default=30,
        validators=[MinValueValidator(1), MaxValueValidator(31)],
        help_text=_("Days per month when the basis is fixed_day"),
    )
    minimum_basic_salary = _money_field(
        _("Lowest basic salary a structure may carry"), default=Decimal("5000.00")
    )
    assume_full_pay_without_attendance = models.BooleanField(
        default=True,
        help_text=_(
            "When a month has no attendance rows, treat it as fully paid "
            "(otherwise as fully unpaid)"
        ),
    )
    office_start = models.TimeField(
        default=time(9, 30), help_text=_("Check-ins after this time are late")
    )
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Payroll General Setting")
        verbose_name_plural = _("Payroll General Settings")

    def __str__(self):
        return f"Payroll Settings ({self.currency})"

    def save(self, *args, **kwargs):
        # Ensure only one settings object exists (singleton pattern)
        self.pk = 1
        super().save(*args, **kwargs)

    @classmethod
    def defaults_from_settings(cls) -> dict:
        conf = getattr(settings, "PAYROLL", {})
        hour, minute = (int(p) for p in conf.get("OFFICE_START", "09:30").split(":"))
        return {
            "currency": conf.get("CURRENCY", "INR"),
            "lop_day_basis": conf.get("LOP_DAY_BASIS", cls.LopDayBasis.FIXED_DAY),
            "fixed_day_divisor": int(conf.get("FIXED_DAY_DIVISOR", 30)),
            "minimum_basic_salary": money(conf.get("MINIMUM_BASIC_SALARY", "5000")),
            "assume_full_pay_without_attendance": conf.get(
                "ASSUME_FULL_PAY_WITHOUT_ATTENDANCE", True
            ),
            "office_start": time(hour, minute),
        }

    @classmethod
    def load(cls) -> "PayrollGeneralSetting":
        obj, _created = cls.objects.get_or_create(pk=1, defaults=cls.defaults_from_settings())
        return obj

    def days_basis(self, year: int, month: int) -> int:
        if self.lop_day_basis == self.LopDayBasis.ACTUAL_DAYS:
            return days_in_month(year, month)
        return self.fixed_day_divisor


class SalaryStructure(models.Model):
    """Monthly compensation for one employee."""

    employee = models.OneToOneField(
        "employees.Employee", on_delete=models.CASCADE, related_name="salary_structure"
    )
    basic_salary = _money_field(
        _("Basic monthly salary"), validators=[MinValueValidator(0)]
    )
    hra = _money_field(_("House rent allowance"), validators=[MinValueValidator(0)])
    da = _money_field(_("Dearness allowance"), validators=[MinValueValidator(0)])
    special_allowance = _money_field(validators=[MinValueValidator(0)])
    other_allowances = _money_field(validators=[MinValueValidator(0)])
    pf_percentage = _percentage_field("12.00")
    esi_percentage = _percentage_field("0.75")
    professional_tax = _money_field(
        _("Fixed monthly professional tax"),
        default=Decimal("200.00"),
        validators=[MinValueValidator(0)],
    )
    effective_from = models.DateField(default=timezone.localdate)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Salary Structure")
        verbose_name_plural = _("Salary Structures")

    def __str__(self):
        return f"Structure: {self.employee}"

    def clean(self):
        super().clean()
        minimum = PayrollGeneralSetting.load().minimum_basic_salary
        if self.basic_salary is not None and self.basic_salary < minimum:
            raise ValidationError(
                {"basic_salary": _("Basic salary must be at least %s.") % minimum}
            )

    @property
    def gross(self) -> Decimal:
        return calculate_gross(self).gross

    @property
    def yearly_ctc(self) -> Decimal:
        return calculate_yearly_ctc(self)


class PayrollRecordQuerySet(models.QuerySet):
    def for_period(self, period: str):
        return self.filter(month=period)

    def summary(self) -> dict:
        totals = self.aggregate(
            count=Count("id"),
            total_gross=Sum("gross"),
            total_deductions=Sum("total_deductions"),
            total_adjustments=Sum("total_adjustment"),
            total_net=Sum("net_salary"),
        )
        by_status = dict(
            self.order_by().values_list("status").annotate(n=Count("id"))
        )
        for key in ("total_gross", "total_deductions", "total_adjustments", "total_net"):
            totals[key] = totals[key] or ZERO
        totals["by_status"] = {
            status: by_status.get(status, 0) for status in PayrollRecord.Status.values
        }
        return totals


class PayrollRecord(models.Model):
    """One employee's payroll for one calendar month."""

    class Status(models.TextChoices):
        PENDING = "Pending", _("Pending")
        APPROVED = "Approved", _("Approved")
        PAID = "Paid", _("Paid")
        FAILED = "Failed", _("Failed")
        CANCELLED = "Cancelled", _("Cancelled")

    class PaymentMethod(models.TextChoices):
        BANK_TRANSFER = "Bank Transfer", _("Bank Transfer")
        CHEQUE = "Cheque", _("Cheque")
        CASH = "Cash", _("Cash")
        UPI = "UPI", _("UPI")

    employee = models.ForeignKey(
        "employees.Employee", on_delete=models.PROTECT, related_name="payroll_records"
    )
    month = models.CharField(
        max_length=7,
        validators=[RegexValidator(PERIOD_RE, _("Month must be YYYY-MM"))],
        help_text=_("Payroll month in YYYY-MM format"),
    )
    year = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(MIN_YEAR), MaxValueValidator(MAX_YEAR)]
    )

    # Earnings snapshot
    basic = _money_field()
    hra = _money_field()
    da = _money_field()
    special_allowance = _money_field()
    other_allowances = _money_field()
    gross = _money_field(_("Sum of all earning components"))

    # Deductions snapshot
    pf = _money_field()
    professional_tax = _money_field()
    esi = _money_field()
    lop_days = models.DecimalField(max_digits=5, decimal_places=2, default=ZERO)
    lop_deduction = _money_field()
    total_deductions = _money_field()

    total_adjustment = _money_field(_("Signed sum of adjustments"))
    net_salary = _money_field(_("Gross - deductions + adjustments"))

    status = models.CharField(
        max_length=20, choices=Status.choices, default=Status.PENDING, db_index=True
    )
    payment_method = models.CharField(
        max_length=20, choices=PaymentMethod.choices, default=PaymentMethod.BANK_TRANSFER
    )
    transaction_id = models.CharField(max_length=100, blank=True)

    processed_at = models.DateTimeField(default=timezone.now)
    processed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="processed_payroll_records",
    )
    approved_at = models.DateTimeField(null=True, blank=True)
    approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="approved_payroll_records",
    )
    paid_at = models.DateTimeField(null=True, blank=True)

    payslip_url = models.CharField(max_length=500, blank=True)
    payslip_path = models.CharField(max_length=255, blank=True)
    payslip_generated = models.BooleanField(default=False)
    payslip_generated_at = models.DateTimeField(null=True, blank=True)
    notification_sent = models.BooleanField(default=False)
    notification_sent_at = models.DateTimeField(null=True, blank=True)

    remarks = models.TextField(blank=True)
    failure_reason = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = PayrollRecordQuerySet.as_manager()

    class Meta:
        ordering = ["-month", "employee__employee_id"]
        verbose_name = _("Payroll Record")
        verbose_name_plural = _("Payroll Records")
        constraints = [
            models.UniqueConstraint(
                fields=["employee", "month"], name="unique_payroll_per_employee_month"
            ),
            models.CheckConstraint(
                condition=Q(net_salary__gte=0), name="payroll_net_salary_non_negative"
            ),
        ]

    def __str__(self):
        return f"{self.employee} - {self.month} ({self.status})"

    # -- construction -----------------------------------------------------

    def apply_breakdown(self, breakdown) -> None:
        """Copy a ``SalaryBreakdown`` onto the record's snapshot fields."""
        e, d = breakdown.earnings, breakdown.deductions
        self.basic, self.hra, self.da = e.basic, e.hra, e.da
        self.special_allowance, self.other_allowances = (
            e.special_allowance,
            e.other_allowances,
        )
        self.gross = e.gross
        self.pf, self.professional_tax, self.esi = d.pf, d.professional_tax, d.esi
        self.lop_days = breakdown.adjustments.lop_days
        self.lop_deduction = d.lop
        self.total_deductions = d.total
        self.net_salary = breakdown.net_salary

    def _require(self, *allowed: str) -> None:
        if self.status not in allowed:
            raise InvalidStateError(current=self.status, expected=" or ".join(allowed))

    # -- lifecycle --------------------------------------------------------

    def add_adjustment(self, adjustment_type, amount, description="", *, actor=None):
        """Attach an adjustment and recompute net pay, all or nothing."""
        self._require(self.Status.PENDING)
        amount = money(amount)
        if amount <= 0:
            msg = "Adjustment amount must be positive."
            raise PayrollValidationError(msg)
        if len(description or "") > PayrollAdjustment.DESCRIPTION_MAX_LENGTH:
            msg = "Adjustment description cannot exceed 200 characters."
            raise PayrollValidationError(msg)
        new_total = money(self.total_adjustment + signed_adjustment(adjustment_type, amount))
        new_net = money(self.gross - self.total_deductions + new_total)
        if new_net < 0:
            msg = f"Adjustment would make net salary negative ({new_net})."
            raise NegativeNetSalaryError(msg)

        with transaction.atomic():
            adjustment = PayrollAdjustment.objects.create(
                record=self,
                adjustment_type=adjustment_type,
                amount=amount,
                description=description or "",
                added_by=actor,
            )
            self.total_adjustment = new_total
            self.net_salary = new_net
            self.save(update_fields=["total_adjustment", "net_salary", "updated_at"])
        return adjustment

    def approve(self, *, actor=None):
        self._require(self.Status.PENDING)
        self.status = self.Status.APPROVED
        self.approved_at = timezone.now()
        self.approved_by = actor
        self.save(update_fields=["status", "approved_at", "approved_by", "updated_at"])

    def revoke(self):
        self._require(self.Status.APPROVED)
        self.status = self.Status.PENDING
        self.approved_at = None
        self.approved_by = None
        self.save(update_fields=["status", "approved_at", "approved_by", "updated_at"])

    def mark_paid(self, transaction_id: str, *, payslip_url="", payslip_path=""):
        self._require(self.Status.APPROVED)
        now = timezone.now()
        self.status = self.Status.PAID
        self.paid_at = now
        self.transaction_id = transaction_id
        fields = ["status", "paid_at", "transaction_id", "updated_at"]
        if payslip_url:
            self.payslip_url = payslip_url
            self.payslip_path = payslip_path
            self.payslip_generated = True
            self.payslip_generated_at = now
            fields += [
                "payslip_url",
                "payslip_path",
                "payslip_generated",
                "payslip_generated_at",
            ]
        self.save(update_fields=fields)

    def mark_failed(self, reason: str):
        self._require(self.Status.PENDING, self.Status.APPROVED)
        self.status = self.Status.FAILED
        self.failure_reason = reason
        self.save(update_fields=["status", "failure_reason", "updated_at"])

    def cancel(self, reason: str = ""):
        self._require(self.Status.PENDING)
        self.status = self.Status.CANCELLED
        self.remarks = reason or self.remarks
        self.save(update_fields=["status", "remarks", "updated_at"])

    def mark_notified(self):
        self.notification_sent = True
        self.notification_sent_at = timezone.now()
        self.save(update_fields=["notification_sent", "notification_sent_at", "updated_at"])

    # -- payment rollback support ----------------------------------------

    PAYMENT_STATE_FIELDS = (
        "status",
        "paid_at",
        "transaction_id",
        "payslip_url",
        "payslip_path",
        "payslip_generated",
        "payslip_generated_at",
        "notification_sent",
        "notification_sent_at",
    )

    def payment_state(self) -> dict:
        return {name: getattr(self, name) for name in self.PAYMENT_STATE_FIELDS}

    def restore_payment_state(self, state: dict) -> None:
        for name, value in state.items():
            setattr(self, name, value)
        self.save(update_fields=[*state.keys(), "updated_at"])

    def summary(self) -> dict:
        return {
            "employee_id": self.employee.employee_id,
            "month": self.month,
            "gross": self.gross,
            "deductions": self.total_deductions,
            "adjustments": self.total_adjustment,
            "net_salary": self.net_salary,
            "status": self.status,
        }


class PayrollAdjustment(models.Model):
    """An ad hoc addition to or subtraction from one record's net pay."""

    DESCRIPTION_MAX_LENGTH = 200

    class Type(models.TextChoices):
        BONUS = "Bonus", _("Bonus")
        PENALTY = "Penalty", _("Penalty")
        ALLOWANCE = "Allowance", _("Allowance")
        DEDUCTION = "Deduction", _("Deduction")
        REIMBURSEMENT = "Reimbursement", _("Reimbursement")
        RECOVERY = "Recovery", _("Recovery")

    record = models.ForeignKey(
        PayrollRecord, on_delete=models.CASCADE, related_name="adjustments"
    )
    adjustment_type = models.CharField(max_length=20, choices=Type.choices)
    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
        help_text=_("Unsigned magnitude; the type decides the sign"),
    )
    description = models.CharField(max_length=DESCRIPTION_MAX_LENGTH, blank=True)
    added_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="payroll_adjustments",
    )
    added_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["added_at", "id"]

    def __str__(self):
        return f"{self.adjustment_type} {self.amount} on {self.record_id}"

    @property
    def signed_amount(self) -> Decimal:
        return signed_adjustment(self.adjustment_type, self.amount)
