from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from payrollpro.payroll.exceptions import InvalidStateError

# Yearly allocation per leave type; LOP and parental leave are unbounded.
LEAVE_ALLOCATIONS = {
    "Casual": Decimal("12"),
    "Sick": Decimal("12"),
    "Earned": Decimal("18"),
}


class LeaveRequest(models.Model):
    class Type(models.TextChoices):
        CASUAL = "Casual", _("Casual")
        SICK = "Sick", _("Sick")
        EARNED = "Earned", _("Earned")
        LOP = "LOP", _("Loss of Pay")
        MATERNITY = "Maternity", _("Maternity")
        PATERNITY = "Paternity", _("Paternity")

    class Status(models.TextChoices):
        PENDING = "Pending", _("Pending")
        APPROVED = "Approved", _("Approved")
        REJECTED = "Rejected", _("Rejected")

    employee = models.ForeignKey(
        "employees.Employee",
        on_delete=models.CASCADE,
        related_name="leave_requests",
    )
    leave_type = models.CharField(max_length=20, choices=Type.choices)
    start_date = models.DateField()
    end_date = models.DateField()
    total_days = models.DecimalField(
        max_digits=5,
        decimal_places=1,
        validators=[MinValueValidator(Decimal("0.5"))],
        help_text=_("Defaults to the inclusive day count of the range"),
    )
    reason = models.CharField(max_length=500)
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
        db_index=True,
    )
    approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="decided_leave_requests",
    )
    approved_at = models.DateTimeField(null=True, blank=True)
    rejection_reason = models.CharField(max_length=500, blank=True)
    remarks = models.CharField(max_length=500, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["employee", "status"], name="leave_employee_status_idx"),
            models.Index(fields=["start_date", "end_date"], name="leave_date_range_idx"),
        ]

    def __str__(self):
        return f"{self.employee} - {self.leave_type} ({self.start_date})"

    def clean(self):
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValidationError(_("Start date cannot be after end date."))

    def save(self, *args, **kwargs):
        if not self.total_days and self.start_date and self.end_date:
            self.total_days = Decimal((self.end_date - self.start_date).days + 1)
        super().save(*args, **kwargs)

    def approve(self, *, actor=None, remarks: str = ""):
        if self.status != self.Status.PENDING:
            msg = "Only pending leaves can be approved"
            raise InvalidStateError(msg, current=self.status)
        self.status = self.Status.APPROVED
        self.approved_by = actor
        self.approved_at = timezone.now()
        self.remarks = remarks
        self.save()

    def reject(self, reason: str, *, actor=None):
        if self.status != self.Status.PENDING:
            msg = "Only pending leaves can be rejected"
            raise InvalidStateError(msg, current=self.status)
        self.status = self.Status.REJECTED
        self.approved_by = actor
        self.approved_at = timezone.now()
        self.rejection_reason = reason
        self.save()
