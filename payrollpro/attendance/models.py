from datetime import datetime
from datetime import time
from decimal import ROUND_HALF_UP
from decimal import Decimal

from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

HALF_DAY_THRESHOLD_HOURS = Decimal("4")


class Attendance(models.Model):
    """One attendance row per employee and calendar day.

    ``work_hours``, ``is_late`` and ``late_minutes`` are derived from the
    check-in/check-out timestamps on save.
    """

    class Status(models.TextChoices):
        PRESENT = "Present", _("Present")
        ABSENT = "Absent", _("Absent")
        HALF_DAY = "Half-Day", _("Half-Day")
        LEAVE = "Leave", _("Leave")
        HOLIDAY = "Holiday", _("Holiday")
        WEEKEND = "Weekend", _("Weekend")

    employee = models.ForeignKey(
        "employees.Employee",
        on_delete=models.CASCADE,
        related_name="attendances",
    )
    date = models.DateField()
    status = models.CharField(
        max_length=16, choices=Status.choices, default=Status.ABSENT
    )
    check_in = models.DateTimeField(null=True, blank=True)
    check_in_location = models.CharField(max_length=255, blank=True)
    check_out = models.DateTimeField(null=True, blank=True)
    check_out_location = models.CharField(max_length=255, blank=True)
    work_hours = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal("0"))
    is_late = models.BooleanField(default=False)
    late_minutes = models.PositiveIntegerField(default=0)
    notes = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-date"]
        constraints = [
            models.UniqueConstraint(
                fields=["employee", "date"], name="unique_attendance_per_day"
            )
        ]

    def __str__(self) -> str:  # pragma: no cover - simple repr
        return f"Attendance({self.employee_id}@{self.date}: {self.status})"

    def apply_lateness(self, office_start: time) -> None:
        if not self.check_in:
            return
        local = timezone.localtime(self.check_in)
        late_by = datetime.combine(local.date(), local.time()) - datetime.combine(
            local.date(), office_start
        )
        minutes = int(late_by.total_seconds() // 60)
        self.is_late = minutes > 0
        self.late_minutes = max(0, minutes)

    def compute_work_hours(self) -> None:
        if not (self.check_in and self.check_out):
            return
        seconds = max(0, (self.check_out - self.check_in).total_seconds())
        self.work_hours = (Decimal(seconds) / Decimal(3600)).quantize(
            Decimal("0.01"), rounding=ROUND_HALF_UP
        )
        if self.status == self.Status.ABSENT:
            self.status = (
                self.Status.PRESENT
                if self.work_hours >= HALF_DAY_THRESHOLD_HOURS
                else self.Status.HALF_DAY
            )

    def save(self, *args, **kwargs):
        self.compute_work_hours()
        update_fields = kwargs.get("update_fields")
        if update_fields is not None:
            kwargs["update_fields"] = {
                *update_fields,
                "work_hours",
                "status",
                "updated_at",
            }
        super().save(*args, **kwargs)
