from django.conf import settings
from django.db import models
from django.utils.translation import gettext_lazy as _


class Notification(models.Model):
    class Type(models.TextChoices):
        PAYSLIP_READY = "payslip_ready", _("Payslip Ready")
        PAYMENT_SUCCESS = "payment_success", _("Payment Success")
        PAYROLL_PROCESSED = "payroll_processed", _("Payroll Processed")
        PAYROLL_APPROVED = "payroll_approved", _("Payroll Approved")
        LEAVE_REQUEST = "leave_request", _("Leave Request")
        LEAVE_APPROVED = "leave_approved", _("Leave Approved")
        LEAVE_REJECTED = "leave_rejected", _("Leave Rejected")
        DECLARATION = "declaration", _("Tax Declaration")
        SYSTEM_ALERT = "system_alert", _("System Alert")

    recipient = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="notifications"
    )
    title = models.CharField(max_length=255)
    message = models.TextField()
    notification_type = models.CharField(
        max_length=50, choices=Type.choices, default=Type.SYSTEM_ALERT
    )
    is_read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    related_link = models.CharField(max_length=500, blank=True, default="")

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [models.Index(fields=["recipient", "is_read"], name="notification_unread_idx")]

    def __str__(self):
        return f"{self.title} - {self.recipient}"
