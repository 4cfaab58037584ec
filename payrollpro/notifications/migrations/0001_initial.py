import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Notification",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("title", models.CharField(max_length=255)),
                ("message", models.TextField()),
                ("notification_type", models.CharField(choices=[("payslip_ready", "Payslip Ready"), ("payment_success", "Payment Success"), ("payroll_processed", "Payroll Processed"), ("payroll_approved", "Payroll Approved"), ("leave_request", "Leave Request"), ("leave_approved", "Leave Approved"), ("leave_rejected", "Leave Rejected"), ("declaration", "Tax Declaration"), ("system_alert", "System Alert")], default="system_alert", max_length=50)),
                ("is_read", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("related_link", models.CharField(blank=True, default="", max_length=500)),
                ("recipient", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="notifications", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-created_at", "-id"],
                "indexes": [models.Index(fields=["recipient", "is_read"], name="notification_unread_idx")],
            },
        ),
    ]
