import django.db.models.deletion
from decimal import Decimal
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("employees", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Attendance",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("date", models.DateField()),
                ("status", models.CharField(choices=[("Present", "Present"), ("Absent", "Absent"), ("Half-Day", "Half-Day"), ("Leave", "Leave"), ("Holiday", "Holiday"), ("Weekend", "Weekend")], default="Absent", max_length=16)),
                ("check_in", models.DateTimeField(blank=True, null=True)),
                ("check_in_location", models.CharField(blank=True, max_length=255)),
                ("check_out", models.DateTimeField(blank=True, null=True)),
                ("check_out_location", models.CharField(blank=True, max_length=255)),
                ("work_hours", models.DecimalField(decimal_places=2, default=Decimal("0"), max_digits=5)),
                ("is_late", models.BooleanField(default=False)),
                ("late_minutes", models.PositiveIntegerField(default=0)),
                ("notes", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("employee", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="attendances", to="employees.employee")),
            ],
            options={
                "ordering": ["-date"],
                "constraints": [models.UniqueConstraint(fields=("employee", "date"), name="unique_attendance_per_day")],
            },
        ),
    ]
