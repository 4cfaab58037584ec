import datetime
import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models

MONEY = {"decimal_places": 2, "default": Decimal("0.00"), "max_digits": 12}
NON_NEGATIVE = [django.core.validators.MinValueValidator(0)]
PERCENTAGE = [
    django.core.validators.MinValueValidator(0),
    django.core.validators.MaxValueValidator(100),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("employees", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="PayrollGeneralSetting",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("currency", models.CharField(default="INR", help_text="ISO Currency Code", max_length=3)),
                ("lop_day_basis", models.CharField(choices=[("fixed_day", "Fixed Day"), ("actual_days", "Actual Days")], default="fixed_day", help_text="Divisor used to turn gross pay into a daily rate for LOP", max_length=20)),
                ("fixed_day_divisor", models.PositiveSmallIntegerField(default=30, help_text="Days per month when the basis is fixed_day", validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(31)])),
                ("minimum_basic_salary", models.DecimalField(decimal_places=2, default=Decimal("5000.00"), help_text="Lowest basic salary a structure may carry", max_digits=12)),
                ("assume_full_pay_without_attendance", models.BooleanField(default=True, help_text="When a month has no attendance rows, treat it as fully paid (otherwise as fully unpaid)")),
                ("office_start", models.TimeField(default=datetime.time(9, 30), help_text="Check-ins after this time are late")),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Payroll General Setting",
                "verbose_name_plural": "Payroll General Settings",
            },
        ),
        migrations.CreateModel(
            name="SalaryStructure",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("basic_salary", models.DecimalField(help_text="Basic monthly salary", validators=NON_NEGATIVE, **MONEY)),
                ("hra", models.DecimalField(help_text="House rent allowance", validators=NON_NEGATIVE, **MONEY)),
                ("da", models.DecimalField(help_text="Dearness allowance", validators=NON_NEGATIVE, **MONEY)),
                ("special_allowance", models.DecimalField(help_text="", validators=NON_NEGATIVE, **MONEY)),
                ("other_allowances", models.DecimalField(help_text="", validators=NON_NEGATIVE, **MONEY)),
                ("pf_percentage", models.DecimalField(decimal_places=2, default=Decimal("12.00"), max_digits=5, validators=PERCENTAGE)),
                ("esi_percentage", models.DecimalField(decimal_places=2, default=Decimal("0.75"), max_digits=5, validators=PERCENTAGE)),
                ("professional_tax", models.DecimalField(decimal_places=2, default=Decimal("200.00"), help_text="Fixed monthly professional tax", max_digits=12, validators=NON_NEGATIVE)),
                ("effective_from", models.DateField(default=django.utils.timezone.localdate)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("employee", models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name="salary_structure", to="employees.employee")),
            ],
            options={
                "verbose_name": "Salary Structure",
                "verbose_name_plural": "Salary Structures",
            },
        ),
        migrations.CreateModel(
            name="PayrollRecord",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("month", models.CharField(help_text="Payroll month in YYYY-MM format", max_length=7, validators=[django.core.validators.RegexValidator("^\\d{4}-(0[1-9]|1[0-2])$", "Month must be YYYY-MM")])),
                ("year", models.PositiveSmallIntegerField(validators=[django.core.validators.MinValueValidator(2020), django.core.validators.MaxValueValidator(2100)])),
                ("basic", models.DecimalField(help_text="", **MONEY)),
                ("hra", models.DecimalField(help_text="", **MONEY)),
                ("da", models.DecimalField(help_text="", **MONEY)),
                ("special_allowance", models.DecimalField(help_text="", **MONEY)),
                ("other_allowances", models.DecimalField(help_text="", **MONEY)),
                ("gross", models.DecimalField(help_text="Sum of all earning components", **MONEY)),
                ("pf", models.DecimalField(help_text="", **MONEY)),
                ("professional_tax", models.DecimalField(help_text="", **MONEY)),
                ("esi", models.DecimalField(help_text="", **MONEY)),
                ("lop_days", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=5)),
                ("lop_deduction", models.DecimalField(help_text="", **MONEY)),
                ("total_deductions", models.DecimalField(help_text="", **MONEY)),
                ("total_adjustment", models.DecimalField(help_text="Signed sum of adjustments", **MONEY)),
                ("net_salary", models.DecimalField(help_text="Gross - deductions + adjustments", **MONEY)),
                ("status", models.CharField(choices=[("Pending", "Pending"), ("Approved", "Approved"), ("Paid", "Paid"), ("Failed", "Failed"), ("Cancelled", "Cancelled")], db_index=True, default="Pending", max_length=20)),
                ("payment_method", models.CharField(choices=[("Bank Transfer", "Bank Transfer"), ("Cheque", "Cheque"), ("Cash", "Cash"), ("UPI", "UPI")], default="Bank Transfer", max_length=20)),
                ("transaction_id", models.CharField(blank=True, max_length=100)),
                ("processed_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("approved_at", models.DateTimeField(blank=True, null=True)),
                ("paid_at", models.DateTimeField(blank=True, null=True)),
                ("payslip_url", models.CharField(blank=True, max_length=500)),
                ("payslip_path", models.CharField(blank=True, max_length=255)),
                ("payslip_generated", models.BooleanField(default=False)),
                ("payslip_generated_at", models.DateTimeField(blank=True, null=True)),
                ("notification_sent", models.BooleanField(default=False)),
                ("notification_sent_at", models.DateTimeField(blank=True, null=True)),
                ("remarks", models.TextField(blank=True)),
                ("failure_reason", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("approved_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="approved_payroll_records", to=settings.AUTH_USER_MODEL)),
                ("employee", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="payroll_records", to="employees.employee")),
                ("processed_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="processed_payroll_records", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "verbose_name": "Payroll Record",
                "verbose_name_plural": "Payroll Records",
                "ordering": ["-month", "employee__employee_id"],
                "constraints": [
                    models.UniqueConstraint(fields=("employee", "month"), name="unique_payroll_per_employee_month"),
                    models.CheckConstraint(condition=models.Q(("net_salary__gte", 0)), name="payroll_net_salary_non_negative"),
                ],
            },
        ),
        migrations.CreateModel(
            name="PayrollAdjustment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("adjustment_type", models.CharField(choices=[("Bonus", "Bonus"), ("Penalty", "Penalty"), ("Allowance", "Allowance"), ("Deduction", "Deduction"), ("Reimbursement", "Reimbursement"), ("Recovery", "Recovery")], max_length=20)),
                ("amount", models.DecimalField(decimal_places=2, help_text="Unsigned magnitude; the type decides the sign", max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal("0.01"))])),
                ("description", models.CharField(blank=True, max_length=200)),
                ("added_at", models.DateTimeField(auto_now_add=True)),
                ("added_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="payroll_adjustments", to=settings.AUTH_USER_MODEL)),
                ("record", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="adjustments", to="payroll.payrollrecord")),
            ],
            options={"ordering": ["added_at", "id"]},
        ),
    ]
