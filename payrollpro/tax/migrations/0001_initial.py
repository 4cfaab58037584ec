import django.core.validators
import django.db.models.deletion
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models

AMOUNT = {"decimal_places": 2, "default": Decimal("0.00"), "max_digits": 12}
NON_NEGATIVE = [django.core.validators.MinValueValidator(0)]


def capped(limit):
    return [
        django.core.validators.MinValueValidator(0),
        django.core.validators.MaxValueValidator(Decimal(limit)),
    ]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("employees", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="TaxDeclaration",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("financial_year", models.CharField(max_length=7, validators=[django.core.validators.RegexValidator("^\\d{4}-\\d{2}$", "Use the YYYY-YY format")])),
                ("lic", models.DecimalField(validators=NON_NEGATIVE, **AMOUNT)),
                ("ppf", models.DecimalField(validators=NON_NEGATIVE, **AMOUNT)),
                ("elss", models.DecimalField(validators=NON_NEGATIVE, **AMOUNT)),
                ("home_loan_principal", models.DecimalField(validators=NON_NEGATIVE, **AMOUNT)),
                ("nsc", models.DecimalField(validators=NON_NEGATIVE, **AMOUNT)),
                ("fixed_deposit", models.DecimalField(validators=NON_NEGATIVE, **AMOUNT)),
                ("tuition_fees", models.DecimalField(validators=NON_NEGATIVE, **AMOUNT)),
                ("section_80c_total", models.DecimalField(help_text="Capped 80C total", validators=NON_NEGATIVE, **AMOUNT)),
                ("medical_self_and_family", models.DecimalField(validators=capped("25000"), **AMOUNT)),
                ("medical_parents", models.DecimalField(validators=capped("25000"), **AMOUNT)),
                ("section_80d_total", models.DecimalField(validators=NON_NEGATIVE, **AMOUNT)),
                ("rent_paid", models.DecimalField(help_text="Annual rent paid", validators=NON_NEGATIVE, **AMOUNT)),
                ("landlord_name", models.CharField(blank=True, max_length=150)),
                ("landlord_pan", models.CharField(blank=True, max_length=10)),
                ("landlord_address", models.CharField(blank=True, max_length=255)),
                ("is_metro", models.BooleanField(default=False)),
                ("home_loan_interest", models.DecimalField(help_text="Section 24", validators=NON_NEGATIVE, **AMOUNT)),
                ("nps", models.DecimalField(help_text="Section 80CCD(1B)", validators=capped("50000"), **AMOUNT)),
                ("education_loan_interest", models.DecimalField(help_text="Section 80E", validators=NON_NEGATIVE, **AMOUNT)),
                ("status", models.CharField(choices=[("Draft", "Draft"), ("Submitted", "Submitted"), ("Verified", "Verified"), ("Rejected", "Rejected")], db_index=True, default="Draft", max_length=20)),
                ("submitted_at", models.DateTimeField(blank=True, null=True)),
                ("verified_at", models.DateTimeField(blank=True, null=True)),
                ("remarks", models.TextField(blank=True)),
                ("total_deductions", models.DecimalField(validators=NON_NEGATIVE, **AMOUNT)),
                ("estimated_tax_savings", models.DecimalField(validators=NON_NEGATIVE, **AMOUNT)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("employee", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="tax_declarations", to="employees.employee")),
                ("verified_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="verified_tax_declarations", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-financial_year", "-submitted_at"],
                "constraints": [models.UniqueConstraint(fields=("employee", "financial_year"), name="unique_tax_declaration_per_year")],
            },
        ),
    ]
