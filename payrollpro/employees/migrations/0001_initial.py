import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Employee",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("employee_id", models.CharField(blank=True, max_length=50, unique=True)),
                ("phone", models.CharField(blank=True, max_length=20)),
                ("department", models.CharField(choices=[("Engineering", "Engineering"), ("Sales", "Sales"), ("Marketing", "Marketing"), ("HR", "HR"), ("Finance", "Finance"), ("Operations", "Operations")], max_length=20)),
                ("designation", models.CharField(max_length=150)),
                ("date_of_joining", models.DateField(default=django.utils.timezone.localdate)),
                ("status", models.CharField(choices=[("Active", "Active"), ("Inactive", "Inactive"), ("Terminated", "Terminated"), ("Resigned", "Resigned")], db_index=True, default="Active", max_length=20)),
                ("pan_number", models.CharField(blank=True, max_length=10)),
                ("is_deleted", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("user", models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name="employee", to=settings.AUTH_USER_MODEL)),
            ],
            options={"ordering": ["employee_id"]},
        ),
        migrations.CreateModel(
            name="BankDetail",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("account_number", models.CharField(max_length=34)),
                ("account_holder_name", models.CharField(max_length=150)),
                ("ifsc_code", models.CharField(max_length=11, validators=[django.core.validators.RegexValidator(message="Enter a valid IFSC code.", regex="^[A-Z]{4}0[A-Z0-9]{6}$")])),
                ("bank_name", models.CharField(max_length=150)),
                ("branch", models.CharField(blank=True, max_length=150)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("employee", models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name="bank_detail", to="employees.employee")),
            ],
        ),
    ]
