from django.conf import settings
from django.core.validators import RegexValidator
from django.db import models
from django.db import transaction
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

EMPLOYEE_ID_START = 1001

ifsc_validator = RegexValidator(
    regex=r"^[A-Z]{4}0[A-Z0-9]{6}$",
    message=_("Enter a valid IFSC code."),
)


class EmployeeQuerySet(models.QuerySet):
    def active(self):
        """Employees eligible for payroll: status Active and not soft-deleted."""
        return self.filter(status=Employee.Status.ACTIVE, is_deleted=False)


class Employee(models.Model):
    class Department(models.TextChoices):
        ENGINEERING = "Engineering", _("Engineering")
        SALES = "Sales", _("Sales")
        MARKETING = "Marketing", _("Marketing")
        HR = "HR", _("HR")
        FINANCE = "Finance", _("Finance")
        OPERATIONS = "Operations", _("Operations")

    class Status(models.TextChoices):
        ACTIVE = "Active", _("Active")
        INACTIVE = "Inactive", _("Inactive")
        TERMINATED = "Terminated", _("Terminated")
        RESIGNED = "Resigned", _("Resigned")

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="employee"
    )
    employee_id = models.CharField(max_length=50, unique=True, blank=True)
    phone = models.CharField(max_length=20, blank=True)
    department = models.CharField(max_length=20, choices=Department.choices)
    designation = models.CharField(max_length=150)
    date_of_joining = models.DateField(default=timezone.localdate)
    status = models.CharField(
        max_length=20, choices=Status.choices, default=Status.ACTIVE, db_index=True
    )
    pan_number = models.CharField(max_length=10, blank=True)
    is_deleted = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = EmployeeQuerySet.as_manager()

    class Meta:
        ordering = ["employee_id"]

    def __str__(self):  # pragma: no cover - trivial
        return f"{self.employee_id} {self.full_name}"

    @property
    def full_name(self) -> str:
        return self.user.display_name

    @property
    def email(self) -> str:
        return self.user.email

    @property
    def is_payroll_eligible(self) -> bool:
        return self.status == self.Status.ACTIVE and not self.is_deleted

    def save(self, *args, **kwargs):
        if self.employee_id:
            return super().save(*args, **kwargs)
        with transaction.atomic():
            self.employee_id = self.next_employee_id(
                self.department, self.date_of_joining
            )
            return super().save(*args, **kwargs)

    @classmethod
    def next_employee_id(cls, department: str, joined=None) -> str:
        """``<DEPT3>-<YEAR>-<SEQ>`` with SEQ counted per department and year."""
        year = (joined or timezone.localdate()).year
        prefix = f"{department[:3].upper()}-{year}-"
        last = (
            cls.objects.select_for_update()
            .filter(employee_id__startswith=prefix)
            .order_by("-employee_id")
            .values_list("employee_id", flat=True)
            .first()
        )
        seq = int(last.rsplit("-", 1)[1]) + 1 if last else EMPLOYEE_ID_START
        return f"{prefix}{seq}"

    def soft_delete(self):
        self.is_deleted = True
        self.status = self.Status.INACTIVE
        self.save(update_fields=["is_deleted", "status", "updated_at"])


class BankDetail(models.Model):
    employee = models.OneToOneField(
        Employee, on_delete=models.CASCADE, related_name="bank_detail"
    )
    account_number = models.CharField(max_length=34)
    account_holder_name = models.CharField(max_length=150)
    ifsc_code = models.CharField(max_length=11, validators=[ifsc_validator])
    bank_name = models.CharField(max_length=150)
    branch = models.CharField(max_length=150, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):  # pragma: no cover
        return f"BankDetail({self.employee_id}:{self.masked_account_number})"

    @property
    def masked_account_number(self) -> str:
        if not self.account_number:
            return ""
        return f"****{self.account_number[-4:]}"
