from decimal import Decimal

from django.conf import settings
from django.core.validators import MaxValueValidator
from django.core.validators import MinValueValidator
from django.core.validators import RegexValidator
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from payrollpro.payroll.exceptions import InvalidStateError

from .calculator import NPS_LIMIT
from .calculator import SECTION_80D_PARENTS_LIMIT
from .calculator import SECTION_80D_SELF_LIMIT
from .calculator import Declarations
from .calculator import HomeLoan
from .calculator import HRADetails
from .calculator import Section80C
from .calculator import Section80D

FINANCIAL_YEAR_RE = r"^\d{4}-\d{2}$"
SECTION_80C_FIELDS = (
    "lic",
    "ppf",
    "elss",
    "home_loan_principal",
    "nsc",
    "fixed_deposit",
    "tuition_fees",
)


def _amount_field(**kwargs):
    kwargs.setdefault("default", Decimal("0.00"))
    kwargs.setdefault("validators", [MinValueValidator(0)])
    return models.DecimalField(max_digits=12, decimal_places=2, **kwargs)


class TaxDeclaration(models.Model):
    """An employee's tax-saving declaration for one financial year."""

    class Status(models.TextChoices):
        DRAFT = "Draft", _("Draft")
        SUBMITTED = "Submitted", _("Submitted")
        VERIFIED = "Verified", _("Verified")
        REJECTED = "Rejected", _("Rejected")

    employee = models.ForeignKey(
        "employees.Employee", on_delete=models.CASCADE, related_name="tax_declarations"
    )
    financial_year = models.CharField(
        max_length=7,
        validators=[RegexValidator(FINANCIAL_YEAR_RE, _("Use the YYYY-YY format"))],
    )

    # Section 80C
    lic = _amount_field()
    ppf = _amount_field()
    elss = _amount_field()
    home_loan_principal = _amount_field()
    nsc = _amount_field()
    fixed_deposit = _amount_field()
    tuition_fees = _amount_field()
    section_80c_total = _amount_field(help_text=_("Capped 80C total"))

    # Section 80D
    medical_self_and_family = _amount_field(
        validators=[MinValueValidator(0), MaxValueValidator(SECTION_80D_SELF_LIMIT)]
    )
    medical_parents = _amount_field(
        validators=[MinValueValidator(0), MaxValueValidator(SECTION_80D_PARENTS_LIMIT)]
    )
    section_80d_total = _amount_field()

    # HRA
    rent_paid = _amount_field(help_text=_("Annual rent paid"))
    landlord_name = models.CharField(max_length=150, blank=True)
    landlord_pan = models.CharField(max_length=10, blank=True)
    landlord_address = models.CharField(max_length=255, blank=True)
    is_metro = models.BooleanField(default=False)

    home_loan_interest = _amount_field(help_text=_("Section 24"))
    nps = _amount_field(
        validators=[MinValueValidator(0), MaxValueValidator(NPS_LIMIT)],
        help_text=_("Section 80CCD(1B)"),
    )
    education_loan_interest = _amount_field(help_text=_("Section 80E"))

    status = models.CharField(
        max_length=20, choices=Status.choices, default=Status.DRAFT, db_index=True
    )
    submitted_at = models.DateTimeField(null=True, blank=True)
    verified_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="verified_tax_declarations",
    )
    verified_at = models.DateTimeField(null=True, blank=True)
    remarks = models.TextField(blank=True)

    total_deductions = _amount_field()
    estimated_tax_savings = _amount_field()

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-financial_year", "-submitted_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["employee", "financial_year"],
                name="unique_tax_declaration_per_year",
            )
        ]

    def __str__(self):
        return f"{self.employee} {self.financial_year} ({self.status})"

    def to_declarations(self, *, basic_salary=None, hra_received=None) -> Declarations:
        """Calculator input; HRA needs the annual basic and HRA from pay."""
        hra = None
        if self.rent_paid:
            hra = HRADetails(
                basic_salary=basic_salary or Decimal("0.00"),
                hra_received=hra_received or Decimal("0.00"),
                rent_paid=self.rent_paid,
                is_metro=self.is_metro,
                landlord_name=self.landlord_name,
                landlord_pan=self.landlord_pan,
            )
        return Declarations(
            section_80c=Section80C(
                **{name: getattr(self, name) for name in SECTION_80C_FIELDS}
            ),
            section_80d=Section80D(
                self_and_family=self.medical_self_and_family,
                parents=self.medical_parents,
            ),
            hra=hra,
            home_loan=HomeLoan(interest_paid=self.home_loan_interest),
            nps=self.nps,
            education_loan_interest=self.education_loan_interest,
        )

    def compute_totals(self) -> None:
        declarations = self.to_declarations()
        self.section_80c_total = declarations.section_80c.allowed
        self.section_80d_total = declarations.section_80d.allowed
        self.total_deductions = (
            self.section_80c_total
            + self.section_80d_total
            + min(self.nps, NPS_LIMIT)
            + self.education_loan_interest
            + self.home_loan_interest
        )

    def save(self, *args, **kwargs):
        self.compute_totals()
        update_fields = kwargs.get("update_fields")
        if update_fields is not None:
            kwargs["update_fields"] = {
                *update_fields,
                "section_80c_total",
                "section_80d_total",
                "total_deductions",
                "updated_at",
            }
        super().save(*args, **kwargs)

    def _require(self, *allowed: str) -> None:
        if self.status not in allowed:
            raise InvalidStateError(current=self.status, expected=" or ".join(allowed))

    def submit(self):
        self._require(self.Status.DRAFT, self.Status.REJECTED)
        self.status = self.Status.SUBMITTED
        self.submitted_at = timezone.now()
        self.save(update_fields=["status", "submitted_at"])

    def verify(self, *, actor=None):
        self._require(self.Status.SUBMITTED)
        self.status = self.Status.VERIFIED
        self.verified_by = actor
        self.verified_at = timezone.now()
        self.save(update_fields=["status", "verified_by", "verified_at"])

    def reject(self, remarks: str, *, actor=None):
        self._require(self.Status.SUBMITTED)
        self.status = self.Status.REJECTED
        self.verified_by = actor
        self.verified_at = timezone.now()
        self.remarks = remarks
        self.save(update_fields=["status", "verified_by", "verified_at", "remarks"])
