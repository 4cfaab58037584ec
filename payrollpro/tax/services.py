"""Tax declaration workflow and per-employee estimates."""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal

from django.db import transaction
from django.utils import timezone

from payrollpro.audit.utils import log_action
from payrollpro.notifications.models import Notification
from payrollpro.notifications.services import notify_admins
from payrollpro.notifications.services import notify_user
from payrollpro.payroll.exceptions import InvalidStateError
from payrollpro.payroll.exceptions import PayrollValidationError
from payrollpro.payroll.exceptions import RecordNotFound
from payrollpro.payroll.models import SalaryStructure

from .calculator import Declarations
from .calculator import calculate_tds
from .calculator import validate_declarations
from .models import SECTION_80C_FIELDS
from .models import TaxDeclaration

logger = logging.getLogger(__name__)

FINANCIAL_YEAR_START_MONTH = 4

EDITABLE_FIELDS = (
    *SECTION_80C_FIELDS,
    "medical_self_and_family",
    "medical_parents",
    "rent_paid",
    "landlord_name",
    "landlord_pan",
    "landlord_address",
    "is_metro",
    "home_loan_interest",
    "nps",
    "education_loan_interest",
)


def current_financial_year(today: date | None = None) -> str:
    """``"2024-25"`` for any date from April 2024 to March 2025."""
    today = today or timezone.localdate()
    start = today.year if today.month >= FINANCIAL_YEAR_START_MONTH else today.year - 1
    return f"{start}-{str(start + 1)[-2:]}"


def annual_pay(employee) -> tuple[Decimal, Decimal, Decimal]:
    """``(gross, basic, hra)`` per year from the salary structure, zeros if none."""
    try:
        structure = employee.salary_structure
    except SalaryStructure.DoesNotExist:
        zero = Decimal("0.00")
        return zero, zero, zero
    return structure.yearly_ctc, structure.basic_salary * 12, structure.hra * 12


def estimate_for_employee(employee, payload: dict | None = None):
    """Tax estimate on the employee's annual pay.

    With a ``payload`` the declarations are read from it (what-if preview);
    without one the saved declaration for the current year is used.
    """
    gross, basic, hra = annual_pay(employee)
    if payload:
        payload = dict(payload)
        if payload.get("hra"):
            payload["hra"] = {"basic_salary": basic, "hra_received": hra, **payload["hra"]}
        declarations = Declarations.from_payload(payload)
    else:
        saved = TaxDeclaration.objects.filter(
            employee=employee, financial_year=current_financial_year()
        ).first()
        declarations = (
            saved.to_declarations(basic_salary=basic, hra_received=hra)
            if saved
            else Declarations()
        )
    return calculate_tds(gross, declarations)


def _get_declaration(declaration_id: int, *, lock=False) -> TaxDeclaration:
    qs = TaxDeclaration.objects.select_related("employee__user")
    if lock:
        qs = qs.select_for_update()
    try:
        return qs.get(pk=declaration_id)
    except TaxDeclaration.DoesNotExist:
        msg = f"Tax declaration {declaration_id} not found."
        raise RecordNotFound(msg) from None


@transaction.atomic
def submit_declaration(
    employee,
    data: dict,
    *,
    financial_year: str | None = None,
    submit: bool = True,
    actor=None,
) -> TaxDeclaration:
    """Create or update the employee's declaration; optionally submit it.

    Verified declarations are frozen. Limit breaches are rejected before
    anything is written.
    """
    financial_year = financial_year or current_financial_year()
    declaration, _created = TaxDeclaration.objects.select_for_update().get_or_create(
        employee=employee, financial_year=financial_year
    )
    if declaration.status in {
        TaxDeclaration.Status.SUBMITTED,
        TaxDeclaration.Status.VERIFIED,
    }:
        raise InvalidStateError(
            "Declaration can no longer be edited", current=declaration.status
        )
    for name in EDITABLE_FIELDS:
        if name in data:
            setattr(declaration, name, data[name])

    gross, basic, hra = annual_pay(employee)
    declarations = declaration.to_declarations(basic_salary=basic, hra_received=hra)
    errors = validate_declarations(declarations)
    if errors:
        raise PayrollValidationError("; ".join(errors))

    baseline = calculate_tds(gross).final_tax
    with_declarations = calculate_tds(gross, declarations).final_tax
    declaration.estimated_tax_savings = max(Decimal("0.00"), baseline - with_declarations)
    declaration.save()

    if submit:
        declaration.submit()
        notify_admins(
            "Tax Declaration Submitted",
            (
                f"{employee.full_name} submitted a tax declaration for "
                f"{financial_year}"
            ),
            Notification.Type.DECLARATION,
            link=f"/tax/declarations/{declaration.pk}/",
        )
    log_action(
        "tax_declaration_submitted" if submit else "tax_declaration_saved",
        actor=actor,
        model_name="tax.TaxDeclaration",
        record_id=declaration.pk,
        after={"status": declaration.status, "total_deductions": declaration.total_deductions},
    )
    return declaration


@transaction.atomic
def verify(declaration_id: int, *, actor=None) -> TaxDeclaration:
    declaration = _get_declaration(declaration_id, lock=True)
    declaration.verify(actor=actor)
    log_action(
        "tax_declaration_verified",
        actor=actor,
        model_name="tax.TaxDeclaration",
        record_id=declaration.pk,
        before={"status": TaxDeclaration.Status.SUBMITTED},
        after={"status": declaration.status},
    )
    notify_user(
        declaration.employee.user,
        "Tax Declaration Verified",
        f"Your tax declaration for {declaration.financial_year} has been verified",
        Notification.Type.DECLARATION,
    )
    return declaration


@transaction.atomic
def reject(declaration_id: int, *, remarks: str, actor=None) -> TaxDeclaration:
    if not (remarks or "").strip():
        msg = "Remarks are required when rejecting a declaration."
        raise PayrollValidationError(msg)
    declaration = _get_declaration(declaration_id, lock=True)
    declaration.reject(remarks, actor=actor)
    log_action(
        "tax_declaration_rejected",
        actor=actor,
        model_name="tax.TaxDeclaration",
        record_id=declaration.pk,
        before={"status": TaxDeclaration.Status.SUBMITTED},
        after={"status": declaration.status, "remarks": remarks},
    )
    notify_user(
        declaration.employee.user,
        "Tax Declaration Rejected",
        (
            f"Your tax declaration for {declaration.financial_year} was rejected: "
            f"{remarks}"
        ),
        Notification.Type.DECLARATION,
    )
    return declaration
