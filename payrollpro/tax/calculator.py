"""Income tax estimation (new regime slabs).

Stateless: the same functions serve "what-if" previews built from request
payloads and the official figure computed from a stored declaration.
"""

from __future__ import annotations

from dataclasses import asdict
from dataclasses import dataclass
from dataclasses import field
from dataclasses import fields
from decimal import Decimal

from payrollpro.payroll.calculator import money
from payrollpro.payroll.exceptions import PayrollValidationError

ZERO = Decimal("0.00")

# (upper bound of the slab, rate in percent); None means unbounded.
TAX_SLABS: tuple[tuple[Decimal | None, Decimal], ...] = (
    (Decimal("300000"), Decimal("0")),
    (Decimal("700000"), Decimal("5")),
    (Decimal("1000000"), Decimal("10")),
    (Decimal("1200000"), Decimal("15")),
    (Decimal("1500000"), Decimal("20")),
    (None, Decimal("30")),
)

STANDARD_DEDUCTION = Decimal("50000")
SECTION_80C_LIMIT = Decimal("150000")
SECTION_80D_SELF_LIMIT = Decimal("25000")
SECTION_80D_PARENTS_LIMIT = Decimal("25000")
HOME_LOAN_INTEREST_LIMIT = Decimal("200000")
NPS_LIMIT = Decimal("50000")
CESS_RATE = Decimal("0.04")
REBATE_INCOME_LIMIT = Decimal("700000")
REBATE_LIMIT = Decimal("25000")
LANDLORD_PAN_RENT_THRESHOLD = Decimal("100000")

METRO_HRA_SHARE = Decimal("0.5")
NON_METRO_HRA_SHARE = Decimal("0.4")
RENT_BASIC_OFFSET = Decimal("0.1")


def _amount(data: dict, key: str) -> Decimal:
    value = money(data.get(key))
    if value < 0:
        msg = f"{key} cannot be negative."
        raise PayrollValidationError(msg)
    return value


@dataclass(frozen=True)
class Section80C:
    lic: Decimal = ZERO
    ppf: Decimal = ZERO
    elss: Decimal = ZERO
    home_loan_principal: Decimal = ZERO
    nsc: Decimal = ZERO
    fixed_deposit: Decimal = ZERO
    tuition_fees: Decimal = ZERO

    @property
    def declared(self) -> Decimal:
        return money(sum((getattr(self, f.name) for f in fields(self)), ZERO))

    @property
    def allowed(self) -> Decimal:
        return min(self.declared, SECTION_80C_LIMIT)


@dataclass(frozen=True)
class Section80D:
    self_and_family: Decimal = ZERO
    parents: Decimal = ZERO

    @property
    def allowed(self) -> Decimal:
        return min(self.self_and_family, SECTION_80D_SELF_LIMIT) + min(
            self.parents, SECTION_80D_PARENTS_LIMIT
        )


@dataclass(frozen=True)
class HRADetails:
    """Annual figures; ``basic_salary`` and ``hra_received`` come from pay."""

    basic_salary: Decimal = ZERO
    hra_received: Decimal = ZERO
    rent_paid: Decimal = ZERO
    is_metro: bool = False
    landlord_name: str = ""
    landlord_pan: str = ""


@dataclass(frozen=True)
class HomeLoan:
    interest_paid: Decimal = ZERO


@dataclass(frozen=True)
class Declarations:
    section_80c: Section80C = field(default_factory=Section80C)
    section_80d: Section80D = field(default_factory=Section80D)
    hra: HRADetails | None = None
    home_loan: HomeLoan = field(default_factory=HomeLoan)
    nps: Decimal = ZERO
    education_loan_interest: Decimal = ZERO

    @classmethod
    def from_payload(cls, payload: dict | None) -> Declarations:
        """Build declarations from a request body; unknown keys are ignored."""
        payload = payload or {}
        c = payload.get("section_80c") or {}
        d = payload.get("section_80d") or {}
        h = payload.get("hra")
        loan = payload.get("home_loan") or {}
        hra = None
        if h:
            hra = HRADetails(
                basic_salary=_amount(h, "basic_salary"),
                hra_received=_amount(h, "hra_received"),
                rent_paid=_amount(h, "rent_paid"),
                is_metro=bool(h.get("is_metro", False)),
                landlord_name=h.get("landlord_name") or "",
                landlord_pan=h.get("landlord_pan") or "",
            )
        return cls(
            section_80c=Section80C(
                **{f.name: _amount(c, f.name) for f in fields(Section80C)}
            ),
            section_80d=Section80D(
                self_and_family=_amount(d, "self_and_family"),
                parents=_amount(d, "parents"),
            ),
            hra=hra,
            home_loan=HomeLoan(interest_paid=_amount(loan, "interest_paid")),
            nps=_amount(payload, "nps"),
            education_loan_interest=_amount(payload, "education_loan_interest"),
        )


@dataclass(frozen=True)
class DeductionBreakdown:
    standard_deduction: Decimal
    section_80c: Decimal
    section_80d: Decimal
    hra_exemption: Decimal
    home_loan_interest: Decimal
    nps: Decimal
    education_loan_interest: Decimal
    total: Decimal


@dataclass(frozen=True)
class TaxEstimate:
    gross_income: Decimal
    deductions: DeductionBreakdown
    taxable_income: Decimal
    tax_before_cess: Decimal
    cess: Decimal
    total_tax: Decimal
    rebate: Decimal
    final_tax: Decimal
    monthly_tds: Decimal
    effective_tax_rate: Decimal

    @property
    def annual_tds(self) -> Decimal:
        return self.final_tax

    def as_dict(self) -> dict:
        data = asdict(self)
        data["annual_tds"] = self.annual_tds
        return data


def calculate_hra_exemption(
    basic_salary, hra_received, rent_paid, *, is_metro: bool = False
) -> Decimal:
    """``min(HRA received, 50%/40% of basic, rent - 10% of basic)``, floored at 0."""
    basic, hra, rent = money(basic_salary), money(hra_received), money(rent_paid)
    if rent <= 0:
        return ZERO
    share = METRO_HRA_SHARE if is_metro else NON_METRO_HRA_SHARE
    exemption = min(
        hra,
        money(basic * share),
        max(ZERO, money(rent - basic * RENT_BASIC_OFFSET)),
    )
    return max(ZERO, exemption)


def apply_deductions(gross_income, declarations: Declarations | None = None):
    """Return ``(DeductionBreakdown, taxable_income)``."""
    declarations = declarations or Declarations()
    hra_exemption = ZERO
    if declarations.hra is not None:
        h = declarations.hra
        hra_exemption = calculate_hra_exemption(
            h.basic_salary, h.hra_received, h.rent_paid, is_metro=h.is_metro
        )
    parts = {
        "standard_deduction": STANDARD_DEDUCTION,
        "section_80c": declarations.section_80c.allowed,
        "section_80d": declarations.section_80d.allowed,
        "hra_exemption": hra_exemption,
        "home_loan_interest": min(
            declarations.home_loan.interest_paid, HOME_LOAN_INTEREST_LIMIT
        ),
        "nps": min(declarations.nps, NPS_LIMIT),
        "education_loan_interest": declarations.education_loan_interest,
    }
    parts = {key: money(value) for key, value in parts.items()}
    total = money(sum(parts.values(), ZERO))
    breakdown = DeductionBreakdown(total=total, **parts)
    taxable = max(ZERO, money(money(gross_income) - total))
    return breakdown, taxable


def slab_tax(taxable_income) -> Decimal:
    """Progressive tax: each slab's rate applies to the income inside it."""
    income = money(taxable_income)
    tax = ZERO
    lower = ZERO
    for upper, rate in TAX_SLABS:
        if income <= lower:
            break
        portion = income - lower if upper is None else min(income, upper) - lower
        tax += portion * rate / 100
        if upper is None:
            break
        lower = upper
    return money(tax)


def calculate_tds(annual_income, declarations: Declarations | None = None) -> TaxEstimate:
    gross = money(annual_income)
    if gross < 0:
        msg = "Annual income cannot be negative."
        raise PayrollValidationError(msg)
    deductions, taxable = apply_deductions(gross, declarations)
    tax_before_cess = slab_tax(taxable)
    cess = money(tax_before_cess * CESS_RATE)
    total_tax = money(tax_before_cess + cess)
    rebate = min(total_tax, REBATE_LIMIT) if taxable <= REBATE_INCOME_LIMIT else ZERO
    final_tax = max(ZERO, money(total_tax - rebate))
    effective_rate = money(final_tax / gross * 100) if taxable > 0 else ZERO
    return TaxEstimate(
        gross_income=gross,
        deductions=deductions,
        taxable_income=taxable,
        tax_before_cess=tax_before_cess,
        cess=cess,
        total_tax=total_tax,
        rebate=money(rebate),
        final_tax=final_tax,
        monthly_tds=money(final_tax / 12),
        effective_tax_rate=effective_rate,
    )


def estimate_tax(monthly_salary, declarations: Declarations | None = None) -> TaxEstimate:
    """Annualise a monthly gross salary and compute the tax on it."""
    return calculate_tds(money(monthly_salary) * 12, declarations)


def validate_declarations(declarations: Declarations) -> list[str]:
    """Human-readable limit breaches and missing landlord details."""
    errors: list[str] = []
    if declarations.section_80c.declared > SECTION_80C_LIMIT:
        errors.append("Section 80C total cannot exceed 1,50,000")
    if declarations.section_80d.self_and_family > SECTION_80D_SELF_LIMIT:
        errors.append("Section 80D (Self & Family) cannot exceed 25,000")
    if declarations.section_80d.parents > SECTION_80D_PARENTS_LIMIT:
        errors.append("Section 80D (Parents) cannot exceed 25,000")
    if declarations.nps > NPS_LIMIT:
        errors.append("NPS (80CCD(1B)) cannot exceed 50,000")
    hra = declarations.hra
    if hra is not None and hra.rent_paid > 0:
        if not hra.landlord_name:
            errors.append("Landlord name is required for HRA exemption")
        if hra.rent_paid > LANDLORD_PAN_RENT_THRESHOLD and not hra.landlord_pan:
            errors.append("Landlord PAN is required if annual rent exceeds 1,00,000")
    return errors
