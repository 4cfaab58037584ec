"""Salary computation.

Pure functions over a compensation structure: no database access, no
settings lookups. Every monetary field is quantized to two places with
ROUND_HALF_UP right after the operation that produced it, so intermediate
rounding matches what is printed on the payslip.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import asdict
from dataclasses import dataclass
from dataclasses import field
from decimal import ROUND_HALF_UP
from decimal import Decimal
from decimal import InvalidOperation

from .exceptions import NegativeNetSalaryError
from .exceptions import PayrollValidationError

TWO_PLACES = Decimal("0.01")
HUNDRED = Decimal("100")
FIXED_LOP_DIVISOR = 30

DEFAULT_PF_PERCENTAGE = Decimal("12")
DEFAULT_PROFESSIONAL_TAX = Decimal("200")
DEFAULT_ESI_PERCENTAGE = Decimal("0.75")

ALLOWANCE_FIELDS = ("hra", "da", "special_allowance", "other_allowances")

# Adjustment types that add to net pay; the rest subtract.
CREDIT_ADJUSTMENTS = frozenset({"Bonus", "Allowance", "Reimbursement"})
DEBIT_ADJUSTMENTS = frozenset({"Penalty", "Deduction", "Recovery"})


def money(value) -> Decimal:
    """Coerce ``value`` to a Decimal rounded half-up to two places."""
    if value is None or value == "":
        return Decimal("0.00")
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        msg = f"Not a valid amount: {value!r}"
        raise PayrollValidationError(msg) from exc
    return amount.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def _percentage_of(base: Decimal, percentage: Decimal) -> Decimal:
    return money(base * percentage / HUNDRED)


@dataclass(frozen=True)
class Earnings:
    basic: Decimal
    hra: Decimal
    da: Decimal
    special_allowance: Decimal
    other_allowances: Decimal
    gross: Decimal


@dataclass(frozen=True)
class Deductions:
    pf: Decimal
    professional_tax: Decimal
    esi: Decimal
    lop: Decimal
    total: Decimal


@dataclass(frozen=True)
class SalaryAdjustments:
    bonus: Decimal = Decimal("0.00")
    penalty: Decimal = Decimal("0.00")
    lop_days: Decimal = Decimal("0")

    @classmethod
    def coerce(cls, value) -> SalaryAdjustments:
        if value is None:
            return cls()
        if isinstance(value, cls):
            return value
        lop_days = Decimal(str(value.get("lop_days") or 0))
        if lop_days < 0:
            msg = "LOP days cannot be negative."
            raise PayrollValidationError(msg)
        return cls(
            bonus=money(value.get("bonus")),
            penalty=money(value.get("penalty")),
            lop_days=lop_days,
        )


@dataclass(frozen=True)
class SalaryBreakdown:
    earnings: Earnings
    deductions: Deductions
    adjustments: SalaryAdjustments = field(default_factory=SalaryAdjustments)
    net_salary: Decimal = Decimal("0.00")

    def as_dict(self) -> dict:
        return asdict(self)


def _component(structure, name: str, default=None):
    if isinstance(structure, dict):
        value = structure.get(name)
    else:
        value = getattr(structure, name, None)
    return default if value is None else value


def validate_salary_structure(structure, *, minimum_basic=None) -> None:
    """Raise ``PayrollValidationError`` listing every problem found."""
    errors: list[str] = []
    basic = _component(structure, "basic_salary")
    if basic is None or basic == "":
        errors.append("Basic salary is required.")
    elif money(basic) < 0:
        errors.append("Basic salary cannot be negative.")
    elif minimum_basic is not None and money(basic) < money(minimum_basic):
        errors.append(f"Basic salary must be at least {money(minimum_basic)}.")
    for name in (*ALLOWANCE_FIELDS, "professional_tax"):
        if money(_component(structure, name, 0)) < 0:
            errors.append(f"{name} cannot be negative.")
    for name in ("pf_percentage", "esi_percentage"):
        pct = _component(structure, name)
        if pct is not None and not (0 <= Decimal(str(pct)) <= HUNDRED):
            errors.append(f"{name} must be between 0 and 100.")
    if errors:
        raise PayrollValidationError(" ".join(errors))


def calculate_gross(structure) -> Earnings:
    basic = money(_component(structure, "basic_salary"))
    parts = {name: money(_component(structure, name, 0)) for name in ALLOWANCE_FIELDS}
    gross = basic
    for name in ALLOWANCE_FIELDS:
        gross = money(gross + parts[name])
    return Earnings(basic=basic, gross=gross, **parts)


def calculate_salary(
    structure,
    adjustments=None,
    *,
    days_basis: int = FIXED_LOP_DIVISOR,
) -> SalaryBreakdown:
    """Compute earnings, deductions and net pay for one period.

    ``adjustments`` is ``{"bonus", "penalty", "lop_days"}`` (or a
    ``SalaryAdjustments``). ``days_basis`` is the divisor turning gross
    into a daily rate for loss of pay.
    """
    validate_salary_structure(structure)
    adj = SalaryAdjustments.coerce(adjustments)
    if days_basis <= 0:
        msg = "LOP day basis must be positive."
        raise PayrollValidationError(msg)

    earnings = calculate_gross(structure)
    basic = earnings.basic

    pf = _percentage_of(
        basic, Decimal(str(_component(structure, "pf_percentage", DEFAULT_PF_PERCENTAGE)))
    )
    # PF is taken on basic. ESI is taken on gross so the worked payroll
    # figures (85000 gross, 637.50 ESI) reproduce.
    esi = _percentage_of(
        earnings.gross,
        Decimal(str(_component(structure, "esi_percentage", DEFAULT_ESI_PERCENTAGE))),
    )
    professional_tax = money(
        _component(structure, "professional_tax", DEFAULT_PROFESSIONAL_TAX)
    )
    lop = Decimal("0.00")
    if adj.lop_days > 0:
        lop = money(earnings.gross / Decimal(days_basis) * adj.lop_days)

    total = money(pf + professional_tax + esi + lop)
    deductions = Deductions(
        pf=pf, professional_tax=professional_tax, esi=esi, lop=lop, total=total
    )

    net = money(earnings.gross - total + adj.bonus - adj.penalty)
    if net < 0:
        msg = f"Net salary would be negative ({net})."
        raise NegativeNetSalaryError(msg)
    return SalaryBreakdown(
        earnings=earnings, deductions=deductions, adjustments=adj, net_salary=net
    )


def calculate_yearly_ctc(structure) -> Decimal:
    return money(calculate_gross(structure).gross * 12)


def signed_adjustment(adjustment_type: str, amount) -> Decimal:
    """Apply the sign convention to an unsigned adjustment amount."""
    value = money(amount)
    if adjustment_type in CREDIT_ADJUSTMENTS:
        return value
    if adjustment_type in DEBIT_ADJUSTMENTS:
        return -value
    msg = f"Unknown adjustment type: {adjustment_type}"
    raise PayrollValidationError(msg)


def adjustment_total(adjustments: Iterable) -> Decimal:
    """Signed sum of ``(type, amount)`` pairs or objects with those attributes."""
    total = Decimal("0.00")
    for item in adjustments:
        if isinstance(item, tuple):
            adjustment_type, amount = item
        else:
            adjustment_type, amount = item.adjustment_type, item.amount
        total = money(total + signed_adjustment(adjustment_type, amount))
    return total
