from decimal import Decimal

import pytest

from payrollpro.payroll.calculator import adjustment_total
from payrollpro.payroll.calculator import calculate_gross
from payrollpro.payroll.calculator import calculate_salary
from payrollpro.payroll.calculator import calculate_yearly_ctc
from payrollpro.payroll.calculator import money
from payrollpro.payroll.calculator import signed_adjustment
from payrollpro.payroll.calculator import validate_salary_structure
from payrollpro.payroll.exceptions import NegativeNetSalaryError
from payrollpro.payroll.exceptions import PayrollValidationError

STRUCTURE = {
    "basic_salary": "50000",
    "hra": "20000",
    "da": "5000",
    "special_allowance": "10000",
    "other_allowances": "0",
    "pf_percentage": "12",
    "esi_percentage": "0.75",
    "professional_tax": "200",
}


def test_money_rounds_half_up():
    assert money("0.005") == Decimal("0.01")
    assert money(None) == Decimal("0.00")


def test_money_rejects_garbage():
    with pytest.raises(PayrollValidationError):
        money("abc")


def test_gross_is_sum_of_components():
    assert calculate_gross(STRUCTURE).gross == Decimal("85000.00")
    assert calculate_yearly_ctc(STRUCTURE) == Decimal("1020000.00")


def test_salary_without_lop():
    breakdown = calculate_salary(STRUCTURE)
    d = breakdown.deductions
    assert breakdown.earnings.gross == Decimal("85000.00")
    assert d.pf == Decimal("6000.00")
    assert d.esi == Decimal("637.50")
    assert d.professional_tax == Decimal("200.00")
    assert d.lop == Decimal("0.00")
    assert d.total == Decimal("6837.50")
    assert breakdown.net_salary == Decimal("78162.50")


def test_salary_with_two_lop_days():
    breakdown = calculate_salary(STRUCTURE, {"lop_days": 2})
    assert breakdown.deductions.lop == Decimal("5666.67")
    assert breakdown.deductions.total == Decimal("12504.17")
    assert breakdown.net_salary == Decimal("72495.83")


def test_lop_uses_given_days_basis():
    breakdown = calculate_salary(STRUCTURE, {"lop_days": 1}, days_basis=31)
    assert breakdown.deductions.lop == Decimal("2741.94")


def test_bonus_and_penalty_move_net():
    breakdown = calculate_salary(STRUCTURE, {"bonus": "1000", "penalty": "500"})
    assert breakdown.net_salary == Decimal("78662.50")


def test_negative_lop_days_rejected():
    with pytest.raises(PayrollValidationError):
        calculate_salary(STRUCTURE, {"lop_days": -1})


def test_net_cannot_go_negative():
    with pytest.raises(NegativeNetSalaryError):
        calculate_salary(STRUCTURE, {"lop_days": 30})


def test_non_positive_days_basis_rejected():
    with pytest.raises(PayrollValidationError):
        calculate_salary(STRUCTURE, days_basis=0)


@pytest.mark.parametrize(
    ("overrides", "message"),
    [
        ({"basic_salary": None}, "Basic salary is required."),
        ({"basic_salary": "-1"}, "Basic salary cannot be negative."),
        ({"hra": "-5"}, "hra cannot be negative."),
        ({"pf_percentage": "120"}, "pf_percentage must be between 0 and 100."),
    ],
)
def test_validate_salary_structure(overrides, message):
    with pytest.raises(PayrollValidationError, match=message):
        validate_salary_structure({**STRUCTURE, **overrides})


def test_minimum_basic_enforced():
    with pytest.raises(PayrollValidationError, match="at least 60000.00"):
        validate_salary_structure(STRUCTURE, minimum_basic="60000")


def test_adjustment_signs():
    assert signed_adjustment("Bonus", "100") == Decimal("100.00")
    assert signed_adjustment("Recovery", "100") == Decimal("-100.00")
    assert adjustment_total(
        [("Bonus", "5000"), ("Penalty", "1200.50"), ("Reimbursement", "300")]
    ) == Decimal("4099.50")


def test_unknown_adjustment_type():
    with pytest.raises(PayrollValidationError):
        signed_adjustment("Gift", "10")
