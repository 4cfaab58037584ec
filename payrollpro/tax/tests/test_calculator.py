from decimal import Decimal

import pytest

from payrollpro.payroll.exceptions import PayrollValidationError
from payrollpro.tax.calculator import Declarations
from payrollpro.tax.calculator import apply_deductions
from payrollpro.tax.calculator import calculate_hra_exemption
from payrollpro.tax.calculator import calculate_tds
from payrollpro.tax.calculator import estimate_tax
from payrollpro.tax.calculator import slab_tax
from payrollpro.tax.calculator import validate_declarations


@pytest.mark.parametrize(
    ("taxable", "expected"),
    [
        ("0", "0.00"),
        ("300000", "0.00"),
        ("700000", "20000.00"),
        ("1000000", "50000.00"),
        ("1200000", "80000.00"),
        ("1500000", "140000.00"),
        ("2000000", "290000.00"),
    ],
)
def test_slab_tax(taxable, expected):
    assert slab_tax(Decimal(taxable)) == Decimal(expected)


class TestCalculateTds:
    def test_rebate_wipes_out_tax_up_to_seven_lakh(self):
        estimate = calculate_tds(Decimal("750000"))
        assert estimate.taxable_income == Decimal("700000.00")
        assert estimate.total_tax == Decimal("20800.00")
        assert estimate.rebate == Decimal("20800.00")
        assert estimate.final_tax == Decimal("0.00")
        assert estimate.effective_tax_rate == Decimal("0.00")

    def test_above_rebate_threshold(self):
        estimate = calculate_tds(Decimal("1020000"))
        assert estimate.taxable_income == Decimal("970000.00")
        assert estimate.tax_before_cess == Decimal("47000.00")
        assert estimate.cess == Decimal("1880.00")
        assert estimate.rebate == Decimal("0.00")
        assert estimate.final_tax == Decimal("48880.00")
        assert estimate.annual_tds == estimate.final_tax
        assert estimate.monthly_tds == Decimal("4073.33")
        assert estimate.effective_tax_rate == Decimal("4.79")

    def test_income_below_standard_deduction(self):
        estimate = calculate_tds(Decimal("30000"))
        assert estimate.taxable_income == Decimal("0.00")
        assert estimate.final_tax == Decimal("0.00")

    def test_negative_income(self):
        with pytest.raises(PayrollValidationError):
            calculate_tds(Decimal("-1"))

    def test_estimate_tax_annualises(self):
        assert estimate_tax(Decimal("85000")).gross_income == Decimal("1020000.00")

    def test_as_dict_carries_annual_tds(self):
        data = calculate_tds(Decimal("1020000")).as_dict()
        assert data["annual_tds"] == Decimal("48880.00")
        assert data["deductions"]["standard_deduction"] == Decimal("50000.00")


class TestDeductions:
    def test_caps(self):
        declarations = Declarations.from_payload(
            {
                "section_80c": {"ppf": "120000", "elss": "80000"},
                "section_80d": {"self_and_family": "30000", "parents": "40000"},
                "home_loan": {"interest_paid": "250000"},
                "nps": "70000",
                "education_loan_interest": "90000",
            }
        )
        breakdown, taxable = apply_deductions(Decimal("2000000"), declarations)
        assert breakdown.section_80c == Decimal("150000.00")
        assert breakdown.section_80d == Decimal("50000.00")
        assert breakdown.home_loan_interest == Decimal("200000.00")
        assert breakdown.nps == Decimal("50000.00")
        # 80E has no ceiling
        assert breakdown.education_loan_interest == Decimal("90000.00")
        assert breakdown.total == Decimal("590000.00")
        assert taxable == Decimal("1410000.00")

    def test_negative_amount_rejected(self):
        with pytest.raises(PayrollValidationError, match="ppf"):
            Declarations.from_payload({"section_80c": {"ppf": "-5"}})

    def test_hra_from_payload(self):
        declarations = Declarations.from_payload(
            {
                "hra": {
                    "basic_salary": "600000",
                    "hra_received": "240000",
                    "rent_paid": "200000",
                }
            }
        )
        breakdown, _ = apply_deductions(Decimal("1020000"), declarations)
        assert breakdown.hra_exemption == Decimal("140000.00")


@pytest.mark.parametrize(
    ("hra", "rent", "is_metro", "expected"),
    [
        ("240000", "200000", False, "140000.00"),
        ("300000", "400000", False, "240000.00"),
        ("300000", "400000", True, "300000.00"),
        ("240000", "50000", False, "0.00"),
        ("240000", "0", True, "0.00"),
    ],
)
def test_hra_exemption(hra, rent, is_metro, expected):
    exemption = calculate_hra_exemption(
        Decimal("600000"), Decimal(hra), Decimal(rent), is_metro=is_metro
    )
    assert exemption == Decimal(expected)


class TestValidateDeclarations:
    def test_within_limits(self):
        declarations = Declarations.from_payload({"section_80c": {"ppf": "150000"}})
        assert validate_declarations(declarations) == []

    def test_limit_breaches(self):
        declarations = Declarations.from_payload(
            {
                "section_80c": {"ppf": "100000", "lic": "60000"},
                "section_80d": {"parents": "30000"},
                "nps": "60000",
            }
        )
        assert validate_declarations(declarations) == [
            "Section 80C total cannot exceed 1,50,000",
            "Section 80D (Parents) cannot exceed 25,000",
            "NPS (80CCD(1B)) cannot exceed 50,000",
        ]

    def test_landlord_details(self):
        declarations = Declarations.from_payload({"hra": {"rent_paid": "120000"}})
        assert validate_declarations(declarations) == [
            "Landlord name is required for HRA exemption",
            "Landlord PAN is required if annual rent exceeds 1,00,000",
        ]
