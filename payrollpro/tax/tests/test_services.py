from datetime import date
from decimal import Decimal

import pytest

from payrollpro.employees.tests.factories import EmployeeFactory
from payrollpro.notifications.models import Notification
from payrollpro.payroll.exceptions import InvalidStateError
from payrollpro.payroll.exceptions import PayrollValidationError
from payrollpro.tax import services
from payrollpro.tax.models import TaxDeclaration
from payrollpro.tax.tests.factories import TaxDeclarationFactory

pytestmark = pytest.mark.django_db


@pytest.mark.parametrize(
    ("today", "expected"),
    [
        (date(2024, 3, 31), "2023-24"),
        (date(2024, 4, 1), "2024-25"),
        (date(2099, 12, 1), "2099-00"),
    ],
)
def test_current_financial_year(today, expected):
    assert services.current_financial_year(today) == expected


class TestSubmitDeclaration:
    def test_submit(self, employee, payroll_admin):
        declaration = services.submit_declaration(
            employee, {"ppf": Decimal("100000")}, financial_year="2024-25"
        )
        assert declaration.status == TaxDeclaration.Status.SUBMITTED
        assert declaration.submitted_at is not None
        assert declaration.section_80c_total == Decimal("100000")
        assert declaration.total_deductions == Decimal("100000")
        # 48880 without declarations, 38480 with them
        assert declaration.estimated_tax_savings == Decimal("10400.00")
        assert Notification.objects.filter(
            recipient=payroll_admin, notification_type=Notification.Type.DECLARATION
        ).exists()

    def test_draft_stays_editable(self, employee):
        services.submit_declaration(
            employee, {"lic": Decimal("20000")}, financial_year="2024-25", submit=False
        )
        declaration = services.submit_declaration(
            employee, {"elss": Decimal("30000")}, financial_year="2024-25", submit=False
        )
        assert declaration.status == TaxDeclaration.Status.DRAFT
        assert declaration.section_80c_total == Decimal("50000")
        assert TaxDeclaration.objects.count() == 1

    def test_submitted_declaration_is_frozen(self, employee):
        services.submit_declaration(employee, {}, financial_year="2024-25")
        with pytest.raises(InvalidStateError, match="can no longer be edited"):
            services.submit_declaration(
                employee, {"ppf": Decimal("1000")}, financial_year="2024-25"
            )

    def test_breaches_are_rejected_before_writing(self, employee):
        with pytest.raises(PayrollValidationError, match="Landlord name"):
            services.submit_declaration(
                employee, {"rent_paid": Decimal("120000")}, financial_year="2024-25"
            )
        assert not TaxDeclaration.objects.exists()

    def test_defaults_to_current_financial_year(self, employee):
        declaration = services.submit_declaration(employee, {}, submit=False)
        assert declaration.financial_year == services.current_financial_year()


class TestReview:
    def test_verify(self, payroll_admin):
        declaration = TaxDeclarationFactory(status=TaxDeclaration.Status.SUBMITTED)
        declaration = services.verify(declaration.pk, actor=payroll_admin)
        assert declaration.status == TaxDeclaration.Status.VERIFIED
        assert declaration.verified_by == payroll_admin
        assert Notification.objects.filter(
            recipient=declaration.employee.user, title="Tax Declaration Verified"
        ).exists()

    def test_draft_cannot_be_verified(self):
        declaration = TaxDeclarationFactory()
        with pytest.raises(InvalidStateError):
            services.verify(declaration.pk)

    def test_reject_requires_remarks(self):
        declaration = TaxDeclarationFactory(status=TaxDeclaration.Status.SUBMITTED)
        with pytest.raises(PayrollValidationError):
            services.reject(declaration.pk, remarks="")

    def test_rejected_declaration_can_be_resubmitted(self, employee):
        declaration = TaxDeclarationFactory(
            employee=employee, status=TaxDeclaration.Status.SUBMITTED
        )
        services.reject(declaration.pk, remarks="Missing rent receipts")
        declaration = services.submit_declaration(
            employee, {"ppf": Decimal("5000")}, financial_year="2024-25"
        )
        assert declaration.status == TaxDeclaration.Status.SUBMITTED
        assert declaration.remarks == "Missing rent receipts"


class TestEstimateForEmployee:
    def test_without_declaration(self, employee):
        estimate = services.estimate_for_employee(employee)
        assert estimate.gross_income == Decimal("1020000.00")
        assert estimate.final_tax == Decimal("48880.00")

    def test_uses_saved_declaration(self, employee):
        TaxDeclarationFactory(
            employee=employee,
            financial_year=services.current_financial_year(),
            ppf=Decimal("100000"),
        )
        assert services.estimate_for_employee(employee).final_tax == Decimal("38480.00")

    def test_payload_hra_uses_pay_figures(self, employee):
        estimate = services.estimate_for_employee(
            employee, {"hra": {"rent_paid": Decimal("300000")}}
        )
        assert estimate.deductions.hra_exemption == Decimal("240000.00")
        assert estimate.final_tax == Decimal("23920.00")

    def test_employee_without_structure(self):
        estimate = services.estimate_for_employee(EmployeeFactory())
        assert estimate.gross_income == Decimal("0.00")
        assert estimate.final_tax == Decimal("0.00")
