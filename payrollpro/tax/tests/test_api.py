import pytest
from rest_framework import status

from payrollpro.employees.tests.factories import EmployeeFactory
from payrollpro.tax.models import TaxDeclaration
from payrollpro.tax.tests.factories import TaxDeclarationFactory

pytestmark = pytest.mark.django_db

DECLARATIONS = "/api/v1/tax/declarations/"
ESTIMATE = "/api/v1/tax/estimate/"


@pytest.fixture
def employee_client(api_client, employee):
    api_client.force_authenticate(user=employee.user)
    return api_client


class TestDeclarations:
    def test_submit(self, employee_client):
        res = employee_client.post(DECLARATIONS, {"ppf": "100000"}, format="json")
        assert res.status_code == status.HTTP_201_CREATED
        assert res.data["status"] == "Submitted"
        assert res.data["section_80c_total"] == "100000.00"
        assert res.data["estimated_tax_savings"] == "10400.00"

    def test_save_as_draft(self, employee_client):
        res = employee_client.post(
            DECLARATIONS, {"ppf": "100000", "submit": False}, format="json"
        )
        assert res.data["status"] == "Draft"

    def test_resubmit_conflicts(self, employee_client):
        employee_client.post(DECLARATIONS, {}, format="json")
        res = employee_client.post(DECLARATIONS, {"lic": "10"}, format="json")
        assert res.status_code == status.HTTP_409_CONFLICT
        assert res.data["kind"] == "invalid_state"

    def test_field_limit(self, employee_client):
        res = employee_client.post(DECLARATIONS, {"nps": "60000"}, format="json")
        assert res.status_code == status.HTTP_400_BAD_REQUEST
        assert "nps" in res.data

    def test_missing_landlord(self, employee_client):
        res = employee_client.post(DECLARATIONS, {"rent_paid": "150000"}, format="json")
        assert res.status_code == status.HTTP_400_BAD_REQUEST
        assert res.data["kind"] == "invalid_input"

    def test_employee_sees_only_own(self, employee_client, employee):
        TaxDeclarationFactory(employee=employee)
        TaxDeclarationFactory()
        res = employee_client.get(DECLARATIONS)
        assert res.data["count"] == 1

    def test_employee_cannot_verify(self, employee_client, employee):
        declaration = TaxDeclarationFactory(
            employee=employee, status=TaxDeclaration.Status.SUBMITTED
        )
        res = employee_client.put(f"{DECLARATIONS}{declaration.pk}/verify/")
        assert res.status_code == status.HTTP_403_FORBIDDEN

    def test_admin_verifies(self, admin_client_api):
        declaration = TaxDeclarationFactory(status=TaxDeclaration.Status.SUBMITTED)
        res = admin_client_api.put(f"{DECLARATIONS}{declaration.pk}/verify/")
        assert res.status_code == status.HTTP_200_OK
        assert res.data["status"] == "Verified"

    def test_admin_rejects(self, admin_client_api):
        declaration = TaxDeclarationFactory(status=TaxDeclaration.Status.SUBMITTED)
        res = admin_client_api.put(f"{DECLARATIONS}{declaration.pk}/reject/", {})
        assert res.status_code == status.HTTP_400_BAD_REQUEST
        res = admin_client_api.put(
            f"{DECLARATIONS}{declaration.pk}/reject/",
            {"remarks": "Upload proofs"},
            format="json",
        )
        assert res.data["status"] == "Rejected"
        assert res.data["remarks"] == "Upload proofs"


class TestEstimate:
    def test_on_salary_structure(self, employee_client):
        res = employee_client.post(ESTIMATE, {}, format="json")
        assert res.status_code == status.HTTP_200_OK
        assert res.data["gross_income"] == "1020000.00"
        assert res.data["final_tax"] == "48880.00"
        assert res.data["annual_tds"] == "48880.00"
        assert res.data["monthly_tds"] == "4073.33"
        assert res.data["deductions"]["standard_deduction"] == "50000.00"

    def test_what_if_hra(self, employee_client):
        res = employee_client.post(
            ESTIMATE,
            {
                "hra": {
                    "rent_paid": "300000",
                    "landlord_name": "R. Iyer",
                    "landlord_pan": "ABCDE1234F",
                }
            },
            format="json",
        )
        assert res.data["deductions"]["hra_exemption"] == "240000.00"
        assert res.data["final_tax"] == "23920.00"

    def test_admin_estimates_for_employee(self, admin_client_api, employee):
        res = admin_client_api.post(
            f"{ESTIMATE}?employee={employee.pk}", {}, format="json"
        )
        assert res.data["gross_income"] == "1020000.00"

    def test_employee_parameter_ignored_for_non_admin(self, employee_client):
        other = EmployeeFactory()
        res = employee_client.post(f"{ESTIMATE}?employee={other.pk}", {}, format="json")
        assert res.data["gross_income"] == "1020000.00"
