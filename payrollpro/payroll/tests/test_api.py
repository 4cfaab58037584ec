from decimal import Decimal

import pytest
from rest_framework import status

from payrollpro.payroll.models import PayrollGeneralSetting
from payrollpro.payroll.models import PayrollRecord
from payrollpro.payroll.tests.factories import PayrollRecordFactory
from payrollpro.payroll.tests.factories import SalaryStructureFactory

pytestmark = pytest.mark.django_db

RECORDS = "/api/v1/payroll/records/"


class TestPermissions:
    def test_anonymous_rejected(self, api_client):
        res = api_client.get(RECORDS)
        assert res.status_code == status.HTTP_403_FORBIDDEN

    def test_employee_cannot_manage_payroll(self, api_client, employee):
        api_client.force_authenticate(user=employee.user)
        assert api_client.get(RECORDS).status_code == status.HTTP_403_FORBIDDEN
        res = api_client.post(f"{RECORDS}process/", {"month": 3, "year": 2024})
        assert res.status_code == status.HTTP_403_FORBIDDEN


class TestProcess:
    def test_process_period(self, admin_client_api, employee):
        res = admin_client_api.post(
            f"{RECORDS}process/", {"month": 3, "year": 2024}, format="json"
        )
        assert res.status_code == status.HTTP_201_CREATED
        assert res.data["processed"] == 1
        assert res.data["records"][0]["net_salary"] == "78162.50"

    def test_already_processed_shape(self, admin_client_api, employee):
        admin_client_api.post(f"{RECORDS}process/", {"month": 3, "year": 2024})
        res = admin_client_api.post(f"{RECORDS}process/", {"month": 3, "year": 2024})
        assert res.status_code == status.HTTP_409_CONFLICT
        assert res.data["kind"] == "already_processed"
        assert "detail" in res.data
        assert res.data["processed"] == 0
        assert res.data["skipped_existing"] == 1

    def test_no_active_employees(self, admin_client_api):
        res = admin_client_api.post(f"{RECORDS}process/", {"month": 3, "year": 2024})
        assert res.status_code == status.HTTP_404_NOT_FOUND
        assert res.data == {
            "detail": "No active employees found",
            "kind": "no_active_employees",
        }

    def test_invalid_month(self, admin_client_api):
        res = admin_client_api.post(f"{RECORDS}process/", {"month": 13, "year": 2024})
        assert res.status_code == status.HTTP_400_BAD_REQUEST

    def test_async_processing_returns_task(self, admin_client_api, employee):
        res = admin_client_api.post(
            f"{RECORDS}process/?async=true", {"month": 3, "year": 2024}
        )
        assert res.status_code == status.HTTP_202_ACCEPTED
        assert res.data["task_id"]
        assert PayrollRecord.objects.filter(employee=employee).exists()


class TestRecordWorkflow:
    def test_adjustment(self, admin_client_api):
        record = PayrollRecordFactory()
        res = admin_client_api.put(
            f"{RECORDS}{record.pk}/adjustment/",
            {"type": "Bonus", "amount": "5000", "description": "Spot award"},
            format="json",
        )
        assert res.status_code == status.HTTP_200_OK
        assert res.data["net_salary"] == "83162.50"
        assert res.data["adjustments"][0]["adjustment_type"] == "Bonus"

    def test_adjustment_making_net_negative(self, admin_client_api):
        record = PayrollRecordFactory()
        res = admin_client_api.put(
            f"{RECORDS}{record.pk}/adjustment/",
            {"type": "Penalty", "amount": "100000"},
            format="json",
        )
        assert res.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert res.data["kind"] == "negative_net_salary"
        record.refresh_from_db()
        assert record.net_salary == Decimal("78162.50")
        assert not record.adjustments.exists()

    def test_missing_record(self, admin_client_api):
        res = admin_client_api.put(f"{RECORDS}999999/approve/")
        assert res.status_code == status.HTTP_404_NOT_FOUND
        assert res.data["kind"] == "not_found"

    def test_approve_revoke(self, admin_client_api):
        record = PayrollRecordFactory()
        res = admin_client_api.put(f"{RECORDS}{record.pk}/approve/")
        assert res.data["status"] == "Approved"
        res = admin_client_api.put(f"{RECORDS}{record.pk}/approve/")
        assert res.status_code == status.HTTP_409_CONFLICT
        assert res.data["kind"] == "invalid_state"
        res = admin_client_api.put(f"{RECORDS}{record.pk}/revoke/")
        assert res.data["status"] == "Pending"

    def test_pay_requires_approval(self, admin_client_api):
        record = PayrollRecordFactory()
        res = admin_client_api.put(f"{RECORDS}{record.pk}/pay/")
        assert res.status_code == status.HTTP_409_CONFLICT
        assert res.data["detail"].startswith("Payroll must be approved before payment")

    def test_pay(self, admin_client_api):
        record = PayrollRecordFactory(status=PayrollRecord.Status.APPROVED)
        res = admin_client_api.put(f"{RECORDS}{record.pk}/pay/")
        assert res.status_code == status.HTTP_200_OK
        assert res.data["status"] == "Paid"
        assert res.data["payslip_generated"] is True
        assert res.data["transaction_id"].startswith("TXN-")

    def test_bulk_approve_then_pay(self, admin_client_api):
        PayrollRecordFactory()
        PayrollRecordFactory()
        res = admin_client_api.post(f"{RECORDS}bulk-approve/2024-03/")
        assert res.data["count"] == 2
        res = admin_client_api.post(f"{RECORDS}bulk-pay/2024-03/")
        assert res.status_code == status.HTTP_200_OK
        assert res.data["successful"] == 2
        assert res.data["failed"] == 0
        res = admin_client_api.get(f"{RECORDS}payslip-status/2024-03/")
        assert res.data["payslips_generated"] == 2
        assert res.data["pending"] == 0

    def test_by_month(self, admin_client_api):
        PayrollRecordFactory()
        res = admin_client_api.get(f"{RECORDS}month/2024-03/")
        assert res.status_code == status.HTTP_200_OK
        assert res.data["summary"]["count"] == 1
        assert len(res.data["records"]) == 1
        res = admin_client_api.get(f"{RECORDS}month/2024-05/")
        assert res.status_code == status.HTTP_404_NOT_FOUND

    def test_stats(self, admin_client_api):
        PayrollRecordFactory()
        res = admin_client_api.get(f"{RECORDS}stats/")
        assert res.data["total"] == 1

    def test_stats_rejects_non_numeric_year(self, admin_client_api):
        res = admin_client_api.get(f"{RECORDS}stats/", {"year": "abc"})
        assert res.status_code == status.HTTP_400_BAD_REQUEST
        assert res.data == {"detail": "Year must be an integer.", "kind": "invalid_input"}


class TestPayslips:
    def test_employee_sees_only_own_paid_records(self, api_client):
        mine = PayrollRecordFactory(
            status=PayrollRecord.Status.PAID, payslip_generated=True
        )
        PayrollRecordFactory(employee=mine.employee, month="2024-04")
        PayrollRecordFactory(status=PayrollRecord.Status.PAID, payslip_generated=True)
        api_client.force_authenticate(user=mine.employee.user)

        res = api_client.get("/api/v1/payroll/payslips/")

        assert res.status_code == status.HTTP_200_OK
        assert [row["id"] for row in res.data["results"]] == [mine.pk]


class TestSalaryStructures:
    URL = "/api/v1/payroll/salary-structures/"

    def test_create_enforces_minimum_basic(self, admin_client_api, employee):
        structure = employee.salary_structure
        structure.delete()
        res = admin_client_api.post(
            self.URL,
            {"employee": employee.pk, "basic_salary": "1000"},
            format="json",
        )
        assert res.status_code == status.HTTP_400_BAD_REQUEST

    def test_update_reports_gross(self, admin_client_api):
        structure = SalaryStructureFactory()
        res = admin_client_api.patch(
            f"{self.URL}{structure.pk}/", {"hra": "25000"}, format="json"
        )
        assert res.status_code == status.HTTP_200_OK
        assert res.data["gross"] == "90000.00"


def test_settings_update(admin_client_api):
    policy = PayrollGeneralSetting.load()
    res = admin_client_api.patch(
        f"/api/v1/payroll/settings/{policy.pk}/",
        {"lop_day_basis": "actual_days"},
        format="json",
    )
    assert res.status_code == status.HTTP_200_OK
    assert PayrollGeneralSetting.load().lop_day_basis == "actual_days"
