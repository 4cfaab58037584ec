import pytest
from rest_framework import status

from payrollpro.attendance.models import Attendance
from payrollpro.attendance.tests.factories import AttendanceFactory
from payrollpro.employees.tests.factories import EmployeeFactory

pytestmark = pytest.mark.django_db

BASE = "/api/v1/attendance/"


@pytest.fixture
def employee_client(api_client, employee):
    api_client.force_authenticate(user=employee.user)
    return api_client


def test_check_in_then_repeat(employee_client):
    res = employee_client.post(f"{BASE}records/check-in/", {"location": "HQ"})
    assert res.status_code == status.HTTP_201_CREATED
    assert res.data["status"] == "Present"

    res = employee_client.post(f"{BASE}records/check-in/", {})
    assert res.status_code == status.HTTP_409_CONFLICT
    assert res.data["kind"] == "invalid_state"


def test_check_out_without_check_in(employee_client):
    res = employee_client.post(f"{BASE}records/check-out/", {})
    assert res.status_code == status.HTTP_409_CONFLICT


def test_check_in_requires_employee_profile(api_client, user):
    api_client.force_authenticate(user=user)
    res = api_client.post(f"{BASE}records/check-in/", {})
    assert res.status_code == status.HTTP_400_BAD_REQUEST


def test_employee_lists_only_own_rows(employee_client, employee):
    AttendanceFactory(employee=employee)
    AttendanceFactory()
    res = employee_client.get(f"{BASE}records/")
    assert res.status_code == status.HTTP_200_OK
    assert res.data["count"] == 1


def test_employee_cannot_write_rows(employee_client, employee):
    res = employee_client.post(
        f"{BASE}records/",
        {"employee": employee.pk, "date": "2024-03-01", "status": "Present"},
    )
    assert res.status_code == status.HTTP_403_FORBIDDEN


def test_admin_creates_row(admin_client_api, employee):
    res = admin_client_api.post(
        f"{BASE}records/",
        {"employee": employee.pk, "date": "2024-03-01", "status": "Holiday"},
    )
    assert res.status_code == status.HTTP_201_CREATED
    assert Attendance.objects.get(employee=employee).status == "Holiday"


def test_monthly_report(employee_client, employee):
    AttendanceFactory(employee=employee)
    res = employee_client.get(f"{BASE}records/monthly-report/?month=3&year=2024")
    assert res.status_code == status.HTTP_200_OK
    assert res.data["employee_id"] == employee.employee_id
    assert res.data["records"] == 1


def test_lop_for_another_employee_is_forbidden(employee_client):
    other = EmployeeFactory()
    res = employee_client.get(f"{BASE}lop/?month=3&year=2024&employee={other.pk}")
    assert res.status_code == status.HTTP_403_FORBIDDEN


def test_admin_reads_lop(admin_client_api, employee):
    res = admin_client_api.get(f"{BASE}lop/?month=3&year=2024&employee={employee.pk}")
    assert res.status_code == status.HTTP_200_OK
    assert res.data["lop_days"] == "0.00"


def test_lop_requires_period(employee_client):
    res = employee_client.get(f"{BASE}lop/")
    assert res.status_code == status.HTTP_400_BAD_REQUEST
