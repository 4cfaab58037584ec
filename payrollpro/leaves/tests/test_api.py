import pytest
from rest_framework import status

from payrollpro.leaves.models import LeaveRequest
from payrollpro.leaves.tests.factories import LeaveRequestFactory

pytestmark = pytest.mark.django_db

REQUESTS = "/api/v1/leaves/requests/"


@pytest.fixture
def employee_client(api_client, employee):
    api_client.force_authenticate(user=employee.user)
    return api_client


def test_apply(employee_client, employee):
    res = employee_client.post(
        REQUESTS,
        {
            "leave_type": "Sick",
            "start_date": "2024-03-11",
            "end_date": "2024-03-12",
            "reason": "Flu",
        },
    )
    assert res.status_code == status.HTTP_201_CREATED
    assert res.data["employee"] == employee.pk
    assert res.data["total_days"] == "2.0"
    assert res.data["status"] == "Pending"


def test_apply_with_reversed_dates(employee_client):
    res = employee_client.post(
        REQUESTS,
        {
            "leave_type": "Sick",
            "start_date": "2024-03-12",
            "end_date": "2024-03-11",
            "reason": "Flu",
        },
    )
    assert res.status_code == status.HTTP_400_BAD_REQUEST


def test_apply_beyond_balance(employee_client):
    res = employee_client.post(
        REQUESTS,
        {
            "leave_type": "Casual",
            "start_date": "2024-03-01",
            "end_date": "2024-03-20",
            "reason": "Long trip",
        },
    )
    assert res.status_code == status.HTTP_400_BAD_REQUEST
    assert res.data["kind"] == "invalid_input"
    assert res.data["detail"].startswith("Insufficient Casual leave balance")


def test_employee_sees_only_own(employee_client, employee):
    LeaveRequestFactory(employee=employee)
    LeaveRequestFactory()
    res = employee_client.get(REQUESTS)
    assert res.data["count"] == 1


def test_employee_cannot_approve(employee_client, employee):
    leave = LeaveRequestFactory(employee=employee)
    res = employee_client.put(f"{REQUESTS}{leave.pk}/approve/", {})
    assert res.status_code == status.HTTP_403_FORBIDDEN


def test_admin_approves_and_rejects(admin_client_api):
    leave = LeaveRequestFactory()
    res = admin_client_api.put(f"{REQUESTS}{leave.pk}/approve/", {"remarks": "ok"})
    assert res.status_code == status.HTTP_200_OK
    assert res.data["status"] == "Approved"

    res = admin_client_api.put(
        f"{REQUESTS}{leave.pk}/reject/", {"rejection_reason": "Changed mind"}
    )
    assert res.status_code == status.HTTP_409_CONFLICT
    assert res.data["kind"] == "invalid_state"


def test_reject_requires_reason(admin_client_api):
    leave = LeaveRequestFactory()
    res = admin_client_api.put(f"{REQUESTS}{leave.pk}/reject/", {})
    assert res.status_code == status.HTTP_400_BAD_REQUEST


def test_cancel(employee_client, employee):
    leave = LeaveRequestFactory(employee=employee)
    res = employee_client.delete(f"{REQUESTS}{leave.pk}/")
    assert res.status_code == status.HTTP_204_NO_CONTENT
    assert not LeaveRequest.objects.exists()


def test_balance(employee_client, employee):
    LeaveRequestFactory(employee=employee, status=LeaveRequest.Status.APPROVED)
    res = employee_client.get(f"{REQUESTS}balance/?year=2024")
    assert res.status_code == status.HTTP_200_OK
    assert res.data["employee"] == employee.employee_id
    assert res.data["balance"]["Casual"]["remaining"] == 10


def test_admin_reads_employee_balance(admin_client_api, employee):
    res = admin_client_api.get(f"{REQUESTS}balance/?employee={employee.pk}")
    assert res.data["employee"] == employee.employee_id
