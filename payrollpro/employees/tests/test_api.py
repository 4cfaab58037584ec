import pytest
from rest_framework import status

from payrollpro.employees.models import Employee
from payrollpro.employees.tests.factories import EmployeeFactory
from payrollpro.users.models import User

pytestmark = pytest.mark.django_db

URL = "/api/v1/employees/"

PAYLOAD = {
    "first_name": "Asha",
    "last_name": "Rao",
    "email": "Asha.Rao@Example.com",
    "department": "Finance",
    "designation": "Accountant",
    "pan_number": "ABCDE1234F",
    "bank_detail": {
        "account_number": "123456789012",
        "account_holder_name": "Asha Rao",
        "ifsc_code": "hdfc0001234",
        "bank_name": "HDFC",
    },
}


def test_admin_creates_employee_with_credentials(admin_client_api):
    res = admin_client_api.post(URL, PAYLOAD, format="json")

    assert res.status_code == status.HTTP_201_CREATED
    assert res.data["employee_id"].startswith("FIN-")
    assert res.data["email"] == "asha.rao@example.com"
    assert res.data["bank_detail"]["masked_account_number"] == "****9012"
    assert "account_number" not in res.data["bank_detail"]
    credentials = res.data["credentials"]
    assert credentials["username"].startswith("asha.rao-")
    user = User.objects.get(username=credentials["username"])
    assert user.check_password(credentials["password"])
    assert user.employee.bank_detail.ifsc_code == "HDFC0001234"


def test_duplicate_email_rejected(admin_client_api, employee):
    payload = {**PAYLOAD, "email": employee.user.email.upper()}
    payload.pop("bank_detail")
    res = admin_client_api.post(URL, payload, format="json")
    assert res.status_code == status.HTTP_400_BAD_REQUEST
    assert "email" in res.data


def test_employee_cannot_create(api_client, employee):
    api_client.force_authenticate(user=employee.user)
    res = api_client.post(URL, PAYLOAD, format="json")
    assert res.status_code == status.HTTP_403_FORBIDDEN


def test_employee_sees_only_self(api_client, employee):
    EmployeeFactory()
    api_client.force_authenticate(user=employee.user)
    res = api_client.get(URL)
    assert res.data["count"] == 1
    assert res.data["results"][0]["employee_id"] == employee.employee_id


def test_filter_by_department(admin_client_api, employee):
    EmployeeFactory(department=Employee.Department.SALES)
    res = admin_client_api.get(f"{URL}?department=Sales")
    assert res.data["count"] == 1


def test_soft_delete(admin_client_api, employee):
    res = admin_client_api.delete(f"{URL}{employee.pk}/")
    assert res.status_code == status.HTTP_204_NO_CONTENT
    employee.refresh_from_db()
    assert employee.is_deleted is True
    assert admin_client_api.get(f"{URL}{employee.pk}/").status_code == 404


def test_bank_detail_upsert(admin_client_api, employee):
    url = f"{URL}{employee.pk}/bank-detail/"
    data = {
        "account_number": "000011112222",
        "account_holder_name": "Someone",
        "ifsc_code": "SBIN0000001",
        "bank_name": "SBI",
    }
    assert admin_client_api.put(url, data, format="json").status_code == 200
    res = admin_client_api.put(
        url, {**data, "account_number": "999988887777"}, format="json"
    )
    assert res.data["masked_account_number"] == "****7777"
    employee.refresh_from_db()
    assert employee.bank_detail.account_number == "999988887777"


def test_invalid_ifsc(admin_client_api, employee):
    res = admin_client_api.put(
        f"{URL}{employee.pk}/bank-detail/",
        {
            "account_number": "1",
            "account_holder_name": "x",
            "ifsc_code": "BAD",
            "bank_name": "x",
        },
        format="json",
    )
    assert res.status_code == status.HTTP_400_BAD_REQUEST
