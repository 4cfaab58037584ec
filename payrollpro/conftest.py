import pytest
from rest_framework.test import APIClient

from payrollpro.employees.models import Employee
from payrollpro.employees.tests.factories import EmployeeFactory
from payrollpro.payroll.tests.factories import SalaryStructureFactory
from payrollpro.users.models import User
from payrollpro.users.tests.factories import UserFactory


@pytest.fixture(autouse=True)
def _media_storage(settings, tmpdir) -> None:
    settings.MEDIA_ROOT = tmpdir.strpath


@pytest.fixture
def user(db) -> User:
    return UserFactory()


@pytest.fixture
def payroll_admin(db) -> User:
    return UserFactory(role=User.Role.ADMIN)


@pytest.fixture
def employee(db) -> Employee:
    """An active employee on the reference salary structure (gross 85000)."""
    employee = EmployeeFactory()
    SalaryStructureFactory(employee=employee)
    return employee


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture
def admin_client_api(api_client, payroll_admin) -> APIClient:
    api_client.force_authenticate(user=payroll_admin)
    return api_client
