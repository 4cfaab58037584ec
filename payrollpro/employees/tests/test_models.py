from datetime import date

import pytest

from payrollpro.employees.models import BankDetail
from payrollpro.employees.models import Employee
from payrollpro.employees.tests.factories import EmployeeFactory

pytestmark = pytest.mark.django_db


def test_employee_id_sequence_per_department_and_year():
    first = EmployeeFactory(date_of_joining=date(2024, 1, 10))
    second = EmployeeFactory(date_of_joining=date(2024, 6, 1))
    sales = EmployeeFactory(
        department=Employee.Department.SALES, date_of_joining=date(2024, 2, 1)
    )
    next_year = EmployeeFactory(date_of_joining=date(2025, 1, 2))

    assert first.employee_id == "ENG-2024-1001"
    assert second.employee_id == "ENG-2024-1002"
    assert sales.employee_id == "SAL-2024-1001"
    assert next_year.employee_id == "ENG-2025-1001"


def test_explicit_employee_id_is_kept():
    assert EmployeeFactory(employee_id="LEGACY-7").employee_id == "LEGACY-7"


def test_active_queryset_skips_inactive_and_deleted():
    active = EmployeeFactory()
    EmployeeFactory(status=Employee.Status.RESIGNED)
    deleted = EmployeeFactory()
    deleted.soft_delete()

    assert list(Employee.objects.active()) == [active]
    assert deleted.status == Employee.Status.INACTIVE
    assert deleted.is_payroll_eligible is False


def test_masked_account_number():
    bank = BankDetail(account_number="123456789012")
    assert bank.masked_account_number == "****9012"
