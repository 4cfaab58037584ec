from decimal import Decimal

from factory import SubFactory
from factory.django import DjangoModelFactory

from payrollpro.employees.tests.factories import EmployeeFactory
from payrollpro.payroll.models import PayrollRecord
from payrollpro.payroll.models import SalaryStructure


class SalaryStructureFactory(DjangoModelFactory[SalaryStructure]):
    """Gross 85000: basic 50000, HRA 20000, DA 5000, special 10000."""

    employee = SubFactory(EmployeeFactory)
    basic_salary = Decimal("50000.00")
    hra = Decimal("20000.00")
    da = Decimal("5000.00")
    special_allowance = Decimal("10000.00")
    other_allowances = Decimal("0.00")
    pf_percentage = Decimal("12.00")
    esi_percentage = Decimal("0.75")
    professional_tax = Decimal("200.00")

    class Meta:
        model = SalaryStructure


class PayrollRecordFactory(DjangoModelFactory[PayrollRecord]):
    """A Pending record matching ``SalaryStructureFactory`` with no LOP."""

    employee = SubFactory(EmployeeFactory)
    month = "2024-03"
    year = 2024
    basic = Decimal("50000.00")
    hra = Decimal("20000.00")
    da = Decimal("5000.00")
    special_allowance = Decimal("10000.00")
    gross = Decimal("85000.00")
    pf = Decimal("6000.00")
    professional_tax = Decimal("200.00")
    esi = Decimal("637.50")
    total_deductions = Decimal("6837.50")
    net_salary = Decimal("78162.50")

    class Meta:
        model = PayrollRecord
