from datetime import date

from factory import SubFactory
from factory.django import DjangoModelFactory

from payrollpro.attendance.models import Attendance
from payrollpro.employees.tests.factories import EmployeeFactory


class AttendanceFactory(DjangoModelFactory[Attendance]):
    employee = SubFactory(EmployeeFactory)
    date = date(2024, 3, 1)
    status = Attendance.Status.PRESENT

    class Meta:
        model = Attendance
