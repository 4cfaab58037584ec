from factory import Faker
from factory import SubFactory
from factory.django import DjangoModelFactory

from payrollpro.employees.models import Employee
from payrollpro.users.tests.factories import UserFactory


class EmployeeFactory(DjangoModelFactory[Employee]):
    user = SubFactory(UserFactory)
    department = Employee.Department.ENGINEERING
    designation = Faker("job")
    status = Employee.Status.ACTIVE

    class Meta:
        model = Employee
