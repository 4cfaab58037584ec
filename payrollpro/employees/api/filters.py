import django_filters

from payrollpro.employees.models import Employee


class EmployeeFilter(django_filters.FilterSet):
    department = django_filters.ChoiceFilter(choices=Employee.Department.choices)
    status = django_filters.ChoiceFilter(choices=Employee.Status.choices)
    joined_after = django_filters.DateFilter(
        field_name="date_of_joining", lookup_expr="gte"
    )

    class Meta:
        model = Employee
        fields = ["department", "status", "joined_after"]
