"""Views for Employees API."""

import logging

from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema
from drf_spectacular.utils import extend_schema_view
from rest_framework import status
from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.filters import SearchFilter
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from payrollpro.audit.utils import log_action
from payrollpro.employees.models import BankDetail
from payrollpro.employees.models import Employee
from payrollpro.users.api.permissions import IsPayrollAdminOrReadOnly
from payrollpro.users.api.permissions import is_payroll_admin

from .filters import EmployeeFilter
from .serializers import BankDetailSerializer
from .serializers import EmployeeCreateSerializer
from .serializers import EmployeeSerializer

logger = logging.getLogger(__name__)


@extend_schema_view(
    list=extend_schema(tags=["Employees"]),
    retrieve=extend_schema(tags=["Employees"]),
    create=extend_schema(tags=["Employees"], request=EmployeeCreateSerializer),
    update=extend_schema(tags=["Employees"]),
    partial_update=extend_schema(tags=["Employees"]),
    destroy=extend_schema(tags=["Employees"]),
    bank_detail=extend_schema(tags=["Employees"], request=BankDetailSerializer),
)
class EmployeeViewSet(viewsets.ModelViewSet):
    queryset = Employee.objects.filter(is_deleted=False).select_related(
        "user", "bank_detail"
    )
    serializer_class = EmployeeSerializer
    permission_classes = [IsAuthenticated, IsPayrollAdminOrReadOnly]
    filter_backends = [DjangoFilterBackend, SearchFilter]
    filterset_class = EmployeeFilter
    search_fields = [
        "employee_id",
        "user__first_name",
        "user__last_name",
        "user__email",
        "designation",
    ]

    def get_queryset(self):
        """Payroll admins see everyone; employees only themselves."""
        qs = super().get_queryset()
        user = self.request.user
        if is_payroll_admin(user):
            return qs
        return qs.filter(user=user)

    def get_serializer_class(self):
        if self.action == "create":
            return EmployeeCreateSerializer
        return super().get_serializer_class()

    def create(self, request, *args, **kwargs):
        serializer = EmployeeCreateSerializer(
            data=request.data, context=self.get_serializer_context()
        )
        serializer.is_valid(raise_exception=True)
        employee = serializer.save()
        log_action(
            "employee_created",
            actor=request.user,
            model_name="employees.Employee",
            record_id=employee.pk,
            message=f"employee_id={employee.employee_id}",
            request=request,
        )
        logger.info("Employee %s created", employee.employee_id)
        data = dict(serializer.data)
        data["credentials"] = serializer.created_credentials
        return Response(data, status=status.HTTP_201_CREATED)

    def perform_destroy(self, instance):
        instance.soft_delete()
        log_action(
            "employee_deleted",
            actor=self.request.user,
            model_name="employees.Employee",
            record_id=instance.pk,
            request=self.request,
        )

    @action(detail=True, methods=["put"], url_path="bank-detail")
    def bank_detail(self, request, pk=None):
        employee = self.get_object()
        instance = BankDetail.objects.filter(employee=employee).first()
        serializer = BankDetailSerializer(instance, data=request.data)
        serializer.is_valid(raise_exception=True)
        serializer.save(employee=employee)
        return Response(serializer.data)
