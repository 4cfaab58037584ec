import logging

from django.shortcuts import get_object_or_404
from drf_spectacular.utils import OpenApiParameter
from drf_spectacular.utils import OpenApiTypes
from drf_spectacular.utils import extend_schema
from drf_spectacular.utils import extend_schema_view
from rest_framework import status
from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import PermissionDenied
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from payrollpro.attendance import services
from payrollpro.attendance.api.serializers import AttendanceSerializer
from payrollpro.attendance.api.serializers import CheckInOutSerializer
from payrollpro.attendance.api.serializers import LopResultSerializer
from payrollpro.attendance.api.serializers import PeriodQuerySerializer
from payrollpro.attendance.models import Attendance
from payrollpro.employees.models import Employee
from payrollpro.users.api.permissions import IsPayrollAdminOrReadOnly
from payrollpro.users.api.permissions import is_payroll_admin

logger = logging.getLogger(__name__)

PERIOD_PARAMETERS = [
    OpenApiParameter("month", OpenApiTypes.INT, OpenApiParameter.QUERY, required=True),
    OpenApiParameter("year", OpenApiTypes.INT, OpenApiParameter.QUERY, required=True),
    OpenApiParameter("employee", OpenApiTypes.INT, OpenApiParameter.QUERY),
]


def _own_employee(user) -> Employee:
    employee = getattr(user, "employee", None)
    if employee is None:
        raise ValidationError(
            {"detail": "User does not have an associated Employee profile."}
        )
    return employee


def _target_employee(request, employee_pk) -> Employee:
    """The requested employee for admins; the caller's own profile otherwise."""
    if employee_pk is None:
        return _own_employee(request.user)
    employee = get_object_or_404(Employee, pk=employee_pk)
    if employee.user_id != request.user.pk and not is_payroll_admin(request.user):
        raise PermissionDenied("You can only view your own attendance.")
    return employee


@extend_schema_view(
    list=extend_schema(tags=["Attendance"]),
    retrieve=extend_schema(tags=["Attendance"]),
    create=extend_schema(tags=["Attendance"]),
    update=extend_schema(tags=["Attendance"]),
    partial_update=extend_schema(tags=["Attendance"]),
    destroy=extend_schema(tags=["Attendance"]),
    check_in=extend_schema(tags=["Attendance"], request=CheckInOutSerializer),
    check_out=extend_schema(tags=["Attendance"], request=CheckInOutSerializer),
    monthly_report=extend_schema(tags=["Attendance"], parameters=PERIOD_PARAMETERS),
)
class AttendanceViewSet(viewsets.ModelViewSet):
    """Attendance rows; employees read their own, payroll admins manage all."""

    serializer_class = AttendanceSerializer
    permission_classes = [IsAuthenticated, IsPayrollAdminOrReadOnly]
    filterset_fields = ["employee", "status", "date", "is_late"]

    def get_queryset(self):
        qs = Attendance.objects.select_related("employee__user")
        if is_payroll_admin(self.request.user):
            return qs
        return qs.filter(employee__user=self.request.user)

    def get_permissions(self):
        if self.action in {"check_in", "check_out", "monthly_report"}:
            return [IsAuthenticated()]
        return super().get_permissions()

    @action(detail=False, methods=["post"], url_path="check-in")
    def check_in(self, request):
        payload = CheckInOutSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        attendance = services.check_in(
            _own_employee(request.user), location=payload.validated_data["location"]
        )
        return Response(
            self.get_serializer(attendance).data, status=status.HTTP_201_CREATED
        )

    @action(detail=False, methods=["post"], url_path="check-out")
    def check_out(self, request):
        payload = CheckInOutSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        attendance = services.check_out(
            _own_employee(request.user), location=payload.validated_data["location"]
        )
        return Response(self.get_serializer(attendance).data)

    @action(detail=False, methods=["get"], url_path="monthly-report")
    def monthly_report(self, request):
        query = PeriodQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        data = query.validated_data
        employee = _target_employee(request, data.get("employee"))
        report = services.monthly_report(employee.pk, data["month"], data["year"])
        report["employee_id"] = employee.employee_id
        return Response(report)


class LopDaysView(APIView):
    """Loss-of-pay days for an employee and month."""

    permission_classes = [IsAuthenticated]

    @extend_schema(
        tags=["Attendance"],
        parameters=PERIOD_PARAMETERS,
        responses=LopResultSerializer,
    )
    def get(self, request):
        query = PeriodQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        data = query.validated_data
        employee = _target_employee(request, data.get("employee"))
        lop_days = services.resolve_lop_days(employee.pk, data["month"], data["year"])
        result = LopResultSerializer(
            {
                "employee": employee.pk,
                "month": data["month"],
                "year": data["year"],
                "lop_days": lop_days,
            }
        )
        return Response(result.data)
