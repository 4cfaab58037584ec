"""Leaves API endpoints."""

import logging

from drf_spectacular.utils import extend_schema
from drf_spectacular.utils import extend_schema_view
from rest_framework import mixins
from rest_framework import status
from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from payrollpro.employees.models import Employee
from payrollpro.leaves import services
from payrollpro.leaves.api.serializers import LeaveDecisionSerializer
from payrollpro.leaves.api.serializers import LeaveRejectionSerializer
from payrollpro.leaves.api.serializers import LeaveRequestSerializer
from payrollpro.leaves.models import LeaveRequest
from payrollpro.users.api.permissions import IsPayrollAdmin
from payrollpro.users.api.permissions import is_payroll_admin

logger = logging.getLogger(__name__)


@extend_schema_view(
    list=extend_schema(tags=["Leaves"]),
    retrieve=extend_schema(tags=["Leaves"]),
    create=extend_schema(tags=["Leaves"]),
    destroy=extend_schema(tags=["Leaves"], description="Cancel a pending leave."),
    approve=extend_schema(tags=["Leaves"], request=LeaveDecisionSerializer),
    reject=extend_schema(tags=["Leaves"], request=LeaveRejectionSerializer),
    balance=extend_schema(tags=["Leaves"]),
)
class LeaveRequestViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.CreateModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    serializer_class = LeaveRequestSerializer
    permission_classes = [IsAuthenticated]
    filterset_fields = ["status", "leave_type", "employee"]

    def get_queryset(self):
        qs = LeaveRequest.objects.select_related("employee__user", "approved_by")
        user = self.request.user
        if is_payroll_admin(user):
            return qs
        return qs.filter(employee__user=user)

    def get_permissions(self):
        if self.action in {"approve", "reject"}:
            return [IsAuthenticated(), IsPayrollAdmin()]
        return super().get_permissions()

    def _own_employee(self):
        employee = getattr(self.request.user, "employee", None)
        if employee is None:
            raise ValidationError(
                {"detail": "User does not have an associated Employee profile."}
            )
        return employee

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        leave = services.apply_leave(
            self._own_employee(),
            leave_type=data["leave_type"],
            start_date=data["start_date"],
            end_date=data["end_date"],
            reason=data["reason"],
            total_days=data.get("total_days"),
            actor=request.user,
        )
        return Response(
            self.get_serializer(leave).data, status=status.HTTP_201_CREATED
        )

    def destroy(self, request, *args, **kwargs):
        leave = self.get_object()
        services.cancel_leave(leave.pk, user=request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["put"])
    def approve(self, request, pk=None):
        leave = self.get_object()
        payload = LeaveDecisionSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        leave = services.approve_leave(
            leave.pk, actor=request.user, remarks=payload.validated_data["remarks"]
        )
        return Response(self.get_serializer(leave).data)

    @action(detail=True, methods=["put"])
    def reject(self, request, pk=None):
        leave = self.get_object()
        payload = LeaveRejectionSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        leave = services.reject_leave(
            leave.pk,
            reason=payload.validated_data["rejection_reason"],
            actor=request.user,
        )
        return Response(self.get_serializer(leave).data)

    @action(detail=False, methods=["get"])
    def balance(self, request):
        """Leave balance for the caller, or ``?employee=<pk>`` for admins."""
        employee_pk = request.query_params.get("employee")
        if employee_pk and is_payroll_admin(request.user):
            try:
                employee = Employee.objects.get(pk=int(employee_pk))
            except (Employee.DoesNotExist, ValueError) as exc:
                raise ValidationError({"employee": "Employee not found"}) from exc
        else:
            employee = self._own_employee()
        year = request.query_params.get("year")
        balance = services.leave_balance(employee, int(year) if year else None)
        return Response({"employee": employee.employee_id, "balance": balance})
