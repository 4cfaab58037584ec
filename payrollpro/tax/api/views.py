import logging

from django.shortcuts import get_object_or_404
from drf_spectacular.utils import OpenApiParameter
from drf_spectacular.utils import OpenApiTypes
from drf_spectacular.utils import extend_schema
from drf_spectacular.utils import extend_schema_view
from rest_framework import mixins
from rest_framework import permissions
from rest_framework import status
from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response
from rest_framework.views import APIView

from payrollpro.employees.models import Employee
from payrollpro.tax import services
from payrollpro.tax.models import TaxDeclaration
from payrollpro.users.api.permissions import IsPayrollAdmin
from payrollpro.users.api.permissions import is_payroll_admin

from .serializers import TaxDeclarationSerializer
from .serializers import TaxEstimateRequestSerializer
from .serializers import TaxEstimateSerializer
from .serializers import TaxRejectionSerializer

logger = logging.getLogger(__name__)


def _own_employee(user) -> Employee:
    employee = getattr(user, "employee", None)
    if employee is None:
        raise ValidationError(
            {"detail": "User does not have an associated Employee profile."}
        )
    return employee


@extend_schema_view(
    list=extend_schema(tags=["Tax"]),
    retrieve=extend_schema(tags=["Tax"]),
    create=extend_schema(
        tags=["Tax"],
        description="Save (and by default submit) the current year's declaration.",
    ),
    verify=extend_schema(tags=["Tax"], request=None),
    reject=extend_schema(tags=["Tax"], request=TaxRejectionSerializer),
)
class TaxDeclarationViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.CreateModelMixin,
    viewsets.GenericViewSet,
):
    serializer_class = TaxDeclarationSerializer
    permission_classes = [permissions.IsAuthenticated]
    filterset_fields = ["financial_year", "status", "employee"]

    def get_queryset(self):
        qs = TaxDeclaration.objects.select_related("employee__user", "verified_by")
        if is_payroll_admin(self.request.user):
            return qs
        return qs.filter(employee__user=self.request.user)

    def get_permissions(self):
        if self.action in {"verify", "reject"}:
            return [permissions.IsAuthenticated(), IsPayrollAdmin()]
        return super().get_permissions()

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)
        submit = data.pop("submit", True)
        financial_year = data.pop("financial_year", None)
        declaration = services.submit_declaration(
            _own_employee(request.user),
            data,
            financial_year=financial_year,
            submit=submit,
            actor=request.user,
        )
        return Response(
            self.get_serializer(declaration).data, status=status.HTTP_201_CREATED
        )

    @action(detail=True, methods=["put"])
    def verify(self, request, pk=None):
        declaration = services.verify(self.get_object().pk, actor=request.user)
        return Response(self.get_serializer(declaration).data)

    @action(detail=True, methods=["put"])
    def reject(self, request, pk=None):
        payload = TaxRejectionSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        declaration = services.reject(
            self.get_object().pk,
            remarks=payload.validated_data["remarks"],
            actor=request.user,
        )
        return Response(self.get_serializer(declaration).data)


class TaxEstimateView(APIView):
    """Estimate annual and monthly tax on the employee's salary structure."""

    permission_classes = [permissions.IsAuthenticated]

    @extend_schema(
        tags=["Tax"],
        request=TaxEstimateRequestSerializer,
        responses=TaxEstimateSerializer,
        parameters=[
            OpenApiParameter(
                "employee",
                OpenApiTypes.INT,
                OpenApiParameter.QUERY,
                description="Employee pk (payroll admins only)",
            )
        ],
    )
    def post(self, request):
        employee_pk = request.query_params.get("employee")
        if employee_pk and is_payroll_admin(request.user):
            employee = get_object_or_404(Employee, pk=employee_pk)
        else:
            employee = _own_employee(request.user)
        payload = TaxEstimateRequestSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        estimate = services.estimate_for_employee(employee, payload.validated_data)
        return Response(TaxEstimateSerializer(estimate).data)
