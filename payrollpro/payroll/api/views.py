import logging

from django.db import transaction
from drf_spectacular.utils import OpenApiParameter
from drf_spectacular.utils import OpenApiTypes
from drf_spectacular.utils import extend_schema
from drf_spectacular.utils import extend_schema_view
from rest_framework import permissions
from rest_framework import status
from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from payrollpro.audit.utils import log_action
from payrollpro.payroll import services
from payrollpro.payroll.exceptions import RecordNotFound
from payrollpro.payroll.finalizer import PaymentFinalizer
from payrollpro.payroll.models import PayrollGeneralSetting
from payrollpro.payroll.models import PayrollRecord
from payrollpro.payroll.models import SalaryStructure
from payrollpro.payroll.periods import parse_period
from payrollpro.payroll.periods import validate_year
from payrollpro.payroll.tasks import pay_period_task
from payrollpro.payroll.tasks import process_period_task
from payrollpro.users.api.permissions import IsPayrollAdmin

from .serializers import AdjustmentInputSerializer
from .serializers import BatchPaymentResultSerializer
from .serializers import BatchResultSerializer
from .serializers import PayrollGeneralSettingSerializer
from .serializers import PayrollRecordSerializer
from .serializers import PayslipSerializer
from .serializers import ProcessPeriodSerializer
from .serializers import SalaryStructureSerializer

logger = logging.getLogger(__name__)

PERIOD_PATTERN = r"(?P<period>\d{4}-\d{2})"
ASYNC_PARAMETER = OpenApiParameter(
    "async",
    OpenApiTypes.BOOL,
    OpenApiParameter.QUERY,
    description="Queue the batch on Celery and answer 202 with the task id",
)


def _wants_async(request) -> bool:
    return request.query_params.get("async") in {"1", "true", "True"}


@extend_schema_view(
    list=extend_schema(tags=["Payroll • Records"]),
    retrieve=extend_schema(tags=["Payroll • Records"]),
    process=extend_schema(
        tags=["Payroll • Records"],
        request=ProcessPeriodSerializer,
        responses={201: BatchResultSerializer},
        parameters=[ASYNC_PARAMETER],
    ),
    by_month=extend_schema(tags=["Payroll • Records"]),
    stats=extend_schema(tags=["Payroll • Records"]),
    payslip_status=extend_schema(tags=["Payroll • Payslips"]),
    adjustment=extend_schema(
        tags=["Payroll • Records"], request=AdjustmentInputSerializer
    ),
    approve=extend_schema(tags=["Payroll • Records"], request=None),
    revoke=extend_schema(tags=["Payroll • Records"], request=None),
    pay=extend_schema(tags=["Payroll • Payments"], request=None),
    resend_notification=extend_schema(tags=["Payroll • Payments"], request=None),
    bulk_approve=extend_schema(tags=["Payroll • Records"], request=None),
    bulk_revoke=extend_schema(tags=["Payroll • Records"], request=None),
    bulk_pay=extend_schema(
        tags=["Payroll • Payments"],
        request=None,
        responses=BatchPaymentResultSerializer,
        parameters=[ASYNC_PARAMETER],
    ),
)
class PayrollRecordViewSet(viewsets.ReadOnlyModelViewSet):
    """Payroll records and their approval/payment workflow (payroll admins)."""

    queryset = PayrollRecord.objects.select_related(
        "employee__user", "approved_by"
    ).prefetch_related("adjustments")
    serializer_class = PayrollRecordSerializer
    permission_classes = [permissions.IsAuthenticated, IsPayrollAdmin]
    filterset_fields = ["month", "year", "status", "employee"]
    search_fields = ["employee__employee_id", "employee__user__email"]
    lookup_value_regex = r"\d+"

    def get_finalizer(self) -> PaymentFinalizer:
        return PaymentFinalizer()

    def _record_response(self, record):
        record = self.get_queryset().get(pk=record.pk)
        return Response(self.get_serializer(record).data)

    @action(detail=False, methods=["post"])
    def process(self, request):
        payload = ProcessPeriodSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        month, year = payload.validated_data["month"], payload.validated_data["year"]
        if _wants_async(request):
            task = process_period_task.delay(month, year, actor_id=request.user.pk)
            return Response({"task_id": task.id}, status=status.HTTP_202_ACCEPTED)
        result = services.process_period(month, year, actor=request.user)
        return Response(
            BatchResultSerializer(result).data, status=status.HTTP_201_CREATED
        )

    @action(detail=False, methods=["get"], url_path=f"month/{PERIOD_PATTERN}")
    def by_month(self, request, period=None):
        year, month = parse_period(period)
        records = self.filter_queryset(self.get_queryset()).filter(month=period)
        if not records.exists():
            msg = f"No payroll records found for {period}"
            raise RecordNotFound(msg)
        return Response(
            {
                "month": period,
                "summary": services.monthly_summary(month, year),
                "records": self.get_serializer(records, many=True).data,
            }
        )

    @action(detail=False, methods=["get"])
    def stats(self, request):
        year = request.query_params.get("year")
        return Response(
            services.payroll_stats(validate_year(year) if year else None)
        )

    @action(
        detail=False, methods=["get"], url_path=f"payslip-status/{PERIOD_PATTERN}"
    )
    def payslip_status(self, request, period=None):
        parse_period(period)
        records = self.get_queryset().filter(month=period)
        if not records.exists():
            msg = "No payroll records found for this month"
            raise RecordNotFound(msg)
        details = [
            {
                "record": r.pk,
                "employee_id": r.employee.employee_id,
                "name": r.employee.full_name,
                "payslip_generated": r.payslip_generated,
                "email_sent": r.notification_sent,
                "payslip_url": r.payslip_url,
            }
            for r in records
        ]
        return Response(
            {
                "total": len(details),
                "payslips_generated": sum(d["payslip_generated"] for d in details),
                "emails_sent": sum(d["email_sent"] for d in details),
                "pending": sum(not d["payslip_generated"] for d in details),
                "details": details,
            }
        )

    @action(detail=True, methods=["put"])
    def adjustment(self, request, pk=None):
        payload = AdjustmentInputSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        data = payload.validated_data
        record = services.add_adjustment(
            int(pk),
            data["type"],
            data["amount"],
            data["description"],
            actor=request.user,
            request=request,
        )
        return self._record_response(record)

    @action(detail=True, methods=["put"])
    def approve(self, request, pk=None):
        record = services.approve(int(pk), actor=request.user, request=request)
        return self._record_response(record)

    @action(detail=True, methods=["put"])
    def revoke(self, request, pk=None):
        record = services.revoke(int(pk), actor=request.user, request=request)
        return self._record_response(record)

    @action(detail=True, methods=["put"])
    def pay(self, request, pk=None):
        record = self.get_finalizer().pay(int(pk), actor=request.user, request=request)
        return self._record_response(record)

    @action(detail=True, methods=["post"], url_path="resend-notification")
    def resend_notification(self, request, pk=None):
        record = self.get_finalizer().resend_notification(int(pk))
        return Response(
            {
                "employee_email": record.employee.email,
                "sent_at": record.notification_sent_at,
            }
        )

    @action(detail=False, methods=["post"], url_path=f"bulk-approve/{PERIOD_PATTERN}")
    def bulk_approve(self, request, period=None):
        return Response(services.approve_all_for_month(period, actor=request.user))

    @action(detail=False, methods=["post"], url_path=f"bulk-revoke/{PERIOD_PATTERN}")
    def bulk_revoke(self, request, period=None):
        return Response(services.revoke_all_for_month(period, actor=request.user))

    @action(detail=False, methods=["post"], url_path=f"bulk-pay/{PERIOD_PATTERN}")
    def bulk_pay(self, request, period=None):
        parse_period(period)
        if _wants_async(request):
            task = pay_period_task.delay(period, actor_id=request.user.pk)
            return Response({"task_id": task.id}, status=status.HTTP_202_ACCEPTED)
        result = self.get_finalizer().pay_batch(period, actor=request.user)
        return Response(BatchPaymentResultSerializer(result).data)


@extend_schema_view(
    list=extend_schema(tags=["Payroll • Payslips"]),
    retrieve=extend_schema(tags=["Payroll • Payslips"]),
)
class PayslipViewSet(viewsets.ReadOnlyModelViewSet):
    """The authenticated employee's paid payroll records."""

    serializer_class = PayslipSerializer
    permission_classes = [permissions.IsAuthenticated]
    filterset_fields = ["year", "month"]

    def get_queryset(self):
        return PayrollRecord.objects.filter(
            employee__user=self.request.user,
            status=PayrollRecord.Status.PAID,
            payslip_generated=True,
        ).order_by("-month")


@extend_schema_view(
    list=extend_schema(tags=["Payroll • Salary Structures"]),
    retrieve=extend_schema(tags=["Payroll • Salary Structures"]),
    create=extend_schema(tags=["Payroll • Salary Structures"]),
    update=extend_schema(tags=["Payroll • Salary Structures"]),
    partial_update=extend_schema(tags=["Payroll • Salary Structures"]),
    destroy=extend_schema(tags=["Payroll • Salary Structures"]),
)
class SalaryStructureViewSet(viewsets.ModelViewSet):
    queryset = SalaryStructure.objects.select_related("employee__user")
    serializer_class = SalaryStructureSerializer
    permission_classes = [permissions.IsAuthenticated, IsPayrollAdmin]
    filterset_fields = ["employee"]
    search_fields = ["employee__employee_id", "employee__user__email"]

    def perform_create(self, serializer):
        structure = serializer.save()
        log_action(
            "salary_structure_created",
            actor=self.request.user,
            model_name="payroll.SalaryStructure",
            record_id=structure.pk,
            after=serializer.data,
            request=self.request,
        )

    def perform_update(self, serializer):
        before = SalaryStructureSerializer(serializer.instance).data
        with transaction.atomic():
            structure = serializer.save()
            log_action(
                "salary_structure_updated",
                actor=self.request.user,
                model_name="payroll.SalaryStructure",
                record_id=structure.pk,
                before=before,
                after=serializer.data,
                request=self.request,
            )


@extend_schema_view(
    list=extend_schema(tags=["Payroll • Settings"]),
    retrieve=extend_schema(tags=["Payroll • Settings"]),
    update=extend_schema(tags=["Payroll • Settings"]),
    partial_update=extend_schema(tags=["Payroll • Settings"]),
)
class PayrollGeneralSettingViewSet(viewsets.ModelViewSet):
    serializer_class = PayrollGeneralSettingSerializer
    permission_classes = [permissions.IsAuthenticated, IsPayrollAdmin]
    http_method_names = ["get", "put", "patch", "head", "options"]  # No create/delete

    def get_queryset(self):
        PayrollGeneralSetting.load()
        return PayrollGeneralSetting.objects.all()
