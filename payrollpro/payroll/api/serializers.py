from decimal import Decimal

from rest_framework import serializers

from payrollpro.payroll.calculator import validate_salary_structure
from payrollpro.payroll.exceptions import PayrollValidationError
from payrollpro.payroll.models import PayrollAdjustment
from payrollpro.payroll.models import PayrollGeneralSetting
from payrollpro.payroll.models import PayrollRecord
from payrollpro.payroll.models import SalaryStructure


class PayrollGeneralSettingSerializer(serializers.ModelSerializer):
    class Meta:
        model = PayrollGeneralSetting
        fields = [
            "id",
            "currency",
            "lop_day_basis",
            "fixed_day_divisor",
            "minimum_basic_salary",
            "assume_full_pay_without_attendance",
            "office_start",
            "updated_at",
        ]
        read_only_fields = ["id", "updated_at"]


class SalaryStructureSerializer(serializers.ModelSerializer):
    employee_name = serializers.CharField(source="employee.full_name", read_only=True)
    gross = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
    yearly_ctc = serializers.DecimalField(
        max_digits=14, decimal_places=2, read_only=True
    )

    class Meta:
        model = SalaryStructure
        fields = [
            "id",
            "employee",
            "employee_name",
            "basic_salary",
            "hra",
            "da",
            "special_allowance",
            "other_allowances",
            "pf_percentage",
            "esi_percentage",
            "professional_tax",
            "effective_from",
            "gross",
            "yearly_ctc",
            "updated_at",
        ]
        read_only_fields = ["updated_at"]

    def validate(self, attrs):
        merged = {}
        if self.instance is not None:
            merged = {
                field.name: getattr(self.instance, field.name)
                for field in SalaryStructure._meta.concrete_fields  # noqa: SLF001
            }
        merged.update(attrs)
        minimum = PayrollGeneralSetting.load().minimum_basic_salary
        try:
            validate_salary_structure(merged, minimum_basic=minimum)
        except PayrollValidationError as exc:
            raise serializers.ValidationError(exc.message) from exc
        return attrs


class PayrollAdjustmentSerializer(serializers.ModelSerializer):
    signed_amount = serializers.DecimalField(
        max_digits=12, decimal_places=2, read_only=True
    )

    class Meta:
        model = PayrollAdjustment
        fields = [
            "id",
            "adjustment_type",
            "amount",
            "signed_amount",
            "description",
            "added_by",
            "added_at",
        ]
        read_only_fields = fields


class PayrollRecordSerializer(serializers.ModelSerializer):
    employee_id = serializers.CharField(source="employee.employee_id", read_only=True)
    employee_name = serializers.CharField(source="employee.full_name", read_only=True)
    department = serializers.CharField(source="employee.department", read_only=True)
    adjustments = PayrollAdjustmentSerializer(many=True, read_only=True)

    class Meta:
        model = PayrollRecord
        fields = [
            "id",
            "employee",
            "employee_id",
            "employee_name",
            "department",
            "month",
            "year",
            "basic",
            "hra",
            "da",
            "special_allowance",
            "other_allowances",
            "gross",
            "pf",
            "professional_tax",
            "esi",
            "lop_days",
            "lop_deduction",
            "total_deductions",
            "total_adjustment",
            "net_salary",
            "adjustments",
            "status",
            "payment_method",
            "transaction_id",
            "processed_at",
            "approved_at",
            "approved_by",
            "paid_at",
            "payslip_url",
            "payslip_generated",
            "notification_sent",
            "remarks",
        ]
        read_only_fields = fields


class PayslipSerializer(serializers.ModelSerializer):
    """What an employee sees of their own paid record."""

    class Meta:
        model = PayrollRecord
        fields = [
            "id",
            "month",
            "year",
            "gross",
            "total_deductions",
            "total_adjustment",
            "net_salary",
            "status",
            "transaction_id",
            "paid_at",
            "payslip_url",
        ]
        read_only_fields = fields


class ProcessPeriodSerializer(serializers.Serializer):
    month = serializers.IntegerField(min_value=1, max_value=12)
    year = serializers.IntegerField(min_value=2020, max_value=2100)


class AdjustmentInputSerializer(serializers.Serializer):
    type = serializers.ChoiceField(
        choices=PayrollAdjustment.Type.choices, default=PayrollAdjustment.Type.BONUS
    )
    amount = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=Decimal("0.01")
    )
    description = serializers.CharField(
        max_length=PayrollAdjustment.DESCRIPTION_MAX_LENGTH,
        required=False,
        allow_blank=True,
        default="",
    )


class EmployeeErrorSerializer(serializers.Serializer):
    employee = serializers.IntegerField()
    employee_id = serializers.CharField()
    error = serializers.CharField()
    kind = serializers.CharField()


class BatchResultSerializer(serializers.Serializer):
    month = serializers.CharField()
    processed = serializers.IntegerField()
    errored = serializers.IntegerField()
    skipped_existing = serializers.IntegerField()
    records = PayrollRecordSerializer(many=True)
    errors = EmployeeErrorSerializer(many=True)


class BatchPaymentResultSerializer(serializers.Serializer):
    month = serializers.CharField()
    successful = serializers.IntegerField()
    failed = serializers.IntegerField()
    details = serializers.ListField(child=serializers.DictField())
