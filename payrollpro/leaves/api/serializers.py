from django.utils.translation import gettext_lazy as _
from rest_framework import serializers

from payrollpro.leaves.models import LeaveRequest


class LeaveRequestSerializer(serializers.ModelSerializer):
    employee_id = serializers.CharField(source="employee.employee_id", read_only=True)
    employee_name = serializers.CharField(source="employee.full_name", read_only=True)

    class Meta:
        model = LeaveRequest
        fields = [
            "id",
            "employee",
            "employee_id",
            "employee_name",
            "leave_type",
            "start_date",
            "end_date",
            "total_days",
            "reason",
            "status",
            "approved_by",
            "approved_at",
            "rejection_reason",
            "remarks",
            "created_at",
        ]
        read_only_fields = (
            "employee",
            "status",
            "approved_by",
            "approved_at",
            "rejection_reason",
            "remarks",
        )
        extra_kwargs = {"total_days": {"required": False}}

    def validate(self, attrs):
        start_date = attrs.get("start_date")
        end_date = attrs.get("end_date")
        if start_date and end_date and start_date > end_date:
            msg = _("Start date cannot be after end date.")
            raise serializers.ValidationError(msg)
        return attrs


class LeaveDecisionSerializer(serializers.Serializer):
    remarks = serializers.CharField(required=False, allow_blank=True, default="")


class LeaveRejectionSerializer(serializers.Serializer):
    rejection_reason = serializers.CharField(max_length=500)
