from rest_framework import serializers

from payrollpro.attendance.models import Attendance


class AttendanceSerializer(serializers.ModelSerializer):
    employee_id = serializers.CharField(source="employee.employee_id", read_only=True)
    work_time = serializers.SerializerMethodField(read_only=True)

    class Meta:
        model = Attendance
        fields = [
            "id",
            "employee",
            "employee_id",
            "date",
            "status",
            "check_in",
            "check_in_location",
            "check_out",
            "check_out_location",
            "work_hours",
            "work_time",
            "is_late",
            "late_minutes",
            "notes",
        ]
        read_only_fields = ["work_hours", "work_time", "is_late", "late_minutes"]

    def get_work_time(self, obj) -> str | None:
        if not (obj.check_in and obj.check_out):
            return None
        total_seconds = int(max(0, (obj.check_out - obj.check_in).total_seconds()))
        hours, rem = divmod(total_seconds, 3600)
        minutes, seconds = divmod(rem, 60)
        return f"{hours:02d}:{minutes:02d}:{seconds:02d}"

    def validate(self, attrs):
        check_in = attrs.get("check_in", getattr(self.instance, "check_in", None))
        check_out = attrs.get("check_out", getattr(self.instance, "check_out", None))
        if check_in and check_out and check_out < check_in:
            raise serializers.ValidationError(
                {"check_out": "Check-out cannot be before check-in."}
            )
        return attrs


class CheckInOutSerializer(serializers.Serializer):
    location = serializers.CharField(required=False, allow_blank=True, default="")


class PeriodQuerySerializer(serializers.Serializer):
    month = serializers.IntegerField(min_value=1, max_value=12)
    year = serializers.IntegerField(min_value=2020, max_value=2100)
    employee = serializers.IntegerField(required=False)


class LopResultSerializer(serializers.Serializer):
    employee = serializers.IntegerField()
    month = serializers.IntegerField()
    year = serializers.IntegerField()
    lop_days = serializers.DecimalField(max_digits=6, decimal_places=2)
