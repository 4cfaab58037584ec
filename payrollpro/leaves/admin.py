from django.contrib import admin

from payrollpro.leaves import models


@admin.register(models.LeaveRequest)
class LeaveRequestAdmin(admin.ModelAdmin):
    list_display = [
        "id",
        "employee",
        "leave_type",
        "start_date",
        "end_date",
        "total_days",
        "status",
    ]
    search_fields = ["employee__employee_id", "reason", "rejection_reason"]
    list_filter = ["leave_type", "status", "start_date"]
    raw_id_fields = ["employee", "approved_by"]
