from django.contrib import admin

from payrollpro.attendance import models


@admin.register(models.Attendance)
class AttendanceAdmin(admin.ModelAdmin):
    list_display = [
        "id",
        "employee",
        "date",
        "status",
        "check_in",
        "check_out",
        "work_hours",
        "is_late",
    ]
    search_fields = ["employee__employee_id", "check_in_location", "notes"]
    list_filter = ["status", "is_late", "date"]
    raw_id_fields = ["employee"]
