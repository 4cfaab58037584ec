from django.contrib import admin

from payrollpro.employees import models


class BankDetailInline(admin.StackedInline):
    model = models.BankDetail
    extra = 0


@admin.register(models.Employee)
class EmployeeAdmin(admin.ModelAdmin):
    list_display = ["employee_id", "user", "department", "designation", "status"]
    search_fields = [
        "employee_id",
        "user__first_name",
        "user__last_name",
        "user__email",
        "designation",
    ]
    list_filter = ["department", "status", "is_deleted", "date_of_joining"]
    readonly_fields = ["employee_id", "created_at", "updated_at"]
    inlines = [BankDetailInline]
