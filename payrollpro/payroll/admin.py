from django.contrib import admin

from payrollpro.payroll import models


@admin.register(models.PayrollGeneralSetting)
class PayrollGeneralSettingAdmin(admin.ModelAdmin):
    list_display = [
        "id",
        "currency",
        "lop_day_basis",
        "fixed_day_divisor",
        "minimum_basic_salary",
        "assume_full_pay_without_attendance",
    ]


@admin.register(models.SalaryStructure)
class SalaryStructureAdmin(admin.ModelAdmin):
    list_display = ["id", "employee", "basic_salary", "effective_from", "updated_at"]
    search_fields = ["employee__employee_id", "employee__user__email"]
    list_filter = ["updated_at"]
    raw_id_fields = ["employee"]


class PayrollAdjustmentInline(admin.TabularInline):
    model = models.PayrollAdjustment
    extra = 0
    readonly_fields = ["adjustment_type", "amount", "description", "added_by", "added_at"]
    can_delete = False


@admin.register(models.PayrollRecord)
class PayrollRecordAdmin(admin.ModelAdmin):
    list_display = [
        "id",
        "employee",
        "month",
        "gross",
        "total_deductions",
        "net_salary",
        "status",
        "payslip_generated",
        "notification_sent",
    ]
    search_fields = ["employee__employee_id", "transaction_id"]
    list_filter = ["status", "month", "payslip_generated", "notification_sent"]
    raw_id_fields = ["employee", "processed_by", "approved_by"]
    inlines = [PayrollAdjustmentInline]
    # Workflow fields change only through the record's transition methods.
    readonly_fields = [
        "status",
        "approved_at",
        "approved_by",
        "paid_at",
        "transaction_id",
        "net_salary",
        "total_adjustment",
    ]
