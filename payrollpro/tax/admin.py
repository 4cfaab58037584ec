from django.contrib import admin

from payrollpro.tax import models


@admin.register(models.TaxDeclaration)
class TaxDeclarationAdmin(admin.ModelAdmin):
    list_display = [
        "id",
        "employee",
        "financial_year",
        "status",
        "total_deductions",
        "estimated_tax_savings",
        "submitted_at",
    ]
    search_fields = ["employee__employee_id", "landlord_name"]
    list_filter = ["financial_year", "status", "is_metro"]
    raw_id_fields = ["employee", "verified_by"]
