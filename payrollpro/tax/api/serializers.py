from rest_framework import serializers

from payrollpro.tax.models import TaxDeclaration
from payrollpro.tax.services import EDITABLE_FIELDS


class TaxDeclarationSerializer(serializers.ModelSerializer):
    employee_id = serializers.CharField(source="employee.employee_id", read_only=True)
    employee_name = serializers.CharField(source="employee.full_name", read_only=True)
    submit = serializers.BooleanField(write_only=True, required=False, default=True)

    class Meta:
        model = TaxDeclaration
        fields = [
            "id",
            "employee",
            "employee_id",
            "employee_name",
            "financial_year",
            *EDITABLE_FIELDS,
            "section_80c_total",
            "section_80d_total",
            "total_deductions",
            "estimated_tax_savings",
            "status",
            "submitted_at",
            "verified_by",
            "verified_at",
            "remarks",
            "submit",
        ]
        read_only_fields = [
            "employee",
            "section_80c_total",
            "section_80d_total",
            "total_deductions",
            "estimated_tax_savings",
            "status",
            "submitted_at",
            "verified_by",
            "verified_at",
            "remarks",
        ]
        extra_kwargs = {"financial_year": {"required": False}}
        # Uniqueness per (employee, year) is handled by the upsert in the service.
        validators = []


class TaxRejectionSerializer(serializers.Serializer):
    remarks = serializers.CharField(max_length=500)


class Section80CInputSerializer(serializers.Serializer):
    lic = serializers.DecimalField(max_digits=12, decimal_places=2, required=False)
    ppf = serializers.DecimalField(max_digits=12, decimal_places=2, required=False)
    elss = serializers.DecimalField(max_digits=12, decimal_places=2, required=False)
    home_loan_principal = serializers.DecimalField(
        max_digits=12, decimal_places=2, required=False
    )
    nsc = serializers.DecimalField(max_digits=12, decimal_places=2, required=False)
    fixed_deposit = serializers.DecimalField(
        max_digits=12, decimal_places=2, required=False
    )
    tuition_fees = serializers.DecimalField(
        max_digits=12, decimal_places=2, required=False
    )


class Section80DInputSerializer(serializers.Serializer):
    self_and_family = serializers.DecimalField(
        max_digits=12, decimal_places=2, required=False
    )
    parents = serializers.DecimalField(max_digits=12, decimal_places=2, required=False)


class HRAInputSerializer(serializers.Serializer):
    rent_paid = serializers.DecimalField(max_digits=12, decimal_places=2)
    is_metro = serializers.BooleanField(required=False, default=False)
    landlord_name = serializers.CharField(required=False, allow_blank=True)
    landlord_pan = serializers.CharField(required=False, allow_blank=True)


class HomeLoanInputSerializer(serializers.Serializer):
    interest_paid = serializers.DecimalField(max_digits=12, decimal_places=2)


class TaxEstimateRequestSerializer(serializers.Serializer):
    """What-if declarations; an empty body estimates on the saved declaration."""

    section_80c = Section80CInputSerializer(required=False)
    section_80d = Section80DInputSerializer(required=False)
    hra = HRAInputSerializer(required=False)
    home_loan = HomeLoanInputSerializer(required=False)
    nps = serializers.DecimalField(max_digits=12, decimal_places=2, required=False)
    education_loan_interest = serializers.DecimalField(
        max_digits=12, decimal_places=2, required=False
    )


class DeductionBreakdownSerializer(serializers.Serializer):
    standard_deduction = serializers.DecimalField(max_digits=14, decimal_places=2)
    section_80c = serializers.DecimalField(max_digits=14, decimal_places=2)
    section_80d = serializers.DecimalField(max_digits=14, decimal_places=2)
    hra_exemption = serializers.DecimalField(max_digits=14, decimal_places=2)
    home_loan_interest = serializers.DecimalField(max_digits=14, decimal_places=2)
    nps = serializers.DecimalField(max_digits=14, decimal_places=2)
    education_loan_interest = serializers.DecimalField(max_digits=14, decimal_places=2)
    total = serializers.DecimalField(max_digits=14, decimal_places=2)


class TaxEstimateSerializer(serializers.Serializer):
    gross_income = serializers.DecimalField(max_digits=14, decimal_places=2)
    deductions = DeductionBreakdownSerializer()
    taxable_income = serializers.DecimalField(max_digits=14, decimal_places=2)
    tax_before_cess = serializers.DecimalField(max_digits=14, decimal_places=2)
    cess = serializers.DecimalField(max_digits=14, decimal_places=2)
    total_tax = serializers.DecimalField(max_digits=14, decimal_places=2)
    rebate = serializers.DecimalField(max_digits=14, decimal_places=2)
    final_tax = serializers.DecimalField(max_digits=14, decimal_places=2)
    annual_tds = serializers.DecimalField(max_digits=14, decimal_places=2)
    monthly_tds = serializers.DecimalField(max_digits=14, decimal_places=2)
    effective_tax_rate = serializers.DecimalField(max_digits=6, decimal_places=2)
