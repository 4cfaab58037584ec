"""Serializers for Employees API."""

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from django.utils.crypto import get_random_string
from rest_framework import serializers

from payrollpro.employees.models import BankDetail
from payrollpro.employees.models import Employee
from payrollpro.employees.models import ifsc_validator
from payrollpro.users.models import User


class BankDetailSerializer(serializers.ModelSerializer):
    account_number = serializers.CharField(write_only=True)
    masked_account_number = serializers.CharField(read_only=True)
    ifsc_code = serializers.CharField(max_length=11)

    class Meta:
        model = BankDetail
        fields = [
            "account_number",
            "masked_account_number",
            "account_holder_name",
            "ifsc_code",
            "bank_name",
            "branch",
        ]

    def validate_ifsc_code(self, value: str) -> str:
        value = value.strip().upper()
        try:
            ifsc_validator(value)
        except DjangoValidationError as exc:
            raise serializers.ValidationError(exc.messages) from exc
        return value


class EmployeeSerializer(serializers.ModelSerializer):
    full_name = serializers.CharField(read_only=True)
    email = serializers.EmailField(read_only=True)
    bank_detail = BankDetailSerializer(read_only=True)

    class Meta:
        model = Employee
        fields = [
            "id",
            "employee_id",
            "full_name",
            "email",
            "phone",
            "department",
            "designation",
            "date_of_joining",
            "status",
            "pan_number",
            "bank_detail",
        ]
        read_only_fields = ["employee_id"]


class EmployeeCreateSerializer(serializers.Serializer):
    """Creates the login user, the employee and (optionally) bank details."""

    first_name = serializers.CharField(max_length=150)
    last_name = serializers.CharField(max_length=150)
    email = serializers.EmailField()
    phone = serializers.CharField(required=False, allow_blank=True, max_length=20)
    department = serializers.ChoiceField(choices=Employee.Department.choices)
    designation = serializers.CharField(max_length=150)
    date_of_joining = serializers.DateField(required=False)
    pan_number = serializers.RegexField(
        r"^[A-Z]{5}[0-9]{4}[A-Z]$", required=False, allow_blank=True
    )
    bank_detail = BankDetailSerializer(required=False)

    def validate_email(self, value: str) -> str:
        if User.objects.filter(email__iexact=value).exists():
            msg = "A user with this email already exists."
            raise serializers.ValidationError(msg)
        return value.lower()

    def _generate_username(self, first_name: str, last_name: str) -> str:
        """``<first>.<last>-<salt>``, lowercased, with a 4 char salt."""
        base = (first_name + "." + last_name).lower().replace(" ", "") or "user"
        base = "".join(ch for ch in base if ch.isalnum() or ch in {".", "-", "_"})
        while True:
            salt = get_random_string(
                4, allowed_chars="abcdefghijklmnopqrstuvwxyz0123456789"
            )
            candidate = f"{base}-{salt}"
            if not User.objects.filter(username=candidate).exists():
                return candidate

    @transaction.atomic
    def create(self, validated):
        bank = validated.pop("bank_detail", None)
        first = validated.pop("first_name").strip()
        last = validated.pop("last_name").strip()
        raw_password = get_random_string(12)
        user = User.objects.create_user(
            username=self._generate_username(first, last),
            email=validated.pop("email"),
            password=raw_password,
            first_name=first,
            last_name=last,
        )
        employee = Employee.objects.create(user=user, **validated)
        if bank:
            BankDetail.objects.create(employee=employee, **bank)
        self.created_credentials = {
            "username": user.username,
            "email": user.email,
            "password": raw_password,
        }
        return employee

    def to_representation(self, instance):
        return EmployeeSerializer(instance, context=self.context).data
