"""Serializers for the employees module."""
from decimal import Decimal

from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import serializers

from employees.engine import MAX_AMOUNT, BonusRule, to_decimal
from employees.models import (
    Employee,
    IncentivePercentageHistory,
    MonthlyOnboardingRecord,
    OnboardedMerchant,
)


def _as_drf_error(exc: DjangoValidationError) -> serializers.ValidationError:
    if hasattr(exc, "message_dict"):
        return serializers.ValidationError(exc.message_dict)
    return serializers.ValidationError(exc.messages)


def validate_tier_mapping(value, *, upper=None, label="value"):
    """Check a ``{package: number}`` mapping and return it unchanged."""
    if not isinstance(value, dict):
        raise serializers.ValidationError("Expected an object of package -> number.")
    for package, amount in value.items():
        if not str(package).strip():
            raise serializers.ValidationError("Package names must be non-empty.")
        try:
            number = to_decimal(amount, label)
        except DjangoValidationError:
            raise serializers.ValidationError(f"{label.capitalize()} for {package!r} must be a number.")
        if number < 0 or (upper is not None and number > upper):
            bound = f"between 0 and {upper}" if upper is not None else "zero or more"
            raise serializers.ValidationError(f"{label.capitalize()} for {package!r} must be {bound}.")
        if number >= MAX_AMOUNT:
            raise serializers.ValidationError(f"{label.capitalize()} for {package!r} is too large.")
    return value


# ---------------------------------------------------------------------------
# Employee
# ---------------------------------------------------------------------------

class EmployeeListSerializer(serializers.ModelSerializer):
    """Light serializer for lists."""
    full_name = serializers.CharField(read_only=True)

    class Meta:
        model = Employee
        fields = [
            "id", "emp_id", "first_name", "last_name", "full_name",
            "email", "phone", "department", "branch", "role", "status",
            "total_onboarded", "onboarding_incentive_earned", "total_bonus_earned",
            "created_at",
        ]
        read_only_fields = fields


class EmployeeDetailSerializer(serializers.ModelSerializer):
    """Full serializer for create/retrieve/update.

    ``incentive_percentages`` is read-only here: rate changes must go
    through the incentives action so that a history entry is recorded.
    """
    full_name = serializers.CharField(read_only=True)

    class Meta:
        model = Employee
        fields = [
            "id", "emp_id", "first_name", "last_name", "full_name",
            "email", "phone", "address", "joining_date",
            "department", "branch", "role", "status",
            "package_prices", "incentive_percentages",
            "default_monthly_revenue_target", "default_bonus_rule",
            "total_onboarded", "onboarding_incentive_earned", "total_bonus_earned",
            "meta", "created_at", "updated_at",
        ]
        read_only_fields = [
            "id", "incentive_percentages",
            "total_onboarded", "onboarding_incentive_earned", "total_bonus_earned",
            "created_at", "updated_at",
        ]

    def validate_package_prices(self, value):
        return validate_tier_mapping(value, label="price")

    def validate_default_bonus_rule(self, value):
        try:
            rule = BonusRule.from_dict(value)
        except DjangoValidationError as exc:
            raise _as_drf_error(exc)
        if rule is None:
            raise serializers.ValidationError("A bonus rule is required.")
        return rule.to_dict()


# ---------------------------------------------------------------------------
# Incentive percentages
# ---------------------------------------------------------------------------

class IncentivePercentageHistorySerializer(serializers.ModelSerializer):
    class Meta:
        model = IncentivePercentageHistory
        fields = ["id", "percentage", "effective_from", "created_at"]
        read_only_fields = fields


class IncentivePercentagesUpdateSerializer(serializers.Serializer):
    incentive_percentages = serializers.DictField(child=serializers.JSONField())
    effective_from = serializers.DateField(
        input_formats=["%Y-%m-%d"],
        error_messages={"invalid": "Invalid date format. Use YYYY-MM-DD."},
    )

    def validate_incentive_percentages(self, value):
        return validate_tier_mapping(value, upper=Decimal("100"), label="percentage")


class ApplicablePercentageQuerySerializer(serializers.Serializer):
    package = serializers.CharField()
    date = serializers.DateField(
        required=False,
        input_formats=["%Y-%m-%d"],
        error_messages={"invalid": "Invalid date format. Use YYYY-MM-DD."},
    )


# ---------------------------------------------------------------------------
# Onboarding / monthly records
# ---------------------------------------------------------------------------

class OnboardedMerchantSerializer(serializers.ModelSerializer):
    class Meta:
        model = OnboardedMerchant
        fields = ["id", "merchant_id", "name", "email", "package", "revenue", "created_at"]
        read_only_fields = fields


class MonthlyOnboardingRecordSerializer(serializers.ModelSerializer):
    period = serializers.CharField(read_only=True)
    onboarded_merchants = OnboardedMerchantSerializer(many=True, read_only=True)

    class Meta:
        model = MonthlyOnboardingRecord
        fields = [
            "id", "year", "month", "period", "revenue_target",
            "onboarded_count", "bonus_rule", "bonus_amount", "bonus_calculated_at",
            "notes", "onboarded_merchants", "created_at", "updated_at",
        ]
        read_only_fields = fields


class PeriodSerializer(serializers.Serializer):
    year = serializers.IntegerField(min_value=1970, max_value=9999)
    month = serializers.IntegerField(min_value=1, max_value=12)


class MerchantOnboardingSerializer(serializers.Serializer):
    merchant_id = serializers.CharField(max_length=64)
    name = serializers.CharField(max_length=255)
    email = serializers.EmailField(allow_blank=True, default="")
    package = serializers.CharField(max_length=100)
    year = serializers.IntegerField(required=False, min_value=1970, max_value=9999)
    month = serializers.IntegerField(required=False, min_value=1, max_value=12)


class MonthlySummarySerializer(serializers.Serializer):
    """Read-only rendering of :meth:`IncentiveLedger.monthly_summary`."""
    year = serializers.IntegerField()
    month = serializers.IntegerField()
    revenue_target = serializers.DecimalField(max_digits=14, decimal_places=2)
    total_revenue = serializers.DecimalField(max_digits=14, decimal_places=2)
    excess = serializers.DecimalField(max_digits=14, decimal_places=2)
    bonus_rule = serializers.JSONField(allow_null=True)
    projected_bonus = serializers.DecimalField(max_digits=14, decimal_places=2)
    bonus_amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    bonus_calculated_at = serializers.DateTimeField(allow_null=True)
    onboarded_count = serializers.IntegerField()
    onboarded_merchants = OnboardedMerchantSerializer(many=True)
