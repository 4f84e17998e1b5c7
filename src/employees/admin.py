"""Django admin for the employees module."""
from django.contrib import admin

from employees.models import (
    Employee,
    IncentivePercentageHistory,
    MonthlyOnboardingRecord,
    OnboardedMerchant,
)


class IncentivePercentageHistoryInline(admin.TabularInline):
    model = IncentivePercentageHistory
    extra = 0
    ordering = ("-effective_from", "-id")
    fields = ("effective_from", "percentage", "created_at")
    readonly_fields = ("created_at",)


class OnboardedMerchantInline(admin.TabularInline):
    model = OnboardedMerchant
    extra = 0
    fields = ("merchant_id", "name", "email", "package", "revenue", "created_at")
    readonly_fields = fields
    can_delete = False


@admin.register(Employee)
class EmployeeAdmin(admin.ModelAdmin):
    list_display = (
        "emp_id", "full_name", "email", "status",
        "total_onboarded", "onboarding_incentive_earned", "total_bonus_earned",
    )
    list_filter = ("status", "department", "branch")
    search_fields = ("emp_id", "first_name", "last_name", "email", "phone")
    inlines = [IncentivePercentageHistoryInline]
    readonly_fields = (
        "total_onboarded", "onboarding_incentive_earned", "total_bonus_earned",
        "created_at", "updated_at",
    )


@admin.register(MonthlyOnboardingRecord)
class MonthlyOnboardingRecordAdmin(admin.ModelAdmin):
    list_display = (
        "employee", "period", "onboarded_count",
        "revenue_target", "bonus_amount", "bonus_calculated_at",
    )
    list_filter = ("year", "month")
    search_fields = ("employee__emp_id", "employee__first_name", "employee__last_name")
    ordering = ("-year", "-month")
    inlines = [OnboardedMerchantInline]
    readonly_fields = ("onboarded_count", "bonus_amount", "bonus_calculated_at", "created_at", "updated_at")
