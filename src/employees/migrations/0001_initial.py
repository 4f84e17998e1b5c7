import django.core.validators
import django.db.models.deletion
from decimal import Decimal

from django.db import migrations, models

import employees.models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Employee",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True, verbose_name="created at")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="updated at")),
                ("emp_id", models.CharField(max_length=30, unique=True, verbose_name="employee ID")),
                ("first_name", models.CharField(max_length=150, verbose_name="first name")),
                ("last_name", models.CharField(blank=True, default="", max_length=150, verbose_name="last name")),
                ("email", models.EmailField(blank=True, db_index=True, default="", max_length=254, verbose_name="email")),
                ("phone", models.CharField(blank=True, default="", max_length=30, verbose_name="phone")),
                ("address", models.TextField(blank=True, default="", verbose_name="address")),
                ("joining_date", models.DateField(blank=True, null=True, verbose_name="joining date")),
                ("department", models.CharField(blank=True, default="", max_length=100, verbose_name="department")),
                ("branch", models.CharField(blank=True, default="", max_length=100, verbose_name="branch")),
                ("role", models.CharField(blank=True, default="", max_length=100, verbose_name="role")),
                ("status", models.CharField(choices=[("active", "Active"), ("on_leave", "On leave"), ("suspended", "Suspended"), ("terminated", "Terminated")], db_index=True, default="active", max_length=20, verbose_name="status")),
                ("package_prices", models.JSONField(blank=True, default=dict, help_text="Package tier name -> price.", verbose_name="package prices")),
                ("incentive_percentages", models.JSONField(blank=True, default=dict, help_text="Package tier name -> current incentive percentage (0-100).", verbose_name="incentive percentages")),
                ("default_monthly_revenue_target", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=14, validators=[django.core.validators.MinValueValidator(Decimal("0"))], verbose_name="default monthly revenue target")),
                ("default_bonus_rule", models.JSONField(default=employees.models.default_bonus_rule, verbose_name="default bonus rule")),
                ("total_onboarded", models.PositiveIntegerField(default=0, verbose_name="total onboarded")),
                ("total_bonus_earned", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=14, verbose_name="total bonus earned")),
                ("onboarding_incentive_earned", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=14, verbose_name="onboarding incentive earned")),
                ("meta", models.JSONField(blank=True, default=dict, verbose_name="metadata")),
            ],
            options={
                "verbose_name": "employee",
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="IncentivePercentageHistory",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("percentage", models.JSONField(default=dict, verbose_name="percentages")),
                ("effective_from", models.DateTimeField(db_index=True, verbose_name="effective from")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("employee", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="incentive_percentage_history", to="employees.employee", verbose_name="employee")),
            ],
            options={
                "verbose_name": "incentive percentage history entry",
                "verbose_name_plural": "incentive percentage history",
                "ordering": ["effective_from", "id"],
            },
        ),
        migrations.CreateModel(
            name="MonthlyOnboardingRecord",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True, verbose_name="created at")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="updated at")),
                ("year", models.PositiveSmallIntegerField(verbose_name="year")),
                ("month", models.PositiveSmallIntegerField(validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(12)], verbose_name="month")),
                ("revenue_target", models.DecimalField(blank=True, decimal_places=2, help_text="Leave empty to use the employee's default target.", max_digits=14, null=True, verbose_name="revenue target")),
                ("onboarded_count", models.PositiveIntegerField(default=0, verbose_name="onboarded count")),
                ("bonus_rule", models.JSONField(blank=True, help_text="Leave empty to use the employee's default bonus rule.", null=True, verbose_name="bonus rule")),
                ("bonus_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=14, verbose_name="bonus amount")),
                ("bonus_calculated_at", models.DateTimeField(blank=True, null=True, verbose_name="bonus calculated at")),
                ("notes", models.TextField(blank=True, default="", verbose_name="notes")),
                ("employee", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="monthly_records", to="employees.employee", verbose_name="employee")),
            ],
            options={
                "verbose_name": "monthly onboarding record",
                "ordering": ["-year", "-month"],
                "constraints": [models.UniqueConstraint(fields=("employee", "year", "month"), name="uniq_employee_monthly_record")],
            },
        ),
        migrations.CreateModel(
            name="OnboardedMerchant",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("merchant_id", models.CharField(max_length=64, verbose_name="merchant ID")),
                ("name", models.CharField(max_length=255, verbose_name="name")),
                ("email", models.EmailField(blank=True, default="", max_length=254, verbose_name="email")),
                ("package", models.CharField(max_length=100, verbose_name="package")),
                ("revenue", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=14, verbose_name="revenue")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("record", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="onboarded_merchants", to="employees.monthlyonboardingrecord", verbose_name="monthly record")),
            ],
            options={
                "verbose_name": "onboarded merchant",
                "ordering": ["id"],
                "constraints": [models.UniqueConstraint(fields=("record", "merchant_id"), name="uniq_merchant_per_monthly_record")],
            },
        ),
    ]
