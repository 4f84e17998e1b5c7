"""Employee records and the onboarding incentive ledger they own."""
from decimal import Decimal

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from core.models import TimeStampedModel


def default_bonus_rule():
    return {"type": "perRevenue", "amount_per_revenue": 0}


# ---------------------------------------------------------------------------
# Employee
# ---------------------------------------------------------------------------

class Employee(TimeStampedModel):
    """Field employee who onboards merchants and earns incentives/bonuses.

    The ledger configuration (package prices, incentive percentages, default
    target and bonus rule) and running totals live on this row; the history
    and monthly records hang off it. All mutations go through
    :class:`employees.engine.IncentiveLedger`.
    """

    class Status(models.TextChoices):
        ACTIVE = "active", "Active"
        ON_LEAVE = "on_leave", "On leave"
        SUSPENDED = "suspended", "Suspended"
        TERMINATED = "terminated", "Terminated"

    emp_id = models.CharField("employee ID", max_length=30, unique=True)
    first_name = models.CharField("first name", max_length=150)
    last_name = models.CharField("last name", max_length=150, blank=True, default="")
    email = models.EmailField("email", blank=True, default="", db_index=True)
    phone = models.CharField("phone", max_length=30, blank=True, default="")
    address = models.TextField("address", blank=True, default="")
    joining_date = models.DateField("joining date", null=True, blank=True)
    department = models.CharField("department", max_length=100, blank=True, default="")
    branch = models.CharField("branch", max_length=100, blank=True, default="")
    role = models.CharField("role", max_length=100, blank=True, default="")
    status = models.CharField(
        "status",
        max_length=20,
        choices=Status.choices,
        default=Status.ACTIVE,
        db_index=True,
    )

    # Ledger configuration
    package_prices = models.JSONField(
        "package prices",
        default=dict,
        blank=True,
        help_text="Package tier name -> price.",
    )
    incentive_percentages = models.JSONField(
        "incentive percentages",
        default=dict,
        blank=True,
        help_text="Package tier name -> current incentive percentage (0-100).",
    )
    default_monthly_revenue_target = models.DecimalField(
        "default monthly revenue target",
        max_digits=14,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0"))],
    )
    default_bonus_rule = models.JSONField("default bonus rule", default=default_bonus_rule)

    # Running totals
    total_onboarded = models.PositiveIntegerField("total onboarded", default=0)
    total_bonus_earned = models.DecimalField(
        "total bonus earned",
        max_digits=14,
        decimal_places=2,
        default=Decimal("0.00"),
    )
    onboarding_incentive_earned = models.DecimalField(
        "onboarding incentive earned",
        max_digits=14,
        decimal_places=2,
        default=Decimal("0.00"),
    )

    meta = models.JSONField("metadata", default=dict, blank=True)

    class Meta:
        verbose_name = "employee"
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.full_name} ({self.emp_id})"

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}".strip()


# ---------------------------------------------------------------------------
# Incentive percentage history
# ---------------------------------------------------------------------------

class IncentivePercentageHistory(models.Model):
    """Full snapshot of tier percentages effective from a point in time.

    Append-only. Entries are not stored in ``effective_from`` order; the
    primary key records insertion order.
    """

    employee = models.ForeignKey(
        Employee,
        on_delete=models.CASCADE,
        related_name="incentive_percentage_history",
        verbose_name="employee",
    )
    percentage = models.JSONField("percentages", default=dict)
    effective_from = models.DateTimeField("effective from", db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "incentive percentage history entry"
        verbose_name_plural = "incentive percentage history"
        ordering = ["effective_from", "id"]

    def __str__(self):
        return f"{self.employee} from {self.effective_from:%Y-%m-%d}"


# ---------------------------------------------------------------------------
# Monthly onboarding records
# ---------------------------------------------------------------------------

class MonthlyOnboardingRecord(TimeStampedModel):
    """Merchants an employee onboarded in one calendar month, and the bonus."""

    employee = models.ForeignKey(
        Employee,
        on_delete=models.CASCADE,
        related_name="monthly_records",
        verbose_name="employee",
    )
    year = models.PositiveSmallIntegerField("year")
    month = models.PositiveSmallIntegerField(
        "month",
        validators=[MinValueValidator(1), MaxValueValidator(12)],
    )
    revenue_target = models.DecimalField(
        "revenue target",
        max_digits=14,
        decimal_places=2,
        null=True,
        blank=True,
        help_text="Leave empty to use the employee's default target.",
    )
    onboarded_count = models.PositiveIntegerField("onboarded count", default=0)
    bonus_rule = models.JSONField(
        "bonus rule",
        null=True,
        blank=True,
        help_text="Leave empty to use the employee's default bonus rule.",
    )
    bonus_amount = models.DecimalField(
        "bonus amount",
        max_digits=14,
        decimal_places=2,
        default=Decimal("0.00"),
    )
    bonus_calculated_at = models.DateTimeField("bonus calculated at", null=True, blank=True)
    notes = models.TextField("notes", blank=True, default="")

    class Meta:
        verbose_name = "monthly onboarding record"
        ordering = ["-year", "-month"]
        constraints = [
            models.UniqueConstraint(
                fields=["employee", "year", "month"],
                name="uniq_employee_monthly_record",
            ),
        ]

    def __str__(self):
        return f"{self.employee} - {self.period}"

    @property
    def period(self) -> str:
        return f"{self.year}-{self.month:02d}"


class OnboardedMerchant(models.Model):
    """A merchant attributed to a monthly record."""

    record = models.ForeignKey(
        MonthlyOnboardingRecord,
        on_delete=models.CASCADE,
        related_name="onboarded_merchants",
        verbose_name="monthly record",
    )
    merchant_id = models.CharField("merchant ID", max_length=64)
    name = models.CharField("name", max_length=255)
    email = models.EmailField("email", blank=True, default="")
    package = models.CharField("package", max_length=100)
    revenue = models.DecimalField(
        "revenue",
        max_digits=14,
        decimal_places=2,
        default=Decimal("0.00"),
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "onboarded merchant"
        ordering = ["id"]
        constraints = [
            models.UniqueConstraint(
                fields=["record", "merchant_id"],
                name="uniq_merchant_per_monthly_record",
            ),
        ]

    def __str__(self):
        return f"{self.name} ({self.merchant_id})"
