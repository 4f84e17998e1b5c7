"""Incentive ledger for employee merchant onboarding.

Core design principles:
- Percentages are time-versioned: a lookup for date D uses the history entry
  with the latest ``effective_from <= D`` (last inserted wins on ties) and
  falls back to the employee's current ``incentive_percentages``.
- The onboarding incentive always uses today's percentage, even for a
  back-dated registration; the month argument only decides which monthly
  record the merchant's revenue counts toward.
- Every mutation re-reads the employee row with ``select_for_update()`` inside
  ``transaction.atomic()`` so concurrent events for one employee serialize.
- Bonus recomputation adds to ``total_bonus_earned`` again; it does not
  subtract the previously stored amount.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Mapping

from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Sum
from django.utils import timezone

from employees.models import (
    Employee,
    IncentivePercentageHistory,
    MonthlyOnboardingRecord,
    OnboardedMerchant,
)

logger = logging.getLogger(__name__)

PER_REVENUE = "perRevenue"
FIXED = "fixed"
BONUS_RULE_TYPES = (PER_REVENUE, FIXED)

CENT = Decimal("0.01")
ZERO = Decimal("0")
# Exclusive upper bound of the DecimalField(max_digits=14, decimal_places=2) columns.
MAX_AMOUNT = Decimal(10) ** 12


def to_decimal(value, field: str = "value") -> Decimal:
    if value is None or value == "":
        return ZERO
    if isinstance(value, bool):
        raise ValidationError({field: "A number is required."})
    try:
        number = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError({field: "A number is required."})
    if not number.is_finite():
        raise ValidationError({field: "A finite number is required."})
    return number


def money(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class BonusRule:
    """How revenue above the monthly target turns into a bonus."""

    type: str
    amount_per_revenue: Decimal = ZERO
    fixed_bonus_amount: Decimal = ZERO

    @classmethod
    def from_dict(cls, data: Mapping | None) -> "BonusRule | None":
        if not data:
            return None
        if not isinstance(data, Mapping):
            raise ValidationError({"bonus_rule": "A bonus rule must be an object."})
        rule_type = data.get("type")
        if rule_type not in BONUS_RULE_TYPES:
            raise ValidationError(
                {"bonus_rule": f"Bonus rule type must be one of {', '.join(BONUS_RULE_TYPES)}."}
            )
        per_revenue = to_decimal(data.get("amount_per_revenue"), "amount_per_revenue")
        fixed = to_decimal(data.get("fixed_bonus_amount"), "fixed_bonus_amount")
        if per_revenue < 0 or fixed < 0:
            raise ValidationError({"bonus_rule": "Bonus amounts cannot be negative."})
        if per_revenue >= MAX_AMOUNT or fixed >= MAX_AMOUNT:
            raise ValidationError({"bonus_rule": "Bonus amounts are too large."})
        return cls(type=rule_type, amount_per_revenue=per_revenue, fixed_bonus_amount=fixed)

    def to_dict(self) -> dict:
        data = {"type": self.type}
        if self.type == PER_REVENUE:
            data["amount_per_revenue"] = float(self.amount_per_revenue)
        else:
            data["fixed_bonus_amount"] = float(self.fixed_bonus_amount)
        return data


def compute_bonus_from_rule(rule: BonusRule | None, target: Decimal, total_revenue: Decimal) -> Decimal:
    """Bonus for *total_revenue* against *target*.

    A ``fixed`` rule pays its flat amount whenever there is any excess at all,
    whatever its size.
    """
    if rule is None:
        return ZERO
    excess = max(ZERO, total_revenue - target)
    if excess <= 0:
        return ZERO
    if rule.type == PER_REVENUE:
        return money(excess * rule.amount_per_revenue)
    if rule.type == FIXED:
        return money(rule.fixed_bonus_amount)
    return ZERO


def resolve_period(year: int | None = None, month: int | None = None) -> tuple[int, int]:
    """Default missing year/month to the current calendar month and validate."""
    today = timezone.localdate()
    year = today.year if year is None else year
    month = today.month if month is None else month
    errors = {}
    if isinstance(year, bool) or not isinstance(year, int) or not 1970 <= year <= 9999:
        errors["year"] = "Year must be an integer between 1970 and 9999."
    if isinstance(month, bool) or not isinstance(month, int) or not 1 <= month <= 12:
        errors["month"] = "Month must be an integer between 1 and 12."
    if errors:
        raise ValidationError(errors)
    return year, month


def as_moment(value: date | datetime | None) -> datetime:
    """Turn a lookup date into an aware datetime.

    A plain ``date`` means "any time that day", so it maps to the last
    instant of the day in the current time zone.
    """
    if value is None:
        return timezone.now()
    if isinstance(value, datetime):
        return value if timezone.is_aware(value) else timezone.make_aware(value)
    return timezone.make_aware(datetime.combine(value, time.max))


def start_of_day(value: date | datetime) -> datetime:
    if isinstance(value, datetime):
        return value if timezone.is_aware(value) else timezone.make_aware(value)
    return timezone.make_aware(datetime.combine(value, time.min))


class IncentiveLedger:
    """Incentive/bonus operations on one :class:`Employee`."""

    REQUIRED_MERCHANT_FIELDS = ("merchant_id", "name", "package")

    def __init__(self, employee: Employee) -> None:
        self.employee = employee

    # ------------------------------------------------------------------
    # Percentages
    # ------------------------------------------------------------------

    def get_applicable_percentage(self, package: str, on: date | datetime | None = None) -> Decimal:
        """Percentage for *package* effective at *on* (default: now)."""
        return self._applicable_percentage(self.employee, package, as_moment(on))

    def set_incentive_percentages(
        self,
        percentages: Mapping,
        effective_from: date | datetime,
    ) -> IncentivePercentageHistory:
        """Append a history snapshot and make *percentages* the current rates."""
        cleaned = self._clean_percentages(percentages)
        if not isinstance(effective_from, (date, datetime)):
            raise ValidationError({"effective_from": "A date is required."})
        moment = start_of_day(effective_from)

        with transaction.atomic():
            employee = self._lock()
            entry = IncentivePercentageHistory.objects.create(
                employee=employee,
                percentage=dict(cleaned),
                effective_from=moment,
            )
            employee.incentive_percentages = dict(cleaned)
            employee.save(update_fields=["incentive_percentages", "updated_at"])

        self.employee = employee
        logger.info(
            "Incentive percentages updated employee=%s effective_from=%s",
            employee.emp_id,
            moment.date().isoformat(),
        )
        return entry

    # ------------------------------------------------------------------
    # Onboarding
    # ------------------------------------------------------------------

    def register_onboarding(
        self,
        merchant: Mapping,
        year: int | None = None,
        month: int | None = None,
    ) -> OnboardedMerchant | None:
        """Attribute *merchant* to this employee for the given month.

        Returns the created row, or ``None`` when the merchant was already
        registered for that month (the call is then a no-op).
        """
        data = self._clean_merchant(merchant)
        year, month = resolve_period(year, month)

        with transaction.atomic():
            employee = self._lock()
            record, created = MonthlyOnboardingRecord.objects.get_or_create(
                employee=employee,
                year=year,
                month=month,
                defaults={"revenue_target": employee.default_monthly_revenue_target},
            )
            if not created and record.onboarded_merchants.filter(merchant_id=data["merchant_id"]).exists():
                logger.debug(
                    "Merchant %s already onboarded by employee=%s for %s",
                    data["merchant_id"],
                    employee.emp_id,
                    record.period,
                )
                self.employee = employee
                return None

            revenue = to_decimal(employee.package_prices.get(data["package"]), "package_prices")
            onboarded = OnboardedMerchant.objects.create(
                record=record,
                merchant_id=data["merchant_id"],
                name=data["name"],
                email=data["email"],
                package=data["package"],
                revenue=revenue,
            )
            record.onboarded_count = record.onboarded_merchants.count()
            record.save(update_fields=["onboarded_count", "updated_at"])

            percentage = self._applicable_percentage(employee, data["package"], timezone.now())
            incentive = money(revenue * percentage / Decimal("100"))

            employee.total_onboarded += 1
            employee.onboarding_incentive_earned += incentive
            employee.save(update_fields=["total_onboarded", "onboarding_incentive_earned", "updated_at"])

        self.employee = employee
        logger.info(
            "Onboarded merchant=%s employee=%s period=%s revenue=%s incentive=%s",
            onboarded.merchant_id,
            employee.emp_id,
            record.period,
            revenue,
            incentive,
        )
        return onboarded

    # ------------------------------------------------------------------
    # Monthly bonus
    # ------------------------------------------------------------------

    def compute_and_persist_monthly_bonus(self, year: int, month: int) -> Decimal:
        """Compute the bonus for one month, store it, and add it to the total.

        Raises ``MonthlyOnboardingRecord.DoesNotExist`` when nothing was
        onboarded that month.
        """
        year, month = resolve_period(year, month)

        with transaction.atomic():
            employee = self._lock()
            record = self._get_record(employee, year, month)
            rule = self._effective_rule(employee, record)
            target = self._effective_target(employee, record)
            total_revenue = self._total_revenue(record)

            bonus = compute_bonus_from_rule(rule, target, total_revenue)

            record.bonus_amount = bonus
            record.bonus_calculated_at = timezone.now()
            record.save(update_fields=["bonus_amount", "bonus_calculated_at", "updated_at"])

            employee.total_bonus_earned += bonus
            employee.save(update_fields=["total_bonus_earned", "updated_at"])

        self.employee = employee
        logger.info(
            "Monthly bonus employee=%s period=%s revenue=%s target=%s bonus=%s",
            employee.emp_id,
            record.period,
            total_revenue,
            target,
            bonus,
        )
        return bonus

    def monthly_summary(self, year: int, month: int) -> dict:
        """Read-only breakdown of one monthly record."""
        year, month = resolve_period(year, month)
        record = self._get_record(self.employee, year, month)
        rule = self._effective_rule(self.employee, record)
        target = self._effective_target(self.employee, record)
        total_revenue = self._total_revenue(record)
        return {
            "year": record.year,
            "month": record.month,
            "revenue_target": target,
            "total_revenue": total_revenue,
            "excess": max(ZERO, total_revenue - target),
            "bonus_rule": rule.to_dict() if rule else None,
            "projected_bonus": compute_bonus_from_rule(rule, target, total_revenue),
            "bonus_amount": record.bonus_amount,
            "bonus_calculated_at": record.bonus_calculated_at,
            "onboarded_count": record.onboarded_count,
            "onboarded_merchants": list(record.onboarded_merchants.all()),
        }

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _lock(self) -> Employee:
        return Employee.objects.select_for_update().get(pk=self.employee.pk)

    def _applicable_percentage(self, employee: Employee, package: str, moment: datetime) -> Decimal:
        entry = (
            IncentivePercentageHistory.objects.filter(
                employee=employee,
                effective_from__lte=moment,
            )
            .order_by("-effective_from", "-id")
            .first()
        )
        rates = entry.percentage if entry is not None else employee.incentive_percentages
        return to_decimal((rates or {}).get(package), "percentage")

    def _get_record(self, employee: Employee, year: int, month: int) -> MonthlyOnboardingRecord:
        try:
            return MonthlyOnboardingRecord.objects.get(employee=employee, year=year, month=month)
        except MonthlyOnboardingRecord.DoesNotExist:
            raise MonthlyOnboardingRecord.DoesNotExist(
                f"No monthly record for {year}-{month:02d}."
            )

    def _effective_rule(self, employee: Employee, record: MonthlyOnboardingRecord) -> BonusRule | None:
        return BonusRule.from_dict(record.bonus_rule or employee.default_bonus_rule)

    def _effective_target(self, employee: Employee, record: MonthlyOnboardingRecord) -> Decimal:
        if record.revenue_target is not None:
            return record.revenue_target
        return employee.default_monthly_revenue_target

    def _total_revenue(self, record: MonthlyOnboardingRecord) -> Decimal:
        agg = record.onboarded_merchants.aggregate(total=Sum("revenue"))
        return agg["total"] or ZERO

    def _clean_merchant(self, merchant: Mapping) -> dict:
        if not isinstance(merchant, Mapping):
            raise ValidationError({"merchant": "Merchant details must be an object."})
        errors = {}
        data = {}
        for field in self.REQUIRED_MERCHANT_FIELDS:
            value = merchant.get(field)
            if value is None or not str(value).strip():
                errors[field] = "This field is required."
            else:
                data[field] = str(value).strip()
        if errors:
            raise ValidationError(errors)
        data["email"] = (merchant.get("email") or "").strip()
        return data

    def _clean_percentages(self, percentages: Mapping) -> dict:
        if not isinstance(percentages, Mapping):
            raise ValidationError({"incentive_percentages": "Percentages must be an object."})
        cleaned = {}
        for package, value in percentages.items():
            if not isinstance(package, str) or not package.strip():
                raise ValidationError({"incentive_percentages": "Package names must be non-empty."})
            percent = to_decimal(value, "incentive_percentages")
            if not ZERO <= percent <= Decimal("100"):
                raise ValidationError(
                    {"incentive_percentages": f"Percentage for {package!r} must be between 0 and 100."}
                )
            cleaned[package] = value if isinstance(value, (int, float)) else float(percent)
        return cleaned
