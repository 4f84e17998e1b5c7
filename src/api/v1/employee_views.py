"""Employee API: CRUD plus the incentive ledger operations."""
import logging

from django.db.models import Count, Q
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from employees.engine import IncentiveLedger
from employees.models import Employee
from employees.serializers import (
    ApplicablePercentageQuerySerializer,
    EmployeeDetailSerializer,
    EmployeeListSerializer,
    IncentivePercentageHistorySerializer,
    IncentivePercentagesUpdateSerializer,
    MerchantOnboardingSerializer,
    MonthlyOnboardingRecordSerializer,
    MonthlySummarySerializer,
    OnboardedMerchantSerializer,
    PeriodSerializer,
)

logger = logging.getLogger("backoffice")


class EmployeeViewSet(viewsets.ModelViewSet):
    """Employees and the merchants they onboard.

    Everything that touches the running totals goes through
    :class:`employees.engine.IncentiveLedger`; plain updates cannot write
    them.
    """

    queryset = Employee.objects.all()
    filterset_fields = ["status", "department", "branch"]
    search_fields = ["emp_id", "first_name", "last_name", "email", "phone"]
    ordering_fields = ["created_at", "emp_id", "first_name", "total_onboarded", "total_bonus_earned"]

    def get_serializer_class(self):
        if self.action == "list":
            return EmployeeListSerializer
        return EmployeeDetailSerializer

    def list(self, request, *args, **kwargs):
        response = super().list(request, *args, **kwargs)
        response.data["stats"] = Employee.objects.aggregate(
            total=Count("id"),
            active=Count("id", filter=Q(status=Employee.Status.ACTIVE)),
            on_leave=Count("id", filter=Q(status=Employee.Status.ON_LEAVE)),
            suspended=Count("id", filter=Q(status=Employee.Status.SUSPENDED)),
            terminated=Count("id", filter=Q(status=Employee.Status.TERMINATED)),
        )
        return response

    def perform_destroy(self, instance):
        logger.info("Deleting employee=%s by admin=%s", instance.emp_id, self.request.user.pk)
        instance.delete()

    # ------------------------------------------------------------------
    # Incentive percentages
    # ------------------------------------------------------------------

    @action(detail=True, methods=["get", "put"])
    def incentives(self, request, pk=None):
        employee = self.get_object()
        if request.method == "PUT":
            serializer = IncentivePercentagesUpdateSerializer(data=request.data)
            serializer.is_valid(raise_exception=True)
            ledger = IncentiveLedger(employee)
            ledger.set_incentive_percentages(
                serializer.validated_data["incentive_percentages"],
                serializer.validated_data["effective_from"],
            )
            employee = ledger.employee

        history = employee.incentive_percentage_history.order_by("-effective_from", "-id")
        return Response(
            {
                "incentive_percentages": employee.incentive_percentages,
                "incentive_percentage_history": IncentivePercentageHistorySerializer(history, many=True).data,
            }
        )

    @action(detail=True, methods=["get"], url_path="applicable-percentage")
    def applicable_percentage(self, request, pk=None):
        employee = self.get_object()
        query = ApplicablePercentageQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        package = query.validated_data["package"]
        on = query.validated_data.get("date")
        percentage = IncentiveLedger(employee).get_applicable_percentage(package, on)
        return Response(
            {
                "package": package,
                "date": on.isoformat() if on else None,
                "percentage": percentage,
            }
        )

    # ------------------------------------------------------------------
    # Onboarding and monthly bonus
    # ------------------------------------------------------------------

    @action(detail=True, methods=["post"])
    def onboardings(self, request, pk=None):
        employee = self.get_object()
        serializer = MerchantOnboardingSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)
        year = data.pop("year", None)
        month = data.pop("month", None)

        ledger = IncentiveLedger(employee)
        onboarded = ledger.register_onboarding(data, year=year, month=month)
        employee = ledger.employee
        totals = {
            "total_onboarded": employee.total_onboarded,
            "onboarding_incentive_earned": str(employee.onboarding_incentive_earned),
        }
        if onboarded is None:
            return Response(
                {"created": False, "detail": "Merchant already onboarded for this month.", **totals},
                status=status.HTTP_200_OK,
            )
        return Response(
            {"created": True, "merchant": OnboardedMerchantSerializer(onboarded).data, **totals},
            status=status.HTTP_201_CREATED,
        )

    @action(detail=True, methods=["post"], url_path="monthly-bonus")
    def monthly_bonus(self, request, pk=None):
        employee = self.get_object()
        period = PeriodSerializer(data=request.data)
        period.is_valid(raise_exception=True)
        ledger = IncentiveLedger(employee)
        bonus = ledger.compute_and_persist_monthly_bonus(
            period.validated_data["year"],
            period.validated_data["month"],
        )
        return Response(
            {
                "year": period.validated_data["year"],
                "month": period.validated_data["month"],
                "bonus_amount": str(bonus),
                "total_bonus_earned": str(ledger.employee.total_bonus_earned),
            }
        )

    @action(detail=True, methods=["get"], url_path="monthly-summary")
    def monthly_summary(self, request, pk=None):
        employee = self.get_object()
        period = PeriodSerializer(data=request.query_params)
        period.is_valid(raise_exception=True)
        summary = IncentiveLedger(employee).monthly_summary(
            period.validated_data["year"],
            period.validated_data["month"],
        )
        return Response(MonthlySummarySerializer(summary).data)

    @action(detail=True, methods=["get"], url_path="monthly-records")
    def monthly_records(self, request, pk=None):
        employee = self.get_object()
        records = employee.monthly_records.prefetch_related("onboarded_merchants")
        page = self.paginate_queryset(records)
        if page is not None:
            return self.get_paginated_response(MonthlyOnboardingRecordSerializer(page, many=True).data)
        return Response(MonthlyOnboardingRecordSerializer(records, many=True).data)
