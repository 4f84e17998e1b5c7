"""Admin account API: login, account management and lock controls."""
import logging

from django.contrib.auth import login
from django.core.exceptions import ImproperlyConfigured
from django.db.models import Count, Q
from django.utils import timezone
from rest_framework import mixins, permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.generics import ListAPIView
from rest_framework.response import Response
from rest_framework.throttling import ScopedRateThrottle
from rest_framework.views import APIView

from accounts import lockout
from accounts.models import User
from accounts.services import AccountLocked, authenticate_admin, set_super_admin
from api.v1.permissions import IsActiveAdmin, IsSuperAdmin
from api.v1.serializers import (
    AdminCreateSerializer,
    AdminLockSerializer,
    AdminLoginSerializer,
    AdminSerializer,
    AdminStatusSerializer,
    AdminSuperAdminSerializer,
    AdminUpdateSerializer,
    EmailLogSerializer,
)
from core.models import EmailLog

logger = logging.getLogger("backoffice")


class SafeScopedRateThrottle(ScopedRateThrottle):
    """Scoped throttle that falls back to a strict default if scope config is missing."""

    def get_rate(self):
        try:
            return super().get_rate()
        except ImproperlyConfigured:
            logger.warning("Throttle scope '%s' not configured, applying strict default 5/min.", self.scope)
            return "5/min"


def _client_ip(request):
    forwarded = request.META.get("HTTP_X_FORWARDED_FOR", "")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.META.get("REMOTE_ADDR") or None


# ---------------------------------------------------------------------------
# Login
# ---------------------------------------------------------------------------

class AdminLoginView(APIView):
    """Check admin credentials and open a session.

    Locked accounts get 423 before the password is looked at; the body
    carries the lock reason and expiry.
    """

    permission_classes = [permissions.AllowAny]
    throttle_classes = [SafeScopedRateThrottle]
    throttle_scope = "admin_login"

    def post(self, request, *args, **kwargs):
        serializer = AdminLoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        email = serializer.validated_data["email"]
        password = serializer.validated_data["password"]

        try:
            account = authenticate_admin(email, password, ip=_client_ip(request))
        except AccountLocked as exc:
            return Response(
                {
                    "error": "Account is locked.",
                    "account_lock_reason": exc.reason,
                    "account_locked_until": exc.locked_until.isoformat() if exc.locked_until else None,
                },
                status=status.HTTP_423_LOCKED,
            )

        if account is None:
            return Response({"error": "Invalid credentials."}, status=status.HTTP_401_UNAUTHORIZED)

        login(request._request, account, backend="django.contrib.auth.backends.ModelBackend")
        logger.info("Admin login admin=%s", account.pk)
        return Response(
            {
                "success": True,
                "id": account.pk,
                "username": account.username,
                "email": account.email,
                "role": account.role,
            },
            status=status.HTTP_200_OK,
        )


# ---------------------------------------------------------------------------
# Admin accounts
# ---------------------------------------------------------------------------

class AdminViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.CreateModelMixin,
    mixins.UpdateModelMixin,
    viewsets.GenericViewSet,
):
    """List, inspect and manage back-office admin accounts.

    Handlers that read lock state run the expired-lock sweep first so the
    response never shows a lock that has already run out.
    """

    queryset = User.objects.all()
    serializer_class = AdminSerializer
    lookup_value_regex = r"\d+"
    http_method_names = ["get", "post", "patch", "head", "options"]
    filterset_fields = ["status", "role"]
    search_fields = ["username", "email"]
    ordering_fields = ["date_joined", "last_login", "username", "email"]

    def get_permissions(self):
        if self.action in ("create", "change_status", "lock", "super_admin"):
            return [IsSuperAdmin()]
        return [IsActiveAdmin()]

    def get_serializer_class(self):
        if self.action == "create":
            return AdminCreateSerializer
        if self.action in ("update", "partial_update"):
            return AdminUpdateSerializer
        return AdminSerializer

    def list(self, request, *args, **kwargs):
        lockout.sweep_auto_unlock()
        response = super().list(request, *args, **kwargs)
        stats = User.objects.aggregate(
            total_admins=Count("id"),
            active_admins=Count("id", filter=Q(status=User.Status.ACTIVE)),
            inactive_admins=Count("id", filter=Q(status=User.Status.INACTIVE)),
            total_super_admins=Count("id", filter=Q(role=User.Role.SUPER_ADMIN)),
        )
        response.data["stats"] = stats
        return response

    def retrieve(self, request, *args, **kwargs):
        lockout.sweep_auto_unlock(User.objects.filter(pk=kwargs.get("pk")))
        return super().retrieve(request, *args, **kwargs)

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        account = serializer.save()
        logger.info("Admin %s created admin=%s role=%s", request.user.pk, account.pk, account.role)
        return Response(AdminSerializer(account).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop("partial", False)
        account = self.get_object()
        serializer = self.get_serializer(account, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response(AdminSerializer(account).data)

    @action(detail=True, methods=["patch"], url_path="status")
    def change_status(self, request, pk=None):
        lockout.sweep_auto_unlock(User.objects.filter(pk=pk))
        account = self.get_object()
        serializer = AdminStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        lockout.set_status(
            account,
            data["status"],
            reason=data.get("account_lock_reason", ""),
            until=data.get("account_locked_until"),
        )
        return Response(
            {
                "message": f"Admin status updated to {account.status}.",
                "admin": AdminSerializer(account).data,
            }
        )

    @action(detail=True, methods=["patch"])
    def lock(self, request, pk=None):
        account = self.get_object()
        serializer = AdminLockSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        if serializer.validated_data["lock"]:
            lockout.lock_for_default_duration(account, serializer.validated_data["reason"])
            verb = "locked"
        else:
            lockout.unlock_account(account)
            verb = "unlocked"
        return Response(
            {
                "message": f"Admin account {verb} successfully.",
                "admin": AdminSerializer(account).data,
            }
        )

    @action(detail=True, methods=["patch"], url_path="super-admin")
    def super_admin(self, request, pk=None):
        account = self.get_object()
        serializer = AdminSuperAdminSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        account = set_super_admin(account, serializer.validated_data["is_super_admin"])
        return Response(
            {
                "message": "Admin super admin status updated successfully.",
                "admin": AdminSerializer(account).data,
            }
        )

    @action(detail=True, methods=["patch"], url_path="reset-attempts")
    def reset_attempts(self, request, pk=None):
        account = self.get_object()
        lockout.reset_failed_attempts(account)
        return Response(
            {
                "message": "Failed login attempts reset successfully.",
                "admin": AdminSerializer(account).data,
            }
        )

    @action(detail=False, methods=["post"], url_path="auto-unlock")
    def auto_unlock(self, request):
        modified = lockout.sweep_auto_unlock()
        return Response(
            {
                "message": f"Auto-unlocked {modified} expired admin account(s).",
                "modified_count": modified,
                "checked_at": timezone.now().isoformat(),
            }
        )


# ---------------------------------------------------------------------------
# E-mail logs
# ---------------------------------------------------------------------------

class EmailLogListView(ListAPIView):
    """Outbound e-mail log, newest first, with delivery stats."""

    serializer_class = EmailLogSerializer
    filterset_fields = ["email", "type", "status"]

    def get_queryset(self):
        return EmailLog.objects.all()

    def list(self, request, *args, **kwargs):
        response = super().list(request, *args, **kwargs)
        response.data["stats"] = self.filter_queryset(self.get_queryset()).stats()
        return response
