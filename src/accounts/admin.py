from django.contrib import admin

from accounts import lockout
from accounts.models import User


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    """Django admin for back-office accounts."""

    # ------------------------------------------------------------------
    # List view
    # ------------------------------------------------------------------
    list_display = (
        "email",
        "username",
        "role",
        "status",
        "account_locked_until",
        "failed_login_attempts",
        "last_login",
    )
    list_filter = ("role", "status", "is_staff", "is_superuser")
    search_fields = ("email", "username", "phone")
    ordering = ("-date_joined",)
    actions = ("unlock_accounts", "reset_attempts", "sweep_expired_locks")

    # ------------------------------------------------------------------
    # Detail / edit view
    # ------------------------------------------------------------------
    fieldsets = (
        (None, {"fields": ("email", "username")}),
        ("Profile", {"fields": ("phone", "address", "meta")}),
        (
            "Role and permissions",
            {"fields": ("role", "is_staff", "is_superuser", "groups", "user_permissions")},
        ),
        (
            "Lock state",
            {
                "fields": (
                    "status",
                    "account_locked_until",
                    "account_lock_reason",
                    "failed_login_attempts",
                ),
            },
        ),
        ("Important dates", {"fields": ("last_login", "last_login_ip", "date_joined")}),
    )
    readonly_fields = ("date_joined", "last_login", "last_login_ip")

    @admin.action(description="Unlock selected accounts")
    def unlock_accounts(self, request, queryset):
        for account in queryset:
            lockout.unlock_account(account)

    @admin.action(description="Reset failed login attempts")
    def reset_attempts(self, request, queryset):
        for account in queryset:
            lockout.reset_failed_attempts(account)

    @admin.action(description="Unlock accounts whose lock has expired")
    def sweep_expired_locks(self, request, queryset):
        count = lockout.sweep_auto_unlock(queryset)
        self.message_user(request, f"{count} account(s) unlocked.")
