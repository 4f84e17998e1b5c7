from django.contrib import admin

from core.models import EmailLog


@admin.register(EmailLog)
class EmailLogAdmin(admin.ModelAdmin):
    list_display = ("created_at", "email", "type", "status")
    list_filter = ("type", "status")
    search_fields = ("email",)
    readonly_fields = ("email", "type", "status", "error", "metadata", "created_at")
