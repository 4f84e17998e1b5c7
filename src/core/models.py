"""Shared base models and the outbound e-mail log."""
from django.db import models
from django.db.models import Count, Q


class TimeStampedModel(models.Model):
    """Abstract base adding ``created_at`` / ``updated_at`` columns."""

    created_at = models.DateTimeField("created at", auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField("updated at", auto_now=True)

    class Meta:
        abstract = True


class EmailLogQuerySet(models.QuerySet):

    def stats(self) -> dict:
        """Totals and success rate over the rows in this queryset.

        Each delivery writes a ``pending`` row and then a ``sent`` or ``failed``
        row, so ``total`` counts both and a fully successful log reads as a
        50% ``success_rate``. Filter on ``status`` for delivery-only figures.
        """
        agg = self.aggregate(
            total=Count("id"),
            sent=Count("id", filter=Q(status=EmailLog.Status.SENT)),
            failed=Count("id", filter=Q(status=EmailLog.Status.FAILED)),
        )
        total = agg["total"] or 0
        sent = agg["sent"] or 0
        success_rate = round(sent / total * 100, 2) if total else 0
        return {
            "total": total,
            "sent": sent,
            "failed": agg["failed"] or 0,
            "success_rate": success_rate,
        }


class EmailLog(models.Model):
    """One delivery attempt state for an outbound e-mail."""

    class Type(models.TextChoices):
        SECURITY_ALERT = "security_alert", "Security alert"
        OTHER = "other", "Other"

    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        SENT = "sent", "Sent"
        FAILED = "failed", "Failed"

    email = models.EmailField("recipient", db_index=True)
    type = models.CharField("type", max_length=20, choices=Type.choices, default=Type.OTHER)
    status = models.CharField("status", max_length=10, choices=Status.choices)
    error = models.TextField("error", blank=True, default="")
    metadata = models.JSONField("metadata", default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    objects = EmailLogQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at", "-id"]
        verbose_name = "email log"
        verbose_name_plural = "email logs"
        indexes = [
            models.Index(fields=["email", "created_at"], name="emaillog_email_created_idx"),
        ]

    def __str__(self):
        return f"[{self.status.upper()}] {self.type} to {self.email}"
