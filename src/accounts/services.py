"""Account-related helper services: admin login, role changes and security notifications."""

from __future__ import annotations

import logging

from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Q

from core.email import log_email, send_branded_email
from core.models import EmailLog

from accounts import lockout
from accounts.models import User

logger = logging.getLogger("backoffice")


class AccountLocked(Exception):
    """Login refused because the account is locked."""

    def __init__(self, account: User):
        self.account = account
        self.reason = account.account_lock_reason
        self.locked_until = account.account_locked_until
        super().__init__(self.reason or "Account is locked.")


def authenticate_admin(email: str, password: str, ip: str | None = None) -> User | None:
    """Check admin credentials.

    Returns the account on success and ``None`` on bad credentials. Raises
    :class:`AccountLocked` for a locked account before the password is
    compared. An expired time lock is cleared first, so it never blocks.
    """
    account = User.objects.filter(email__iexact=(email or "").strip()).first()
    if account is None:
        return None

    if lockout.sweep_auto_unlock(User.objects.filter(pk=account.pk)):
        account.refresh_from_db()

    if lockout.is_locked(account):
        logger.info("Rejected login for locked admin=%s", account.pk)
        raise AccountLocked(account)

    if not account.check_password(password):
        lockout.record_failed_login(account)
        return None

    return lockout.record_successful_login(account, ip)


def set_super_admin(account: User, enabled: bool) -> User:
    """Promote *account* to super admin or demote it to a plain admin.

    Demoting the last remaining super admin is refused.
    """
    with transaction.atomic():
        account = User.objects.select_for_update().get(pk=account.pk)
        if not enabled and account.role == User.Role.SUPER_ADMIN:
            others = (
                User.objects.filter(Q(role=User.Role.SUPER_ADMIN) | Q(is_superuser=True))
                .exclude(pk=account.pk)
            )
            if not others.exists():
                raise ValidationError({"is_super_admin": "At least one super admin must remain."})
        account.role = User.Role.SUPER_ADMIN if enabled else User.Role.ADMIN
        account.save(update_fields=["role"])

    logger.info("Admin=%s role set to %s", account.pk, account.role)
    return account


def send_failed_login_warning(account: User, failed_attempts: int) -> bool:
    """Email the account holder about repeated failed logins.

    Every attempt is recorded in :class:`core.models.EmailLog`. Returns
    ``False`` instead of raising when delivery fails.
    """
    metadata = {"alert_type": "failed_login_warning", "failed_attempts": failed_attempts}
    log_email(account.email, EmailLog.Status.PENDING, email_type=EmailLog.Type.SECURITY_ALERT, metadata=metadata)
    try:
        send_branded_email(
            subject="Admin account - multiple failed login attempts",
            template_name="emails/failed_login_warning",
            context={
                "admin_name": account.username,
                "failed_attempts": failed_attempts,
            },
            recipient_list=[account.email],
            fail_silently=False,
        )
    except Exception as exc:
        logger.error("Failed to send warning email to %s: %s", account.email, exc, exc_info=True)
        log_email(
            account.email,
            EmailLog.Status.FAILED,
            email_type=EmailLog.Type.SECURITY_ALERT,
            error=str(exc),
            metadata=metadata,
        )
        return False

    log_email(account.email, EmailLog.Status.SENT, email_type=EmailLog.Type.SECURITY_ALERT, metadata=metadata)
    logger.info("Warning email sent to %s for %d failed attempts", account.email, failed_attempts)
    return True


def notify_failed_login(account: User, failed_attempts: int) -> None:
    """Hand the warning email to a worker, sending inline if dispatch fails."""
    try:
        from accounts.tasks import send_failed_login_warning_task

        send_failed_login_warning_task.delay(account_id=account.pk, failed_attempts=failed_attempts)
        return
    except Exception as exc:
        logger.warning("Warning email dispatch failed, sending inline: %s", exc, exc_info=True)
    send_failed_login_warning(account, failed_attempts)
