"""Admin account lock state machine.

States an account can be in (see :func:`lock_state`):

- ``ACTIVE``: normal.
- ``ACTIVE_WITH_WARNING``: failed attempts above the warning threshold; a
  warning email has gone out but login is not blocked.
- ``TIME_LOCKED``: ``status=inactive`` with a future ``account_locked_until``.
- ``INDEFINITELY_LOCKED``: ``status=inactive`` with no ``account_locked_until``.

``status=inactive`` with an expired ``account_locked_until`` is a transient
state; :func:`sweep_auto_unlock` brings it back to active. The sweep is run
lazily by the request handlers that read lock state and periodically by the
``accounts.tasks.auto_unlock_expired_accounts`` beat task.
"""
from __future__ import annotations

import enum
import logging
from datetime import datetime, timedelta

from django.conf import settings
from django.db import transaction
from django.db.models import F
from django.utils import timezone

from accounts.models import User

logger = logging.getLogger("backoffice")


class LockState(str, enum.Enum):
    ACTIVE = "active"
    ACTIVE_WITH_WARNING = "active-with-warning"
    TIME_LOCKED = "time-locked"
    INDEFINITELY_LOCKED = "indefinitely-locked"


def warning_threshold() -> int:
    return getattr(settings, "FAILED_LOGIN_WARNING_THRESHOLD", 5)


def lock_state(account: User, now: datetime | None = None) -> LockState:
    """Classify *account* without mutating it.

    An inactive account whose lock already expired is reported as active,
    which is what the next sweep will turn it into.
    """
    now = now or timezone.now()
    if account.status == User.Status.INACTIVE:
        if account.account_locked_until is None:
            return LockState.INDEFINITELY_LOCKED
        if account.account_locked_until > now:
            return LockState.TIME_LOCKED
    if account.failed_login_attempts > warning_threshold():
        return LockState.ACTIVE_WITH_WARNING
    return LockState.ACTIVE


def is_locked(account: User, now: datetime | None = None) -> bool:
    return lock_state(account, now) in (LockState.TIME_LOCKED, LockState.INDEFINITELY_LOCKED)


def lock_account(account: User, reason: str, until: datetime | None = None) -> User:
    """Lock *account*. ``until=None`` means an indefinite lock."""
    account.status = User.Status.INACTIVE
    account.account_lock_reason = reason or ""
    account.account_locked_until = until
    account.save(update_fields=["status", "account_lock_reason", "account_locked_until"])
    logger.info(
        "Locked admin=%s until=%s reason=%r",
        account.pk,
        until.isoformat() if until else "indefinitely",
        account.account_lock_reason,
    )
    return account


def lock_for_default_duration(account: User, reason: str = "") -> User:
    hours = getattr(settings, "ADMIN_LOCK_DURATION_HOURS", 24)
    return lock_account(account, reason, until=timezone.now() + timedelta(hours=hours))


def unlock_account(account: User) -> User:
    account.status = User.Status.ACTIVE
    account.account_locked_until = None
    account.account_lock_reason = ""
    account.save(update_fields=["status", "account_lock_reason", "account_locked_until"])
    logger.info("Unlocked admin=%s", account.pk)
    return account


def set_status(
    account: User,
    status: str,
    reason: str = "",
    until: datetime | None = None,
) -> User:
    """Apply an administrator status change.

    ``inactive`` locks (reason/until optional, existing values are kept when
    omitted), ``active`` unlocks.
    """
    if status == User.Status.ACTIVE:
        return unlock_account(account)
    if status != User.Status.INACTIVE:
        raise ValueError(f"Unknown status {status!r}.")
    return lock_account(
        account,
        reason or account.account_lock_reason,
        until if until is not None else account.account_locked_until,
    )


@transaction.atomic
def record_failed_login(account: User) -> int:
    """Increment the failed-attempt counter and return the new count.

    Crossing the warning threshold sends a warning email to the account
    holder. Delivery problems are logged and never undo the increment.
    """
    User.objects.filter(pk=account.pk).update(
        failed_login_attempts=F("failed_login_attempts") + 1,
    )
    account.refresh_from_db(fields=["failed_login_attempts"])
    attempts = account.failed_login_attempts
    logger.warning("Failed login for admin=%s (attempt %d)", account.pk, attempts)

    if attempts > warning_threshold():
        from accounts.services import notify_failed_login

        # Sent only once the increment is committed and the row lock released.
        transaction.on_commit(lambda: notify_failed_login(account, attempts))
    return attempts


def record_successful_login(account: User, ip: str | None = None) -> User:
    """Stamp the login time and IP.

    The failed-attempt counter is left untouched; resetting it is an
    explicit administrator action (:func:`reset_failed_attempts`).
    """
    account.last_login = timezone.now()
    account.last_login_ip = ip
    account.save(update_fields=["last_login", "last_login_ip"])
    return account


def reset_failed_attempts(account: User) -> User:
    account.failed_login_attempts = 0
    account.save(update_fields=["failed_login_attempts"])
    logger.info("Reset failed login attempts for admin=%s", account.pk)
    return account


def sweep_auto_unlock(accounts=None, now: datetime | None = None) -> int:
    """Unlock every account in *accounts* whose time lock has expired.

    *accounts* is a ``User`` queryset (all admins by default). Returns the
    number of rows changed.
    """
    now = now or timezone.now()
    if accounts is None:
        accounts = User.objects.all()
    modified = accounts.filter(
        status=User.Status.INACTIVE,
        account_locked_until__isnull=False,
        account_locked_until__lte=now,
    ).update(
        status=User.Status.ACTIVE,
        account_locked_until=None,
        account_lock_reason="",
    )
    if modified:
        logger.info("Auto-unlocked %d expired admin account(s)", modified)
    return modified
