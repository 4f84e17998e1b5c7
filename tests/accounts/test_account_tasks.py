from datetime import timedelta

import pytest
from django.conf import settings
from django.utils import timezone

from accounts import lockout
from accounts.models import User
from accounts.tasks import auto_unlock_expired_accounts, send_failed_login_warning_task
from core.models import EmailLog


@pytest.mark.django_db
def test_auto_unlock_task_returns_modified_count(admin_user, super_admin):
    lockout.lock_account(admin_user, "expired", until=timezone.now() - timedelta(minutes=1))
    lockout.lock_account(super_admin, "running", until=timezone.now() + timedelta(hours=1))

    assert auto_unlock_expired_accounts.delay().get() == 1

    admin_user.refresh_from_db()
    super_admin.refresh_from_db()
    assert admin_user.status == User.Status.ACTIVE
    assert super_admin.status == User.Status.INACTIVE


def test_auto_unlock_task_is_scheduled():
    entry = settings.CELERY_BEAT_SCHEDULE["accounts-auto-unlock-expired"]
    assert entry["task"] == "accounts.tasks.auto_unlock_expired_accounts"
    assert entry["schedule"] == settings.ADMIN_AUTO_UNLOCK_INTERVAL_SECONDS


@pytest.mark.django_db
def test_warning_task_sends_and_logs(admin_user, mailoutbox):
    assert send_failed_login_warning_task(account_id=admin_user.pk, failed_attempts=6) is True

    assert len(mailoutbox) == 1
    assert mailoutbox[0].subject == "Admin account - multiple failed login attempts"
    statuses = list(EmailLog.objects.order_by("id").values_list("status", flat=True))
    assert statuses == [EmailLog.Status.PENDING, EmailLog.Status.SENT]
    assert set(EmailLog.objects.values_list("type", flat=True)) == {EmailLog.Type.SECURITY_ALERT}
    sent = EmailLog.objects.get(status=EmailLog.Status.SENT)
    assert sent.metadata == {"alert_type": "failed_login_warning", "failed_attempts": 6}


@pytest.mark.django_db
def test_warning_task_for_deleted_account(db, mailoutbox):
    assert send_failed_login_warning_task(account_id=424242, failed_attempts=6) is False
    assert mailoutbox == []


@pytest.mark.django_db
def test_dispatch_failure_falls_back_to_inline_send(admin_user, mailoutbox, monkeypatch, django_capture_on_commit_callbacks):
    def _broker_down(*args, **kwargs):
        raise ConnectionError("broker unreachable")

    monkeypatch.setattr(send_failed_login_warning_task, "delay", _broker_down)
    admin_user.failed_login_attempts = 5
    admin_user.save(update_fields=["failed_login_attempts"])

    with django_capture_on_commit_callbacks(execute=True):
        lockout.record_failed_login(admin_user)

    assert len(mailoutbox) == 1
