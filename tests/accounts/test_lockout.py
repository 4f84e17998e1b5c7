from datetime import timedelta

import pytest
from django.core import mail
from django.utils import timezone

from accounts import lockout
from accounts.lockout import LockState
from accounts.models import User
from core.models import EmailLog


@pytest.mark.django_db
class TestLockState:

    def test_new_account_is_active(self, admin_user):
        assert lockout.lock_state(admin_user) == LockState.ACTIVE
        assert admin_user.is_active is True

    def test_time_locked(self, admin_user):
        lockout.lock_for_default_duration(admin_user, "Suspicious activity")

        admin_user.refresh_from_db()
        assert lockout.lock_state(admin_user) == LockState.TIME_LOCKED
        assert admin_user.status == User.Status.INACTIVE
        assert admin_user.is_active is False
        assert admin_user.account_lock_reason == "Suspicious activity"
        remaining = admin_user.account_locked_until - timezone.now()
        assert timedelta(hours=23, minutes=59) < remaining <= timedelta(hours=24)

    def test_indefinitely_locked(self, admin_user):
        lockout.lock_account(admin_user, "Offboarded")
        assert lockout.lock_state(admin_user) == LockState.INDEFINITELY_LOCKED
        assert lockout.is_locked(admin_user)

    def test_expired_lock_reads_as_active(self, admin_user):
        lockout.lock_account(admin_user, "Old", until=timezone.now() - timedelta(minutes=1))
        assert lockout.lock_state(admin_user) == LockState.ACTIVE
        assert not lockout.is_locked(admin_user)

    def test_warning_state_above_threshold(self, admin_user, settings):
        settings.FAILED_LOGIN_WARNING_THRESHOLD = 5
        admin_user.failed_login_attempts = 6
        assert lockout.lock_state(admin_user) == LockState.ACTIVE_WITH_WARNING

        admin_user.failed_login_attempts = 5
        assert lockout.lock_state(admin_user) == LockState.ACTIVE


@pytest.mark.django_db
class TestLockUnlock:

    def test_unlock_clears_lock_fields(self, admin_user):
        lockout.lock_for_default_duration(admin_user, "Too many attempts")

        lockout.unlock_account(admin_user)

        admin_user.refresh_from_db()
        assert admin_user.status == User.Status.ACTIVE
        assert admin_user.account_locked_until is None
        assert admin_user.account_lock_reason == ""

    def test_unlock_keeps_failed_attempts(self, admin_user):
        admin_user.failed_login_attempts = 3
        admin_user.save(update_fields=["failed_login_attempts"])
        lockout.lock_account(admin_user, "x")

        lockout.unlock_account(admin_user)

        admin_user.refresh_from_db()
        assert admin_user.failed_login_attempts == 3

    def test_set_status_inactive_keeps_existing_reason(self, admin_user):
        until = timezone.now() + timedelta(hours=2)
        lockout.lock_account(admin_user, "Audit", until=until)

        lockout.set_status(admin_user, User.Status.INACTIVE)

        admin_user.refresh_from_db()
        assert admin_user.account_lock_reason == "Audit"
        assert admin_user.account_locked_until == until

    def test_set_status_active_unlocks(self, admin_user):
        lockout.lock_account(admin_user, "Audit")
        lockout.set_status(admin_user, User.Status.ACTIVE)
        assert admin_user.status == User.Status.ACTIVE

    def test_set_status_rejects_unknown_value(self, admin_user):
        with pytest.raises(ValueError):
            lockout.set_status(admin_user, "banned")


@pytest.mark.django_db
class TestFailedLogins:

    def test_counter_increments(self, admin_user):
        assert lockout.record_failed_login(admin_user) == 1
        assert lockout.record_failed_login(admin_user) == 2

        admin_user.refresh_from_db()
        assert admin_user.failed_login_attempts == 2

    def test_no_warning_up_to_threshold(self, admin_user):
        for _ in range(5):
            lockout.record_failed_login(admin_user)

        assert len(mail.outbox) == 0
        assert not EmailLog.objects.exists()

    def test_warning_email_on_each_attempt_above_threshold(self, admin_user, django_capture_on_commit_callbacks):
        with django_capture_on_commit_callbacks(execute=True):
            for _ in range(7):
                lockout.record_failed_login(admin_user)

        assert len(mail.outbox) == 2
        message = mail.outbox[0]
        assert message.to == [admin_user.email]
        assert "6 failed login attempts" in message.body
        assert EmailLog.objects.filter(status=EmailLog.Status.SENT).count() == 2

    def test_warning_waits_for_commit(self, admin_user, django_capture_on_commit_callbacks):
        admin_user.failed_login_attempts = 5
        admin_user.save(update_fields=["failed_login_attempts"])

        with django_capture_on_commit_callbacks() as callbacks:
            lockout.record_failed_login(admin_user)
            assert len(mail.outbox) == 0

        assert len(callbacks) == 1
        assert len(mail.outbox) == 0
        assert not EmailLog.objects.exists()

        callbacks[0]()

        assert len(mail.outbox) == 1
        assert "6 failed login attempts" in mail.outbox[0].body

    def test_failed_attempts_do_not_lock(self, admin_user):
        for _ in range(10):
            lockout.record_failed_login(admin_user)

        admin_user.refresh_from_db()
        assert admin_user.status == User.Status.ACTIVE
        assert lockout.lock_state(admin_user) == LockState.ACTIVE_WITH_WARNING

    def test_email_failure_does_not_undo_increment(self, admin_user, monkeypatch, django_capture_on_commit_callbacks):
        admin_user.failed_login_attempts = 5
        admin_user.save(update_fields=["failed_login_attempts"])

        def _boom(*args, **kwargs):
            raise ConnectionRefusedError("SMTP down")

        monkeypatch.setattr("accounts.services.send_branded_email", _boom)

        with django_capture_on_commit_callbacks(execute=True):
            assert lockout.record_failed_login(admin_user) == 6

        admin_user.refresh_from_db()
        assert admin_user.failed_login_attempts == 6
        failed = EmailLog.objects.get(status=EmailLog.Status.FAILED)
        assert "SMTP down" in failed.error

    def test_successful_login_keeps_counter(self, admin_user):
        admin_user.failed_login_attempts = 4
        admin_user.save(update_fields=["failed_login_attempts"])

        lockout.record_successful_login(admin_user, ip="10.0.0.5")

        admin_user.refresh_from_db()
        assert admin_user.failed_login_attempts == 4
        assert admin_user.last_login is not None
        assert admin_user.last_login_ip == "10.0.0.5"

    def test_reset_failed_attempts(self, admin_user):
        admin_user.failed_login_attempts = 9
        admin_user.save(update_fields=["failed_login_attempts"])

        lockout.reset_failed_attempts(admin_user)

        admin_user.refresh_from_db()
        assert admin_user.failed_login_attempts == 0


@pytest.mark.django_db
class TestSweepAutoUnlock:

    def test_unlocks_only_expired_time_locks(self, admin_user, super_admin):
        now = timezone.now()
        expired = admin_user
        lockout.lock_account(expired, "expired", until=now - timedelta(seconds=1))
        running = super_admin
        lockout.lock_account(running, "running", until=now + timedelta(hours=1))
        indefinite = User.objects.create_user("frozen@test.com", "testpass123", username="frozen")
        lockout.lock_account(indefinite, "forever")

        assert lockout.sweep_auto_unlock() == 1

        expired.refresh_from_db()
        running.refresh_from_db()
        indefinite.refresh_from_db()
        assert expired.status == User.Status.ACTIVE
        assert expired.account_locked_until is None
        assert expired.account_lock_reason == ""
        assert running.status == User.Status.INACTIVE
        assert indefinite.status == User.Status.INACTIVE

    def test_lock_expiring_exactly_now_is_unlocked(self, admin_user):
        now = timezone.now()
        lockout.lock_account(admin_user, "edge", until=now)

        assert lockout.sweep_auto_unlock(now=now) == 1

    def test_second_sweep_is_a_noop(self, admin_user):
        lockout.lock_account(admin_user, "expired", until=timezone.now() - timedelta(minutes=5))

        assert lockout.sweep_auto_unlock() == 1
        assert lockout.sweep_auto_unlock() == 0

    def test_sweep_can_be_scoped(self, admin_user, super_admin):
        past = timezone.now() - timedelta(minutes=5)
        lockout.lock_account(admin_user, "a", until=past)
        lockout.lock_account(super_admin, "b", until=past)

        assert lockout.sweep_auto_unlock(User.objects.filter(pk=admin_user.pk)) == 1

        super_admin.refresh_from_db()
        assert super_admin.status == User.Status.INACTIVE
