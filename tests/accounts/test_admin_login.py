from datetime import timedelta

import pytest
from django.utils import timezone

from accounts import lockout
from accounts.models import User
from accounts.services import AccountLocked, authenticate_admin

LOGIN_URL = "/api/v1/admin/login/"


@pytest.mark.django_db
class TestAuthenticateAdmin:

    def test_valid_credentials(self, admin_user):
        account = authenticate_admin("ADMIN@test.com", "testpass123", ip="127.0.0.1")

        assert account == admin_user
        account.refresh_from_db()
        assert account.last_login_ip == "127.0.0.1"

    def test_wrong_password_counts_attempt(self, admin_user):
        assert authenticate_admin(admin_user.email, "nope") is None

        admin_user.refresh_from_db()
        assert admin_user.failed_login_attempts == 1

    def test_unknown_email(self, db):
        assert authenticate_admin("ghost@test.com", "testpass123") is None

    def test_locked_account_rejected_before_password_check(self, admin_user):
        lockout.lock_for_default_duration(admin_user, "Under review")

        with pytest.raises(AccountLocked) as excinfo:
            authenticate_admin(admin_user.email, "wrong-password")

        assert excinfo.value.reason == "Under review"
        assert excinfo.value.locked_until is not None
        admin_user.refresh_from_db()
        assert admin_user.failed_login_attempts == 0

    def test_expired_lock_is_cleared_on_login(self, admin_user):
        lockout.lock_account(admin_user, "Old", until=timezone.now() - timedelta(minutes=1))

        account = authenticate_admin(admin_user.email, "testpass123")

        assert account is not None
        admin_user.refresh_from_db()
        assert admin_user.status == User.Status.ACTIVE
        assert admin_user.account_locked_until is None


@pytest.mark.django_db
class TestAdminLoginEndpoint:

    def test_login_success(self, api_client, admin_user):
        response = api_client.post(
            LOGIN_URL,
            {"email": admin_user.email, "password": "testpass123"},
            format="json",
        )

        assert response.status_code == 200
        assert response.data["success"] is True
        assert response.data["email"] == admin_user.email
        assert "sessionid" in response.cookies

    def test_login_opens_session_for_api(self, api_client, admin_user):
        api_client.post(LOGIN_URL, {"email": admin_user.email, "password": "testpass123"}, format="json")

        assert api_client.get("/api/v1/employees/").status_code == 200

    def test_missing_fields(self, api_client, db):
        response = api_client.post(LOGIN_URL, {"email": "admin@test.com"}, format="json")

        assert response.status_code == 400
        assert "password" in response.data

    def test_bad_credentials(self, api_client, admin_user):
        response = api_client.post(
            LOGIN_URL,
            {"email": admin_user.email, "password": "bad-password"},
            format="json",
        )

        assert response.status_code == 401
        admin_user.refresh_from_db()
        assert admin_user.failed_login_attempts == 1

    def test_locked_account_gets_423(self, api_client, admin_user):
        lockout.lock_for_default_duration(admin_user, "Security review")

        response = api_client.post(
            LOGIN_URL,
            {"email": admin_user.email, "password": "testpass123"},
            format="json",
        )

        assert response.status_code == 423
        assert response.data["account_lock_reason"] == "Security review"
        assert response.data["account_locked_until"] is not None

    def test_indefinite_lock_gets_423_without_expiry(self, api_client, admin_user):
        lockout.lock_account(admin_user, "Offboarded")

        response = api_client.post(
            LOGIN_URL,
            {"email": admin_user.email, "password": "testpass123"},
            format="json",
        )

        assert response.status_code == 423
        assert response.data["account_locked_until"] is None

    def test_repeated_failures_send_warning(self, api_client, admin_user, mailoutbox, django_capture_on_commit_callbacks):
        with django_capture_on_commit_callbacks(execute=True):
            for _ in range(6):
                api_client.post(LOGIN_URL, {"email": admin_user.email, "password": "bad"}, format="json")

        assert len(mailoutbox) == 1
        assert mailoutbox[0].to == [admin_user.email]

        # Still allowed in with the right password.
        response = api_client.post(
            LOGIN_URL,
            {"email": admin_user.email, "password": "testpass123"},
            format="json",
        )
        assert response.status_code == 200
        admin_user.refresh_from_db()
        assert admin_user.failed_login_attempts == 6
