import json
import logging

import pytest
from django.http import HttpResponse
from django.test import RequestFactory
from django.utils.module_loading import import_string

from core.email import log_email, send_branded_email
from core.middleware import NoStoreAPIMiddleware
from core.models import EmailLog


@pytest.mark.django_db
class TestEmailLogStats:

    def test_empty_log(self):
        assert EmailLog.objects.stats() == {"total": 0, "sent": 0, "failed": 0, "success_rate": 0}

    def test_pending_rows_count_toward_total_only(self):
        log_email("a@test.com", EmailLog.Status.PENDING)
        log_email("a@test.com", EmailLog.Status.SENT)
        log_email("b@test.com", EmailLog.Status.SENT)
        log_email("c@test.com", EmailLog.Status.FAILED, error="timeout")

        stats = EmailLog.objects.stats()

        assert stats == {"total": 4, "sent": 2, "failed": 1, "success_rate": 50.0}

    def test_pending_row_halves_success_rate_of_a_clean_send(self):
        log_email("a@test.com", EmailLog.Status.PENDING)
        log_email("a@test.com", EmailLog.Status.SENT)

        assert EmailLog.objects.stats()["success_rate"] == 50.0
        assert EmailLog.objects.exclude(status=EmailLog.Status.PENDING).stats()["success_rate"] == 100.0

    def test_stats_respect_filters(self):
        log_email("a@test.com", EmailLog.Status.SENT, email_type=EmailLog.Type.SECURITY_ALERT)
        log_email("b@test.com", EmailLog.Status.FAILED)

        assert EmailLog.objects.filter(type=EmailLog.Type.SECURITY_ALERT).stats()["success_rate"] == 100.0

    def test_log_email_defaults(self):
        entry = log_email("a@test.com", EmailLog.Status.SENT)
        assert entry.type == EmailLog.Type.OTHER
        assert entry.metadata == {}
        assert str(entry) == "[SENT] other to a@test.com"


def test_send_branded_email_attaches_html(mailoutbox, settings):
    sent = send_branded_email(
        subject="Alert",
        template_name="emails/failed_login_warning",
        context={"admin_name": "ops", "failed_attempts": 7},
        recipient_list=["ops@test.com"],
    )

    assert sent == 1
    message = mailoutbox[0]
    assert message.from_email == settings.DEFAULT_FROM_EMAIL
    assert "Hello ops" in message.body
    html, mimetype = message.alternatives[0]
    assert mimetype == "text/html"
    assert "7" in html


class TestNoStoreMiddleware:

    def test_api_responses_are_marked_no_store(self):
        middleware = NoStoreAPIMiddleware(lambda request: HttpResponse("ok"))

        response = middleware(RequestFactory().get("/api/v1/employees/"))

        assert "no-store" in response["Cache-Control"]
        assert response["Pragma"] == "no-cache"

    def test_other_paths_untouched(self):
        middleware = NoStoreAPIMiddleware(lambda request: HttpResponse("ok"))

        response = middleware(RequestFactory().get("/admin/"))

        assert not response.has_header("Cache-Control")

    def test_prefixes_come_from_settings(self, settings):
        settings.NO_STORE_PATH_PREFIXES = ("/reports/",)
        middleware = NoStoreAPIMiddleware(lambda request: HttpResponse("ok"))

        assert "no-store" in middleware(RequestFactory().get("/reports/monthly/"))["Cache-Control"]
        assert not middleware(RequestFactory().get("/api/v1/employees/")).has_header("Cache-Control")


def test_json_log_formatter_includes_extra_fields(settings):
    config = settings.LOGGING["formatters"]["json"]
    formatter = import_string(config["()"])(config["fmt"])
    record = logging.makeLogRecord({
        "name": "backoffice",
        "levelname": "INFO",
        "msg": "Locked admin=%s",
        "args": (3,),
        "admin_id": 3,
    })

    payload = json.loads(formatter.format(record))

    assert payload["message"] == "Locked admin=3"
    assert payload["name"] == "backoffice"
    assert payload["levelname"] == "INFO"
    assert payload["admin_id"] == 3
