"""
Status change emails
"""
import json

import httpx
import pytest
from fastapi import status
from sqlalchemy.orm import Session

from app.core.config import settings
from app.models.certificate import CertificateRequest
from app.services.notification_service import (
    HttpEmailNotifier,
    LoggingNotifier,
    NotificationError,
    build_status_email,
    close_notifier,
    get_notifier,
    notify_status_change,
)


def _advance(staff_auth, token, control_number, new_status, **extra):
    return staff_auth(
        "advance-certificate-request", token=token, controlNumber=control_number, newStatus=new_status, **extra
    )


def test_status_change_sends_email(staff_auth, secretary_token, submit_request, notifier):
    control_number = submit_request()

    _advance(staff_auth, secretary_token, control_number, "for_review")
    _advance(staff_auth, secretary_token, control_number, "approved")
    _advance(staff_auth, secretary_token, control_number, "ready_for_pickup", notes="Bring a valid ID")

    assert [m["subject"] for m in notifier.sent] == [
        f"Certificate Request FOR REVIEW - {control_number}",
        f"Certificate Request APPROVED - {control_number}",
        f"Certificate Request READY FOR PICKUP - {control_number}",
    ]
    last = notifier.sent[-1]
    assert last["to"] == "ana@example.com"
    assert control_number in last["body"]
    assert "Barangay Clearance" in last["body"]
    assert "Notes: Bring a valid ID" in last["body"]


def test_no_email_without_address(staff_auth, secretary_token, submit_request, notifier):
    control_number = submit_request(email=None)

    response = _advance(staff_auth, secretary_token, control_number, "for_review")

    assert response.status_code == status.HTTP_200_OK
    assert notifier.sent == []


def test_no_email_on_failed_transition(staff_auth, secretary_token, submit_request, notifier):
    control_number = submit_request()

    _advance(staff_auth, secretary_token, control_number, "released")

    assert notifier.sent == []


def test_notification_failure_keeps_status(staff_auth, secretary_token, submit_request, notifier, db: Session):
    control_number = submit_request()
    notifier.fail = True

    response = _advance(staff_auth, secretary_token, control_number, "for_review")

    assert response.status_code == status.HTTP_200_OK
    assert db.query(CertificateRequest).one().status == "for_review"


def test_build_status_email_rejected():
    request = CertificateRequest(
        control_number="CERT-20260101-0001",
        certificate_type="Certificate of Indigency",
        resident_name="Ana Reyes",
    )

    subject, body = build_status_email(request, "rejected", "Incomplete requirements")

    assert subject == "Certificate Request REJECTED - CERT-20260101-0001"
    assert "Status: REJECTED" in body
    assert "Notes: Incomplete requirements" in body


def test_notify_reports_failure_as_false():
    class Broken:
        def send(self, to_email, subject, body):
            raise NotificationError("boom")

    request = CertificateRequest(
        control_number="CERT-20260101-0001",
        certificate_type="Barangay Clearance",
        resident_name="Ana Reyes",
        resident_email="ana@example.com",
    )

    assert notify_status_change(Broken(), request, "approved") is False


def test_http_notifier_posts_json():
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["url"] = str(request.url)
        captured["auth"] = request.headers["Authorization"]
        captured["json"] = json.loads(request.content)
        return httpx.Response(200, json={"id": "email_1"})

    client = httpx.Client(transport=httpx.MockTransport(handler))
    notifier = HttpEmailNotifier("https://mail.example/emails", "key-123", "Barangay <noreply@example.com>", client)

    notifier.send("ana@example.com", "Subject", "Body")

    assert captured["url"] == "https://mail.example/emails"
    assert captured["auth"] == "Bearer key-123"
    assert captured["json"] == {
        "from": "Barangay <noreply@example.com>",
        "to": ["ana@example.com"],
        "subject": "Subject",
        "text": "Body",
    }


def test_http_notifier_raises_on_error_status():
    client = httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(500, text="down")))
    notifier = HttpEmailNotifier("https://mail.example/emails", "key-123", "noreply@example.com", client)

    with pytest.raises(NotificationError):
        notifier.send("ana@example.com", "Subject", "Body")


def test_http_notifier_raises_on_transport_error():
    def handler(request):
        raise httpx.ConnectError("unreachable", request=request)

    client = httpx.Client(transport=httpx.MockTransport(handler))
    notifier = HttpEmailNotifier("https://mail.example/emails", "key-123", "noreply@example.com", client)

    with pytest.raises(NotificationError):
        notifier.send("ana@example.com", "Subject", "Body")


@pytest.fixture
def email_settings(monkeypatch):
    monkeypatch.setattr(settings, "NOTIFICATIONS_ENABLED", True)
    monkeypatch.setattr(settings, "EMAIL_API_KEY", "key-123")
    get_notifier.cache_clear()
    yield
    close_notifier()


def test_get_notifier_shares_one_http_client(email_settings):
    first = get_notifier()
    second = get_notifier()

    assert isinstance(first, HttpEmailNotifier)
    assert first is second


def test_close_notifier_closes_http_client(email_settings):
    notifier = get_notifier()

    close_notifier()

    assert notifier.client.is_closed
    assert get_notifier() is not notifier


def test_get_notifier_logs_only_when_disabled(monkeypatch):
    monkeypatch.setattr(settings, "NOTIFICATIONS_ENABLED", False)
    get_notifier.cache_clear()

    assert isinstance(get_notifier(), LoggingNotifier)
    get_notifier.cache_clear()
