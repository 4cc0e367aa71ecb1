"""
Outbound email notifications for certificate status changes

Delivery goes through an HTTP email API (Resend-compatible JSON body). A
failed send is logged and reported to the caller as False; it never raises
into the status transition that triggered it.
"""
import logging
from functools import lru_cache
from typing import Optional, Tuple

import httpx

from app.core.config import settings
from app.models.certificate import CertificateRequest

logger = logging.getLogger(__name__)


class NotificationError(Exception):
    """Raised by a notifier when the email could not be handed off"""


class EmailNotifier:
    """Interface: send a plain-text email"""

    def send(self, to_email: str, subject: str, body: str) -> None:
        raise NotImplementedError


class LoggingNotifier(EmailNotifier):
    """Used when NOTIFICATIONS_ENABLED is off: records what would be sent"""

    def send(self, to_email: str, subject: str, body: str) -> None:
        logger.info("Email notification disabled; would send %r to %s", subject, to_email)


class HttpEmailNotifier(EmailNotifier):
    def __init__(
        self,
        api_url: str,
        api_key: str,
        sender: str,
        client: Optional[httpx.Client] = None,
    ):
        self.api_url = api_url
        self.api_key = api_key
        self.sender = sender
        self.client = client or httpx.Client()

    def send(self, to_email: str, subject: str, body: str) -> None:
        try:
            response = self.client.post(
                self.api_url,
                headers={"Authorization": f"Bearer {self.api_key}"},
                json={
                    "from": self.sender,
                    "to": [to_email],
                    "subject": subject,
                    "text": body,
                },
            )
        except httpx.HTTPError as e:
            raise NotificationError(f"Email API unreachable: {e}") from e

        if response.status_code >= 400:
            raise NotificationError(
                f"Email API returned {response.status_code}: {response.text[:200]}"
            )

    def close(self) -> None:
        self.client.close()


@lru_cache(maxsize=None)
def get_notifier() -> EmailNotifier:
    """
    Dependency: the notifier configured by settings.

    Built once per process so every request shares one HTTP connection pool;
    close_notifier() releases it on shutdown.
    """
    if settings.NOTIFICATIONS_ENABLED and settings.EMAIL_API_KEY:
        return HttpEmailNotifier(
            api_url=settings.EMAIL_API_URL,
            api_key=settings.EMAIL_API_KEY,
            sender=settings.EMAIL_FROM,
        )
    return LoggingNotifier()


def close_notifier() -> None:
    """Close the shared notifier's HTTP client and forget it"""
    if get_notifier.cache_info().currsize:
        notifier = get_notifier()
        if isinstance(notifier, HttpEmailNotifier):
            notifier.close()
    get_notifier.cache_clear()


def status_label(status: str) -> str:
    """'ready_for_pickup' -> 'READY FOR PICKUP'"""
    return status.replace("_", " ").upper()


def build_status_email(
    request: CertificateRequest,
    status: str,
    notes: Optional[str] = None,
) -> Tuple[str, str]:
    """Return (subject, body) for a status update email"""
    label = status_label(status)
    subject = f"Certificate Request {label} - {request.control_number}"
    lines = [
        f"Dear {request.resident_name},",
        "",
        "Your certificate request has been updated.",
        "",
        f"Control Number: {request.control_number}",
        f"Certificate Type: {request.certificate_type}",
        f"Status: {label}",
    ]
    if notes:
        lines.append(f"Notes: {notes}")
    if status == "ready_for_pickup":
        lines += ["", "Please visit the Barangay Hall during office hours and bring a valid ID."]
    elif status == "rejected":
        lines += ["", "Please visit the Barangay Hall if you have questions about this decision."]
    lines += ["", "This is an automated message. Please do not reply to this email."]
    return subject, "\n".join(lines)


def notify_status_change(
    notifier: EmailNotifier,
    request: CertificateRequest,
    status: str,
    notes: Optional[str] = None,
) -> bool:
    """
    Email the requester about a status change.

    Returns True when the email was handed off, False when skipped or failed.
    """
    if not request.resident_email:
        logger.debug("No email on file for %s; notification skipped", request.control_number)
        return False

    subject, body = build_status_email(request, status, notes)
    try:
        notifier.send(request.resident_email, subject, body)
    except Exception as e:
        logger.warning(
            "Failed to send status notification for %s: %s", request.control_number, e
        )
        return False
    return True
