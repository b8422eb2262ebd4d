import logging

from django.conf import settings
from django.core.mail import send_mail

logger = logging.getLogger(__name__)


def _log_dispatch(status, recipient, subject="", body="", error="", source=""):
    """Create a NotificationLog entry; never let audit logging break delivery."""
    try:
        from apps.communications.models import NotificationLog

        NotificationLog.objects.create(
            channel="email",
            status=status,
            recipient=recipient,
            subject=subject[:500],
            body_preview=body[:500],
            error_message=error,
            source=source,
        )
    except Exception:
        logger.exception("Failed to create notification log entry")


def send_email(subject, message, recipient_list, html_message=None, from_email=None, source=""):
    """
    Send a plain-text (optionally HTML) email and record the outcome.

    Returns True on success, False if the backend raised. Failures are
    logged, not propagated: callers treat email as best-effort.
    """
    from_email = from_email or settings.DEFAULT_FROM_EMAIL

    try:
        send_mail(
            subject=subject,
            message=message,
            from_email=from_email,
            recipient_list=recipient_list,
            html_message=html_message,
            fail_silently=False,
        )
        logger.info("Email sent: subject='%s', to=%s", subject, recipient_list)
        for r in recipient_list:
            _log_dispatch("sent", r, subject=subject, body=message, source=source)
        return True
    except Exception as e:
        logger.exception("Failed to send email to %s", recipient_list)
        for r in recipient_list:
            _log_dispatch(
                "failed", r, subject=subject, body=message, error=str(e), source=source
            )
        return False
