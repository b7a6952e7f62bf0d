"""
notifications.py — Account Emails (fire-and-forget)

Routes schedule these through FastAPI BackgroundTasks after the response
is ready, so a slow or failing mail relay never affects the request.
Delivery failures are logged and dropped.

Delivery is disabled (logged only) while SMTP_HOST is empty.
"""

from __future__ import annotations

import smtplib
from email.message import EmailMessage

from taskapi.core.config import settings
from taskapi.core.logging import get_logger

logger = get_logger(__name__)


def _deliver(to_email: str, subject: str, body: str) -> None:
    if not settings.SMTP_HOST:
        logger.info("SMTP not configured, skipping %r mail to %s", subject, to_email)
        return

    msg = EmailMessage()
    msg["From"] = settings.MAIL_FROM
    msg["To"] = to_email
    msg["Subject"] = subject
    msg.set_content(body)

    try:
        with smtplib.SMTP(
            host=settings.SMTP_HOST,
            port=settings.SMTP_PORT,
            timeout=settings.SMTP_TIMEOUT_SECONDS,
        ) as server:
            if settings.SMTP_USE_TLS:
                server.starttls()
            if settings.SMTP_USERNAME:
                server.login(settings.SMTP_USERNAME, settings.SMTP_PASSWORD)
            server.send_message(msg)
    except (smtplib.SMTPException, OSError):
        logger.exception("Failed to send %r mail to %s", subject, to_email)
        return

    logger.info("Sent %r mail to %s", subject, to_email)


def send_welcome_email(email: str, name: str) -> None:
    _deliver(
        email,
        "Thanks for joining in!",
        f"Welcome to the app, {name}. Let us know how you get along with it.",
    )


def send_cancellation_email(email: str, name: str) -> None:
    _deliver(
        email,
        "Sorry to see you go!",
        f"Goodbye, {name}. Is there anything we could have done to have kept you on board?",
    )
