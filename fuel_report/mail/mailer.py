"""
fuel_report/mail/mailer.py

HTML email delivery with a bounded, linearly backed-off retry loop.
"""

from __future__ import annotations

import logging
import smtplib
import time
from email.message import EmailMessage
from email.utils import make_msgid
from functools import lru_cache
from typing import Any, Callable, Iterable

from fuel_report.config import (
    MailRetrySettings,
    get_mail_pool_settings,
    get_mail_retry_settings,
    get_mail_settings,
)
from fuel_report.domain.fuel_prices import DeliveryReceipt
from fuel_report.errors import DeliveryError
from fuel_report.logging_utils import log_event
from fuel_report.mail.pool import SMTPConnectionPool

logger = logging.getLogger(__name__)

DEFAULT_TEXT_BODY = (
    "This email contains an HTML fuel price report. "
    "If you are seeing only plain text, please enable HTML view in your email client."
)

# Most specific classes first: several smtplib errors share base classes.
_FAILED_COMMANDS: tuple[tuple[type[BaseException], str], ...] = (
    (smtplib.SMTPAuthenticationError, "AUTH"),
    (smtplib.SMTPSenderRefused, "MAIL FROM"),
    (smtplib.SMTPRecipientsRefused, "RCPT TO"),
    (smtplib.SMTPDataError, "DATA"),
    (smtplib.SMTPHeloError, "EHLO"),
    (smtplib.SMTPNotSupportedError, "EHLO"),
    (smtplib.SMTPConnectError, "CONN"),
    (smtplib.SMTPServerDisconnected, "CONN"),
    (OSError, "CONN"),
)


def describe_smtp_error(exc: BaseException) -> dict[str, Any]:
    """
    Collect the diagnostic fields smtplib exposes for a failed send.
    """

    command = next((name for cls, name in _FAILED_COMMANDS if isinstance(exc, cls)), None)
    details: dict[str, Any] = {
        "error_type": type(exc).__name__,
        "error": str(exc),
        "command": command,
        "smtp_code": None,
        "smtp_error": None,
    }

    if isinstance(exc, smtplib.SMTPResponseException):
        details["smtp_code"] = exc.smtp_code
        raw = exc.smtp_error
        details["smtp_error"] = raw.decode("utf-8", "replace") if isinstance(raw, bytes) else str(raw)
    elif isinstance(exc, smtplib.SMTPRecipientsRefused) and exc.recipients:
        first_code, first_error = next(iter(exc.recipients.values()))
        details["smtp_code"] = first_code
        details["smtp_error"] = (
            first_error.decode("utf-8", "replace") if isinstance(first_error, bytes) else str(first_error)
        )
        details["refused_recipients"] = sorted(exc.recipients)
    return details


class Mailer:
    """
    Sends rendered reports through the shared SMTP pool.

    Failed attempts are retried up to ``max_attempts`` in total, sleeping
    ``attempt * base_delay_seconds`` between attempts.
    """

    def __init__(
        self,
        *,
        pool: SMTPConnectionPool,
        sender: str | None,
        retry_settings: MailRetrySettings,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._pool = pool
        self._sender = sender
        self._max_attempts = max(1, retry_settings.max_attempts)
        self._base_delay_seconds = max(0.0, retry_settings.base_delay_seconds)
        self._sleep = sleep

    @property
    def pool(self) -> SMTPConnectionPool:
        return self._pool

    def send(
        self,
        html_body: str,
        subject: str,
        recipients: Iterable[str],
        *,
        text_body: str | None = None,
    ) -> DeliveryReceipt:
        """
        Deliver one HTML email, retrying transport failures.

        Raises
        ------
        DeliveryError
            When no sender or recipient is configured, or every attempt failed.
        """

        to_addresses = tuple(addr.strip() for addr in recipients if addr and addr.strip())
        if not to_addresses:
            raise DeliveryError(
                "No recipients configured. Set EMAIL_RECIPIENTS to a comma-separated list.",
                attempts=0,
            )
        if not self._sender:
            raise DeliveryError(
                "No sender address configured. Set EMAIL_FROM or EMAIL_USER.",
                attempts=0,
            )

        message = self._build_message(html_body, subject, to_addresses, text_body)
        message_id = str(message["Message-ID"])

        last_error: BaseException | None = None
        for attempt in range(1, self._max_attempts + 1):
            try:
                with self._pool.connection() as smtp:
                    refused = smtp.send_message(
                        message,
                        from_addr=self._sender,
                        to_addrs=list(to_addresses),
                    )
            except (smtplib.SMTPException, OSError) as exc:
                last_error = exc
                log_event(
                    logger,
                    logging.WARNING,
                    "mail_attempt",
                    outcome="failed",
                    attempt=attempt,
                    max_attempts=self._max_attempts,
                    **describe_smtp_error(exc),
                )
                if attempt < self._max_attempts:
                    delay = attempt * self._base_delay_seconds
                    logger.info("Retrying email delivery in %.1fs", delay)
                    self._sleep(delay)
                continue

            log_event(
                logger,
                logging.INFO,
                "mail_attempt",
                outcome="sent",
                attempt=attempt,
                max_attempts=self._max_attempts,
                message_id=message_id,
                refused_recipients=sorted(refused or {}),
            )
            return DeliveryReceipt(
                message_id=message_id,
                attempts=attempt,
                recipients=to_addresses,
            )

        raise DeliveryError(
            f"Failed to send email after {self._max_attempts} attempts: {last_error}",
            attempts=self._max_attempts,
        ) from last_error

    def _build_message(
        self,
        html_body: str,
        subject: str,
        to_addresses: tuple[str, ...],
        text_body: str | None,
    ) -> EmailMessage:
        sender = self._sender or ""
        domain = sender.rsplit("@", 1)[1] if "@" in sender else None

        msg = EmailMessage()
        msg["From"] = sender
        msg["To"] = ", ".join(to_addresses)
        msg["Subject"] = subject
        msg["Message-ID"] = make_msgid(domain=domain)
        msg.set_content(text_body or DEFAULT_TEXT_BODY)
        msg.add_alternative(html_body, subtype="html")
        return msg


@lru_cache(maxsize=1)
def get_mail_transport() -> SMTPConnectionPool:
    """
    Build and cache the process-wide SMTP connection pool.
    """

    return SMTPConnectionPool(
        settings=get_mail_settings(),
        pool_settings=get_mail_pool_settings(),
    )


@lru_cache(maxsize=1)
def get_mailer() -> Mailer:
    """
    Build and cache the mailer bound to the shared pool.
    """

    return Mailer(
        pool=get_mail_transport(),
        sender=get_mail_settings().sender,
        retry_settings=get_mail_retry_settings(),
    )
