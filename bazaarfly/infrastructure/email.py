"""SMTP transport used to deliver transactional notification email."""

from __future__ import annotations

import logging
import re
import smtplib
import ssl
import threading
from email.message import EmailMessage
from email.utils import formataddr
from typing import Protocol, Sequence

from bazaarfly.config import Settings, get_settings

logger = logging.getLogger(__name__)

_TAG_PATTERN = re.compile(r"<[^>]+>")
_SSL_PORT = 465

# Setting attribute -> environment variable reported when missing.
_REQUIRED_SETTINGS = (
    ("email_host", "EMAIL_HOST"),
    ("email_port", "EMAIL_PORT"),
    ("email_user", "EMAIL_USER"),
    ("email_password", "EMAIL_PASS"),
)


class EmailConfigurationError(RuntimeError):
    """Raised when the SMTP connection settings are incomplete."""


class EmailDeliveryError(RuntimeError):
    """Raised when the SMTP server could not accept a message."""


class Mailer(Protocol):
    """Anything able to deliver a rendered email."""

    def send_email(
        self,
        to: str | Sequence[str],
        subject: str,
        html: str,
        text: str | None = None,
    ) -> None: ...


def strip_html(html: str) -> str:
    """Return ``html`` with every markup tag removed."""

    return _TAG_PATTERN.sub("", html)


def missing_email_settings(settings: Settings) -> list[str]:
    """Return the environment variable names of unset SMTP settings."""

    return [env for attr, env in _REQUIRED_SETTINGS if not getattr(settings, attr)]


class SMTPMailer:
    """Deliver email through one SMTP connection shared by the whole process.

    The connection is opened on first use (or by :meth:`init`) and kept until
    :meth:`shutdown`. Each message gets exactly one send attempt; a failure
    drops the connection so the next call starts from a fresh one.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings
        self._connection: smtplib.SMTP | None = None
        self._lock = threading.Lock()

    @property
    def settings(self) -> Settings:
        if self._settings is None:
            self._settings = get_settings()
        return self._settings

    def init(self) -> None:
        """Open the SMTP connection eagerly."""

        with self._lock:
            self._ensure_connection()

    def shutdown(self) -> None:
        """Close the cached connection if one is open."""

        with self._lock:
            self._close_connection()

    def send_email(
        self,
        to: str | Sequence[str],
        subject: str,
        html: str,
        text: str | None = None,
    ) -> None:
        """Send one message; raise :class:`EmailDeliveryError` on any failure."""

        self._validate_settings()
        recipients = [to] if isinstance(to, str) else list(to)
        message = self._build_message(recipients, subject, html, text)

        with self._lock:
            try:
                connection = self._ensure_connection()
                connection.send_message(message, to_addrs=recipients)
            except (smtplib.SMTPException, OSError) as exc:
                logger.exception("Failed to send email to %s: %s", ", ".join(recipients), exc)
                self._close_connection()
                raise EmailDeliveryError("Could not send email") from exc

        logger.info("Email sent successfully to %s", ", ".join(recipients))

    def _validate_settings(self) -> None:
        missing = missing_email_settings(self.settings)
        if missing:
            raise EmailConfigurationError(
                "Missing required email environment variables: " + ", ".join(missing)
            )

    def _build_message(
        self,
        recipients: list[str],
        subject: str,
        html: str,
        text: str | None,
    ) -> EmailMessage:
        settings = self.settings
        message = EmailMessage()
        message["Subject"] = subject
        message["From"] = formataddr((settings.email_from_name, settings.email_user))
        message["To"] = ", ".join(recipients)
        message.set_content(text if text is not None else strip_html(html))
        message.add_alternative(html, subtype="html")
        return message

    def _ensure_connection(self) -> smtplib.SMTP:
        """Return the cached connection, replacing it if the server dropped it."""

        if self._connection is not None:
            try:
                status, _ = self._connection.noop()
            except (smtplib.SMTPException, OSError):
                status = None
            if status == 250:
                return self._connection
            logger.info("Cached SMTP connection is stale; reconnecting")
            self._close_connection()

        self._validate_settings()
        self._connection = self._connect()
        return self._connection

    def _connect(self) -> smtplib.SMTP:
        settings = self.settings
        host = settings.email_host
        port = int(settings.email_port)
        timeout = settings.email_timeout_seconds
        context = ssl.create_default_context()

        if port == _SSL_PORT:
            connection: smtplib.SMTP = smtplib.SMTP_SSL(
                host, port, timeout=timeout, context=context
            )
        else:
            connection = smtplib.SMTP(host, port, timeout=timeout)
        try:
            if port != _SSL_PORT:
                connection.starttls(context=context)
            connection.login(settings.email_user, settings.email_password)
        except (smtplib.SMTPException, OSError):
            _quietly_close(connection)
            raise
        logger.info("Opened SMTP connection to %s:%s", host, port)
        return connection

    def _close_connection(self) -> None:
        if self._connection is None:
            return
        connection, self._connection = self._connection, None
        _quietly_close(connection)


def _quietly_close(connection: smtplib.SMTP) -> None:
    try:
        connection.quit()
    except (smtplib.SMTPException, OSError):
        connection.close()


__all__ = [
    "EmailConfigurationError",
    "EmailDeliveryError",
    "Mailer",
    "SMTPMailer",
    "missing_email_settings",
    "strip_html",
]
