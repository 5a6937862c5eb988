"""Unit tests for the SMTP email transport."""

from __future__ import annotations

import smtplib

import pytest

from bazaarfly.config import Settings
from bazaarfly.infrastructure import email as email_module
from bazaarfly.infrastructure.email import (
    EmailConfigurationError,
    EmailDeliveryError,
    SMTPMailer,
    strip_html,
)


def _settings(**overrides) -> Settings:
    values = {
        "email_host": "smtp.bazaarfly.test",
        "email_port": 587,
        "email_user": "noreply@bazaarfly.test",
        "email_password": "secret",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


class _FakeSMTP:
    """Stand-in for ``smtplib.SMTP`` recording how it was used."""

    instances: list["_FakeSMTP"] = []
    send_error: Exception | None = None
    starttls_error: Exception | None = None

    def __init__(self, host, port, timeout=None, context=None):
        self.host = host
        self.port = port
        self.timeout = timeout
        self.started_tls = False
        self.credentials = None
        self.sent = []
        self.noop_status = 250
        self.quit_called = False
        type(self).instances.append(self)

    def starttls(self, context=None):
        if type(self).starttls_error is not None:
            raise type(self).starttls_error
        self.started_tls = True

    def login(self, user, password):
        self.credentials = (user, password)

    def noop(self):
        return self.noop_status, b"OK"

    def send_message(self, message, to_addrs=None):
        if type(self).send_error is not None:
            raise type(self).send_error
        self.sent.append((message, to_addrs))

    def quit(self):
        self.quit_called = True

    def close(self):  # pragma: no cover - only used when quit fails
        self.quit_called = True


@pytest.fixture()
def fake_smtp(monkeypatch: pytest.MonkeyPatch):
    """Replace both SMTP client classes with recording fakes."""

    class PlainSMTP(_FakeSMTP):
        instances = []
        send_error = None
        starttls_error = None

    class SSLSMTP(_FakeSMTP):
        instances = []
        send_error = None
        starttls_error = None

    monkeypatch.setattr(email_module.smtplib, "SMTP", PlainSMTP)
    monkeypatch.setattr(email_module.smtplib, "SMTP_SSL", SSLSMTP)
    return PlainSMTP, SSLSMTP


def test_missing_settings_fail_before_connecting(fake_smtp) -> None:
    """Every absent setting is reported and no connection is attempted."""

    plain, ssl_client = fake_smtp
    mailer = SMTPMailer(_settings(email_host=None, email_password=None))

    with pytest.raises(EmailConfigurationError) as exc_info:
        mailer.send_email("user@example.com", "Subject", "<p>Body</p>")

    assert "EMAIL_HOST" in str(exc_info.value)
    assert "EMAIL_PASS" in str(exc_info.value)
    assert "EMAIL_USER" not in str(exc_info.value)
    assert plain.instances == []
    assert ssl_client.instances == []


def test_send_email_uses_starttls_and_reuses_connection(fake_smtp) -> None:
    """Two sends share one logged-in connection."""

    plain, ssl_client = fake_smtp
    mailer = SMTPMailer(_settings())

    mailer.send_email("a@example.com", "First", "<p>One</p>")
    mailer.send_email(["b@example.com", "c@example.com"], "Second", "<p>Two</p>")

    assert len(plain.instances) == 1
    assert ssl_client.instances == []
    connection = plain.instances[0]
    assert connection.started_tls is True
    assert connection.credentials == ("noreply@bazaarfly.test", "secret")
    assert connection.timeout == 30.0
    assert [to_addrs for _, to_addrs in connection.sent] == [
        ["a@example.com"],
        ["b@example.com", "c@example.com"],
    ]


def test_message_headers_and_plain_text_fallback(fake_smtp) -> None:
    plain, _ = fake_smtp
    mailer = SMTPMailer(_settings())

    mailer.send_email("a@example.com", "Hello", "<h2>Hi</h2><p>There</p>")

    message, _ = plain.instances[0].sent[0]
    assert message["Subject"] == "Hello"
    assert message["To"] == "a@example.com"
    assert message["From"] == "Bazaarfly <noreply@bazaarfly.test>"
    assert message.get_body(preferencelist=("plain",)).get_content().strip() == "HiThere"
    assert "<h2>Hi</h2>" in message.get_body(preferencelist=("html",)).get_content()


def test_explicit_text_part_is_kept(fake_smtp) -> None:
    plain, _ = fake_smtp
    mailer = SMTPMailer(_settings())

    mailer.send_email("a@example.com", "Hello", "<p>Html</p>", text="Plain version")

    message, _ = plain.instances[0].sent[0]
    assert message.get_body(preferencelist=("plain",)).get_content().strip() == "Plain version"


def test_port_465_uses_implicit_ssl(fake_smtp) -> None:
    plain, ssl_client = fake_smtp
    mailer = SMTPMailer(_settings(email_port=465))

    mailer.send_email("a@example.com", "Subject", "<p>Body</p>")

    assert plain.instances == []
    assert len(ssl_client.instances) == 1
    assert ssl_client.instances[0].started_tls is False


def test_transport_failure_is_wrapped_and_logged(fake_smtp, caplog) -> None:
    """The caller gets a generic error; the cause stays in the log."""

    plain, _ = fake_smtp
    plain.send_error = smtplib.SMTPRecipientsRefused(
        {"a@example.com": (550, b"mailbox unavailable")}
    )
    mailer = SMTPMailer(_settings())

    with caplog.at_level("ERROR"):
        with pytest.raises(EmailDeliveryError) as exc_info:
            mailer.send_email("a@example.com", "Subject", "<p>Body</p>")

    assert str(exc_info.value) == "Could not send email"
    assert isinstance(exc_info.value.__cause__, smtplib.SMTPRecipientsRefused)
    assert "mailbox unavailable" in caplog.text
    assert len(plain.instances[0].sent) == 0
    assert plain.instances[0].quit_called is True


def test_failed_send_is_not_retried(fake_smtp) -> None:
    plain, _ = fake_smtp
    plain.send_error = smtplib.SMTPServerDisconnected("gone")
    mailer = SMTPMailer(_settings())

    with pytest.raises(EmailDeliveryError):
        mailer.send_email("a@example.com", "Subject", "<p>Body</p>")

    assert len(plain.instances) == 1


def test_stale_connection_is_replaced(fake_smtp) -> None:
    plain, _ = fake_smtp
    mailer = SMTPMailer(_settings())
    mailer.send_email("a@example.com", "First", "<p>One</p>")
    plain.instances[0].noop_status = 421

    mailer.send_email("a@example.com", "Second", "<p>Two</p>")

    assert len(plain.instances) == 2
    assert plain.instances[0].quit_called is True
    assert len(plain.instances[1].sent) == 1


def test_init_and_shutdown(fake_smtp) -> None:
    plain, _ = fake_smtp
    mailer = SMTPMailer(_settings())

    mailer.init()
    assert len(plain.instances) == 1

    mailer.shutdown()
    mailer.shutdown()
    assert plain.instances[0].quit_called is True


def test_strip_html() -> None:
    assert strip_html('<p>Hello <a href="/x">there</a></p>') == "Hello there"


def test_password_is_read_from_email_pass(fake_smtp, monkeypatch) -> None:
    """Environments exporting ``EMAIL_PASS`` are fully configured."""

    plain, _ = fake_smtp
    monkeypatch.setenv("EMAIL_HOST", "smtp.bazaarfly.test")
    monkeypatch.setenv("EMAIL_PORT", "587")
    monkeypatch.setenv("EMAIL_USER", "noreply@bazaarfly.test")
    monkeypatch.setenv("EMAIL_PASS", "from-env")
    monkeypatch.delenv("EMAIL_PASSWORD", raising=False)
    mailer = SMTPMailer(Settings(_env_file=None))

    mailer.send_email("a@example.com", "Subject", "<p>Body</p>")

    assert plain.instances[0].credentials == ("noreply@bazaarfly.test", "from-env")
    assert len(plain.instances[0].sent) == 1


def test_failed_starttls_closes_the_socket(fake_smtp) -> None:
    plain, _ = fake_smtp
    plain.starttls_error = smtplib.SMTPNotSupportedError("STARTTLS not supported")
    mailer = SMTPMailer(_settings())

    with pytest.raises(EmailDeliveryError):
        mailer.send_email("a@example.com", "Subject", "<p>Body</p>")

    assert len(plain.instances) == 1
    assert plain.instances[0].quit_called is True
    assert plain.instances[0].credentials is None
