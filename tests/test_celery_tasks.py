import smtplib

import pytest

from badger.config import settings
from badger.workers.tasks import send_award_email_task, send_claim_code_email_task


class FakeSMTP:
    instances = []

    def __init__(self, host, port, timeout=None):
        self.host = host
        self.port = port
        self.messages = []
        self.logged_in = None
        FakeSMTP.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def starttls(self):
        pass

    def login(self, user, password):
        self.logged_in = (user, password)

    def send_message(self, msg):
        self.messages.append(msg)


@pytest.fixture
def fake_smtp(monkeypatch):
    FakeSMTP.instances = []
    monkeypatch.setattr(smtplib, "SMTP", FakeSMTP)
    monkeypatch.setattr(settings, "SMTP_HOST", "smtp.test")
    monkeypatch.setattr(settings, "SMTP_USER", "mailer")
    monkeypatch.setattr(settings, "SMTP_PASSWORD", "hunter2")
    return FakeSMTP


def test_award_mail_is_only_logged_without_smtp(monkeypatch):
    monkeypatch.setattr(settings, "SMTP_HOST", None)
    result = send_award_email_task.delay(
        user="a@example.com", badge_name="Owl", assertion_url="http://badges.test/badge/assertion/x"
    )
    assert result.get() == "LOGGED"


def test_award_mail_sent_over_smtp(fake_smtp):
    result = send_award_email_task.delay(
        user="a@example.com", badge_name="Owl", assertion_url="http://badges.test/badge/assertion/x"
    )

    assert result.get() == "SENT"
    [smtp] = fake_smtp.instances
    assert (smtp.host, smtp.port) == ("smtp.test", settings.SMTP_PORT)
    assert smtp.logged_in == ("mailer", "hunter2")
    [msg] = smtp.messages
    assert msg["To"] == "a@example.com"
    assert "Owl" in msg["Subject"]
    assert "http://badges.test/badge/assertion/x" in msg.get_content()


def test_claim_code_mail(fake_smtp):
    result = send_claim_code_email_task.delay(user="b@example.com", badge_name="Fox", code="sly-red-fox")

    assert result.get() == "SENT"
    [msg] = fake_smtp.instances[0].messages
    assert "sly-red-fox" in msg.get_content()
