# badger/workers/tasks.py

from __future__ import annotations

import smtplib
from email.message import EmailMessage

from celery import Celery
from celery.utils.log import get_task_logger

from badger.config import settings

log = get_task_logger(__name__)

celery_app = Celery(
    "badger",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
    include=['badger.workers.tasks'],
    task_serializer='json',
    result_serializer='json',
    accept_content=['json']
)
celery_app.conf.update(
    task_track_started=True,
    timezone='UTC',
    broker_connection_retry_on_startup=True,
)


def _send_mail(to_email: str, subject: str, body: str) -> str:
    """Deliver one plain-text mail; without SMTP_HOST it is only logged."""
    if not settings.SMTP_HOST:
        log.info("[DEV EMAIL] To:%s | %s | %s", to_email, subject, body)
        return "LOGGED"

    msg = EmailMessage()
    msg["From"] = settings.SMTP_FROM
    msg["To"] = to_email
    msg["Subject"] = subject
    msg.set_content(body)

    with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT, timeout=30) as s:
        s.starttls()
        if settings.SMTP_USER and settings.SMTP_PASSWORD:
            s.login(settings.SMTP_USER, settings.SMTP_PASSWORD)
        s.send_message(msg)
    log.info("Mail '%s' sent to %s", subject, to_email)
    return "SENT"


@celery_app.task(
    name="badger.workers.tasks.send_award_email_task",
    bind=True,
    autoretry_for=(smtplib.SMTPException, OSError),
    retry_kwargs={'max_retries': 3},
    retry_backoff=True,
    retry_backoff_max=60 * 5,
    retry_jitter=True
)
def send_award_email_task(self, user: str, badge_name: str, assertion_url: str) -> str:
    """Tell ``user`` they earned ``badge_name``."""
    log.info("[%s] Award mail for %s (badge %r)", self.request.id, user, badge_name)
    subject = f"You earned the {badge_name} badge"
    body = (
        f"Congratulations! You have earned the badge \"{badge_name}\".\n"
        f"Your badge assertion: {assertion_url}\n"
    )
    return _send_mail(user, subject, body)


@celery_app.task(
    name="badger.workers.tasks.send_claim_code_email_task",
    bind=True,
    autoretry_for=(smtplib.SMTPException, OSError),
    retry_kwargs={'max_retries': 3},
    retry_backoff=True,
    retry_backoff_max=60 * 5,
    retry_jitter=True
)
def send_claim_code_email_task(self, user: str, badge_name: str, code: str) -> str:
    """Send ``user`` a claim code reserved for them."""
    log.info("[%s] Claim code mail for %s (badge %r)", self.request.id, user, badge_name)
    subject = f"Your claim code for {badge_name}"
    body = (
        f"A claim code for the badge \"{badge_name}\" has been reserved for you.\n"
        f"Redeem it with this code: {code}\n"
    )
    return _send_mail(user, subject, body)


__all__ = ["celery_app", "send_award_email_task", "send_claim_code_email_task"]
