# badger/core/notifications/email.py

from __future__ import annotations

import logging

from .base import BaseNotifier

log = logging.getLogger(__name__)


class EmailNotifier(BaseNotifier):
    """
    Queues award mail on Celery; delivery happens in the worker
    (see ``badger.workers.tasks``).
    """

    name: str = "email"

    async def notify(self, user, instance) -> None:
        from badger.workers.tasks import send_award_email_task

        send_award_email_task.delay(
            user=user,
            badge_name=instance.badge.name,
            assertion_url=instance.absolute_url("assertion"),
        )
        log.info("EmailNotifier: award mail queued for %s (badge %s)", user, instance.badge.shortname)

    async def notify_claim_code(self, user, badge, code) -> None:
        from badger.workers.tasks import send_claim_code_email_task

        send_claim_code_email_task.delay(
            user=user,
            badge_name=badge.name,
            code=code,
        )
        log.info("EmailNotifier: claim code mail queued for %s (badge %s)", user, badge.shortname)


__all__ = ["EmailNotifier"]
