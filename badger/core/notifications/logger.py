# badger/core/notifications/logger.py

from __future__ import annotations

import logging

from .base import BaseNotifier

log = logging.getLogger(__name__)


class LogNotifier(BaseNotifier):
    """Writes notifications to the log instead of delivering them. Default in dev and tests."""

    name: str = "log"

    async def notify(self, user, instance) -> None:
        log.info(
            "LogNotifier: user %s earned badge %s (assertion %s)",
            user, instance.badge.shortname, instance.absolute_url("assertion"),
        )

    async def notify_claim_code(self, user, badge, code) -> None:
        log.info("LogNotifier: claim code %s for badge %s reserved for %s", code, badge.shortname, user)


__all__ = ["LogNotifier"]
