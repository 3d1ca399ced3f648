# badger/core/notifications/base.py
"""
Abstract base for award notifiers (e-mail, webhooks, ...).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from badger.core.badges.models import Badge
    from badger.core.instances.models import BadgeInstance


class BaseNotifier(ABC):
    """
    Asynchronous notifier interface.

    Calls are fire-and-forget from the caller's point of view: callers log
    and swallow any exception a notifier raises.
    """

    name: str

    @abstractmethod
    async def notify(self, user: str, instance: "BadgeInstance") -> None:
        """Tell ``user`` they earned ``instance.badge``."""
        ...

    @abstractmethod
    async def notify_claim_code(self, user: str, badge: "Badge", code: str) -> None:
        """Send ``user`` a claim code reserved for them."""
        ...


__all__ = ["BaseNotifier"]
