# badger/core/instances/service.py

"""Service-layer for earned badge instances."""

from __future__ import annotations

import hashlib
import json
import logging
from datetime import datetime, timezone
from typing import List, Sequence

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from badger.core.badges.models import Badge
from .models import BadgeInstance, user_badge_key

log = logging.getLogger(__name__)


def make_assertion(badge: Badge, user: str, issued_on: datetime) -> str:
    """Serialized assertion for ``user`` earning ``badge``."""
    payload = {
        "recipient": user,
        "badge": badge.absolute_url("json"),
        "issuedOn": int(issued_on.timestamp()),
        "verify": {"type": "hosted"},
    }
    return json.dumps(payload, sort_keys=True, separators=(",", ":"))


def hash_assertion(assertion: str) -> str:
    return hashlib.sha256(assertion.encode("utf-8")).hexdigest()


class InstancesService:
    """
    Async service over ``BadgeInstance`` rows.
    Receives the ``AsyncSession`` from the caller; never commits.
    """

    def __init__(self, db_session: AsyncSession) -> None:
        self.db: AsyncSession = db_session

    # ------------------------------------------------------------------ #
    #                              builders                               #
    # ------------------------------------------------------------------ #

    @staticmethod
    def build_instance(badge: Badge, user: str) -> BadgeInstance:
        """New, unsaved instance with assertion, hash and uniqueness key filled in."""
        issued_on = datetime.now(timezone.utc)
        instance = BadgeInstance(user=user, badge=badge, issued_on=issued_on)
        instance.assertion = make_assertion(badge, instance.user, issued_on)
        instance.hash = hash_assertion(instance.assertion)
        instance.user_badge_key = user_badge_key(instance.user, badge.id)
        return instance

    # ------------------------------------------------------------------ #
    #                               queries                               #
    # ------------------------------------------------------------------ #

    async def get_by_key(self, user: str, badge_id: str) -> BadgeInstance | None:
        stmt = select(BadgeInstance).where(BadgeInstance.user_badge_key == user_badge_key(user, badge_id))
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_hash(self, hash_: str) -> BadgeInstance | None:
        result = await self.db.execute(select(BadgeInstance).where(BadgeInstance.hash == hash_))
        return result.scalar_one_or_none()

    async def user_has_badge(self, user: str, badge_id: str) -> bool:
        stmt = select(BadgeInstance.id).where(BadgeInstance.user_badge_key == user_badge_key(user, badge_id))
        result = await self.db.execute(stmt)
        return result.first() is not None

    async def list_for_user(self, user: str) -> Sequence[BadgeInstance]:
        log.debug("Listing badge instances for user %s", user)
        stmt = (
            select(BadgeInstance)
            .where(BadgeInstance.user == user)
            .order_by(BadgeInstance.issued_on, BadgeInstance.id)
        )
        result = await self.db.scalars(stmt)
        return result.all()

    async def find_by_category(self, user: str, category: str) -> List[BadgeInstance]:
        """Instances of ``user`` whose badge is tagged with ``category``."""
        instances = await self.list_for_user(user)
        return [inst for inst in instances if category in (inst.badge.categories or [])]

    # ------------------------------------------------------------------ #
    #                              mutations                              #
    # ------------------------------------------------------------------ #

    async def mark_all_as_seen(self, user: str) -> int:
        stmt = (
            update(BadgeInstance)
            .where(BadgeInstance.user == user, BadgeInstance.seen == False)  # noqa: E712
            .values(seen=True)
        )
        result = await self.db.execute(stmt)
        log.info("Marked %d badge instances as seen for user %s", result.rowcount, user)
        return result.rowcount

    async def delete_all_by_user(self, user: str) -> List[BadgeInstance]:
        instances = list(await self.list_for_user(user))
        for instance in instances:
            await self.db.delete(instance)
        await self.db.flush()
        log.info("Deleted %d badge instances for user %s", len(instances), user)
        return instances


__all__ = ["InstancesService", "make_assertion", "hash_assertion"]
