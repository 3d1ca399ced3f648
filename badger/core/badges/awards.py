# badger/core/badges/awards.py

"""
Awarding badges and fanning awards out to category capstones.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Deque, Dict, List, Mapping, Optional, Sequence, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from badger.core.instances.models import BadgeInstance, normalize_user
from badger.core.instances.service import InstancesService
from badger.core.notifications import BaseNotifier, get_notifier

from .claims import ClaimCodesService
from .models import Badge
from .roles import Contributor
from .service import BadgesService

log = logging.getLogger(__name__)


class AwardsService:
    """
    Issues badge instances to users.

    Every fresh award is committed on its own, so a failure later in a
    category cascade never takes back awards already made. Re-running an
    award is safe: the unique ``user_badge_key`` turns duplicates into no-ops.
    """

    def __init__(
        self,
        db_session: AsyncSession,
        notifier: BaseNotifier | None = None,
        claim_codes: ClaimCodesService | None = None,
    ) -> None:
        self.db: AsyncSession = db_session
        self.notifier: BaseNotifier = notifier or get_notifier()
        self.claim_codes: ClaimCodesService = claim_codes or ClaimCodesService(db_session, notifier=self.notifier)
        self.badges = BadgesService(db_session)
        self.instances = InstancesService(db_session)

    # ------------------------------------------------------------------ #
    #                          behavior credits                           #
    # ------------------------------------------------------------------ #

    @staticmethod
    def earnable_by(badge: Badge, credits: Mapping[str, int]) -> bool:
        """True when ``credits`` meets every behavior threshold of ``badge``."""
        return all(credits.get(b.shortname, 0) >= b.count for b in badge.behaviors)

    @staticmethod
    def credits_until_award(badge: Badge, credits: Mapping[str, int]) -> Dict[str, int]:
        """Missing credits per unmet behavior."""
        remaining: Dict[str, int] = {}
        for behavior in badge.behaviors:
            have = credits.get(behavior.shortname, 0)
            if have < behavior.count:
                remaining[behavior.shortname] = behavior.count - have
        return remaining

    # ------------------------------------------------------------------ #
    #                               awarding                              #
    # ------------------------------------------------------------------ #

    async def award(
        self,
        badge: Badge,
        user: str,
        send_email: bool = False,
    ) -> Tuple[Optional[BadgeInstance], List[BadgeInstance]]:
        """
        Award ``badge`` to ``user`` and any capstones the award unlocks.

        Args:
            badge (Badge): Badge to award.
            user (str): Recipient e-mail; surrounding whitespace is ignored.
            send_email (bool): Notify the recipient of the direct award.
                Cascaded awards always notify.

        Returns:
            Tuple[Optional[BadgeInstance], List[BadgeInstance]]:
                ``(instance, cascaded)``; ``(None, [])`` if the user already
                held the badge.
        """
        user = normalize_user(user)
        instance = await self._create_instance(badge, user)
        if instance is None:
            log.debug("User %s already holds badge %s", user, badge.shortname)
            return None, []

        if send_email:
            await self._notify(user, instance)

        cascaded = await self._cascade(badge, user)
        return instance, cascaded

    async def award_or_find(self, badge: Badge, user: str) -> BadgeInstance:
        user = normalize_user(user)
        instance, _ = await self.award(badge, user)
        if instance is None:
            instance = await self.instances.get_by_key(user, badge.id)
        return instance

    async def reserve_and_notify(self, badge: Badge, user: str) -> str | None:
        """
        Reserve a fresh claim code of ``badge`` for ``user`` and tell them.

        Returns None, without generating anything, if the user already holds
        the badge.
        """
        user = normalize_user(user)
        if await self.instances.user_has_badge(user, badge.id):
            log.info("Not reserving %s for %s: badge already held", badge.shortname, user)
            return None
        codes = await self.claim_codes.generate_claim_codes(badge, 1, reserved_for=user)
        code = codes[0]
        try:
            await self.notifier.notify_claim_code(user, badge, code)
        except Exception:
            log.exception("Notifier %s failed for reserved code of %s", self.notifier.name, badge.shortname)
        return code

    # ------------------------------------------------------------------ #
    #                               internals                             #
    # ------------------------------------------------------------------ #

    async def _create_instance(self, badge: Badge, user: str) -> BadgeInstance | None:
        instance = InstancesService.build_instance(badge, user)
        try:
            async with self.db.begin_nested():
                self.db.add(instance)
        except IntegrityError:
            if await self.instances.user_has_badge(instance.user, badge.id):
                return None
            raise
        await self.db.commit()
        log.info("Awarded badge %s to %s", badge.shortname, instance.user)
        return instance

    async def _notify(self, user: str, instance: BadgeInstance) -> None:
        try:
            await self.notifier.notify(user, instance)
        except Exception:
            log.exception("Notifier %s failed for %s (badge %s)", self.notifier.name, user, instance.badge.shortname)

    async def _cascade(self, badge: Badge, user: str) -> List[BadgeInstance]:
        cascaded: List[BadgeInstance] = []
        worklist: Deque[Badge] = deque([badge])
        while worklist:
            current = worklist.popleft()
            if not isinstance(current.role, Contributor):
                continue
            for category in current.categories or []:
                for capstone in await self._eligible_capstones(user, category):
                    instance = await self._create_instance(capstone, user)
                    if instance is None:
                        continue
                    log.info("Category %s: cascaded %s to %s", category, capstone.shortname, user)
                    await self._notify(user, instance)
                    cascaded.append(instance)
                    worklist.append(capstone)
        return cascaded

    async def _eligible_capstones(self, user: str, category: str) -> Sequence[Badge]:
        capstones = await self.badges.find_capstones(category)
        if not capstones:
            return []
        owned = await self.instances.find_by_category(user, category)
        score = sum(inst.badge.category_weight for inst in owned)
        log.debug("User %s scores %d in category %s", user, score, category)
        eligible = []
        for capstone in capstones:
            if score < capstone.category_requirement:
                continue
            if await self.instances.user_has_badge(user, capstone.id):
                continue
            eligible.append(capstone)
        return eligible


__all__ = ["AwardsService"]
