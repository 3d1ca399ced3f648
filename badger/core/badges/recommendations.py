# badger/core/badges/recommendations.py

from __future__ import annotations

import logging
import random
from typing import List, Optional, Sequence

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from badger.core.instances.service import InstancesService

from .models import Badge

log = logging.getLogger(__name__)


class RecommendationsService:
    """Suggests badges a user could earn next."""

    def __init__(self, db_session: AsyncSession, rng: Optional[random.Random] = None) -> None:
        self.db: AsyncSession = db_session
        self.instances = InstancesService(db_session)
        self._rng = rng or random.Random()

    async def get_recommendations(self, user: str) -> List[Badge]:
        """
        Badges for ``user`` to work on next.

        Candidates are all online (or untyped) badges the user does not hold.
        From those, prefer ordinary badges (no capstones, no participation
        badges) in a category the user has started and whose capstone they
        have not earned yet. With nothing left after filtering, return every
        candidate in random order.
        """
        instances = await self.instances.list_for_user(user)
        earned_ids = {inst.badge_id for inst in instances}
        on_track = {cat for inst in instances for cat in (inst.badge.categories or [])}
        earned_capstones = {inst.badge.category_award for inst in instances if inst.badge.category_award}

        stmt = (
            select(Badge)
            .where(or_(Badge.activity_type.is_(None), Badge.activity_type != "offline"))
            .order_by(Badge.created_at, Badge.id)
        )
        candidates = [b for b in (await self.db.scalars(stmt)).all() if b.id not in earned_ids]

        filtered = [
            b for b in candidates
            if not b.category_award
            and b.type != "participation"
            and not earned_capstones.intersection(b.categories or [])
            and on_track.intersection(b.categories or [])
        ]
        log.debug(
            "Recommendations for %s: %d candidates, %d after filtering",
            user, len(candidates), len(filtered)
        )
        if filtered:
            return filtered
        self._rng.shuffle(candidates)
        return candidates

    async def get_similar(self, badge: Badge, user: str | None = None) -> List[Badge]:
        """Other badges sharing a category with ``badge``, minus those ``user`` holds."""
        categories = set(badge.categories or [])
        if not categories:
            return []
        # JSON containment differs per backend, so categories are matched here.
        all_badges: Sequence[Badge] = (
            await self.db.scalars(select(Badge).where(Badge.id != badge.id).order_by(Badge.created_at, Badge.id))
        ).all()
        similar = [b for b in all_badges if categories.intersection(b.categories or [])]
        if user is None:
            return similar
        earned_ids = {inst.badge_id for inst in await self.instances.list_for_user(user)}
        return [b for b in similar if b.id not in earned_ids]


__all__ = ["RecommendationsService"]
