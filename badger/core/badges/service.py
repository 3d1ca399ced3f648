# badger/core/badges/service.py

"""Service-layer for the badge catalogue."""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Mapping, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .exceptions import InvalidArgument
from .models import Badge, Behavior, ClaimCode, normalize_code, slugify
from .roles import BadgeRole

log = logging.getLogger(__name__)

_LIST_FIELDS = ("tags", "categories", "age_ranges", "prerequisites")


class BadgesService:
    """
    Async service for creating, looking up and editing badges.
    Flushes but never commits; the caller owns the transaction.
    """

    def __init__(self, db_session: AsyncSession) -> None:
        self.db: AsyncSession = db_session

    # ------------------------------------------------------------------ #
    #                                CRUD                                 #
    # ------------------------------------------------------------------ #

    async def create_badge(
        self,
        *,
        name: str,
        description: str,
        image: bytes,
        shortname: str | None = None,
        behaviors: Mapping[str, int] | None = None,
        role: BadgeRole | None = None,
        **attrs: Any,
    ) -> Badge:
        """
        Create and flush a new badge.

        Args:
            name (str): Unique display name.
            description (str): Human readable description.
            image (bytes): PNG payload.
            shortname (str | None): Unique slug; defaults to a slug of ``name``.
            behaviors (Mapping[str, int] | None): behavior shortname -> required count.
            role (BadgeRole | None): Category role; overrides raw category columns.
            **attrs: Any other ``Badge`` column.

        Returns:
            Badge: The flushed badge with its id assigned.
        """
        for field in _LIST_FIELDS:
            attrs[field] = list(attrs.get(field) or [])
        badge = Badge(
            name=name,
            description=description,
            image=image,
            shortname=(shortname or slugify(name)).strip(),
            # both collections must be loaded before the badge leaves this method
            behaviors=[
                Behavior(shortname=behavior_name.strip(), count=count)
                for behavior_name, count in (behaviors or {}).items()
            ],
            claim_codes=[],
            **attrs,
        )
        if not badge.shortname:
            raise InvalidArgument("badge shortname cannot be empty")
        if role is not None:
            badge.role = role
        badge.normalize_category_info()

        self.db.add(badge)
        await self.db.flush()
        log.info("Created badge %s (%s), role=%s", badge.shortname, badge.id, badge.role)
        return badge

    async def update_badge(
        self,
        badge: Badge,
        *,
        behaviors: Mapping[str, int] | None = None,
        role: BadgeRole | None = None,
        **attrs: Any,
    ) -> Badge:
        for field, value in attrs.items():
            if field in _LIST_FIELDS:
                value = list(value or [])
            setattr(badge, field, value)
        if role is not None:
            badge.role = role
        if behaviors is not None:
            self._replace_behaviors(badge, behaviors)
        badge.normalize_category_info()
        await self.db.flush()
        log.info("Updated badge %s: %s", badge.shortname, sorted(attrs))
        return badge

    async def delete_badge(self, badge: Badge) -> None:
        await self.db.delete(badge)
        await self.db.flush()
        log.info("Deleted badge %s (%s)", badge.shortname, badge.id)

    # ------------------------------------------------------------------ #
    #                               lookups                               #
    # ------------------------------------------------------------------ #

    async def get_badge(self, badge_id: str) -> Badge | None:
        return await self.db.get(Badge, badge_id)

    async def get_by_shortname(self, shortname: str) -> Badge | None:
        log.debug("Getting badge by shortname=%s", shortname)
        result = await self.db.execute(select(Badge).where(Badge.shortname == shortname))
        return result.scalar_one_or_none()

    async def list_badges(self, include_unlisted: bool = True) -> Sequence[Badge]:
        stmt = select(Badge).order_by(Badge.created_at, Badge.id)
        if not include_unlisted:
            stmt = stmt.where(Badge.do_not_list == False)  # noqa: E712
        result = await self.db.scalars(stmt)
        return result.all()

    async def get_all(self) -> Dict[str, Badge]:
        """All badges keyed by shortname."""
        return {badge.shortname: badge for badge in await self.list_badges()}

    async def find_by_behavior(self, shortnames: str | Iterable[str]) -> Sequence[Badge]:
        """Badges that count at least one of the given behaviors."""
        if isinstance(shortnames, str):
            shortnames = [shortnames]
        stmt = (
            select(Badge)
            .where(Badge.id.in_(
                select(Behavior.badge_id).where(Behavior.shortname.in_(list(shortnames)))
            ))
            .order_by(Badge.created_at, Badge.id)
        )
        result = await self.db.scalars(stmt)
        return result.all()

    async def find_by_claim_code(self, code: str) -> Badge | None:
        """Badge owning ``code`` (normalized), looked up through the code index."""
        stmt = (
            select(Badge)
            .join(ClaimCode, ClaimCode.badge_id == Badge.id)
            .where(ClaimCode.code == normalize_code(code))
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def find_capstones(self, category: str) -> Sequence[Badge]:
        """Badges awarded for reaching the score threshold of ``category``."""
        stmt = (
            select(Badge)
            .where(Badge.category_award == category)
            .order_by(Badge.category_requirement, Badge.created_at, Badge.id)
        )
        result = await self.db.scalars(stmt)
        return result.all()

    # ------------------------------------------------------------------ #
    #                              behaviors                              #
    # ------------------------------------------------------------------ #

    @staticmethod
    def remove_behavior(badge: Badge, shortname: str) -> Badge:
        badge.behaviors = [b for b in badge.behaviors if b.shortname != shortname]
        return badge

    @staticmethod
    def behavior_map(badge: Badge) -> Dict[str, int]:
        return {b.shortname: b.count for b in badge.behaviors}

    @staticmethod
    def _replace_behaviors(badge: Badge, behaviors: Mapping[str, int]) -> None:
        # Update rows in place; delete+insert of the same shortname would trip
        # the (badge_id, shortname) unique constraint within one flush.
        wanted = {k.strip(): v for k, v in behaviors.items()}
        kept = []
        for behavior in badge.behaviors:
            if behavior.shortname in wanted:
                behavior.count = wanted.pop(behavior.shortname)
                kept.append(behavior)
        kept.extend(Behavior(shortname=k, count=v) for k, v in wanted.items())
        badge.behaviors = kept


__all__ = ["BadgesService"]
