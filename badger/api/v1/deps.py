from __future__ import annotations

import logging

from fastapi import Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from badger.core.badges.models import Badge
from badger.core.badges.service import BadgesService
from badger.core.notifications import BaseNotifier, get_notifier
from badger.core.phrases import BasePhraseGenerator, get_phrase_generator
from badger.db.base import get_async_db_session

log = logging.getLogger(__name__)


def notifier_dependency() -> BaseNotifier:
    return get_notifier()


def phrase_generator_dependency() -> BasePhraseGenerator:
    return get_phrase_generator()


async def get_badge_or_404(
    shortname: str,
    db: AsyncSession = Depends(get_async_db_session),
) -> Badge:
    badge = await BadgesService(db).get_by_shortname(shortname)
    if badge is None:
        log.warning("Badge %s not found", shortname)
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"badge {shortname!r} not found")
    return badge
