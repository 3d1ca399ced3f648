# badger/api/v1/badges.py

from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from badger.core.badges.awards import AwardsService
from badger.core.badges.claims import ClaimCodesService
from badger.core.badges.models import Badge
from badger.core.badges.recommendations import RecommendationsService
from badger.core.badges.schemas import (
    AwardIn,
    AwardOut,
    BadgeIn,
    BadgeOut,
    BadgeUpdate,
    CriteriaOut,
    InstanceOut,
    ReserveIn,
    ReserveOut,
)
from badger.core.badges.service import BadgesService
from badger.core.notifications import BaseNotifier
from badger.db.base import get_async_db_session

from .deps import get_badge_or_404, notifier_dependency

router = APIRouter(prefix="/v1/badges", tags=["Badges"])
log = logging.getLogger(__name__)


# --- Catalogue ---
@router.get("", response_model=List[BadgeOut], summary="List badges")
async def list_badges(
    include_unlisted: bool = Query(False),
    db: AsyncSession = Depends(get_async_db_session),
) -> List[BadgeOut]:
    badges = await BadgesService(db).list_badges(include_unlisted=include_unlisted)
    return [BadgeOut.from_badge(b) for b in badges]


@router.post("", response_model=BadgeOut, status_code=status.HTTP_201_CREATED, summary="Create a badge")
async def create_badge(
    payload: BadgeIn,
    db: AsyncSession = Depends(get_async_db_session),
) -> BadgeOut:
    log.info("API: creating badge %r", payload.name)
    badge = await BadgesService(db).create_badge(
        **payload.badge_attrs(),
        behaviors=payload.behaviors,
        role=payload.to_role(),
    )
    return BadgeOut.from_badge(badge)


@router.get("/{shortname}", response_model=BadgeOut)
async def get_badge(badge: Badge = Depends(get_badge_or_404)) -> BadgeOut:
    return BadgeOut.from_badge(badge)


@router.patch("/{shortname}", response_model=BadgeOut)
async def update_badge(
    payload: BadgeUpdate,
    badge: Badge = Depends(get_badge_or_404),
    db: AsyncSession = Depends(get_async_db_session),
) -> BadgeOut:
    badge = await BadgesService(db).update_badge(
        badge,
        behaviors=payload.behaviors,
        role=payload.to_role() if payload.touches_role() else None,
        **payload.badge_attrs(),
    )
    return BadgeOut.from_badge(badge)


@router.delete("/{shortname}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_badge(
    badge: Badge = Depends(get_badge_or_404),
    db: AsyncSession = Depends(get_async_db_session),
) -> Response:
    await BadgesService(db).delete_badge(badge)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# --- Open Badges views ---
@router.get("/{shortname}/meta", summary="Open Badges class metadata")
async def badge_meta(badge: Badge = Depends(get_badge_or_404)) -> dict:
    return badge.make_json()


@router.get("/{shortname}/image.png", response_class=Response)
async def badge_image(badge: Badge = Depends(get_badge_or_404)) -> Response:
    return Response(content=badge.image, media_type="image/png")


@router.get("/{shortname}/criteria", response_model=CriteriaOut)
async def badge_criteria(badge: Badge = Depends(get_badge_or_404)) -> CriteriaOut:
    return CriteriaOut(
        shortname=badge.shortname,
        content=badge.criteria_content,
        rubric_items=badge.rubric_items(),
    )


@router.get("/{shortname}/similar", response_model=List[BadgeOut])
async def similar_badges(
    user: Optional[str] = Query(None, description="Hide badges this user already holds"),
    badge: Badge = Depends(get_badge_or_404),
    db: AsyncSession = Depends(get_async_db_session),
) -> List[BadgeOut]:
    similar = await RecommendationsService(db).get_similar(badge, user)
    return [BadgeOut.from_badge(b) for b in similar]


# --- Awarding ---
@router.post("/{shortname}/award", response_model=AwardOut)
async def award_badge(
    payload: AwardIn,
    badge: Badge = Depends(get_badge_or_404),
    db: AsyncSession = Depends(get_async_db_session),
    notifier: BaseNotifier = Depends(notifier_dependency),
) -> AwardOut:
    log.info("API: awarding %s to %s", badge.shortname, payload.user)
    instance, cascaded = await AwardsService(db, notifier=notifier).award(
        badge, payload.user, send_email=payload.send_email
    )
    return AwardOut(
        awarded=instance is not None,
        instance=InstanceOut.from_instance(instance) if instance else None,
        cascaded=[InstanceOut.from_instance(i) for i in cascaded],
    )


@router.post("/{shortname}/reserve", response_model=ReserveOut)
async def reserve_badge(
    payload: ReserveIn,
    badge: Badge = Depends(get_badge_or_404),
    db: AsyncSession = Depends(get_async_db_session),
    notifier: BaseNotifier = Depends(notifier_dependency),
) -> ReserveOut:
    claim_codes = ClaimCodesService(db, notifier=notifier)
    code = await AwardsService(db, notifier=notifier, claim_codes=claim_codes).reserve_and_notify(
        badge, payload.user
    )
    if code is None:
        log.info("API: %s already holds %s, nothing reserved", payload.user, badge.shortname)
    return ReserveOut(code=code)


__all__ = ["router"]
