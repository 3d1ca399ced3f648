# badger/api/v1/users.py

from __future__ import annotations

import logging
from typing import Dict, List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from badger.core.badges.recommendations import RecommendationsService
from badger.core.badges.schemas import BadgeOut, InstanceOut
from badger.core.instances.service import InstancesService
from badger.db.base import get_async_db_session

router = APIRouter(prefix="/v1/users", tags=["Users"])
log = logging.getLogger(__name__)


@router.get("/{user}/badges", response_model=List[InstanceOut])
async def user_badges(user: str, db: AsyncSession = Depends(get_async_db_session)) -> List[InstanceOut]:
    instances = await InstancesService(db).list_for_user(user)
    return [InstanceOut.from_instance(i) for i in instances]


@router.post("/{user}/badges/seen")
async def mark_badges_seen(user: str, db: AsyncSession = Depends(get_async_db_session)) -> Dict[str, int]:
    return {"marked": await InstancesService(db).mark_all_as_seen(user)}


@router.delete("/{user}/badges")
async def delete_user_badges(user: str, db: AsyncSession = Depends(get_async_db_session)) -> Dict[str, int]:
    deleted = await InstancesService(db).delete_all_by_user(user)
    log.info("API: purged %d badge instances of %s", len(deleted), user)
    return {"deleted": len(deleted)}


@router.get("/{user}/recommendations", response_model=List[BadgeOut])
async def recommendations(user: str, db: AsyncSession = Depends(get_async_db_session)) -> List[BadgeOut]:
    badges = await RecommendationsService(db).get_recommendations(user)
    return [BadgeOut.from_badge(b) for b in badges]


__all__ = ["router"]
