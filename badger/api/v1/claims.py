# badger/api/v1/claims.py

from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from badger.core.badges.claims import ClaimCodesService
from badger.core.badges.models import Badge
from badger.core.badges.schemas import (
    AwardOut,
    ClaimCodeOut,
    ClaimCodesAdded,
    ClaimCodesIn,
    ClaimIn,
    GenerateIn,
    GeneratedOut,
    InstanceOut,
)
from badger.core.notifications import BaseNotifier
from badger.core.phrases import BasePhraseGenerator
from badger.db.base import get_async_db_session

from .deps import get_badge_or_404, notifier_dependency, phrase_generator_dependency

router = APIRouter(prefix="/v1", tags=["Claim codes"])
log = logging.getLogger(__name__)


def _claim_codes(
    db: AsyncSession = Depends(get_async_db_session),
    phrases: BasePhraseGenerator = Depends(phrase_generator_dependency),
    notifier: BaseNotifier = Depends(notifier_dependency),
) -> ClaimCodesService:
    return ClaimCodesService(db, phrase_generator=phrases, notifier=notifier)


@router.get("/badges/{shortname}/claim-codes", response_model=List[ClaimCodeOut])
async def list_claim_codes(
    unclaimed: bool = Query(False),
    badge: Badge = Depends(get_badge_or_404),
) -> List[ClaimCodeOut]:
    return [ClaimCodeOut(**entry) for entry in ClaimCodesService.get_claim_codes(badge, unclaimed=unclaimed)]


@router.post("/badges/{shortname}/claim-codes", response_model=ClaimCodesAdded)
async def add_claim_codes(
    payload: ClaimCodesIn,
    badge: Badge = Depends(get_badge_or_404),
    service: ClaimCodesService = Depends(_claim_codes),
) -> ClaimCodesAdded:
    accepted, rejected = await service.add_claim_codes(
        badge,
        payload.codes,
        limit=payload.limit,
        multi=payload.multi,
        reserved_for=payload.reserved_for,
    )
    return ClaimCodesAdded(accepted=accepted, rejected=rejected)


@router.post(
    "/badges/{shortname}/claim-codes/generate",
    response_model=GeneratedOut,
    status_code=status.HTTP_201_CREATED,
)
async def generate_claim_codes(
    payload: GenerateIn,
    badge: Badge = Depends(get_badge_or_404),
    service: ClaimCodesService = Depends(_claim_codes),
) -> GeneratedOut:
    codes = await service.generate_claim_codes(badge, payload.count, reserved_for=payload.reserved_for)
    log.info("API: generated %d claim codes for %s", len(codes), badge.shortname)
    return GeneratedOut(codes=codes)


@router.post("/badges/{shortname}/claim-codes/{code}/release", response_model=ClaimCodeOut)
async def release_claim_code(
    code: str,
    badge: Badge = Depends(get_badge_or_404),
    service: ClaimCodesService = Depends(_claim_codes),
) -> ClaimCodeOut:
    if service.release_claim_code(badge, code) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="claim code not found")
    await service.db.flush()
    claim = service.get_claim_code(badge, code)
    return ClaimCodeOut(code=claim.code, claimed=False, reserved_for=claim.reserved_for)


@router.delete("/badges/{shortname}/claim-codes/{code}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_claim_code(
    code: str,
    badge: Badge = Depends(get_badge_or_404),
    service: ClaimCodesService = Depends(_claim_codes),
) -> Response:
    if not service.remove_claim_code(badge, code):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="claim code not found")
    await service.db.flush()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/claim", response_model=AwardOut, summary="Redeem a claim code")
async def claim(
    payload: ClaimIn,
    service: ClaimCodesService = Depends(_claim_codes),
) -> AwardOut:
    result = await service.redeem(payload.code, payload.user, send_email=payload.send_email)
    if result.redeemed is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="unknown claim code")
    if result.redeemed is False:
        detail = "claim code reserved for another user" if result.reserved else "claim code already used"
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=detail)
    return AwardOut(
        awarded=result.instance is not None,
        instance=InstanceOut.from_instance(result.instance) if result.instance else None,
        cascaded=[InstanceOut.from_instance(i) for i in result.cascaded],
    )


__all__ = ["router"]
