# badger/core/badges/claims.py

"""Claim-code lifecycle: generation, lookup, redemption, release, removal."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple, TYPE_CHECKING

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from badger.config import settings
from badger.core.instances.models import normalize_user
from badger.core.notifications import BaseNotifier
from badger.core.phrases import BasePhraseGenerator, get_phrase_generator

from .exceptions import GeneratorExhausted, InvalidArgument
from .models import Badge, ClaimCode, normalize_code
from .service import BadgesService

if TYPE_CHECKING:
    from badger.core.instances.models import BadgeInstance

log = logging.getLogger(__name__)


@dataclass
class RedemptionResult:
    """
    Outcome of redeeming a code.

    ``redeemed`` is None when no badge owns the code, False when the code
    belongs to someone else and True on success. ``reserved`` tells a code
    reserved for another user apart from one already used.
    """
    badge: Optional[Badge]
    redeemed: Optional[bool]
    reserved: bool = False
    instance: Optional["BadgeInstance"] = None
    cascaded: List["BadgeInstance"] = field(default_factory=list)


class ClaimCodesService:
    """
    Manages the claim codes embedded in a badge.

    Code uniqueness is global: ``claim_codes.code`` carries a unique index
    and every batch is checked against it before insertion. The check is
    read-then-write, so a concurrent insert of the same code surfaces as an
    ``IntegrityError`` on flush.
    """

    def __init__(
        self,
        db_session: AsyncSession,
        phrase_generator: BasePhraseGenerator | None = None,
        notifier: BaseNotifier | None = None,
        max_attempts: int | None = None,
    ) -> None:
        self.db: AsyncSession = db_session
        self.phrases: BasePhraseGenerator = phrase_generator or get_phrase_generator()
        self.notifier = notifier
        self.max_attempts: int = max_attempts or settings.CLAIM_CODE_MAX_ATTEMPTS

    # ------------------------------------------------------------------ #
    #                        adding & generating                          #
    # ------------------------------------------------------------------ #

    async def existing_codes(self, codes: Iterable[str]) -> set[str]:
        """Subset of ``codes`` already used by any badge."""
        codes = list(codes)
        if not codes:
            return set()
        result = await self.db.scalars(select(ClaimCode.code).where(ClaimCode.code.in_(codes)))
        return set(result.all())

    async def add_claim_codes(
        self,
        badge: Badge,
        codes: Iterable[str],
        *,
        limit: int | None = None,
        multi: bool = False,
        reserved_for: str | None = None,
        already_clean: bool = False,
    ) -> Tuple[List[str], List[str]]:
        """
        Add claim codes to ``badge`` and flush it in one update.

        Args:
            badge (Badge): Badge receiving the codes.
            codes (Iterable[str]): Candidate codes; normalized before use.
                Codes that normalize to an empty string are rejected.
            limit (int | None): Maximum number of codes to accept. None means no limit.
            multi (bool): Whether the codes can be redeemed by many users.
            reserved_for (str | None): Only this user may redeem the code.
                Requires exactly one code.
            already_clean (bool): Skip in-batch de-duplication.

        Returns:
            Tuple[List[str], List[str]]: ``(accepted, rejected)`` in input order.

        Raises:
            InvalidArgument: ``reserved_for`` given with anything but one code,
                or not an e-mail address.
        """
        codes = [normalize_code(code) for code in codes]
        if reserved_for and len(codes) != 1:
            raise InvalidArgument("only one code can be reserved for the same user")
        if reserved_for:
            reserved_for = normalize_user(reserved_for)
        if not already_clean:
            codes = list(dict.fromkeys(codes))

        existing = await self.existing_codes(codes)
        accepted: List[str] = []
        rejected: List[str] = []
        for code in codes:
            if not code or code in existing or (limit is not None and len(accepted) >= limit):
                rejected.append(code)
            else:
                accepted.append(code)

        if not accepted:
            log.debug("No claim codes accepted for badge %s (%d rejected)", badge.shortname, len(rejected))
            return accepted, rejected

        for code in accepted:
            badge.claim_codes.append(ClaimCode(code=code, multi=multi, reserved_for=reserved_for))
        self.db.add(badge)
        await self.db.flush()
        log.info(
            "Added %d claim codes to badge %s (%d rejected)",
            len(accepted), badge.shortname, len(rejected)
        )
        return accepted, rejected

    async def generate_claim_codes(
        self,
        badge: Badge,
        count: int,
        reserved_for: str | None = None,
    ) -> List[str]:
        """
        Generate ``count`` new, globally unique claim codes for ``badge``.

        ``reserved_for`` forces ``count`` to 1. Colliding phrases are dropped
        and re-drawn, for at most ``max_attempts`` rounds.

        Raises:
            GeneratorExhausted: the round budget ran out, or the generator
                cannot produce enough distinct phrases.
        """
        if reserved_for:
            count = 1
        accepted: List[str] = []
        attempts = 0
        while len(accepted) < count:
            if attempts >= self.max_attempts:
                raise GeneratorExhausted(
                    f"only {len(accepted)} of {count} unique claim codes after {attempts} attempts"
                )
            attempts += 1
            remaining = count - len(accepted)
            phrases = self.phrases.generate(remaining)
            new_codes, rejected = await self.add_claim_codes(
                badge,
                phrases,
                limit=remaining,
                reserved_for=reserved_for,
                already_clean=True,
            )
            accepted.extend(new_codes)
            if rejected:
                log.debug("Attempt %d: %d generated codes collided, retrying", attempts, len(rejected))
        return accepted

    # ------------------------------------------------------------------ #
    #                               lookups                               #
    # ------------------------------------------------------------------ #

    @staticmethod
    def get_claim_code(badge: Badge, code: str) -> ClaimCode | None:
        normalized = normalize_code(code)
        for claim in reversed(badge.claim_codes):
            if claim.code == normalized:
                return claim
        return None

    def has_claim_code(self, badge: Badge, code: str) -> bool:
        return self.get_claim_code(badge, code) is not None

    @staticmethod
    def get_claim_codes(badge: Badge, unclaimed: bool = False) -> List[Dict[str, object]]:
        """Summaries ``{code, claimed[, reserved_for]}``, optionally only unclaimed ones."""
        out: List[Dict[str, object]] = []
        for claim in badge.claim_codes:
            if unclaimed and claim.claimed_by:
                continue
            entry: Dict[str, object] = {"code": claim.code, "claimed": bool(claim.claimed_by)}
            if claim.reserved_for:
                entry["reserved_for"] = claim.reserved_for
            out.append(entry)
        return out

    def claim_code_is_claimed(self, badge: Badge, code: str) -> bool | None:
        claim = self.get_claim_code(badge, code)
        if claim is None:
            return None
        return bool(claim.claimed_by and not claim.multi)

    # ------------------------------------------------------------------ #
    #                             state changes                           #
    # ------------------------------------------------------------------ #

    def redeem_claim_code(self, badge: Badge, code: str, user: str) -> bool | None:
        """
        Mark ``code`` as claimed by ``user``.

        Returns None if the code does not exist, False if it is a single-use
        code held by someone else or reserved for someone else, True otherwise.
        Repeating a redemption for the same user returns True again. The
        caller persists the badge.
        """
        user = normalize_user(user)
        claim = self.get_claim_code(badge, code)
        if claim is None:
            return None
        if claim.reserved_for and claim.reserved_for != user:
            log.info("Claim code %s is reserved for another user", claim.code)
            return False
        if not claim.multi and claim.claimed_by and claim.claimed_by != user:
            log.info("Claim code %s already claimed by another user", claim.code)
            return False
        claim.claimed_by = user
        return True

    def release_claim_code(self, badge: Badge, code: str) -> bool | None:
        claim = self.get_claim_code(badge, code)
        if claim is None:
            return None
        claim.claimed_by = None
        return True

    def remove_claim_code(self, badge: Badge, code: str) -> bool:
        claim = self.get_claim_code(badge, code)
        if claim is None:
            return False
        badge.claim_codes.remove(claim)
        return True

    # ------------------------------------------------------------------ #
    #                              redemption                             #
    # ------------------------------------------------------------------ #

    async def redeem(self, code: str, user: str, send_email: bool = False) -> RedemptionResult:
        """
        Redeem ``code`` for ``user`` and award the owning badge on success.
        """
        from .awards import AwardsService

        user = normalize_user(user)
        badge = await BadgesService(self.db).find_by_claim_code(code)
        if badge is None:
            log.info("Claim code %r not found", code)
            return RedemptionResult(badge=None, redeemed=None)

        redeemed = self.redeem_claim_code(badge, code, user)
        if not redeemed:
            claim = self.get_claim_code(badge, code)
            reserved = bool(claim and claim.reserved_for and claim.reserved_for != user)
            return RedemptionResult(badge=badge, redeemed=redeemed, reserved=reserved)
        await self.db.flush()

        awards = AwardsService(self.db, notifier=self.notifier, claim_codes=self)
        instance, cascaded = await awards.award(badge, user, send_email=send_email)
        log.info("User %s redeemed claim code for badge %s", user, badge.shortname)
        return RedemptionResult(badge=badge, redeemed=True, instance=instance, cascaded=cascaded)


__all__ = ["ClaimCodesService", "RedemptionResult"]
