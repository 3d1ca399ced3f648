import random
from typing import List

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from badger.core.badges.claims import ClaimCodesService
from badger.core.badges.exceptions import GeneratorExhausted, InvalidArgument
from badger.core.badges.service import BadgesService
from badger.core.phrases import BasePhraseGenerator
from badger.core.phrases.words import WordListPhraseGenerator

ALICE = "alice@example.com"
BOB = "bob@example.com"
PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 8


class ScriptedPhrases(BasePhraseGenerator):
    """Hands out pre-baked batches, one per call."""

    name = "scripted"

    def __init__(self, *batches: List[str]) -> None:
        self.batches = list(batches)
        self.requested: List[int] = []

    def generate(self, count: int) -> List[str]:
        self.requested.append(count)
        if len(self.batches) > 1:
            return self.batches.pop(0)
        return list(self.batches[0])


@pytest.mark.asyncio
async def test_add_dedups_within_batch(db_session: AsyncSession, badge_factory):
    badge = await badge_factory("Dedup")
    service = ClaimCodesService(db_session)

    accepted, rejected = await service.add_claim_codes(badge, ["a", "a", "b"])

    assert accepted == ["a", "b"]
    assert rejected == []
    assert [c.code for c in badge.claim_codes] == ["a", "b"]


@pytest.mark.asyncio
async def test_add_respects_limit(db_session: AsyncSession, badge_factory):
    badge = await badge_factory("Limited")
    service = ClaimCodesService(db_session)

    assert await service.add_claim_codes(badge, ["a"], limit=0) == ([], ["a"])
    assert await service.add_claim_codes(badge, ["x", "y", "z"], limit=2) == (["x", "y"], ["z"])
    assert badge.claim_codes and len(badge.claim_codes) == 2


@pytest.mark.asyncio
async def test_codes_are_unique_across_badges(db_session: AsyncSession, badge_factory):
    first = await badge_factory("First")
    second = await badge_factory("Second")
    service = ClaimCodesService(db_session)
    await service.add_claim_codes(first, ["shared"])

    accepted, rejected = await service.add_claim_codes(second, ["shared", "fresh"])

    assert accepted == ["fresh"]
    assert rejected == ["shared"]
    assert not service.has_claim_code(second, "shared")


@pytest.mark.asyncio
async def test_reserved_for_requires_exactly_one_code(db_session: AsyncSession, badge_factory):
    badge = await badge_factory("Reserved")
    service = ClaimCodesService(db_session)

    with pytest.raises(InvalidArgument):
        await service.add_claim_codes(badge, ["a", "b"], reserved_for=ALICE)
    with pytest.raises(InvalidArgument):
        await service.add_claim_codes(badge, [], reserved_for=ALICE)


@pytest.mark.asyncio
async def test_codes_are_normalized(db_session: AsyncSession, badge_factory):
    badge = await badge_factory("Normalized")
    service = ClaimCodesService(db_session)

    accepted, _ = await service.add_claim_codes(badge, ["  My Code "])

    assert accepted == ["my-code"]
    claim = service.get_claim_code(badge, "My Code")
    assert claim is not None and claim.code == "my-code"
    assert service.has_claim_code(badge, "MY-CODE")
    assert service.get_claim_code(badge, "other code") is None


@pytest.mark.asyncio
async def test_generate_retries_collisions(db_session: AsyncSession, badge_factory):
    other = await badge_factory("Other")
    badge = await badge_factory("Generated")
    phrases = ScriptedPhrases(["x-1", "x-2", "x-3"], ["x-4", "x-5"])
    service = ClaimCodesService(db_session, phrase_generator=phrases)
    await service.add_claim_codes(other, ["x-1", "x-2"])

    codes = await service.generate_claim_codes(badge, 3)

    assert codes == ["x-3", "x-4", "x-5"]
    assert phrases.requested == [3, 2]
    assert {c.code for c in badge.claim_codes} == {"x-3", "x-4", "x-5"}


@pytest.mark.asyncio
async def test_generate_gives_up_after_max_attempts(db_session: AsyncSession, badge_factory):
    badge = await badge_factory("Exhausted")
    service = ClaimCodesService(db_session, phrase_generator=ScriptedPhrases(["taken"]), max_attempts=3)
    await service.add_claim_codes(badge, ["taken"])

    with pytest.raises(GeneratorExhausted):
        await service.generate_claim_codes(badge, 1)


@pytest.mark.asyncio
async def test_generate_with_too_small_wordlists(db_session: AsyncSession, badge_factory):
    badge = await badge_factory("Tiny")
    service = ClaimCodesService(db_session, phrase_generator=WordListPhraseGenerator(["only"], ["one"]))

    with pytest.raises(GeneratorExhausted):
        await service.generate_claim_codes(badge, 2)


@pytest.mark.asyncio
async def test_generate_many_distinct_codes(db_session: AsyncSession, badge_factory):
    existing = await badge_factory("Existing")
    badge = await badge_factory("Many")
    service = ClaimCodesService(db_session, phrase_generator=WordListPhraseGenerator(rng=random.Random(7)))
    before = await service.generate_claim_codes(existing, 5)

    codes = await service.generate_claim_codes(badge, 40)

    assert len(codes) == 40
    assert len(set(codes)) == 40
    assert not set(codes) & set(before)


@pytest.mark.asyncio
async def test_generate_zero_and_reserved(db_session: AsyncSession, badge_factory):
    badge = await badge_factory("Zero")
    service = ClaimCodesService(db_session)

    assert await service.generate_claim_codes(badge, 0) == []

    codes = await service.generate_claim_codes(badge, 5, reserved_for=ALICE)
    assert len(codes) == 1
    assert service.get_claim_code(badge, codes[0]).reserved_for == ALICE


@pytest.mark.asyncio
async def test_redeem_single_use(db_session: AsyncSession, badge_factory):
    badge = await badge_factory("Single")
    service = ClaimCodesService(db_session)
    await service.add_claim_codes(badge, ["solo"])

    assert service.claim_code_is_claimed(badge, "solo") is False
    assert service.redeem_claim_code(badge, "solo", ALICE) is True
    assert service.redeem_claim_code(badge, "solo", ALICE) is True
    assert service.claim_code_is_claimed(badge, "solo") is True

    assert service.redeem_claim_code(badge, "solo", BOB) is False
    assert service.get_claim_code(badge, "solo").claimed_by == ALICE
    assert service.redeem_claim_code(badge, "nope", ALICE) is None
    assert service.claim_code_is_claimed(badge, "nope") is None


@pytest.mark.asyncio
async def test_redeem_multi_use(db_session: AsyncSession, badge_factory):
    badge = await badge_factory("Multi")
    service = ClaimCodesService(db_session)
    await service.add_claim_codes(badge, ["group"], multi=True)

    assert service.redeem_claim_code(badge, "group", ALICE) is True
    assert service.redeem_claim_code(badge, "group", BOB) is True
    assert service.claim_code_is_claimed(badge, "group") is False
    assert service.get_claim_code(badge, "group").claimed_by == BOB


@pytest.mark.asyncio
async def test_redeem_reserved_code(db_session: AsyncSession, badge_factory):
    badge = await badge_factory("ForAlice")
    service = ClaimCodesService(db_session)
    [code] = await service.generate_claim_codes(badge, 1, reserved_for=ALICE)

    assert service.redeem_claim_code(badge, code, BOB) is False
    assert service.get_claim_code(badge, code).claimed_by is None
    assert service.redeem_claim_code(badge, code, ALICE) is True


@pytest.mark.asyncio
async def test_release_and_remove(db_session: AsyncSession, badge_factory):
    badge = await badge_factory("Lifecycle")
    service = ClaimCodesService(db_session)
    await service.add_claim_codes(badge, ["one", "two"])
    service.redeem_claim_code(badge, "one", ALICE)

    assert service.get_claim_codes(badge) == [
        {"code": "one", "claimed": True},
        {"code": "two", "claimed": False},
    ]
    assert service.get_claim_codes(badge, unclaimed=True) == [{"code": "two", "claimed": False}]

    assert service.release_claim_code(badge, "one") is True
    assert service.get_claim_code(badge, "one").claimed_by is None
    assert service.release_claim_code(badge, "missing") is None

    assert service.remove_claim_code(badge, "two") is True
    await db_session.flush()
    assert not service.has_claim_code(badge, "two")
    assert service.remove_claim_code(badge, "two") is False
    assert await service.existing_codes(["one", "two"]) == {"one"}


@pytest.mark.asyncio
async def test_redeem_awards_badge(db_session: AsyncSession, badge_factory, notifier):
    badge = await badge_factory("Redeemable")
    service = ClaimCodesService(db_session, notifier=notifier)
    await service.add_claim_codes(badge, ["get-it"])

    missing = await service.redeem("unknown", ALICE)
    assert missing.badge is None and missing.redeemed is None

    result = await service.redeem("Get It", ALICE, send_email=True)
    assert result.redeemed is True
    assert result.badge.id == badge.id
    assert result.instance is not None and result.instance.user == ALICE
    assert notifier.awards == [(ALICE, badge.shortname)]

    again = await service.redeem("get-it", ALICE)
    assert again.redeemed is True and again.instance is None

    conflict = await service.redeem("get-it", BOB)
    assert conflict.redeemed is False and conflict.instance is None


@pytest.mark.asyncio
async def test_blank_codes_are_rejected(db_session: AsyncSession, badge_factory):
    badge = await badge_factory("Blank")
    service = ClaimCodesService(db_session)

    accepted, rejected = await service.add_claim_codes(badge, ["   ", "", "real"])

    assert accepted == ["real"]
    assert rejected == [""]
    assert [c.code for c in badge.claim_codes] == ["real"]
    assert await service.add_claim_codes(badge, ["  "]) == ([], [""])


@pytest.mark.asyncio
async def test_codes_on_badge_fresh_from_create(db_session: AsyncSession):
    badge = await BadgesService(db_session).create_badge(
        name="Straight Out", description="never reloaded", image=PNG, behaviors={"posts": 1},
    )
    service = ClaimCodesService(db_session, phrase_generator=WordListPhraseGenerator(rng=random.Random(3)))

    assert service.get_claim_codes(badge) == []
    assert service.get_claim_code(badge, "anything") is None
    assert await service.add_claim_codes(badge, ["a", "a", "b"]) == (["a", "b"], [])
    assert len(await service.generate_claim_codes(badge, 2)) == 2
    assert len(badge.claim_codes) == 4
    assert [b.shortname for b in badge.behaviors] == ["posts"]


@pytest.mark.asyncio
async def test_reserved_for_is_normalized(db_session: AsyncSession, badge_factory):
    badge = await badge_factory("Padded Reservation")
    service = ClaimCodesService(db_session)

    await service.add_claim_codes(badge, ["mine"], reserved_for=f"  {ALICE} ")

    assert service.get_claim_code(badge, "mine").reserved_for == ALICE
    assert service.redeem_claim_code(badge, "mine", ALICE) is True
    with pytest.raises(InvalidArgument):
        await service.add_claim_codes(badge, ["theirs"], reserved_for="nobody")


@pytest.mark.asyncio
async def test_redeem_with_padded_user(db_session: AsyncSession, badge_factory, notifier):
    badge = await badge_factory("Padded")
    service = ClaimCodesService(db_session, notifier=notifier)
    [code] = await service.generate_claim_codes(badge, 1, reserved_for=ALICE)

    result = await service.redeem(code, f" {ALICE}  ")

    assert result.redeemed is True
    assert result.instance.user == ALICE
    assert service.get_claim_code(badge, code).claimed_by == ALICE


@pytest.mark.asyncio
async def test_redeem_invalid_user_leaves_code_unclaimed(db_session: AsyncSession, badge_factory, notifier):
    badge = await badge_factory("Guarded")
    service = ClaimCodesService(db_session, notifier=notifier)
    await service.add_claim_codes(badge, ["guarded-code"])

    with pytest.raises(InvalidArgument):
        await service.redeem("guarded-code", "not-an-email")

    assert service.get_claim_code(badge, "guarded-code").claimed_by is None
    assert notifier.awards == []


@pytest.mark.asyncio
async def test_redeem_reports_reservation(db_session: AsyncSession, badge_factory, notifier):
    badge = await badge_factory("Someone Else's")
    service = ClaimCodesService(db_session, notifier=notifier)
    [code] = await service.generate_claim_codes(badge, 1, reserved_for=ALICE)
    await service.add_claim_codes(badge, ["plain-code"])
    await service.redeem("plain-code", ALICE)

    reserved = await service.redeem(code, BOB)
    used = await service.redeem("plain-code", BOB)

    assert reserved.redeemed is False and reserved.reserved is True
    assert used.redeemed is False and used.reserved is False
