import base64

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from badger.core.badges.claims import ClaimCodesService
from badger.core.badges.exceptions import InvalidArgument
from badger.core.badges.models import MAX_IMAGE_BYTES, ClaimCode, parse_rubric_items, slugify
from badger.core.badges.roles import Capstone, Contributor, Plain
from badger.core.badges.service import BadgesService


def test_slugify():
    assert slugify("Super Cool Badge!") == "super-cool-badge"
    assert slugify("  Déjà  vu ") == "d-j-vu"


def test_parse_rubric_items():
    content = "Intro line\n* Write a poem\n*   Read it aloud (optional)\n  * Share it ( optional )"
    assert parse_rubric_items(content) == [
        {"text": "Write a poem", "required": True},
        {"text": "Read it aloud (optional)", "required": False},
        {"text": "Share it ( optional )", "required": False},
    ]


def test_parse_rubric_without_bullets():
    assert parse_rubric_items("Do the thing") == [
        {"text": "Satisfies the following criteria:\nDo the thing", "required": True},
    ]


@pytest.mark.asyncio
async def test_create_badge_defaults(db_session: AsyncSession, badge_factory):
    badge = await badge_factory("Night Owl", tags=["late"])

    assert badge.id
    assert badge.shortname == "night-owl"
    assert badge.role == Plain()
    assert badge.categories == [] and badge.prerequisites == []

    fetched = await BadgesService(db_session).get_by_shortname("night-owl")
    assert fetched is badge
    assert await BadgesService(db_session).get_badge(badge.id) is badge


@pytest.mark.asyncio
async def test_capstone_drops_categories_and_weight(badge_factory):
    badge = await badge_factory(
        "Capper",
        categories=["science"],
        category_weight=4,
        role=Capstone(category="science", requirement=10),
    )

    assert badge.role == Capstone(category="science", requirement=10)
    assert badge.categories == []
    assert badge.category_weight == 0


@pytest.mark.asyncio
async def test_raw_category_columns_are_normalized(badge_factory):
    capstone = await badge_factory("Raw Cap", category_award="x", category_weight=4, categories=["y"])
    contributor = await badge_factory("Raw Contributor", category_weight=3, category_requirement=7, categories=["x"])

    assert capstone.role == Capstone(category="x", requirement=0)
    assert capstone.categories == [] and capstone.category_weight == 0
    assert contributor.role == Contributor(weight=3)
    assert contributor.category_requirement == 0
    assert contributor.categories == ["x"]


@pytest.mark.asyncio
async def test_validation_errors(badge_factory):
    with pytest.raises(InvalidArgument):
        await badge_factory("x" * 200)
    with pytest.raises(InvalidArgument):
        await badge_factory("Huge", image=b"\x00" * (MAX_IMAGE_BYTES + 1))
    with pytest.raises(InvalidArgument):
        await badge_factory("Slow", time_to_earn="decades")
    with pytest.raises(InvalidArgument):
        await badge_factory("Old", age_ranges=["65+"])
    with pytest.raises(InvalidArgument):
        await badge_factory("Negative", behaviors={"posts": -1})


@pytest.mark.asyncio
async def test_update_and_behaviors(db_session: AsyncSession, badge_factory):
    service = BadgesService(db_session)
    badge = await badge_factory("Chatty", behaviors={"posts": 1, "comments": 2})

    await service.update_badge(badge, description="Talks a lot", behaviors={"posts": 5, "likes": 1})

    assert badge.description == "Talks a lot"
    assert service.behavior_map(badge) == {"posts": 5, "likes": 1}

    service.remove_behavior(badge, "posts")
    await db_session.flush()
    assert service.behavior_map(badge) == {"likes": 1}

    await service.update_badge(badge, role=Contributor(weight=2), categories=["social"])
    assert badge.role == Contributor(weight=2)


@pytest.mark.asyncio
async def test_find_by_behavior_and_claim_code(db_session: AsyncSession, badge_factory):
    service = BadgesService(db_session)
    poster = await badge_factory("Poster", behaviors={"posts": 1})
    both = await badge_factory("Both", behaviors={"posts": 3, "likes": 1})
    await badge_factory("Liker", behaviors={"likes": 1})
    await ClaimCodesService(db_session).add_claim_codes(poster, ["secret-word"])

    found = await service.find_by_behavior("posts")
    assert {b.id for b in found} == {poster.id, both.id}
    assert len(await service.find_by_behavior(["posts", "likes"])) == 3

    assert await service.find_by_claim_code(" Secret Word") is poster
    assert await service.find_by_claim_code("nothing") is None


@pytest.mark.asyncio
async def test_listing_and_delete(db_session: AsyncSession, badge_factory):
    service = BadgesService(db_session)
    listed = await badge_factory("Listed")
    hidden = await badge_factory("Hidden", do_not_list=True)
    await ClaimCodesService(db_session).add_claim_codes(hidden, ["hide-me"])

    assert {b.id for b in await service.list_badges(include_unlisted=False)} == {listed.id}
    assert set(await service.get_all()) == {"listed", "hidden"}

    await service.delete_badge(hidden)
    assert await service.get_by_shortname("hidden") is None
    assert await db_session.scalar(select(func.count()).select_from(ClaimCode)) == 0


@pytest.mark.asyncio
async def test_open_badges_json(badge_factory):
    badge = await badge_factory(
        "Mapper",
        program="mozfest",
        tags=["maps"],
        criteria_content="* Draw a map",
    )

    data = badge.make_json()

    assert data["name"] == "Mapper"
    assert data["criteria"] == "http://badges.test/badge/criteria/mapper"
    assert data["issuer"] == "http://badges.test/program/meta/mozfest"
    assert data["tags"] == ["maps"]
    assert data["image"] == "data:image/png;base64," + base64.b64encode(badge.image).decode()
    assert badge.absolute_url("image") == "http://badges.test/badge/image/mapper.png"
    assert badge.relative_url("json") == "/badge/meta/mapper"
    assert badge.rubric_items() == [{"text": "Draw a map", "required": True}]

    plain = await badge_factory("No Program")
    assert plain.make_json()["issuer"] == "http://badges.test/issuer"
    assert plain.rubric_items() == []
