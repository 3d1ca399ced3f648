import hashlib
import json

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from badger.core.badges.awards import AwardsService
from badger.core.badges.exceptions import InvalidArgument
from badger.core.instances.models import BadgeInstance, user_badge_key
from badger.core.instances.service import InstancesService

USER = "owner@example.com"


@pytest.mark.asyncio
async def test_assertion_and_hash(db_session: AsyncSession, badge_factory, notifier):
    badge = await badge_factory("Asserted")
    instance, _ = await AwardsService(db_session, notifier=notifier).award(badge, USER)

    payload = json.loads(instance.assertion)
    assert payload["recipient"] == USER
    assert payload["badge"] == "http://badges.test/badge/meta/asserted"
    assert payload["issuedOn"] == instance.issued_on_unix() > 0
    assert instance.hash == hashlib.sha256(instance.assertion.encode("utf-8")).hexdigest()
    assert instance.user_badge_key == user_badge_key(USER, badge.id) == f"{USER}.{badge.id}"
    assert instance.relative_url("assertion") == f"/badge/assertion/{instance.hash}"
    assert instance.absolute_url("assertion").startswith("http://badges.test/badge/assertion/")

    service = InstancesService(db_session)
    assert await service.get_by_hash(instance.hash) is instance
    assert await service.get_by_key(USER, badge.id) is instance
    assert await service.get_by_key("other@example.com", badge.id) is None


def test_user_must_be_an_email():
    with pytest.raises(InvalidArgument):
        BadgeInstance(user="nobody")
    assert BadgeInstance(user=" someone@example.org ").user == "someone@example.org"


@pytest.mark.asyncio
async def test_seen_and_delete(db_session: AsyncSession, badge_factory, notifier):
    awards = AwardsService(db_session, notifier=notifier)
    first = await badge_factory("First")
    second = await badge_factory("Second")
    await awards.award(first, USER)
    await awards.award(second, USER)
    await awards.award(first, "bystander@example.com")
    service = InstancesService(db_session)

    listed = await service.list_for_user(USER)
    assert [i.badge_id for i in listed] == [first.id, second.id]
    assert all(not i.seen for i in listed)

    assert await service.mark_all_as_seen(USER) == 2
    assert await service.mark_all_as_seen(USER) == 0
    assert all(i.seen for i in await service.list_for_user(USER))

    deleted = await service.delete_all_by_user(USER)
    assert len(deleted) == 2
    assert await service.list_for_user(USER) == []
    assert await service.user_has_badge("bystander@example.com", first.id)


@pytest.mark.asyncio
async def test_find_by_category(db_session: AsyncSession, badge_factory, notifier):
    awards = AwardsService(db_session, notifier=notifier)
    art = await badge_factory("Art", categories=["art"])
    music = await badge_factory("Music", categories=["music"])
    await awards.award(art, USER)
    await awards.award(music, USER)

    found = await InstancesService(db_session).find_by_category(USER, "art")

    assert [i.badge_id for i in found] == [art.id]
