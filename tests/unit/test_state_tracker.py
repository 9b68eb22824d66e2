import json

import pytest

from organizer_pool.models.domain.pool_domain import PoolCategory
from organizer_pool.services.pool.state_tracker import pool_state_key

PRAKERJA = PoolCategory.PRAKERJA


def _stored(fake_cache, category=PRAKERJA) -> dict:
    return json.loads(fake_cache.store[pool_state_key(category)])


@pytest.mark.asyncio
async def test_get_current_unset_returns_none(pool):
    assert await pool.get_current(PRAKERJA) is None


@pytest.mark.asyncio
async def test_get_current_malformed_entry_returns_none(pool, fake_cache):
    fake_cache.store[pool_state_key(PRAKERJA)] = "{broken"

    assert await pool.get_current(PRAKERJA) is None


@pytest.mark.asyncio
async def test_record_assignment_accumulates_distinct_attendees(pool, fake_cache):
    await pool.record_assignment(PRAKERJA, "a@org.test", ["s1@gmail.com"])
    await pool.record_assignment(PRAKERJA, "a@org.test", ["s2@gmail.com", "s1@gmail.com"])

    state = await pool.get_current(PRAKERJA)

    assert state.organizer == "a@org.test"
    assert sorted(state.unique_attendees) == ["s1@gmail.com", "s2@gmail.com"]
    assert fake_cache.ttls[pool_state_key(PRAKERJA)] == 30 * 24 * 60 * 60


@pytest.mark.asyncio
async def test_record_assignment_replaces_once_limit_reached(pool):
    # limit is 3 in the test config
    await pool.record_assignment(PRAKERJA, "a@org.test", ["s1@x.com", "s2@x.com"])
    await pool.record_assignment(PRAKERJA, "a@org.test", ["s3@x.com"])
    assert (await pool.get_current(PRAKERJA)).attendee_count == 3

    await pool.record_assignment(PRAKERJA, "a@org.test", ["s4@x.com"])

    state = await pool.get_current(PRAKERJA)
    assert state.unique_attendees == ["s4@x.com"]


@pytest.mark.asyncio
async def test_organizer_switch_discards_previous_attendees(pool, fake_cache):
    await pool.record_assignment(PRAKERJA, "a@org.test", ["s1@x.com", "s2@x.com"])

    stored = await pool.record_assignment(PRAKERJA, "b@org.test", ["s3@x.com"])

    assert stored == "b@org.test"
    assert _stored(fake_cache) == {"organizer": "b@org.test", "uniqueAttendees": ["s3@x.com"]}


@pytest.mark.asyncio
async def test_internal_attendees_are_never_counted(pool):
    await pool.record_assignment(
        PRAKERJA, "a@org.test", ["trainer@sempurna.com", "student@gmail.com"]
    )
    await pool.record_assignment(PRAKERJA, "a@org.test", ["admin@sempurna.com"])

    state = await pool.get_current(PRAKERJA)
    assert state.unique_attendees == ["student@gmail.com"]


@pytest.mark.asyncio
async def test_record_assignment_without_organizer_uses_stored_one(pool):
    await pool.record_assignment(PRAKERJA, "a@org.test", ["s1@x.com"])

    stored = await pool.record_assignment(PRAKERJA, None, ["s2@x.com"])

    assert stored == "a@org.test"
    assert (await pool.get_current(PRAKERJA)).attendee_count == 2


@pytest.mark.asyncio
async def test_record_assignment_without_any_organizer_writes_nothing(pool, fake_cache):
    stored = await pool.record_assignment(PRAKERJA, None, ["s1@x.com"])

    assert stored is None
    assert fake_cache.store == {}


@pytest.mark.asyncio
async def test_categories_are_independent(pool):
    await pool.record_assignment(PRAKERJA, "a@org.test", ["s1@x.com"])
    await pool.record_assignment(PoolCategory.NON_PRAKERJA, "x@org.test", ["s2@x.com"])

    assert (await pool.get_current(PRAKERJA)).organizer == "a@org.test"
    assert (await pool.get_current(PoolCategory.NON_PRAKERJA)).organizer == "x@org.test"
