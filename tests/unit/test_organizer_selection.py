import pytest

from organizer_pool.models.domain.pool_domain import PoolCategory
from organizer_pool.services.pool import NoOrganizerAvailable

PRAKERJA = PoolCategory.PRAKERJA


@pytest.mark.asyncio
async def test_first_declared_candidate_wins_when_pool_is_empty(pool):
    assert await pool.select_organizer(PRAKERJA) == "a@org.test"


@pytest.mark.asyncio
async def test_falls_back_to_first_available_candidate(pool):
    await pool.suspend("a@org.test")
    await pool.suspend("b@org.test")

    assert await pool.select_organizer(PRAKERJA) == "c@org.test"


@pytest.mark.asyncio
async def test_no_candidate_available_raises(pool):
    for organizer in ("a@org.test", "b@org.test", "c@org.test"):
        await pool.suspend(organizer)

    with pytest.raises(NoOrganizerAvailable) as exc_info:
        await pool.select_organizer(PRAKERJA)

    assert exc_info.value.category == PRAKERJA
    assert exc_info.value.recoverable is True


@pytest.mark.asyncio
async def test_available_preferred_organizer_is_used(pool):
    assert await pool.select_organizer(PRAKERJA, "outside@org.test") == "outside@org.test"


@pytest.mark.asyncio
async def test_suspended_preferred_organizer_is_skipped(pool):
    await pool.suspend("a@org.test")

    assert await pool.select_organizer(PRAKERJA, "a@org.test") == "b@org.test"


@pytest.mark.asyncio
async def test_current_organizer_is_kept_before_candidates(pool):
    await pool.record_assignment(PRAKERJA, "c@org.test", ["s1@x.com"])

    assert await pool.select_organizer(PRAKERJA) == "c@org.test"


@pytest.mark.asyncio
async def test_exhausted_current_organizer_is_replaced(pool):
    await pool.record_assignment(PRAKERJA, "a@org.test", ["s1@x.com", "s2@x.com", "s3@x.com"])

    assert await pool.select_organizer(PRAKERJA) == "b@org.test"
    assert await pool.get_current(PRAKERJA) is None


@pytest.mark.asyncio
async def test_available_organizers_lists_in_declared_order(pool):
    await pool.suspend("b@org.test")

    assert await pool.available_organizers(PRAKERJA) == ["a@org.test", "c@org.test"]
    assert await pool.available_organizers(PRAKERJA, ["b@org.test", "z@org.test"]) == [
        "z@org.test"
    ]
