from datetime import UTC, datetime, timedelta

import pytest

from organizer_pool.models.domain.pool_domain import PoolCategory, PoolConfig
from organizer_pool.services.pool import OrganizerPool


class FakeCacheStore:
    def __init__(self):
        self.store: dict[str, str] = {}
        self.ttls: dict[str, int] = {}
        self.deleted: list[str] = []

    async def get(self, key: str) -> str | None:
        return self.store.get(key)

    async def put(self, key: str, value: str, ttl_s: int) -> None:
        self.store[key] = value
        self.ttls[key] = ttl_s

    async def delete(self, key: str) -> None:
        self.deleted.append(key)
        self.store.pop(key, None)
        self.ttls.pop(key, None)


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now = self.now + delta


@pytest.fixture
def fake_cache():
    return FakeCacheStore()


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 3, 1, 9, 0, tzinfo=UTC))


@pytest.fixture
def pool_config():
    return PoolConfig(
        candidates={
            PoolCategory.PRAKERJA: ("a@org.test", "b@org.test", "c@org.test"),
            PoolCategory.NON_PRAKERJA: ("x@org.test", "y@org.test"),
        },
        external_attendees_limit=3,
        internal_domain="sempurna.com",
    )


@pytest.fixture
def pool(pool_config, fake_cache, clock):
    return OrganizerPool(pool_config, fake_cache, clock=clock)
