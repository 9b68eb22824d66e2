# organizer_pool/services/pool/allocator.py
"""
Organizer pool facade.
Wires the state tracker and availability evaluator over one cache store and
exposes the operations callers use.
"""

from collections.abc import Callable, Iterable, Sequence
from datetime import datetime

from organizer_pool.config import settings
from organizer_pool.models.domain.pool_domain import PoolCategory, PoolConfig, PoolState
from organizer_pool.services.cache_store import CacheStore, cache_store
from organizer_pool.services.pool.availability import AvailabilityEvaluator, utc_now
from organizer_pool.services.pool.state_tracker import PoolStateTracker


class OrganizerPool:
    """Organizer allocation over a shared cache store. Holds no state between calls."""

    def __init__(
        self,
        config: PoolConfig,
        store: CacheStore,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.config = config
        self.tracker = PoolStateTracker(config, store)
        self.evaluator = AvailabilityEvaluator(config, store, self.tracker, clock=clock)

    async def get_current(self, category: PoolCategory) -> PoolState | None:
        return await self.tracker.get_current(category)

    async def record_assignment(
        self,
        category: PoolCategory,
        organizer: str | None,
        attendee_emails: Iterable[str],
    ) -> str | None:
        return await self.tracker.record_assignment(category, organizer, attendee_emails)

    async def is_available(self, organizer: str | None) -> bool:
        return await self.evaluator.is_available(organizer)

    async def suspend(self, organizer: str) -> None:
        await self.evaluator.suspend(organizer)

    async def select_organizer(
        self,
        category: PoolCategory,
        preferred_organizer: str | None = None,
    ) -> str:
        return await self.evaluator.select_organizer(category, preferred_organizer)

    async def available_organizers(
        self,
        category: PoolCategory,
        organizers: Sequence[str] | None = None,
    ) -> list[str]:
        return await self.evaluator.available_organizers(category, organizers)


# Singleton instance for application use
organizer_pool = OrganizerPool(settings.pool_config(), cache_store)
