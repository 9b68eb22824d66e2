# organizer_pool/services/pool/availability.py
"""
Availability Evaluator
Decides whether an organizer may take new invites, suspends organizers that
hit their external attendee quota, and picks an organizer for a category.
"""

from collections.abc import Callable, Sequence
from datetime import UTC, datetime

from organizer_pool.infrastructure.observability.logging import get_logger
from organizer_pool.models.domain.pool_domain import (
    SUSPENSION_WINDOW,
    PoolCategory,
    PoolConfig,
    SuspensionRecord,
)
from organizer_pool.services.cache_store import CacheStore
from organizer_pool.services.pool.state_tracker import PoolStateTracker

logger = get_logger(__name__)

SUSPENSION_KEY_PREFIX = "google-calendar-blocked-organizer"


def suspension_key(organizer: str) -> str:
    return f"{SUSPENSION_KEY_PREFIX}:{organizer}"


def utc_now() -> datetime:
    return datetime.now(UTC)


class NoOrganizerAvailable(Exception):
    """Raised when every candidate organizer of a category is exhausted or suspended."""

    def __init__(self, category: PoolCategory, message: str | None = None):
        super().__init__(message or f"No calendar organizer available for {category.value}")
        self.category = category
        self.recoverable = True


class AvailabilityEvaluator:
    """
    Applies the quota and suspension rules to organizers.

    The suspension window is always computed from the stored timestamp: the
    store's TTL is only a cleanup hint, since eviction timers may pause while
    the store's host is down.
    """

    def __init__(
        self,
        config: PoolConfig,
        store: CacheStore,
        tracker: PoolStateTracker,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.config = config
        self.store = store
        self.tracker = tracker
        self.clock = clock

    async def _exhausted_categories(self, organizer: str) -> list[PoolCategory]:
        limit = self.config.external_attendees_limit
        exhausted = []
        for category in PoolCategory:
            state = await self.tracker.get_current(category)
            if state and state.organizer == organizer and state.is_exhausted(limit):
                exhausted.append(category)
        return exhausted

    async def is_available(self, organizer: str | None) -> bool:
        """
        Check whether the organizer may accept new assignments.

        Args:
            organizer: Organizer email

        Returns:
            bool: False when quota-exhausted in any category or still suspended
        """
        if not organizer:
            return False

        exhausted = await self._exhausted_categories(organizer)
        if exhausted:
            logger.info(
                "Organizer reached external attendee limit",
                organizer=organizer,
                categories=[category.value for category in exhausted],
                limit=self.config.external_attendees_limit,
            )
            await self.suspend(organizer)
            return False

        key = suspension_key(organizer)
        raw = await self.store.get(key)
        if raw is None:
            return True

        record = SuspensionRecord.from_cache(raw)
        if record is None:
            logger.warning("Ignoring malformed suspension record", organizer=organizer)
            return True

        if record.is_expired(self.clock()):
            logger.info(
                "Limitation is lifted for calendar organizer",
                organizer=organizer,
                suspended_at=record.suspended_at.isoformat(),
            )
            await self.store.delete(key)
            return True

        return False

    async def suspend(self, organizer: str) -> None:
        """
        Put the organizer into cooldown and release it from any pool it currently serves.
        Repeated calls only refresh the suspension timestamp.
        """
        record = SuspensionRecord(suspended_at=self.clock())
        await self.store.put(
            suspension_key(organizer),
            record.to_cache(),
            int(SUSPENSION_WINDOW.total_seconds()),
        )
        logger.warning("Calendar organizer suspended", organizer=organizer)

        for category in PoolCategory:
            state = await self.tracker.get_current(category)
            if state and state.organizer == organizer:
                await self.tracker.clear(category)
                logger.info(
                    "Released suspended organizer from pool",
                    organizer=organizer,
                    category=category.value,
                )

    async def available_organizers(
        self,
        category: PoolCategory,
        organizers: Sequence[str] | None = None,
    ) -> list[str]:
        """Every available candidate of the category (or of ``organizers``), in declared order."""
        if organizers is None:
            organizers = self.config.candidates_for(category)

        available = []
        for organizer in organizers:
            if await self.is_available(organizer):
                available.append(organizer)
        return available

    async def select_organizer(
        self,
        category: PoolCategory,
        preferred_organizer: str | None = None,
    ) -> str:
        """
        Pick the organizer for a new assignment.

        Order: the preferred organizer, then the category's current organizer,
        then the first available candidate in declared order.

        Raises:
            NoOrganizerAvailable: If no candidate is available
        """
        if preferred_organizer and await self.is_available(preferred_organizer):
            return preferred_organizer

        current = await self.tracker.get_current(category)
        if current and current.organizer and await self.is_available(current.organizer):
            return current.organizer

        for organizer in self.config.candidates_for(category):
            if await self.is_available(organizer):
                logger.info(
                    "Selected calendar organizer from candidates",
                    category=category.value,
                    organizer=organizer,
                )
                return organizer

        logger.warning("No calendar organizer available", category=category.value)
        raise NoOrganizerAvailable(category)
