# organizer_pool/services/pool/state_tracker.py
"""
Pool State Tracker
Persists, per pool category, the current organizer and the unique external
attendees accumulated under it.
"""

from collections.abc import Iterable

from organizer_pool.infrastructure.observability.logging import get_logger
from organizer_pool.models.domain.pool_domain import (
    POOL_STATE_TTL,
    PoolCategory,
    PoolConfig,
    PoolState,
)
from organizer_pool.services.cache_store import CacheStore

logger = get_logger(__name__)

POOL_STATE_KEY_PREFIX = "google-calendar"


def pool_state_key(category: PoolCategory) -> str:
    return f"{POOL_STATE_KEY_PREFIX}-{category.value}"


class PoolStateTracker:
    """Reads and updates the per-category PoolState entries."""

    def __init__(self, config: PoolConfig, store: CacheStore):
        self.config = config
        self.store = store

    async def get_current(self, category: PoolCategory) -> PoolState | None:
        """Current pool state of a category, or None when unset or unreadable."""
        key = pool_state_key(category)
        raw = await self.store.get(key)
        if raw is None:
            return None

        state = PoolState.from_cache(raw)
        if state is None:
            logger.warning("Ignoring malformed pool state", category=category.value, key=key)
        return state

    async def record_assignment(
        self,
        category: PoolCategory,
        organizer: str | None,
        attendee_emails: Iterable[str],
    ) -> str | None:
        """
        Account the attendees of a successful calendar operation to the organizer.

        The stored attendee set is replaced when the category has no state yet,
        when it belongs to another organizer, or when it already reached the
        limit. Otherwise the new external attendees are merged in.

        Args:
            category: Pool the organizer was drawn from
            organizer: Organizer that sent the invite (None means the stored one)
            attendee_emails: Attendee addresses of the operation

        Returns:
            The organizer stored for the category, or None if nothing was stored
        """
        current = await self.get_current(category)
        if organizer is None and current is not None:
            organizer = current.organizer

        if organizer is None:
            logger.warning("No organizer to record assignment for", category=category.value)
            return None

        external = self.config.external_only(attendee_emails)
        limit = self.config.external_attendees_limit

        if current is None or current.organizer != organizer or current.is_exhausted(limit):
            if current is not None and current.organizer != organizer:
                logger.info(
                    "Pool organizer changed, resetting attendee count",
                    category=category.value,
                    previous_organizer=current.organizer,
                    organizer=organizer,
                )
            state = PoolState(organizer=organizer, unique_attendees=external)
        else:
            state = current.merged_with(external)

        await self.store.put(
            pool_state_key(category),
            state.to_cache(),
            int(POOL_STATE_TTL.total_seconds()),
        )
        logger.debug(
            "Recorded organizer assignment",
            category=category.value,
            organizer=organizer,
            unique_attendees=state.attendee_count,
            limit=limit,
        )
        return state.organizer

    async def clear(self, category: PoolCategory) -> None:
        """Drop the category's state so the next assignment starts from zero."""
        await self.store.delete(pool_state_key(category))
