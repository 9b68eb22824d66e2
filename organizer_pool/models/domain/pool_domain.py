# organizer_pool/models/domain/pool_domain.py
"""
Organizer Pool Domain Models
Typed records persisted in the cache store for organizer quota accounting,
plus the immutable pool configuration.
"""

import json
from collections.abc import Iterable
from datetime import UTC, datetime, timedelta
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

# Fixed pool timings
SUSPENSION_WINDOW = timedelta(hours=24)
POOL_STATE_TTL = timedelta(days=30)


class PoolCategory(str, Enum):
    """Partition of organizers into independent quota pools."""

    PRAKERJA = "prakerja"
    NON_PRAKERJA = "non-prakerja"


class PoolConfig(BaseModel):
    """Organizer pool configuration passed to the pool at construction."""

    model_config = ConfigDict(frozen=True)

    candidates: dict[PoolCategory, tuple[str, ...]] = Field(default_factory=dict)
    external_attendees_limit: int = Field(default=2000, ge=1)
    internal_domain: str = "sempurna.com"

    def candidates_for(self, category: PoolCategory) -> tuple[str, ...]:
        return self.candidates.get(category, ())

    def is_external(self, email: str) -> bool:
        """True when the address is outside the organization's own domain (or its subdomains)."""
        domain = email.strip().lower().rpartition("@")[2]
        internal = self.internal_domain.strip().lower()
        return not (domain == internal or domain.endswith("." + internal))

    def external_only(self, emails: Iterable[str]) -> list[str]:
        """Normalised, deduplicated external addresses in first-seen order."""
        result: list[str] = []
        for email in emails:
            if not email or not email.strip():
                continue
            normalised = email.strip().lower()
            if self.is_external(normalised) and normalised not in result:
                result.append(normalised)
        return result


class PoolState(BaseModel):
    """Current organizer of a category and the external attendees it has accumulated."""

    model_config = ConfigDict(populate_by_name=True)

    organizer: str | None = None
    unique_attendees: list[str] = Field(default_factory=list, alias="uniqueAttendees")

    @field_validator("unique_attendees")
    @classmethod
    def _dedupe(cls, value: list[str]) -> list[str]:
        return list(dict.fromkeys(value))

    @property
    def attendee_count(self) -> int:
        return len(self.unique_attendees)

    def is_exhausted(self, limit: int) -> bool:
        return self.attendee_count >= limit

    def merged_with(self, emails: Iterable[str]) -> "PoolState":
        return PoolState(
            organizer=self.organizer,
            unique_attendees=[*self.unique_attendees, *emails],
        )

    def to_cache(self) -> str:
        return self.model_dump_json(by_alias=True)

    @classmethod
    def from_cache(cls, raw: str | bytes | None) -> "PoolState | None":
        """Parse a cached value; unreadable payloads yield None."""
        if raw is None:
            return None
        try:
            return cls.model_validate_json(raw)
        except ValidationError:
            return None


class SuspensionRecord(BaseModel):
    """Marks an organizer as cooling down since ``suspended_at``."""

    model_config = ConfigDict(populate_by_name=True)

    suspended_at: datetime = Field(alias="suspendedAt")

    @field_validator("suspended_at")
    @classmethod
    def _ensure_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def is_expired(self, now: datetime) -> bool:
        return now - self.suspended_at > SUSPENSION_WINDOW

    def to_cache(self) -> str:
        return self.model_dump_json(by_alias=True)

    @classmethod
    def from_cache(cls, raw: str | bytes | None) -> "SuspensionRecord | None":
        """
        Parse a cached value; unreadable payloads yield None.
        Older entries hold a bare JSON timestamp string instead of an object.
        """
        if raw is None:
            return None
        try:
            payload = json.loads(raw)
            if isinstance(payload, str):
                payload = {"suspendedAt": payload}
            return cls.model_validate(payload)
        except (ValueError, ValidationError):
            return None
