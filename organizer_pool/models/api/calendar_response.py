# organizer_pool/models/api/calendar_response.py
"""
Calendar API response models.
Used by routes for output formatting.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from organizer_pool.models.domain.calendar_domain import CalendarEvent
from organizer_pool.models.domain.pool_domain import PoolCategory


class PoolStatusResponse(BaseModel):
    """Current pool state of a category."""

    category: PoolCategory
    organizer: str | None = Field(None, description="Current organizer of the pool")
    unique_external_attendees: int = Field(0, description="External attendees accounted so far")
    external_attendees_limit: int
    candidates: list[str] = Field(default_factory=list, description="Configured organizers")
    available_organizers: list[str] = Field(default_factory=list)


class OrganizerSelectionResponse(BaseModel):
    category: PoolCategory
    organizer: str


class OrganizerAvailabilityResponse(BaseModel):
    organizer: str
    available: bool


class CreateInviteResponse(BaseModel):
    """Response for a created invite."""

    event_id: str | None = Field(None, description="Google Calendar event ID")
    organizer: str = Field(..., description="Organizer the invite was sent from")
    category: PoolCategory
    summary: str = ""
    start_time: datetime | None = None
    end_time: datetime | None = None
    html_link: str | None = None
    attendees_count: int = 0


class AddAttendeesResponse(BaseModel):
    success: bool
    error: str | None = None
    added: list[str] = Field(default_factory=list)


class UpdateInviteResponse(BaseModel):
    success: bool
    error: str | None = None


class CalendarEventResponse(BaseModel):
    """Response model for a calendar event."""

    id: str | None = Field(None, description="Google Calendar event ID")
    summary: str = ""
    start_time: datetime | None = None
    end_time: datetime | None = None
    timezone: str = "UTC"
    status: str = "confirmed"
    location: str = ""
    html_link: str | None = None
    attendees: list[str] = Field(default_factory=list, description="Attendee emails")

    @classmethod
    def from_event(cls, event: CalendarEvent) -> "CalendarEventResponse":
        return cls(
            id=event.id,
            summary=event.summary,
            start_time=event.start_time,
            end_time=event.end_time,
            timezone=event.timezone,
            status=event.status,
            location=event.location,
            html_link=event.html_link,
            attendees=event.attendee_emails(),
        )


class EventsListResponse(BaseModel):
    """Events on an organizer's calendar."""

    organizer: str
    events: list[CalendarEventResponse] = Field(default_factory=list)
    total_count: int = 0
