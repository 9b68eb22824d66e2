# organizer_pool/models/api/calendar_request.py
"""
Calendar API request models.
Used by routes for input validation.
"""

from datetime import datetime

from pydantic import BaseModel, Field, model_validator

from organizer_pool.models.domain.calendar_domain import Attendee, InviteSubject
from organizer_pool.models.domain.pool_domain import PoolCategory


class CreateInviteRequest(BaseModel):
    """Request for creating a calendar invite."""

    summary: str = Field(..., min_length=1, max_length=200, description="Event title")
    start_time: datetime = Field(..., description="Event start time")
    end_time: datetime = Field(..., description="Event end time")
    attendees: list[Attendee] = Field(..., min_length=1, description="Invite recipients")
    subject: InviteSubject = Field(..., description="Training or program the invite is for")
    description: str = Field(default="", description="Event description, sent as-is")
    location: str = Field(default="", max_length=500, description="Event location")
    guests_can_see_other_guests: bool = Field(default=False)
    organizer: str | None = Field(default=None, description="Preferred organizer")

    @model_validator(mode="after")
    def _check_times(self):
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self

    @property
    def category(self) -> PoolCategory:
        return self.subject.pool_category


class AddAttendeesRequest(BaseModel):
    """Request for adding attendees to an existing invite."""

    organizer: str = Field(..., description="Organizer that owns the event")
    attendees: list[Attendee] = Field(..., min_length=1)
    subject: InviteSubject = Field(..., description="Training or program the invite is for")


class SuspendOrganizerRequest(BaseModel):
    """Request for suspending an organizer."""

    organizer: str = Field(..., min_length=3, description="Organizer email")


class UpdateInviteRequest(BaseModel):
    """Partial update of an invite. Only the fields that are set are changed."""

    organizer: str = Field(..., min_length=3, description="Organizer that owns the event")
    summary: str | None = Field(default=None, min_length=1, max_length=200)
    start_time: datetime | None = None
    end_time: datetime | None = None
    location: str | None = Field(default=None, max_length=500)

    @model_validator(mode="after")
    def _check_times(self):
        if self.start_time and self.end_time and self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self
