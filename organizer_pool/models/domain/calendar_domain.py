# organizer_pool/models/domain/calendar_domain.py
"""
Calendar Domain Models
Domain models for calendar invites sent on behalf of pool organizers.
"""

from datetime import UTC, datetime
from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field

from organizer_pool.models.domain.pool_domain import PoolCategory


class AttendeeType(str, Enum):
    STUDENT = "STUDENT"
    TRAINER = "TRAINER"
    ADMIN = "ADMIN"


class ProductType(str, Enum):
    PRAKERJA = "PRAKERJA"
    NON_PRAKERJA = "NON_PRAKERJA"


class ProgramType(str, Enum):
    STRUCTURED = "STRUCTURED"
    UNSTRUCTURED = "UNSTRUCTURED"
    ENTREPRENEURSHIP = "ENTREPRENEURSHIP"
    SELFLEARNING = "SELFLEARNING"


class ProgramFormat(str, Enum):
    PROGRAM = "PROGRAM"
    TOOLS = "TOOLS"


class Attendee(BaseModel):
    """Invite recipient."""

    email: str
    type: AttendeeType | None = None

    def to_google(self) -> dict[str, Any]:
        return {"email": self.email}


class TrainingSubject(BaseModel):
    """A training the invite is for."""

    kind: Literal["training"] = "training"
    title: str
    product_type: ProductType
    delivery_type: str

    @property
    def pool_category(self) -> PoolCategory:
        return _category_for(self.product_type)


class ProgramSubject(BaseModel):
    """A program the invite is for. Its delivery type follows from type and format."""

    kind: Literal["program"] = "program"
    name: str
    product_type: ProductType
    program_type: ProgramType
    format: ProgramFormat | None = None

    @property
    def title(self) -> str:
        return self.name

    @property
    def delivery_type(self) -> str | None:
        if self.program_type == ProgramType.STRUCTURED:
            return "Bimbingan"
        if self.program_type == ProgramType.UNSTRUCTURED:
            return "Konsultasi"
        if self.program_type == ProgramType.ENTREPRENEURSHIP:
            return "Pendampingan" if self.format == ProgramFormat.PROGRAM else "Alat Usaha"
        if self.program_type == ProgramType.SELFLEARNING:
            return "Mandiri"
        return None

    @property
    def pool_category(self) -> PoolCategory:
        return _category_for(self.product_type)


InviteSubject = Annotated[TrainingSubject | ProgramSubject, Field(discriminator="kind")]


def _category_for(product_type: ProductType) -> PoolCategory:
    if product_type == ProductType.PRAKERJA:
        return PoolCategory.PRAKERJA
    return PoolCategory.NON_PRAKERJA


class CalendarEvent:
    """Domain model for calendar events."""

    def __init__(self, data: dict):
        self.id = data.get("id")
        self.summary = data.get("summary", "")
        self.description = data.get("description", "")
        self.start_time = self._parse_datetime(data.get("start", {}))
        self.end_time = self._parse_datetime(data.get("end", {}))
        self.timezone = data.get("start", {}).get("timeZone", "UTC")
        self.status = data.get("status", "confirmed")
        self.attendees = data.get("attendees", [])
        self.location = data.get("location", "")
        self.html_link = data.get("htmlLink")
        self.raw_data = data

    def _parse_datetime(self, dt_data: dict) -> datetime | None:
        """Parse datetime from Google Calendar format."""
        if not dt_data:
            return None

        # Handle all-day events (date only)
        if "date" in dt_data:
            return datetime.strptime(dt_data["date"], "%Y-%m-%d").replace(tzinfo=UTC)

        if "dateTime" in dt_data:
            try:
                return datetime.fromisoformat(dt_data["dateTime"].replace("Z", "+00:00"))
            except ValueError:
                return None

        return None

    def attendee_emails(self) -> list[str]:
        return [a["email"] for a in self.attendees if a.get("email")]

    def has_attendee(self, email: str) -> bool:
        email = email.strip().lower()
        return any(existing.lower() == email for existing in self.attendee_emails())

    def with_additional_attendees(self, attendees: list[Attendee]) -> dict[str, Any]:
        """Raw event body with the given attendees appended."""
        body = dict(self.raw_data)
        body["attendees"] = [*self.attendees, *(a.to_google() for a in attendees)]
        return body

    def with_changes(
        self,
        time_zone: str,
        summary: str | None = None,
        start_time: datetime | None = None,
        end_time: datetime | None = None,
        location: str | None = None,
    ) -> dict[str, Any]:
        """Raw event body with the given fields replaced. Unset fields are kept."""
        body = dict(self.raw_data)
        if summary:
            body["summary"] = summary
        if start_time:
            body["start"] = {"dateTime": start_time.isoformat(), "timeZone": time_zone}
        if end_time:
            body["end"] = {"dateTime": end_time.isoformat(), "timeZone": time_zone}
        if location:
            body["location"] = location
        return body


class InviteResult:
    """Outcome of creating an invite: the event and the organizer that sent it."""

    def __init__(self, event: CalendarEvent, organizer: str):
        self.event = event
        self.organizer = organizer


class InviteUpdateResult:
    """Outcome of changing an existing invite. Failures carry an error instead of raising."""

    def __init__(self, success: bool, error: str | None = None, added: list[str] | None = None):
        self.success = success
        self.error = error
        self.added = added or []
