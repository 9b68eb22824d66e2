"""
Calendar Invite Service for sending invites through the organizer pool.
Selects an organizer, calls Google Calendar on its behalf, suspends it when
Google reports the usage limit, and feeds attendees back into quota accounting.
"""

from collections.abc import Awaitable, Callable
from datetime import datetime

from organizer_pool.config import settings
from organizer_pool.infrastructure.observability.logging import get_logger
from organizer_pool.models.domain.calendar_domain import (
    Attendee,
    CalendarEvent,
    InviteResult,
    InviteUpdateResult,
)
from organizer_pool.models.domain.pool_domain import PoolCategory
from organizer_pool.services.calendar.google_client import (
    GoogleCalendarError,
    GoogleCalendarService,
    google_calendar_service,
)
from organizer_pool.services.pool import OrganizerPool, organizer_pool

logger = get_logger(__name__)

USAGE_LIMIT_ERROR = "Calendar usage limit"
NOT_FOUND_ERROR = "Not Found"

TokenProvider = Callable[[str], Awaitable[str]]


class CalendarInviteError(Exception):
    """Custom exception for invite operations."""

    def __init__(
        self,
        message: str,
        organizer: str | None = None,
        error_code: str | None = None,
        recoverable: bool = True,
    ):
        super().__init__(message)
        self.organizer = organizer
        self.error_code = error_code
        self.recoverable = recoverable


class CalendarUsageLimitError(CalendarInviteError):
    """Google rejected the operation because the organizer hit its usage limit."""

    def __init__(self, organizer: str):
        super().__init__(USAGE_LIMIT_ERROR, organizer=organizer, error_code="usage_limit")


async def settings_token_provider(organizer: str) -> str:
    """Look up the pre-issued access token of an organizer."""
    token = settings.GCAL_ORGANIZER_TOKENS.get(organizer)
    if not token:
        raise CalendarInviteError(
            "No access token configured for organizer",
            organizer=organizer,
            error_code="missing_token",
            recoverable=False,
        )
    return token


class CalendarInviteService:
    """High-level invite operations on top of the organizer pool."""

    def __init__(
        self,
        pool: OrganizerPool,
        calendar: GoogleCalendarService,
        token_provider: TokenProvider = settings_token_provider,
    ):
        self.pool = pool
        self.calendar = calendar
        self.token_provider = token_provider

    async def create_invite(
        self,
        category: PoolCategory,
        summary: str,
        start_time: datetime,
        end_time: datetime,
        attendees: list[Attendee],
        description: str = "",
        location: str = "",
        guests_can_see_other_guests: bool = False,
        organizer: str | None = None,
    ) -> InviteResult:
        """
        Create a calendar invite from an available organizer of the category.

        Args:
            category: Pool to draw the organizer from
            summary: Event title
            start_time: Event start time
            end_time: Event end time
            attendees: Invite recipients
            description: Event description, sent as-is
            location: Event location
            guests_can_see_other_guests: Whether attendees see each other
            organizer: Preferred organizer (used only if available)

        Returns:
            InviteResult: Created event and the organizer that sent it

        Raises:
            NoOrganizerAvailable: If the pool has no usable organizer
            CalendarUsageLimitError: If Google reports the usage limit
            GoogleCalendarError: For any other Calendar API failure
        """
        selected = await self.pool.select_organizer(category, organizer)
        access_token = await self.token_provider(selected)

        try:
            event = await self.calendar.create_event(
                access_token,
                summary=summary,
                start_time=start_time,
                end_time=end_time,
                attendees=attendees,
                description=description,
                location=location,
                guests_can_see_other_guests=guests_can_see_other_guests,
            )
        except GoogleCalendarError as e:
            if e.is_usage_limit:
                await self.pool.suspend(selected)
                raise CalendarUsageLimitError(selected) from e
            raise

        logger.info(
            "Calendar invite created",
            event_id=event.id,
            organizer=selected,
            category=category.value,
            attendees_count=len(attendees),
        )

        stored = await self.pool.record_assignment(
            category, selected, [attendee.email for attendee in attendees]
        )
        return InviteResult(event=event, organizer=stored or selected)

    async def add_attendees(
        self,
        category: PoolCategory,
        event_id: str,
        organizer: str,
        attendees: list[Attendee],
    ) -> InviteUpdateResult:
        """
        Append attendees that are not on the event yet.

        Failures are reported in the result rather than raised.
        """
        if not attendees:
            return InviteUpdateResult(success=True)

        try:
            access_token = await self.token_provider(organizer)
            event = await self.calendar.get_event(access_token, event_id)

            new_attendees = [a for a in attendees if not event.has_attendee(a.email)]
            if not new_attendees:
                return InviteUpdateResult(success=True)

            await self.calendar.update_event(
                access_token, event_id, event.with_additional_attendees(new_attendees)
            )

        except GoogleCalendarError as e:
            if e.is_usage_limit:
                await self.pool.suspend(organizer)
                return InviteUpdateResult(success=False, error=USAGE_LIMIT_ERROR)
            logger.error(
                "Error adding attendees to calendar event",
                event_id=event_id,
                organizer=organizer,
                error=str(e),
            )
            return InviteUpdateResult(success=False, error=str(e))
        except CalendarInviteError as e:
            return InviteUpdateResult(success=False, error=str(e))

        added = [a.email for a in new_attendees]
        logger.info(
            "Added attendees to calendar event",
            event_id=event_id,
            organizer=organizer,
            added_count=len(added),
        )
        await self.pool.record_assignment(category, organizer, added)
        return InviteUpdateResult(success=True, added=added)

    async def update_invite(
        self,
        event_id: str,
        organizer: str,
        summary: str | None = None,
        start_time: datetime | None = None,
        end_time: datetime | None = None,
        location: str | None = None,
    ) -> InviteUpdateResult:
        """
        Change the title, times or location of an existing invite.

        Attendees and guest visibility are left alone; they only change through
        add_attendees. A missing event is reported as a "Not Found" error.
        """
        try:
            access_token = await self.token_provider(organizer)
            event = await self.calendar.get_event(access_token, event_id)
            body = event.with_changes(
                self.calendar.time_zone,
                summary=summary,
                start_time=start_time,
                end_time=end_time,
                location=location,
            )
            await self.calendar.update_event(access_token, event_id, body)

        except GoogleCalendarError as e:
            if e.status_code == 404:
                return InviteUpdateResult(success=False, error=NOT_FOUND_ERROR)
            if e.is_usage_limit:
                await self.pool.suspend(organizer)
                return InviteUpdateResult(success=False, error=USAGE_LIMIT_ERROR)
            logger.error(
                "Error updating calendar event",
                event_id=event_id,
                organizer=organizer,
                error=str(e),
            )
            return InviteUpdateResult(success=False, error=str(e))
        except CalendarInviteError as e:
            return InviteUpdateResult(success=False, error=str(e))

        logger.info("Calendar invite updated", event_id=event_id, organizer=organizer)
        return InviteUpdateResult(success=True)

    async def get_invite(self, event_id: str, organizer: str) -> CalendarEvent:
        access_token = await self.token_provider(organizer)
        return await self.calendar.get_event(access_token, event_id)

    async def list_invites(
        self,
        organizer: str,
        time_min: datetime | None = None,
        time_max: datetime | None = None,
    ) -> list[CalendarEvent]:
        """Events on the organizer's primary calendar within the optional window."""
        access_token = await self.token_provider(organizer)
        return await self.calendar.list_events(access_token, time_min=time_min, time_max=time_max)

    async def delete_invite(self, event_id: str, organizer: str) -> None:
        """Delete an invite from the organizer's calendar."""
        access_token = await self.token_provider(organizer)
        await self.calendar.delete_event(access_token, event_id)
        logger.info("Calendar invite deleted", event_id=event_id, organizer=organizer)


# Singleton instance for application use
calendar_invite_service = CalendarInviteService(organizer_pool, google_calendar_service)
