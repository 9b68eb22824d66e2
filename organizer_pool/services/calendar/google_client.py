"""
Google Calendar API Service for invites sent on behalf of pool organizers.
Low-level Calendar API client: event CRUD on an organizer's primary calendar.
Requests are issued once; callers decide what to do with failures.
"""

from datetime import datetime
from typing import Any

import httpx

from organizer_pool.config import settings
from organizer_pool.infrastructure.observability.logging import get_logger
from organizer_pool.models.domain.calendar_domain import Attendee, CalendarEvent

logger = get_logger(__name__)

# Google Calendar API configuration
CALENDAR_API_BASE_URL = "https://www.googleapis.com/calendar/v3"
CALENDAR_PRIMARY = "primary"  # Organizer's primary calendar

REQUEST_TIMEOUT = 30  # seconds

# Error reasons Google reports when an organizer exhausted its sending quota
USAGE_LIMIT_REASONS = {"quotaExceeded", "usageLimits"}
USAGE_LIMIT_MESSAGE = "usage limit"


class GoogleCalendarError(Exception):
    """Custom exception for Google Calendar API errors."""

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        status_code: int | None = None,
        response_data: dict | None = None,
        provider_message: str | None = None,
    ):
        super().__init__(message)
        self.error_code = error_code
        self.status_code = status_code
        self.response_data = response_data or {}
        self.provider_message = provider_message or message

    @property
    def reasons(self) -> set[str]:
        errors = self.response_data.get("error", {}).get("errors", []) or []
        return {e.get("reason") for e in errors if isinstance(e, dict) and e.get("reason")}

    @property
    def is_usage_limit(self) -> bool:
        """True when the organizer hit the provider's calendar usage limit."""
        if self.reasons & USAGE_LIMIT_REASONS:
            return True
        return USAGE_LIMIT_MESSAGE in self.provider_message.lower()


class GoogleCalendarService:
    """
    Service for Google Calendar API operations.

    Every operation acts on the primary calendar of the organizer whose
    access token is passed in.
    """

    def __init__(self, time_zone: str | None = None, client: httpx.AsyncClient | None = None):
        self.time_zone = time_zone or settings.GCAL_TIMEZONE
        self._client = client or self._create_client()

    def _create_client(self) -> httpx.AsyncClient:
        """Create async HTTP client for Calendar API."""
        timeout = httpx.Timeout(REQUEST_TIMEOUT)
        limits = httpx.Limits(max_keepalive_connections=20, max_connections=50)
        return httpx.AsyncClient(timeout=timeout, limits=limits)

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    def _get_auth_headers(self, access_token: str) -> dict:
        """Get authorization headers for Calendar API requests."""
        return {
            "Authorization": f"Bearer {access_token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def _events_url(self, event_id: str | None = None) -> str:
        url = f"{CALENDAR_API_BASE_URL}/calendars/{CALENDAR_PRIMARY}/events"
        return f"{url}/{event_id}" if event_id else url

    def _handle_api_response(self, response: httpx.Response, operation: str) -> dict:
        """
        Handle and validate Calendar API response.

        Args:
            response: HTTP response from Calendar API
            operation: Operation name for logging

        Returns:
            dict: Parsed response data

        Raises:
            GoogleCalendarError: If response contains errors
        """
        logger.debug(
            f"Calendar API {operation} response",
            status_code=response.status_code,
            response_size=len(response.text) if response.text else 0,
        )

        if response.is_success:
            try:
                return response.json() if response.text else {}
            except ValueError as e:
                logger.error(f"Failed to parse Calendar API {operation} response", error=str(e))
                raise GoogleCalendarError(f"Invalid response format: {e}") from e

        try:
            error_data = response.json() if response.text else {}
        except ValueError:
            logger.error(
                f"Calendar API {operation} failed with non-JSON response",
                status_code=response.status_code,
                response_text=response.text[:200] if response.text else "",
            )
            raise GoogleCalendarError(
                f"Calendar API error (HTTP {response.status_code})",
                status_code=response.status_code,
                provider_message=response.text[:200] if response.text else None,
            ) from None

        error_info = error_data.get("error", {}) if isinstance(error_data, dict) else {}
        error_code = error_info.get("code", response.status_code)
        error_message = error_info.get("message", "Unknown Calendar API error")

        logger.error(
            f"Calendar API {operation} failed",
            status_code=response.status_code,
            error_code=error_code,
            error_message=error_message,
        )

        raise GoogleCalendarError(
            self._map_calendar_error(str(error_code), error_message),
            error_code=str(error_code),
            status_code=response.status_code,
            response_data=error_data if isinstance(error_data, dict) else {},
            provider_message=error_message,
        )

    def _map_calendar_error(self, error_code: str, error_message: str) -> str:
        """Map Calendar API error codes to user-friendly messages."""
        if USAGE_LIMIT_MESSAGE in error_message.lower():
            return "Calendar usage limit"

        error_mappings = {
            "403": "Calendar access denied. Please check permissions.",
            "404": "Not Found",
            "400": "Invalid calendar request format.",
            "401": "Calendar authorization expired.",
            "429": "Too many calendar requests. Please try again later.",
            "500": "Google Calendar service temporarily unavailable.",
        }

        return error_mappings.get(error_code, f"Calendar error: {error_message}")

    async def list_events(
        self,
        access_token: str,
        time_min: datetime | None = None,
        time_max: datetime | None = None,
        time_zone: str | None = None,
    ) -> list[CalendarEvent]:
        """
        List events from the organizer's primary calendar.

        Args:
            access_token: Organizer access token
            time_min: Start time filter (optional)
            time_max: End time filter (optional)
            time_zone: Time zone of the response (default: service time zone)

        Returns:
            List[CalendarEvent]: Calendar events

        Raises:
            GoogleCalendarError: If listing events fails
        """
        try:
            params: dict[str, Any] = {"timeZone": time_zone or self.time_zone}
            if time_min:
                params["timeMin"] = time_min.isoformat()
            if time_max:
                params["timeMax"] = time_max.isoformat()

            logger.info(
                "Listing calendar events",
                time_min=params.get("timeMin"),
                time_max=params.get("timeMax"),
            )

            response = await self._client.get(
                self._events_url(), headers=self._get_auth_headers(access_token), params=params
            )
            data = self._handle_api_response(response, "list_events")

            events = [CalendarEvent(item) for item in data.get("items", [])]
            logger.info("Events listed successfully", event_count=len(events))
            return events

        except GoogleCalendarError:
            raise
        except Exception as e:
            logger.error("Unexpected error listing events", error=str(e))
            raise GoogleCalendarError(f"Failed to list events: {e}") from e

    async def get_event(self, access_token: str, event_id: str) -> CalendarEvent:
        """
        Get a specific event by ID.

        Raises:
            GoogleCalendarError: If getting event fails
        """
        try:
            logger.info("Getting calendar event", event_id=event_id)

            response = await self._client.get(
                self._events_url(event_id), headers=self._get_auth_headers(access_token)
            )
            data = self._handle_api_response(response, "get_event")
            return CalendarEvent(data)

        except GoogleCalendarError:
            raise
        except Exception as e:
            logger.error("Unexpected error getting event", event_id=event_id, error=str(e))
            raise GoogleCalendarError(f"Failed to get event: {e}") from e

    async def create_event(
        self,
        access_token: str,
        summary: str,
        start_time: datetime,
        end_time: datetime,
        attendees: list[Attendee],
        description: str = "",
        location: str = "",
        guests_can_see_other_guests: bool = False,
    ) -> CalendarEvent:
        """
        Create a new event with attendees on the organizer's primary calendar.

        Args:
            access_token: Organizer access token
            summary: Event title
            start_time: Event start time
            end_time: Event end time
            attendees: Invite recipients
            description: Event description, sent as-is
            location: Event location
            guests_can_see_other_guests: Whether attendees see each other

        Returns:
            CalendarEvent: Created event

        Raises:
            GoogleCalendarError: If creating event fails
        """
        try:
            event_data = {
                "summary": summary,
                "description": description,
                "location": location,
                "start": {"dateTime": start_time.isoformat(), "timeZone": self.time_zone},
                "end": {"dateTime": end_time.isoformat(), "timeZone": self.time_zone},
                "attendees": [attendee.to_google() for attendee in attendees],
                "guestsCanSeeOtherGuests": guests_can_see_other_guests,
            }

            logger.info(
                "Creating calendar event",
                summary=summary,
                start_time=start_time.isoformat(),
                attendees_count=len(attendees),
            )

            response = await self._client.post(
                self._events_url(), headers=self._get_auth_headers(access_token), json=event_data
            )
            data = self._handle_api_response(response, "create_event")

            event = CalendarEvent(data)
            logger.info("Event created successfully", event_id=event.id, summary=summary)
            return event

        except GoogleCalendarError:
            raise
        except Exception as e:
            logger.error("Unexpected error creating event", summary=summary, error=str(e))
            raise GoogleCalendarError(f"Failed to create event: {e}") from e

    async def update_event(
        self, access_token: str, event_id: str, event_body: dict[str, Any]
    ) -> CalendarEvent:
        """
        Replace an event with ``event_body``.
        Sending ``attendees`` overwrites the whole attendee list.

        Raises:
            GoogleCalendarError: If updating event fails
        """
        try:
            logger.info("Updating calendar event", event_id=event_id)

            response = await self._client.put(
                self._events_url(event_id),
                headers=self._get_auth_headers(access_token),
                json=event_body,
            )
            data = self._handle_api_response(response, "update_event")

            logger.info("Event updated successfully", event_id=event_id)
            return CalendarEvent(data)

        except GoogleCalendarError:
            raise
        except Exception as e:
            logger.error("Unexpected error updating event", event_id=event_id, error=str(e))
            raise GoogleCalendarError(f"Failed to update event: {e}") from e

    async def delete_event(self, access_token: str, event_id: str) -> bool:
        """
        Delete a calendar event.

        Raises:
            GoogleCalendarError: If deleting event fails
        """
        try:
            logger.info("Deleting calendar event", event_id=event_id)

            response = await self._client.delete(
                self._events_url(event_id), headers=self._get_auth_headers(access_token)
            )

            # For DELETE operations, success is typically 204 No Content
            if response.status_code != 204:
                self._handle_api_response(response, "delete_event")

            logger.info("Event deleted successfully", event_id=event_id)
            return True

        except GoogleCalendarError:
            raise
        except Exception as e:
            logger.error("Unexpected error deleting event", event_id=event_id, error=str(e))
            raise GoogleCalendarError(f"Failed to delete event: {e}") from e


# Singleton instance for application use
google_calendar_service = GoogleCalendarService()
