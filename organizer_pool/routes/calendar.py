"""
Calendar API Routes
HTTP endpoints for the organizer pool and for invites sent through it.
"""

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from organizer_pool.infrastructure.observability.logging import get_logger
from organizer_pool.models.api.calendar_request import (
    AddAttendeesRequest,
    CreateInviteRequest,
    SuspendOrganizerRequest,
    UpdateInviteRequest,
)
from organizer_pool.models.api.calendar_response import (
    AddAttendeesResponse,
    CalendarEventResponse,
    CreateInviteResponse,
    EventsListResponse,
    OrganizerAvailabilityResponse,
    OrganizerSelectionResponse,
    PoolStatusResponse,
    UpdateInviteResponse,
)
from organizer_pool.models.domain.pool_domain import PoolCategory
from organizer_pool.services.calendar.google_client import GoogleCalendarError
from organizer_pool.services.calendar.invite_service import (
    NOT_FOUND_ERROR,
    CalendarInviteError,
    CalendarInviteService,
    CalendarUsageLimitError,
    calendar_invite_service,
)
from organizer_pool.services.pool import NoOrganizerAvailable, OrganizerPool, organizer_pool

logger = get_logger(__name__)

router = APIRouter(prefix="/calendar", tags=["calendar"])

CAPACITY_DETAIL = "No calendar organizer available, please try again later"


def get_organizer_pool() -> OrganizerPool:
    return organizer_pool


def get_invite_service() -> CalendarInviteService:
    return calendar_invite_service


@router.get("/organizers/{category}", response_model=PoolStatusResponse)
async def get_pool_status(
    category: PoolCategory,
    pool: OrganizerPool = Depends(get_organizer_pool),
):
    """
    Current organizer, accounted attendees and available candidates of a pool.

    Not read-only: checking the candidates suspends any that are over quota,
    which clears their pool state, and lifts suspensions older than the window.
    """
    state = await pool.get_current(category)
    available = await pool.available_organizers(category)

    return PoolStatusResponse(
        category=category,
        organizer=state.organizer if state else None,
        unique_external_attendees=state.attendee_count if state else 0,
        external_attendees_limit=pool.config.external_attendees_limit,
        candidates=list(pool.config.candidates_for(category)),
        available_organizers=available,
    )


@router.get("/organizers/{category}/select", response_model=OrganizerSelectionResponse)
async def select_organizer(
    category: PoolCategory,
    preferred: str | None = Query(default=None, description="Preferred organizer"),
    pool: OrganizerPool = Depends(get_organizer_pool),
):
    """Organizer the next invite of this pool would be sent from."""
    try:
        organizer = await pool.select_organizer(category, preferred)
    except NoOrganizerAvailable as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=CAPACITY_DETAIL
        ) from e

    return OrganizerSelectionResponse(category=category, organizer=organizer)


@router.get("/organizer-status", response_model=OrganizerAvailabilityResponse)
async def get_organizer_status(
    organizer: str = Query(..., min_length=3),
    pool: OrganizerPool = Depends(get_organizer_pool),
):
    """
    Whether an organizer may take new invites.

    Runs the full availability check, so an organizer over quota is suspended
    and an expired suspension is lifted as a side effect.
    """
    available = await pool.is_available(organizer)
    return OrganizerAvailabilityResponse(organizer=organizer, available=available)


@router.post("/organizer-suspensions", status_code=status.HTTP_204_NO_CONTENT)
async def suspend_organizer(
    request: SuspendOrganizerRequest,
    pool: OrganizerPool = Depends(get_organizer_pool),
):
    """Suspend an organizer for the suspension window."""
    await pool.suspend(request.organizer)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/invites", response_model=CreateInviteResponse, status_code=status.HTTP_201_CREATED)
async def create_invite(
    request: CreateInviteRequest,
    service: CalendarInviteService = Depends(get_invite_service),
):
    """Create a calendar invite from an available organizer."""
    try:
        result = await service.create_invite(
            category=request.category,
            summary=request.summary,
            start_time=request.start_time,
            end_time=request.end_time,
            attendees=request.attendees,
            description=request.description,
            location=request.location,
            guests_can_see_other_guests=request.guests_can_see_other_guests,
            organizer=request.organizer,
        )
    except NoOrganizerAvailable as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=CAPACITY_DETAIL
        ) from e
    except CalendarUsageLimitError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    except CalendarInviteError as e:
        logger.error("Calendar invite error", organizer=e.organizer, error=str(e))
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    except GoogleCalendarError as e:
        logger.error("Calendar API error creating invite", error=str(e), status_code=e.status_code)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e)) from e

    event = result.event
    return CreateInviteResponse(
        event_id=event.id,
        organizer=result.organizer,
        category=request.category,
        summary=event.summary,
        start_time=event.start_time,
        end_time=event.end_time,
        html_link=event.html_link,
        attendees_count=len(event.attendees),
    )


@router.post("/invites/{event_id}/attendees", response_model=AddAttendeesResponse)
async def add_invite_attendees(
    event_id: str,
    request: AddAttendeesRequest,
    service: CalendarInviteService = Depends(get_invite_service),
):
    """Add attendees to an existing invite."""
    result = await service.add_attendees(
        category=request.subject.pool_category,
        event_id=event_id,
        organizer=request.organizer,
        attendees=request.attendees,
    )
    return AddAttendeesResponse(success=result.success, error=result.error, added=result.added)


@router.patch("/invites/{event_id}", response_model=UpdateInviteResponse)
async def update_invite(
    event_id: str,
    request: UpdateInviteRequest,
    service: CalendarInviteService = Depends(get_invite_service),
):
    """Change the title, times or location of an existing invite."""
    result = await service.update_invite(
        event_id,
        request.organizer,
        summary=request.summary,
        start_time=request.start_time,
        end_time=request.end_time,
        location=request.location,
    )
    if result.error == NOT_FOUND_ERROR:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND_ERROR)

    return UpdateInviteResponse(success=result.success, error=result.error)


@router.get("/invites", response_model=EventsListResponse)
async def list_invites(
    organizer: str = Query(..., min_length=3),
    time_min: datetime | None = Query(default=None, description="Start time filter"),
    time_max: datetime | None = Query(default=None, description="End time filter"),
    service: CalendarInviteService = Depends(get_invite_service),
):
    """Events on an organizer's primary calendar."""
    try:
        events = await service.list_invites(organizer, time_min=time_min, time_max=time_max)
    except CalendarInviteError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    except GoogleCalendarError as e:
        logger.error("Calendar API error listing invites", organizer=organizer, error=str(e))
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e)) from e

    return EventsListResponse(
        organizer=organizer,
        events=[CalendarEventResponse.from_event(event) for event in events],
        total_count=len(events),
    )


@router.get("/invites/{event_id}", response_model=CalendarEventResponse)
async def get_invite(
    event_id: str,
    organizer: str = Query(..., min_length=3),
    service: CalendarInviteService = Depends(get_invite_service),
):
    """A single invite from the organizer's calendar."""
    try:
        event = await service.get_invite(event_id, organizer)
    except CalendarInviteError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    except GoogleCalendarError as e:
        code = status.HTTP_404_NOT_FOUND if e.status_code == 404 else status.HTTP_502_BAD_GATEWAY
        raise HTTPException(status_code=code, detail=str(e)) from e

    return CalendarEventResponse.from_event(event)


@router.delete("/invites/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_invite(
    event_id: str,
    organizer: str = Query(..., min_length=3),
    service: CalendarInviteService = Depends(get_invite_service),
):
    """Delete an invite from the organizer's calendar."""
    try:
        await service.delete_invite(event_id, organizer)
    except CalendarInviteError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    except GoogleCalendarError as e:
        code = status.HTTP_404_NOT_FOUND if e.status_code == 404 else status.HTTP_502_BAD_GATEWAY
        raise HTTPException(status_code=code, detail=str(e)) from e

    return Response(status_code=status.HTTP_204_NO_CONTENT)
