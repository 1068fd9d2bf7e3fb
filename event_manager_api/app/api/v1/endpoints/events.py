"""
Event endpoints for API v1.

Listing, search and lookup are public.  Creating requires a logged-in
user; updating and deleting are limited to the event's creator through
the ``authorize_event_creator`` dependency.  Static paths (``/search``,
``/creator/...``) are declared before ``/{event_id}`` so they are not
captured by it.
"""

import sqlite3
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from event_manager_api.app.core.db import get_db
from event_manager_api.app.core.errors import Forbidden
from event_manager_api.app.core.security import authorize_event_creator, get_current_user
from event_manager_api.app.schemas.event import (
    EventCreate,
    EventEnvelope,
    EventList,
    EventResponse,
    EventUpdate,
    MessageResponse,
)
from event_manager_api.app.schemas.user import UserRead
from event_manager_api.app.services.event_service import EventService


router = APIRouter()


@router.post("", response_model=EventResponse, status_code=status.HTTP_201_CREATED)
async def create_event(
    event: EventCreate,
    current_user: UserRead = Depends(get_current_user),
    conn: sqlite3.Connection = Depends(get_db),
) -> EventResponse:
    """Create a new event owned by the current user."""
    created = await EventService.create_event(conn, event, current_user)
    return EventResponse(message="Event created successfully", event=created)


@router.get("", response_model=EventList)
async def list_events(conn: sqlite3.Connection = Depends(get_db)) -> EventList:
    """Upcoming events with creator name and occupancy, soonest first."""
    events = await EventService.list_upcoming(conn)
    return EventList(events=events, total=len(events))


@router.get("/search", response_model=EventList)
async def search_events(
    q: Optional[str] = Query(None, description="Text to find in title or description"),
    location: Optional[str] = Query(None, description="Text to find in location"),
    date_from: Optional[datetime] = Query(None),
    date_to: Optional[datetime] = Query(None),
    conn: sqlite3.Connection = Depends(get_db),
) -> EventList:
    """Search upcoming events.

    - **q**: case-insensitive match on title or description.
    - **location**: case-insensitive match on location.
    - **date_from**, **date_to**: inclusive date range (ISO strings).
    """
    events = await EventService.search(conn, q=q, location=location, date_from=date_from, date_to=date_to)
    return EventList(events=events, total=len(events))


@router.get("/creator/{user_id}", response_model=EventList)
async def list_creator_events(
    user_id: int,
    current_user: UserRead = Depends(get_current_user),
    conn: sqlite3.Connection = Depends(get_db),
) -> EventList:
    """All events created by the current user, including past ones."""
    if user_id != current_user.id:
        raise Forbidden("You can only view your own events")
    events = await EventService.list_by_creator(conn, user_id)
    return EventList(events=events, total=len(events))


@router.get("/{event_id}", response_model=EventEnvelope)
async def get_event(event_id: int, conn: sqlite3.Connection = Depends(get_db)) -> EventEnvelope:
    """Retrieve a single event by its ID.  Returns 404 if it does not exist."""
    return EventEnvelope(event=await EventService.get_event(conn, event_id))


@router.put("/{event_id}", response_model=EventResponse)
async def update_event(
    event_id: int,
    event: EventUpdate,
    current_user: UserRead = Depends(authorize_event_creator),
    conn: sqlite3.Connection = Depends(get_db),
) -> EventResponse:
    """Replace all fields of an event.  Creator only."""
    updated = await EventService.update_event(conn, event_id, event)
    return EventResponse(message="Event updated successfully", event=updated)


@router.delete("/{event_id}", response_model=MessageResponse)
async def delete_event(
    event_id: int,
    current_user: UserRead = Depends(authorize_event_creator),
    conn: sqlite3.Connection = Depends(get_db),
) -> MessageResponse:
    """Delete an event and all its registrations.  Creator only."""
    await EventService.delete_event(conn, event_id)
    return MessageResponse(message="Event deleted successfully")
