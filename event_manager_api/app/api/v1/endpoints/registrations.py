"""
Registration endpoints for API v1.

These routes share the ``/events`` prefix with the event routes: a user
registers for and cancels an event at ``/events/{event_id}/register``
and lists their own registrations at
``/events/users/{user_id}/registrations``.
"""

import sqlite3

from fastapi import APIRouter, Depends, Path, status

from event_manager_api.app.core.db import get_db
from event_manager_api.app.core.errors import Forbidden
from event_manager_api.app.core.security import get_current_user
from event_manager_api.app.schemas.event import MessageResponse
from event_manager_api.app.schemas.registration import RegistrationList, RegistrationResponse
from event_manager_api.app.schemas.user import UserRead
from event_manager_api.app.services.registration_service import RegistrationService


router = APIRouter()


@router.post(
    "/{event_id}/register",
    response_model=RegistrationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def register_for_event(
    event_id: int = Path(..., description="ID of the event to register for"),
    current_user: UserRead = Depends(get_current_user),
    conn: sqlite3.Connection = Depends(get_db),
) -> RegistrationResponse:
    """Register the current user for an event.

    Returns 404 if the event does not exist and 400 if it is full or the
    user is already registered.
    """
    registration = await RegistrationService.register(conn, event_id, current_user.id)
    return RegistrationResponse(message="Successfully registered for event", registration=registration)


@router.delete("/{event_id}/register", response_model=MessageResponse)
async def cancel_registration(
    event_id: int = Path(..., description="ID of the event"),
    current_user: UserRead = Depends(get_current_user),
    conn: sqlite3.Connection = Depends(get_db),
) -> MessageResponse:
    """Cancel the current user's registration; 404 if there is none."""
    await RegistrationService.cancel(conn, event_id, current_user.id)
    return MessageResponse(message="Registration cancelled successfully")


@router.get("/users/{user_id}/registrations", response_model=RegistrationList)
async def list_user_registrations(
    user_id: int = Path(..., description="ID of the user"),
    current_user: UserRead = Depends(get_current_user),
    conn: sqlite3.Connection = Depends(get_db),
) -> RegistrationList:
    """List the current user's registrations with event details."""
    if user_id != current_user.id:
        raise Forbidden("You can only view your own registrations")
    registrations = await RegistrationService.list_for_user(conn, user_id)
    return RegistrationList(registrations=registrations, total=len(registrations))
