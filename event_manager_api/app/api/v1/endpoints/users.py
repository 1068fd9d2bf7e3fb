"""
User endpoints for API v1.

Profile, password and dashboard statistics for the logged-in user.
Accounts are created through ``/auth/register``.
"""

import sqlite3

from fastapi import APIRouter, Depends

from event_manager_api.app.core.db import get_db
from event_manager_api.app.core.security import get_current_user
from event_manager_api.app.schemas.event import MessageResponse
from event_manager_api.app.schemas.user import (
    PasswordChange,
    ProfileUpdate,
    UserEnvelope,
    UserRead,
    UserStatsEnvelope,
    UserUpdateResponse,
)
from event_manager_api.app.services.user_service import UserService


router = APIRouter()


@router.get("/profile", response_model=UserEnvelope)
async def get_profile(
    current_user: UserRead = Depends(get_current_user),
    conn: sqlite3.Connection = Depends(get_db),
) -> UserEnvelope:
    return UserEnvelope(user=await UserService.get_user(conn, current_user.id))


@router.put("/profile", response_model=UserUpdateResponse)
async def update_profile(
    profile: ProfileUpdate,
    current_user: UserRead = Depends(get_current_user),
    conn: sqlite3.Connection = Depends(get_db),
) -> UserUpdateResponse:
    """Replace name and email.  Returns 400 if the email belongs to someone else.

    Tokens already issued keep working: they carry the user ID, which
    does not change.
    """
    user = await UserService.update_profile(conn, current_user.id, profile)
    return UserUpdateResponse(message="Profile updated successfully", user=user)


@router.put("/change-password", response_model=MessageResponse)
async def change_password(
    body: PasswordChange,
    current_user: UserRead = Depends(get_current_user),
    conn: sqlite3.Connection = Depends(get_db),
) -> MessageResponse:
    await UserService.change_password(conn, current_user.id, body)
    return MessageResponse(message="Password changed successfully")


@router.get("/stats", response_model=UserStatsEnvelope)
async def get_stats(
    current_user: UserRead = Depends(get_current_user),
    conn: sqlite3.Connection = Depends(get_db),
) -> UserStatsEnvelope:
    """Counts of events created, registrations and upcoming registrations."""
    return UserStatsEnvelope(stats=await UserService.get_stats(conn, current_user.id))
