"""
Top‑level router for version 1 of the API.

This router aggregates domain‑specific routers under a unified prefix.
When new endpoints are added or when new domains are introduced,
update this file to include their routers.
"""

from fastapi import APIRouter

from .endpoints import auth, events, registrations, users

router = APIRouter()

router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(events.router, prefix="/events", tags=["events"])
# Registration routes live under /events too (/events/{id}/register).
router.include_router(registrations.router, prefix="/events", tags=["registrations"])
router.include_router(users.router, prefix="/users", tags=["users"])
