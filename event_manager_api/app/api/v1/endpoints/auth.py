"""
Authentication endpoints for API v1.

Sign-up and login both answer with the user and a fresh access token.
Login additionally mirrors the token into an HTTP-only cookie for
browser clients.
"""

import sqlite3

from fastapi import APIRouter, Depends, Response, status

from event_manager_api.app.core.config import Settings
from event_manager_api.app.core.db import get_db
from event_manager_api.app.core.security import create_user_token, get_settings
from event_manager_api.app.schemas.user import AuthResponse, UserCreate, UserLogin
from event_manager_api.app.services.user_service import UserService


router = APIRouter()


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register_user(
    user: UserCreate,
    conn: sqlite3.Connection = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> AuthResponse:
    """Create an account and log it in.

    Returns 400 if the email is already registered.
    """
    created = await UserService.create_user(conn, user)
    return AuthResponse(
        message="User registered successfully",
        user=created,
        token=create_user_token(created, settings),
    )


@router.post("/login", response_model=AuthResponse)
async def login_user(
    credentials: UserLogin,
    response: Response,
    conn: sqlite3.Connection = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> AuthResponse:
    """Check email and password and return a token.

    The same token is set as the ``token`` cookie (HTTP-only, SameSite
    strict, Secure in production) with the token's lifetime.
    """
    user = await UserService.authenticate(conn, credentials.email, credentials.password)
    token = create_user_token(user, settings)
    response.set_cookie(
        key="token",
        value=token,
        httponly=True,
        secure=settings.is_production,
        samesite="strict",
        max_age=settings.access_token_expire_minutes * 60,
    )
    return AuthResponse(message="Login successful", user=user, token=token)
