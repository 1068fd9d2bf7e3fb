"""
Security helpers for password hashing and JWT authentication.

Passwords are hashed with PBKDF2-SHA256 through ``passlib``; access
tokens are HS256 JSON Web Tokens signed and verified with
``python-jose``.  The FastAPI dependencies at the bottom of the module
form the authentication gate (``get_current_user``) and the event
authorization gate (``authorize_event_creator``).
"""

import logging
import sqlite3
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from fastapi import Depends, Path, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from .config import Settings
from .db import from_db_timestamp, get_db
from .errors import Forbidden, NotFound, TokenExpired, TokenInvalid, Unauthenticated
from ..schemas.user import UserRead


logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """Check a plain password against a stored hash.

    Returns ``False`` for a missing or unrecognised hash instead of
    raising, so callers can treat it like a wrong password.
    """
    if not hashed_password:
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        return False


def create_access_token(
    data: Dict[str, Any],
    settings: Settings,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Create a signed JWT with the given claims.

    The payload is extended with ``iat`` and ``exp`` claims.  Its lifetime defaults
    to ``settings.access_token_expire_minutes``.  Clients send the token
    back in the ``Authorization`` header as ``Bearer <token>``.
    """
    to_encode = data.copy()
    lifetime = expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    issued_at = datetime.now(timezone.utc)
    to_encode["iat"] = issued_at
    to_encode["exp"] = issued_at + lifetime
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def create_user_token(user: UserRead, settings: Settings, expires_delta: Optional[timedelta] = None) -> str:
    return create_access_token({"sub": str(user.id), "email": user.email}, settings, expires_delta)


def decode_access_token(token: str, settings: Settings) -> Dict[str, Any]:
    """Verify a JWT and return its claims.

    Raises ``TokenExpired`` when the ``exp`` claim has passed and
    ``TokenInvalid`` for any other verification failure.
    """
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except ExpiredSignatureError as exc:
        raise TokenExpired() from exc
    except JWTError as exc:
        raise TokenInvalid() from exc


def get_settings(request: Request) -> Settings:
    """Dependency returning the settings the running app was built with."""
    return request.app.state.settings


security = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    conn: sqlite3.Connection = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> UserRead:
    """Dependency that resolves the bearer token to a stored user.

    Raises ``Unauthenticated`` if no token was sent or the user behind a
    valid token has since been removed.
    """
    if credentials is None:
        raise Unauthenticated()
    payload = decode_access_token(credentials.credentials, settings)
    try:
        user_id = int(payload["sub"])
    except (KeyError, TypeError, ValueError) as exc:
        raise TokenInvalid() from exc

    row = conn.execute(
        "SELECT id, email, name, created_at FROM users WHERE id = ?",
        (user_id,),
    ).fetchone()
    if not row:
        logger.info("Token for missing user %s rejected", user_id)
        raise Unauthenticated("User not found")
    return UserRead(
        id=row["id"],
        email=row["email"],
        name=row["name"],
        created_at=from_db_timestamp(row["created_at"]),
    )


def authorize_event_creator(
    event_id: int = Path(..., description="ID of the event"),
    current_user: UserRead = Depends(get_current_user),
    conn: sqlite3.Connection = Depends(get_db),
) -> UserRead:
    """Dependency allowing only the creator of ``event_id`` through.

    Raises ``NotFound`` if the event does not exist and ``Forbidden`` if
    it belongs to someone else.  Returns the current user on success.
    """
    row = conn.execute("SELECT created_by FROM events WHERE id = ?", (event_id,)).fetchone()
    if not row:
        raise NotFound("Event not found")
    if row["created_by"] != current_user.id:
        raise Forbidden("Only event creator can perform this action")
    return current_user
