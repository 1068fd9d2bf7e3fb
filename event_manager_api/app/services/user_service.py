"""
Business logic for users.

The ``UserService`` handles sign-up, credential checks, profile
maintenance and the per-user statistics shown on the dashboard.  Every
method receives the request's database connection explicitly.
"""

import logging
import sqlite3

from ..core.db import from_db_timestamp, utc_now
from ..core.errors import Conflict, DuplicateEmail, IncorrectPassword, NotFound, Unauthenticated
from ..core.security import hash_password, verify_password
from ..schemas.user import PasswordChange, ProfileUpdate, UserCreate, UserRead, UserStats


logger = logging.getLogger(__name__)


def _user_from_row(row: sqlite3.Row) -> UserRead:
    return UserRead(
        id=row["id"],
        email=row["email"],
        name=row["name"],
        created_at=from_db_timestamp(row["created_at"]),
    )


class UserService:
    """Service for managing user accounts."""

    @classmethod
    async def create_user(cls, conn: sqlite3.Connection, data: UserCreate) -> UserRead:
        """Create a new user and return it.

        The password is stored as a ``passlib`` hash.  Raises
        ``DuplicateEmail`` if the address is already registered.
        """
        cursor = conn.cursor()
        existing = cursor.execute("SELECT id FROM users WHERE email = ?", (data.email,)).fetchone()
        if existing:
            raise DuplicateEmail()
        try:
            cursor.execute(
                "INSERT INTO users (email, name, password_hash) VALUES (?, ?, ?)",
                (data.email, data.name, hash_password(data.password)),
            )
        except sqlite3.IntegrityError as exc:
            # Another request registered the same address in between.
            conn.rollback()
            raise DuplicateEmail() from exc
        user_id = cursor.lastrowid
        conn.commit()
        logger.info("Registered user %s (id=%s)", data.email, user_id)
        return await cls.get_user(conn, user_id)

    @classmethod
    async def authenticate(cls, conn: sqlite3.Connection, email: str, password: str) -> UserRead:
        """Return the user matching ``email`` and ``password``.

        Raises ``Unauthenticated`` with the same message for an unknown
        address and a wrong password.
        """
        row = conn.execute(
            "SELECT id, email, name, password_hash, created_at FROM users WHERE email = ?",
            (email.lower(),),
        ).fetchone()
        if not row or not verify_password(password, row["password_hash"]):
            logger.info("Failed login for %s", email)
            raise Unauthenticated("Invalid email or password")
        return _user_from_row(row)

    @classmethod
    async def get_user(cls, conn: sqlite3.Connection, user_id: int) -> UserRead:
        row = conn.execute(
            "SELECT id, email, name, created_at FROM users WHERE id = ?",
            (user_id,),
        ).fetchone()
        if not row:
            raise NotFound("User not found")
        return _user_from_row(row)

    @classmethod
    async def update_profile(cls, conn: sqlite3.Connection, user_id: int, data: ProfileUpdate) -> UserRead:
        """Replace the user's name and email.

        Raises ``Conflict`` if the email belongs to a different user.
        """
        cursor = conn.cursor()
        taken = cursor.execute(
            "SELECT id FROM users WHERE email = ? AND id != ?",
            (data.email, user_id),
        ).fetchone()
        if taken:
            raise Conflict("Email is already taken by another user")
        cursor.execute(
            "UPDATE users SET name = ?, email = ? WHERE id = ?",
            (data.name, data.email, user_id),
        )
        if cursor.rowcount == 0:
            conn.rollback()
            raise NotFound("User not found")
        conn.commit()
        logger.info("Updated profile of user %s", user_id)
        return await cls.get_user(conn, user_id)

    @classmethod
    async def change_password(cls, conn: sqlite3.Connection, user_id: int, data: PasswordChange) -> None:
        """Replace the password after checking the current one."""
        row = conn.execute("SELECT password_hash FROM users WHERE id = ?", (user_id,)).fetchone()
        if not row:
            raise NotFound("User not found")
        if not verify_password(data.current_password, row["password_hash"]):
            raise IncorrectPassword()
        conn.execute(
            "UPDATE users SET password_hash = ? WHERE id = ?",
            (hash_password(data.new_password), user_id),
        )
        conn.commit()
        logger.info("Password changed for user %s", user_id)

    @classmethod
    async def set_password(cls, conn: sqlite3.Connection, email: str, password: str) -> bool:
        """Overwrite a user's password without checking the old one.

        Used by the admin command line.  Returns ``False`` if no user has
        the given email.
        """
        cursor = conn.execute(
            "UPDATE users SET password_hash = ? WHERE email = ?",
            (hash_password(password), email.lower()),
        )
        conn.commit()
        return cursor.rowcount > 0

    @classmethod
    async def get_user_by_email(cls, conn: sqlite3.Connection, email: str) -> UserRead:
        row = conn.execute(
            "SELECT id, email, name, created_at FROM users WHERE email = ?",
            (email.lower(),),
        ).fetchone()
        if not row:
            raise NotFound("User not found")
        return _user_from_row(row)

    @classmethod
    async def get_stats(cls, conn: sqlite3.Connection, user_id: int) -> UserStats:
        """Count events created, registrations held and upcoming registrations."""
        cursor = conn.cursor()
        events_created = cursor.execute(
            "SELECT COUNT(*) FROM events WHERE created_by = ?", (user_id,)
        ).fetchone()[0]
        events_registered = cursor.execute(
            "SELECT COUNT(*) FROM registrations WHERE user_id = ?", (user_id,)
        ).fetchone()[0]
        upcoming_events = cursor.execute(
            """
            SELECT COUNT(*)
            FROM registrations r
            JOIN events e ON r.event_id = e.id
            WHERE r.user_id = ? AND e.date_time > ?
            """,
            (user_id, utc_now()),
        ).fetchone()[0]
        return UserStats(
            events_created=events_created,
            events_registered=events_registered,
            upcoming_events=upcoming_events,
        )
