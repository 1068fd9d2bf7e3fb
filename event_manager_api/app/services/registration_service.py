"""
Business logic for event registrations.

A registration is created only while the event has spots left.  The
capacity count and the insert run inside one ``BEGIN IMMEDIATE``
transaction: SQLite grants the reserved (write) lock to a single
connection at a time, so two concurrent requests for the last spot
are serialized and the second one sees the first one's row.  The
UNIQUE(user_id, event_id) constraint backs up the duplicate check.
"""

import logging
import sqlite3
from typing import List

from ..core.db import from_db_timestamp
from ..core.errors import AlreadyRegistered, CapacityExceeded, NotFound
from ..schemas.registration import RegistrationRead, UserRegistration


logger = logging.getLogger(__name__)


def _registration_from_row(row: sqlite3.Row) -> RegistrationRead:
    return RegistrationRead(
        id=row["id"],
        user_id=row["user_id"],
        event_id=row["event_id"],
        registration_date=from_db_timestamp(row["registration_date"]),
        status=row["status"],
    )


class RegistrationService:
    """Service for registering users to events and cancelling."""

    @classmethod
    async def register(cls, conn: sqlite3.Connection, event_id: int, user_id: int) -> RegistrationRead:
        """Register ``user_id`` for ``event_id``.

        Checks, in order: the event exists (``NotFound``), it has a free
        spot (``CapacityExceeded``) and the user is not registered yet
        (``AlreadyRegistered``).  Returns the confirmed registration.
        """
        if conn.in_transaction:
            conn.commit()
        conn.execute("BEGIN IMMEDIATE")
        try:
            event = conn.execute(
                """
                SELECT e.max_capacity, COUNT(r.id) AS current_registrations
                FROM events e
                LEFT JOIN registrations r ON e.id = r.event_id AND r.status = 'confirmed'
                WHERE e.id = ?
                GROUP BY e.id
                """,
                (event_id,),
            ).fetchone()
            if not event:
                raise NotFound("Event not found")
            if event["current_registrations"] >= event["max_capacity"]:
                raise CapacityExceeded()

            existing = conn.execute(
                "SELECT id FROM registrations WHERE user_id = ? AND event_id = ?",
                (user_id, event_id),
            ).fetchone()
            if existing:
                raise AlreadyRegistered()

            try:
                cursor = conn.execute(
                    "INSERT INTO registrations (user_id, event_id, status) VALUES (?, ?, 'confirmed')",
                    (user_id, event_id),
                )
            except sqlite3.IntegrityError as exc:
                raise AlreadyRegistered() from exc
            row = conn.execute(
                "SELECT id, user_id, event_id, registration_date, status FROM registrations WHERE id = ?",
                (cursor.lastrowid,),
            ).fetchone()
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        logger.info("User %s registered for event %s", user_id, event_id)
        return _registration_from_row(row)

    @classmethod
    async def cancel(cls, conn: sqlite3.Connection, event_id: int, user_id: int) -> None:
        """Delete the user's registration; ``NotFound`` if there was none."""
        cursor = conn.execute(
            "DELETE FROM registrations WHERE user_id = ? AND event_id = ?",
            (user_id, event_id),
        )
        if cursor.rowcount == 0:
            conn.rollback()
            raise NotFound("Registration not found")
        conn.commit()
        logger.info("User %s cancelled registration for event %s", user_id, event_id)

    @classmethod
    async def list_for_user(cls, conn: sqlite3.Connection, user_id: int) -> List[UserRegistration]:
        """All registrations of a user with event details, soonest event first."""
        rows = conn.execute(
            """
            SELECT
                r.id, r.user_id, r.event_id, r.registration_date, r.status,
                e.title, e.description, e.date_time, e.location, e.max_capacity,
                u.name AS creator_name
            FROM registrations r
            JOIN events e ON r.event_id = e.id
            LEFT JOIN users u ON e.created_by = u.id
            WHERE r.user_id = ?
            ORDER BY e.date_time ASC, r.id ASC
            """,
            (user_id,),
        ).fetchall()
        return [
            UserRegistration(
                **_registration_from_row(row).model_dump(),
                title=row["title"],
                description=row["description"],
                date_time=from_db_timestamp(row["date_time"]),
                location=row["location"],
                max_capacity=row["max_capacity"],
                creator_name=row["creator_name"],
            )
            for row in rows
        ]
