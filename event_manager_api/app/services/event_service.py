"""
Business logic for events.

Listing queries share one SELECT that joins the creator's name and
counts confirmed registrations, so ``current_registrations`` and
``available_spots`` are always computed from the rows present at query
time.  Ownership checks happen in the authorization dependency before
``update_event`` and ``delete_event`` are called.
"""

import logging
import sqlite3
from datetime import datetime
from typing import List, Optional

from ..core.db import from_db_timestamp, to_db_timestamp, utc_now
from ..core.errors import NotFound
from ..schemas.event import EventCreate, EventDetail, EventRead, EventUpdate
from ..schemas.user import UserRead


logger = logging.getLogger(__name__)

_EVENT_COLUMNS = "id, title, description, date_time, location, max_capacity, created_by, created_at"

_DETAIL_QUERY = """
    SELECT
        e.id, e.title, e.description, e.date_time, e.location,
        e.max_capacity, e.created_by, e.created_at,
        u.name AS creator_name,
        COUNT(r.id) AS current_registrations,
        (e.max_capacity - COUNT(r.id)) AS available_spots
    FROM events e
    LEFT JOIN users u ON e.created_by = u.id
    LEFT JOIN registrations r ON e.id = r.event_id AND r.status = 'confirmed'
"""


def _escape_like(term: str) -> str:
    """Escape LIKE wildcards so user input is matched literally."""
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _event_from_row(row: sqlite3.Row) -> EventRead:
    return EventRead(
        id=row["id"],
        title=row["title"],
        description=row["description"],
        date_time=from_db_timestamp(row["date_time"]),
        location=row["location"],
        max_capacity=row["max_capacity"],
        created_by=row["created_by"],
        created_at=from_db_timestamp(row["created_at"]),
    )


def _detail_from_row(row: sqlite3.Row) -> EventDetail:
    return EventDetail(
        **_event_from_row(row).model_dump(),
        creator_name=row["creator_name"],
        current_registrations=row["current_registrations"],
        available_spots=row["available_spots"],
    )


class EventService:
    """Service for creating, listing and maintaining events."""

    @classmethod
    def _select_details(
        cls,
        conn: sqlite3.Connection,
        where_clauses: List[str],
        params: list,
    ) -> List[EventDetail]:
        query = _DETAIL_QUERY
        if where_clauses:
            query += " WHERE " + " AND ".join(where_clauses)
        query += " GROUP BY e.id ORDER BY e.date_time ASC, e.id ASC"
        rows = conn.execute(query, tuple(params)).fetchall()
        return [_detail_from_row(row) for row in rows]

    @classmethod
    async def create_event(cls, conn: sqlite3.Connection, data: EventCreate, current_user: UserRead) -> EventRead:
        """Insert a new event owned by ``current_user`` and return it."""
        cursor = conn.cursor()
        cursor.execute(
            """
            INSERT INTO events (title, description, date_time, location, max_capacity, created_by)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                data.title,
                data.description,
                to_db_timestamp(data.date_time),
                data.location,
                data.max_capacity,
                current_user.id,
            ),
        )
        event_id = cursor.lastrowid
        conn.commit()
        logger.info("User %s created event %s '%s'", current_user.id, event_id, data.title)
        return await cls.get_event_row(conn, event_id)

    @classmethod
    async def get_event_row(cls, conn: sqlite3.Connection, event_id: int) -> EventRead:
        row = conn.execute(f"SELECT {_EVENT_COLUMNS} FROM events WHERE id = ?", (event_id,)).fetchone()
        if not row:
            raise NotFound("Event not found")
        return _event_from_row(row)

    @classmethod
    async def list_upcoming(cls, conn: sqlite3.Connection) -> List[EventDetail]:
        """Events strictly in the future, soonest first."""
        return cls._select_details(conn, ["e.date_time > ?"], [utc_now()])

    @classmethod
    async def get_event(cls, conn: sqlite3.Connection, event_id: int) -> EventDetail:
        """Return one event with occupancy figures, past or future."""
        events = cls._select_details(conn, ["e.id = ?"], [event_id])
        if not events:
            raise NotFound("Event not found")
        return events[0]

    @classmethod
    async def list_by_creator(cls, conn: sqlite3.Connection, creator_id: int) -> List[EventDetail]:
        """All events of one creator, including past ones."""
        return cls._select_details(conn, ["e.created_by = ?"], [creator_id])

    @classmethod
    async def search(
        cls,
        conn: sqlite3.Connection,
        q: Optional[str] = None,
        location: Optional[str] = None,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
    ) -> List[EventDetail]:
        """Filter upcoming events.

        - ``q`` matches title or description, case-insensitively.
        - ``location`` matches the location, case-insensitively.
        - ``date_from`` and ``date_to`` bound the date inclusively.

        Filters combine with AND; omitted filters are ignored, so a call
        without filters returns exactly ``list_upcoming``.
        """
        where_clauses: List[str] = ["e.date_time > ?"]
        params: list = [utc_now()]
        if q:
            pattern = f"%{_escape_like(q.lower())}%"
            where_clauses.append(
                "(unicode_lower(e.title) LIKE ? ESCAPE '\\' OR unicode_lower(COALESCE(e.description, '')) LIKE ? ESCAPE '\\')"
            )
            params.extend([pattern, pattern])
        if location:
            where_clauses.append("unicode_lower(COALESCE(e.location, '')) LIKE ? ESCAPE '\\'")
            params.append(f"%{_escape_like(location.lower())}%")
        if date_from:
            where_clauses.append("e.date_time >= ?")
            params.append(to_db_timestamp(date_from, round_up=True))
        if date_to:
            where_clauses.append("e.date_time <= ?")
            params.append(to_db_timestamp(date_to))
        return cls._select_details(conn, where_clauses, params)

    @classmethod
    async def update_event(cls, conn: sqlite3.Connection, event_id: int, data: EventUpdate) -> EventRead:
        """Replace every mutable field of an event."""
        cursor = conn.cursor()
        cursor.execute(
            """
            UPDATE events
            SET title = ?, description = ?, date_time = ?, location = ?, max_capacity = ?
            WHERE id = ?
            """,
            (
                data.title,
                data.description,
                to_db_timestamp(data.date_time),
                data.location,
                data.max_capacity,
                event_id,
            ),
        )
        if cursor.rowcount == 0:
            conn.rollback()
            raise NotFound("Event not found")
        conn.commit()
        logger.info("Event %s updated", event_id)
        return await cls.get_event_row(conn, event_id)

    @classmethod
    async def delete_event(cls, conn: sqlite3.Connection, event_id: int) -> None:
        """Delete an event; its registrations go with it via ON DELETE CASCADE."""
        cursor = conn.execute("DELETE FROM events WHERE id = ?", (event_id,))
        if cursor.rowcount == 0:
            conn.rollback()
            raise NotFound("Event not found")
        conn.commit()
        logger.info("Event %s deleted", event_id)
