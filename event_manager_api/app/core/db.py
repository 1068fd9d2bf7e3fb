"""
SQLite database integration and simple migration system.

This module provides the ``Database`` handle, which owns the location
of the SQLite file and hands out connections, a migration runner
(``Database.init_db``) applied on application start and the ``get_db``
dependency that gives every request its own connection.

The migration mechanism stores applied migration versions in the
``migrations`` table and executes new migrations in order.
"""

import logging
import os
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Iterator, Optional

from fastapi import Request

from .config import Settings


logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


MIGRATIONS: list[tuple[int, str]] = [
    # Migration 1: Initial schema
    (
        1,
        """
        CREATE TABLE IF NOT EXISTS users (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            email TEXT NOT NULL UNIQUE,
            name TEXT NOT NULL,
            password_hash TEXT NOT NULL,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        );

        CREATE TABLE IF NOT EXISTS events (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            title TEXT NOT NULL,
            description TEXT,
            date_time TIMESTAMP NOT NULL,
            location TEXT,
            max_capacity INTEGER NOT NULL CHECK (max_capacity > 0),
            created_by INTEGER REFERENCES users(id) ON DELETE CASCADE,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        );

        CREATE TABLE IF NOT EXISTS registrations (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id INTEGER REFERENCES users(id) ON DELETE CASCADE,
            event_id INTEGER REFERENCES events(id) ON DELETE CASCADE,
            registration_date TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            status TEXT DEFAULT 'confirmed',
            UNIQUE(user_id, event_id)
        );
        """,
    ),
    # Migration 2: Indexes for the listing and registration lookups
    (
        2,
        """
        CREATE INDEX IF NOT EXISTS idx_events_date_time ON events(date_time);
        CREATE INDEX IF NOT EXISTS idx_registrations_user_id ON registrations(user_id);
        CREATE INDEX IF NOT EXISTS idx_registrations_event_id ON registrations(event_id);
        """,
    ),
]


def to_db_timestamp(value: datetime, round_up: bool = False) -> str:
    """Normalise a datetime to the UTC text format stored in the database.

    Naive values are taken to be UTC already.  Storing one fixed format
    keeps string comparison in SQL equivalent to chronological order.
    The format has whole seconds: fractions are dropped, or rounded up to
    the next second with ``round_up`` (for inclusive lower bounds).
    """
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    if round_up and value.microsecond:
        value = value.replace(microsecond=0) + timedelta(seconds=1)
    return value.strftime(TIMESTAMP_FORMAT)


def from_db_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse a stored timestamp back into an aware UTC datetime."""
    if value is None:
        return None
    parsed = datetime.fromisoformat(str(value))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _unicode_lower(value: Optional[str]) -> Optional[str]:
    return value.lower() if value is not None else None


def utc_now() -> str:
    """Current time in the stored timestamp format."""
    return to_db_timestamp(datetime.now(timezone.utc))


class Database:
    """Handle for the application's SQLite database.

    One instance is created per application and stored on
    ``app.state.db``.  It is opened (migrations applied) during start-up
    and closed at shutdown.  Connections are cheap in SQLite, so each
    request gets a fresh one from :meth:`connect`.
    """

    def __init__(self, path: str, timeout: float = 10.0) -> None:
        self.path = path
        self.timeout = timeout
        self.is_open = False

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(get_database_path(settings.database_url), timeout=settings.database_timeout)

    def connect(self) -> sqlite3.Connection:
        """Create and return a new SQLite connection.

        Rows are returned as ``sqlite3.Row`` so columns can be accessed
        by name.  ``check_same_thread`` is disabled because FastAPI may
        create the connection in a worker thread and use it on the event
        loop thread within the same request.
        """
        conn = sqlite3.connect(self.path, timeout=self.timeout, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        # Foreign key support is off by default in SQLite and must be
        # enabled per connection for the ON DELETE CASCADE clauses.
        conn.execute("PRAGMA foreign_keys = ON")
        # SQLite's LOWER() folds ASCII only; searches use this instead.
        conn.create_function("unicode_lower", 1, _unicode_lower, deterministic=True)
        return conn

    @contextmanager
    def connection(self) -> Iterator[sqlite3.Connection]:
        """Context manager that yields a connection and closes it on exit."""
        conn = self.connect()
        try:
            yield conn
        finally:
            conn.close()

    def open(self) -> None:
        """Verify the database is reachable and apply pending migrations."""
        try:
            self.init_db()
        except sqlite3.Error:
            logger.exception("Failed to open database at %s", self.path)
            raise
        self.is_open = True
        logger.info("Database ready at %s", self.path)

    def close(self) -> None:
        self.is_open = False
        logger.info("Database handle released")

    def init_db(self) -> None:
        """Initialise the database and apply pending migrations.

        Creates the ``migrations`` table if it does not exist, checks the
        current schema version, and applies any new migrations defined in
        ``MIGRATIONS``.  If you add a new migration, append it with an
        incremented version number.
        """
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute("CREATE TABLE IF NOT EXISTS migrations (version INTEGER PRIMARY KEY)")
            cursor.execute("SELECT MAX(version) as version FROM migrations")
            row = cursor.fetchone()
            current_version = row["version"] if row and row["version"] is not None else 0

            for version, sql in MIGRATIONS:
                if version > current_version:
                    logger.info("Applying migration %s", version)
                    cursor.executescript(sql)
                    cursor.execute("INSERT INTO migrations (version) VALUES (?)", (version,))
                    current_version = version
            conn.commit()


def get_database_path(db_url: str) -> str:
    """Compute the path to the SQLite database file.

    If ``db_url`` is an absolute path, use it directly.  Otherwise
    resolve it relative to the project root.
    """
    if os.path.isabs(db_url):
        return db_url
    base_dir = Path(__file__).resolve().parent.parent.parent.parent
    return str((base_dir / db_url).resolve())


def get_db(request: Request) -> Iterator[sqlite3.Connection]:
    """FastAPI dependency yielding a per-request connection."""
    database: Database = request.app.state.db
    with database.connection() as conn:
        yield conn
