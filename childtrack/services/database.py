"""SQLite initialization and async connection management via aiosqlite."""

import os
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import aiosqlite

DATABASE_URL = os.getenv("DATABASE_URL", "data/childtrack.db")


class EventStoreUnavailableError(RuntimeError):
    """The event store could not be reached or queried."""


_CREATE_CHILDREN = """
CREATE TABLE IF NOT EXISTS children (
    id             INTEGER PRIMARY KEY AUTOINCREMENT,
    name           TEXT    NOT NULL,
    date_of_birth  TEXT    NOT NULL,
    sex            TEXT    NOT NULL CHECK(sex IN ('male', 'female', 'other')),
    image_url      TEXT,
    created_at     TEXT    NOT NULL DEFAULT (datetime('now'))
)
"""

_CREATE_EVENTS = """
CREATE TABLE IF NOT EXISTS events (
    id             INTEGER PRIMARY KEY AUTOINCREMENT,
    child_id       INTEGER NOT NULL REFERENCES children(id) ON DELETE CASCADE,
    event_type     TEXT    NOT NULL CHECK(event_type IN
                       ('sleeping', 'feeding', 'diaper', 'growth', 'medication', 'temperature')),
    timestamp      TEXT    NOT NULL,
    timestamp_utc  TEXT    NOT NULL,
    end_time       TEXT,
    end_utc        TEXT,
    details        TEXT    NOT NULL DEFAULT '',
    value          REAL,
    data_json      TEXT,
    created_at     TEXT    NOT NULL DEFAULT (datetime('now'))
)
"""

_CREATE_EVENTS_INDEX = """
CREATE INDEX IF NOT EXISTS idx_events_child_time
    ON events (child_id, event_type, timestamp_utc)
"""

_CREATE_REPORTS = """
CREATE TABLE IF NOT EXISTS reports (
    id            INTEGER PRIMARY KEY AUTOINCREMENT,
    child_id      INTEGER NOT NULL REFERENCES children(id) ON DELETE CASCADE,
    report_type   TEXT    NOT NULL,
    start_date    TEXT    NOT NULL,
    end_date      TEXT    NOT NULL,
    payload_json  TEXT    NOT NULL,
    created_at    TEXT    NOT NULL DEFAULT (datetime('now'))
)
"""


async def init_schema(db: aiosqlite.Connection) -> None:
    """Create all tables on an open connection."""
    await db.execute("PRAGMA foreign_keys = ON")
    await db.execute(_CREATE_CHILDREN)
    await db.execute(_CREATE_EVENTS)
    await db.execute(_CREATE_EVENTS_INDEX)
    await db.execute(_CREATE_REPORTS)
    await db.commit()


async def create_tables(db_url: str = DATABASE_URL) -> None:
    """Create all application tables if they don't exist."""
    os.makedirs(os.path.dirname(db_url) if os.path.dirname(db_url) else ".", exist_ok=True)
    async with aiosqlite.connect(db_url) as db:
        await init_schema(db)


@asynccontextmanager
async def get_db(db_url: str = DATABASE_URL) -> AsyncGenerator[aiosqlite.Connection, None]:
    """Context manager that provides a SQLite connection with foreign keys enabled."""
    async with aiosqlite.connect(db_url) as db:
        db.row_factory = aiosqlite.Row
        await db.execute("PRAGMA foreign_keys = ON")
        yield db
