"""Async CRUD and range queries for child events.

Typed details are resolved at write time: when a client only sends the
legacy ``details`` text it is parsed once here and stored alongside it, so
reads never re-parse.
"""

import csv
import logging
from datetime import datetime, timezone, tzinfo
from io import StringIO
from typing import Optional

import aiosqlite
from pydantic import BaseModel, TypeAdapter, ValidationError

from childtrack.models.details import EventDetails
from childtrack.models.event import Event, EventCreate, EventUpdate
from childtrack.services.database import EventStoreUnavailableError
from childtrack.stats.buckets import get_timezone
from childtrack.stats.details import align_record, format_record, parse_details, parse_number

logger = logging.getLogger(__name__)

_DETAILS = TypeAdapter(EventDetails)

# Fixed-width UTC text so timestamps sort and compare lexicographically in SQL
_UTC_FORMAT = "%Y-%m-%dT%H:%M:%S.%f"


class ImportResult(BaseModel):
    imported: int
    skipped: int
    errors: list[str] = []


def utc_key(instant: datetime, tz: Optional[tzinfo] = None) -> str:
    """Sortable UTC text for an instant; naive values are in the reference zone."""
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=tz or get_timezone())
    return instant.astimezone(timezone.utc).strftime(_UTC_FORMAT)


def _row_to_event(row: aiosqlite.Row) -> Event:
    return Event(
        id=row["id"],
        child_id=row["child_id"],
        event_type=row["event_type"],
        timestamp=datetime.fromisoformat(row["timestamp"]),
        end_time=datetime.fromisoformat(row["end_time"]) if row["end_time"] else None,
        details=row["details"] or "",
        value=row["value"],
        data=_DETAILS.validate_json(row["data_json"]) if row["data_json"] else None,
        created_at=datetime.fromisoformat(row["created_at"]),
    )


def _resolve(event_type, timestamp, end_time, details, value, data):
    """Typed details and legacy text for a write, each derived from the other."""
    if data is None:
        data = parse_details(
            event_type, details, timestamp=timestamp, end_time=end_time, value=value
        )
    else:
        data = align_record(data, timestamp)
    if not details:
        details = format_record(data)
    return data, details


def _end_key(end_time: Optional[datetime], data: EventDetails, tz: Optional[tzinfo]) -> Optional[str]:
    """UTC key of the instant an event stops covering time (sleep end first)."""
    end = getattr(data, "end_time", None) or end_time
    return utc_key(end, tz) if end else None


async def add_event(
    db: aiosqlite.Connection, event: EventCreate, tz: Optional[tzinfo] = None
) -> Event:
    """Record an event and return the full record."""
    data, details = _resolve(
        event.event_type, event.timestamp, event.end_time, event.details, event.value, event.data
    )
    cursor = await db.execute(
        """INSERT INTO events
               (child_id, event_type, timestamp, timestamp_utc, end_time, end_utc,
                details, value, data_json)
           VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)""",
        (
            event.child_id,
            event.event_type,
            event.timestamp.isoformat(),
            utc_key(event.timestamp, tz),
            event.end_time.isoformat() if event.end_time else None,
            _end_key(event.end_time, data, tz),
            details,
            event.value,
            data.model_dump_json(),
        ),
    )
    await db.commit()
    rows = await db.execute_fetchall(
        "SELECT * FROM events WHERE id = ?", (cursor.lastrowid,)
    )
    return _row_to_event(rows[0])


async def get_event(db: aiosqlite.Connection, event_id: int) -> Event | None:
    """Return an event by id, or None."""
    async with db.execute("SELECT * FROM events WHERE id = ?", (event_id,)) as cur:
        row = await cur.fetchone()
    return _row_to_event(row) if row else None


async def list_events(
    db: aiosqlite.Connection,
    child_id: int,
    event_type: Optional[str] = None,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    limit: Optional[int] = None,
    newest_first: bool = True,
    tz: Optional[tzinfo] = None,
    overlapping: bool = False,
) -> list[Event]:
    """Return a child's events, optionally filtered by type and instant range.

    With `overlapping`, an event that began before `start` but was still
    running at `start` (a long sleep) is included too.

    Raises EventStoreUnavailableError when the store cannot be queried.
    """
    clauses = ["child_id = ?"]
    params: list = [child_id]
    if event_type:
        clauses.append("event_type = ?")
        params.append(event_type)
    if start is not None:
        if overlapping:
            clauses.append("COALESCE(end_utc, timestamp_utc) >= ?")
        else:
            clauses.append("timestamp_utc >= ?")
        params.append(utc_key(start, tz))
    if end is not None:
        clauses.append("timestamp_utc <= ?")
        params.append(utc_key(end, tz))

    order = "DESC" if newest_first else "ASC"
    query = (
        f"SELECT * FROM events WHERE {' AND '.join(clauses)} "
        f"ORDER BY timestamp_utc {order}, id {order}"
    )
    if limit is not None:
        query += " LIMIT ?"
        params.append(limit)

    try:
        rows = await db.execute_fetchall(query, params)
    except aiosqlite.Error as exc:
        logger.exception("Event store query failed for child %s", child_id)
        raise EventStoreUnavailableError("Event store unavailable") from exc
    return [_row_to_event(r) for r in rows]


async def update_event(
    db: aiosqlite.Connection, event_id: int, update: EventUpdate, tz: Optional[tzinfo] = None
) -> Event | None:
    """Update an event. Only non-None fields are updated.

    Typed details are re-derived from the legacy text whenever the text or
    the timing changes without new typed data. Raises ValueError when
    `update.data` belongs to another event type.
    """
    event = await get_event(db, event_id)
    if not event:
        return None
    if update.data is not None and update.data.kind != event.event_type:
        raise ValueError(
            f"data.kind '{update.data.kind}' does not match event_type '{event.event_type}'"
        )

    changes = update.model_dump(exclude_none=True, exclude={"data"})
    if not changes and update.data is None:
        return event

    merged = event.model_copy(update=changes)
    if update.data is not None:
        data = align_record(update.data, merged.timestamp)
        details = update.details if update.details is not None else format_record(data)
    else:
        data, details = _resolve(
            merged.event_type, merged.timestamp, merged.end_time, merged.details, merged.value, None
        )

    await db.execute(
        """UPDATE events
              SET timestamp = ?, timestamp_utc = ?, end_time = ?, end_utc = ?,
                  details = ?, value = ?, data_json = ?
            WHERE id = ?""",
        (
            merged.timestamp.isoformat(),
            utc_key(merged.timestamp, tz),
            merged.end_time.isoformat() if merged.end_time else None,
            _end_key(merged.end_time, data, tz),
            details,
            merged.value,
            data.model_dump_json(),
            event_id,
        ),
    )
    await db.commit()
    return await get_event(db, event_id)


async def delete_event(db: aiosqlite.Connection, event_id: int) -> bool:
    """Delete an event. Returns True if deleted."""
    cursor = await db.execute("DELETE FROM events WHERE id = ?", (event_id,))
    await db.commit()
    return cursor.rowcount > 0


def _cell(row: dict, *names: str) -> str:
    for name in names:
        value = row.get(name)
        if value is not None and value.strip():
            return value.strip()
    return ""


async def import_legacy_csv(
    db: aiosqlite.Connection, child_id: int, text: str, tz: Optional[tzinfo] = None
) -> ImportResult:
    """Import events from a legacy CSV export.

    Expected columns: eventType, timestamp, details, value and optionally
    endTime (snake_case headers are accepted too). Rows that cannot be read
    are skipped and reported, never fatal.
    """
    imported = 0
    errors: list[str] = []
    reader = csv.DictReader(StringIO(text))
    for line_no, row in enumerate(reader, start=2):
        try:
            end_raw = _cell(row, "endTime", "end_time")
            value_raw = _cell(row, "value")
            payload = EventCreate(
                child_id=child_id,
                event_type=_cell(row, "eventType", "event_type"),
                timestamp=_cell(row, "timestamp", "startTime", "start_time"),
                end_time=end_raw or None,
                details=_cell(row, "details").replace("\\n", "\n"),
                value=parse_number(value_raw) if value_raw else None,
            )
            await add_event(db, payload, tz)
        except (ValueError, OverflowError) as exc:
            message = exc.errors()[0]["msg"] if isinstance(exc, ValidationError) else str(exc)
            logger.warning("Skipping CSV line %d: %s", line_no, message)
            errors.append(f"line {line_no}: {message}")
            continue
        imported += 1

    logger.info("Imported %d events for child %s (%d skipped)", imported, child_id, len(errors))
    return ImportResult(imported=imported, skipped=len(errors), errors=errors)
