"""Endpoints for logged events (sleep, feeding, diaper, growth, medication, temperature)."""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, HTTPException, Query, Request, status

from childtrack.api.dependencies import ChildDep, DbDep, TzDep
from childtrack.models.details import EventType
from childtrack.models.event import Event, EventCreate, EventUpdate
from childtrack.services import child_service, event_service
from childtrack.services.event_service import ImportResult

router = APIRouter(prefix="/events", tags=["events"])


@router.post("", response_model=Event, status_code=status.HTTP_201_CREATED)
async def add_event(payload: EventCreate, db: DbDep, tz: TzDep) -> Event:
    """Log an event, with typed `data` or legacy `details` text."""
    child = await child_service.get_child(db, payload.child_id)
    if not child:
        raise HTTPException(status_code=404, detail=f"Child {payload.child_id} not found")
    return await event_service.add_event(db, payload, tz)


@router.get("/{child_id}", response_model=list[Event])
async def list_events(
    child: ChildDep,
    db: DbDep,
    tz: TzDep,
    event_type: Optional[EventType] = Query(None, description="Only this event type"),
    start: Optional[datetime] = Query(None, description="Earliest timestamp (ISO datetime)"),
    end: Optional[datetime] = Query(None, description="Latest timestamp (ISO datetime)"),
    limit: Optional[int] = Query(None, ge=1, le=1000),
) -> list[Event]:
    """
    Return a child's events, newest first.

    - `?event_type=sleeping`: a single category
    - `?start=...&end=...`: an instant range, both ends included
    """
    if start and end and end < start:
        raise HTTPException(status_code=400, detail="'end' must be >= 'start'")
    return await event_service.list_events(
        db, child.id, event_type=event_type, start=start, end=end, limit=limit, tz=tz
    )


@router.patch("/{event_id}", response_model=Event)
async def update_event(event_id: int, payload: EventUpdate, db: DbDep, tz: TzDep) -> Event:
    """Update an event (all fields optional)."""
    try:
        event = await event_service.update_event(db, event_id, payload, tz)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    if not event:
        raise HTTPException(status_code=404, detail=f"Event {event_id} not found")
    return event


@router.delete("/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_event(event_id: int, db: DbDep) -> None:
    """Delete an event."""
    deleted = await event_service.delete_event(db, event_id)
    if not deleted:
        raise HTTPException(status_code=404, detail=f"Event {event_id} not found")


@router.post("/{child_id}/import", response_model=ImportResult)
async def import_events(child: ChildDep, request: Request, db: DbDep, tz: TzDep) -> ImportResult:
    """Import a legacy CSV export (request body: the CSV text)."""
    body = await request.body()
    try:
        text = body.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise HTTPException(status_code=400, detail="CSV body must be UTF-8 text") from exc
    return await event_service.import_legacy_csv(db, child.id, text, tz)
