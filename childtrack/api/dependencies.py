"""Reusable FastAPI dependencies (DB connection, reference time zone)."""

from collections.abc import AsyncGenerator
from datetime import tzinfo
from typing import Annotated

import aiosqlite
from fastapi import Depends, HTTPException

from childtrack.models.child import Child
from childtrack.services import child_service
from childtrack.services.database import get_db as _get_db
from childtrack.stats.buckets import get_timezone


async def db_dependency() -> AsyncGenerator[aiosqlite.Connection, None]:
    """Provide a SQLite connection for the duration of the request."""
    async with _get_db() as db:
        yield db


DbDep = Annotated[aiosqlite.Connection, Depends(db_dependency)]


def timezone_dependency() -> tzinfo:
    """Reference zone for day buckets (CHILDTRACK_TIMEZONE)."""
    return get_timezone()


TzDep = Annotated[tzinfo, Depends(timezone_dependency)]


async def child_dependency(child_id: int, db: DbDep) -> Child:
    """Resolve the `child_id` path parameter or answer 404."""
    child = await child_service.get_child(db, child_id)
    if not child:
        raise HTTPException(status_code=404, detail=f"Child {child_id} not found")
    return child


ChildDep = Annotated[Child, Depends(child_dependency)]
