"""Async CRUD for children, the owners of every event and saved report.

Deleting a child removes its events and reports through the foreign key
cascade declared in ``database.py``.
"""

from datetime import date, datetime

import aiosqlite

from childtrack.models.child import Child, ChildCreate, ChildUpdate

# Columns a client may write; also guards the dynamic UPDATE below
_WRITABLE = ("name", "date_of_birth", "sex", "image_url")


def _row_to_child(row: aiosqlite.Row) -> Child:
    return Child(
        id=row["id"],
        name=row["name"],
        date_of_birth=date.fromisoformat(row["date_of_birth"]),
        sex=row["sex"],
        image_url=row["image_url"],
        created_at=datetime.fromisoformat(row["created_at"]),
    )


def _columns(payload: ChildCreate | ChildUpdate) -> dict[str, object]:
    # mode="json" writes the birth date as ISO text, as stored
    values = payload.model_dump(mode="json", exclude_none=True)
    return {column: values[column] for column in _WRITABLE if column in values}


async def create_child(db: aiosqlite.Connection, child: ChildCreate) -> Child:
    """Register a child and return the stored record."""
    columns = _columns(child)
    cursor = await db.execute(
        f"INSERT INTO children ({', '.join(columns)}) VALUES ({', '.join('?' for _ in columns)})",
        list(columns.values()),
    )
    await db.commit()
    return await get_child(db, cursor.lastrowid)


async def get_child(db: aiosqlite.Connection, child_id: int) -> Child | None:
    async with db.execute("SELECT * FROM children WHERE id = ?", (child_id,)) as cur:
        row = await cur.fetchone()
    return _row_to_child(row) if row else None


async def get_all_children(db: aiosqlite.Connection) -> list[Child]:
    """Every registered child, oldest registration first."""
    rows = await db.execute_fetchall("SELECT * FROM children ORDER BY created_at, id")
    return [_row_to_child(r) for r in rows]


async def update_child(db: aiosqlite.Connection, child_id: int, data: ChildUpdate) -> Child | None:
    """Apply the fields set on `data`; None when the child does not exist."""
    columns = _columns(data)
    if columns:
        assignments = ", ".join(f"{column} = ?" for column in columns)
        await db.execute(
            f"UPDATE children SET {assignments} WHERE id = ?",
            [*columns.values(), child_id],
        )
        await db.commit()
    return await get_child(db, child_id)


async def delete_child(db: aiosqlite.Connection, child_id: int) -> bool:
    """Delete a child with its events and reports. Returns True if deleted."""
    cursor = await db.execute("DELETE FROM children WHERE id = ?", (child_id,))
    await db.commit()
    return cursor.rowcount > 0
