"""Shared fixtures across tests: in-memory SQLite via aiosqlite."""

import aiosqlite
import pytest
import pytest_asyncio

from childtrack.services.database import init_schema


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


@pytest_asyncio.fixture
async def db():
    """Fresh in-memory SQLite connection with every table, one per test."""
    async with aiosqlite.connect(":memory:") as conn:
        conn.row_factory = aiosqlite.Row
        await init_schema(conn)
        yield conn
