"""Unit tests for child_service."""

from datetime import date

import pytest

from childtrack.models.child import ChildCreate, ChildUpdate
from childtrack.services.child_service import (
    create_child,
    delete_child,
    get_all_children,
    get_child,
    update_child,
)

pytestmark = pytest.mark.asyncio


_CHILD = ChildCreate(name="Léa", date_of_birth=date(2024, 1, 15), sex="female")


async def test_create_child(db):
    child = await create_child(db, _CHILD)
    assert child.id is not None
    assert child.name == "Léa"
    assert child.sex == "female"
    assert child.image_url is None
    assert child.created_at is not None


async def test_get_child(db):
    created = await create_child(db, _CHILD)
    fetched = await get_child(db, created.id)
    assert fetched == created


async def test_get_child_not_found(db):
    assert await get_child(db, 9999) is None


async def test_get_all_children(db):
    assert await get_all_children(db) == []
    await create_child(db, _CHILD)
    await create_child(db, ChildCreate(name="Tom", date_of_birth=date(2023, 6, 1), sex="male"))
    children = await get_all_children(db)
    assert [c.name for c in children] == ["Léa", "Tom"]


async def test_update_child(db):
    created = await create_child(db, _CHILD)
    updated = await update_child(
        db, created.id, ChildUpdate(name="Léa Marie", date_of_birth=date(2024, 1, 16))
    )
    assert updated.name == "Léa Marie"
    assert updated.date_of_birth == date(2024, 1, 16)
    assert updated.sex == "female"


async def test_partial_update_keeps_other_fields(db):
    created = await create_child(
        db, ChildCreate(name="Tom", date_of_birth=date(2023, 6, 1), sex="male", image_url="tom.png")
    )
    updated = await update_child(db, created.id, ChildUpdate(sex="other"))
    assert updated.image_url == "tom.png"
    assert updated.date_of_birth == date(2023, 6, 1)
    assert updated.sex == "other"


async def test_update_child_no_fields(db):
    created = await create_child(db, _CHILD)
    assert await update_child(db, created.id, ChildUpdate()) == created


async def test_update_child_not_found(db):
    assert await update_child(db, 9999, ChildUpdate(name="Ghost")) is None


async def test_delete_child(db):
    created = await create_child(db, _CHILD)
    assert await delete_child(db, created.id) is True
    assert await get_child(db, created.id) is None
    assert await delete_child(db, created.id) is False


async def test_age_in_months(db):
    full = await create_child(db, _CHILD)
    assert full.age_in_months(date(2024, 7, 14)) == 5
    assert full.age_in_months(date(2024, 7, 15)) == 6
    assert full.age_in_months(date(2023, 12, 1)) == 0
