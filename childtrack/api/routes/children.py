"""CRUD endpoints for children."""

from fastapi import APIRouter, HTTPException, status

from childtrack.api.dependencies import DbDep
from childtrack.models.child import Child, ChildCreate, ChildUpdate
from childtrack.services import child_service

router = APIRouter(prefix="/children", tags=["children"])


@router.post("", response_model=Child, status_code=status.HTTP_201_CREATED)
async def create_child(payload: ChildCreate, db: DbDep) -> Child:
    """Register a new child."""
    return await child_service.create_child(db, payload)


@router.get("", response_model=list[Child])
async def list_children(db: DbDep) -> list[Child]:
    """Return all registered children."""
    return await child_service.get_all_children(db)


@router.get("/{child_id}", response_model=Child)
async def get_child(child_id: int, db: DbDep) -> Child:
    """Return a child by its identifier."""
    child = await child_service.get_child(db, child_id)
    if not child:
        raise HTTPException(status_code=404, detail=f"Child {child_id} not found")
    return child


@router.patch("/{child_id}", response_model=Child)
async def update_child(child_id: int, payload: ChildUpdate, db: DbDep) -> Child:
    """Update a child's profile (partial fields)."""
    child = await child_service.update_child(db, child_id, payload)
    if not child:
        raise HTTPException(status_code=404, detail=f"Child {child_id} not found")
    return child


@router.delete("/{child_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_child(child_id: int, db: DbDep) -> None:
    """Delete a child with all its events and reports (cascade)."""
    deleted = await child_service.delete_child(db, child_id)
    if not deleted:
        raise HTTPException(status_code=404, detail=f"Child {child_id} not found")
