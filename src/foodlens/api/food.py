"""Food entry endpoints scoped to the caller."""

from fastapi import APIRouter, Depends, status

from foodlens.api.deps import get_container, require_owner
from foodlens.api.models import (
    FoodEntryIn,
    FoodEntryOut,
    FoodEntryPatch,
    MessageResponse,
)
from foodlens.containers import AppContainer
from foodlens.domain.auth import RequestContext

router = APIRouter(prefix="/food", tags=["food"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_food(
    body: FoodEntryIn,
    context: RequestContext = Depends(require_owner),
    container: AppContainer = Depends(get_container),
) -> FoodEntryOut:
    """Log a new entry for the caller."""
    entry = container.food_service.create(context, body.to_draft())
    return FoodEntryOut.from_entry(entry)


@router.get("")
async def list_food(
    context: RequestContext = Depends(require_owner),
    container: AppContainer = Depends(get_container),
) -> list[FoodEntryOut]:
    """Return the caller's history, newest first."""
    entries = container.food_service.list_entries(context)
    return [FoodEntryOut.from_entry(entry) for entry in entries]


@router.get("/{entry_id}")
async def get_food(
    entry_id: str,
    context: RequestContext = Depends(require_owner),
    container: AppContainer = Depends(get_container),
) -> FoodEntryOut:
    """Return one of the caller's entries."""
    entry = container.food_service.get(context, entry_id)
    return FoodEntryOut.from_entry(entry)


@router.patch("/{entry_id}")
async def update_food(
    entry_id: str,
    body: FoodEntryPatch,
    context: RequestContext = Depends(require_owner),
    container: AppContainer = Depends(get_container),
) -> FoodEntryOut:
    """Apply user edits to one of the caller's entries."""
    entry = container.food_service.update(context, entry_id, body.to_update())
    return FoodEntryOut.from_entry(entry)


@router.delete("/{entry_id}")
async def delete_food(
    entry_id: str,
    context: RequestContext = Depends(require_owner),
    container: AppContainer = Depends(get_container),
) -> MessageResponse:
    """Delete one of the caller's entries."""
    container.food_service.delete(context, entry_id)
    return MessageResponse(message=f"Food with ID {entry_id} deleted successfully")
