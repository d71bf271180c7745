"""Supabase repository for food entries."""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from uuid import UUID

from supabase import Client

from foodlens.domain.auth import RequestContext
from foodlens.domain.food import (
    COLUMN_BY_ATTRIBUTE,
    WRITABLE_ATTRIBUTES,
    FoodEntry,
    FoodEntryDraft,
    FoodEntryUpdate,
    MealType,
    NutritionFacts,
)
from foodlens.services.food import FoodRepository

_TABLE = "foods"


@dataclass
class SupabaseFoodRepository(FoodRepository):
    """Supabase implementation for food entries.

    ``client_for`` returns a client whose requests carry the caller's bearer
    token, so row-level security applies on top of the user_id filters.
    """

    client_for: Callable[[str], Client]

    def create_entry(
        self, context: RequestContext, draft: FoodEntryDraft, timestamp: datetime
    ) -> FoodEntry:
        """Insert an entry row and return it."""
        payload = _to_columns(draft, skip_none=False)
        payload[COLUMN_BY_ATTRIBUTE["timestamp"]] = timestamp.isoformat()
        payload[COLUMN_BY_ATTRIBUTE["user_id"]] = str(context.user_id)
        if payload.get(COLUMN_BY_ATTRIBUTE["additional_notes"]) is None:
            payload[COLUMN_BY_ATTRIBUTE["additional_notes"]] = []
        client = self.client_for(context.access_token)
        response = client.table(_TABLE).insert(payload).execute()
        if not response.data:
            raise RuntimeError("Failed to create food entry")
        return _parse_entry(response.data[0])

    def list_entries(self, context: RequestContext) -> list[FoodEntry]:
        """Return the caller's entries ordered by meal time, newest first."""
        response = (
            self.client_for(context.access_token)
            .table(_TABLE)
            .select("*")
            .eq("user_id", str(context.user_id))
            .order("timestamp", desc=True)
            .execute()
        )
        return [_parse_entry(row) for row in response.data or []]

    def get_entry(self, context: RequestContext, entry_id: UUID) -> FoodEntry | None:
        """Return an owned entry by id."""
        response = (
            self.client_for(context.access_token)
            .table(_TABLE)
            .select("*")
            .eq("id", str(entry_id))
            .eq("user_id", str(context.user_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_entry(response.data[0])

    def update_entry(
        self, context: RequestContext, entry_id: UUID, changes: FoodEntryUpdate
    ) -> FoodEntry | None:
        """Update an owned entry and return the stored row."""
        payload = _to_columns(changes, skip_none=True)
        response = (
            self.client_for(context.access_token)
            .table(_TABLE)
            .update(payload)
            .eq("id", str(entry_id))
            .eq("user_id", str(context.user_id))
            .execute()
        )
        if not response.data:
            return None
        return _parse_entry(response.data[0])

    def delete_entry(self, context: RequestContext, entry_id: UUID) -> bool:
        """Delete an owned entry."""
        response = (
            self.client_for(context.access_token)
            .table(_TABLE)
            .delete()
            .eq("id", str(entry_id))
            .eq("user_id", str(context.user_id))
            .execute()
        )
        return bool(response.data)


def _to_columns(
    source: FoodEntryDraft | FoodEntryUpdate, skip_none: bool
) -> dict[str, object]:
    payload: dict[str, object] = {}
    for attribute in WRITABLE_ATTRIBUTES:
        value = getattr(source, attribute)
        if value is None and skip_none:
            continue
        payload[COLUMN_BY_ATTRIBUTE[attribute]] = _to_column_value(value)
    return payload


def _to_column_value(value: object) -> object:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, NutritionFacts):
        return value.to_dict()
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, list):
        return list(value)
    return value


def _parse_entry(row: dict[str, object]) -> FoodEntry:
    def column(attribute: str) -> object:
        return row.get(COLUMN_BY_ATTRIBUTE[attribute])

    meal_type = column("meal_type")
    notes = column("notes")
    nutrition = column("nutrition")
    additional_notes = column("additional_notes") or []
    created_at = _parse_datetime(column("created_at"))
    return FoodEntry(
        id=UUID(str(column("id"))),
        user_id=UUID(str(column("user_id"))),
        created_at=created_at,
        timestamp=_parse_datetime(column("timestamp"), default=created_at),
        identified_food=str(column("identified_food") or ""),
        image=str(column("image") or ""),
        portion_size=str(column("portion_size") or ""),
        recognized_serving_size=str(column("recognized_serving_size") or ""),
        nutrition=NutritionFacts.from_dict(
            nutrition if isinstance(nutrition, dict) else None
        ),
        meal_type=MealType(meal_type) if meal_type else None,
        notes=str(notes) if notes is not None else None,
        additional_notes=[str(note) for note in additional_notes],
    )


def _parse_datetime(value: object, default: datetime | None = None) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str) and value:
        return datetime.fromisoformat(value)
    return default or datetime.now(tz=UTC)
