"""Food entry service scoped to the owning user."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol
from uuid import UUID

from foodlens.domain.auth import RequestContext
from foodlens.domain.errors import NotFoundError
from foodlens.domain.food import FoodEntry, FoodEntryDraft, FoodEntryUpdate

logger = logging.getLogger(__name__)


class FoodRepository(Protocol):
    """Persistence interface for food entries.

    Every method filters on ``context.user_id`` and returns ``None`` or
    ``False`` when no owned row matches.
    """

    def create_entry(
        self, context: RequestContext, draft: FoodEntryDraft, timestamp: datetime
    ) -> FoodEntry:
        """Insert an entry and return the stored row."""

    def list_entries(self, context: RequestContext) -> list[FoodEntry]:
        """Return the caller's entries, newest first."""

    def get_entry(self, context: RequestContext, entry_id: UUID) -> FoodEntry | None:
        """Return an owned entry by id."""

    def update_entry(
        self, context: RequestContext, entry_id: UUID, changes: FoodEntryUpdate
    ) -> FoodEntry | None:
        """Apply changes to an owned entry and return the stored row."""

    def delete_entry(self, context: RequestContext, entry_id: UUID) -> bool:
        """Delete an owned entry; return true when a row was removed."""


@dataclass
class FoodService:
    """CRUD over food entries with uniform not-found semantics."""

    repository: FoodRepository

    def create(self, context: RequestContext, draft: FoodEntryDraft) -> FoodEntry:
        """Store a new entry for the caller."""
        timestamp = draft.timestamp or datetime.now(tz=UTC)
        entry = self.repository.create_entry(context, draft, timestamp)
        logger.info(
            "Created food entry",
            extra={"user_id": str(context.user_id), "entry_id": str(entry.id)},
        )
        return entry

    def list_entries(self, context: RequestContext) -> list[FoodEntry]:
        """Return the caller's history."""
        return self.repository.list_entries(context)

    def get(self, context: RequestContext, entry_id: str | UUID) -> FoodEntry:
        """Return one of the caller's entries."""
        parsed = _parse_entry_id(entry_id)
        entry = self.repository.get_entry(context, parsed)
        if entry is None:
            raise NotFoundError()
        return entry

    def update(
        self, context: RequestContext, entry_id: str | UUID, changes: FoodEntryUpdate
    ) -> FoodEntry:
        """Apply user edits to one of the caller's entries."""
        parsed = _parse_entry_id(entry_id)
        existing = self.repository.get_entry(context, parsed)
        if existing is None:
            raise NotFoundError()
        if changes.is_empty():
            return existing
        updated = self.repository.update_entry(context, parsed, changes)
        if updated is None:
            raise NotFoundError()
        return updated

    def delete(self, context: RequestContext, entry_id: str | UUID) -> None:
        """Delete one of the caller's entries."""
        parsed = _parse_entry_id(entry_id)
        if self.repository.get_entry(context, parsed) is None:
            raise NotFoundError()
        if not self.repository.delete_entry(context, parsed):
            raise NotFoundError()
        logger.info(
            "Deleted food entry",
            extra={"user_id": str(context.user_id), "entry_id": str(parsed)},
        )


def _parse_entry_id(entry_id: str | UUID) -> UUID:
    if isinstance(entry_id, UUID):
        return entry_id
    try:
        return UUID(entry_id)
    except (TypeError, ValueError) as exc:
        raise NotFoundError() from exc
