"""Per-user local copy of the food history."""

import json
import logging
from dataclasses import dataclass
from uuid import UUID

from pydantic import TypeAdapter, ValidationError

from foodlens.api.models import FoodEntryOut
from foodlens.client.api_client import FoodLensApi
from foodlens.client.storage import KeyValueStore
from foodlens.domain.auth import RequestContext
from foodlens.domain.food import FoodEntry

logger = logging.getLogger(__name__)

_ENTRIES = TypeAdapter(list[FoodEntryOut])


def history_key(user_id: UUID) -> str:
    """Return the storage key holding a user's history."""
    return f"history:{user_id}"


@dataclass
class HistoryCache:
    """Serves the stored history immediately and replaces it from the server.

    The server list is authoritative: a refresh overwrites the local copy,
    including with an empty list.
    """

    store: KeyValueStore
    api: FoodLensApi

    def cached(self, user_id: UUID) -> list[FoodEntry]:
        """Return the local copy without touching the network."""
        raw = self.store.get(history_key(user_id))
        if not raw:
            return []
        try:
            entries = _ENTRIES.validate_json(raw)
        except ValidationError:
            logger.warning("Dropping unreadable history", extra={"user": str(user_id)})
            self.store.delete(history_key(user_id))
            return []
        return [entry.to_entry() for entry in entries]

    async def refresh(self, context: RequestContext) -> list[FoodEntry]:
        """Fetch the server list and store it as the local copy."""
        entries = await self.api.list_food(context.access_token)
        self._write(context.user_id, entries)
        return entries

    def put(self, user_id: UUID, entry: FoodEntry) -> list[FoodEntry]:
        """Insert or replace an entry locally, newest first."""
        entries = [item for item in self.cached(user_id) if item.id != entry.id]
        entries.append(entry)
        entries.sort(key=lambda item: item.timestamp, reverse=True)
        self._write(user_id, entries)
        return entries

    def discard(self, user_id: UUID, entry_id: UUID) -> list[FoodEntry]:
        """Remove an entry locally."""
        entries = [item for item in self.cached(user_id) if item.id != entry_id]
        self._write(user_id, entries)
        return entries

    def clear(self, user_id: UUID) -> None:
        """Forget a user's history."""
        self.store.delete(history_key(user_id))

    def _write(self, user_id: UUID, entries: list[FoodEntry]) -> None:
        rows = [
            FoodEntryOut.from_entry(entry).model_dump(by_alias=True, mode="json")
            for entry in entries
        ]
        self.store.set(history_key(user_id), json.dumps(rows))
