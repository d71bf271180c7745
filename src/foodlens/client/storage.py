"""Durable key-value storage for the client."""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from foodlens.domain.auth import AuthSession

logger = logging.getLogger(__name__)

ACCESS_TOKEN_KEY = "access_token"
REFRESH_TOKEN_KEY = "refresh_token"


class KeyValueStore(Protocol):
    """String key-value storage."""

    def get(self, key: str) -> str | None:
        """Return the stored value, if present."""

    def set(self, key: str, value: str) -> None:
        """Store a value."""

    def delete(self, key: str) -> None:
        """Remove a value if present."""


@dataclass
class InMemoryKeyValueStore(KeyValueStore):
    """Process-local store."""

    values: dict[str, str] = field(default_factory=dict)

    def get(self, key: str) -> str | None:
        """Return the stored value, if present."""
        return self.values.get(key)

    def set(self, key: str, value: str) -> None:
        """Store a value."""
        self.values[key] = value

    def delete(self, key: str) -> None:
        """Remove a value if present."""
        self.values.pop(key, None)


@dataclass
class JsonFileKeyValueStore(KeyValueStore):
    """Store persisted as a single JSON object on disk."""

    path: Path

    def get(self, key: str) -> str | None:
        """Return the stored value, if present."""
        return self._read().get(key)

    def set(self, key: str, value: str) -> None:
        """Store a value and flush the file."""
        values = self._read()
        values[key] = value
        self._write(values)

    def delete(self, key: str) -> None:
        """Remove a value and flush the file."""
        values = self._read()
        if values.pop(key, None) is not None:
            self._write(values)

    def _read(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            logger.warning(
                "Ignoring corrupt storage file", extra={"path": str(self.path)}
            )
            return {}
        if not isinstance(raw, dict):
            return {}
        return {str(key): str(value) for key, value in raw.items()}

    def _write(self, values: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(values), encoding="utf-8")
        tmp_path.replace(self.path)


@dataclass
class TokenStore:
    """Holds the single stored access/refresh token pair."""

    store: KeyValueStore

    @property
    def access_token(self) -> str | None:
        """Return the stored access token."""
        return self.store.get(ACCESS_TOKEN_KEY)

    @property
    def refresh_token(self) -> str | None:
        """Return the stored refresh token."""
        return self.store.get(REFRESH_TOKEN_KEY)

    def save(self, session: AuthSession) -> None:
        """Persist a session's tokens."""
        self.store.set(ACCESS_TOKEN_KEY, session.access_token)
        if session.refresh_token:
            self.store.set(REFRESH_TOKEN_KEY, session.refresh_token)
        else:
            self.store.delete(REFRESH_TOKEN_KEY)

    def clear(self) -> None:
        """Forget the stored tokens."""
        self.store.delete(ACCESS_TOKEN_KEY)
        self.store.delete(REFRESH_TOKEN_KEY)
