"""Domain models for authentication."""

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True)
class AuthUser:
    """Identity of an authenticated account."""

    id: UUID
    email: str | None
    name: str | None = None
    avatar_url: str | None = None
    provider: str | None = None


@dataclass(frozen=True)
class AuthSession:
    """Access and refresh tokens issued by the auth provider."""

    access_token: str
    refresh_token: str | None = None
    expires_in: int | None = None


@dataclass(frozen=True)
class AuthResult:
    """Outcome of a sign-up, sign-in or callback exchange."""

    user: AuthUser
    session: AuthSession | None
    message: str | None = None


@dataclass(frozen=True)
class RequestContext:
    """Caller identity and bearer token for one request."""

    user: AuthUser
    access_token: str

    @property
    def user_id(self) -> UUID:
        """Return the owning-user id used to scope queries."""
        return self.user.id
