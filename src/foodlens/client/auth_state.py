"""Authenticated-state container for the client."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import StrEnum

from foodlens.domain.auth import AuthSession, AuthUser

logger = logging.getLogger(__name__)


class AuthStatus(StrEnum):
    """Lifecycle of the client's authentication."""

    ANONYMOUS = "anonymous"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"
    ERROR = "error"


_ALLOWED: dict[AuthStatus, frozenset[AuthStatus]] = {
    AuthStatus.ANONYMOUS: frozenset({AuthStatus.AUTHENTICATING}),
    AuthStatus.AUTHENTICATING: frozenset(
        {AuthStatus.AUTHENTICATED, AuthStatus.ERROR}
    ),
    AuthStatus.AUTHENTICATED: frozenset({AuthStatus.AUTHENTICATING}),
    AuthStatus.ERROR: frozenset({AuthStatus.AUTHENTICATING}),
}


class AuthStateError(Exception):
    """Raised for a transition the state machine does not allow."""


@dataclass(frozen=True)
class AuthSnapshot:
    """Immutable view of the auth state."""

    status: AuthStatus = AuthStatus.ANONYMOUS
    user: AuthUser | None = None
    session: AuthSession | None = None
    error: str | None = None

    @property
    def is_authenticated(self) -> bool:
        """Return true when a user and session are present."""
        return self.status is AuthStatus.AUTHENTICATED


Listener = Callable[[AuthSnapshot], None]


@dataclass
class AuthStateContainer:
    """Single owner of the client's auth state.

    Transitions: anonymous -> authenticating -> authenticated | error.
    ``reset`` returns to anonymous from any state.
    """

    snapshot: AuthSnapshot = field(default_factory=AuthSnapshot)
    listeners: list[Listener] = field(default_factory=list)

    @property
    def status(self) -> AuthStatus:
        """Return the current status."""
        return self.snapshot.status

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener and return a function that removes it."""
        self.listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self.listeners:
                self.listeners.remove(listener)

        return unsubscribe

    def begin(self) -> None:
        """Enter the authenticating state."""
        self._transition(AuthSnapshot(status=AuthStatus.AUTHENTICATING))

    def succeed(self, user: AuthUser, session: AuthSession) -> None:
        """Enter the authenticated state."""
        self._transition(
            AuthSnapshot(status=AuthStatus.AUTHENTICATED, user=user, session=session)
        )

    def fail(self, message: str) -> None:
        """Enter the error state."""
        self._transition(AuthSnapshot(status=AuthStatus.ERROR, error=message))

    def reset(self) -> None:
        """Return to the anonymous state."""
        self._apply(AuthSnapshot())

    def _transition(self, target: AuthSnapshot) -> None:
        if target.status not in _ALLOWED[self.snapshot.status]:
            raise AuthStateError(
                f"Cannot move from {self.snapshot.status} to {target.status}"
            )
        self._apply(target)

    def _apply(self, target: AuthSnapshot) -> None:
        logger.debug("Auth state %s -> %s", self.snapshot.status, target.status)
        self.snapshot = target
        for listener in list(self.listeners):
            listener(target)
