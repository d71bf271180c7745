"""Authentication flows delegated to a hosted auth provider."""

import logging
from dataclasses import dataclass
from typing import Protocol

from foodlens.domain.auth import AuthResult, AuthSession, AuthUser
from foodlens.domain.errors import AuthError

logger = logging.getLogger(__name__)

REGISTRATION_MESSAGE = (
    "Registration successful. Please check your email to verify your account."
)


class AuthProvider(Protocol):
    """Interface for a hosted auth-as-a-service provider.

    Implementations raise ``AuthError`` for any rejected request.
    """

    def sign_up(self, email: str, password: str) -> AuthResult:
        """Create an account."""

    def sign_in_with_password(self, email: str, password: str) -> AuthResult:
        """Start a session with email and password."""

    def authorization_url(
        self, provider: str, redirect_uri: str, query_params: dict[str, str]
    ) -> str:
        """Return the provider URL that starts an OAuth sign-in."""

    def set_session(self, access_token: str, refresh_token: str | None) -> AuthResult:
        """Adopt tokens returned by an implicit OAuth flow."""

    def exchange_code(
        self, code: str, redirect_uri: str | None, code_verifier: str | None
    ) -> AuthResult:
        """Exchange an authorization code for a session."""

    def refresh_session(self, refresh_token: str) -> AuthResult:
        """Issue a new session from a refresh token."""

    def get_user(self, access_token: str) -> AuthUser:
        """Return the user a token belongs to."""

    def sign_out(self, access_token: str) -> None:
        """Invalidate the session behind a token."""


class ProfileRepository(Protocol):
    """Persistence interface for user profile rows."""

    def ensure_profile(self, user: AuthUser) -> None:
        """Create the profile row for a user unless it already exists."""


@dataclass
class AuthService:
    """Application service for sign-up, sign-in and token checks."""

    provider: AuthProvider
    profiles: ProfileRepository
    oauth_provider: str = "google"
    default_redirect_uri: str = "foodlens://auth/callback"

    def register(self, email: str, password: str) -> AuthResult:
        """Create an account and its profile row."""
        result = self.provider.sign_up(email, password)
        self.profiles.ensure_profile(result.user)
        logger.info("Registered user", extra={"user_id": str(result.user.id)})
        return AuthResult(
            user=result.user, session=result.session, message=REGISTRATION_MESSAGE
        )

    def login(self, email: str, password: str) -> AuthResult:
        """Sign in with email and password."""
        return self.provider.sign_in_with_password(email, password)

    def authorization_url(self, redirect_uri: str | None = None) -> str:
        """Return the OAuth authorization URL for the configured provider."""
        return self.provider.authorization_url(
            self.oauth_provider,
            redirect_uri or self.default_redirect_uri,
            {"access_type": "offline", "prompt": "consent"},
        )

    def complete_callback(
        self, access_token: str, refresh_token: str | None = None
    ) -> AuthResult:
        """Adopt implicit-flow tokens and make sure the profile exists."""
        result = self.provider.set_session(access_token, refresh_token)
        self.profiles.ensure_profile(result.user)
        session = result.session or AuthSession(
            access_token=access_token, refresh_token=refresh_token
        )
        return AuthResult(user=result.user, session=session)

    def exchange_code(
        self,
        code: str,
        redirect_uri: str | None = None,
        code_verifier: str | None = None,
    ) -> AuthResult:
        """Exchange an authorization code and make sure the profile exists."""
        result = self.provider.exchange_code(code, redirect_uri, code_verifier)
        if result.session is None:
            raise AuthError("OAuth callback failed: no session returned")
        self.profiles.ensure_profile(result.user)
        return result

    def refresh(self, refresh_token: str) -> AuthResult:
        """Refresh a session."""
        return self.provider.refresh_session(refresh_token)

    def verify(self, access_token: str) -> AuthUser:
        """Return the user for a bearer token."""
        if not access_token:
            raise AuthError("Invalid token")
        try:
            return self.provider.get_user(access_token)
        except AuthError as exc:
            logger.info("Token verification failed: %s", exc.message)
            raise AuthError("Invalid token") from exc

    def logout(self, access_token: str) -> None:
        """Invalidate the hosted session."""
        self.provider.sign_out(access_token)
