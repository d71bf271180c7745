"""Supabase Auth implementation of the auth provider."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from uuid import UUID

from supabase import AuthError as SupabaseAuthError
from supabase import Client

from foodlens.domain.auth import AuthResult, AuthSession, AuthUser
from foodlens.domain.errors import AuthError
from foodlens.services.auth import AuthProvider

logger = logging.getLogger(__name__)


@dataclass
class SupabaseAuthProvider(AuthProvider):
    """Thin pass-through to Supabase Auth.

    Calls that establish a session or start OAuth run on a fresh client from
    ``new_client`` so sessions and PKCE verifiers never leak between
    requests. ``new_client`` uses the implicit flow, so the OAuth redirect
    carries tokens; a code is exchanged only with the verifier its caller
    sends back.
    """

    client: Client
    admin_client: Client
    new_client: Callable[[], Client]

    def sign_up(self, email: str, password: str) -> AuthResult:
        """Create an account."""
        try:
            response = self.new_client().auth.sign_up(
                {"email": email, "password": password}
            )
        except SupabaseAuthError as exc:
            raise AuthError(exc.message) from exc
        return _to_result(response.user, response.session)

    def sign_in_with_password(self, email: str, password: str) -> AuthResult:
        """Start a session with email and password."""
        try:
            response = self.new_client().auth.sign_in_with_password(
                {"email": email, "password": password}
            )
        except SupabaseAuthError as exc:
            raise AuthError(exc.message) from exc
        return _to_result(response.user, response.session)

    def authorization_url(
        self, provider: str, redirect_uri: str, query_params: dict[str, str]
    ) -> str:
        """Return the provider URL that starts an OAuth sign-in."""
        try:
            response = self.new_client().auth.sign_in_with_oauth(
                {
                    "provider": provider,
                    "options": {
                        "redirect_to": redirect_uri,
                        "query_params": query_params,
                    },
                }
            )
        except SupabaseAuthError as exc:
            raise AuthError(exc.message) from exc
        return response.url

    def set_session(self, access_token: str, refresh_token: str | None) -> AuthResult:
        """Adopt tokens returned by an implicit OAuth flow."""
        try:
            response = self.new_client().auth.set_session(
                access_token, refresh_token or ""
            )
        except SupabaseAuthError as exc:
            raise AuthError(f"OAuth callback failed: {exc.message}") from exc
        return _to_result(response.user, response.session)

    def exchange_code(
        self, code: str, redirect_uri: str | None, code_verifier: str | None
    ) -> AuthResult:
        """Exchange an authorization code for a session."""
        params: dict[str, str] = {"auth_code": code}
        if code_verifier:
            params["code_verifier"] = code_verifier
        if redirect_uri:
            params["redirect_to"] = redirect_uri
        try:
            response = self.new_client().auth.exchange_code_for_session(params)
        except SupabaseAuthError as exc:
            raise AuthError(f"OAuth callback failed: {exc.message}") from exc
        return _to_result(response.user, response.session)

    def refresh_session(self, refresh_token: str) -> AuthResult:
        """Issue a new session from a refresh token."""
        try:
            response = self.new_client().auth.refresh_session(refresh_token)
        except SupabaseAuthError as exc:
            raise AuthError(exc.message) from exc
        return _to_result(response.user, response.session)

    def get_user(self, access_token: str) -> AuthUser:
        """Return the user a token belongs to."""
        try:
            response = self.client.auth.get_user(access_token)
        except SupabaseAuthError as exc:
            raise AuthError(exc.message) from exc
        if response is None or response.user is None:
            raise AuthError("Invalid token")
        return _to_user(response.user)

    def sign_out(self, access_token: str) -> None:
        """Invalidate every session of the token's user."""
        try:
            self.admin_client.auth.admin.sign_out(access_token)
        except SupabaseAuthError as exc:
            raise AuthError(exc.message) from exc


def _to_result(user: object, session: object) -> AuthResult:
    if user is None:
        raise AuthError("No user found")
    return AuthResult(user=_to_user(user), session=_to_session(session))


def _to_user(user: object) -> AuthUser:
    user_metadata = getattr(user, "user_metadata", None) or {}
    app_metadata = getattr(user, "app_metadata", None) or {}
    email = getattr(user, "email", None)
    return AuthUser(
        id=UUID(str(getattr(user, "id"))),
        email=email,
        name=user_metadata.get("full_name") or user_metadata.get("name") or email,
        avatar_url=user_metadata.get("avatar_url"),
        provider=app_metadata.get("provider"),
    )


def _to_session(session: object) -> AuthSession | None:
    if session is None:
        return None
    return AuthSession(
        access_token=getattr(session, "access_token"),
        refresh_token=getattr(session, "refresh_token", None),
        expires_in=getattr(session, "expires_in", None),
    )
