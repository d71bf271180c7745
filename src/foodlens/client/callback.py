"""Handles OAuth login-callback deep links."""

import logging
from dataclasses import dataclass
from enum import StrEnum

from foodlens.client.api_client import FoodLensApi
from foodlens.client.auth_state import AuthStateContainer, AuthStatus
from foodlens.client.deep_link import (
    AuthCode,
    CallbackError,
    ImplicitTokens,
    parse_callback_url,
)
from foodlens.client.history import HistoryCache
from foodlens.client.storage import TokenStore
from foodlens.domain.auth import AuthResult, AuthUser, RequestContext
from foodlens.domain.errors import AuthError, FoodLensError

logger = logging.getLogger(__name__)


class Destination(StrEnum):
    """Screen to show after a callback is handled."""

    LOGIN = "login"
    APP_SHELL = "app_shell"


@dataclass(frozen=True)
class CallbackOutcome:
    """Where to navigate and who signed in."""

    destination: Destination
    user: AuthUser | None = None
    error: str | None = None


@dataclass
class OAuthCallbackHandler:
    """Completes an OAuth sign-in from the redirect URL."""

    api: FoodLensApi
    tokens: TokenStore
    auth_state: AuthStateContainer
    history: HistoryCache

    async def handle(self, url: str) -> CallbackOutcome:
        """Exchange the callback credentials and start the session."""
        result = parse_callback_url(url)
        if self.auth_state.status is not AuthStatus.AUTHENTICATING:
            self.auth_state.begin()

        if isinstance(result, CallbackError):
            message = result.description or result.error
            logger.info("OAuth callback rejected", extra={"error": result.error})
            self.auth_state.fail(message)
            return CallbackOutcome(destination=Destination.LOGIN, error=message)

        try:
            auth = await self._exchange(result)
            if auth.session is None:
                raise AuthError("No session returned")
            self.tokens.save(auth.session)
            user = await self._verify_stored_token()
        except FoodLensError as exc:
            logger.warning("OAuth callback failed: %s", exc.message)
            self.tokens.clear()
            self.auth_state.fail(exc.message)
            return CallbackOutcome(destination=Destination.LOGIN, error=exc.message)

        self.auth_state.succeed(user, auth.session)
        await self._refresh_history(RequestContext(user, auth.session.access_token))
        return CallbackOutcome(destination=Destination.APP_SHELL, user=user)

    async def _exchange(self, result: AuthCode | ImplicitTokens) -> AuthResult:
        if isinstance(result, AuthCode):
            return await self.api.oauth_callback(code=result.code)
        return await self.api.oauth_callback(
            access_token=result.access_token, refresh_token=result.refresh_token
        )

    async def _verify_stored_token(self) -> AuthUser:
        access_token = self.tokens.access_token
        if not access_token:
            raise AuthError("No stored token")
        return await self.api.verify(access_token)

    async def _refresh_history(self, context: RequestContext) -> None:
        try:
            await self.history.refresh(context)
        except FoodLensError:
            logger.exception(
                "History refresh failed", extra={"user": str(context.user_id)}
            )
