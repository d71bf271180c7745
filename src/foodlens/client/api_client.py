"""HTTP client for the FoodLens service."""

from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

import httpx

from foodlens.api.models import (
    AnalyzeRequest,
    AnalyzeResponse,
    AuthResponse,
    FoodEntryIn,
    FoodEntryOut,
    FoodEntryPatch,
    GoogleLoginResponse,
    ImagePart,
    VerifyResponse,
)
from foodlens.domain.analysis import FoodAnalysis, InlineImage
from foodlens.domain.auth import AuthResult, AuthUser
from foodlens.domain.errors import (
    AuthError,
    FoodLensError,
    InvalidImageError,
    NotFoundError,
    RateLimitedError,
)
from foodlens.domain.food import FoodEntry, FoodEntryDraft, FoodEntryUpdate

_ERRORS_BY_STATUS: dict[int, type[FoodLensError]] = {
    400: InvalidImageError,
    401: AuthError,
    404: NotFoundError,
    429: RateLimitedError,
}


class FoodLensApi(Protocol):
    """Interface for calls to the FoodLens service."""

    async def analyze(self, image: InlineImage) -> FoodAnalysis:
        """Analyze a food photo."""

    async def register(self, email: str, password: str) -> AuthResult:
        """Create an account."""

    async def login(self, email: str, password: str) -> AuthResult:
        """Sign in with email and password."""

    async def google_login_url(self, redirect_uri: str | None = None) -> str:
        """Return the provider URL that starts a Google sign-in."""

    async def oauth_callback(
        self,
        access_token: str | None = None,
        refresh_token: str | None = None,
        code: str | None = None,
    ) -> AuthResult:
        """Complete an OAuth sign-in on the server."""

    async def refresh(self, refresh_token: str) -> AuthResult:
        """Issue a new session from a refresh token."""

    async def verify(self, access_token: str) -> AuthUser:
        """Return the user a token belongs to."""

    async def logout(self, access_token: str) -> None:
        """End the session on the server."""

    async def list_food(self, access_token: str) -> list[FoodEntry]:
        """Return the caller's entries, newest first."""

    async def create_food(self, access_token: str, draft: FoodEntryDraft) -> FoodEntry:
        """Store a new entry."""

    async def update_food(
        self, access_token: str, entry_id: UUID, changes: FoodEntryUpdate
    ) -> FoodEntry:
        """Apply a partial update to an entry."""

    async def delete_food(self, access_token: str, entry_id: UUID) -> None:
        """Delete an entry."""


@dataclass
class HttpxFoodLensClient:
    """FoodLens client implemented with httpx."""

    http_client: httpx.AsyncClient
    login_timeout: float = 10.0

    @classmethod
    def create(
        cls,
        base_url: str,
        timeout: float = 30.0,
        login_timeout: float = 10.0,
    ) -> "HttpxFoodLensClient":
        """Create a client with a managed httpx session."""
        return cls(
            http_client=httpx.AsyncClient(base_url=base_url, timeout=timeout),
            login_timeout=login_timeout,
        )

    async def close(self) -> None:
        """Close the underlying HTTP client session."""
        await self.http_client.aclose()

    async def analyze(self, image: InlineImage) -> FoodAnalysis:
        """Send a photo to ``POST /api/analyze``."""
        body = AnalyzeRequest(image=ImagePart(inline_data=image))
        response = await self._send(
            "POST", "/api/analyze", json=body.model_dump(by_alias=True)
        )
        return AnalyzeResponse.model_validate(_json(response)).data.food_analysis

    async def register(self, email: str, password: str) -> AuthResult:
        """Create an account."""
        response = await self._send(
            "POST", "/auth/register", json={"email": email, "password": password}
        )
        return AuthResponse.model_validate(_json(response)).to_result()

    async def login(self, email: str, password: str) -> AuthResult:
        """Sign in with email and password."""
        response = await self._send(
            "POST",
            "/auth/login",
            json={"email": email, "password": password},
            timeout=self.login_timeout,
        )
        return AuthResponse.model_validate(_json(response)).to_result()

    async def google_login_url(self, redirect_uri: str | None = None) -> str:
        """Return the provider URL that starts a Google sign-in."""
        payload = {"redirectUri": redirect_uri} if redirect_uri else {}
        response = await self._send("POST", "/auth/login/google", json=payload)
        return GoogleLoginResponse.model_validate(_json(response)).url

    async def oauth_callback(
        self,
        access_token: str | None = None,
        refresh_token: str | None = None,
        code: str | None = None,
    ) -> AuthResult:
        """Complete an OAuth sign-in with tokens or an authorization code."""
        if code:
            payload: dict[str, str] = {"code": code}
        elif access_token:
            payload = {"access_token": access_token}
            if refresh_token:
                payload["refresh_token"] = refresh_token
        else:
            raise AuthError("access_token or code is required")
        response = await self._send("POST", "/auth/auth/callback", json=payload)
        return AuthResponse.model_validate(_json(response)).to_result()

    async def refresh(self, refresh_token: str) -> AuthResult:
        """Issue a new session from a refresh token."""
        response = await self._send(
            "POST", "/auth/refresh", json={"refresh_token": refresh_token}
        )
        return AuthResponse.model_validate(_json(response)).to_result()

    async def verify(self, access_token: str) -> AuthUser:
        """Return the user a token belongs to."""
        response = await self._send(
            "GET", "/auth/verify", headers=_bearer(access_token)
        )
        return VerifyResponse.model_validate(_json(response)).user.to_user()

    async def logout(self, access_token: str) -> None:
        """End the session on the server."""
        response = await self._send(
            "POST", "/auth/logout", headers=_bearer(access_token)
        )
        _json(response)

    async def list_food(self, access_token: str) -> list[FoodEntry]:
        """Return the caller's entries, newest first."""
        response = await self._send("GET", "/food", headers=_bearer(access_token))
        rows = _json(response)
        return [FoodEntryOut.model_validate(row).to_entry() for row in rows]

    async def create_food(self, access_token: str, draft: FoodEntryDraft) -> FoodEntry:
        """Store a new entry."""
        body = FoodEntryIn.from_draft(draft).model_dump(
            by_alias=True, mode="json", exclude_none=True
        )
        response = await self._send(
            "POST", "/food", json=body, headers=_bearer(access_token)
        )
        return FoodEntryOut.model_validate(_json(response)).to_entry()

    async def update_food(
        self, access_token: str, entry_id: UUID, changes: FoodEntryUpdate
    ) -> FoodEntry:
        """Apply a partial update to an entry."""
        body = FoodEntryPatch.from_update(changes).model_dump(
            by_alias=True, mode="json", exclude_none=True
        )
        response = await self._send(
            "PATCH", f"/food/{entry_id}", json=body, headers=_bearer(access_token)
        )
        return FoodEntryOut.model_validate(_json(response)).to_entry()

    async def delete_food(self, access_token: str, entry_id: UUID) -> None:
        """Delete an entry."""
        response = await self._send(
            "DELETE", f"/food/{entry_id}", headers=_bearer(access_token)
        )
        _json(response)

    async def _send(self, method: str, url: str, **kwargs) -> httpx.Response:
        try:
            return await self.http_client.request(method, url, **kwargs)
        except httpx.TransportError as exc:
            raise FoodLensError("Could not reach the FoodLens service") from exc


def _bearer(access_token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {access_token}"}


def _json(response: httpx.Response) -> object:
    """Return the decoded body or raise the error matching the status code."""
    if response.is_success:
        return response.json()
    message = _error_message(response)
    error_type = _ERRORS_BY_STATUS.get(response.status_code, FoodLensError)
    raise error_type(message)


def _error_message(response: httpx.Response) -> str | None:
    try:
        payload = response.json()
    except ValueError:
        return response.text or None
    if isinstance(payload, dict) and isinstance(payload.get("error"), str):
        return payload["error"]
    return None
