"""Client-side session facade over the FoodLens service."""

import asyncio
import logging
from collections.abc import Awaitable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Generic, TypeVar
from uuid import UUID

from pydantic import ValidationError

from foodlens.client.api_client import FoodLensApi, HttpxFoodLensClient
from foodlens.client.auth_state import AuthStateContainer, AuthStatus
from foodlens.client.callback import CallbackOutcome, OAuthCallbackHandler
from foodlens.client.deep_link import is_login_callback
from foodlens.client.history import HistoryCache
from foodlens.client.storage import JsonFileKeyValueStore, TokenStore
from foodlens.config import ClientSettings
from foodlens.domain.analysis import FoodAnalysis, InlineImage
from foodlens.domain.auth import AuthResult, AuthSession, AuthUser, RequestContext
from foodlens.domain.errors import AuthError, FoodLensError, InvalidEntryError
from foodlens.domain.food import (
    FoodEntry,
    FoodEntryDraft,
    FoodEntryUpdate,
    MealType,
    NutritionFacts,
)
from foodlens.domain.notes import Location, compose_notes, split_location

logger = logging.getLogger(__name__)

T = TypeVar("T")

RETAKE_MESSAGE = (
    "We couldn't identify any food in this photo. Please take another picture."
)
FALLBACK_MESSAGE = "Something went wrong. Please try again."


@dataclass(frozen=True)
class AnalysisOutcome:
    """Result of analyzing a photo: an analysis to review, or a retake prompt."""

    analysis: FoodAnalysis | None = None
    message: str | None = None

    @property
    def retake(self) -> bool:
        """Return true when the photo should be taken again."""
        return self.analysis is None


@dataclass(frozen=True)
class ActionResult(Generic[T]):
    """Value of a user action, or the message to show when it failed."""

    value: T | None = None
    message: str | None = None

    @property
    def ok(self) -> bool:
        """Return true when the action succeeded."""
        return self.message is None


@dataclass
class AppSession:
    """Everything a screen needs: sign-in, analysis and history.

    Methods raise taxonomy errors; wrap calls in ``attempt`` to turn them
    into messages.
    Sign-in flows run one at a time so overlapping launches (a stored
    session and a callback link) never interleave their state changes.
    """

    api: FoodLensApi
    tokens: TokenStore
    auth_state: AuthStateContainer
    history: HistoryCache
    deep_link_scheme: str = "foodlens"
    redirect_uri: str | None = None
    _auth_lock: asyncio.Lock = field(
        default_factory=asyncio.Lock, init=False, repr=False
    )

    @classmethod
    def create(cls, settings: ClientSettings | None = None) -> "AppSession":
        """Create a session backed by httpx and the on-disk store."""
        resolved_settings = settings or ClientSettings()
        api = HttpxFoodLensClient.create(
            base_url=resolved_settings.api_base_url,
            timeout=resolved_settings.request_timeout_seconds,
            login_timeout=resolved_settings.login_timeout_seconds,
        )
        store = JsonFileKeyValueStore(resolved_settings.storage_path)
        return cls(
            api=api,
            tokens=TokenStore(store),
            auth_state=AuthStateContainer(),
            history=HistoryCache(store=store, api=api),
            deep_link_scheme=resolved_settings.deep_link_scheme,
            redirect_uri=f"{resolved_settings.deep_link_scheme}://auth/callback",
        )

    @property
    def user(self) -> AuthUser | None:
        """Return the signed-in user."""
        return self.auth_state.snapshot.user

    async def restore(self) -> AuthUser | None:
        """Resume the stored session, if its token is still valid."""
        async with self._auth_lock:
            access_token = self.tokens.access_token
            if not access_token:
                self.auth_state.reset()
                return None
            self._begin()
            session = AuthSession(
                access_token=access_token, refresh_token=self.tokens.refresh_token
            )
            try:
                user = await self.api.verify(access_token)
            except AuthError:
                restored = await self._restore_with_refresh_token(
                    session.refresh_token
                )
                if restored is None:
                    return None
                user, session = restored
            except FoodLensError as exc:
                self.auth_state.fail(exc.message)
                raise
            self.auth_state.succeed(user, session)
            await self._refresh_history()
            return user

    async def register(self, email: str, password: str) -> AuthResult:
        """Create an account; sign in when a session is issued right away."""
        async with self._auth_lock:
            self._begin()
            try:
                result = await self.api.register(email, password)
            except FoodLensError as exc:
                self.auth_state.fail(exc.message)
                raise
            if result.session is None:
                self.auth_state.reset()
                return result
            self.tokens.save(result.session)
            self.auth_state.succeed(result.user, result.session)
            return result

    async def login(self, email: str, password: str) -> AuthUser:
        """Sign in with email and password."""
        async with self._auth_lock:
            self._begin()
            try:
                result = await self.api.login(email, password)
                if result.session is None:
                    raise AuthError("No session returned")
            except FoodLensError as exc:
                self.auth_state.fail(exc.message)
                raise
            self.tokens.save(result.session)
            self.auth_state.succeed(result.user, result.session)
            await self._refresh_history()
            return result.user

    async def start_google_login(self) -> str:
        """Return the URL to open in the browser for Google sign-in."""
        async with self._auth_lock:
            self._begin()
            try:
                return await self.api.google_login_url(self.redirect_uri)
            except FoodLensError as exc:
                self.auth_state.fail(exc.message)
                raise

    async def handle_deep_link(self, url: str) -> CallbackOutcome | None:
        """Complete a sign-in from a callback URL; other links are ignored."""
        if not is_login_callback(url, self.deep_link_scheme):
            logger.debug("Ignoring deep link %s", url)
            return None
        handler = OAuthCallbackHandler(
            api=self.api,
            tokens=self.tokens,
            auth_state=self.auth_state,
            history=self.history,
        )
        async with self._auth_lock:
            return await handler.handle(url)

    async def logout(self) -> None:
        """End the session locally even when the server call fails."""
        access_token = self.tokens.access_token
        if access_token:
            try:
                await self.api.logout(access_token)
            except FoodLensError as exc:
                logger.warning("Server logout failed: %s", exc.message)
        user = self.user
        self.tokens.clear()
        if user is not None:
            self.history.clear(user.id)
        self.auth_state.reset()

    def entries(self) -> list[FoodEntry]:
        """Return the locally cached history of the signed-in user."""
        user = self.user
        if user is None:
            return []
        return self.history.cached(user.id)

    async def refresh_history(self) -> list[FoodEntry]:
        """Replace the local history with the server list."""
        return await self.history.refresh(self._context())

    async def analyze_photo(self, image: InlineImage) -> AnalysisOutcome:
        """Analyze a photo; an unrecognized meal asks for a retake."""
        analysis = await self.api.analyze(image)
        if analysis.is_unknown:
            return AnalysisOutcome(message=RETAKE_MESSAGE)
        return AnalysisOutcome(analysis=analysis)

    async def save_analysis(
        self,
        analysis: FoodAnalysis,
        image: str,
        meal_type: MealType | None,
        location: Location | None = None,
        notes: str | None = None,
        timestamp: datetime | None = None,
    ) -> FoodEntry:
        """Store a reviewed analysis as a history entry."""
        if analysis.is_unknown:
            raise InvalidEntryError(RETAKE_MESSAGE)
        if meal_type is None:
            raise InvalidEntryError()
        context = self._context()
        facts = analysis.nutrition_facts_per_portion.model_dump()
        draft = FoodEntryDraft(
            identified_food=analysis.identified_food,
            image=image,
            portion_size=analysis.portion_size,
            recognized_serving_size=analysis.recognized_serving_size,
            nutrition=NutritionFacts.from_dict(facts),
            meal_type=meal_type,
            notes=compose_notes(location, notes),
            additional_notes=list(analysis.additional_notes),
            timestamp=timestamp,
        )
        entry = await self.api.create_food(context.access_token, draft)
        self.history.put(context.user_id, entry)
        return entry

    async def edit_entry(
        self,
        entry_id: UUID,
        meal_type: MealType | None = None,
        notes: str | None = None,
        location: Location | None = None,
    ) -> FoodEntry:
        """Change an entry's meal type or notes.

        When ``notes`` or ``location`` is given the notes are rewritten from
        both; an empty result clears them. Without ``notes`` the entry keeps
        its current note text.
        """
        context = self._context()
        new_notes = None
        if notes is not None or location is not None:
            if notes is None:
                notes = self._cached_note_body(context.user_id, entry_id)
            new_notes = compose_notes(location, notes) or ""
        changes = FoodEntryUpdate(meal_type=meal_type, notes=new_notes)
        entry = await self.api.update_food(context.access_token, entry_id, changes)
        self.history.put(context.user_id, entry)
        return entry

    async def delete_entry(self, entry_id: UUID) -> None:
        """Delete an entry on the server and locally."""
        context = self._context()
        await self.api.delete_food(context.access_token, entry_id)
        self.history.discard(context.user_id, entry_id)

    async def attempt(self, action: Awaitable[T]) -> ActionResult[T]:
        """Run an action and return its value or a message to display."""
        try:
            return ActionResult(value=await action)
        except AuthError as exc:
            logger.exception("Action rejected", extra={"error": exc.message})
            if self.auth_state.status is AuthStatus.AUTHENTICATED:
                self.tokens.clear()
                self.auth_state.reset()
            return ActionResult(message=exc.message)
        except FoodLensError as exc:
            logger.exception("Action failed", extra={"error": exc.message})
            return ActionResult(message=exc.message)
        except ValidationError:
            logger.exception("Unexpected response from the service")
            return ActionResult(message=FALLBACK_MESSAGE)

    def _begin(self) -> None:
        if self.auth_state.status is not AuthStatus.AUTHENTICATING:
            self.auth_state.begin()

    def _context(self) -> RequestContext:
        user = self.user
        access_token = self.tokens.access_token
        if user is None or not access_token:
            raise AuthError()
        return RequestContext(user=user, access_token=access_token)

    def _cached_note_body(self, user_id: UUID, entry_id: UUID) -> str:
        for entry in self.history.cached(user_id):
            if entry.id == entry_id:
                return split_location(entry.notes)[1]
        return ""

    async def _restore_with_refresh_token(
        self, refresh_token: str | None
    ) -> tuple[AuthUser, AuthSession] | None:
        if refresh_token:
            try:
                result = await self.api.refresh(refresh_token)
                if result.session is not None:
                    user = await self.api.verify(result.session.access_token)
                    self.tokens.save(result.session)
                    return user, result.session
            except FoodLensError as exc:
                logger.info("Stored session expired: %s", exc.message)
        self.tokens.clear()
        self.auth_state.reset()
        return None

    async def _refresh_history(self) -> None:
        try:
            await self.history.refresh(self._context())
        except FoodLensError:
            logger.exception("History refresh failed")
