"""Shared test fixtures."""

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from uuid import UUID, uuid4

import pytest

from foodlens.config import Settings
from foodlens.containers import AppContainer
from foodlens.domain.analysis import FoodAnalysis, InlineImage
from foodlens.domain.auth import AuthResult, AuthSession, AuthUser, RequestContext
from foodlens.domain.errors import AuthError, FoodLensError, NotFoundError
from foodlens.domain.food import (
    FoodEntry,
    FoodEntryDraft,
    FoodEntryUpdate,
    NutritionFacts,
)
from foodlens.services.analysis import AnalysisService, VisionClient, parse_analysis
from foodlens.services.auth import AuthProvider, AuthService, ProfileRepository
from foodlens.services.food import FoodRepository, FoodService

SEEDED_EMAIL = "user@test.com"
SEEDED_PASSWORD = "hunter2"
SEEDED_USER_ID = UUID("00000000-0000-4000-8000-000000000001")

# Minimal valid JPEG header, base64 encoded.
JPEG_BASE64 = "/9j/4AAQSkZJRgABAQAAAQABAAD/2wBDAA=="

ANALYSIS_JSON = """{
  "foodAnalysis": {
    "identifiedFood": "Margherita pizza",
    "portionSize": "250",
    "recognizedServingSize": "250",
    "nutritionFactsPerPortion": {
      "calories": "680",
      "protein": "28",
      "carbs": "80",
      "fat": "26",
      "fiber": "4",
      "sugar": "6",
      "sodium": "1400",
      "cholesterol": "55"
    },
    "additionalNotes": ["Contains gluten and dairy", "Vegetarian"]
  }
}"""

UNKNOWN_JSON = '{"foodAnalysis": {"identifiedFood": "unknown"}}'


def make_user(email: str = SEEDED_EMAIL, user_id: UUID | None = None) -> AuthUser:
    return AuthUser(id=user_id or uuid4(), email=email, name=email)


def make_draft(**overrides: object) -> FoodEntryDraft:
    values: dict[str, object] = {
        "identified_food": "Margherita pizza",
        "image": f"data:image/jpeg;base64,{JPEG_BASE64}",
        "portion_size": "250",
        "recognized_serving_size": "250",
        "nutrition": NutritionFacts(calories="680", protein="28"),
        "additional_notes": ["Vegetarian"],
    }
    values.update(overrides)
    return FoodEntryDraft(**values)  # type: ignore[arg-type]


def make_entry(user_id: UUID, **overrides: object) -> FoodEntry:
    now = datetime.now(tz=UTC)
    values: dict[str, object] = {
        "id": uuid4(),
        "user_id": user_id,
        "created_at": now,
        "timestamp": now,
        "identified_food": "Margherita pizza",
        "image": f"data:image/jpeg;base64,{JPEG_BASE64}",
        "portion_size": "250",
        "recognized_serving_size": "250",
        "nutrition": NutritionFacts(calories="680"),
    }
    values.update(overrides)
    return FoodEntry(**values)  # type: ignore[arg-type]


@dataclass
class FakeVisionClient(VisionClient):
    """Fake vision client returning a fixed text."""

    text: str = ANALYSIS_JSON
    prompts: list[tuple[str, str]] = field(default_factory=list)

    async def complete(self, *, prompt: str, image_data_url: str) -> str:
        self.prompts.append((prompt, image_data_url))
        return self.text


@dataclass
class InMemoryAuthProvider(AuthProvider):
    """In-memory auth provider seeded with one confirmed account."""

    passwords: dict[str, str] = field(
        default_factory=lambda: {SEEDED_EMAIL: SEEDED_PASSWORD}
    )
    users: dict[str, AuthUser] = field(
        default_factory=lambda: {
            SEEDED_EMAIL: AuthUser(
                id=SEEDED_USER_ID, email=SEEDED_EMAIL, name="Test User"
            )
        }
    )
    tokens: dict[str, AuthUser] = field(default_factory=dict)
    refresh_tokens: dict[str, AuthUser] = field(default_factory=dict)
    signed_out: list[str] = field(default_factory=list)
    counter: int = 0

    @property
    def seeded_user(self) -> AuthUser:
        return self.users[SEEDED_EMAIL]

    def issue(self, user: AuthUser) -> AuthSession:
        self.counter += 1
        session = AuthSession(
            access_token=f"access-{self.counter}",
            refresh_token=f"refresh-{self.counter}",
            expires_in=3600,
        )
        self.tokens[session.access_token] = user
        self.refresh_tokens[session.refresh_token or ""] = user
        return session

    def sign_up(self, email: str, password: str) -> AuthResult:
        if email in self.users:
            raise AuthError("User already registered")
        user = make_user(email)
        self.users[email] = user
        self.passwords[email] = password
        return AuthResult(user=user, session=None)

    def sign_in_with_password(self, email: str, password: str) -> AuthResult:
        if self.passwords.get(email) != password:
            raise AuthError("Invalid login credentials")
        user = self.users[email]
        return AuthResult(user=user, session=self.issue(user))

    def authorization_url(
        self, provider: str, redirect_uri: str, query_params: dict[str, str]
    ) -> str:
        return (
            f"https://auth.example/authorize?provider={provider}"
            f"&redirect_to={redirect_uri}"
        )

    def set_session(self, access_token: str, refresh_token: str | None) -> AuthResult:
        if not access_token:
            raise AuthError("OAuth callback failed: missing token")
        user = self.seeded_user
        self.tokens[access_token] = user
        session = AuthSession(access_token=access_token, refresh_token=refresh_token)
        return AuthResult(user=user, session=session)

    def exchange_code(
        self, code: str, redirect_uri: str | None, code_verifier: str | None
    ) -> AuthResult:
        if code == "expired":
            raise AuthError("OAuth callback failed: invalid code")
        user = self.seeded_user
        return AuthResult(user=user, session=self.issue(user))

    def refresh_session(self, refresh_token: str) -> AuthResult:
        user = self.refresh_tokens.pop(refresh_token, None)
        if user is None:
            raise AuthError("Invalid refresh token")
        return AuthResult(user=user, session=self.issue(user))

    def get_user(self, access_token: str) -> AuthUser:
        user = self.tokens.get(access_token)
        if user is None:
            raise AuthError("Invalid token")
        return user

    def sign_out(self, access_token: str) -> None:
        self.signed_out.append(access_token)
        self.tokens.pop(access_token, None)


@dataclass
class InMemoryProfileRepository(ProfileRepository):
    """In-memory profile repository for tests."""

    profiles: dict[UUID, AuthUser] = field(default_factory=dict)

    def ensure_profile(self, user: AuthUser) -> None:
        self.profiles.setdefault(user.id, user)


@dataclass
class InMemoryFoodRepository(FoodRepository):
    """In-memory food repository for tests."""

    entries: dict[UUID, FoodEntry] = field(default_factory=dict)

    def create_entry(
        self, context: RequestContext, draft: FoodEntryDraft, timestamp: datetime
    ) -> FoodEntry:
        entry = FoodEntry(
            id=uuid4(),
            user_id=context.user_id,
            created_at=datetime.now(tz=UTC),
            timestamp=timestamp,
            identified_food=draft.identified_food,
            image=draft.image,
            portion_size=draft.portion_size,
            recognized_serving_size=draft.recognized_serving_size,
            nutrition=draft.nutrition,
            meal_type=draft.meal_type,
            notes=draft.notes,
            additional_notes=list(draft.additional_notes),
        )
        self.entries[entry.id] = entry
        return entry

    def list_entries(self, context: RequestContext) -> list[FoodEntry]:
        owned = [
            entry
            for entry in self.entries.values()
            if entry.user_id == context.user_id
        ]
        return sorted(owned, key=lambda entry: entry.timestamp, reverse=True)

    def get_entry(self, context: RequestContext, entry_id: UUID) -> FoodEntry | None:
        entry = self.entries.get(entry_id)
        if entry is None or entry.user_id != context.user_id:
            return None
        return entry

    def update_entry(
        self, context: RequestContext, entry_id: UUID, changes: FoodEntryUpdate
    ) -> FoodEntry | None:
        entry = self.get_entry(context, entry_id)
        if entry is None:
            return None
        values = {
            name: value
            for name, value in vars(changes).items()
            if value is not None
        }
        updated = replace(entry, **values)
        self.entries[entry_id] = updated
        return updated

    def delete_entry(self, context: RequestContext, entry_id: UUID) -> bool:
        if self.get_entry(context, entry_id) is None:
            return False
        del self.entries[entry_id]
        return True


@dataclass
class FakeFoodLensApi:
    """Fake service client that keeps entries in memory.

    ``failures`` maps a method name to the error it should raise.
    """

    user: AuthUser = field(
        default_factory=lambda: AuthUser(
            id=SEEDED_USER_ID, email=SEEDED_EMAIL, name="Test User"
        )
    )
    analysis_text: str = ANALYSIS_JSON
    valid_tokens: set[str] = field(default_factory=set)
    entries: list[FoodEntry] = field(default_factory=list)
    failures: dict[str, FoodLensError] = field(default_factory=dict)
    calls: list[str] = field(default_factory=list)

    def _call(self, name: str) -> None:
        self.calls.append(name)
        error = self.failures.get(name)
        if error is not None:
            raise error

    def _session(self, access_token: str = "access-1") -> AuthSession:
        self.valid_tokens.add(access_token)
        return AuthSession(access_token=access_token, refresh_token="refresh-1")

    async def analyze(self, image: InlineImage) -> FoodAnalysis:
        self._call("analyze")
        return parse_analysis(self.analysis_text)

    async def register(self, email: str, password: str) -> AuthResult:
        self._call("register")
        return AuthResult(user=make_user(email), session=None, message="Check email")

    async def login(self, email: str, password: str) -> AuthResult:
        self._call("login")
        if password != SEEDED_PASSWORD:
            raise AuthError("Invalid login credentials")
        return AuthResult(user=self.user, session=self._session())

    async def google_login_url(self, redirect_uri: str | None = None) -> str:
        self._call("google_login_url")
        return f"https://auth.example/authorize?redirect_to={redirect_uri}"

    async def oauth_callback(
        self,
        access_token: str | None = None,
        refresh_token: str | None = None,
        code: str | None = None,
    ) -> AuthResult:
        self._call("oauth_callback")
        token = access_token or f"code-{code}"
        session = AuthSession(access_token=token, refresh_token=refresh_token)
        self.valid_tokens.add(token)
        return AuthResult(user=self.user, session=session)

    async def refresh(self, refresh_token: str) -> AuthResult:
        self._call("refresh")
        return AuthResult(user=self.user, session=self._session("access-2"))

    async def verify(self, access_token: str) -> AuthUser:
        self._call("verify")
        if access_token not in self.valid_tokens:
            raise AuthError("Invalid token")
        return self.user

    async def logout(self, access_token: str) -> None:
        self._call("logout")
        self.valid_tokens.discard(access_token)

    async def list_food(self, access_token: str) -> list[FoodEntry]:
        self._call("list_food")
        return list(self.entries)

    async def create_food(self, access_token: str, draft: FoodEntryDraft) -> FoodEntry:
        self._call("create_food")
        entry = make_entry(
            self.user.id,
            identified_food=draft.identified_food,
            image=draft.image,
            meal_type=draft.meal_type,
            notes=draft.notes,
        )
        self.entries.insert(0, entry)
        return entry

    async def update_food(
        self, access_token: str, entry_id: UUID, changes: FoodEntryUpdate
    ) -> FoodEntry:
        self._call("update_food")
        for index, entry in enumerate(self.entries):
            if entry.id == entry_id:
                values = {
                    name: value
                    for name, value in vars(changes).items()
                    if value is not None
                }
                self.entries[index] = replace(entry, **values)
                return self.entries[index]
        raise NotFoundError()

    async def delete_food(self, access_token: str, entry_id: UUID) -> None:
        self._call("delete_food")
        self.entries = [entry for entry in self.entries if entry.id != entry_id]


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_anon_key="anon.header.signature",
        supabase_service_key="service.header.signature",
        openai_api_key="openai-key",
        environment="test",
    )


@pytest.fixture
def auth_provider() -> InMemoryAuthProvider:
    return InMemoryAuthProvider()


@pytest.fixture
def profile_repository() -> InMemoryProfileRepository:
    return InMemoryProfileRepository()


@pytest.fixture
def food_repository() -> InMemoryFoodRepository:
    return InMemoryFoodRepository()


@pytest.fixture
def vision_client() -> FakeVisionClient:
    return FakeVisionClient()


@pytest.fixture
def container(
    settings: Settings,
    auth_provider: InMemoryAuthProvider,
    profile_repository: InMemoryProfileRepository,
    food_repository: InMemoryFoodRepository,
    vision_client: FakeVisionClient,
) -> AppContainer:
    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        analysis_service=AnalysisService(client=vision_client),
        auth_service=AuthService(
            provider=auth_provider,
            profiles=profile_repository,
            default_redirect_uri=settings.oauth_redirect_uri,
        ),
        food_service=FoodService(food_repository),
        close_resources=close_resources,
    )
