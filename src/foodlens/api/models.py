"""Pydantic models for HTTP request and response bodies."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

from foodlens.domain.analysis import FoodAnalysis, InlineImage
from foodlens.domain.auth import AuthResult, AuthSession, AuthUser
from foodlens.domain.food import (
    FoodEntry,
    FoodEntryDraft,
    FoodEntryUpdate,
    MealType,
    NutritionFacts,
)


class CamelModel(BaseModel):
    """Base model accepting both wire aliases and attribute names."""

    model_config = ConfigDict(populate_by_name=True)


class ImagePart(CamelModel):
    """Image part of an analysis request."""

    inline_data: InlineImage | None = Field(default=None, alias="inlineData")


class AnalyzeRequest(CamelModel):
    """Body of ``POST /api/analyze``."""

    image: ImagePart | None = None


class AnalyzeData(CamelModel):
    """Analysis result wrapper."""

    food_analysis: FoodAnalysis = Field(alias="foodAnalysis")


class AnalyzeResponse(CamelModel):
    """Successful analysis response."""

    success: bool = True
    data: AnalyzeData


class Credentials(BaseModel):
    """Email and password pair."""

    email: str = Field(min_length=3)
    password: str = Field(min_length=1)


class GoogleLoginRequest(CamelModel):
    """Body of ``POST /auth/login/google``."""

    redirect_uri: str | None = Field(default=None, alias="redirectUri")


class CallbackRequest(BaseModel):
    """Body of ``POST /auth/auth/callback``: tokens or an authorization code."""

    access_token: str | None = None
    refresh_token: str | None = None
    code: str | None = None
    code_verifier: str | None = None
    redirect_uri: str | None = None

    @model_validator(mode="after")
    def _require_credentials(self) -> "CallbackRequest":
        if not self.access_token and not self.code:
            raise ValueError("access_token or code is required")
        return self


class RefreshRequest(BaseModel):
    """Body of ``POST /auth/refresh``."""

    refresh_token: str = Field(min_length=1)


class UserOut(BaseModel):
    """Public view of a user."""

    id: UUID
    email: str | None
    name: str | None = None
    avatar_url: str | None = None
    provider: str | None = None

    @classmethod
    def from_user(cls, user: AuthUser) -> "UserOut":
        """Build the view from a domain user."""
        return cls(
            id=user.id,
            email=user.email,
            name=user.name,
            avatar_url=user.avatar_url,
            provider=user.provider,
        )

    def to_user(self) -> AuthUser:
        """Return the domain user."""
        return AuthUser(
            id=self.id,
            email=self.email,
            name=self.name,
            avatar_url=self.avatar_url,
            provider=self.provider,
        )


class SessionOut(BaseModel):
    """Public view of a session."""

    access_token: str
    refresh_token: str | None = None
    expires_in: int | None = None

    def to_session(self) -> AuthSession:
        """Return the domain session."""
        return AuthSession(
            access_token=self.access_token,
            refresh_token=self.refresh_token,
            expires_in=self.expires_in,
        )


class AuthResponse(BaseModel):
    """Response for register, login, callback and refresh."""

    user: UserOut
    session: SessionOut | None = None
    access_token: str | None = None
    message: str | None = None

    @classmethod
    def from_result(cls, result: AuthResult) -> "AuthResponse":
        """Build the response from a domain result."""
        session = None
        if result.session is not None:
            session = SessionOut(
                access_token=result.session.access_token,
                refresh_token=result.session.refresh_token,
                expires_in=result.session.expires_in,
            )
        return cls(
            user=UserOut.from_user(result.user),
            session=session,
            access_token=session.access_token if session else None,
            message=result.message,
        )

    def to_result(self) -> AuthResult:
        """Return the domain result."""
        return AuthResult(
            user=self.user.to_user(),
            session=self.session.to_session() if self.session else None,
            message=self.message,
        )


class GoogleLoginResponse(BaseModel):
    """Authorization URL for the OAuth provider."""

    url: str
    provider: str


class VerifyResponse(BaseModel):
    """Response for ``GET /auth/verify``."""

    valid: bool = True
    user: UserOut


class MessageResponse(BaseModel):
    """Plain message response."""

    message: str


class NutritionFactsModel(CamelModel):
    """Nutrition facts on the wire."""

    model_config = ConfigDict(coerce_numbers_to_str=True)

    calories: str = ""
    protein: str = ""
    carbs: str = ""
    fat: str = ""
    fiber: str = ""
    sugar: str = ""
    sodium: str = ""
    cholesterol: str = ""

    @classmethod
    def from_facts(cls, facts: NutritionFacts) -> "NutritionFactsModel":
        """Build the wire model from domain facts."""
        return cls(**facts.to_dict())

    def to_facts(self) -> NutritionFacts:
        """Return domain facts."""
        return NutritionFacts(**self.model_dump())


class FoodEntryIn(CamelModel):
    """Body of ``POST /food``."""

    identified_food: str = Field(min_length=1, alias="identifiedFood")
    image: str = Field(min_length=1)
    meal_type: MealType | None = Field(default=None, alias="mealType")
    notes: str | None = None
    portion_size: str = Field(min_length=1, alias="portionSize")
    recognized_serving_size: str = Field(min_length=1, alias="recognizedServingSize")
    nutrition: NutritionFactsModel = Field(alias="nutritionFactsPerPortion")
    additional_notes: list[str] = Field(default_factory=list, alias="additionalNotes")
    timestamp: datetime | None = None

    @classmethod
    def from_draft(cls, draft: FoodEntryDraft) -> "FoodEntryIn":
        """Build the wire model from a domain draft."""
        return cls(
            identified_food=draft.identified_food,
            image=draft.image,
            meal_type=draft.meal_type,
            notes=draft.notes,
            portion_size=draft.portion_size,
            recognized_serving_size=draft.recognized_serving_size,
            nutrition=NutritionFactsModel.from_facts(draft.nutrition),
            additional_notes=list(draft.additional_notes),
            timestamp=draft.timestamp,
        )

    def to_draft(self) -> FoodEntryDraft:
        """Return the domain draft."""
        return FoodEntryDraft(
            identified_food=self.identified_food,
            image=self.image,
            portion_size=self.portion_size,
            recognized_serving_size=self.recognized_serving_size,
            nutrition=self.nutrition.to_facts(),
            meal_type=self.meal_type,
            notes=self.notes,
            additional_notes=list(self.additional_notes),
            timestamp=self.timestamp,
        )


class FoodEntryPatch(CamelModel):
    """Body of ``PATCH /food/{id}``."""

    identified_food: str | None = Field(default=None, alias="identifiedFood")
    image: str | None = None
    meal_type: MealType | None = Field(default=None, alias="mealType")
    notes: str | None = None
    portion_size: str | None = Field(default=None, alias="portionSize")
    recognized_serving_size: str | None = Field(
        default=None, alias="recognizedServingSize"
    )
    nutrition: NutritionFactsModel | None = Field(
        default=None, alias="nutritionFactsPerPortion"
    )
    additional_notes: list[str] | None = Field(default=None, alias="additionalNotes")
    timestamp: datetime | None = None

    @classmethod
    def from_update(cls, update: FoodEntryUpdate) -> "FoodEntryPatch":
        """Build the wire model from a domain update."""
        return cls(
            identified_food=update.identified_food,
            image=update.image,
            meal_type=update.meal_type,
            notes=update.notes,
            portion_size=update.portion_size,
            recognized_serving_size=update.recognized_serving_size,
            nutrition=(
                NutritionFactsModel.from_facts(update.nutrition)
                if update.nutrition is not None
                else None
            ),
            additional_notes=update.additional_notes,
            timestamp=update.timestamp,
        )

    def to_update(self) -> FoodEntryUpdate:
        """Return the domain update."""
        return FoodEntryUpdate(
            identified_food=self.identified_food,
            image=self.image,
            portion_size=self.portion_size,
            recognized_serving_size=self.recognized_serving_size,
            nutrition=self.nutrition.to_facts() if self.nutrition else None,
            meal_type=self.meal_type,
            notes=self.notes,
            additional_notes=self.additional_notes,
            timestamp=self.timestamp,
        )


class FoodEntryOut(CamelModel):
    """Food entry as returned to clients."""

    id: UUID
    user_id: UUID
    created_at: datetime
    timestamp: datetime
    identified_food: str = Field(alias="identifiedFood")
    image: str
    meal_type: MealType | None = Field(default=None, alias="mealType")
    notes: str | None = None
    portion_size: str = Field(alias="portionSize")
    recognized_serving_size: str = Field(alias="recognizedServingSize")
    nutrition: NutritionFactsModel = Field(alias="nutritionFactsPerPortion")
    additional_notes: list[str] = Field(default_factory=list, alias="additionalNotes")

    @classmethod
    def from_entry(cls, entry: FoodEntry) -> "FoodEntryOut":
        """Build the wire model from a domain entry."""
        return cls(
            id=entry.id,
            user_id=entry.user_id,
            created_at=entry.created_at,
            timestamp=entry.timestamp,
            identified_food=entry.identified_food,
            image=entry.image,
            meal_type=entry.meal_type,
            notes=entry.notes,
            portion_size=entry.portion_size,
            recognized_serving_size=entry.recognized_serving_size,
            nutrition=NutritionFactsModel.from_facts(entry.nutrition),
            additional_notes=list(entry.additional_notes),
        )

    def to_entry(self) -> FoodEntry:
        """Return the domain entry."""
        return FoodEntry(
            id=self.id,
            user_id=self.user_id,
            created_at=self.created_at,
            timestamp=self.timestamp,
            identified_food=self.identified_food,
            image=self.image,
            portion_size=self.portion_size,
            recognized_serving_size=self.recognized_serving_size,
            nutrition=self.nutrition.to_facts(),
            meal_type=self.meal_type,
            notes=self.notes,
            additional_notes=list(self.additional_notes),
        )
