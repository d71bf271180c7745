"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import Client, ClientOptions, create_client

from foodlens.adapters.openai_vision_client import OpenAIVisionClient
from foodlens.adapters.supabase_auth_provider import SupabaseAuthProvider
from foodlens.adapters.supabase_food_repository import SupabaseFoodRepository
from foodlens.adapters.supabase_profile_repository import SupabaseProfileRepository
from foodlens.config import Settings
from foodlens.services.analysis import AnalysisService
from foodlens.services.auth import AuthService
from foodlens.services.food import FoodService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    analysis_service: AnalysisService
    auth_service: AuthService
    food_service: FoodService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    anon_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_anon_key
    )
    admin_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )

    def new_anon_client() -> Client:
        return create_client(
            resolved_settings.supabase_url,
            resolved_settings.supabase_anon_key,
            options=ClientOptions(flow_type="implicit"),
        )

    def client_for(access_token: str) -> Client:
        client = create_client(
            resolved_settings.supabase_url,
            resolved_settings.supabase_anon_key,
            options=ClientOptions(auto_refresh_token=False, persist_session=False),
        )
        client.postgrest.auth(access_token)
        return client

    auth_service = AuthService(
        provider=SupabaseAuthProvider(
            client=anon_client,
            admin_client=admin_client,
            new_client=new_anon_client,
        ),
        profiles=SupabaseProfileRepository(admin_client),
        oauth_provider=resolved_settings.oauth_provider,
        default_redirect_uri=resolved_settings.oauth_redirect_uri,
    )
    food_service = FoodService(SupabaseFoodRepository(client_for))

    vision_client = None
    if resolved_settings.openai_api_key:
        vision_client = OpenAIVisionClient.create(
            api_key=resolved_settings.openai_api_key,
            model=resolved_settings.openai_model,
            reasoning_effort=resolved_settings.openai_reasoning_effort,
            store=resolved_settings.openai_store,
        )
    analysis_service = AnalysisService(client=vision_client)

    async def close_resources() -> None:
        if vision_client is not None:
            await vision_client.close()

    return AppContainer(
        settings=resolved_settings,
        analysis_service=analysis_service,
        auth_service=auth_service,
        food_service=food_service,
        close_resources=close_resources,
    )
