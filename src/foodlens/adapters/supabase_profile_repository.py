"""Supabase-backed user profile repository."""

from dataclasses import dataclass

from supabase import Client

from foodlens.domain.auth import AuthUser
from foodlens.services.auth import ProfileRepository


@dataclass
class SupabaseProfileRepository(ProfileRepository):
    """Supabase implementation for user profiles.

    Uses the service-role client; profile rows are written before the user
    has a database session of their own.
    """

    client: Client

    def ensure_profile(self, user: AuthUser) -> None:
        """Insert the profile row unless one already exists for the user."""
        self.client.table("user_profiles").upsert(
            {
                "user_id": str(user.id),
                "email": user.email,
                "full_name": user.name,
                "avatar_url": user.avatar_url,
                "provider": user.provider,
            },
            on_conflict="user_id",
            ignore_duplicates=True,
        ).execute()
