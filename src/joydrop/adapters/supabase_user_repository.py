"""Supabase-backed user profile repository."""

from dataclasses import dataclass

from supabase import Client

from joydrop.domain.users import ProfilePatch, UserProfile
from joydrop.services.users import UserRepository

_COLUMNS = "id, display_name, username, photo_url, bio"


@dataclass
class SupabaseUserRepository(UserRepository):
    """Supabase implementation for user profiles."""

    client: Client

    def get_profile(self, user_id: str) -> UserProfile | None:
        """Return the profile for a user id, if present."""
        response = (
            self.client.table("users")
            .select(_COLUMNS)
            .eq("id", user_id)
            .limit(1)
            .execute()
        )
        if response.data:
            return _parse_profile(response.data[0])
        return None

    def get_profiles(self, user_ids: list[str]) -> list[UserProfile]:
        """Return profiles for the given ids."""
        if not user_ids:
            return []
        response = (
            self.client.table("users").select(_COLUMNS).in_("id", user_ids).execute()
        )
        return [_parse_profile(row) for row in response.data or []]

    def get_by_username(self, username: str) -> UserProfile | None:
        """Return the profile holding a username, if present."""
        response = (
            self.client.table("users")
            .select(_COLUMNS)
            .eq("username", username)
            .limit(1)
            .execute()
        )
        if response.data:
            return _parse_profile(response.data[0])
        return None

    def create_profile(self, profile: UserProfile) -> UserProfile:
        """Insert a profile row."""
        response = (
            self.client.table("users")
            .insert(
                {
                    "id": profile.id,
                    "display_name": profile.display_name,
                    "username": profile.username,
                    "photo_url": profile.photo_url,
                    "bio": profile.bio,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create user profile")
        return _parse_profile(response.data[0])

    def update_profile(self, user_id: str, patch: ProfilePatch) -> UserProfile | None:
        """Write the supplied fields and return the updated row."""
        response = (
            self.client.table("users")
            .update(patch.to_row())
            .eq("id", user_id)
            .execute()
        )
        if not response.data:
            return None
        return _parse_profile(response.data[0])

    def delete_profile(self, user_id: str) -> bool:
        """Delete a profile row."""
        response = self.client.table("users").delete().eq("id", user_id).execute()
        return bool(response.data)


def _parse_profile(row: dict[str, object]) -> UserProfile:
    return UserProfile(
        id=str(row["id"]),
        display_name=row.get("display_name"),
        username=row.get("username"),
        photo_url=row.get("photo_url"),
        bio=row.get("bio"),
    )
