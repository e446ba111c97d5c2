"""User profile reads and writes, including lookups used for enrichment."""

import logging
from dataclasses import dataclass
from typing import Protocol

from joydrop.domain.users import ProfilePatch, UserProfile
from joydrop.errors import ConflictError, ForbiddenError, InternalError, NotFoundError

_logger = logging.getLogger(__name__)

# Upper bound on ids per "in" lookup against the store.
PROFILE_CHUNK_SIZE = 10


class UserRepository(Protocol):
    """Persistence interface for user profiles."""

    def get_profile(self, user_id: str) -> UserProfile | None:
        """Return a profile by user id, if present."""

    def get_profiles(self, user_ids: list[str]) -> list[UserProfile]:
        """Return the profiles that exist among the given ids."""

    def get_by_username(self, username: str) -> UserProfile | None:
        """Return the profile holding a username, if any."""

    def create_profile(self, profile: UserProfile) -> UserProfile:
        """Insert a profile row and return it."""

    def update_profile(self, user_id: str, patch: ProfilePatch) -> UserProfile | None:
        """Apply a patch and return the updated profile, or None if absent."""

    def delete_profile(self, user_id: str) -> bool:
        """Delete a profile row; returns False when there was none."""


@dataclass
class UserService:
    """Application service for profile reads and writes."""

    repository: UserRepository
    chunk_size: int = PROFILE_CHUNK_SIZE

    def get_profile(self, user_id: str) -> UserProfile:
        """Return a profile or raise NotFoundError."""
        try:
            profile = self.repository.get_profile(user_id)
        except Exception as exc:
            _logger.exception("Failed to get user profile", extra={"user_id": user_id})
            raise InternalError("get user profile") from exc
        if profile is None:
            raise NotFoundError("User not found")
        return profile

    def get_by_username(self, username: str) -> UserProfile:
        """Return the profile for a username or raise NotFoundError."""
        try:
            profile = self.repository.get_by_username(username)
        except Exception as exc:
            _logger.exception("Failed to find user by username")
            raise InternalError("find user by username") from exc
        if profile is None:
            raise NotFoundError("User not found")
        return profile

    def create_profile(self, caller_id: str, profile: UserProfile) -> UserProfile:
        """Create the caller's own profile row."""
        if profile.id != caller_id:
            raise ForbiddenError("You can only create your own profile")
        if self._lookup(profile.id, "create user profile") is not None:
            raise ConflictError("User already exists")
        if profile.username:
            self._ensure_username_free(profile.username, profile.id, "create user profile")
        try:
            created = self.repository.create_profile(profile)
        except Exception as exc:
            _logger.exception(
                "Failed to create user profile", extra={"user_id": profile.id}
            )
            raise InternalError("create user profile") from exc
        _logger.info("User profile created: user_id=%s", created.id)
        return created

    def update_profile(
        self, caller_id: str, user_id: str, patch: ProfilePatch
    ) -> UserProfile:
        """Update the caller's own profile with the supplied fields."""
        if user_id != caller_id:
            raise ForbiddenError("You can only update your own profile")
        current = self._lookup(user_id, "update user profile")
        if current is None:
            raise NotFoundError("User not found")
        if not patch.to_row():
            return current
        if isinstance(patch.username, str) and patch.username != current.username:
            self._ensure_username_free(patch.username, user_id, "update user profile")
        try:
            updated = self.repository.update_profile(user_id, patch)
        except Exception as exc:
            _logger.exception("Failed to update user profile", extra={"user_id": user_id})
            raise InternalError("update user profile") from exc
        if updated is None:
            raise NotFoundError("User not found")
        _logger.info("User profile updated: user_id=%s", user_id)
        return updated

    def delete_profile(self, caller_id: str, user_id: str) -> None:
        """Delete the caller's own profile row."""
        if user_id != caller_id:
            raise ForbiddenError("You can only delete your own profile")
        try:
            removed = self.repository.delete_profile(user_id)
        except Exception as exc:
            _logger.exception("Failed to delete user profile", extra={"user_id": user_id})
            raise InternalError("delete user profile") from exc
        if not removed:
            raise NotFoundError("User not found")
        _logger.info("User profile deleted: user_id=%s", user_id)

    def get_profiles(self, user_ids: list[str]) -> dict[str, UserProfile | None]:
        """Resolve ids to profiles in chunks; failed or missing ids map to None."""
        unique_ids = list(dict.fromkeys(user_id for user_id in user_ids if user_id))
        resolved: dict[str, UserProfile | None] = dict.fromkeys(unique_ids)
        for start in range(0, len(unique_ids), self.chunk_size):
            chunk = unique_ids[start : start + self.chunk_size]
            try:
                profiles = self.repository.get_profiles(chunk)
            except Exception:
                _logger.warning(
                    "Profile lookup failed for %s users", len(chunk), exc_info=True
                )
                continue
            for profile in profiles:
                if profile.id in resolved:
                    resolved[profile.id] = profile
        return resolved

    def _lookup(self, user_id: str, operation: str) -> UserProfile | None:
        try:
            return self.repository.get_profile(user_id)
        except Exception as exc:
            _logger.exception("Failed to load user profile", extra={"user_id": user_id})
            raise InternalError(operation) from exc

    def _ensure_username_free(self, username: str, user_id: str, operation: str) -> None:
        try:
            holder = self.repository.get_by_username(username)
        except Exception as exc:
            _logger.exception("Failed to check username", extra={"user_id": user_id})
            raise InternalError(operation) from exc
        if holder is not None and holder.id != user_id:
            raise ConflictError("Username already taken")
