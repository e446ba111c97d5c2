"""Domain models for user profiles."""

from dataclasses import dataclass

from joydrop.domain.unset import UNSET, Unset


@dataclass(frozen=True)
class UserProfile:
    """Public subset of a user profile used for enrichment."""

    id: str
    display_name: str | None
    username: str | None
    photo_url: str | None
    bio: str | None = None


@dataclass(frozen=True)
class ProfilePatch:
    """Partial profile update; fields left UNSET are not written."""

    display_name: str | None | Unset = UNSET
    username: str | None | Unset = UNSET
    photo_url: str | None | Unset = UNSET
    bio: str | None | Unset = UNSET

    def to_row(self) -> dict[str, object]:
        """Return only the supplied fields as a store row."""
        row: dict[str, object] = {}
        for column in ("display_name", "username", "photo_url", "bio"):
            value = getattr(self, column)
            if not isinstance(value, Unset):
                row[column] = value
        return row
