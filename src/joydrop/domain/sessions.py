"""Domain models for joydrop sessions."""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from uuid import UUID

from joydrop.domain.unset import UNSET, Unset


class SessionStatus(StrEnum):
    """Lifecycle states of a joydrop session."""

    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self is not SessionStatus.IN_PROGRESS


@dataclass(frozen=True)
class JoydropSession:
    """Represents a persisted joydrop session."""

    id: UUID
    sender_id: str
    status: SessionStatus
    created_at: datetime
    updated_at: datetime
    post_id: UUID | None = None


@dataclass(frozen=True)
class SessionPatch:
    """Partial session update; fields left UNSET are not written."""

    status: SessionStatus | Unset = UNSET
    post_id: UUID | None | Unset = UNSET

    def to_row(self) -> dict[str, object]:
        """Return only the supplied fields as a store row."""
        row: dict[str, object] = {}
        if not isinstance(self.status, Unset):
            row["status"] = self.status.value
        if not isinstance(self.post_id, Unset):
            row["post_id"] = str(self.post_id) if self.post_id else None
        return row
