"""Supabase-backed joydrop session repository."""

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from supabase import Client

from joydrop.domain.posts import NewPost
from joydrop.domain.sessions import JoydropSession, SessionPatch, SessionStatus
from joydrop.services.sessions import SessionRepository

_COLUMNS = "id, sender_id, status, post_id, created_at, updated_at"


@dataclass
class SupabaseSessionRepository(SessionRepository):
    """Supabase implementation for joydrop sessions."""

    client: Client

    def create_session(self, session_id: UUID, sender_id: str) -> JoydropSession:
        """Create an in-progress session row and return it."""
        response = (
            self.client.table("joydrop_sessions")
            .insert(
                {
                    "id": str(session_id),
                    "sender_id": sender_id,
                    "status": SessionStatus.IN_PROGRESS.value,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create joydrop session")
        return _parse_session(response.data[0])

    def get_session(self, session_id: UUID) -> JoydropSession | None:
        """Return a session by id, if present."""
        response = (
            self.client.table("joydrop_sessions")
            .select(_COLUMNS)
            .eq("id", str(session_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_session(response.data[0])

    def list_sessions(self, sender_id: str, limit: int) -> list[JoydropSession]:
        """Return a sender's sessions, newest first."""
        response = (
            self.client.table("joydrop_sessions")
            .select(_COLUMNS)
            .eq("sender_id", sender_id)
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
        return [_parse_session(row) for row in response.data or []]

    def update_session_if_in_progress(
        self, session_id: UUID, patch: SessionPatch
    ) -> JoydropSession | None:
        """Conditionally update a session that is still in progress."""
        response = (
            self.client.table("joydrop_sessions")
            .update(
                {
                    **patch.to_row(),
                    "updated_at": datetime.now(tz=UTC).isoformat(),
                }
            )
            .eq("id", str(session_id))
            .eq("status", SessionStatus.IN_PROGRESS.value)
            .execute()
        )
        if not response.data:
            return None
        return _parse_session(response.data[0])

    def complete_with_post(
        self, session_id: UUID, post: NewPost
    ) -> tuple[JoydropSession, UUID] | None:
        """Create the post and complete the session via one database function."""
        response = self.client.rpc(
            "submit_joydrop_session",
            {
                "p_session_id": str(session_id),
                "p_sender_id": post.sender_id,
                "p_receiver_id": post.receiver_id,
                "p_content": post.content,
                "p_media_urls": post.media_urls,
                "p_tags": post.tags,
            },
        ).execute()
        if not response.data:
            return None
        session = _parse_session(response.data[0])
        if session.post_id is None:
            raise RuntimeError("Completed session is missing its post id")
        return session, session.post_id


def _parse_session(row: dict[str, object]) -> JoydropSession:
    """Parse a session row into a domain model."""
    post_id = row.get("post_id")
    return JoydropSession(
        id=UUID(str(row["id"])),
        sender_id=str(row["sender_id"]),
        status=SessionStatus(row["status"]),
        post_id=UUID(str(post_id)) if post_id else None,
        created_at=datetime.fromisoformat(str(row["created_at"])),
        updated_at=datetime.fromisoformat(str(row["updated_at"])),
    )
