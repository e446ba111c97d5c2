"""State machine for joydrop sessions."""

import logging
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID, uuid4

from joydrop.domain.posts import NewPost
from joydrop.domain.sessions import JoydropSession, SessionPatch, SessionStatus
from joydrop.errors import BadRequestError, InternalError, NotFoundError
from joydrop.services.posts import ReceivedIndex

_logger = logging.getLogger(__name__)

MAX_SESSIONS_PER_USER = 50


class SessionRepository(Protocol):
    """Persistence interface for joydrop sessions."""

    def create_session(self, session_id: UUID, sender_id: str) -> JoydropSession:
        """Create an in-progress session and return it."""

    def get_session(self, session_id: UUID) -> JoydropSession | None:
        """Return a session by id, if present."""

    def list_sessions(self, sender_id: str, limit: int) -> list[JoydropSession]:
        """Return a sender's sessions, newest first."""

    def update_session_if_in_progress(
        self, session_id: UUID, patch: SessionPatch
    ) -> JoydropSession | None:
        """Apply a patch only while the session is still in progress.

        Returns the updated session, or None when another writer already
        moved it to a terminal state.
        """

    def complete_with_post(
        self, session_id: UUID, post: NewPost
    ) -> tuple[JoydropSession, UUID] | None:
        """Create the post and complete the session in one transaction.

        Returns the completed session and the new post id, or None when the
        session was no longer in progress at commit time.
        """


@dataclass(frozen=True)
class SubmitResult:
    """Outcome of a successful submit."""

    session_id: UUID
    post_id: UUID
    status: SessionStatus


@dataclass
class JoydropSessionService:
    """Drives sessions from in-progress to completed or cancelled."""

    session_repository: SessionRepository
    received_index: ReceivedIndex

    def initiate(self, sender_id: str) -> UUID:
        """Start a new session for the sender and return its id."""
        session_id = uuid4()
        try:
            self.session_repository.create_session(session_id, sender_id)
        except Exception as exc:
            _logger.exception(
                "Failed to initiate joydrop session", extra={"sender_id": sender_id}
            )
            raise InternalError("initiate joydrop session") from exc
        _logger.info("Joydrop session initiated: session_id=%s", session_id)
        return session_id

    def get_session(self, session_id: UUID) -> JoydropSession:
        """Return the session or raise NotFoundError."""
        return self._read_session(session_id, "get joydrop session")

    def list_sessions(
        self, sender_id: str, limit: int = MAX_SESSIONS_PER_USER
    ) -> list[JoydropSession]:
        """Return the sender's sessions, newest first."""
        capped = max(1, min(limit, MAX_SESSIONS_PER_USER))
        try:
            return self.session_repository.list_sessions(sender_id, capped)
        except Exception as exc:
            _logger.exception(
                "Failed to list joydrop sessions", extra={"sender_id": sender_id}
            )
            raise InternalError("list joydrop sessions") from exc

    def submit(  # noqa: PLR0913
        self,
        sender_id: str,
        session_id: UUID,
        content: str,
        receiver_id: str | None = None,
        media_urls: list[str] | None = None,
        tags: list[str] | None = None,
    ) -> SubmitResult:
        """Create the post for a session and mark the session completed."""
        session = self._load_owned_in_progress(sender_id, session_id, "submit")
        post = NewPost(
            sender_id=sender_id,
            receiver_id=receiver_id or None,
            content=content,
            media_urls=list(media_urls or []),
            tags=list(tags or []),
        )
        try:
            result = self.session_repository.complete_with_post(session.id, post)
        except Exception as exc:
            _logger.exception(
                "Failed to submit joydrop session",
                extra={"session_id": str(session_id)},
            )
            raise InternalError("submit joydrop session") from exc
        if result is None:
            raise BadRequestError(
                "Cannot submit session: it was completed or cancelled concurrently"
            )
        completed, post_id = result
        if post.receiver_id:
            self.received_index.record_received(post.receiver_id, post_id)
        _logger.info(
            "Joydrop session submitted: session_id=%s post_id=%s",
            session_id,
            post_id,
        )
        return SubmitResult(
            session_id=completed.id, post_id=post_id, status=completed.status
        )

    def cancel(self, user_id: str, session_id: UUID) -> JoydropSession:
        """Cancel an in-progress session owned by the user."""
        self._load_owned_in_progress(user_id, session_id, "cancel")
        try:
            updated = self.session_repository.update_session_if_in_progress(
                session_id,
                SessionPatch(status=SessionStatus.CANCELLED, post_id=None),
            )
        except Exception as exc:
            _logger.exception(
                "Failed to cancel joydrop session",
                extra={"session_id": str(session_id)},
            )
            raise InternalError("cancel joydrop session") from exc
        if updated is None:
            raise BadRequestError(
                "Cannot cancel session: it was completed or cancelled concurrently"
            )
        _logger.info("Joydrop session cancelled: session_id=%s", session_id)
        return updated

    def update_status(
        self, user_id: str, session_id: UUID, status: SessionStatus
    ) -> JoydropSession:
        """Apply a requested status change through the state machine."""
        if status is SessionStatus.CANCELLED:
            return self.cancel(user_id, session_id)
        session = self._load_owned(user_id, session_id, "update")
        if status is SessionStatus.COMPLETED:
            raise BadRequestError(
                "Sessions can only be completed by submitting their content"
            )
        raise BadRequestError(
            f"Cannot move session with status {session.status} to {status}"
        )

    def _load_owned(
        self, user_id: str, session_id: UUID, action: str
    ) -> JoydropSession:
        session = self._read_session(session_id, f"{action} joydrop session")
        if session.sender_id != user_id:
            raise BadRequestError(f"You can only {action} your own joydrop sessions")
        return session

    def _load_owned_in_progress(
        self, user_id: str, session_id: UUID, action: str
    ) -> JoydropSession:
        session = self._load_owned(user_id, session_id, action)
        if session.status.is_terminal:
            raise BadRequestError(
                f"Cannot {action} session with status: {session.status}"
            )
        return session

    def _read_session(self, session_id: UUID, operation: str) -> JoydropSession:
        try:
            session = self.session_repository.get_session(session_id)
        except Exception as exc:
            _logger.exception(
                "Failed to load joydrop session for %s",
                operation,
                extra={"session_id": str(session_id)},
            )
            raise InternalError(operation) from exc
        if session is None:
            raise NotFoundError("Joydrop session not found")
        return session
