"""Joydrop session endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, Response, status

from joydrop.api.deps import get_container, require_caller
from joydrop.api.models import (
    InitiateJoydropResponse,
    MessageResponse,
    SessionResponse,
    SubmitJoydropRequest,
    SubmitJoydropResponse,
    UpdateSessionStatusRequest,
)
from joydrop.containers import AppContainer
from joydrop.domain.sessions import JoydropSession

router = APIRouter(prefix="/joydrop", tags=["joydrop"])


@router.post("/initiate", status_code=status.HTTP_201_CREATED)
def initiate_joydrop(
    caller_id: str = Depends(require_caller),
    container: AppContainer = Depends(get_container),
) -> InitiateJoydropResponse:
    """Start a new joydrop session for the caller."""
    session_id = container.session_service.initiate(caller_id)
    return InitiateJoydropResponse(session_id=session_id)


@router.post("/submit", status_code=status.HTTP_201_CREATED)
def submit_joydrop(
    body: SubmitJoydropRequest,
    caller_id: str = Depends(require_caller),
    container: AppContainer = Depends(get_container),
) -> SubmitJoydropResponse:
    """Submit content for a session, creating its post."""
    result = container.session_service.submit(
        sender_id=caller_id,
        session_id=body.session_id,
        content=body.content,
        receiver_id=body.receiver_id,
        media_urls=body.media_urls,
        tags=body.tags,
    )
    return SubmitJoydropResponse(
        session_id=result.session_id, post_id=result.post_id, status=result.status
    )


@router.get("/sessions/{session_id}", dependencies=[Depends(require_caller)])
def get_session(
    session_id: UUID, container: AppContainer = Depends(get_container)
) -> SessionResponse:
    """Return a single session."""
    return _session_response(container.session_service.get_session(session_id))


@router.get("/sessions")
def list_sessions(
    caller_id: str = Depends(require_caller),
    container: AppContainer = Depends(get_container),
) -> list[SessionResponse]:
    """Return the caller's sessions, newest first."""
    sessions = container.session_service.list_sessions(caller_id)
    return [_session_response(session) for session in sessions]


@router.put("/sessions/{session_id}/status")
def update_session_status(
    session_id: UUID,
    body: UpdateSessionStatusRequest,
    caller_id: str = Depends(require_caller),
    container: AppContainer = Depends(get_container),
) -> MessageResponse:
    """Request a status change; only cancellation is a valid manual move."""
    container.session_service.update_status(caller_id, session_id, body.status)
    return MessageResponse(message="Session status updated successfully")


@router.delete("/sessions/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
def cancel_session(
    session_id: UUID,
    caller_id: str = Depends(require_caller),
    container: AppContainer = Depends(get_container),
) -> Response:
    """Cancel an in-progress session."""
    container.session_service.cancel(caller_id, session_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


def _session_response(session: JoydropSession) -> SessionResponse:
    return SessionResponse(
        session_id=session.id,
        sender_id=session.sender_id,
        status=session.status,
        created_at=session.created_at,
        updated_at=session.updated_at,
        post_id=session.post_id,
    )
