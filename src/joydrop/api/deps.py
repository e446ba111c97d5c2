"""Shared FastAPI dependencies."""

from fastapi import Depends, Header, Request

from joydrop.containers import AppContainer


def get_container(request: Request) -> AppContainer:
    """Return the dependency container attached to the app."""
    return request.app.state.container


def require_caller(
    authorization: str | None = Header(default=None),
    container: AppContainer = Depends(get_container),
) -> str:
    """Verify the bearer token and return the caller's user id."""
    return container.identity_service.caller_from_header(authorization)
