"""User profile endpoints."""

from fastapi import APIRouter, Depends, Query, status

from joydrop.api.deps import get_container, require_caller
from joydrop.api.models import (
    CreateProfileRequest,
    MessageResponse,
    PostListResponse,
    UpdateProfileRequest,
    UserSummary,
)
from joydrop.api.posts import post_response, user_summary
from joydrop.containers import AppContainer
from joydrop.domain.unset import UNSET
from joydrop.domain.users import ProfilePatch, UserProfile
from joydrop.services.posts import DEFAULT_FEED_LIMIT, MAX_FEED_LIMIT

router = APIRouter(prefix="/users", tags=["users"])


@router.post("", status_code=status.HTTP_201_CREATED)
def create_profile(
    body: CreateProfileRequest,
    caller_id: str = Depends(require_caller),
    container: AppContainer = Depends(get_container),
) -> UserSummary:
    """Create the caller's profile."""
    profile = container.user_service.create_profile(
        caller_id,
        UserProfile(
            id=caller_id,
            display_name=body.display_name,
            username=body.username,
            photo_url=body.photo_url,
            bio=body.bio,
        ),
    )
    return user_summary(profile)


@router.get("/username/{username}")
def get_user_by_username(
    username: str, container: AppContainer = Depends(get_container)
) -> UserSummary:
    """Return the profile holding a username."""
    return user_summary(container.user_service.get_by_username(username))


@router.get("/{user_id}")
def get_user(user_id: str, container: AppContainer = Depends(get_container)) -> UserSummary:
    """Return a user's public profile."""
    return user_summary(container.user_service.get_profile(user_id))


@router.put("/{user_id}")
def update_profile(
    user_id: str,
    body: UpdateProfileRequest,
    caller_id: str = Depends(require_caller),
    container: AppContainer = Depends(get_container),
) -> UserSummary:
    """Update the supplied fields of the caller's profile."""
    supplied = body.model_fields_set
    patch = ProfilePatch(
        **{
            name: getattr(body, name) if name in supplied else UNSET
            for name in ("display_name", "username", "photo_url", "bio")
        }
    )
    profile = container.user_service.update_profile(caller_id, user_id, patch)
    return user_summary(profile)


@router.delete("/{user_id}")
def delete_profile(
    user_id: str,
    caller_id: str = Depends(require_caller),
    container: AppContainer = Depends(get_container),
) -> MessageResponse:
    """Delete the caller's profile row."""
    container.user_service.delete_profile(caller_id, user_id)
    return MessageResponse(message="User deleted successfully")


@router.get("/{user_id}/received")
def list_received(
    user_id: str,
    limit: int = Query(default=DEFAULT_FEED_LIMIT, ge=1, le=MAX_FEED_LIMIT),
    container: AppContainer = Depends(get_container),
) -> PostListResponse:
    """Return joydrops addressed to the user, newest first."""
    page = container.post_service.list_received(user_id, limit)
    return PostListResponse(
        posts=[post_response(item) for item in page.items],
        total=page.total,
        has_more=page.has_more,
    )
