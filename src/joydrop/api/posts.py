"""Post, like and comment endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from joydrop.api.deps import get_container
from joydrop.api.models import (
    CommentCreatedResponse,
    CommentListResponse,
    CommentPostRequest,
    CommentResponse,
    CreatePostRequest,
    LikeActionResponse,
    LikeListResponse,
    LikePostRequest,
    LikeResponse,
    PostDeletedResponse,
    PostListResponse,
    PostResponse,
    UserSummary,
)
from joydrop.containers import AppContainer
from joydrop.domain.posts import EnrichedComment, EnrichedLike, EnrichedPost, NewPost
from joydrop.domain.users import UserProfile
from joydrop.services.engagement import DEFAULT_ENGAGEMENT_LIMIT
from joydrop.services.posts import DEFAULT_FEED_LIMIT, MAX_FEED_LIMIT

router = APIRouter(prefix="/posts", tags=["posts"])


@router.post("/create", status_code=status.HTTP_201_CREATED)
def create_post(
    body: CreatePostRequest, container: AppContainer = Depends(get_container)
) -> PostResponse:
    """Create a post directly, without a joydrop session."""
    post = container.post_service.create_post(
        NewPost(
            sender_id=body.sender_id,
            receiver_id=body.receiver_id or None,
            content=body.content,
            media_urls=body.media_urls,
            tags=body.tags,
        )
    )
    return post_response(container.post_service.enrich([post])[0])


@router.get("")
def list_posts(
    user_id: str | None = Query(default=None, alias="userID"),
    limit: int = Query(default=DEFAULT_FEED_LIMIT, ge=1, le=MAX_FEED_LIMIT),
    container: AppContainer = Depends(get_container),
) -> PostListResponse:
    """Return a user's posts, or the public feed."""
    page = container.post_service.list_posts(user_id, limit)
    return PostListResponse(
        posts=[post_response(item) for item in page.items],
        total=page.total,
        has_more=page.has_more,
    )


@router.get("/{post_id}")
def get_post(
    post_id: UUID, container: AppContainer = Depends(get_container)
) -> PostResponse:
    """Return a single post."""
    return post_response(container.post_service.get_post(post_id))


@router.post("/{post_id}/like")
def like_post(
    post_id: UUID,
    body: LikePostRequest,
    container: AppContainer = Depends(get_container),
) -> LikeActionResponse:
    """Like a post; a second like by the same user is a conflict."""
    container.engagement_service.like(post_id, body.user_id)
    return LikeActionResponse(post_id=post_id, user_id=body.user_id)


@router.delete("/{post_id}/like/{user_id}")
def unlike_post(
    post_id: UUID, user_id: str, container: AppContainer = Depends(get_container)
) -> LikeActionResponse:
    """Remove a user's like from a post."""
    container.engagement_service.unlike(post_id, user_id)
    return LikeActionResponse(post_id=post_id, user_id=user_id)


@router.post("/{post_id}/comment", status_code=status.HTTP_201_CREATED)
def comment_on_post(
    post_id: UUID,
    body: CommentPostRequest,
    container: AppContainer = Depends(get_container),
) -> CommentCreatedResponse:
    """Add a comment to a post."""
    comment = container.engagement_service.comment(post_id, body.user_id, body.comment)
    return CommentCreatedResponse(
        comment_id=comment.id,
        post_id=comment.post_id,
        user_id=comment.user_id,
        comment=comment.comment,
        commented_at=comment.commented_at,
    )


@router.get("/{post_id}/comments")
def list_comments(
    post_id: UUID,
    limit: int = Query(default=DEFAULT_ENGAGEMENT_LIMIT, ge=1),
    container: AppContainer = Depends(get_container),
) -> CommentListResponse:
    """Return recent comments; limits above 100 are capped."""
    page = container.engagement_service.list_comments(post_id, limit)
    return CommentListResponse(
        comments=[_comment_response(item) for item in page.items],
        total=page.total,
        has_more=page.has_more,
    )


@router.get("/{post_id}/likes")
def list_likes(
    post_id: UUID,
    limit: int = Query(default=DEFAULT_ENGAGEMENT_LIMIT, ge=1),
    container: AppContainer = Depends(get_container),
) -> LikeListResponse:
    """Return recent likes; limits above 100 are capped."""
    page = container.engagement_service.list_likes(post_id, limit)
    return LikeListResponse(
        likes=[_like_response(item) for item in page.items],
        total=page.total,
        has_more=page.has_more,
    )


@router.delete("/{post_id}")
def delete_post(
    post_id: UUID,
    user_id: str = Query(alias="userID", min_length=1),
    container: AppContainer = Depends(get_container),
) -> PostDeletedResponse:
    """Delete an owned post with all of its likes and comments."""
    container.engagement_service.delete_post(post_id, user_id)
    return PostDeletedResponse(post_id=post_id)


def user_summary(profile: UserProfile | None) -> UserSummary | None:
    if profile is None:
        return None
    return UserSummary(
        id=profile.id,
        display_name=profile.display_name,
        username=profile.username,
        photo_url=profile.photo_url,
        bio=profile.bio,
    )


def post_response(item: EnrichedPost) -> PostResponse:
    post = item.post
    return PostResponse(
        id=post.id,
        sender_id=post.sender_id,
        receiver_id=post.receiver_id,
        content=post.content,
        media_urls=post.media_urls,
        tags=post.tags,
        likes_count=post.likes_count,
        comments_count=post.comments_count,
        is_public=post.is_public,
        created_at=post.created_at,
        updated_at=post.updated_at,
        sender=user_summary(item.sender),
        receiver=user_summary(item.receiver),
    )


def _like_response(item: EnrichedLike) -> LikeResponse:
    return LikeResponse(
        id=item.like.id,
        user_id=item.like.user_id,
        liked_at=item.like.liked_at,
        user=user_summary(item.user),
    )


def _comment_response(item: EnrichedComment) -> CommentResponse:
    return CommentResponse(
        id=item.comment.id,
        user_id=item.comment.user_id,
        comment=item.comment.comment,
        commented_at=item.comment.commented_at,
        user=user_summary(item.user),
    )
