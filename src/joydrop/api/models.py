"""Pydantic models for the joydrop HTTP API."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from joydrop.domain.sessions import SessionStatus


class ApiModel(BaseModel):
    """Base model accepting both field names and camelCase aliases."""

    model_config = ConfigDict(populate_by_name=True)


class SubmitJoydropRequest(ApiModel):
    """Body of POST /joydrop/submit."""

    session_id: UUID = Field(alias="sessionId")
    receiver_id: str | None = Field(default=None, alias="receiverID")
    content: str = Field(min_length=1, max_length=500)
    media_urls: list[str] = Field(default_factory=list, alias="mediaUrls", max_length=5)
    tags: list[str] = Field(default_factory=list, max_length=10)


class UpdateSessionStatusRequest(ApiModel):
    """Body of PUT /joydrop/sessions/{sessionId}/status."""

    status: SessionStatus


class CreatePostRequest(ApiModel):
    """Body of POST /posts/create."""

    sender_id: str = Field(alias="senderID", min_length=1)
    receiver_id: str | None = Field(default=None, alias="receiverID")
    content: str = Field(min_length=1, max_length=500)
    media_urls: list[str] = Field(default_factory=list, alias="mediaUrls", max_length=5)
    tags: list[str] = Field(default_factory=list, max_length=10)


class LikePostRequest(ApiModel):
    """Body of POST /posts/{postId}/like."""

    user_id: str = Field(alias="userID", min_length=1)


class CommentPostRequest(ApiModel):
    """Body of POST /posts/{postId}/comment."""

    user_id: str = Field(alias="userID", min_length=1)
    comment: str = Field(min_length=1, max_length=300)


class CreateProfileRequest(ApiModel):
    """Body of POST /users; the profile id is the verified caller."""

    display_name: str = Field(alias="displayName", min_length=1, max_length=100)
    username: str = Field(min_length=3, max_length=30, pattern=r"^[A-Za-z0-9_]+$")
    photo_url: str | None = Field(default=None, alias="photoURL")
    bio: str | None = Field(default=None, max_length=500)


class UpdateProfileRequest(ApiModel):
    """Body of PUT /users/{userId}; omitted fields are left unchanged."""

    display_name: str | None = Field(
        default=None, alias="displayName", min_length=1, max_length=100
    )
    username: str | None = Field(
        default=None, min_length=3, max_length=30, pattern=r"^[A-Za-z0-9_]+$"
    )
    photo_url: str | None = Field(default=None, alias="photoURL")
    bio: str | None = Field(default=None, max_length=500)


class InitiateJoydropResponse(ApiModel):
    session_id: UUID = Field(alias="sessionId")


class SubmitJoydropResponse(ApiModel):
    session_id: UUID = Field(alias="sessionId")
    post_id: UUID = Field(alias="postId")
    status: SessionStatus


class SessionResponse(ApiModel):
    """Joydrop session as returned to its owner."""

    session_id: UUID = Field(alias="sessionId")
    sender_id: str = Field(alias="senderId")
    status: SessionStatus
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")
    post_id: UUID | None = Field(default=None, alias="postId")


class MessageResponse(ApiModel):
    message: str


class UserSummary(ApiModel):
    """Public profile attached to posts, likes and comments."""

    id: str
    display_name: str | None = Field(default=None, alias="displayName")
    username: str | None = None
    photo_url: str | None = Field(default=None, alias="photoURL")
    bio: str | None = None


class PostResponse(ApiModel):
    """Post with its sender and receiver profiles."""

    id: UUID
    sender_id: str = Field(alias="senderID")
    receiver_id: str | None = Field(default=None, alias="receiverID")
    content: str
    media_urls: list[str] = Field(alias="mediaUrls")
    tags: list[str]
    likes_count: int = Field(alias="likesCount")
    comments_count: int = Field(alias="commentsCount")
    is_public: bool = Field(alias="isPublic")
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")
    sender: UserSummary | None = None
    receiver: UserSummary | None = None


class PostListResponse(ApiModel):
    posts: list[PostResponse]
    total: int
    has_more: bool = Field(alias="hasMore")


class LikeResponse(ApiModel):
    id: UUID
    user_id: str = Field(alias="userID")
    liked_at: datetime = Field(alias="likedAt")
    user: UserSummary | None = None


class LikeListResponse(ApiModel):
    likes: list[LikeResponse]
    total: int
    has_more: bool = Field(alias="hasMore")


class CommentResponse(ApiModel):
    id: UUID
    user_id: str = Field(alias="userID")
    comment: str
    commented_at: datetime = Field(alias="commentedAt")
    user: UserSummary | None = None


class CommentListResponse(ApiModel):
    comments: list[CommentResponse]
    total: int
    has_more: bool = Field(alias="hasMore")


class LikeActionResponse(ApiModel):
    post_id: UUID = Field(alias="postId")
    user_id: str = Field(alias="userID")


class CommentCreatedResponse(ApiModel):
    comment_id: UUID = Field(alias="commentId")
    post_id: UUID = Field(alias="postId")
    user_id: str = Field(alias="userID")
    comment: str
    commented_at: datetime = Field(alias="commentedAt")


class PostDeletedResponse(ApiModel):
    post_id: UUID = Field(alias="postId")


class ErrorResponse(ApiModel):
    ok: bool = False
    error: str
    error_code: str
    details: dict[str, object] | None = None
