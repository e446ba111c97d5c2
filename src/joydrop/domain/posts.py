"""Domain models for posts and their engagement records."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Generic, TypeVar
from uuid import UUID

from joydrop.domain.users import UserProfile

T = TypeVar("T")


@dataclass(frozen=True)
class NewPost:
    """Content for a post that has not been stored yet."""

    sender_id: str
    content: str
    receiver_id: str | None = None
    media_urls: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)

    @property
    def is_public(self) -> bool:
        return not self.receiver_id


@dataclass(frozen=True)
class Post:
    """Represents a stored post with denormalized engagement counters."""

    id: UUID
    sender_id: str
    receiver_id: str | None
    content: str
    media_urls: list[str]
    tags: list[str]
    likes_count: int
    comments_count: int
    is_public: bool
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class Like:
    """A single user's like on a post."""

    id: UUID
    post_id: UUID
    user_id: str
    liked_at: datetime


@dataclass(frozen=True)
class Comment:
    """A comment left on a post."""

    id: UUID
    post_id: UUID
    user_id: str
    comment: str
    commented_at: datetime


@dataclass(frozen=True)
class EnrichedPost:
    """Post with sender and receiver profiles attached."""

    post: Post
    sender: UserProfile | None
    receiver: UserProfile | None


@dataclass(frozen=True)
class EnrichedLike:
    like: Like
    user: UserProfile | None


@dataclass(frozen=True)
class EnrichedComment:
    comment: Comment
    user: UserProfile | None


@dataclass(frozen=True)
class Page(Generic[T]):
    """A page of results with the length-based hasMore estimate."""

    items: list[T]
    limit: int

    @property
    def total(self) -> int:
        return len(self.items)

    @property
    def has_more(self) -> bool:
        return len(self.items) == self.limit
