"""Post persistence interfaces and post read/create services."""

import logging
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from joydrop.domain.posts import (
    Comment,
    EnrichedPost,
    Like,
    NewPost,
    Page,
    Post,
)
from joydrop.errors import InternalError, NotFoundError
from joydrop.services.users import UserService

_logger = logging.getLogger(__name__)

DEFAULT_FEED_LIMIT = 10
MAX_FEED_LIMIT = 50


class PostRepository(Protocol):
    """Persistence interface for posts and their likes/comments."""

    def create_post(self, post: NewPost) -> Post:
        """Create a post with zeroed counters and return it."""

    def get_post(self, post_id: UUID) -> Post | None:
        """Return a post by id, if present."""

    def list_posts(self, sender_id: str | None, limit: int) -> list[Post]:
        """Return a sender's posts, or public posts when sender is None."""

    def get_posts(self, post_ids: list[UUID]) -> list[Post]:
        """Return the posts that exist among the given ids."""

    def find_like(self, post_id: UUID, user_id: str) -> Like | None:
        """Return the user's like on a post, if present."""

    def add_like(self, post_id: UUID, user_id: str) -> Like | None:
        """Insert a like and increment likes_count in one transaction.

        Returns None when the user already liked the post.
        """

    def remove_like(self, post_id: UUID, user_id: str) -> bool:
        """Delete a like and decrement likes_count in one transaction.

        Returns False when there was no like to remove.
        """

    def add_comment(self, post_id: UUID, user_id: str, comment: str) -> Comment:
        """Insert a comment and increment comments_count in one transaction."""

    def list_likes(self, post_id: UUID, limit: int) -> list[Like]:
        """Return likes on a post, newest first."""

    def list_comments(self, post_id: UUID, limit: int) -> list[Comment]:
        """Return comments on a post, newest first."""

    def list_like_ids(self, post_id: UUID) -> list[UUID]:
        """Return the ids of every like on a post."""

    def list_comment_ids(self, post_id: UUID) -> list[UUID]:
        """Return the ids of every comment on a post."""

    def delete_likes(self, post_id: UUID, like_ids: list[UUID]) -> int:
        """Delete a chunk of likes and lower likes_count in one transaction.

        Returns the number of likes actually removed.
        """

    def delete_comments(self, post_id: UUID, comment_ids: list[UUID]) -> int:
        """Delete a chunk of comments and lower comments_count in one transaction.

        Returns the number of comments actually removed.
        """

    def delete_post(self, post_id: UUID) -> None:
        """Delete the post row."""


class ReceivedIndexRepository(Protocol):
    """Persistence interface for the per-user received joydrop index."""

    def add_received(self, user_id: str, post_id: UUID) -> None:
        """Record that the user received a post."""

    def list_received_post_ids(self, user_id: str, limit: int) -> list[UUID]:
        """Return ids of posts the user received, newest first."""


@dataclass
class ReceivedIndex:
    """Best-effort index of private joydrops per receiver."""

    repository: ReceivedIndexRepository

    def record_received(self, user_id: str, post_id: UUID) -> None:
        """Index a post for its receiver without failing the caller."""
        try:
            self.repository.add_received(user_id, post_id)
        except Exception:
            _logger.warning(
                "Failed to index received joydrop: user_id=%s post_id=%s",
                user_id,
                post_id,
                exc_info=True,
            )

    def list_post_ids(self, user_id: str, limit: int) -> list[UUID]:
        return self.repository.list_received_post_ids(user_id, limit)


@dataclass
class PostService:
    """Creates posts and assembles enriched feeds."""

    repository: PostRepository
    received_index: ReceivedIndex
    user_service: UserService

    def create_post(self, post: NewPost) -> Post:
        """Create a post outside of a session."""
        try:
            created = self.repository.create_post(post)
        except Exception as exc:
            _logger.exception("Failed to create post", extra={"sender_id": post.sender_id})
            raise InternalError("create post") from exc
        if post.receiver_id:
            self.received_index.record_received(post.receiver_id, created.id)
        _logger.info("Post created: post_id=%s", created.id)
        return created

    def get_post(self, post_id: UUID) -> EnrichedPost:
        """Return a single enriched post or raise NotFoundError."""
        try:
            post = self.repository.get_post(post_id)
        except Exception as exc:
            _logger.exception("Failed to get post", extra={"post_id": str(post_id)})
            raise InternalError("get post") from exc
        if post is None:
            raise NotFoundError("Post not found")
        return self.enrich([post])[0]

    def list_posts(
        self, sender_id: str | None = None, limit: int = DEFAULT_FEED_LIMIT
    ) -> Page[EnrichedPost]:
        """List a user's posts, or the public feed when no user is given."""
        capped = max(1, min(limit, MAX_FEED_LIMIT))
        try:
            posts = self.repository.list_posts(sender_id, capped)
        except Exception as exc:
            _logger.exception("Failed to list posts", extra={"sender_id": sender_id})
            raise InternalError("list posts") from exc
        return Page(items=self.enrich(posts), limit=capped)

    def list_received(
        self, user_id: str, limit: int = DEFAULT_FEED_LIMIT
    ) -> Page[EnrichedPost]:
        """List posts addressed to the user, newest first."""
        capped = max(1, min(limit, MAX_FEED_LIMIT))
        try:
            post_ids = self.received_index.list_post_ids(user_id, capped)
            posts = self.repository.get_posts(post_ids)
        except Exception as exc:
            _logger.exception(
                "Failed to list received joydrops", extra={"user_id": user_id}
            )
            raise InternalError("list received joydrops") from exc
        by_id = {post.id: post for post in posts}
        ordered = [by_id[post_id] for post_id in post_ids if post_id in by_id]
        return Page(items=self.enrich(ordered), limit=capped)

    def enrich(self, posts: list[Post]) -> list[EnrichedPost]:
        """Attach sender and receiver profiles, leaving unknown users as None."""
        user_ids: list[str] = []
        for post in posts:
            user_ids.append(post.sender_id)
            if post.receiver_id:
                user_ids.append(post.receiver_id)
        profiles = self.user_service.get_profiles(user_ids)
        return [
            EnrichedPost(
                post=post,
                sender=profiles.get(post.sender_id),
                receiver=profiles.get(post.receiver_id) if post.receiver_id else None,
            )
            for post in posts
        ]
