"""Likes, comments and cascading post deletion."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from uuid import UUID

from joydrop.domain.posts import (
    Comment,
    EnrichedComment,
    EnrichedLike,
    Like,
    Page,
    Post,
)
from joydrop.errors import (
    ConflictError,
    ForbiddenError,
    InternalError,
    NotFoundError,
    PartialDeleteError,
)
from joydrop.services.posts import PostRepository
from joydrop.services.users import UserService

_logger = logging.getLogger(__name__)

DEFAULT_ENGAGEMENT_LIMIT = 20
MAX_ENGAGEMENT_LIMIT = 100
# Largest number of rows removed by a single delete statement.
DELETE_CHUNK_SIZE = 500


@dataclass
class EngagementService:
    """Keeps like/comment rows and post counters moving together."""

    repository: PostRepository
    user_service: UserService
    delete_chunk_size: int = DELETE_CHUNK_SIZE

    def like(self, post_id: UUID, user_id: str) -> Like:
        """Like a post once per user."""
        self._require_post(post_id, "like post")
        if self._find_like(post_id, user_id, "like post") is not None:
            raise ConflictError("Post already liked by this user")
        try:
            like = self.repository.add_like(post_id, user_id)
        except Exception as exc:
            _logger.exception("Failed to like post", extra={"post_id": str(post_id)})
            raise InternalError("like post") from exc
        if like is None:
            raise ConflictError("Post already liked by this user")
        _logger.info("Post liked: post_id=%s user_id=%s", post_id, user_id)
        return like

    def unlike(self, post_id: UUID, user_id: str) -> None:
        """Remove a user's like from a post."""
        if self._find_like(post_id, user_id, "unlike post") is None:
            raise NotFoundError("Like not found")
        try:
            removed = self.repository.remove_like(post_id, user_id)
        except Exception as exc:
            _logger.exception("Failed to unlike post", extra={"post_id": str(post_id)})
            raise InternalError("unlike post") from exc
        if not removed:
            raise NotFoundError("Like not found")
        _logger.info("Post unliked: post_id=%s user_id=%s", post_id, user_id)

    def comment(self, post_id: UUID, user_id: str, text: str) -> Comment:
        """Add a comment; users may comment any number of times."""
        self._require_post(post_id, "comment on post")
        try:
            comment = self.repository.add_comment(post_id, user_id, text)
        except Exception as exc:
            _logger.exception(
                "Failed to comment on post", extra={"post_id": str(post_id)}
            )
            raise InternalError("comment on post") from exc
        _logger.info("Comment added: post_id=%s comment_id=%s", post_id, comment.id)
        return comment

    def list_likes(
        self, post_id: UUID, limit: int = DEFAULT_ENGAGEMENT_LIMIT
    ) -> Page[EnrichedLike]:
        """Return recent likes with each liker's profile."""
        capped = _cap(limit)
        try:
            likes = self.repository.list_likes(post_id, capped)
        except Exception as exc:
            _logger.exception("Failed to list likes", extra={"post_id": str(post_id)})
            raise InternalError("list likes") from exc
        profiles = self.user_service.get_profiles([like.user_id for like in likes])
        return Page(
            items=[EnrichedLike(like=like, user=profiles.get(like.user_id)) for like in likes],
            limit=capped,
        )

    def list_comments(
        self, post_id: UUID, limit: int = DEFAULT_ENGAGEMENT_LIMIT
    ) -> Page[EnrichedComment]:
        """Return recent comments with each commenter's profile."""
        capped = _cap(limit)
        try:
            comments = self.repository.list_comments(post_id, capped)
        except Exception as exc:
            _logger.exception(
                "Failed to list comments", extra={"post_id": str(post_id)}
            )
            raise InternalError("list comments") from exc
        profiles = self.user_service.get_profiles(
            [comment.user_id for comment in comments]
        )
        return Page(
            items=[
                EnrichedComment(comment=comment, user=profiles.get(comment.user_id))
                for comment in comments
            ],
            limit=capped,
        )

    def delete_post(self, post_id: UUID, requester_id: str) -> None:
        """Delete an owned post together with all of its likes and comments.

        Likes and comments are removed in chunks, each committed together with
        the matching counter decrement; the post row goes last so an
        interrupted delete can be retried.
        """
        post = self._require_post(post_id, "delete post")
        if post.sender_id != requester_id:
            raise ForbiddenError("Unauthorized to delete this post")

        deleted = 0
        deleted += self._delete_in_chunks(
            "likes",
            post_id,
            self.repository.list_like_ids,
            self.repository.delete_likes,
            deleted,
        )
        deleted += self._delete_in_chunks(
            "comments",
            post_id,
            self.repository.list_comment_ids,
            self.repository.delete_comments,
            deleted,
        )
        try:
            self.repository.delete_post(post_id)
        except Exception as exc:
            _logger.exception("Failed to delete post row", extra={"post_id": str(post_id)})
            raise PartialDeleteError("delete post", stage="post", deleted=deleted) from exc
        _logger.info("Post deleted: post_id=%s children=%s", post_id, deleted)

    def _delete_in_chunks(
        self,
        stage: str,
        post_id: UUID,
        list_ids: Callable[[UUID], list[UUID]],
        delete_ids: Callable[[UUID, list[UUID]], int],
        already_deleted: int,
    ) -> int:
        try:
            ids = list_ids(post_id)
        except Exception as exc:
            _logger.exception(
                "Failed to enumerate %s for delete", stage, extra={"post_id": str(post_id)}
            )
            raise PartialDeleteError(
                "delete post", stage=stage, deleted=already_deleted
            ) from exc
        deleted = 0
        for start in range(0, len(ids), self.delete_chunk_size):
            chunk = ids[start : start + self.delete_chunk_size]
            try:
                deleted += delete_ids(post_id, chunk)
            except Exception as exc:
                _logger.exception(
                    "Failed to delete %s chunk", stage, extra={"post_id": str(post_id)}
                )
                raise PartialDeleteError(
                    "delete post", stage=stage, deleted=already_deleted + deleted
                ) from exc
        return deleted

    def _require_post(self, post_id: UUID, operation: str) -> Post:
        try:
            post = self.repository.get_post(post_id)
        except Exception as exc:
            _logger.exception(
                "Failed to load post for %s", operation, extra={"post_id": str(post_id)}
            )
            raise InternalError(operation) from exc
        if post is None:
            raise NotFoundError("Post not found")
        return post

    def _find_like(self, post_id: UUID, user_id: str, operation: str) -> Like | None:
        try:
            return self.repository.find_like(post_id, user_id)
        except Exception as exc:
            _logger.exception(
                "Failed to look up like for %s", operation, extra={"post_id": str(post_id)}
            )
            raise InternalError(operation) from exc


def _cap(limit: int) -> int:
    return max(1, min(limit, MAX_ENGAGEMENT_LIMIT))
