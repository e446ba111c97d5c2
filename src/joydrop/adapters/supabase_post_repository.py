"""Supabase implementation for posts, likes and comments."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from supabase import Client

from joydrop.domain.posts import Comment, Like, NewPost, Post
from joydrop.services.posts import PostRepository, ReceivedIndexRepository

# PostgREST caps a single select at this many rows by default.
_PAGE_SIZE = 1000


@dataclass
class SupabasePostRepository(PostRepository):
    """Supabase-backed repository for posts and their engagement rows.

    Counter updates happen inside the ``like_post``, ``unlike_post`` and
    ``comment_on_post`` database functions so the child row and the post
    counter commit in the same transaction.
    """

    client: Client

    def create_post(self, post: NewPost) -> Post:
        """Create a post row and return it."""
        response = (
            self.client.table("posts")
            .insert(
                {
                    "sender_id": post.sender_id,
                    "receiver_id": post.receiver_id,
                    "content": post.content,
                    "media_urls": post.media_urls,
                    "tags": post.tags,
                    "likes_count": 0,
                    "comments_count": 0,
                    "is_public": post.is_public,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create post")
        return _parse_post(response.data[0])

    def get_post(self, post_id: UUID) -> Post | None:
        """Return a post by id, if present."""
        response = (
            self.client.table("posts")
            .select("*")
            .eq("id", str(post_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_post(response.data[0])

    def list_posts(self, sender_id: str | None, limit: int) -> list[Post]:
        """Return a sender's posts, or the public feed."""
        query = self.client.table("posts").select("*")
        if sender_id:
            query = query.eq("sender_id", sender_id)
        else:
            query = query.eq("is_public", True)
        response = query.order("created_at", desc=True).limit(limit).execute()
        return [_parse_post(row) for row in response.data or []]

    def get_posts(self, post_ids: list[UUID]) -> list[Post]:
        """Return posts for the given ids."""
        if not post_ids:
            return []
        response = (
            self.client.table("posts")
            .select("*")
            .in_("id", [str(post_id) for post_id in post_ids])
            .execute()
        )
        return [_parse_post(row) for row in response.data or []]

    def find_like(self, post_id: UUID, user_id: str) -> Like | None:
        """Return a user's like on a post, if present."""
        response = (
            self.client.table("post_likes")
            .select("*")
            .eq("post_id", str(post_id))
            .eq("user_id", user_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_like(response.data[0])

    def add_like(self, post_id: UUID, user_id: str) -> Like | None:
        """Insert a like and bump likes_count atomically."""
        response = self.client.rpc(
            "like_post", {"p_post_id": str(post_id), "p_user_id": user_id}
        ).execute()
        if not response.data:
            return None
        return _parse_like(response.data[0])

    def remove_like(self, post_id: UUID, user_id: str) -> bool:
        """Delete a like and drop likes_count atomically."""
        response = self.client.rpc(
            "unlike_post", {"p_post_id": str(post_id), "p_user_id": user_id}
        ).execute()
        return bool(response.data)

    def add_comment(self, post_id: UUID, user_id: str, comment: str) -> Comment:
        """Insert a comment and bump comments_count atomically."""
        response = self.client.rpc(
            "comment_on_post",
            {"p_post_id": str(post_id), "p_user_id": user_id, "p_comment": comment},
        ).execute()
        if not response.data:
            raise RuntimeError("Failed to create comment")
        return _parse_comment(response.data[0])

    def list_likes(self, post_id: UUID, limit: int) -> list[Like]:
        """Return likes on a post, newest first."""
        response = (
            self.client.table("post_likes")
            .select("*")
            .eq("post_id", str(post_id))
            .order("liked_at", desc=True)
            .limit(limit)
            .execute()
        )
        return [_parse_like(row) for row in response.data or []]

    def list_comments(self, post_id: UUID, limit: int) -> list[Comment]:
        """Return comments on a post, newest first."""
        response = (
            self.client.table("post_comments")
            .select("*")
            .eq("post_id", str(post_id))
            .order("commented_at", desc=True)
            .limit(limit)
            .execute()
        )
        return [_parse_comment(row) for row in response.data or []]

    def list_like_ids(self, post_id: UUID) -> list[UUID]:
        """Return every like id on a post."""
        return self._list_child_ids("post_likes", post_id)

    def list_comment_ids(self, post_id: UUID) -> list[UUID]:
        """Return every comment id on a post."""
        return self._list_child_ids("post_comments", post_id)

    def delete_likes(self, post_id: UUID, like_ids: list[UUID]) -> int:
        """Delete a chunk of likes and drop likes_count atomically."""
        return self._delete_ids("delete_post_likes", post_id, like_ids)

    def delete_comments(self, post_id: UUID, comment_ids: list[UUID]) -> int:
        """Delete a chunk of comments and drop comments_count atomically."""
        return self._delete_ids("delete_post_comments", post_id, comment_ids)

    def delete_post(self, post_id: UUID) -> None:
        """Delete the post row."""
        self.client.table("posts").delete().eq("id", str(post_id)).execute()

    def _list_child_ids(self, table: str, post_id: UUID) -> list[UUID]:
        ids: list[UUID] = []
        offset = 0
        while True:
            response = (
                self.client.table(table)
                .select("id")
                .eq("post_id", str(post_id))
                .order("id")
                .range(offset, offset + _PAGE_SIZE - 1)
                .execute()
            )
            rows = response.data or []
            ids.extend(UUID(str(row["id"])) for row in rows)
            if len(rows) < _PAGE_SIZE:
                return ids
            offset += _PAGE_SIZE

    def _delete_ids(self, function: str, post_id: UUID, ids: list[UUID]) -> int:
        if not ids:
            return 0
        response = self.client.rpc(
            function,
            {"p_post_id": str(post_id), "p_ids": [str(item_id) for item_id in ids]},
        ).execute()
        return int(response.data or 0)


@dataclass
class SupabaseReceivedIndexRepository(ReceivedIndexRepository):
    """Supabase-backed index of joydrops each user has received."""

    client: Client

    def add_received(self, user_id: str, post_id: UUID) -> None:
        """Record a received joydrop for a user."""
        self.client.table("user_received_posts").insert(
            {
                "user_id": user_id,
                "post_id": str(post_id),
                "type": "received_joydrop",
            }
        ).execute()

    def list_received_post_ids(self, user_id: str, limit: int) -> list[UUID]:
        """Return received post ids, newest first."""
        response = (
            self.client.table("user_received_posts")
            .select("post_id")
            .eq("user_id", user_id)
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
        return [UUID(str(row["post_id"])) for row in response.data or []]


def _parse_post(row: dict[str, object]) -> Post:
    """Parse a post row into a domain model."""
    receiver_id = row.get("receiver_id")
    return Post(
        id=UUID(str(row["id"])),
        sender_id=str(row["sender_id"]),
        receiver_id=str(receiver_id) if receiver_id else None,
        content=str(row.get("content", "")),
        media_urls=list(row.get("media_urls") or []),
        tags=list(row.get("tags") or []),
        likes_count=int(row.get("likes_count", 0)),
        comments_count=int(row.get("comments_count", 0)),
        is_public=bool(row.get("is_public", not receiver_id)),
        created_at=datetime.fromisoformat(str(row["created_at"])),
        updated_at=datetime.fromisoformat(str(row["updated_at"])),
    )


def _parse_like(row: dict[str, object]) -> Like:
    return Like(
        id=UUID(str(row["id"])),
        post_id=UUID(str(row["post_id"])),
        user_id=str(row["user_id"]),
        liked_at=datetime.fromisoformat(str(row["liked_at"])),
    )


def _parse_comment(row: dict[str, object]) -> Comment:
    return Comment(
        id=UUID(str(row["id"])),
        post_id=UUID(str(row["post_id"])),
        user_id=str(row["user_id"]),
        comment=str(row["comment"]),
        commented_at=datetime.fromisoformat(str(row["commented_at"])),
    )
