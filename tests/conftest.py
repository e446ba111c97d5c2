"""Shared test fixtures."""

import threading
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime, timedelta
from itertools import count
from uuid import UUID, uuid4

import pytest
from fastapi.testclient import TestClient

from joydrop.api.app import create_app
from joydrop.config import Settings
from joydrop.containers import AppContainer
from joydrop.domain.posts import Comment, Like, NewPost, Post
from joydrop.domain.sessions import JoydropSession, SessionPatch, SessionStatus
from joydrop.domain.users import ProfilePatch, UserProfile
from joydrop.errors import UnauthorizedError
from joydrop.services.engagement import EngagementService
from joydrop.services.identity import IdentityService, IdentityVerifier
from joydrop.services.posts import (
    PostRepository,
    PostService,
    ReceivedIndex,
    ReceivedIndexRepository,
)
from joydrop.services.sessions import JoydropSessionService, SessionRepository
from joydrop.services.users import UserRepository, UserService

_BASE_TIME = datetime(2024, 1, 15, 10, 30, tzinfo=UTC)
_clock = count()


def _now() -> datetime:
    """Strictly increasing timestamps so newest-first ordering is stable."""
    return _BASE_TIME + timedelta(milliseconds=next(_clock))


@dataclass
class InMemoryPostRepository(PostRepository):
    """In-memory post repository; the lock stands in for a transaction."""

    posts: dict[UUID, Post] = field(default_factory=dict)
    likes: dict[UUID, Like] = field(default_factory=dict)
    comments: dict[UUID, Comment] = field(default_factory=dict)
    lock: threading.RLock = field(default_factory=threading.RLock)
    delete_calls: list[tuple[str, int]] = field(default_factory=list)

    def create_post(self, post: NewPost) -> Post:
        with self.lock:
            now = _now()
            created = Post(
                id=uuid4(),
                sender_id=post.sender_id,
                receiver_id=post.receiver_id,
                content=post.content,
                media_urls=list(post.media_urls),
                tags=list(post.tags),
                likes_count=0,
                comments_count=0,
                is_public=post.is_public,
                created_at=now,
                updated_at=now,
            )
            self.posts[created.id] = created
            return created

    def get_post(self, post_id: UUID) -> Post | None:
        return self.posts.get(post_id)

    def list_posts(self, sender_id: str | None, limit: int) -> list[Post]:
        if sender_id:
            posts = [p for p in self.posts.values() if p.sender_id == sender_id]
        else:
            posts = [p for p in self.posts.values() if p.is_public]
        return sorted(posts, key=lambda p: p.created_at, reverse=True)[:limit]

    def get_posts(self, post_ids: list[UUID]) -> list[Post]:
        return [self.posts[post_id] for post_id in post_ids if post_id in self.posts]

    def find_like(self, post_id: UUID, user_id: str) -> Like | None:
        return self._stored_like(post_id, user_id)

    def add_like(self, post_id: UUID, user_id: str) -> Like | None:
        with self.lock:
            if self._stored_like(post_id, user_id) is not None:
                return None
            like = Like(id=uuid4(), post_id=post_id, user_id=user_id, liked_at=_now())
            self.likes[like.id] = like
            self._bump(post_id, likes=1)
            return like

    def remove_like(self, post_id: UUID, user_id: str) -> bool:
        with self.lock:
            like = self._stored_like(post_id, user_id)
            if like is None:
                return False
            del self.likes[like.id]
            self._bump(post_id, likes=-1)
            return True

    def add_comment(self, post_id: UUID, user_id: str, comment: str) -> Comment:
        with self.lock:
            created = Comment(
                id=uuid4(),
                post_id=post_id,
                user_id=user_id,
                comment=comment,
                commented_at=_now(),
            )
            self.comments[created.id] = created
            self._bump(post_id, comments=1)
            return created

    def list_likes(self, post_id: UUID, limit: int) -> list[Like]:
        likes = [like for like in self.likes.values() if like.post_id == post_id]
        return sorted(likes, key=lambda like: like.liked_at, reverse=True)[:limit]

    def list_comments(self, post_id: UUID, limit: int) -> list[Comment]:
        comments = [c for c in self.comments.values() if c.post_id == post_id]
        return sorted(comments, key=lambda c: c.commented_at, reverse=True)[:limit]

    def list_like_ids(self, post_id: UUID) -> list[UUID]:
        return [like.id for like in self.likes.values() if like.post_id == post_id]

    def list_comment_ids(self, post_id: UUID) -> list[UUID]:
        return [c.id for c in self.comments.values() if c.post_id == post_id]

    def delete_likes(self, post_id: UUID, like_ids: list[UUID]) -> int:
        with self.lock:
            self.delete_calls.append(("likes", len(like_ids)))
            removed = [
                like_id
                for like_id in like_ids
                if like_id in self.likes and self.likes[like_id].post_id == post_id
            ]
            for like_id in removed:
                del self.likes[like_id]
            self._bump(post_id, likes=-len(removed))
            return len(removed)

    def delete_comments(self, post_id: UUID, comment_ids: list[UUID]) -> int:
        with self.lock:
            self.delete_calls.append(("comments", len(comment_ids)))
            removed = [
                comment_id
                for comment_id in comment_ids
                if comment_id in self.comments
                and self.comments[comment_id].post_id == post_id
            ]
            for comment_id in removed:
                del self.comments[comment_id]
            self._bump(post_id, comments=-len(removed))
            return len(removed)

    def delete_post(self, post_id: UUID) -> None:
        with self.lock:
            self.delete_calls.append(("post", 1))
            self.posts.pop(post_id, None)
            # Children left behind by a racing writer go with the post.
            for like_id in self.list_like_ids(post_id):
                del self.likes[like_id]
            for comment_id in self.list_comment_ids(post_id):
                del self.comments[comment_id]

    def _stored_like(self, post_id: UUID, user_id: str) -> Like | None:
        """Uniqueness check on (post_id, user_id), like the table constraint."""
        for like in list(self.likes.values()):
            if like.post_id == post_id and like.user_id == user_id:
                return like
        return None

    def _bump(self, post_id: UUID, likes: int = 0, comments: int = 0) -> None:
        post = self.posts.get(post_id)
        if post is None:
            return
        self.posts[post_id] = replace(
            post,
            likes_count=post.likes_count + likes,
            comments_count=post.comments_count + comments,
            updated_at=_now(),
        )


@dataclass
class InMemorySessionRepository(SessionRepository):
    """In-memory session repository sharing the post repository's lock."""

    posts: InMemoryPostRepository
    sessions: dict[UUID, JoydropSession] = field(default_factory=dict)

    def create_session(self, session_id: UUID, sender_id: str) -> JoydropSession:
        with self.posts.lock:
            now = _now()
            session = JoydropSession(
                id=session_id,
                sender_id=sender_id,
                status=SessionStatus.IN_PROGRESS,
                created_at=now,
                updated_at=now,
            )
            self.sessions[session_id] = session
            return session

    def get_session(self, session_id: UUID) -> JoydropSession | None:
        return self.sessions.get(session_id)

    def list_sessions(self, sender_id: str, limit: int) -> list[JoydropSession]:
        sessions = [s for s in self.sessions.values() if s.sender_id == sender_id]
        return sorted(sessions, key=lambda s: s.created_at, reverse=True)[:limit]

    def update_session_if_in_progress(
        self, session_id: UUID, patch: SessionPatch
    ) -> JoydropSession | None:
        with self.posts.lock:
            session = self.sessions.get(session_id)
            if session is None or session.status is not SessionStatus.IN_PROGRESS:
                return None
            row = patch.to_row()
            updated = replace(
                session,
                status=SessionStatus(row.get("status", session.status)),
                post_id=UUID(row["post_id"]) if row.get("post_id") else None,
                updated_at=_now(),
            )
            self.sessions[session_id] = updated
            return updated

    def complete_with_post(
        self, session_id: UUID, post: NewPost
    ) -> tuple[JoydropSession, UUID] | None:
        with self.posts.lock:
            session = self.sessions.get(session_id)
            if session is None or session.status is not SessionStatus.IN_PROGRESS:
                return None
            created = self.posts.create_post(post)
            completed = replace(
                session,
                status=SessionStatus.COMPLETED,
                post_id=created.id,
                updated_at=_now(),
            )
            self.sessions[session_id] = completed
            return completed, created.id


@dataclass
class InMemoryUserRepository(UserRepository):
    """In-memory profile repository with optional failing ids."""

    profiles: dict[str, UserProfile] = field(default_factory=dict)
    failing_ids: set[str] = field(default_factory=set)
    lookups: list[list[str]] = field(default_factory=list)

    def add(self, user_id: str, display_name: str | None = None) -> UserProfile:
        profile = UserProfile(
            id=user_id,
            display_name=display_name or user_id.title(),
            username=user_id,
            photo_url=None,
        )
        self.profiles[user_id] = profile
        return profile

    def get_profile(self, user_id: str) -> UserProfile | None:
        return self.profiles.get(user_id)

    def get_profiles(self, user_ids: list[str]) -> list[UserProfile]:
        self.lookups.append(list(user_ids))
        if self.failing_ids.intersection(user_ids):
            raise RuntimeError("profile lookup timed out")
        return [self.profiles[uid] for uid in user_ids if uid in self.profiles]

    def get_by_username(self, username: str) -> UserProfile | None:
        for profile in self.profiles.values():
            if profile.username == username:
                return profile
        return None

    def create_profile(self, profile: UserProfile) -> UserProfile:
        self.profiles[profile.id] = profile
        return profile

    def update_profile(self, user_id: str, patch: ProfilePatch) -> UserProfile | None:
        profile = self.profiles.get(user_id)
        if profile is None:
            return None
        updated = replace(profile, **patch.to_row())
        self.profiles[user_id] = updated
        return updated

    def delete_profile(self, user_id: str) -> bool:
        return self.profiles.pop(user_id, None) is not None


@dataclass
class InMemoryReceivedIndexRepository(ReceivedIndexRepository):
    """In-memory received joydrop index."""

    entries: list[tuple[str, UUID]] = field(default_factory=list)
    fail: bool = False

    def add_received(self, user_id: str, post_id: UUID) -> None:
        if self.fail:
            raise RuntimeError("index write failed")
        self.entries.append((user_id, post_id))

    def list_received_post_ids(self, user_id: str, limit: int) -> list[UUID]:
        ids = [post_id for uid, post_id in reversed(self.entries) if uid == user_id]
        return ids[:limit]


@dataclass
class FakeIdentityVerifier(IdentityVerifier):
    """Maps known tokens to user ids."""

    tokens: dict[str, str] = field(
        default_factory=lambda: {
            "token-u1": "u1",
            "token-u2": "u2",
            "token-u3": "u3",
        }
    )

    def verify(self, token: str) -> str:
        user_id = self.tokens.get(token)
        if user_id is None:
            raise UnauthorizedError("Invalid token")
        return user_id


def auth(user_id: str) -> dict[str, str]:
    """Authorization header for a user known to FakeIdentityVerifier."""
    return {"Authorization": f"Bearer token-{user_id}"}


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="header.payload.signature",
    )


@pytest.fixture
def post_repository() -> InMemoryPostRepository:
    return InMemoryPostRepository()


@pytest.fixture
def session_repository(
    post_repository: InMemoryPostRepository,
) -> InMemorySessionRepository:
    return InMemorySessionRepository(posts=post_repository)


@pytest.fixture
def user_repository() -> InMemoryUserRepository:
    repository = InMemoryUserRepository()
    repository.add("u1", "Uma")
    repository.add("u2", "Ugo")
    return repository


@pytest.fixture
def received_repository() -> InMemoryReceivedIndexRepository:
    return InMemoryReceivedIndexRepository()


@pytest.fixture
def user_service(user_repository: InMemoryUserRepository) -> UserService:
    return UserService(user_repository)


@pytest.fixture
def session_service(
    session_repository: InMemorySessionRepository,
    received_repository: InMemoryReceivedIndexRepository,
) -> JoydropSessionService:
    return JoydropSessionService(
        session_repository=session_repository,
        received_index=ReceivedIndex(received_repository),
    )


@pytest.fixture
def post_service(
    post_repository: InMemoryPostRepository,
    received_repository: InMemoryReceivedIndexRepository,
    user_service: UserService,
) -> PostService:
    return PostService(
        repository=post_repository,
        received_index=ReceivedIndex(received_repository),
        user_service=user_service,
    )


@pytest.fixture
def engagement_service(
    post_repository: InMemoryPostRepository, user_service: UserService
) -> EngagementService:
    return EngagementService(repository=post_repository, user_service=user_service)


@pytest.fixture
def container(
    settings: Settings,
    user_service: UserService,
    session_service: JoydropSessionService,
    post_service: PostService,
    engagement_service: EngagementService,
) -> AppContainer:
    return AppContainer(
        settings=settings,
        identity_service=IdentityService(FakeIdentityVerifier()),
        user_service=user_service,
        session_service=session_service,
        post_service=post_service,
        engagement_service=engagement_service,
    )


@pytest.fixture
def client(container: AppContainer) -> TestClient:
    return TestClient(create_app(container))
