"""Tests for user profile reads and writes."""

import pytest

from joydrop.domain.users import ProfilePatch, UserProfile
from joydrop.errors import ConflictError, ForbiddenError, InternalError, NotFoundError
from joydrop.services.users import UserService
from tests.conftest import InMemoryUserRepository


def test_get_profile_returns_profile(user_service: UserService) -> None:
    profile = user_service.get_profile("u1")

    assert profile.display_name == "Uma"


def test_get_profile_missing_raises_not_found(user_service: UserService) -> None:
    with pytest.raises(NotFoundError):
        user_service.get_profile("nobody")


def test_get_profiles_dedupes_and_chunks() -> None:
    repository = InMemoryUserRepository()
    ids = [f"user-{index}" for index in range(23)]
    for user_id in ids:
        repository.add(user_id)
    service = UserService(repository)

    profiles = service.get_profiles(ids + ids[:5] + [""])

    assert [len(chunk) for chunk in repository.lookups] == [10, 10, 3]
    assert set(profiles) == set(ids)
    assert all(profile is not None for profile in profiles.values())


def test_get_profiles_failed_chunk_maps_to_none() -> None:
    repository = InMemoryUserRepository()
    ids = [f"user-{index}" for index in range(12)]
    for user_id in ids:
        repository.add(user_id)
    repository.failing_ids.add("user-3")
    service = UserService(repository)

    profiles = service.get_profiles(ids)

    assert all(profiles[user_id] is None for user_id in ids[:10])
    assert profiles["user-10"] is not None
    assert profiles["user-11"] is not None


def test_get_profiles_unknown_user_maps_to_none(user_service: UserService) -> None:
    profiles = user_service.get_profiles(["u1", "ghost"])

    assert profiles["u1"] is not None
    assert profiles["ghost"] is None


def test_get_profiles_empty_skips_lookup(
    user_service: UserService, user_repository: InMemoryUserRepository
) -> None:
    assert user_service.get_profiles([]) == {}
    assert user_repository.lookups == []


def _profile(user_id: str, username: str | None = None) -> UserProfile:
    return UserProfile(
        id=user_id, display_name="Ira", username=username, photo_url=None, bio="Hello"
    )


def test_create_profile_stores_caller_profile(
    user_service: UserService, user_repository: InMemoryUserRepository
) -> None:
    created = user_service.create_profile("u3", _profile("u3", "ira"))

    assert created.username == "ira"
    assert user_repository.profiles["u3"] == created


def test_create_profile_for_someone_else_is_forbidden(
    user_service: UserService, user_repository: InMemoryUserRepository
) -> None:
    with pytest.raises(ForbiddenError):
        user_service.create_profile("u1", _profile("u3"))

    assert "u3" not in user_repository.profiles


def test_create_existing_profile_conflicts(user_service: UserService) -> None:
    with pytest.raises(ConflictError):
        user_service.create_profile("u1", _profile("u1"))


def test_create_profile_with_taken_username_conflicts(
    user_service: UserService, user_repository: InMemoryUserRepository
) -> None:
    with pytest.raises(ConflictError):
        user_service.create_profile("u3", _profile("u3", "u1"))

    assert "u3" not in user_repository.profiles


def test_get_by_username(user_service: UserService) -> None:
    assert user_service.get_by_username("u2").display_name == "Ugo"

    with pytest.raises(NotFoundError):
        user_service.get_by_username("nobody")


def test_update_profile_writes_only_supplied_fields(user_service: UserService) -> None:
    updated = user_service.update_profile("u1", "u1", ProfilePatch(bio="Kind words"))

    assert updated.bio == "Kind words"
    assert updated.display_name == "Uma"
    assert updated.username == "u1"


def test_update_profile_can_clear_a_field(user_service: UserService) -> None:
    updated = user_service.update_profile("u1", "u1", ProfilePatch(photo_url=None))

    assert updated.photo_url is None
    assert updated.display_name == "Uma"


def test_empty_update_returns_current_profile(
    user_service: UserService, user_repository: InMemoryUserRepository
) -> None:
    before = user_repository.profiles["u1"]

    assert user_service.update_profile("u1", "u1", ProfilePatch()) == before


def test_update_profile_for_someone_else_is_forbidden(
    user_service: UserService, user_repository: InMemoryUserRepository
) -> None:
    with pytest.raises(ForbiddenError):
        user_service.update_profile("u2", "u1", ProfilePatch(bio="Hijacked"))

    assert user_repository.profiles["u1"].bio is None


def test_update_missing_profile_is_not_found(user_service: UserService) -> None:
    with pytest.raises(NotFoundError):
        user_service.update_profile("u3", "u3", ProfilePatch(bio="Hi"))


def test_update_to_taken_username_conflicts(user_service: UserService) -> None:
    with pytest.raises(ConflictError):
        user_service.update_profile("u1", "u1", ProfilePatch(username="u2"))


def test_update_keeping_own_username_is_allowed(user_service: UserService) -> None:
    updated = user_service.update_profile(
        "u1", "u1", ProfilePatch(username="u1", display_name="Uma B")
    )

    assert updated.display_name == "Uma B"


def test_delete_profile(
    user_service: UserService, user_repository: InMemoryUserRepository
) -> None:
    user_service.delete_profile("u1", "u1")

    assert "u1" not in user_repository.profiles
    with pytest.raises(NotFoundError):
        user_service.delete_profile("u1", "u1")


def test_delete_profile_for_someone_else_is_forbidden(
    user_service: UserService, user_repository: InMemoryUserRepository
) -> None:
    with pytest.raises(ForbiddenError):
        user_service.delete_profile("u2", "u1")

    assert "u1" in user_repository.profiles


def test_profile_store_failures_are_internal_errors() -> None:
    class UnreachableRepository(InMemoryUserRepository):
        def get_profile(self, user_id):  # type: ignore[no-untyped-def]
            raise RuntimeError("connection refused")

        def get_by_username(self, username):  # type: ignore[no-untyped-def]
            raise RuntimeError("connection refused")

        def delete_profile(self, user_id):  # type: ignore[no-untyped-def]
            raise RuntimeError("connection refused")

    service = UserService(UnreachableRepository())

    cases = [
        (lambda: service.get_profile("u1"), "get user profile"),
        (lambda: service.get_by_username("uma"), "find user by username"),
        (lambda: service.create_profile("u3", _profile("u3")), "create user profile"),
        (
            lambda: service.update_profile("u1", "u1", ProfilePatch(bio="x")),
            "update user profile",
        ),
        (lambda: service.delete_profile("u1", "u1"), "delete user profile"),
    ]
    for call, operation in cases:
        with pytest.raises(InternalError) as excinfo:
            call()
        assert excinfo.value.operation == operation
