"""Dependency container wiring for the application."""

from dataclasses import dataclass

from supabase import ClientOptions, create_client

from joydrop.adapters.supabase_identity_verifier import SupabaseIdentityVerifier
from joydrop.adapters.supabase_post_repository import (
    SupabasePostRepository,
    SupabaseReceivedIndexRepository,
)
from joydrop.adapters.supabase_session_repository import SupabaseSessionRepository
from joydrop.adapters.supabase_user_repository import SupabaseUserRepository
from joydrop.config import Settings
from joydrop.services.engagement import EngagementService
from joydrop.services.identity import IdentityService
from joydrop.services.posts import PostService, ReceivedIndex
from joydrop.services.sessions import JoydropSessionService
from joydrop.services.users import UserService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    identity_service: IdentityService
    user_service: UserService
    session_service: JoydropSessionService
    post_service: PostService
    engagement_service: EngagementService


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url,
        resolved_settings.supabase_service_key,
        options=ClientOptions(
            postgrest_client_timeout=resolved_settings.supabase_timeout_seconds,
        ),
    )
    post_repository = SupabasePostRepository(supabase_client)
    received_index = ReceivedIndex(SupabaseReceivedIndexRepository(supabase_client))
    user_service = UserService(SupabaseUserRepository(supabase_client))
    session_service = JoydropSessionService(
        session_repository=SupabaseSessionRepository(supabase_client),
        received_index=received_index,
    )
    post_service = PostService(
        repository=post_repository,
        received_index=received_index,
        user_service=user_service,
    )
    engagement_service = EngagementService(
        repository=post_repository,
        user_service=user_service,
    )
    identity_service = IdentityService(SupabaseIdentityVerifier(supabase_client))

    return AppContainer(
        settings=resolved_settings,
        identity_service=identity_service,
        user_service=user_service,
        session_service=session_service,
        post_service=post_service,
        engagement_service=engagement_service,
    )
