"""Bearer token verification against Supabase Auth."""

import logging
from dataclasses import dataclass

from supabase import (
    AuthApiError,
    AuthError,
    AuthRetryableError,
    AuthUnknownError,
    Client,
)

from joydrop.errors import InternalError, UnauthorizedError
from joydrop.services.identity import IdentityVerifier

_logger = logging.getLogger(__name__)


@dataclass
class SupabaseIdentityVerifier(IdentityVerifier):
    """Resolves access tokens to user ids with the Supabase Auth API."""

    client: Client

    def verify(self, token: str) -> str:
        """Return the user id for a valid access token.

        Tokens the Auth API rejects raise UnauthorizedError; failures to reach
        it raise InternalError.
        """
        try:
            response = self.client.auth.get_user(token)
        except AuthError as exc:
            if _is_transport_failure(exc):
                _logger.exception("Auth API unavailable while verifying token")
                raise InternalError("verify identity") from exc
            _logger.info("Rejected bearer token: %s", exc.message)
            raise UnauthorizedError("Invalid token") from exc
        except Exception as exc:
            _logger.exception("Failed to verify bearer token")
            raise InternalError("verify identity") from exc
        if response is None or response.user is None:
            raise UnauthorizedError("Invalid token")
        return str(response.user.id)


def _is_transport_failure(exc: AuthError) -> bool:
    if isinstance(exc, (AuthRetryableError, AuthUnknownError)):
        return True
    return isinstance(exc, AuthApiError) and exc.status >= 500
