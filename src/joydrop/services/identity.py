"""Caller identity verification."""

from dataclasses import dataclass
from typing import Protocol

from joydrop.errors import UnauthorizedError


class IdentityVerifier(Protocol):
    """Verifies a bearer credential and returns the caller's user id."""

    def verify(self, token: str) -> str:
        """Return the verified user id or raise UnauthorizedError."""


@dataclass
class IdentityService:
    """Resolves Authorization headers to verified user ids."""

    verifier: IdentityVerifier

    def caller_from_header(self, authorization: str | None) -> str:
        """Return the caller id for an ``Authorization: Bearer`` header."""
        if not authorization:
            raise UnauthorizedError("Missing bearer token")
        scheme, _, token = authorization.partition(" ")
        token = token.strip()
        if scheme.lower() != "bearer" or not token:
            raise UnauthorizedError("Missing bearer token")
        return self.verifier.verify(token)
