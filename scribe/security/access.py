"""Bearer credential checks."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from fastapi.security.utils import get_authorization_scheme_param

from scribe.errors import AuthenticationError


@dataclass(frozen=True)
class Identity:
    """The caller a verified credential resolved to."""

    id: str
    email: str
    role: str = "user"

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


class CredentialVerifier(Protocol):
    async def verify(self, token: str) -> Identity | None:
        """Return the identity behind ``token`` or None when it is unusable."""
        ...


def extract_bearer(authorization: str | None) -> str | None:
    scheme, token = get_authorization_scheme_param(authorization)
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


async def authenticate(
    verifier: CredentialVerifier, authorization: str | None
) -> Identity:
    """Resolve the Authorization header to an identity.

    Missing, malformed, expired and forged credentials all raise the same
    ``AuthenticationError``.
    """
    token = extract_bearer(authorization)
    if token is None:
        raise AuthenticationError()
    identity = await verifier.verify(token)
    if identity is None:
        raise AuthenticationError()
    return identity


async def authenticate_optional(
    verifier: CredentialVerifier, authorization: str | None
) -> Identity | None:
    """Like ``authenticate`` but a request with no header is anonymous.

    A header that is present still has to verify.
    """
    if not authorization:
        return None
    return await authenticate(verifier, authorization)
