"""Security façade: credential checks, ownership rules and rate limiting."""

from .access import (  # noqa: F401
    CredentialVerifier,
    Identity,
    authenticate,
    authenticate_optional,
    extract_bearer,
)
from .ownership import authorize_owner, require_role  # noqa: F401
from .rate_limit import limiter  # noqa: F401

__all__ = [
    "CredentialVerifier",
    "Identity",
    "authenticate",
    "authenticate_optional",
    "extract_bearer",
    "authorize_owner",
    "require_role",
    "limiter",
]
