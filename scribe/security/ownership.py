from __future__ import annotations

from typing import Any

from scribe.errors import AuthenticationError, AuthorizationError
from scribe.security.access import Identity


def authorize_owner(
    identity: Identity | None, owner_id: Any, *, required: bool = True
) -> None:
    """Allow a mutation only when ``identity`` owns the resource.

    With no identity the check is skipped for routes that allow anonymous
    callers (``required=False``) and fails as unauthenticated otherwise.
    Ids are compared as strings; whether the identity still exists is not
    re-checked.
    """
    if identity is None:
        if required:
            raise AuthenticationError()
        return
    if str(identity.id) != str(owner_id):
        raise AuthorizationError()


def require_role(identity: Identity | None, role: str) -> None:
    if identity is None:
        raise AuthenticationError()
    if identity.role != role:
        raise AuthorizationError()
