"""FastAPI wiring for the request pipeline."""

from __future__ import annotations

import json

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from scribe.auth import JWTCredentialVerifier
from scribe.database import get_async_session
from scribe.pipeline import RequestContext, RequestPipeline
from scribe.security.access import CredentialVerifier
from scribe.services.store import Store

_BODY_METHODS = {"POST", "PUT", "PATCH"}


def get_store(session: AsyncSession = Depends(get_async_session)) -> Store:
    return Store(session)


def get_verifier(store: Store = Depends(get_store)) -> CredentialVerifier:
    return JWTCredentialVerifier(store)


def get_pipeline(
    store: Store = Depends(get_store),
    verifier: CredentialVerifier = Depends(get_verifier),
) -> RequestPipeline:
    return RequestPipeline(store, verifier)


async def get_context(request: Request) -> RequestContext:
    body = None
    if request.method in _BODY_METHODS:
        try:
            body = await request.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            # Left as None; the validator reports it as a non-object payload.
            body = None
    return RequestContext(
        authorization=request.headers.get("Authorization"),
        body=body,
        params=dict(request.query_params),
    )
