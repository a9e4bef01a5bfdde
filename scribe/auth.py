"""User accounts and bearer token issuance/verification."""

from __future__ import annotations

import logging
import uuid
from collections.abc import AsyncGenerator

import jwt
from fastapi import Depends, Request
from fastapi_users import FastAPIUsers, UUIDIDMixin
from fastapi_users.authentication import (
    AuthenticationBackend,
    BearerTransport,
    JWTStrategy,
)
from fastapi_users.exceptions import InvalidPasswordException
from fastapi_users.jwt import decode_jwt, generate_jwt
from fastapi_users.manager import BaseUserManager
from fastapi_users_db_sqlalchemy import SQLAlchemyUserDatabase
from sqlalchemy.ext.asyncio import AsyncSession

from scribe.config import settings
from scribe.database import get_async_session
from scribe.models.user import User
from scribe.schemas.user import UserCreate
from scribe.security.access import Identity
from scribe.services.store import Store

logger = logging.getLogger(__name__)

TOKEN_AUDIENCE = ["fastapi-users:auth"]
MIN_PASSWORD_LENGTH = 6


class UserManager(UUIDIDMixin, BaseUserManager[User, uuid.UUID]):
    reset_password_token_secret = settings.secret_key
    verification_token_secret = settings.secret_key

    async def validate_password(self, password: str, user: UserCreate | User) -> None:
        if len(password) < MIN_PASSWORD_LENGTH:
            raise InvalidPasswordException(
                reason=f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
            )

    async def on_after_register(
        self, user: User, request: Request | None = None
    ) -> None:
        logger.info("User registered", extra={"user_id": str(user.id)})


async def get_user_db(
    session: AsyncSession = Depends(get_async_session),
) -> AsyncGenerator[SQLAlchemyUserDatabase[User, uuid.UUID], None]:
    yield SQLAlchemyUserDatabase(session, User)


async def get_user_manager(
    user_db: SQLAlchemyUserDatabase[User, uuid.UUID] = Depends(get_user_db),
) -> AsyncGenerator[UserManager, None]:
    yield UserManager(user_db)


def get_jwt_strategy() -> JWTStrategy:
    return JWTStrategy(
        secret=settings.secret_key,
        lifetime_seconds=settings.jwt_lifetime_seconds,
        token_audience=TOKEN_AUDIENCE,
    )


bearer_transport = BearerTransport(tokenUrl="api/auth/jwt/login")

auth_backend = AuthenticationBackend(
    name="jwt",
    transport=bearer_transport,
    get_strategy=get_jwt_strategy,
)

fastapi_users = FastAPIUsers[User, uuid.UUID](
    get_user_manager,
    [auth_backend],
)


def issue_token(user_id: uuid.UUID | str, lifetime_seconds: int | None = None) -> str:
    """Mint a token in the same shape ``JWTStrategy.write_token`` produces."""
    return generate_jwt(
        {"sub": str(user_id), "aud": TOKEN_AUDIENCE},
        settings.secret_key,
        lifetime_seconds or settings.jwt_lifetime_seconds,
    )


class JWTCredentialVerifier:
    """Checks token signature, audience and expiry, then loads the active user."""

    def __init__(self, store: Store, secret: str | None = None) -> None:
        self.store = store
        self.secret = secret or settings.secret_key

    async def verify(self, token: str) -> Identity | None:
        try:
            data = decode_jwt(token, self.secret, TOKEN_AUDIENCE)
            user_id = uuid.UUID(data["sub"])
        except (jwt.PyJWTError, KeyError, TypeError, ValueError):
            return None
        user = await self.store.find_one(
            User, User.id == user_id, User.is_active.is_(True)
        )
        if user is None:
            return None
        return Identity(id=str(user.id), email=user.email, role=user.role)
