from __future__ import annotations

import uuid

from fastapi_users import schemas
from pydantic import Field

from scribe.models.user import UserRole


class UserRead(schemas.BaseUser[uuid.UUID]):
    name: str
    role: UserRole = UserRole.USER
    bio: str | None = None
    avatar: str | None = None


class UserCreate(schemas.BaseUserCreate):
    name: str = Field(..., min_length=1, max_length=60)
    bio: str | None = Field(None, max_length=300)
    avatar: str | None = None


class UserUpdate(schemas.BaseUserUpdate):
    name: str | None = Field(None, min_length=1, max_length=60)
    bio: str | None = Field(None, max_length=300)
    avatar: str | None = None
