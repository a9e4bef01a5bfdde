from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum

from fastapi_users_db_sqlalchemy import SQLAlchemyBaseUserTableUUID
from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from scribe.database import Base


class UserRole(str, Enum):
    USER = "user"
    ADMIN = "admin"


class User(SQLAlchemyBaseUserTableUUID, Base):
    __tablename__ = "users"

    name: Mapped[str] = mapped_column(String(60), default="")
    role: Mapped[str] = mapped_column(
        String(10), default=UserRole.USER.value, server_default=UserRole.USER.value
    )
    bio: Mapped[str | None] = mapped_column(String(300), default=None)
    avatar: Mapped[str | None] = mapped_column(
        String(500), default="default-avatar.png"
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC)
    )
