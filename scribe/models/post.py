"""Post and comment models."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime

from fastapi_users_db_sqlalchemy.generics import GUID
from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from scribe.database import Base
from scribe.models.category import Category
from scribe.models.user import User

DEFAULT_FEATURED_IMAGE = "default-post.jpg"


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Comment(Base):
    """Reader comment. Owned by its post and deleted along with it."""

    __tablename__ = "comments"

    id: Mapped[uuid.UUID] = mapped_column(GUID, primary_key=True, default=uuid.uuid4)
    post_id: Mapped[uuid.UUID] = mapped_column(
        GUID, ForeignKey("posts.id", ondelete="CASCADE"), index=True
    )
    user_id: Mapped[uuid.UUID | None] = mapped_column(
        GUID, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    content: Mapped[str] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow
    )

    user: Mapped[User | None] = relationship(lazy="selectin")


class Post(Base):
    """Blog post.

    ``published_at`` is stamped the first time ``is_published`` becomes
    True and is never cleared afterwards.
    """

    __tablename__ = "posts"

    id: Mapped[uuid.UUID] = mapped_column(GUID, primary_key=True, default=uuid.uuid4)
    title: Mapped[str] = mapped_column(String(100))
    slug: Mapped[str] = mapped_column(String(200), unique=True, index=True)
    content: Mapped[str] = mapped_column(Text)
    excerpt: Mapped[str | None] = mapped_column(String(200), nullable=True)
    featured_image: Mapped[str] = mapped_column(
        String(500), default=DEFAULT_FEATURED_IMAGE
    )
    author_id: Mapped[uuid.UUID] = mapped_column(
        GUID, ForeignKey("users.id"), index=True
    )
    category_id: Mapped[uuid.UUID] = mapped_column(
        GUID, ForeignKey("categories.id"), index=True
    )
    tags: Mapped[list[str]] = mapped_column(JSON, default=list)
    is_published: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default="0", index=True
    )
    published_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    view_count: Mapped[int] = mapped_column(Integer, default=0, server_default="0")

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow
    )

    author: Mapped[User | None] = relationship(lazy="selectin")
    category: Mapped[Category | None] = relationship(lazy="selectin")
    comments: Mapped[list[Comment]] = relationship(
        lazy="selectin",
        order_by=Comment.created_at,
        cascade="all, delete-orphan",
    )

    # Slug generation reads this attribute; also the text-search columns.
    slug_source = "title"
    search_columns = ("title", "content")

    @property
    def url(self) -> str:
        return f"/posts/{self.slug}"
