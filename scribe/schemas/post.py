"""Pydantic schemas for posts and comments."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from scribe.schemas.category import CategorySummary

T = TypeVar("T")


class AuthorSummary(BaseModel):
    """Public view of a user; never includes credentials."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    email: str


class CommentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    content: str
    user: AuthorSummary | None = None
    created_at: datetime


class PostOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    title: str
    slug: str
    url: str
    content: str
    excerpt: str | None = None
    featured_image: str
    author: AuthorSummary | None = None
    category: CategorySummary | None = None
    tags: list[str] = Field(default_factory=list)
    is_published: bool
    published_at: datetime | None = None
    view_count: int = 0
    comments: list[CommentOut] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class PaginationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total: int
    page: int
    pages: int
    limit: int


class Envelope(BaseModel, Generic[T]):
    """Standard success wrapper for API responses."""

    success: bool = True
    data: T
    message: str | None = None


class PostPage(Envelope[list[PostOut]]):
    pagination: PaginationOut
