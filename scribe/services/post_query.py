"""Translate list filters into a store query plus pagination metadata."""

from __future__ import annotations

import math
import re
import uuid
from dataclasses import dataclass
from typing import Any

from scribe.config import settings
from scribe.models.post import Post
from scribe.services.store import Store
from scribe.validation import is_identifier

_LEADING_INT = re.compile(r"\s*([+-]?)(\d+)")

# Largest value SQLite binds as an INTEGER.
MAX_INT = 2**63 - 1


@dataclass(frozen=True)
class Pagination:
    total: int
    page: int
    pages: int
    limit: int

    @classmethod
    def from_total(cls, total: int, page: int, limit: int) -> Pagination:
        # An empty result still reports one page.
        return cls(
            total=total,
            page=page,
            pages=max(math.ceil(total / limit), 1),
            limit=limit,
        )


@dataclass(frozen=True)
class PostQueryPlan:
    criteria: tuple[Any, ...]
    page: int
    limit: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    @property
    def order_by(self) -> tuple[Any, ...]:
        return (Post.created_at.desc(),)

    def paginate(self, total: int) -> Pagination:
        return Pagination.from_total(total, self.page, self.limit)


def parse_positive_int(raw: Any, default: int) -> int:
    """Lenient page/limit parsing.

    Only the leading integer counts, so "2.5" and "2abc" both read as 2.
    Junk or zero means ``default``, negatives mean 1 and anything larger
    than ``MAX_INT`` is clamped to it.
    """
    match = _LEADING_INT.match(str(raw)) if raw is not None else None
    if match is None:
        return default
    sign, digits = match.groups()
    value = int(digits) if len(digits) <= 19 else MAX_INT
    if value == 0:
        return default
    if sign == "-":
        return 1
    return min(value, MAX_INT)


def parse_flag(raw: Any) -> bool | None:
    if raw is None or isinstance(raw, bool):
        return raw
    return str(raw).strip().lower() == "true"


def build_post_query(
    store: Store,
    *,
    category: str | None = None,
    search: str | None = None,
    is_published: Any = None,
    page: Any = None,
    limit: Any = None,
) -> PostQueryPlan:
    """Build the filter for ``GET /api/posts``.

    A malformed category id is ignored rather than rejected, and the search
    term goes through the store's text search over title and content.
    """
    criteria: list[Any] = []

    if category and is_identifier(category):
        criteria.append(Post.category_id == uuid.UUID(str(category)))

    if search and search.strip():
        criteria.append(store.text_search(Post, search))

    published = parse_flag(is_published)
    if published is not None:
        criteria.append(Post.is_published.is_(published))

    page_number = parse_positive_int(page, 1)
    page_size = min(
        parse_positive_int(limit, settings.default_page_size), settings.max_page_size
    )
    return PostQueryPlan(criteria=tuple(criteria), page=page_number, limit=page_size)
