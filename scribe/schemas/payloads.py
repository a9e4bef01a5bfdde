"""Rule sets for incoming request bodies."""

from __future__ import annotations

from scribe.validation import Field, Rule, Schema

POST_CREATE = Schema(
    name="post",
    fields={
        "title": Field(required=True, max_length=100),
        "content": Field(required=True),
        "featured_image": Field(kind="uri"),
        "excerpt": Field(max_length=200, allow_empty=True),
        "author": Field(kind="identifier", required=True),
        "category": Field(kind="identifier", required=True),
        "tags": Field(many=True, max_length=30, default=list),
        "is_published": Field(kind="boolean", default=False),
    },
)

POST_UPDATE = Schema(
    name="post",
    min_fields=1,
    fields={
        "title": Field(max_length=100),
        "content": Field(),
        "featured_image": Field(kind="uri"),
        "excerpt": Field(max_length=200, allow_empty=True),
        "author": Field(kind="identifier"),
        "category": Field(kind="identifier"),
        "tags": Field(many=True, max_length=30),
        "is_published": Field(kind="boolean"),
    },
)

CATEGORY_CREATE = Schema(
    name="category",
    fields={
        "name": Field(required=True, max_length=50),
        "description": Field(max_length=200, allow_empty=True),
        "is_active": Field(kind="boolean", default=True),
    },
)

CATEGORY_UPDATE = Schema(
    name="category",
    min_fields=1,
    fields={
        "name": Field(max_length=50),
        "description": Field(max_length=200, allow_empty=True),
        "is_active": Field(kind="boolean"),
    },
)

COMMENT_CREATE = Schema(
    name="comment",
    fields={
        "content": Field(
            required=True,
            allow_empty=True,
            rules=(Rule(bool, "Comment content is required"),),
        ),
    },
    messages={"content": "Comment content is required"},
)
