"""Post persistence rules: slugs, excerpts, publication and comments."""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime
from typing import Any

from scribe.errors import NotFoundError
from scribe.models.post import Comment, Post
from scribe.services.post_query import Pagination, PostQueryPlan
from scribe.services.slugs import assign_slug
from scribe.services.store import Store
from scribe.validation import is_identifier

logger = logging.getLogger(__name__)

EXCERPT_SOURCE_LENGTH = 150

# Payload keys that name a related record map onto the foreign key column.
_REFERENCE_FIELDS = {"author": "author_id", "category": "category_id"}


def derive_excerpt(content: str) -> str:
    return f"{content[:EXCERPT_SOURCE_LENGTH].strip()}..."


def unique_tags(tags: list[str]) -> list[str]:
    """Drop repeated tags, keeping first-seen order."""
    return list(dict.fromkeys(tags))


class PostService:
    """Post operations on top of a ``Store``."""

    def __init__(self, store: Store) -> None:
        self.store = store

    async def paginate(self, plan: PostQueryPlan) -> tuple[list[Post], Pagination]:
        """Fetch one page of posts matching a query plan.

        Args:
            plan: Filters, page and limit from ``build_post_query``

        Returns:
            The page of posts, newest first, and its pagination metadata.
            A page past the end is empty and is never queried.
        """
        total = await self.store.count(Post, *plan.criteria)
        if plan.offset >= total:
            return [], plan.paginate(total)
        posts = await self.store.find(
            Post,
            *plan.criteria,
            order_by=plan.order_by,
            offset=plan.offset,
            limit=plan.limit,
        )
        return posts, plan.paginate(total)

    async def lookup(self, id_or_slug: str) -> Post:
        """Find a post by id, falling back to slug.

        Args:
            id_or_slug: Post id or slug

        Returns:
            The matching Post

        Raises:
            NotFoundError: Neither the id nor the slug matches a post
        """
        post = None
        if is_identifier(id_or_slug):
            post = await self.store.find_one(Post, Post.id == uuid.UUID(id_or_slug))
        if post is None:
            post = await self.store.find_one(Post, Post.slug == id_or_slug)
        if post is None:
            raise NotFoundError("Post not found")
        return post

    async def view(self, id_or_slug: str) -> Post:
        """Look up a post for display and count the view.

        The counter is bumped in the database, so ``updated_at`` is left
        alone and concurrent views are not lost.
        """
        post = await self.lookup(id_or_slug)
        return await self.store.increment(post, "view_count")

    async def create(self, payload: dict[str, Any]) -> Post:
        """Create a post from a validated payload.

        Args:
            payload: Output of the post creation rules

        Returns:
            The stored Post with its slug, excerpt and relations loaded
        """
        post = Post()
        self._apply(post, payload)
        await self._prepare(post)
        post = await self.store.insert(post)
        logger.info("Post created", extra={"post_id": str(post.id), "slug": post.slug})
        return post

    async def update(self, post: Post, changes: dict[str, Any]) -> Post:
        """Apply validated changes; a new title re-derives the slug."""
        self._apply(post, changes)
        await self._prepare(post)
        return await self.store.update(post)

    async def delete(self, post: Post) -> None:
        await self.store.delete(Post, Post.id == post.id)
        logger.info("Post deleted", extra={"post_id": str(post.id)})

    async def add_comment(
        self, post: Post, content: str, user_id: str | None = None
    ) -> Post:
        """Attach a comment to a post.

        Args:
            post: Post being commented on
            content: Comment text, stripped before storing
            user_id: Commenter id, or None for an anonymous comment

        Returns:
            The post with its comments reloaded
        """
        await self.store.insert(
            Comment(
                post_id=post.id,
                content=content.strip(),
                user_id=uuid.UUID(user_id) if user_id else None,
            )
        )
        # Reloads the comment collection, commenter included.
        return await self.store.update(post)

    @staticmethod
    def _apply(post: Post, values: dict[str, Any]) -> None:
        for key, value in values.items():
            if key in _REFERENCE_FIELDS:
                setattr(post, _REFERENCE_FIELDS[key], uuid.UUID(value))
            elif key == "tags":
                post.tags = unique_tags(value)
            else:
                setattr(post, key, value)

    async def _prepare(self, post: Post) -> None:
        # Before any other query: probes autoflush pending title changes.
        await assign_slug(self.store, post)

        if post.is_published and post.published_at is None:
            post.published_at = datetime.now(UTC)

        if not post.excerpt and post.content:
            post.excerpt = derive_excerpt(post.content)
