"""Request pipeline shared by the post and category routes.

Each operation walks a request through the same ordered stages::

    UNAUTHENTICATED -> AUTHENTICATED -> VALIDATED -> AUTHORIZED
        -> PERSISTED -> RESPONDED

Reads skip the authentication and authorization stages, and comments may
be posted anonymously. Any error moves the context to FAILED and
propagates to the HTTP layer unchanged.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Mapping
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from scribe.errors import ScribeError
from scribe.models.category import Category
from scribe.models.post import Post
from scribe.models.user import UserRole
from scribe.observability.metrics import PIPELINE_REJECTIONS
from scribe.schemas.payloads import (
    CATEGORY_CREATE,
    CATEGORY_UPDATE,
    COMMENT_CREATE,
    POST_CREATE,
    POST_UPDATE,
)
from scribe.security.access import (
    CredentialVerifier,
    Identity,
    authenticate,
    authenticate_optional,
)
from scribe.security.ownership import authorize_owner, require_role
from scribe.services.category_service import CategoryService
from scribe.services.post_query import Pagination, PostQueryPlan, build_post_query
from scribe.services.post_service import PostService
from scribe.services.store import Store
from scribe.validation import Schema

logger = logging.getLogger(__name__)


class Stage(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"
    VALIDATED = "validated"
    AUTHORIZED = "authorized"
    PERSISTED = "persisted"
    RESPONDED = "responded"
    FAILED = "failed"


@dataclass
class RequestContext:
    """Everything the stages read from and attach to a single request."""

    authorization: str | None = None
    body: Any = None
    params: Mapping[str, Any] = field(default_factory=dict)
    identity: Identity | None = None
    payload: dict[str, Any] | None = None
    plan: PostQueryPlan | None = None
    stage: Stage = Stage.UNAUTHENTICATED
    error: ScribeError | None = None

    def advance(self, stage: Stage) -> None:
        self.stage = stage


class RequestPipeline:
    """Composes guard, validator, query builder and authorizer over a store.

    Collaborators are passed in; nothing is looked up from module state.
    """

    def __init__(self, store: Store, verifier: CredentialVerifier) -> None:
        self.store = store
        self.verifier = verifier
        self.posts = PostService(store)
        self.categories = CategoryService(store)

    # Stages

    async def authenticate(
        self, ctx: RequestContext, *, optional: bool = False
    ) -> Identity | None:
        if optional:
            ctx.identity = await authenticate_optional(self.verifier, ctx.authorization)
        else:
            ctx.identity = await authenticate(self.verifier, ctx.authorization)
        if ctx.identity is not None:
            ctx.advance(Stage.AUTHENTICATED)
        return ctx.identity

    def validate(self, ctx: RequestContext, schema: Schema) -> dict[str, Any]:
        ctx.payload = schema.validate(ctx.body)
        ctx.advance(Stage.VALIDATED)
        return ctx.payload

    def plan_posts(self, ctx: RequestContext) -> PostQueryPlan:
        params = ctx.params
        ctx.plan = build_post_query(
            self.store,
            category=params.get("category"),
            search=params.get("q") or params.get("search"),
            is_published=params.get("is_published"),
            page=params.get("page"),
            limit=params.get("limit"),
        )
        return ctx.plan

    def authorize(
        self, ctx: RequestContext, owner_id: Any, *, required: bool = True
    ) -> None:
        authorize_owner(ctx.identity, owner_id, required=required)
        ctx.advance(Stage.AUTHORIZED)

    def authorize_role(self, ctx: RequestContext, role: UserRole) -> None:
        require_role(ctx.identity, role.value)
        ctx.advance(Stage.AUTHORIZED)

    def respond(self, ctx: RequestContext) -> None:
        ctx.advance(Stage.RESPONDED)

    @asynccontextmanager
    async def _running(self, ctx: RequestContext, operation: str) -> AsyncIterator[None]:
        try:
            yield
        except ScribeError as exc:
            logger.info(
                "%s rejected with %s after stage %s",
                operation,
                exc.status_code,
                ctx.stage.value,
            )
            PIPELINE_REJECTIONS.labels(operation, exc.status_code).inc()
            ctx.error = exc
            ctx.advance(Stage.FAILED)
            raise
        except Exception:
            ctx.advance(Stage.FAILED)
            raise

    # Posts

    async def list_posts(self, ctx: RequestContext) -> tuple[list[Post], Pagination]:
        """List posts from the query parameters on ``ctx``.

        Args:
            ctx: Context whose ``params`` hold filters, page and limit

        Returns:
            One page of posts and its pagination metadata
        """
        async with self._running(ctx, "list_posts"):
            plan = self.plan_posts(ctx)
            return await self.posts.paginate(plan)

    async def get_post(self, ctx: RequestContext, id_or_slug: str) -> Post:
        async with self._running(ctx, "get_post"):
            return await self.posts.view(id_or_slug)

    async def create_post(self, ctx: RequestContext) -> Post:
        """Create a post on behalf of the authenticated author.

        Args:
            ctx: Context carrying the credential and the raw body

        Returns:
            The stored Post

        Raises:
            AuthenticationError: Missing or unusable credential
            ValidationError: Body fails the post rules
            AuthorizationError: ``author`` is not the acting identity
            ConflictError: A concurrent writer took the same slug
        """
        async with self._running(ctx, "create_post"):
            await self.authenticate(ctx)
            payload = self.validate(ctx, POST_CREATE)
            self.authorize(ctx, payload["author"])
            post = await self.posts.create(payload)
            ctx.advance(Stage.PERSISTED)
            return post

    async def update_post(self, ctx: RequestContext, id_or_slug: str) -> Post:
        async with self._running(ctx, "update_post"):
            await self.authenticate(ctx)
            changes = self.validate(ctx, POST_UPDATE)
            post = await self.posts.lookup(id_or_slug)
            self.authorize(ctx, post.author_id)
            if "author" in changes:
                # Posts cannot be reassigned to another author.
                self.authorize(ctx, changes["author"])
            post = await self.posts.update(post, changes)
            ctx.advance(Stage.PERSISTED)
            return post

    async def delete_post(self, ctx: RequestContext, id_or_slug: str) -> None:
        async with self._running(ctx, "delete_post"):
            await self.authenticate(ctx)
            post = await self.posts.lookup(id_or_slug)
            self.authorize(ctx, post.author_id)
            await self.posts.delete(post)
            ctx.advance(Stage.PERSISTED)

    async def add_comment(self, ctx: RequestContext, id_or_slug: str) -> Post:
        """Comment on a post, anonymously unless a credential is supplied."""
        async with self._running(ctx, "add_comment"):
            identity = await self.authenticate(ctx, optional=True)
            payload = self.validate(ctx, COMMENT_CREATE)
            post = await self.posts.lookup(id_or_slug)
            post = await self.posts.add_comment(
                post, payload["content"], identity.id if identity else None
            )
            ctx.advance(Stage.PERSISTED)
            return post

    # Categories

    async def list_categories(self, ctx: RequestContext) -> list[Category]:
        async with self._running(ctx, "list_categories"):
            include_inactive = str(ctx.params.get("include_inactive", "")).lower()
            return await self.categories.list_categories(
                include_inactive=include_inactive == "true"
            )

    async def get_category(self, ctx: RequestContext, id_or_slug: str) -> Category:
        async with self._running(ctx, "get_category"):
            return await self.categories.lookup(id_or_slug)

    async def create_category(self, ctx: RequestContext) -> Category:
        async with self._running(ctx, "create_category"):
            await self.authenticate(ctx)
            payload = self.validate(ctx, CATEGORY_CREATE)
            self.authorize_role(ctx, UserRole.ADMIN)
            category = await self.categories.create(payload)
            ctx.advance(Stage.PERSISTED)
            return category

    async def update_category(self, ctx: RequestContext, id_or_slug: str) -> Category:
        async with self._running(ctx, "update_category"):
            await self.authenticate(ctx)
            changes = self.validate(ctx, CATEGORY_UPDATE)
            category = await self.categories.lookup(id_or_slug)
            self.authorize_role(ctx, UserRole.ADMIN)
            category = await self.categories.update(category, changes)
            ctx.advance(Stage.PERSISTED)
            return category

    async def archive_category(self, ctx: RequestContext, id_or_slug: str) -> Category:
        async with self._running(ctx, "archive_category"):
            await self.authenticate(ctx)
            category = await self.categories.lookup(id_or_slug)
            self.authorize_role(ctx, UserRole.ADMIN)
            category = await self.categories.archive(category)
            ctx.advance(Stage.PERSISTED)
            return category
