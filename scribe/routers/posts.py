"""Post and comment endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, status

from scribe.dependencies import get_context, get_pipeline
from scribe.pipeline import RequestContext, RequestPipeline
from scribe.schemas.post import Envelope, PaginationOut, PostOut, PostPage
from scribe.security import limiter

router = APIRouter(prefix="/api/posts", tags=["posts"])


@router.get("", response_model=PostPage, name="list_posts")
async def list_posts(
    ctx: RequestContext = Depends(get_context),
    pipeline: RequestPipeline = Depends(get_pipeline),
):
    """List posts, newest first.

    Query parameters: ``category`` (id), ``q``/``search``, ``is_published``,
    ``page`` and ``limit``.
    """
    posts, pagination = await pipeline.list_posts(ctx)
    pipeline.respond(ctx)
    return PostPage(
        data=[PostOut.model_validate(post) for post in posts],
        pagination=PaginationOut.model_validate(pagination),
    )


@router.get("/{id_or_slug}", response_model=Envelope[PostOut], name="get_post")
async def get_post(
    id_or_slug: str,
    ctx: RequestContext = Depends(get_context),
    pipeline: RequestPipeline = Depends(get_pipeline),
):
    post = await pipeline.get_post(ctx, id_or_slug)
    pipeline.respond(ctx)
    return Envelope[PostOut](data=PostOut.model_validate(post))


@router.post(
    "",
    response_model=Envelope[PostOut],
    status_code=status.HTTP_201_CREATED,
    name="create_post",
)
@limiter.limit("30/minute")
async def create_post(
    request: Request,
    ctx: RequestContext = Depends(get_context),
    pipeline: RequestPipeline = Depends(get_pipeline),
):
    post = await pipeline.create_post(ctx)
    pipeline.respond(ctx)
    return Envelope[PostOut](data=PostOut.model_validate(post))


@router.put("/{id_or_slug}", response_model=Envelope[PostOut], name="update_post")
@limiter.limit("30/minute")
async def update_post(
    request: Request,
    id_or_slug: str,
    ctx: RequestContext = Depends(get_context),
    pipeline: RequestPipeline = Depends(get_pipeline),
):
    post = await pipeline.update_post(ctx, id_or_slug)
    pipeline.respond(ctx)
    return Envelope[PostOut](data=PostOut.model_validate(post))


@router.delete("/{id_or_slug}", response_model=Envelope[None], name="delete_post")
@limiter.limit("30/minute")
async def delete_post(
    request: Request,
    id_or_slug: str,
    ctx: RequestContext = Depends(get_context),
    pipeline: RequestPipeline = Depends(get_pipeline),
):
    await pipeline.delete_post(ctx, id_or_slug)
    pipeline.respond(ctx)
    return Envelope[None](data=None, message="Post deleted successfully")


@router.post(
    "/{id_or_slug}/comments", response_model=Envelope[PostOut], name="add_comment"
)
@limiter.limit("20/minute")
async def add_comment(
    request: Request,
    id_or_slug: str,
    ctx: RequestContext = Depends(get_context),
    pipeline: RequestPipeline = Depends(get_pipeline),
):
    """Add a comment; anonymous callers are allowed."""
    post = await pipeline.add_comment(ctx, id_or_slug)
    pipeline.respond(ctx)
    return Envelope[PostOut](
        data=PostOut.model_validate(post), message="Comment added successfully"
    )
