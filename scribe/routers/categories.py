"""Category endpoints. Writes are restricted to admins."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, status

from scribe.dependencies import get_context, get_pipeline
from scribe.pipeline import RequestContext, RequestPipeline
from scribe.schemas.category import CategoryOut
from scribe.schemas.post import Envelope
from scribe.security import limiter

router = APIRouter(prefix="/api/categories", tags=["categories"])


@router.get("", response_model=Envelope[list[CategoryOut]], name="list_categories")
async def list_categories(
    ctx: RequestContext = Depends(get_context),
    pipeline: RequestPipeline = Depends(get_pipeline),
):
    categories = await pipeline.list_categories(ctx)
    pipeline.respond(ctx)
    return Envelope[list[CategoryOut]](
        data=[CategoryOut.model_validate(c) for c in categories]
    )


@router.get(
    "/{id_or_slug}", response_model=Envelope[CategoryOut], name="get_category"
)
async def get_category(
    id_or_slug: str,
    ctx: RequestContext = Depends(get_context),
    pipeline: RequestPipeline = Depends(get_pipeline),
):
    category = await pipeline.get_category(ctx, id_or_slug)
    pipeline.respond(ctx)
    return Envelope[CategoryOut](data=CategoryOut.model_validate(category))


@router.post(
    "",
    response_model=Envelope[CategoryOut],
    status_code=status.HTTP_201_CREATED,
    name="create_category",
)
@limiter.limit("30/minute")
async def create_category(
    request: Request,
    ctx: RequestContext = Depends(get_context),
    pipeline: RequestPipeline = Depends(get_pipeline),
):
    category = await pipeline.create_category(ctx)
    pipeline.respond(ctx)
    return Envelope[CategoryOut](data=CategoryOut.model_validate(category))


@router.put(
    "/{id_or_slug}", response_model=Envelope[CategoryOut], name="update_category"
)
@limiter.limit("30/minute")
async def update_category(
    request: Request,
    id_or_slug: str,
    ctx: RequestContext = Depends(get_context),
    pipeline: RequestPipeline = Depends(get_pipeline),
):
    category = await pipeline.update_category(ctx, id_or_slug)
    pipeline.respond(ctx)
    return Envelope[CategoryOut](data=CategoryOut.model_validate(category))


@router.delete(
    "/{id_or_slug}", response_model=Envelope[CategoryOut], name="archive_category"
)
@limiter.limit("30/minute")
async def archive_category(
    request: Request,
    id_or_slug: str,
    ctx: RequestContext = Depends(get_context),
    pipeline: RequestPipeline = Depends(get_pipeline),
):
    """Archive (soft delete) a category."""
    category = await pipeline.archive_category(ctx, id_or_slug)
    pipeline.respond(ctx)
    return Envelope[CategoryOut](
        data=CategoryOut.model_validate(category),
        message="Category archived successfully",
    )
