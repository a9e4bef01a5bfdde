"""Scribe blog API application."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from asgi_correlation_id import CorrelationIdMiddleware
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from scribe.auth import auth_backend, fastapi_users
from scribe.config import settings
from scribe.database import init_database
from scribe.errors import AuthenticationError, ScribeError
from scribe.middleware.security import SecurityHeadersMiddleware
from scribe.observability import MetricsMiddleware, configure_logging
from scribe.routers import categories, posts, system
from scribe.schemas.user import UserCreate, UserRead, UserUpdate
from scribe.security import limiter

logger = logging.getLogger(__name__)

configure_logging(settings.log_level.upper(), json_output=not settings.debug)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_database()
    logger.info("Scribe ready", extra={"environment": settings.environment})
    yield
    logger.info("Scribe shutting down")


async def handle_scribe_error(request: Request, exc: ScribeError) -> JSONResponse:
    headers = (
        {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthenticationError) else None
    )
    return JSONResponse(exc.to_payload(), status_code=exc.status_code, headers=headers)


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "Unhandled error on %s %s", request.method, request.url.path, exc_info=exc
    )
    return JSONResponse(
        {"success": False, "error": "Server Error"},
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


async def handle_rate_limit(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    return JSONResponse(
        {"success": False, "error": "Too many requests, slow down"},
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
    )


# Interactive docs are development-only.
_docs = not settings.is_production

app = FastAPI(
    title="Scribe",
    description="Posts, categories and comments over a JSON API",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs" if _docs else None,
    redoc_url="/redoc" if _docs else None,
    openapi_url="/openapi.json" if _docs else None,
)

# Last added runs first: CORS, request id, headers, metrics, rate limit.
app.state.limiter = limiter
app.add_middleware(SlowAPIMiddleware)
app.add_middleware(MetricsMiddleware)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(CorrelationIdMiddleware, header_name="X-Request-ID")
if settings.allowed_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=False,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["Accept", "Authorization", "Content-Type", "X-Request-ID"],
        expose_headers=["X-Request-ID"],
    )

app.add_exception_handler(ScribeError, handle_scribe_error)
app.add_exception_handler(RateLimitExceeded, handle_rate_limit)
app.add_exception_handler(Exception, handle_unexpected_error)

app.include_router(system.router)
app.include_router(posts.router)
app.include_router(categories.router)
app.include_router(
    fastapi_users.get_auth_router(auth_backend), prefix="/api/auth/jwt", tags=["auth"]
)
app.include_router(
    fastapi_users.get_register_router(UserRead, UserCreate),
    prefix="/api/auth",
    tags=["auth"],
)
app.include_router(
    fastapi_users.get_users_router(UserRead, UserUpdate),
    prefix="/api/users",
    tags=["users"],
)
