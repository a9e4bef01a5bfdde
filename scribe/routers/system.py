"""Health and Prometheus endpoints."""

from __future__ import annotations

import logging
import secrets

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from scribe.config import settings
from scribe.database import get_async_session
from scribe.observability import metrics_response

logger = logging.getLogger(__name__)

router = APIRouter(tags=["system"])
basic_auth = HTTPBasic()


@router.get("/healthz", summary="Health check", response_model=dict)
async def health_check(
    request: Request, session: AsyncSession = Depends(get_async_session)
) -> dict:
    try:
        await session.execute(text("SELECT 1"))
    except Exception:
        logger.exception("Database ping failed")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="unhealthy"
        )
    if settings.is_production:
        return {"status": "healthy"}
    return {
        "status": "healthy",
        "database": "connected",
        "version": request.app.version,
    }


def require_metrics_credentials(
    credentials: HTTPBasicCredentials = Depends(basic_auth),
) -> None:
    """Any credentials pass until METRICS_PASSWORD is configured."""
    if settings.metrics_password is None:
        return
    # Evaluate both comparisons so timing does not reveal which one failed.
    checks = [
        secrets.compare_digest(credentials.username, settings.metrics_username),
        secrets.compare_digest(credentials.password, settings.metrics_password),
    ]
    if not all(checks):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Basic"},
        )


@router.get(
    "/metrics",
    include_in_schema=False,
    dependencies=[Depends(require_metrics_credentials)],
)
def metrics():
    return metrics_response()
