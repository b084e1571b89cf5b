# backend/app/routes/health.py
"""
Health check endpoints for the application.

These endpoints are used by load balancers and monitoring to check
process liveness and database connectivity.
"""

from datetime import datetime, timezone
import logging
from typing import Dict

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel, Field
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.constants import API_VERSION, BRAND_NAME
from ..database import get_db, get_db_pool_status

logger = logging.getLogger(__name__)
router = APIRouter(tags=["health"])


class LiveHealthResponse(BaseModel):
    ok: bool


class HealthCheckResponse(BaseModel):
    """Standard health check response."""

    status: str = Field(description="Service health status", pattern="^(healthy|degraded)$")
    service: str
    version: str
    timestamp: datetime
    checks: Dict[str, bool]
    database_pool: Dict[str, int]


@router.get("/live", response_model=LiveHealthResponse)
def live_check(response: Response) -> LiveHealthResponse:
    """Liveness check that avoids touching external dependencies."""

    response.headers["Cache-Control"] = "no-store"
    return LiveHealthResponse(ok=True)


@router.get("/health", response_model=HealthCheckResponse)
def health_check(db: Session = Depends(get_db)) -> HealthCheckResponse:
    # Check database connectivity
    try:
        db.execute(text("SELECT 1"))
        db_status = True
        status = "healthy"
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}")
        db_status = False
        status = "degraded"

    return HealthCheckResponse(
        status=status,
        service=f"{BRAND_NAME} API",
        version=API_VERSION,
        timestamp=datetime.now(timezone.utc),
        checks={"database": db_status},
        database_pool=get_db_pool_status(),
    )
