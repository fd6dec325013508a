"""Health Check Router - System status endpoints."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request

from api.dependencies import get_database
from api.models import HealthResponse
from database.core import AsyncDatabaseEngine

router = APIRouter(prefix="/api", tags=["Health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request, db: AsyncDatabaseEngine = Depends(get_database)):
    """
    Health check endpoint.

    Reports whether the database answers a trivial query.
    """
    return HealthResponse(
        success=True,
        message="Server is running",
        timestamp=datetime.now(timezone.utc).isoformat(),
        environment=request.app.state.settings.environment,
        database=await db.health_check(),
    )
