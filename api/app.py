"""
FastAPI Application.

Admin portal API with:
- Modular router structure
- Correlation ids on every request
- Centralized error handling
- CORS for the admin console
"""

import uuid
from typing import Optional

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from api.lifespan import build_lifespan
from api.routers import (
    auth_router,
    contact_router,
    health_router,
    settings_router,
    users_router,
)
from config import Settings, get_settings
from utils.errors import register_exception_handlers
from utils.monitoring import clear_correlation_id, get_logger, set_correlation_id, setup_logging

logger = get_logger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"


def create_app(
    settings: Optional[Settings] = None,
    http_transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Settings to run with (defaults to the environment)
        http_transport: Transport for outbound HTTP calls, for tests
    """
    settings = settings or get_settings()
    setup_logging(settings.log_level, json_output=not settings.is_development)

    app = FastAPI(
        title=settings.app_name,
        description="Account authentication, user administration, settings and contact submissions.",
        version="1.0.0",
        lifespan=build_lifespan(settings, http_transport),
        docs_url="/docs" if settings.is_development else None,
        redoc_url=None,
        redirect_slashes=False,
    )

    # ========================================================================
    # Middleware Stack
    # ========================================================================

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", CORRELATION_HEADER],
        expose_headers=[CORRELATION_HEADER],
        max_age=600,
    )

    @app.middleware("http")
    async def correlation_id_middleware(request: Request, call_next):
        correlation_id = request.headers.get(CORRELATION_HEADER) or str(uuid.uuid4())
        set_correlation_id(correlation_id)
        try:
            response = await call_next(request)
        finally:
            clear_correlation_id()
        response.headers[CORRELATION_HEADER] = correlation_id
        return response

    # ========================================================================
    # Exception Handlers
    # ========================================================================

    register_exception_handlers(app, expose_details=settings.is_development)

    # ========================================================================
    # Routers
    # ========================================================================

    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(settings_router)
    app.include_router(contact_router)

    return app


if __name__ == "__main__":
    import uvicorn

    _settings = get_settings()
    uvicorn.run(
        create_app(_settings),
        host=_settings.api_host,
        port=_settings.api_port,
        log_level=_settings.log_level.lower(),
    )
