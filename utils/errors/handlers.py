"""Error handling utilities and FastAPI exception handlers."""

import traceback
from typing import Optional, Any, Dict

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .exceptions import BaseApplicationError, InternalError, NotFoundError, ValidationError
from utils.monitoring import get_logger

logger = get_logger(__name__)


class ErrorHandler:
    """
    Centralized error handling.

    Features:
    - Error logging with request context
    - Error counting per type
    - Error transformation into client-safe response bodies
    """

    def __init__(self, expose_details: bool = False):
        """
        Args:
            expose_details: Include exception message and stack in 500 responses
        """
        self.expose_details = expose_details
        self.error_count = 0
        self.error_types: Dict[str, int] = {}

    def log_error(
        self,
        error: BaseException,
        context: Optional[Dict[str, Any]] = None
    ):
        """
        Log error with context.

        Args:
            error: Exception to log
            context: Additional context
        """
        self.error_count += 1
        error_type = type(error).__name__
        self.error_types[error_type] = self.error_types.get(error_type, 0) + 1

        if isinstance(error, BaseApplicationError):
            if error.status_code >= 500:
                logger.error(f"{error.error_code}: {error.message}", error=error, **(context or {}))
            else:
                logger.info(
                    f"{error.error_code}: {error.message}",
                    status_code=error.status_code,
                    **(context or {})
                )
        else:
            logger.error(f"{error_type}: {error}", error=error, **(context or {}))

    def handle_error(
        self,
        error: BaseException,
        context: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """
        Handle error and return the response body.

        Args:
            error: Exception to handle
            context: Additional context

        Returns:
            Error response body
        """
        self.log_error(error, context)

        if isinstance(error, BaseApplicationError):
            return error.to_dict()

        body = InternalError().to_dict()
        if self.expose_details:
            body["error"] = str(error)
            body["stack"] = "".join(
                traceback.format_exception(type(error), error, error.__traceback__)
            )
        return body

    def get_stats(self) -> Dict[str, Any]:
        """Get error statistics."""
        return {
            "total_errors": self.error_count,
            "error_types": dict(self.error_types),
        }


def register_exception_handlers(app: FastAPI, expose_details: bool = False) -> ErrorHandler:
    """
    Install the application's exception handlers.

    Application errors keep their status code, request validation failures
    become 400s, and anything else is logged and reported as a generic 500.
    """
    handler = ErrorHandler(expose_details=expose_details)
    app.state.error_handler = handler

    def _context(request: Request) -> Dict[str, Any]:
        return {"method": request.method, "path": request.url.path}

    @app.exception_handler(BaseApplicationError)
    async def application_error_handler(request: Request, exc: BaseApplicationError):
        body = handler.handle_error(exc, _context(request))
        return JSONResponse(status_code=exc.status_code, content=body)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        messages = []
        for err in exc.errors():
            location = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
            messages.append(f"{location}: {err.get('msg')}" if location else err.get("msg"))
        error = ValidationError(messages)
        body = handler.handle_error(error, _context(request))
        return JSONResponse(status_code=error.status_code, content=body)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            error = NotFoundError(f"Route {request.url.path} not found")
            return JSONResponse(status_code=404, content=handler.handle_error(error, _context(request)))
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "message": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        body = handler.handle_error(exc, _context(request))
        return JSONResponse(status_code=500, content=body)

    return handler
