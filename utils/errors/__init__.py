"""Error taxonomy and handling."""

from .exceptions import (
    BaseApplicationError,
    ValidationError,
    ConflictError,
    AuthenticationError,
    AccountDisabledError,
    ForbiddenError,
    InvalidTokenError,
    NotFoundError,
    CaptchaVerificationError,
    InternalError,
)
from .handlers import (
    ErrorHandler,
    register_exception_handlers,
)

__all__ = [
    # Exceptions
    "BaseApplicationError",
    "ValidationError",
    "ConflictError",
    "AuthenticationError",
    "AccountDisabledError",
    "ForbiddenError",
    "InvalidTokenError",
    "NotFoundError",
    "CaptchaVerificationError",
    "InternalError",
    # Handlers
    "ErrorHandler",
    "register_exception_handlers",
]
