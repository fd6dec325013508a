"""Custom exception classes with detailed error information."""

from typing import Optional, Dict, Any, List
from datetime import datetime, timezone


class BaseApplicationError(Exception):
    """Base exception for all application errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize base error.

        Args:
            message: Error message shown to the client
            error_code: Machine-readable error code
            status_code: HTTP status code
            details: Additional error details
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc)

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to the response body sent to clients."""
        return {
            "success": False,
            "message": self.message,
        }


class ValidationError(BaseApplicationError):
    """Malformed input. Carries one message per failed field rule."""

    def __init__(
        self,
        errors: List[str],
        message: str = "Validation error",
        **kwargs
    ):
        super().__init__(
            message,
            error_code="VALIDATION_ERROR",
            status_code=400,
            **kwargs
        )
        self.errors = list(errors)

    def to_dict(self) -> Dict[str, Any]:
        body = super().to_dict()
        body["errors"] = self.errors
        return body


class ConflictError(BaseApplicationError):
    """A unique field (email, username) is already taken."""

    def __init__(
        self,
        message: str = "User with this email or username already exists",
        **kwargs
    ):
        super().__init__(
            message,
            error_code="CONFLICT",
            status_code=400,
            **kwargs
        )


class AuthenticationError(BaseApplicationError):
    """Bad credentials or missing/invalid bearer token."""

    def __init__(
        self,
        message: str = "Invalid credentials",
        **kwargs
    ):
        super().__init__(
            message,
            error_code="AUTHENTICATION_ERROR",
            status_code=401,
            **kwargs
        )


class AccountDisabledError(BaseApplicationError):
    """Login attempt against an account with is_active=False."""

    def __init__(
        self,
        message: str = "User is not active, please contact the admin.",
        **kwargs
    ):
        super().__init__(
            message,
            error_code="ACCOUNT_DISABLED",
            status_code=403,
            **kwargs
        )


class ForbiddenError(BaseApplicationError):
    """Authenticated caller lacks the required role."""

    def __init__(
        self,
        message: str = "Admin access required",
        **kwargs
    ):
        super().__init__(
            message,
            error_code="FORBIDDEN",
            status_code=403,
            **kwargs
        )


class InvalidTokenError(BaseApplicationError):
    """Expired, forged, replayed or mismatched token."""

    def __init__(
        self,
        message: str = "Invalid or expired reset token",
        status_code: int = 400,
        **kwargs
    ):
        super().__init__(
            message,
            error_code="INVALID_TOKEN",
            status_code=status_code,
            **kwargs
        )


class NotFoundError(BaseApplicationError):
    """Requested record does not exist."""

    def __init__(
        self,
        message: str = "Not found",
        **kwargs
    ):
        super().__init__(
            message,
            error_code="NOT_FOUND",
            status_code=404,
            **kwargs
        )


class CaptchaVerificationError(BaseApplicationError):
    """reCAPTCHA rejected the submission or could not be reached."""

    def __init__(
        self,
        message: str = "reCAPTCHA verification failed",
        **kwargs
    ):
        super().__init__(
            message,
            error_code="CAPTCHA_FAILED",
            status_code=422,
            **kwargs
        )


class InternalError(BaseApplicationError):
    """Unexpected failure. The message is never more specific than this."""

    def __init__(
        self,
        message: str = "Internal server error",
        **kwargs
    ):
        super().__init__(
            message,
            error_code="INTERNAL_ERROR",
            status_code=500,
            **kwargs
        )
