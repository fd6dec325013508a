"""
API Request/Response Models.

Pydantic models for API request parsing and response serialization. Auth
bodies keep every field optional so that missing fields are reported by the
account field rules with their own messages rather than by pydantic.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


class CamelModel(BaseModel):
    """Accepts both the camelCase wire names and the snake_case field names."""

    model_config = ConfigDict(populate_by_name=True)


# ============================================================================
# Auth Request Models
# ============================================================================

class SignupRequest(CamelModel):
    username: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    confirm_password: Optional[str] = Field(default=None, alias="confirmPassword")


class LoginRequest(CamelModel):
    email: Optional[str] = None
    password: Optional[str] = Field(
        default=None,
        description="Plain text, or base64 RSA/PKCS#1 v1.5 ciphertext made with the published key"
    )


class ForgotPasswordRequest(CamelModel):
    email: Optional[str] = None


class ResetPasswordRequest(CamelModel):
    token: Optional[str] = None
    password: Optional[str] = None
    confirm_password: Optional[str] = Field(default=None, alias="confirmPassword")


class ChangePasswordRequest(CamelModel):
    current_password: Optional[str] = Field(default=None, alias="currentPassword")
    new_password: Optional[str] = Field(default=None, alias="newPassword")
    confirm_password: Optional[str] = Field(default=None, alias="confirmPassword")


# ============================================================================
# User Management Models
# ============================================================================

class UserCreateRequest(CamelModel):
    username: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    role: Optional[str] = None


class UserUpdateRequest(CamelModel):
    username: Optional[str] = None
    email: Optional[str] = None
    role: Optional[str] = None
    is_active: Optional[bool] = Field(default=None, alias="isActive")


# ============================================================================
# Settings & Contact Models
# ============================================================================

class NotificationEmailsRequest(CamelModel):
    emails: Optional[List[Any]] = None


class ContactRequest(CamelModel):
    """Public contact form body."""

    first_name: str = Field(..., alias="firstName", min_length=1, max_length=100)
    last_name: str = Field(..., alias="lastName", min_length=1, max_length=100)
    email: EmailStr
    phone: Optional[str] = Field(default=None, max_length=30)
    message: str = Field(..., min_length=1, max_length=2000)
    captcha_token: str = Field(..., alias="captchaToken", min_length=1)

    @field_validator("phone")
    @classmethod
    def empty_phone_is_none(cls, v: Optional[str]) -> Optional[str]:
        return v or None


# ============================================================================
# Response Models
# ============================================================================

class MessageResponse(BaseModel):
    success: bool = True
    message: str


class HealthResponse(BaseModel):
    """Health check response."""

    success: bool
    message: str
    timestamp: str
    environment: str
    database: bool


def success(message: Optional[str] = None, **payload: Any) -> Dict[str, Any]:
    """Standard ``{success: true, ...}`` body."""
    body: Dict[str, Any] = {"success": True}
    if message is not None:
        body["message"] = message
    body.update(payload)
    return body
