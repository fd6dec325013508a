"""
API Dependencies.

FastAPI dependencies for database sessions, the collaborators built in the
lifespan, and bearer authentication.
"""

from typing import AsyncGenerator, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from database.core import AsyncDatabaseEngine
from database.models.user import User
from utils.auth.flow import AuthFlow
from utils.auth.transit import TransitDecryptor
from utils.email import EmailService
from utils.errors import AuthenticationError, ForbiddenError
from utils.security import RecaptchaVerifier, SettingsCipher

bearer_scheme = HTTPBearer(auto_error=False)


# ============================================================================
# Lifespan-owned collaborators
# ============================================================================

def get_database(request: Request) -> AsyncDatabaseEngine:
    return request.app.state.db


async def get_db(db: AsyncDatabaseEngine = Depends(get_database)) -> AsyncGenerator[AsyncSession, None]:
    """Request-scoped session. Operations commit explicitly; anything left is rolled back."""
    async with db.session() as session:
        yield session


def get_auth_flow(request: Request) -> AuthFlow:
    return request.app.state.auth_flow


def get_decryptor(request: Request) -> TransitDecryptor:
    return request.app.state.decryptor


def get_settings_cipher(request: Request) -> SettingsCipher:
    return request.app.state.settings_cipher


def get_email_service(request: Request) -> EmailService:
    return request.app.state.email_service


def get_recaptcha(request: Request) -> RecaptchaVerifier:
    return request.app.state.recaptcha


# ============================================================================
# Authentication
# ============================================================================

async def auth(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    session: AsyncSession = Depends(get_db),
    flow: AuthFlow = Depends(get_auth_flow),
) -> User:
    """
    Require a valid session token for an existing account.

    Raises:
        AuthenticationError: Header missing, token invalid or expired, or
            account no longer exists
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Authentication required")

    user = await flow.authenticate_bearer(session, credentials.credentials)
    if user is None:
        raise AuthenticationError("Please authenticate")
    return user


async def admin_auth(user: User = Depends(auth)) -> User:
    """Require an authenticated admin."""
    if not user.is_admin:
        raise ForbiddenError()
    return user


async def auth_optional(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    session: AsyncSession = Depends(get_db),
    flow: AuthFlow = Depends(get_auth_flow),
) -> Optional[User]:
    """Account for a valid bearer token, or None for anonymous callers and bad tokens."""
    if credentials is None or not credentials.credentials:
        return None
    return await flow.authenticate_bearer(session, credentials.credentials)
