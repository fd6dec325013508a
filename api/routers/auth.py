"""
Authentication Endpoints

Account signup and login, the current-user lookup, password reset and
change, and publication of the transit encryption key.
"""

from fastapi import APIRouter, Depends, status
from fastapi.responses import PlainTextResponse
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import auth, get_auth_flow, get_db, get_decryptor
from api.models import (
    ChangePasswordRequest,
    ForgotPasswordRequest,
    LoginRequest,
    MessageResponse,
    ResetPasswordRequest,
    SignupRequest,
    success,
)
from database.models.user import User
from utils.auth.flow import AuthFlow
from utils.auth.tokens import SessionClaims
from utils.auth.transit import TransitDecryptor
from utils.errors import NotFoundError

router = APIRouter(prefix="/api/auth", tags=["authentication"])


@router.post("/signup", status_code=status.HTTP_201_CREATED)
async def signup(
    body: SignupRequest,
    session: AsyncSession = Depends(get_db),
    flow: AuthFlow = Depends(get_auth_flow),
):
    """Register a new account with role ``user`` and return a session token."""
    result = await flow.signup(session, body.username, body.email, body.password, body.confirm_password)
    return success("User registered successfully", **result.to_dict())


@router.post("/login")
async def login(
    body: LoginRequest,
    session: AsyncSession = Depends(get_db),
    flow: AuthFlow = Depends(get_auth_flow),
):
    """
    Exchange email and password for a session token.

    The password may be encrypted with the key from ``GET /api/auth/public-key``.
    """
    result = await flow.login(session, body.email, body.password)
    return success("Login successful", **result.to_dict())


@router.get("/me")
async def me(
    user: User = Depends(auth),
    session: AsyncSession = Depends(get_db),
    flow: AuthFlow = Depends(get_auth_flow),
):
    """Profile of the signed-in account."""
    current = await flow.get_current_user(session, SessionClaims(id=user.id, role=user.role))
    return success(user=current.to_dict())


@router.post("/forgot-password", response_model=MessageResponse)
async def forgot_password(
    body: ForgotPasswordRequest,
    session: AsyncSession = Depends(get_db),
    flow: AuthFlow = Depends(get_auth_flow),
):
    """Email a reset link if the address belongs to an account. The response never says which."""
    message = await flow.forgot_password(session, body.email)
    return success(message)


@router.post("/reset-password", response_model=MessageResponse)
async def reset_password(
    body: ResetPasswordRequest,
    session: AsyncSession = Depends(get_db),
    flow: AuthFlow = Depends(get_auth_flow),
):
    await flow.reset_password(session, body.token, body.password, body.confirm_password)
    return success("Password reset successfully")


@router.post("/change-password", response_model=MessageResponse)
async def change_password(
    body: ChangePasswordRequest,
    user: User = Depends(auth),
    session: AsyncSession = Depends(get_db),
    flow: AuthFlow = Depends(get_auth_flow),
):
    await flow.change_password(
        session, user, body.current_password, body.new_password, body.confirm_password
    )
    return success("Password changed successfully")


@router.post("/logout", response_model=MessageResponse)
async def logout(
    user: User = Depends(auth),
    flow: AuthFlow = Depends(get_auth_flow),
):
    """Stateless logout; the client discards its token."""
    flow.logout(user)
    return success("Logged out successfully")


@router.get("/public-key", response_class=PlainTextResponse)
async def public_key(decryptor: TransitDecryptor = Depends(get_decryptor)):
    """PEM public key clients use to encrypt passwords before sending them."""
    pem = decryptor.public_key_pem()
    if pem is None:
        raise NotFoundError("Public key not configured")
    return PlainTextResponse(pem)
