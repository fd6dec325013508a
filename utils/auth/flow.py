"""
Account authentication flow.

``AuthFlow`` ties together the credential store, the password hasher, the
transit decryptor, the token service and the email service. It is built once
per process in the application lifespan; every method takes the request's
database session and commits it when the operation has fully succeeded.

Failures are raised as application errors (ValidationError, ConflictError,
AuthenticationError, AccountDisabledError, InvalidTokenError, NotFoundError)
and rendered by the global exception handlers.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from database.models.user import User, UserRole
from database.operations import user_ops
from utils.auth.password import hash_password, needs_rehash, verify_password
from utils.auth.tokens import SessionClaims, TokenKind, TokenService
from utils.auth.transit import TransitDecryptor
from utils.auth import validators
from utils.email import EmailService
from utils.errors import (
    AccountDisabledError,
    AuthenticationError,
    ConflictError,
    InvalidTokenError,
    NotFoundError,
    ValidationError,
)
from utils.monitoring import get_logger

logger = get_logger(__name__)

FORGOT_PASSWORD_MESSAGE = "If an account with that email exists, a password reset link has been sent."


@dataclass
class AuthResult:
    """Session token plus the account it was issued for."""
    token: str
    user: User

    def to_dict(self) -> Dict[str, Any]:
        return {"token": self.token, "user": self.user.to_summary()}


def _raise_if_invalid(errors) -> None:
    if errors:
        raise ValidationError(errors)


class AuthFlow:
    """Signup, login, password reset and session lookup."""

    def __init__(
        self,
        tokens: TokenService,
        decryptor: TransitDecryptor,
        email_service: Optional[EmailService] = None,
    ):
        self.tokens = tokens
        self.decryptor = decryptor
        self.email_service = email_service

    # ------------------------------------------------------------------
    # Registration and login
    # ------------------------------------------------------------------

    async def signup(
        self,
        session: AsyncSession,
        username: Any,
        email: Any,
        password: Any,
        confirm_password: Any,
    ) -> AuthResult:
        """
        Create a ``user`` account and sign the caller in.

        Raises:
            ValidationError: Field rules failed
            ConflictError: Email or username already taken
        """
        _raise_if_invalid(validators.validate_signup(username, email, password, confirm_password))

        if await user_ops.find_conflicting_user(session, email=email, username=username):
            raise ConflictError()

        user = await user_ops.create_user(session, username, email, password, role=UserRole.USER)
        await session.commit()

        logger.info("👤 User registered", user_id=user.id)
        return AuthResult(token=self.tokens.issue_session(user.id, user.role), user=user)

    async def login(self, session: AsyncSession, email: Any, password: Any) -> AuthResult:
        """
        Check credentials and issue a session token.

        ``password`` may be RSA encrypted by the client; anything that does not
        decrypt is used as sent.

        Raises:
            ValidationError: Missing or malformed fields
            AuthenticationError: Unknown email or wrong password
            AccountDisabledError: Account is deactivated
        """
        _raise_if_invalid(validators.validate_login(email, password))
        plaintext = self.decryptor.unwrap_password(password)

        user = await user_ops.get_user_by_email(session, email)
        if user is None:
            logger.info("Login failed: unknown email")
            raise AuthenticationError()

        if not user.is_active:
            logger.info("Login refused: account disabled", user_id=user.id)
            raise AccountDisabledError()

        if not await verify_password(plaintext, user.password_hash):
            logger.info("Login failed: wrong password", user_id=user.id)
            raise AuthenticationError()

        if needs_rehash(user.password_hash):
            user.password_hash = await hash_password(plaintext)
            await session.commit()
            logger.info("🔐 Password hash upgraded", user_id=user.id)

        logger.info("✅ Login successful", user_id=user.id)
        return AuthResult(token=self.tokens.issue_session(user.id, user.role), user=user)

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    async def get_current_user(self, session: AsyncSession, claims: SessionClaims) -> User:
        """
        Load the account named by verified session claims.

        Raises:
            NotFoundError: The account was deleted after the token was issued
        """
        user = await user_ops.get_user_by_id(session, claims.id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    async def authenticate_bearer(self, session: AsyncSession, token: Optional[str]) -> Optional[User]:
        """Account for a bearer session token, or None if the token or account is not valid."""
        claims = self.tokens.verify(TokenKind.SESSION, token)
        if claims is None:
            return None
        return await user_ops.get_user_by_id(session, claims.id)

    def logout(self, user: User) -> None:
        # Tokens are stateless; the client discards its copy
        logger.info("👋 Logout", user_id=user.id)

    # ------------------------------------------------------------------
    # Password reset
    # ------------------------------------------------------------------

    async def forgot_password(self, session: AsyncSession, email: Any) -> str:
        """
        Start a password reset.

        The same message comes back whether or not the email belongs to an
        account.

        Returns:
            The generic confirmation message
        """
        _raise_if_invalid(validators.validate_forgot_password(email))

        user = await user_ops.get_user_by_email(session, email)
        if user is None:
            logger.info("Password reset requested for unknown email")
            return FORGOT_PASSWORD_MESSAGE

        reset_token = self.tokens.issue_password_reset(user.id)
        user.set_reset_token(reset_token, self.tokens.lifetimes[TokenKind.PASSWORD_RESET])
        await session.commit()
        logger.info("🔑 Password reset token issued", user_id=user.id)

        if self.email_service is not None:
            sent = await self.email_service.send_password_reset_email(user.email, reset_token)
            if not sent:
                logger.warning("⚠️  Password reset email could not be sent", user_id=user.id)

        return FORGOT_PASSWORD_MESSAGE

    async def reset_password(
        self,
        session: AsyncSession,
        token: Any,
        password: Any,
        confirm_password: Any,
    ) -> None:
        """
        Redeem a password reset token.

        Raises:
            ValidationError: Field rules failed
            InvalidTokenError: Token forged, expired, replaced or already used
        """
        _raise_if_invalid(validators.validate_reset_password(token, password, confirm_password))

        claims = self.tokens.verify(TokenKind.PASSWORD_RESET, token)
        if claims is None:
            raise InvalidTokenError()

        user = await user_ops.get_user_by_id(session, claims.user_id)
        if user is None or user.reset_token != token or user.reset_token_expired():
            raise InvalidTokenError()

        user.password_hash = await hash_password(password)
        user.clear_reset_token()
        await session.commit()
        logger.info("🔐 Password reset completed", user_id=user.id)

    async def change_password(
        self,
        session: AsyncSession,
        user: User,
        current_password: Any,
        new_password: Any,
        confirm_password: Any,
    ) -> None:
        """
        Replace the password of a signed-in account.

        Raises:
            ValidationError: Field rules failed
            AuthenticationError: Current password does not match
        """
        if isinstance(current_password, str):
            current_password = self.decryptor.unwrap_password(current_password)
        if isinstance(new_password, str):
            new_password = self.decryptor.unwrap_password(new_password)
        if isinstance(confirm_password, str):
            confirm_password = self.decryptor.unwrap_password(confirm_password)

        _raise_if_invalid(validators.validate_change_password(current_password, new_password, confirm_password))

        if not await verify_password(current_password, user.password_hash):
            raise AuthenticationError("Current password is incorrect")

        user.password_hash = await hash_password(new_password)
        user.clear_reset_token()
        await session.commit()
        logger.info("🔐 Password changed", user_id=user.id)
