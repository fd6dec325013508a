"""
Signed token handling.

All tokens are HMAC-signed JWTs sharing one secret. Each carries a ``type``
claim naming its kind, and verification only accepts a token whose ``type``
matches the kind the caller asked for, so a password reset token can never
be presented as a session token and vice versa.

Kinds and default lifetimes:

    session             {id, role}                        24h
    password_reset      {userId, resetToken}              1h
    email_verification  {userId, verificationToken}       24h
    refresh             {userId, refreshToken}            7d

``verify`` returns the decoded claims or None. It never raises for bad
input; a TypeError is reserved for callers passing something that is not a
TokenKind.
"""

import enum
import hashlib
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, ClassVar, Dict, Optional, Union

from jose import JWTError, ExpiredSignatureError, jwt

from utils.monitoring import get_logger

logger = get_logger(__name__)


class TokenKind(str, enum.Enum):
    """Discriminator stored in the ``type`` claim."""
    SESSION = "session"
    PASSWORD_RESET = "password_reset"
    EMAIL_VERIFICATION = "email_verification"
    REFRESH = "refresh"


@dataclass(frozen=True)
class SessionClaims:
    id: int
    role: str

    kind: ClassVar[TokenKind] = TokenKind.SESSION

    def to_payload(self) -> Dict[str, Any]:
        return {"id": self.id, "role": self.role}

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "SessionClaims":
        return cls(id=_as_user_id(payload["id"]), role=str(payload["role"]))


@dataclass(frozen=True)
class PasswordResetClaims:
    user_id: int
    reset_token: str

    kind: ClassVar[TokenKind] = TokenKind.PASSWORD_RESET

    def to_payload(self) -> Dict[str, Any]:
        return {"userId": self.user_id, "resetToken": self.reset_token}

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "PasswordResetClaims":
        return cls(user_id=_as_user_id(payload["userId"]), reset_token=str(payload["resetToken"]))


@dataclass(frozen=True)
class EmailVerificationClaims:
    user_id: int
    verification_token: str

    kind: ClassVar[TokenKind] = TokenKind.EMAIL_VERIFICATION

    def to_payload(self) -> Dict[str, Any]:
        return {"userId": self.user_id, "verificationToken": self.verification_token}

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "EmailVerificationClaims":
        return cls(
            user_id=_as_user_id(payload["userId"]),
            verification_token=str(payload["verificationToken"]),
        )


@dataclass(frozen=True)
class RefreshClaims:
    user_id: int
    refresh_token: str

    kind: ClassVar[TokenKind] = TokenKind.REFRESH

    def to_payload(self) -> Dict[str, Any]:
        return {"userId": self.user_id, "refreshToken": self.refresh_token}

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "RefreshClaims":
        return cls(user_id=_as_user_id(payload["userId"]), refresh_token=str(payload["refreshToken"]))


TokenClaims = Union[SessionClaims, PasswordResetClaims, EmailVerificationClaims, RefreshClaims]

CLAIM_TYPES: Dict[TokenKind, Any] = {
    TokenKind.SESSION: SessionClaims,
    TokenKind.PASSWORD_RESET: PasswordResetClaims,
    TokenKind.EMAIL_VERIFICATION: EmailVerificationClaims,
    TokenKind.REFRESH: RefreshClaims,
}

DEFAULT_LIFETIMES: Dict[TokenKind, timedelta] = {
    TokenKind.SESSION: timedelta(hours=24),
    TokenKind.PASSWORD_RESET: timedelta(hours=1),
    TokenKind.EMAIL_VERIFICATION: timedelta(hours=24),
    TokenKind.REFRESH: timedelta(days=7),
}


def _as_user_id(value: Any) -> int:
    # bool is an int subclass; a forged {"id": true} must not pass
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError("user id claim must be an integer")
    return value


def random_token(nbytes: int = 32) -> str:
    """Random hex string with nbytes of entropy."""
    return secrets.token_hex(nbytes)


def hash_token(token: str) -> str:
    """SHA-256 hex digest of a token, for at-rest storage."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


class TokenService:
    """Issues and verifies the four signed token kinds."""

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        lifetimes: Optional[Dict[TokenKind, timedelta]] = None,
    ):
        if not secret_key or len(secret_key) < 32:
            raise ValueError("Token secret must be at least 32 characters long")
        self._secret_key = secret_key
        self.algorithm = algorithm
        self.lifetimes = dict(DEFAULT_LIFETIMES)
        if lifetimes:
            self.lifetimes.update(lifetimes)

    @classmethod
    def from_settings(cls, settings) -> "TokenService":
        return cls(
            secret_key=settings.secret_key,
            algorithm=settings.jwt_algorithm,
            lifetimes={
                TokenKind.SESSION: timedelta(hours=settings.session_token_expire_hours),
                TokenKind.PASSWORD_RESET: timedelta(hours=settings.password_reset_token_expire_hours),
                TokenKind.EMAIL_VERIFICATION: timedelta(hours=settings.email_verification_token_expire_hours),
                TokenKind.REFRESH: timedelta(days=settings.refresh_token_expire_days),
            },
        )

    def issue(self, claims: TokenClaims, expires_delta: Optional[timedelta] = None) -> str:
        """
        Sign a token for the given claims.

        Args:
            claims: One of the claim dataclasses; its class decides the kind
            expires_delta: Override the kind's default lifetime

        Returns:
            Encoded JWT
        """
        kind = claims.kind
        now = datetime.now(timezone.utc)
        payload = claims.to_payload()
        payload.update({
            "type": kind.value,
            "iat": now,
            "exp": now + (expires_delta if expires_delta is not None else self.lifetimes[kind]),
        })
        return jwt.encode(payload, self._secret_key, algorithm=self.algorithm)

    def verify(self, kind: TokenKind, token: Optional[str]) -> Optional[TokenClaims]:
        """
        Verify signature, expiry and kind of a token.

        Args:
            kind: Kind the caller expects
            token: Encoded JWT as received

        Returns:
            Claims of the expected kind, or None if anything about the token is wrong
        """
        if not isinstance(kind, TokenKind):
            raise TypeError(f"kind must be a TokenKind, got {type(kind).__name__}")
        if not isinstance(token, str) or not token:
            return None

        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self.algorithm],
                options={"require_exp": True, "require_iat": True},
            )
        except ExpiredSignatureError:
            logger.debug("Token rejected: expired", kind=kind.value)
            return None
        except JWTError as e:
            logger.debug(f"Token rejected: {type(e).__name__}", kind=kind.value)
            return None

        if payload.get("type") != kind.value:
            logger.debug("Token rejected: kind mismatch", expected=kind.value, actual=payload.get("type"))
            return None

        try:
            return CLAIM_TYPES[kind].from_payload(payload)
        except (KeyError, TypeError, ValueError):
            logger.debug("Token rejected: malformed claims", kind=kind.value)
            return None

    # ------------------------------------------------------------------
    # Per-kind helpers
    # ------------------------------------------------------------------

    def issue_session(self, user_id: int, role: str) -> str:
        return self.issue(SessionClaims(id=user_id, role=role))

    def issue_password_reset(self, user_id: int) -> str:
        return self.issue(PasswordResetClaims(user_id=user_id, reset_token=random_token()))

    def issue_email_verification(self, user_id: int) -> str:
        return self.issue(EmailVerificationClaims(user_id=user_id, verification_token=random_token()))

    def issue_refresh(self, user_id: int) -> str:
        return self.issue(RefreshClaims(user_id=user_id, refresh_token=random_token()))

    def refresh_session(self, refresh_token: str, role: str) -> Optional[str]:
        """
        Exchange a valid refresh token for a new session token.

        Returns:
            New session token, or None if the refresh token does not verify
        """
        claims = self.verify(TokenKind.REFRESH, refresh_token)
        if claims is None:
            return None
        return self.issue_session(claims.user_id, role)
