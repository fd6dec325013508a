"""Authentication utilities."""

from .password import (
    hash_password,
    verify_password,
    hash_password_sync,
    verify_password_sync,
    is_password_hash,
    needs_rehash,
)
from .tokens import (
    TokenKind,
    TokenService,
    SessionClaims,
    PasswordResetClaims,
    EmailVerificationClaims,
    RefreshClaims,
    random_token,
    hash_token,
)
from .transit import TransitDecryptor, generate_key_pair, private_key_to_pem

__all__ = [
    "hash_password",
    "verify_password",
    "hash_password_sync",
    "verify_password_sync",
    "is_password_hash",
    "needs_rehash",
    "TokenKind",
    "TokenService",
    "SessionClaims",
    "PasswordResetClaims",
    "EmailVerificationClaims",
    "RefreshClaims",
    "random_token",
    "hash_token",
    "TransitDecryptor",
    "generate_key_pair",
    "private_key_to_pem",
]
