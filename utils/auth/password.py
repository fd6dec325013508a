"""
Password Utilities

Salted, adaptive bcrypt hashing for stored credentials.

The async helpers push the deliberately slow bcrypt work onto the thread
pool so it does not stall the event loop; the sync variants are used by the
ORM password setter and by scripts.
"""

import os
import re
from typing import Optional

import bcrypt
from fastapi.concurrency import run_in_threadpool

from utils.monitoring import get_logger

logger = get_logger(__name__)

# Cost factor for new hashes. Existing hashes keep verifying at their own cost.
BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "10"))

# bcrypt only looks at the first 72 bytes of input
BCRYPT_MAX_BYTES = 72

_BCRYPT_HASH_RE = re.compile(r"^\$2[abxy]?\$(\d{2})\$[./A-Za-z0-9]{53}$")


def _encode(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password_sync(password: str, rounds: Optional[int] = None) -> str:
    """
    Hash a password with bcrypt.

    Args:
        password: Plain text password
        rounds: Cost factor override (defaults to BCRYPT_ROUNDS)

    Returns:
        bcrypt hash string ($2b$...)
    """
    if not password:
        raise ValueError("Cannot hash an empty password")
    salt = bcrypt.gensalt(rounds=rounds or BCRYPT_ROUNDS)
    return bcrypt.hashpw(_encode(password), salt).decode("utf-8")


def verify_password_sync(plain_password: str, hashed_password: str) -> bool:
    """
    Check a plain text password against a bcrypt hash.

    Malformed or empty hashes never verify.
    """
    if not plain_password or not hashed_password:
        return False
    try:
        return bcrypt.checkpw(_encode(plain_password), hashed_password.encode("utf-8"))
    except ValueError:
        logger.warning("⚠️  Stored password hash is not a valid bcrypt hash")
        return False


async def hash_password(password: str, rounds: Optional[int] = None) -> str:
    """Hash a password on the thread pool."""
    return await run_in_threadpool(hash_password_sync, password, rounds)


async def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password on the thread pool."""
    return await run_in_threadpool(verify_password_sync, plain_password, hashed_password)


def is_password_hash(value: Optional[str]) -> bool:
    """True if value has the shape of a bcrypt hash."""
    return bool(value) and _BCRYPT_HASH_RE.match(value) is not None


def needs_rehash(hashed_password: str) -> bool:
    """
    Check if a stored hash was made with a different cost than BCRYPT_ROUNDS.

    Args:
        hashed_password: Hashed password to check

    Returns:
        True if the hash should be replaced on next successful login
    """
    match = _BCRYPT_HASH_RE.match(hashed_password or "")
    if match is None:
        return False
    return int(match.group(1)) != BCRYPT_ROUNDS
