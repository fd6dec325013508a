"""
Database Models Base

Shared SQLAlchemy declarative base and timezone helpers for all model modules.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.orm import declarative_base

# Shared declarative base for all models
Base = declarative_base()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """
    Normalise to an aware UTC datetime.

    Naive values are taken to be UTC already (SQLite drops tzinfo on read);
    aware values in another zone are converted.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def isoformat(value: Optional[datetime]) -> Optional[str]:
    value = as_utc(value)
    return value.isoformat() if value is not None else None


__all__ = [
    'Base',
    'utcnow',
    'as_utc',
    'isoformat',
]
