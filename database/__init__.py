"""
Database Package

Organized by purpose:
- core: Async engine and session management
- models: SQLAlchemy models (users, settings, contact submissions)
- operations: Query helpers used by the service layer
"""

from .core import AsyncDatabaseEngine
from .models import (
    Base,
    User,
    UserRole,
    Setting,
    ContactSubmission,
)

__all__ = [
    'AsyncDatabaseEngine',
    'Base',
    'User',
    'UserRole',
    'Setting',
    'ContactSubmission',
]
