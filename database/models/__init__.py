"""
Database Models Package

SQLAlchemy models organized by domain:
- base: Declarative base and timezone helpers
- user: Account credentials and roles
- setting: Encrypted key/value settings
- contact: Contact form submissions
"""

from .base import Base, utcnow, as_utc
from .user import User, UserRole
from .setting import Setting
from .contact import ContactSubmission


__all__ = [
    'Base',
    'utcnow',
    'as_utc',
    'User',
    'UserRole',
    'Setting',
    'ContactSubmission',
]
