"""
Core Database Package

Database engine and session management.
"""

from .async_engine import AsyncDatabaseEngine

__all__ = [
    'AsyncDatabaseEngine',
]
