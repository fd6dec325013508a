"""
Configuration Package

Centralized configuration management using Pydantic Settings.
All environment variables and application settings in one place.
"""

from .settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
