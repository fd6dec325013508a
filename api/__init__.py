"""
API package for the admin portal.

``create_app`` builds a FastAPI application; run it with
``uvicorn --factory api.app:create_app``.
"""

from .app import create_app

__all__ = ["create_app"]
