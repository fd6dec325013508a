"""API Routers."""

from .auth import router as auth_router
from .users import router as users_router
from .settings import router as settings_router
from .contact import router as contact_router
from .health import router as health_router

__all__ = [
    "auth_router",
    "users_router",
    "settings_router",
    "contact_router",
    "health_router",
]
