"""
Application lifespan management.

Builds every long-lived collaborator once at startup and stores it on
``app.state``: the database engine, the token service, the transit
decryptor, the settings cipher, the email service, the shared HTTP client
used for reCAPTCHA, and the auth flow composed from them. Shutdown closes
the HTTP client and disposes the engine.
"""

from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from config import Settings
from database.core import AsyncDatabaseEngine
from utils.auth.flow import AuthFlow
from utils.auth.tokens import TokenService
from utils.auth.transit import TransitDecryptor
from utils.email import EmailService
from utils.monitoring import get_logger
from utils.security import RecaptchaVerifier, SettingsCipher

logger = get_logger(__name__)


def build_lifespan(settings: Settings, http_transport: httpx.AsyncBaseTransport = None):
    """
    Lifespan bound to one settings object.

    Args:
        settings: Application settings
        http_transport: Transport for the outbound HTTP client (tests pass a mock)
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"🚀 Starting {settings.app_name}", environment=settings.environment)

        for issue in settings.validate_production_config():
            logger.warning(f"⚠️  {issue}")

        # =====================================================================
        # Database
        # =====================================================================
        db = AsyncDatabaseEngine(settings)
        if settings.is_development:
            await db.create_all()

        # =====================================================================
        # Security collaborators
        # =====================================================================
        tokens = TokenService.from_settings(settings)
        decryptor = TransitDecryptor.from_pem_file(settings.rsa_private_key_path)
        settings_cipher = SettingsCipher.from_hex(settings.settings_encrypt_key)
        email_service = EmailService(settings)

        http_client = httpx.AsyncClient(
            transport=http_transport,
            timeout=httpx.Timeout(settings.recaptcha_timeout, connect=5.0),
        )
        recaptcha = RecaptchaVerifier(
            http_client,
            secret=settings.recaptcha_secret,
            verify_url=settings.recaptcha_verify_url,
            timeout=settings.recaptcha_timeout,
        )

        app.state.settings = settings
        app.state.db = db
        app.state.tokens = tokens
        app.state.decryptor = decryptor
        app.state.settings_cipher = settings_cipher
        app.state.email_service = email_service
        app.state.http_client = http_client
        app.state.recaptcha = recaptcha
        app.state.auth_flow = AuthFlow(tokens, decryptor, email_service)

        logger.info(f"✅ {settings.app_name} ready")

        try:
            yield
        finally:
            # =================================================================
            # Cleanup
            # =================================================================
            logger.info(f"🛑 Shutting down {settings.app_name}")
            await http_client.aclose()
            await db.close()
            logger.info("✅ Shutdown complete")

    return lifespan
