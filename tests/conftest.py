"""
Test Configuration and Fixtures

- Settings pointing at an in-memory SQLite database
- A throw-away RSA transit key per test session
- The application with its lifespan running, and an HTTP client for it
- A scripted reCAPTCHA endpoint behind httpx.MockTransport
- Factories for users and bearer headers
"""

import os

# Must be set before utils.auth.password is imported
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("SECRET_KEY", "test-secret-key-that-is-long-enough-0123456789")

import base64
from typing import Dict, List

import httpx
import pytest
from cryptography.hazmat.primitives.asymmetric import padding

from api.app import create_app
from config import Settings
from database.models.user import User, UserRole
from utils.auth.password import hash_password_sync
from utils.auth.transit import generate_key_pair, private_key_to_pem
from utils.security.crypto import generate_settings_key

TEST_SECRET = "test-secret-key-that-is-long-enough-0123456789"
STRONG_PASSWORD = "Str0ng!Pass"


# ============================================================================
# Keys and Settings
# ============================================================================

@pytest.fixture(scope="session")
def rsa_key():
    """RSA transit key shared by the whole test session."""
    return generate_key_pair(2048)


@pytest.fixture(scope="session")
def rsa_key_file(rsa_key, tmp_path_factory):
    path = tmp_path_factory.mktemp("keys") / "private.pem"
    path.write_bytes(private_key_to_pem(rsa_key))
    return path


@pytest.fixture
def encrypt_password(rsa_key):
    """Encrypt a password the way a client does with the published key."""
    def _encrypt(plaintext: str) -> str:
        ciphertext = rsa_key.public_key().encrypt(plaintext.encode("utf-8"), padding.PKCS1v15())
        return base64.b64encode(ciphertext).decode("ascii")
    return _encrypt


@pytest.fixture
def settings(rsa_key_file) -> Settings:
    return Settings(
        secret_key=TEST_SECRET,
        database_url="sqlite+aiosqlite:///:memory:",
        environment="development",
        testing=True,
        rsa_private_key_path=str(rsa_key_file),
        settings_encrypt_key=generate_settings_key(),
        recaptcha_secret="recaptcha-test-secret",
        recaptcha_verify_url="https://recaptcha.test/siteverify",
        email_enabled=False,
        frontend_url="http://admin.test",
        log_level="WARNING",
        _env_file=None,
    )


# ============================================================================
# reCAPTCHA
# ============================================================================

class CaptchaEndpoint:
    """Scripted stand-in for the siteverify endpoint."""

    def __init__(self):
        self.success = True
        self.unreachable = False
        self.body = None
        self.requests: List[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.unreachable:
            raise httpx.ConnectError("connection refused", request=request)
        if self.body is not None:
            return httpx.Response(200, json=self.body)
        body = {"success": self.success}
        if not self.success:
            body["error-codes"] = ["invalid-input-response"]
        return httpx.Response(200, json=body)


@pytest.fixture
def captcha() -> CaptchaEndpoint:
    return CaptchaEndpoint()


# ============================================================================
# Application
# ============================================================================

@pytest.fixture
async def app(settings, captcha):
    """Application with its lifespan started; collaborators live on app.state."""
    application = create_app(settings, http_transport=httpx.MockTransport(captcha.handler))
    async with application.router.lifespan_context(application):
        yield application


@pytest.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as http_client:
        yield http_client


@pytest.fixture
def flow(app):
    return app.state.auth_flow


@pytest.fixture
def tokens(app):
    return app.state.tokens


@pytest.fixture
def db(app):
    return app.state.db


# ============================================================================
# Users
# ============================================================================

@pytest.fixture
def make_user(db):
    """Insert a user directly and return it (detached, with its id)."""
    async def _make_user(
        username: str = "alice01",
        email: str = "alice@example.com",
        password: str = STRONG_PASSWORD,
        role: str = UserRole.USER,
        is_active: bool = True,
        rounds: int = None,
    ) -> User:
        async with db.session() as session:
            user = User(
                username=username,
                email=email,
                password_hash=hash_password_sync(password, rounds=rounds),
                role=role,
                is_active=is_active,
            )
            session.add(user)
            await session.commit()
            await session.refresh(user)
            return user
    return _make_user


@pytest.fixture
def load_user(db):
    """Fresh copy of a user row, or None."""
    async def _load_user(user_id: int):
        async with db.session() as session:
            return await session.get(User, user_id)
    return _load_user


def bearer(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def headers_for(tokens):
    """Authorization header carrying a session token for a user."""
    def _headers_for(user: User) -> Dict[str, str]:
        return bearer(tokens.issue_session(user.id, user.role))
    return _headers_for


@pytest.fixture
async def admin(make_user):
    return await make_user(username="admin", email="admin@example.com", role=UserRole.ADMIN)


@pytest.fixture
def admin_headers(admin, headers_for):
    return headers_for(admin)
