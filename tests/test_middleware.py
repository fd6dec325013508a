"""
Request Pipeline Tests

Bearer authentication dependencies, correlation ids and the global error
handlers.
"""

from typing import Optional

import httpx
import pytest
from fastapi import Depends

from api.app import create_app
from api.dependencies import admin_auth, auth, auth_optional
from database.models.user import User


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def probe_routes(app):
    """Routes that report who the auth dependencies resolved."""

    async def whoami(user: User = Depends(auth)):
        return {"id": user.id}

    async def admin_only(user: User = Depends(admin_auth)):
        return {"id": user.id}

    async def maybe(user: Optional[User] = Depends(auth_optional)):
        return {"id": user.id if user else None}

    async def explode():
        raise RuntimeError("boom")

    app.add_api_route("/probe/auth", whoami)
    app.add_api_route("/probe/admin", admin_only)
    app.add_api_route("/probe/optional", maybe)
    app.add_api_route("/probe/explode", explode)
    return app


# ============================================================================
# auth / admin_auth / auth_optional
# ============================================================================

class TestAuthDependencies:

    async def test_auth_attaches_user(self, client, probe_routes, make_user, headers_for):
        user = await make_user()
        response = await client.get("/probe/auth", headers=headers_for(user))
        assert response.json() == {"id": user.id}

    @pytest.mark.parametrize("headers,message", [
        ({}, "Authentication required"),
        ({"Authorization": "Bearer not-a-jwt"}, "Please authenticate"),
        ({"Authorization": "Basic YWxpY2U6cHc="}, "Authentication required"),
    ])
    async def test_auth_rejections(self, client, probe_routes, headers, message):
        response = await client.get("/probe/auth", headers=headers)

        assert response.status_code == 401
        assert response.json() == {"success": False, "message": message}

    async def test_auth_rejects_deleted_user(self, client, probe_routes, tokens):
        response = await client.get("/probe/auth", headers=bearer(tokens.issue_session(4242, "admin")))
        assert response.status_code == 401

    async def test_admin_requires_admin_role(self, client, probe_routes, make_user, headers_for, admin_headers):
        user = await make_user()

        denied = await client.get("/probe/admin", headers=headers_for(user))
        allowed = await client.get("/probe/admin", headers=admin_headers)

        assert denied.status_code == 403
        assert denied.json()["message"] == "Admin access required"
        assert allowed.status_code == 200

    async def test_admin_without_token_is_401(self, client, probe_routes):
        assert (await client.get("/probe/admin")).status_code == 401

    async def test_role_comes_from_database_not_token(self, client, probe_routes, make_user, tokens):
        user = await make_user()
        forged_role = bearer(tokens.issue_session(user.id, "admin"))
        assert (await client.get("/probe/admin", headers=forged_role)).status_code == 403

    async def test_optional_auth(self, client, probe_routes, make_user, headers_for, tokens):
        user = await make_user()

        signed_in = await client.get("/probe/optional", headers=headers_for(user))
        anonymous = await client.get("/probe/optional")
        bad_token = await client.get("/probe/optional", headers=bearer("garbage"))
        reset_token = await client.get("/probe/optional", headers=bearer(tokens.issue_password_reset(user.id)))

        assert signed_in.json() == {"id": user.id}
        assert anonymous.json() == bad_token.json() == reset_token.json() == {"id": None}
        assert bad_token.status_code == 200


# ============================================================================
# Correlation ids and error handlers
# ============================================================================

class TestPipeline:

    async def test_correlation_id_echoed(self, client):
        response = await client.get("/api/health", headers={"X-Correlation-ID": "abc-123"})
        assert response.headers["X-Correlation-ID"] == "abc-123"

    async def test_correlation_id_generated(self, client):
        response = await client.get("/api/health")
        assert len(response.headers["X-Correlation-ID"]) == 36

    async def test_unknown_route(self, client):
        response = await client.get("/api/nope")

        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "Route /api/nope not found"}

    async def test_unhandled_error_in_development_has_details(self, client, probe_routes):
        response = await client.get("/probe/explode")

        assert response.status_code == 500
        body = response.json()
        assert body["success"] is False
        assert body["message"] == "Internal server error"
        assert body["error"] == "boom"
        assert "RuntimeError" in body["stack"]
        assert app_error_count(probe_routes) >= 1

    async def test_unhandled_error_in_production_is_generic(self, settings, captcha):
        production = settings.model_copy(update={"environment": "production", "testing": False, "debug": False})
        application = create_app(production, http_transport=httpx.MockTransport(captcha.handler))

        async def explode():
            raise RuntimeError("secret detail")

        application.add_api_route("/explode", explode)

        async with application.router.lifespan_context(application):
            transport = httpx.ASGITransport(app=application, raise_app_exceptions=False)
            async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as http_client:
                response = await http_client.get("/explode")

        assert response.status_code == 500
        assert response.json() == {"success": False, "message": "Internal server error"}


def app_error_count(app) -> int:
    return app.state.error_handler.get_stats()["error_types"].get("RuntimeError", 0)
