"""User Management API Tests (admin only)."""

from unittest.mock import AsyncMock

import pytest

from database.operations import user_ops
from utils.auth.password import verify_password_sync

STRONG = "Str0ng!Pass"


class TestUserAdmin:

    async def test_list_requires_admin(self, client, make_user, headers_for):
        user = await make_user()
        assert (await client.get("/api/users")).status_code == 401
        assert (await client.get("/api/users", headers=headers_for(user))).status_code == 403

    async def test_list_users(self, client, make_user, admin_headers):
        await make_user()
        response = await client.get("/api/users", headers=admin_headers)

        assert response.status_code == 200
        users = response.json()
        assert {u["username"] for u in users} == {"admin", "alice01"}
        assert all("password_hash" not in u and "passwordHash" not in u for u in users)

    async def test_get_user(self, client, make_user, admin_headers):
        user = await make_user()
        found = await client.get(f"/api/users/{user.id}", headers=admin_headers)
        missing = await client.get("/api/users/999", headers=admin_headers)

        assert found.json()["email"] == "alice@example.com"
        assert missing.status_code == 404
        assert missing.json()["message"] == "User not found"

    async def test_create_user(self, client, admin_headers, load_user):
        response = await client.post("/api/users", headers=admin_headers, json={
            "username": "editor_1",
            "email": "editor@example.com",
            "password": STRONG,
            "role": "admin",
        })

        assert response.status_code == 201
        created = response.json()
        assert created["role"] == "admin"
        assert created["isActive"] is True
        stored = await load_user(created["id"])
        assert verify_password_sync(STRONG, stored.password_hash)

    async def test_create_defaults_to_user_role(self, client, admin_headers):
        response = await client.post("/api/users", headers=admin_headers, json={
            "username": "plain_1", "email": "plain@example.com", "password": STRONG,
        })
        assert response.json()["role"] == "user"

    @pytest.mark.parametrize("body", [
        {"username": "x", "email": "x@example.com", "password": STRONG},
        {"username": "valid_1", "email": "x@example.com", "password": STRONG, "role": "root"},
        {"username": "valid_1", "email": "x@example.com"},
    ])
    async def test_create_validation(self, client, admin_headers, body):
        assert (await client.post("/api/users", headers=admin_headers, json=body)).status_code == 400

    async def test_create_conflict(self, client, admin_headers):
        response = await client.post("/api/users", headers=admin_headers, json={
            "username": "admin", "email": "new@example.com", "password": STRONG,
        })
        assert response.status_code == 400
        assert response.json()["message"] == "User with this email or username already exists"

    async def test_create_racing_duplicate_is_conflict(self, client, admin_headers, monkeypatch):
        monkeypatch.setattr(user_ops, "find_conflicting_user", AsyncMock(return_value=None))
        response = await client.post("/api/users", headers=admin_headers, json={
            "username": "admin_two", "email": "admin@example.com", "password": STRONG,
        })
        assert response.status_code == 400
        assert response.json()["message"] == "User with this email or username already exists"

    async def test_update_user(self, client, make_user, admin_headers):
        user = await make_user()
        response = await client.put(f"/api/users/{user.id}", headers=admin_headers, json={
            "username": "alice_renamed",
            "role": "admin",
            "isActive": False,
        })

        assert response.status_code == 200
        data = response.json()
        assert data["username"] == "alice_renamed"
        assert data["email"] == "alice@example.com"
        assert data["role"] == "admin"
        assert data["isActive"] is False

    async def test_deactivated_user_cannot_login(self, client, make_user, admin_headers):
        user = await make_user()
        await client.put(f"/api/users/{user.id}", headers=admin_headers, json={"isActive": False})

        response = await client.post("/api/auth/login", json={"email": "alice@example.com", "password": STRONG})
        assert response.status_code == 403

    async def test_update_keeping_own_email_is_not_a_conflict(self, client, make_user, admin_headers):
        user = await make_user()
        response = await client.put(f"/api/users/{user.id}", headers=admin_headers, json={
            "email": "alice@example.com", "username": "alice01",
        })
        assert response.status_code == 200

    async def test_update_conflict_and_missing(self, client, make_user, admin_headers):
        user = await make_user()
        conflict = await client.put(f"/api/users/{user.id}", headers=admin_headers, json={"email": "admin@example.com"})
        missing = await client.put("/api/users/999", headers=admin_headers, json={"role": "user"})

        assert conflict.status_code == 400
        assert missing.status_code == 404

    async def test_update_racing_duplicate_is_conflict(self, client, make_user, admin_headers, load_user, monkeypatch):
        user = await make_user()
        monkeypatch.setattr(user_ops, "find_conflicting_user", AsyncMock(return_value=None))

        response = await client.put(f"/api/users/{user.id}", headers=admin_headers, json={"username": "admin"})

        assert response.status_code == 400
        assert (await load_user(user.id)).username == "alice01"

    async def test_delete_user(self, client, make_user, admin_headers, load_user):
        user = await make_user()
        response = await client.delete(f"/api/users/{user.id}", headers=admin_headers)

        assert response.json() == {"success": True, "message": "User deleted successfully"}
        assert await load_user(user.id) is None
        assert (await client.delete(f"/api/users/{user.id}", headers=admin_headers)).status_code == 404

    async def test_deleted_users_token_stops_working(self, client, make_user, admin_headers, headers_for):
        user = await make_user()
        headers = headers_for(user)
        await client.delete(f"/api/users/{user.id}", headers=admin_headers)

        assert (await client.get("/api/auth/me", headers=headers)).status_code == 401
