"""
Password Hashing Tests

bcrypt hashing, verification, cost detection and the write-only password
attribute on the User model.
"""

import pytest

from database.models.user import User
from utils.auth import password as password_module
from utils.auth.password import (
    hash_password,
    hash_password_sync,
    is_password_hash,
    needs_rehash,
    verify_password,
    verify_password_sync,
)


class TestHashing:
    """Hash and verify round trips."""

    def test_hash_verifies_and_differs_from_plaintext(self):
        hashed = hash_password_sync("Str0ng!Pass")

        assert hashed != "Str0ng!Pass"
        assert is_password_hash(hashed)
        assert verify_password_sync("Str0ng!Pass", hashed)

    def test_wrong_password_does_not_verify(self):
        hashed = hash_password_sync("Str0ng!Pass")
        assert not verify_password_sync("Str0ng!Pas", hashed)

    def test_same_password_gets_distinct_salts(self):
        assert hash_password_sync("Str0ng!Pass") != hash_password_sync("Str0ng!Pass")

    def test_empty_password_cannot_be_hashed(self):
        with pytest.raises(ValueError):
            hash_password_sync("")

    @pytest.mark.parametrize("stored", ["", "plaintext", "$2b$04$tooshort"])
    def test_malformed_hash_never_verifies(self, stored):
        assert verify_password_sync("Str0ng!Pass", stored) is False

    def test_input_beyond_72_bytes_is_truncated(self):
        base = "A1!a" * 18  # 72 bytes
        hashed = hash_password_sync(base + "tail")
        assert verify_password_sync(base + "different tail", hashed)

    async def test_async_helpers(self):
        hashed = await hash_password("Str0ng!Pass")
        assert await verify_password("Str0ng!Pass", hashed)
        assert not await verify_password("nope", hashed)


class TestCost:
    """Cost factor detection."""

    def test_hash_uses_configured_rounds(self):
        hashed = hash_password_sync("Str0ng!Pass")
        assert hashed.split("$")[2] == f"{password_module.BCRYPT_ROUNDS:02d}"
        assert not needs_rehash(hashed)

    def test_other_cost_needs_rehash(self):
        rounds = password_module.BCRYPT_ROUNDS + 1
        assert needs_rehash(hash_password_sync("Str0ng!Pass", rounds=rounds))

    def test_non_hash_never_needs_rehash(self):
        assert needs_rehash("not-a-hash") is False


class TestModelPassword:
    """Every write path through the model stores a hash."""

    def test_setting_password_stores_hash(self):
        user = User(username="bob_1", email="bob@example.com", password="Str0ng!Pass")

        assert user.password_hash != "Str0ng!Pass"
        assert verify_password_sync("Str0ng!Pass", user.password_hash)

    def test_password_is_write_only(self):
        user = User(username="bob_1", email="bob@example.com", password="Str0ng!Pass")
        with pytest.raises(AttributeError):
            user.password

    def test_plaintext_cannot_be_written_to_hash_column(self):
        user = User(username="bob_1", email="bob@example.com", password="Str0ng!Pass")
        with pytest.raises(ValueError):
            user.password_hash = "Str0ng!Pass"

    def test_public_dict_excludes_secrets(self):
        user = User(username="bob_1", email="bob@example.com", password="Str0ng!Pass")
        user.reset_token = "token"

        data = user.to_dict()

        assert "password_hash" not in data
        assert "passwordHash" not in data
        assert "resetToken" not in data
        assert data["username"] == "bob_1"
