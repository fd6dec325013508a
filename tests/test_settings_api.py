"""
Settings Store Tests

AES settings cipher and the encrypted notification email endpoints.
"""

import pytest

from database.operations.settings_ops import NOTIFICATION_EMAILS_KEY, get_setting, upsert_setting
from utils.security.crypto import SettingsCipher, SettingsCipherError, generate_settings_key


# ============================================================================
# Cipher
# ============================================================================

class TestSettingsCipher:

    def test_round_trip_with_random_iv(self):
        cipher = SettingsCipher.from_hex(generate_settings_key())
        first = cipher.encrypt('["a@example.com"]')
        second = cipher.encrypt('["a@example.com"]')

        assert first != second
        assert first[:32] != second[:32]
        assert cipher.decrypt(first) == '["a@example.com"]'

    def test_wire_format_is_hex_iv_then_ciphertext(self):
        cipher = SettingsCipher.from_hex(generate_settings_key())
        value = cipher.encrypt("x" * 20)
        # 16 byte IV + two AES blocks
        assert len(value) == 32 + 64
        bytes.fromhex(value)

    def test_wrong_key_never_yields_plaintext(self):
        value = SettingsCipher.from_hex(generate_settings_key()).encrypt("secret")
        other = SettingsCipher.from_hex(generate_settings_key())
        try:
            assert other.decrypt(value) != "secret"
        except SettingsCipherError:
            pass

    def test_malformed_value(self):
        with pytest.raises(SettingsCipherError):
            SettingsCipher.from_hex(generate_settings_key()).decrypt("zz")

    def test_missing_key(self):
        cipher = SettingsCipher.from_hex(None)
        assert not cipher.enabled
        with pytest.raises(SettingsCipherError):
            cipher.encrypt("x")

    def test_bad_key_length(self):
        with pytest.raises(ValueError):
            SettingsCipher(b"short")


# ============================================================================
# Endpoints
# ============================================================================

class TestNotificationEmails:

    async def test_empty_by_default(self, client, make_user, headers_for):
        user = await make_user()
        response = await client.get("/api/settings/emails", headers=headers_for(user))
        assert response.json() == {"emails": []}

    async def test_save_and_read_back(self, client, admin_headers, db):
        emails = ["ops@example.com", "sales@example.com"]
        saved = await client.post("/api/settings/emails", headers=admin_headers, json={"emails": emails})
        assert saved.json() == {"success": True, "emails": emails}

        read = await client.get("/api/settings/emails", headers=admin_headers)
        assert read.json() == {"emails": emails}

        async with db.session() as session:
            stored = await get_setting(session, NOTIFICATION_EMAILS_KEY)
        assert "ops@example.com" not in stored.value

    async def test_save_overwrites(self, client, admin_headers):
        await client.post("/api/settings/emails", headers=admin_headers, json={"emails": ["a@example.com"]})
        await client.post("/api/settings/emails", headers=admin_headers, json={"emails": ["b@example.com"]})

        read = await client.get("/api/settings/emails", headers=admin_headers)
        assert read.json() == {"emails": ["b@example.com"]}

    @pytest.mark.parametrize("body", [{"emails": []}, {"emails": ["not-an-email"]}, {}])
    async def test_save_validation(self, client, admin_headers, body):
        response = await client.post("/api/settings/emails", headers=admin_headers, json=body)
        assert response.status_code == 400

    async def test_save_requires_admin(self, client, make_user, headers_for):
        user = await make_user()
        response = await client.post(
            "/api/settings/emails", headers=headers_for(user), json={"emails": ["a@example.com"]}
        )
        assert response.status_code == 403

    async def test_read_requires_auth(self, client):
        assert (await client.get("/api/settings/emails")).status_code == 401

    async def test_corrupt_value_reads_as_empty(self, client, admin_headers, db):
        async with db.session() as session:
            await upsert_setting(session, NOTIFICATION_EMAILS_KEY, "00" * 16 + "deadbeef")
            await session.commit()

        response = await client.get("/api/settings/emails", headers=admin_headers)
        assert response.json() == {"emails": []}
