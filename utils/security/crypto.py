"""
Symmetric encryption for values kept in the settings table.

AES-256-CBC with PKCS#7 padding and a fresh random 16 byte IV per value.
Stored format is ``hex(iv) + hex(ciphertext)``.
"""

import os
from typing import Optional

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

IV_SIZE = 16
KEY_SIZE = 32


class SettingsCipherError(Exception):
    """Raised when a value cannot be encrypted or decrypted."""


class SettingsCipher:
    """Encrypts and decrypts settings values with one AES-256 key."""

    def __init__(self, key: Optional[bytes]):
        if key is not None and len(key) != KEY_SIZE:
            raise ValueError("Settings key must be 32 bytes")
        self._key = key

    @classmethod
    def from_hex(cls, hex_key: Optional[str]) -> "SettingsCipher":
        return cls(bytes.fromhex(hex_key) if hex_key else None)

    @property
    def enabled(self) -> bool:
        return self._key is not None

    def _require_key(self) -> bytes:
        if self._key is None:
            raise SettingsCipherError("SETTINGS_ENCRYPT_KEY is not configured")
        return self._key

    def encrypt(self, plaintext: str) -> str:
        key = self._require_key()
        iv = os.urandom(IV_SIZE)
        padder = padding.PKCS7(algorithms.AES.block_size).padder()
        padded = padder.update(plaintext.encode("utf-8")) + padder.finalize()
        encryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).encryptor()
        ciphertext = encryptor.update(padded) + encryptor.finalize()
        return iv.hex() + ciphertext.hex()

    def decrypt(self, value: str) -> str:
        """
        Reverse ``encrypt``.

        Raises:
            SettingsCipherError: Malformed value, wrong key or corrupt padding
        """
        key = self._require_key()
        try:
            iv = bytes.fromhex(value[:IV_SIZE * 2])
            ciphertext = bytes.fromhex(value[IV_SIZE * 2:])
            decryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).decryptor()
            padded = decryptor.update(ciphertext) + decryptor.finalize()
            unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
            plaintext = unpadder.update(padded) + unpadder.finalize()
            return plaintext.decode("utf-8")
        except (ValueError, TypeError) as e:
            raise SettingsCipherError(f"Cannot decrypt settings value: {e}") from e


def generate_settings_key() -> str:
    """New random key, hex encoded, suitable for SETTINGS_ENCRYPT_KEY."""
    return os.urandom(KEY_SIZE).hex()
