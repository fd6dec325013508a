"""
Password-in-transit decryption.

Clients may encrypt the password field with the server's RSA public key
(PKCS#1 v1.5 padding, base64 encoded) before posting it. The server unwraps
it with the private key loaded once at startup. Anything that does not
decrypt is treated as a plaintext password so that clients which do not
encrypt keep working; a failed decrypt is never an authentication failure.
"""

import base64
import binascii
from pathlib import Path
from typing import Optional, Union

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa

from utils.monitoring import get_logger

logger = get_logger(__name__)


class TransitDecryptor:
    """Unwraps RSA-encrypted passwords. Read-only after construction."""

    def __init__(self, private_key: Optional[rsa.RSAPrivateKey] = None):
        self._private_key = private_key

    @classmethod
    def from_pem(cls, data: bytes, password: Optional[bytes] = None) -> "TransitDecryptor":
        """Build from PEM bytes. Raises ValueError if the key cannot be parsed."""
        key = serialization.load_pem_private_key(data, password=password)
        if not isinstance(key, rsa.RSAPrivateKey):
            raise ValueError("Transit key must be an RSA private key")
        return cls(key)

    @classmethod
    def from_pem_file(cls, path: Optional[Union[str, Path]]) -> "TransitDecryptor":
        """
        Load the private key from a PEM file.

        A missing path or file yields a passthrough decryptor; a file that
        exists but does not hold an RSA key raises ValueError.
        """
        if not path:
            logger.warning("⚠️  No RSA private key configured; passwords are accepted as sent")
            return cls(None)

        key_path = Path(path)
        if not key_path.is_file():
            logger.warning(f"⚠️  RSA private key not found at {key_path}; passwords are accepted as sent")
            return cls(None)

        decryptor = cls.from_pem(key_path.read_bytes())
        logger.info(f"✅ RSA transit key loaded from {key_path}")
        return decryptor

    @property
    def enabled(self) -> bool:
        return self._private_key is not None

    def decrypt(self, ciphertext_b64: str) -> Optional[str]:
        """
        Decrypt a base64 RSA/PKCS#1 v1.5 ciphertext.

        Returns:
            The UTF-8 plaintext, or None if the value is not a ciphertext for our key
        """
        if self._private_key is None or not isinstance(ciphertext_b64, str) or not ciphertext_b64:
            return None
        try:
            ciphertext = base64.b64decode(ciphertext_b64, validate=True)
            plaintext = self._private_key.decrypt(ciphertext, padding.PKCS1v15())
            return plaintext.decode("utf-8") or None
        except (binascii.Error, ValueError, TypeError):
            return None

    def unwrap_password(self, value: str) -> str:
        """Decrypted password if value is a ciphertext for our key, else value unchanged."""
        plaintext = self.decrypt(value)
        return value if plaintext is None else plaintext

    def public_key_pem(self) -> Optional[str]:
        """SubjectPublicKeyInfo PEM of the matching public key."""
        if self._private_key is None:
            return None
        return self._private_key.public_key().public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        ).decode("ascii")


def generate_key_pair(key_size: int = 2048) -> rsa.RSAPrivateKey:
    """Create a new RSA key for transit encryption."""
    return rsa.generate_private_key(public_exponent=65537, key_size=key_size)


def private_key_to_pem(key: rsa.RSAPrivateKey) -> bytes:
    return key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )
