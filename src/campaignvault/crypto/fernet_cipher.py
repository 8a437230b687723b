"""Fernet cipher implementing ICipher for campaign payloads."""

from __future__ import annotations

import base64
import hashlib

from cryptography.fernet import Fernet, InvalidToken

from campaignvault.core.config import EncryptionConfig
from campaignvault.core.exceptions import DecryptionError


def derive_key(secret: str) -> bytes:
    """Derive a Fernet key from an arbitrary passphrase."""
    digest = hashlib.sha256(secret.encode("utf-8")).digest()
    return base64.urlsafe_b64encode(digest)


class FernetCipher:
    """Production ICipher backed by cryptography's Fernet (AES-128-CBC + HMAC)."""

    def __init__(self, key: str | bytes) -> None:
        if isinstance(key, str):
            key = key.encode("ascii")
        self._fernet = Fernet(key)

    def encrypt(self, plaintext: str) -> str:
        return self._fernet.encrypt(plaintext.encode("utf-8")).decode("ascii")

    def decrypt(self, ciphertext: str) -> str:
        try:
            return self._fernet.decrypt(ciphertext.encode("ascii")).decode("utf-8")
        except (InvalidToken, UnicodeError) as exc:
            raise DecryptionError("Ciphertext is invalid or was encrypted with another key") from exc


def create_cipher(config: EncryptionConfig | None = None) -> FernetCipher:
    """Build the cipher from configuration; a blank key falls back to the secret."""
    if config is None:
        config = EncryptionConfig()
    key = config.key or derive_key(config.secret)
    return FernetCipher(key)
