"""AES-256-GCM encryption for individual PII fields.

Values are stored as ``hex(iv):hex(tag):hex(ciphertext)``. The format is shared
with values already stored in the database, so it must not change without a
migration for existing rows. There is no key id in the format; rotating
``ENCRYPTION_KEY`` makes previously written values unreadable.
"""

from __future__ import annotations

import binascii
import logging
import os
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from app.core.settings import settings

logger = logging.getLogger(__name__)

KEY_LENGTH = 32
IV_LENGTH = 16
AUTH_TAG_LENGTH = 16
DELIMITER = ":"


class KeyConfigurationError(RuntimeError):
    """The field encryption key is missing or malformed."""


class DecryptionError(ValueError):
    pass


class MalformedCiphertextError(DecryptionError):
    pass


class AuthenticationFailureError(DecryptionError):
    pass


class DecryptStatus(str, Enum):
    OK = "ok"
    MALFORMED = "malformed"
    AUTH_FAILED = "auth_failed"


@dataclass(frozen=True, slots=True)
class DecryptResult:
    status: DecryptStatus
    plaintext: str | None = None
    reason: str | None = None

    @property
    def ok(self) -> bool:
        return self.status is DecryptStatus.OK

    def unwrap(self) -> str:
        if self.status is DecryptStatus.OK:
            return self.plaintext
        if self.status is DecryptStatus.AUTH_FAILED:
            raise AuthenticationFailureError(self.reason or "Authentication tag mismatch")
        raise MalformedCiphertextError(self.reason or "Malformed ciphertext")


def _malformed(reason: str) -> DecryptResult:
    logger.warning("Field decryption failed: malformed input (%s)", reason)
    return DecryptResult(status=DecryptStatus.MALFORMED, reason=reason)


def _decode_hex(segment: str) -> bytes | None:
    try:
        return binascii.unhexlify(segment)
    except (binascii.Error, ValueError):
        return None


class FieldCipher:
    """Encrypts and decrypts single string values under one fixed key."""

    def __init__(self, key: bytes) -> None:
        if not isinstance(key, (bytes, bytearray)) or len(key) != KEY_LENGTH:
            raise KeyConfigurationError(f"Encryption key must be exactly {KEY_LENGTH} bytes")
        self._aead = AESGCM(bytes(key))

    @classmethod
    def from_hex(cls, hex_key: str | None) -> "FieldCipher":
        cleaned = (hex_key or "").strip()
        if not cleaned:
            raise KeyConfigurationError("ENCRYPTION_KEY is not configured")
        if len(cleaned) != KEY_LENGTH * 2:
            raise KeyConfigurationError(
                f"ENCRYPTION_KEY must be {KEY_LENGTH * 2} hex characters, got {len(cleaned)}"
            )
        try:
            key = binascii.unhexlify(cleaned)
        except (binascii.Error, ValueError) as exc:
            raise KeyConfigurationError("ENCRYPTION_KEY is not valid hex") from exc
        return cls(key)

    def encrypt(self, plaintext: str) -> str:
        if not isinstance(plaintext, str):
            raise TypeError("plaintext must be a str")
        iv = os.urandom(IV_LENGTH)
        # AESGCM appends the 16-byte tag to the ciphertext.
        sealed = self._aead.encrypt(iv, plaintext.encode("utf-8"), None)
        ciphertext, tag = sealed[:-AUTH_TAG_LENGTH], sealed[-AUTH_TAG_LENGTH:]
        return DELIMITER.join((iv.hex(), tag.hex(), ciphertext.hex()))

    def decrypt(self, serialized: str) -> DecryptResult:
        if not isinstance(serialized, str):
            return _malformed("value is not a string")
        segments = serialized.split(DELIMITER)
        if len(segments) != 3:
            return _malformed(f"expected 3 segments, got {len(segments)}")

        iv_hex, tag_hex, ciphertext_hex = segments
        iv = _decode_hex(iv_hex)
        tag = _decode_hex(tag_hex)
        ciphertext = _decode_hex(ciphertext_hex)
        if iv is None or tag is None or ciphertext is None:
            return _malformed("invalid hex encoding")
        if len(iv) != IV_LENGTH:
            return _malformed(f"iv must be {IV_LENGTH} bytes, got {len(iv)}")
        if len(tag) != AUTH_TAG_LENGTH:
            return _malformed(f"auth tag must be {AUTH_TAG_LENGTH} bytes, got {len(tag)}")

        try:
            raw = self._aead.decrypt(iv, ciphertext + tag, None)
        except InvalidTag:
            logger.warning("Field decryption failed: authentication tag mismatch")
            return DecryptResult(status=DecryptStatus.AUTH_FAILED, reason="authentication tag mismatch")

        try:
            plaintext = raw.decode("utf-8")
        except UnicodeDecodeError:
            return _malformed("plaintext is not valid UTF-8")
        return DecryptResult(status=DecryptStatus.OK, plaintext=plaintext)


@lru_cache(maxsize=1)
def get_field_cipher() -> FieldCipher:
    return FieldCipher.from_hex(settings.encryption_key)


__all__ = [
    "AuthenticationFailureError",
    "DecryptResult",
    "DecryptStatus",
    "DecryptionError",
    "FieldCipher",
    "KeyConfigurationError",
    "MalformedCiphertextError",
    "get_field_cipher",
]
