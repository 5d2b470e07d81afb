"""Sealing and revealing of PII columns through the field cipher.

A ``None`` column means the value was never set. That is kept distinct from a
value that is present but cannot be decrypted, so callers can tell legitimate
absence from corruption or tampering.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Mapping

from app.core.field_cipher import DecryptStatus, FieldCipher, get_field_cipher

logger = logging.getLogger(__name__)


class FieldState(str, Enum):
    ABSENT = "absent"
    PRESENT = "present"
    UNREADABLE = "unreadable"


@dataclass(frozen=True, slots=True)
class RevealedField:
    state: FieldState
    value: str | None = None
    failure: DecryptStatus | None = None


def seal(value: str | None, *, cipher: FieldCipher | None = None) -> str | None:
    if value is None:
        return None
    return (cipher or get_field_cipher()).encrypt(value)


def reveal(serialized: str | None, *, cipher: FieldCipher | None = None) -> RevealedField:
    if serialized is None:
        return RevealedField(state=FieldState.ABSENT)
    result = (cipher or get_field_cipher()).decrypt(serialized)
    if result.ok:
        return RevealedField(state=FieldState.PRESENT, value=result.plaintext)
    return RevealedField(state=FieldState.UNREADABLE, failure=result.status)


def reveal_fields(
    columns: Mapping[str, str | None],
    *,
    cipher: FieldCipher | None = None,
) -> tuple[dict[str, str | None], list[str]]:
    """Decrypt several columns at once.

    Returns the plaintext per output name (``None`` when absent or unreadable)
    and the sorted names of the unreadable ones.
    """
    values: dict[str, str | None] = {}
    unreadable: list[str] = []
    for name, serialized in columns.items():
        revealed = reveal(serialized, cipher=cipher)
        values[name] = revealed.value
        if revealed.state is FieldState.UNREADABLE:
            logger.warning("Encrypted field %s unreadable (%s)", name, revealed.failure.value)
            unreadable.append(name)
    return values, sorted(unreadable)
