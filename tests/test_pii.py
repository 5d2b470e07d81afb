import os

from app.core.field_cipher import DecryptStatus, FieldCipher
from app.services import pii

cipher = FieldCipher(os.urandom(32))


def test_seal_and_reveal():
    sealed = pii.seal("NID-123", cipher=cipher)
    revealed = pii.reveal(sealed, cipher=cipher)

    assert sealed != "NID-123"
    assert revealed.state is pii.FieldState.PRESENT
    assert revealed.value == "NID-123"


def test_absent_is_not_a_failure():
    assert pii.seal(None, cipher=cipher) is None
    revealed = pii.reveal(None, cipher=cipher)
    assert revealed.state is pii.FieldState.ABSENT
    assert revealed.failure is None


def test_unreadable_keeps_failure_kind():
    other = FieldCipher(os.urandom(32))

    wrong_key = pii.reveal(other.encrypt("x"), cipher=cipher)
    garbage = pii.reveal("plain text", cipher=cipher)

    assert wrong_key.state is pii.FieldState.UNREADABLE
    assert wrong_key.failure is DecryptStatus.AUTH_FAILED
    assert garbage.failure is DecryptStatus.MALFORMED
    assert garbage.value is None


def test_reveal_fields():
    values, unreadable = pii.reveal_fields(
        {
            "national_id": pii.seal("NID-1", cipher=cipher),
            "tax_id": None,
            "account_number": "broken",
            "routing_code": "also:broken:value",
        },
        cipher=cipher,
    )

    assert values == {
        "national_id": "NID-1",
        "tax_id": None,
        "account_number": None,
        "routing_code": None,
    }
    assert unreadable == ["account_number", "routing_code"]
