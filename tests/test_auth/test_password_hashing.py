"""Unit tests for password hashing and verification."""

from globalstay.auth.passwords import hash_password, verify_password


def test_hash_is_salted():
    first = hash_password("samepassword")
    second = hash_password("samepassword")
    assert first != second
    assert first != "samepassword"


def test_verify_roundtrip():
    hashed = hash_password("testpass123")
    assert verify_password("testpass123", hashed) is True
    assert verify_password("wrongpassword", hashed) is False


def test_unicode_password():
    hashed = hash_password("pässwörd-日本")
    assert verify_password("pässwörd-日本", hashed) is True
