"""
Tests for password hashing and access tokens.
"""

from datetime import timedelta

import pytest
from jose import JWTError

from app.core.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)


def test_password_hashing():
    """Test basic password hashing and verification."""
    password = "MySecureP@ssw0rd123"

    hashed = hash_password(password)

    assert hashed != password
    assert verify_password(password, hashed) is True
    assert verify_password("WrongPassword", hashed) is False


def test_same_password_different_hashes():
    """Test that same password produces different hashes (due to salt)."""
    password = "SameP@ssw0rd789"

    hash1 = hash_password(password)
    hash2 = hash_password(password)

    assert hash1 != hash2
    assert verify_password(password, hash1) is True
    assert verify_password(password, hash2) is True


def test_access_token_round_trip():
    """Test that a token carries its subject as a string."""
    token = create_access_token(subject=42)

    assert decode_access_token(token)["sub"] == "42"


def test_expired_access_token():
    """Test that expired tokens are rejected."""
    token = create_access_token(subject=42, expires_delta=timedelta(minutes=-1))

    with pytest.raises(JWTError):
        decode_access_token(token)
