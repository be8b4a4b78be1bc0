"""Tests for password hashing and access tokens."""

from datetime import timedelta

import jwt

from catalog.core.config import settings
from catalog.core.security import (
    create_access_token,
    decode_access_token,
    get_password_hash,
    verify_password,
)


class TestPasswordHashing:
    def test_hash_verifies(self):
        password_hash = get_password_hash("password123")

        assert password_hash != "password123"
        assert verify_password("password123", password_hash)
        assert not verify_password("password124", password_hash)

    def test_hashes_are_salted(self):
        assert get_password_hash("password123") != get_password_hash("password123")

    def test_malformed_hash_is_rejected(self):
        assert not verify_password("password123", "not-a-bcrypt-hash")


class TestAccessToken:
    def test_round_trip_claims(self):
        token = create_access_token({"sub": "user-1", "role": "admin"})

        payload = decode_access_token(token)

        assert payload["sub"] == "user-1"
        assert payload["role"] == "admin"
        assert payload["exp"] > payload["iat"]

    def test_expired_token(self):
        token = create_access_token({"sub": "user-1"}, expires_delta=timedelta(seconds=-1))

        assert decode_access_token(token) is None

    def test_token_signed_with_other_key(self):
        token = jwt.encode(
            {"sub": "user-1"},
            "some-other-secret-key-of-enough-length",
            algorithm=settings.JWT_ALGORITHM,
        )

        assert decode_access_token(token) is None
