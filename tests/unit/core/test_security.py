"""
Tests for password hashing and admin access tokens.
"""

from datetime import datetime, timedelta, timezone

import jwt as pyjwt
import pytest

from core.config import settings
from core.security import (
    AdminIdentity,
    create_access_token,
    hash_password,
    hash_password_async,
    identity_from_payload,
    verify_jwt_token,
    verify_password,
    verify_password_async,
)


class TestPasswordHashing:
    """Test bcrypt password hashing."""

    def test_hash_is_not_plain_text(self):
        hashed = hash_password("SecurePass123!", rounds=4)

        assert hashed != "SecurePass123!"
        assert hashed.startswith("$2")

    def test_same_password_hashes_differently(self):
        """Each hash uses its own salt."""
        assert hash_password("secret", rounds=4) != hash_password("secret", rounds=4)

    def test_verify_correct_password(self):
        hashed = hash_password("SecurePass123!", rounds=4)
        assert verify_password("SecurePass123!", hashed) is True

    def test_verify_wrong_password(self):
        hashed = hash_password("SecurePass123!", rounds=4)
        assert verify_password("WrongPass", hashed) is False

    @pytest.mark.parametrize("password,hashed", [
        ("", "$2b$04$abcdefghijklmnopqrstuv"),
        ("secret", ""),
    ])
    def test_verify_empty_values(self, password, hashed):
        assert verify_password(password, hashed) is False

    def test_verify_malformed_hash(self):
        """A corrupted stored hash never authenticates."""
        assert verify_password("secret", "not-a-bcrypt-hash") is False

    @pytest.mark.asyncio
    async def test_async_helpers(self):
        hashed = await hash_password_async("SecurePass123!")

        assert await verify_password_async("SecurePass123!", hashed) is True
        assert await verify_password_async("nope", hashed) is False


class TestAccessTokens:
    """Test JWT creation and verification."""

    def test_create_and_verify(self):
        token = create_access_token("cadmin0000000000000000001", "admin@company.com")

        payload = verify_jwt_token(token)

        assert payload["sub"] == "cadmin0000000000000000001"
        assert payload["email"] == "admin@company.com"
        assert payload["exp"] > payload["iat"]

    def test_default_expiry_follows_settings(self):
        token = create_access_token("cadmin0000000000000000001", "admin@company.com")
        payload = verify_jwt_token(token)

        lifetime = payload["exp"] - payload["iat"]
        assert lifetime == settings.access_token_expire_minutes * 60

    def test_expired_token_rejected(self):
        token = create_access_token(
            "cadmin0000000000000000001",
            "admin@company.com",
            expires_delta=timedelta(seconds=-1),
        )

        with pytest.raises(pyjwt.ExpiredSignatureError):
            verify_jwt_token(token)

    def test_wrong_secret_rejected(self):
        token = create_access_token(
            "cadmin0000000000000000001",
            "admin@company.com",
            secret_key="another-secret-key-that-is-long-enough",
        )

        with pytest.raises(pyjwt.InvalidSignatureError):
            verify_jwt_token(token)

    def test_token_without_expiry_rejected(self):
        token = pyjwt.encode(
            {"sub": "cadmin0000000000000000001", "email": "admin@company.com"},
            settings.jwt_secret_key,
            algorithm=settings.jwt_algorithm,
        )

        with pytest.raises(pyjwt.MissingRequiredClaimError):
            verify_jwt_token(token)


class TestIdentityFromPayload:
    def test_builds_identity(self):
        identity = identity_from_payload({
            "sub": "cadmin0000000000000000001",
            "email": "admin@company.com",
            "exp": datetime.now(timezone.utc),
        })

        assert identity == AdminIdentity(id="cadmin0000000000000000001", email="admin@company.com")

    @pytest.mark.parametrize("payload", [
        {"email": "admin@company.com"},
        {"sub": "cadmin0000000000000000001"},
        {"sub": 42, "email": "admin@company.com"},
    ])
    def test_missing_claims(self, payload):
        with pytest.raises(pyjwt.InvalidTokenError):
            identity_from_payload(payload)
