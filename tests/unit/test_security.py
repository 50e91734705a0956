"""Tests for password hashing and JWT handling."""

from datetime import datetime, timedelta, timezone

import jwt
import pytest
from fastapi.security import HTTPAuthorizationCredentials

from securevote.common.config import SecureVoteSettings
from securevote.common.exceptions import AuthenticationError, PermissionDeniedError
from securevote.common.security import (
    CurrentUser,
    create_access_token,
    decode_access_token,
    get_current_user,
    hash_password,
    require_admin,
    verify_password,
)


def make_settings(**overrides) -> SecureVoteSettings:
    defaults = {"jwt_secret": "test-jwt-secret", "db_url": "sqlite+aiosqlite://"}
    defaults.update(overrides)
    return SecureVoteSettings(**defaults)


class TestPasswords:
    def test_hash_and_verify(self):
        hashed = hash_password("Aa1!aaaa")
        assert hashed != "Aa1!aaaa"
        assert hashed.startswith("$argon2")
        assert verify_password("Aa1!aaaa", hashed)

    def test_wrong_password(self):
        assert not verify_password("wrong", hash_password("Aa1!aaaa"))

    def test_garbage_hash(self):
        assert not verify_password("Aa1!aaaa", "not-a-hash")


class TestTokens:
    def test_roundtrip_claims(self):
        settings = make_settings()
        token = create_access_token("user-1", "a@b.com", "voter", settings)
        claims = decode_access_token(token, settings)
        assert claims["sub"] == "user-1"
        assert claims["email"] == "a@b.com"
        assert claims["role"] == "voter"
        assert claims["exp"] > claims["iat"]

    def test_wrong_secret_rejected(self):
        token = create_access_token("u", "a@b.com", "voter", make_settings())
        with pytest.raises(jwt.InvalidTokenError):
            decode_access_token(token, make_settings(jwt_secret="other-secret"))

    def test_expired_rejected(self):
        settings = make_settings()
        past = datetime.now(timezone.utc) - timedelta(hours=1)
        token = jwt.encode(
            {"sub": "u", "iat": past - timedelta(hours=1), "exp": past},
            settings.jwt_secret, algorithm="HS256",
        )
        with pytest.raises(jwt.ExpiredSignatureError):
            decode_access_token(token, settings)

    def test_missing_sub_rejected(self):
        settings = make_settings()
        token = jwt.encode(
            {"exp": datetime.now(timezone.utc) + timedelta(hours=1)},
            settings.jwt_secret, algorithm="HS256",
        )
        with pytest.raises(jwt.MissingRequiredClaimError):
            decode_access_token(token, settings)


class TestDependencies:
    async def test_missing_token(self):
        with pytest.raises(AuthenticationError) as exc_info:
            await get_current_user(None)
        assert exc_info.value.message == "No token provided"

    async def test_invalid_token(self):
        creds = HTTPAuthorizationCredentials(scheme="Bearer", credentials="garbage")
        with pytest.raises(AuthenticationError) as exc_info:
            await get_current_user(creds)
        assert exc_info.value.message == "Invalid token"

    async def test_require_admin(self):
        admin = CurrentUser(user_id="a", email="a@b.com", role="admin")
        assert await require_admin(admin) is admin
        with pytest.raises(PermissionDeniedError):
            await require_admin(CurrentUser(user_id="v", email="v@b.com", role="voter"))
