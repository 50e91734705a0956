"""Password hashing, JWT handling and bearer-token dependencies."""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from securevote.common.config import SecureVoteSettings, get_settings
from securevote.common.exceptions import AuthenticationError, PermissionDeniedError

ROLE_VOTER = "voter"
ROLE_ADMIN = "admin"

_hasher = PasswordHasher()

bearer_scheme = HTTPBearer(auto_error=False)


# ── Passwords ──

def hash_password(password: str) -> str:
    """Hash a password with argon2id."""
    return _hasher.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return _hasher.verify(hashed_password, plain_password)
    except (VerifyMismatchError, VerificationError, InvalidHashError):
        return False


def password_needs_rehash(hashed_password: str) -> bool:
    return _hasher.check_needs_rehash(hashed_password)


# ── Tokens ──

def create_access_token(
    user_id: str,
    email: str,
    role: str,
    settings: SecureVoteSettings | None = None,
) -> str:
    settings = settings or get_settings()
    now = datetime.now(timezone.utc)
    payload = {
        "sub": user_id,
        "email": email,
        "role": role,
        "iat": now,
        "exp": now + timedelta(minutes=settings.jwt_expires_minutes),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(
    token: str, settings: SecureVoteSettings | None = None,
) -> dict[str, Any]:
    """Decode and verify a token. Raises ``jwt.InvalidTokenError`` on failure."""
    settings = settings or get_settings()
    return jwt.decode(
        token,
        settings.jwt_secret,
        algorithms=[settings.jwt_algorithm],
        options={"require": ["sub", "exp"]},
    )


# ── Dependencies ──

@dataclass
class CurrentUser:
    """Identity resolved from a bearer token."""
    user_id: str
    email: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> CurrentUser:
    """FastAPI dependency that requires a valid bearer token."""
    if credentials is None:
        raise AuthenticationError("No token provided")
    try:
        payload = decode_access_token(credentials.credentials)
    except jwt.InvalidTokenError as exc:
        raise AuthenticationError("Invalid token") from exc
    return CurrentUser(
        user_id=payload["sub"],
        email=payload.get("email", ""),
        role=payload.get("role", ROLE_VOTER),
    )


async def require_admin(
    user: CurrentUser = Depends(get_current_user),
) -> CurrentUser:
    """FastAPI dependency that requires an admin token."""
    if not user.is_admin:
        raise PermissionDeniedError()
    return user
