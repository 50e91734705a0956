"""Pydantic schemas for registration, login and profile endpoints."""

from typing import Optional

from pydantic import Field

from securevote.common.schemas import CamelModel, UTCDateTime


class RegisterRequest(CamelModel):
    email: str = Field(..., max_length=255)
    password: str = Field(..., max_length=128)
    full_name: Optional[str] = Field(None, max_length=255)
    organization: Optional[str] = Field(None, max_length=255)


class LoginRequest(CamelModel):
    email: str
    password: str


class RegisterResponse(CamelModel):
    message: str = "User registered successfully"
    user_id: str
    token: str


class LoginResponse(CamelModel):
    message: str = "Login successful"
    user_id: str
    role: str
    token: str


class UserResponse(CamelModel):
    user_id: str
    email: str
    full_name: Optional[str] = None
    organization: Optional[str] = None
    role: str
    created_at: UTCDateTime
    last_login: Optional[UTCDateTime] = None
