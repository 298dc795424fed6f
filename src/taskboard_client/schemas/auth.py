"""Schemas describing authentication payloads."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from .user import User, UserRole


class LoginRequest(BaseModel):
    """Credentials submitted to the login endpoint."""

    email: str = Field(min_length=1)
    password: str = Field(min_length=1)


class RegisterRequest(BaseModel):
    """Incoming payload for registering a new account."""

    name: str = Field(min_length=1)
    email: str = Field(min_length=1)
    password: str = Field(min_length=6)
    role: UserRole = UserRole.USER


class AuthResponse(BaseModel):
    """Login response; the backend may attach extra metadata next to ``user``."""

    model_config = ConfigDict(extra="allow")

    user: User


class SessionCheckResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    user: User


class RegisterResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    success: bool = False


__all__ = [
    "AuthResponse",
    "LoginRequest",
    "RegisterRequest",
    "RegisterResponse",
    "SessionCheckResponse",
]
