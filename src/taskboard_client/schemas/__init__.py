"""Pydantic schemas validated at the backend boundary."""

from __future__ import annotations

from .auth import (
    AuthResponse,
    LoginRequest,
    RegisterRequest,
    RegisterResponse,
    SessionCheckResponse,
)
from .task import Task, TaskInput, TaskPriority
from .user import User, UserRole, normalize_user_listing

__all__ = [
    "AuthResponse",
    "LoginRequest",
    "RegisterRequest",
    "RegisterResponse",
    "SessionCheckResponse",
    "Task",
    "TaskInput",
    "TaskPriority",
    "User",
    "UserRole",
    "normalize_user_listing",
]
