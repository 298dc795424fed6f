"""Ports the core components depend on instead of a concrete HTTP client."""

from __future__ import annotations

from typing import Protocol

from ..schemas import (
    AuthResponse,
    LoginRequest,
    RegisterRequest,
    RegisterResponse,
    Task,
    TaskInput,
    User,
)


class Backend(Protocol):
    """Request/response contract of the task board backend.

    Implementations raise ``ApiError`` for every unsuccessful call.
    """

    async def check_session(self) -> User: ...

    async def login(self, credentials: LoginRequest) -> AuthResponse: ...

    async def logout(self) -> None: ...

    async def register(self, payload: RegisterRequest) -> RegisterResponse: ...

    async def list_users(self) -> list[User]: ...

    async def list_tasks(self) -> list[Task]: ...

    async def create_task(self, payload: TaskInput) -> Task: ...

    async def update_task(self, task_id: str, payload: TaskInput) -> Task: ...

    async def delete_task(self, task_id: str) -> None: ...


__all__ = ["Backend"]
