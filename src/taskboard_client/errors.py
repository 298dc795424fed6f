"""Client-side error taxonomy and message extraction helpers."""

from __future__ import annotations

from http import HTTPStatus
from typing import Any

_MESSAGE_KEYS = ("error", "message", "detail")

_HTTP_STATUS_CODE_MAP: dict[int, str] = {
    HTTPStatus.BAD_REQUEST: "bad_request",
    HTTPStatus.UNAUTHORIZED: "unauthorized",
    HTTPStatus.FORBIDDEN: "forbidden",
    HTTPStatus.NOT_FOUND: "not_found",
    HTTPStatus.METHOD_NOT_ALLOWED: "method_not_allowed",
    HTTPStatus.CONFLICT: "conflict",
    HTTPStatus.UNPROCESSABLE_ENTITY: "validation_error",
    HTTPStatus.TOO_MANY_REQUESTS: "rate_limited",
}


class ClientError(Exception):
    """Base class for errors surfaced by the client core."""

    def __init__(
        self,
        message: str,
        *,
        code: str = "client_error",
        status_code: int | None = None,
        details: Any | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details


class ApiError(ClientError):
    """Error raised by the backend client when a call does not succeed."""

    def __init__(
        self,
        message: str,
        *,
        code: str = "api_error",
        status_code: int | None = None,
        server_message: str | None = None,
        details: Any | None = None,
    ) -> None:
        super().__init__(message, code=code, status_code=status_code, details=details)
        self.server_message = server_message

    @classmethod
    def from_response(cls, status_code: int, payload: Any) -> "ApiError":
        server_message = extract_error_message(payload, None)
        try:
            phrase = HTTPStatus(status_code).phrase
        except ValueError:
            phrase = "Error"
        code = _HTTP_STATUS_CODE_MAP.get(status_code)
        if code is None:
            code = "server_error" if status_code >= HTTPStatus.INTERNAL_SERVER_ERROR else "http_error"
        return cls(
            server_message or phrase,
            code=code,
            status_code=status_code,
            server_message=server_message,
            details=payload if isinstance(payload, dict) else None,
        )


class AuthFailure(ClientError):
    """Login or registration rejected by the backend."""

    def __init__(
        self,
        message: str = "Authentication failed",
        *,
        code: str = "auth_failure",
        status_code: int | None = None,
        details: Any | None = None,
    ) -> None:
        super().__init__(message, code=code, status_code=status_code, details=details)


class MutationFailure(ClientError):
    """Task create, update or delete rejected."""

    def __init__(
        self,
        message: str = "Task mutation failed",
        *,
        code: str = "mutation_failure",
        status_code: int | None = None,
        details: Any | None = None,
    ) -> None:
        super().__init__(message, code=code, status_code=status_code, details=details)


class LoadFailure(ClientError):
    """Task snapshot could not be fetched."""

    def __init__(
        self,
        message: str = "Failed to fetch tasks",
        *,
        code: str = "load_failure",
        status_code: int | None = None,
        details: Any | None = None,
    ) -> None:
        super().__init__(message, code=code, status_code=status_code, details=details)


def extract_error_message(payload: Any, fallback: str | None) -> str | None:
    """Return the human-readable message carried by an error payload.

    ``error`` is preferred over ``message``, which is preferred over a string
    ``detail``. The fallback is returned when none of them is a non-empty string.
    """

    if isinstance(payload, dict):
        for key in _MESSAGE_KEYS:
            value = payload.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
    return fallback


def describe_failure(exc: ClientError, fallback: str) -> str:
    """Prefer the server-supplied message of ``exc`` over ``fallback``."""

    if isinstance(exc, ApiError):
        return exc.server_message or fallback
    return exc.message or fallback


__all__ = [
    "ApiError",
    "AuthFailure",
    "ClientError",
    "LoadFailure",
    "MutationFailure",
    "describe_failure",
    "extract_error_message",
]
