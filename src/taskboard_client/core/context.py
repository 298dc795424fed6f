"""Operation-scoped context helpers."""

from __future__ import annotations

import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar, Token

REQUEST_ID_HEADER = "X-Request-ID"

_operation_id_ctx_var: ContextVar[str] = ContextVar("operation_id", default="-")


def get_operation_id() -> str:
    """Return the operation identifier for the current execution context."""

    return _operation_id_ctx_var.get()


def bind_operation_id(operation_id: str | None = None) -> Token[str]:
    """Bind an operation identifier, generating one when none is provided."""

    return _operation_id_ctx_var.set(operation_id or str(uuid.uuid4()))


def reset_operation_id(token: Token[str]) -> None:
    """Reset the operation identifier using the provided context token."""

    _operation_id_ctx_var.reset(token)


def has_operation_id() -> bool:
    return _operation_id_ctx_var.get() != "-"


@contextmanager
def operation_scope() -> Iterator[str]:
    """Reuse the bound operation identifier, or bind a fresh one for the block."""

    if has_operation_id():
        yield get_operation_id()
        return
    token = bind_operation_id()
    try:
        yield get_operation_id()
    finally:
        reset_operation_id(token)


__all__ = [
    "REQUEST_ID_HEADER",
    "bind_operation_id",
    "get_operation_id",
    "has_operation_id",
    "operation_scope",
    "reset_operation_id",
]
