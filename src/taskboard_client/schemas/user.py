"""User-facing Pydantic schemas."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator

logger = logging.getLogger(__name__)

USER_LISTING_KEYS = ("users", "data")


class UserRole(str, Enum):
    """Roles understood by the task board."""

    ADMIN = "ADMIN"
    USER = "USER"


class User(BaseModel):
    """Directory entry describing a task board account."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str = Field(min_length=1)
    name: str
    email: str
    role: UserRole = UserRole.USER

    @field_validator("role", mode="before")
    @classmethod
    def _normalise_role(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().upper()
        return value


_USER_LIST_ADAPTER = TypeAdapter(list[User])


def normalize_user_listing(payload: Any) -> list[User]:
    """Return the users carried by a listing payload.

    Accepts a bare array, or an object wrapping the array under one of
    ``USER_LISTING_KEYS``. Any other shape raises ``ValueError``.
    """

    if isinstance(payload, list):
        return _USER_LIST_ADAPTER.validate_python(payload)
    if isinstance(payload, dict):
        for key in USER_LISTING_KEYS:
            items = payload.get(key)
            if isinstance(items, list):
                logger.debug("User listing wrapped under %r", key)
                return _USER_LIST_ADAPTER.validate_python(items)
    raise ValueError("Unrecognised user listing shape.")


__all__ = ["USER_LISTING_KEYS", "User", "UserRole", "normalize_user_listing"]
