"""Cached user directory used to resolve task assignees."""

from __future__ import annotations

import logging

from ..api.ports import Backend
from ..errors import ApiError
from ..schemas import User, UserRole

logger = logging.getLogger(__name__)

SEED_DIRECTORY: tuple[User, ...] = (
    User(
        id="4ab3acf9-5acf-4ef3-a3e7-6aa2701a7411",
        name="Admin User",
        email="admin@example.com",
        role=UserRole.ADMIN,
    ),
    User(
        id="4fa65b43-8069-4edb-b6b8-fa8b6aa5cc2f",
        name="Test User",
        email="testuser@example.com",
        role=UserRole.USER,
    ),
)


class DirectoryResolver:
    """Map user identifiers to users from the last directory fetch.

    When the listing fails or comes back empty the cache holds
    ``SEED_DIRECTORY`` instead and ``is_degraded`` is set.
    """

    def __init__(self, backend: Backend) -> None:
        self._backend = backend
        self._users: dict[str, User] = {}
        self._loaded = False
        self._degraded = False

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    @property
    def is_degraded(self) -> bool:
        return self._degraded

    @property
    def users(self) -> list[User]:
        """Current entries in listing order, e.g. for an assignee picker."""
        return list(self._users.values())

    def _replace(self, users: list[User] | tuple[User, ...], *, degraded: bool) -> None:
        self._users = {user.id: user for user in users}
        self._loaded = True
        self._degraded = degraded

    def _seed(self, reason: str, **extra: object) -> None:
        logger.warning(
            "User directory degraded; using seed entries",
            extra={"reason": reason, "seed_size": len(SEED_DIRECTORY), **extra},
        )
        self._replace(SEED_DIRECTORY, degraded=True)

    async def fetch_directory(self) -> list[User]:
        """Rebuild the cache wholesale from the user listing."""

        try:
            users = await self._backend.list_users()
        except ApiError as exc:
            self._seed("fetch_failed", code=exc.code, status_code=exc.status_code)
        else:
            if users:
                self._replace(users, degraded=False)
                logger.info("User directory refreshed", extra={"size": len(users)})
            else:
                self._seed("empty_listing")
        return self.users

    async def ensure_loaded(self) -> list[User]:
        """Fetch the directory only if it has never been built."""

        if not self._loaded:
            return await self.fetch_directory()
        return self.users

    def resolve(self, user_id: str | None) -> User | None:
        """Cache lookup only; never fetches."""

        if not user_id:
            return None
        return self._users.get(user_id)


__all__ = ["DirectoryResolver", "SEED_DIRECTORY"]
