"""Entry point wiring the client core together."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from .api import BackendClient
from .core.config import Settings, get_settings
from .core.logging import configure_logging
from .services import DirectoryResolver, RouteGuard, SessionManager, SessionState, TaskStore

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class TaskboardApp:
    """The components a UI layer talks to, sharing one backend client."""

    settings: Settings
    backend: BackendClient
    session: SessionManager
    directory: DirectoryResolver
    tasks: TaskStore
    guard: RouteGuard

    async def start(self) -> SessionState:
        """Resolve the initial session state."""

        return await self.session.initialize()

    async def aclose(self) -> None:
        self.tasks.dispose()
        await self.backend.aclose()
        logger.debug("Taskboard client closed")

    async def __aenter__(self) -> "TaskboardApp":
        await self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


def create_app(
    settings: Settings | None = None,
    *,
    http_client: httpx.AsyncClient | None = None,
    configure_logs: bool = True,
) -> TaskboardApp:
    """Instantiate and wire the client components."""

    settings = settings or get_settings()
    if configure_logs:
        configure_logging(settings)

    backend = BackendClient(settings, http_client=http_client)
    session = SessionManager(backend)
    directory = DirectoryResolver(backend)
    return TaskboardApp(
        settings=settings,
        backend=backend,
        session=session,
        directory=directory,
        tasks=TaskStore(backend, directory),
        guard=RouteGuard(session, settings),
    )


__all__ = ["TaskboardApp", "create_app"]
