from __future__ import annotations

from collections.abc import AsyncIterator

import httpx
import pytest
import pytest_asyncio

from taskboard_client.api import BackendClient
from taskboard_client.core.config import Settings
from taskboard_client.services import DirectoryResolver, SessionManager, TaskStore

from .fakes import FakeBackendState, build_backend_app

BASE_URL = "http://testserver/api"


@pytest.fixture()
def settings() -> Settings:
    return Settings(environment="test", api_base_url=BASE_URL)


@pytest.fixture()
def backend_state() -> FakeBackendState:
    return FakeBackendState()


@pytest_asyncio.fixture
async def http_client(backend_state: FakeBackendState) -> AsyncIterator[httpx.AsyncClient]:
    transport = httpx.ASGITransport(app=build_backend_app(backend_state))
    async with httpx.AsyncClient(transport=transport, base_url=BASE_URL) as client:
        yield client


@pytest.fixture()
def backend(settings: Settings, http_client: httpx.AsyncClient) -> BackendClient:
    return BackendClient(settings, http_client=http_client)


@pytest.fixture()
def session_manager(backend: BackendClient) -> SessionManager:
    return SessionManager(backend)


@pytest.fixture()
def directory(backend: BackendClient) -> DirectoryResolver:
    return DirectoryResolver(backend)


@pytest.fixture()
def store(backend: BackendClient, directory: DirectoryResolver) -> TaskStore:
    return TaskStore(backend, directory)
