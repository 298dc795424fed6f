"""HTTP implementation of the task board backend contract."""

from __future__ import annotations

import logging
from typing import Any, TypeVar
from urllib.parse import quote

import httpx
from pydantic import BaseModel, TypeAdapter

from ..core.config import Settings
from ..core.context import REQUEST_ID_HEADER, operation_scope
from ..errors import ApiError
from ..schemas import (
    AuthResponse,
    LoginRequest,
    RegisterRequest,
    RegisterResponse,
    SessionCheckResponse,
    Task,
    TaskInput,
    User,
    normalize_user_listing,
)

ModelT = TypeVar("ModelT", bound=BaseModel)

logger = logging.getLogger(__name__)

_TASK_LIST_ADAPTER = TypeAdapter(list[Task])


def _invalid_response(path: str, exc: ValueError) -> ApiError:
    errors = exc.errors() if hasattr(exc, "errors") else [str(exc)]
    return ApiError(
        "Unexpected response from the task board backend.",
        code="invalid_response",
        details={"path": path, "errors": errors},
    )


class BackendClient:
    """Talk to the task board backend over HTTP.

    Responses are validated against the schemas before they reach the core
    components, so callers only ever see ``User``/``Task`` models or an
    ``ApiError``.
    """

    def __init__(self, settings: Settings, *, http_client: httpx.AsyncClient | None = None) -> None:
        self._settings = settings
        self._owns_client = http_client is None
        if http_client is None:
            http_client = httpx.AsyncClient(
                base_url=settings.api_base_url,
                timeout=settings.request_timeout_seconds,
                headers={"Accept": "application/json"},
            )
        self._client = http_client

    async def __aenter__(self) -> "BackendClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""

        if self._owns_client:
            await self._client.aclose()

    async def _request(self, method: str, path: str, *, json: Any | None = None) -> Any:
        with operation_scope() as operation_id:
            logger.debug("Backend request", extra={"method": method, "path": path})
            try:
                response = await self._client.request(
                    method,
                    path,
                    json=json,
                    headers={REQUEST_ID_HEADER: operation_id},
                )
            except httpx.HTTPError as exc:
                logger.warning(
                    "Backend unreachable",
                    extra={"method": method, "path": path, "error": str(exc)},
                )
                raise ApiError(
                    "Unable to reach the task board backend.",
                    code="transport_error",
                    details={"path": path},
                ) from exc

            payload = self._decode(response)
            if response.is_error:
                error = ApiError.from_response(response.status_code, payload)
                log = logger.error if response.status_code >= 500 else logger.warning
                log(
                    "Backend request failed",
                    extra={
                        "method": method,
                        "path": path,
                        "code": error.code,
                        "status_code": error.status_code,
                    },
                )
                raise error
            return payload

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return None

    @staticmethod
    def _validate(model: type[ModelT], path: str, payload: Any) -> ModelT:
        try:
            return model.model_validate(payload)
        except ValueError as exc:
            raise _invalid_response(path, exc) from exc

    async def check_session(self) -> User:
        path = "/auth/check"
        payload = await self._request("GET", path)
        return self._validate(SessionCheckResponse, path, payload).user

    async def login(self, credentials: LoginRequest) -> AuthResponse:
        path = "/auth/login"
        payload = await self._request("POST", path, json=credentials.model_dump(mode="json"))
        return self._validate(AuthResponse, path, payload)

    async def logout(self) -> None:
        await self._request("POST", "/auth/logout")

    async def register(self, payload: RegisterRequest) -> RegisterResponse:
        path = "/auth/register"
        body = await self._request("POST", path, json=payload.model_dump(mode="json"))
        return self._validate(RegisterResponse, path, body)

    async def list_users(self) -> list[User]:
        path = "/users/list"
        payload = await self._request("GET", path)
        try:
            return normalize_user_listing(payload)
        except ValueError as exc:
            raise _invalid_response(path, exc) from exc

    async def list_tasks(self) -> list[Task]:
        path = "/tasks/get-task"
        payload = await self._request("GET", path)
        try:
            return _TASK_LIST_ADAPTER.validate_python(payload)
        except ValueError as exc:
            raise _invalid_response(path, exc) from exc

    async def create_task(self, payload: TaskInput) -> Task:
        path = "/tasks/create"
        body = await self._request("POST", path, json=payload.to_payload())
        return self._validate(Task, path, body)

    async def update_task(self, task_id: str, payload: TaskInput) -> Task:
        path = f"/tasks/{quote(task_id, safe='')}"
        body = await self._request("PUT", path, json=payload.to_payload())
        return self._validate(Task, path, body)

    async def delete_task(self, task_id: str) -> None:
        await self._request("DELETE", f"/tasks/{quote(task_id, safe='')}")


__all__ = ["BackendClient"]
