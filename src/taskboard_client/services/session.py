"""Authenticated-identity state machine."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from ..api.ports import Backend
from ..core.context import operation_scope
from ..errors import ApiError, AuthFailure, describe_failure
from ..schemas import AuthResponse, LoginRequest, RegisterRequest, RegisterResponse, User, UserRole

logger = logging.getLogger(__name__)

SessionListener = Callable[["SessionState"], None]


class SessionStatus(str, Enum):
    LOADING = "loading"
    ANONYMOUS = "anonymous"
    AUTHENTICATED = "authenticated"


@dataclass(frozen=True, slots=True)
class SessionState:
    """Exactly one of ``Loading``, ``Anonymous`` or ``Authenticated(user)``."""

    status: SessionStatus
    user: User | None = None

    def __post_init__(self) -> None:
        if (self.status is SessionStatus.AUTHENTICATED) != (self.user is not None):
            raise ValueError("Only an authenticated session carries a user.")

    @classmethod
    def loading(cls) -> "SessionState":
        return cls(SessionStatus.LOADING)

    @classmethod
    def anonymous(cls) -> "SessionState":
        return cls(SessionStatus.ANONYMOUS)

    @classmethod
    def authenticated(cls, user: User) -> "SessionState":
        return cls(SessionStatus.AUTHENTICATED, user)

    @property
    def is_loading(self) -> bool:
        return self.status is SessionStatus.LOADING

    @property
    def is_authenticated(self) -> bool:
        return self.status is SessionStatus.AUTHENTICATED


class SessionManager:
    """Own the session state and its ``initialize``/``login``/``logout`` lifecycle.

    Consumers receive the manager explicitly and either read ``state`` or
    ``subscribe`` to transitions.
    """

    def __init__(self, backend: Backend) -> None:
        self._backend = backend
        self._state = SessionState.loading()
        self._listeners: list[SessionListener] = []
        self._initializing: asyncio.Future[SessionState] | None = None

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def user(self) -> User | None:
        return self._state.user

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Register ``listener`` for state transitions; returns an unsubscribe callable."""

        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _transition(self, state: SessionState) -> None:
        previous = self._state
        self._state = state
        logger.info(
            "Session transition",
            extra={
                "from_status": previous.status.value,
                "to_status": state.status.value,
                "user_id": state.user.id if state.user else None,
            },
        )
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                logger.exception("Session listener failed", extra={"to_status": state.status.value})

    async def initialize(self) -> SessionState:
        """Resolve the initial ``Loading`` state from the session-check call.

        Never raises. Concurrent callers share a single session check, and
        calling it again once the state has left ``Loading`` is a no-op that
        returns the current state.
        """

        if not self._state.is_loading:
            logger.debug("Session already initialised", extra={"status": self._state.status.value})
            return self._state
        if self._initializing is None or self._initializing.cancelled():
            self._initializing = asyncio.ensure_future(self._check_session())
        return await asyncio.shield(self._initializing)

    async def _check_session(self) -> SessionState:
        try:
            user = await self._backend.check_session()
        except ApiError as exc:
            logger.info("No active session", extra={"code": exc.code, "status_code": exc.status_code})
            resolved = SessionState.anonymous()
        except Exception:
            logger.exception("Session check failed unexpectedly")
            resolved = SessionState.anonymous()
        else:
            resolved = SessionState.authenticated(user)

        # login() or logout() may have settled the state while the check was in flight
        if not self._state.is_loading:
            logger.debug(
                "Ignoring stale session check",
                extra={"status": self._state.status.value, "checked_status": resolved.status.value},
            )
            return self._state
        self._transition(resolved)
        return self._state

    async def login(self, email: str, password: str) -> AuthResponse:
        """Authenticate and return the backend payload.

        Raises ``AuthFailure`` with the server message when present; the session
        state is left untouched on failure.
        """

        try:
            credentials = LoginRequest(email=email, password=password)
        except ValueError as exc:
            raise AuthFailure("Email and password are required.", code="validation_error") from exc
        try:
            response = await self._backend.login(credentials)
        except ApiError as exc:
            raise AuthFailure(
                describe_failure(exc, "Login failed"),
                status_code=exc.status_code,
                details=exc.details,
            ) from exc
        self._transition(SessionState.authenticated(response.user))
        return response

    async def register(
        self,
        *,
        name: str,
        email: str,
        password: str,
        role: UserRole = UserRole.USER,
    ) -> RegisterResponse:
        """Create an account and, when the backend reports success, log into it."""

        with operation_scope():
            return await self._register(name, email, password, role)

    async def _register(self, name: str, email: str, password: str, role: UserRole) -> RegisterResponse:
        try:
            payload = RegisterRequest(name=name, email=email, password=password, role=role)
        except ValueError as exc:
            raise AuthFailure("Registration details are invalid.", code="validation_error") from exc
        try:
            response = await self._backend.register(payload)
        except ApiError as exc:
            raise AuthFailure(
                describe_failure(exc, "Registration failed"),
                status_code=exc.status_code,
                details=exc.details,
            ) from exc
        if response.success:
            await self.login(email, password)
        else:
            logger.warning("Registration was not confirmed by the backend", extra={"email": email})
        return response

    async def logout(self) -> None:
        """End the session locally whatever the remote call returns."""

        try:
            await self._backend.logout()
        except ApiError as exc:
            logger.warning("Logout call failed", extra={"code": exc.code, "status_code": exc.status_code})
        finally:
            self._transition(SessionState.anonymous())


__all__ = ["SessionListener", "SessionManager", "SessionState", "SessionStatus"]
