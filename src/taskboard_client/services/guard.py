"""Advisory view-access routing driven by the session state.

None of this is a security boundary; the backend authorises every call.
"""

from __future__ import annotations

from enum import Enum

from ..core.config import Settings
from ..schemas import UserRole
from .session import SessionManager, SessionState, SessionStatus


class RouteDecision(str, Enum):
    PENDING = "pending"
    RENDER = "render"
    REDIRECT_LOGIN = "redirect_login"
    REDIRECT_UNAUTHORIZED = "redirect_unauthorized"


def evaluate_route(state: SessionState, required_role: UserRole | None = None) -> RouteDecision:
    """Decide what a protected view should do for ``state``."""

    if state.status is SessionStatus.LOADING:
        return RouteDecision.PENDING
    if state.user is None:
        return RouteDecision.REDIRECT_LOGIN
    if required_role is None or state.user.role == required_role:
        return RouteDecision.RENDER
    return RouteDecision.REDIRECT_UNAUTHORIZED


def can_manage_tasks(state: SessionState) -> bool:
    """Whether create/edit/delete controls should be offered."""
    return state.user is not None and state.user.role is UserRole.ADMIN


class RouteGuard:
    """Query the current session before a protected view renders."""

    def __init__(self, session: SessionManager, settings: Settings) -> None:
        self._session = session
        self._settings = settings

    def check(self, required_role: UserRole | None = None) -> RouteDecision:
        return evaluate_route(self._session.state, required_role)

    def redirect_target(self, decision: RouteDecision) -> str | None:
        """Path to navigate to for a redirect decision, ``None`` otherwise."""

        if decision is RouteDecision.REDIRECT_LOGIN:
            return self._settings.login_path
        if decision is RouteDecision.REDIRECT_UNAUTHORIZED:
            return self._settings.unauthorized_path
        return None

    def landing_target(self) -> str | None:
        """Where the login and register views send an authenticated user."""

        if self._session.state.is_authenticated:
            return self._settings.home_path
        return None


__all__ = ["RouteDecision", "RouteGuard", "can_manage_tasks", "evaluate_route"]
