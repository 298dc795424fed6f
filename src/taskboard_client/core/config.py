from __future__ import annotations

from functools import lru_cache
from typing import Any, Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .. import __version__ as package_version

EnvironmentName = Literal["development", "test", "ci"]

_ENVIRONMENT_ALIASES: dict[str, EnvironmentName] = {
    "development": "development",
    "dev": "development",
    "test": "test",
    "testing": "test",
    "ci": "ci",
}

_ENVIRONMENT_PROFILES: dict[EnvironmentName, dict[str, Any]] = {
    "development": {
        "log_level": "DEBUG",
    },
    "test": {
        "log_level": "WARNING",
    },
    "ci": {
        "log_level": "INFO",
    },
}


class Settings(BaseSettings):
    """Runtime configuration for the task board client."""

    model_config = SettingsConfigDict(
        env_prefix="TASKBOARD_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    project_name: str = "Taskboard Client"
    environment: EnvironmentName = "development"
    version: str = package_version
    api_base_url: str = "http://localhost:5000/api"
    request_timeout_seconds: float = 10.0
    log_level: str = "INFO"

    home_path: str = "/"
    login_path: str = "/login"
    unauthorized_path: str = "/unauthorized"

    @field_validator("environment", mode="before")
    @classmethod
    def _normalise_environment(cls, value: object) -> EnvironmentName:
        if isinstance(value, str):
            normalized = value.strip().lower()
        else:
            normalized = ""
        return _ENVIRONMENT_ALIASES.get(normalized, "development")

    @field_validator("api_base_url", mode="before")
    @classmethod
    def _strip_trailing_slash(cls, value: object) -> str:
        return str(value or "").strip().rstrip("/")

    @field_validator("request_timeout_seconds", mode="before")
    @classmethod
    def _ensure_non_negative_timeout(cls, value: object) -> float:
        try:
            timeout = float(value)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            return 10.0
        return max(timeout, 0.0)

    @field_validator("home_path", "login_path", "unauthorized_path", mode="before")
    @classmethod
    def _normalise_path(cls, value: object) -> str:
        candidate = str(value or "").strip() or "/"
        if not candidate.startswith("/"):
            candidate = f"/{candidate}"
        return candidate

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalise_log_level(cls, value: object) -> str:
        if not isinstance(value, str):
            return "INFO"
        return value.upper()

    @model_validator(mode="after")
    def _apply_environment_profile(self) -> "Settings":
        profile = _ENVIRONMENT_PROFILES[self.environment]
        fields_set = set(getattr(self, "model_fields_set", set()))
        for field_name, value in profile.items():
            if field_name not in fields_set:
                setattr(self, field_name, value)
        return self


@lru_cache()
def get_settings() -> Settings:
    """Return a cached ``Settings`` instance."""

    return Settings()
