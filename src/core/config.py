"""Configuration models and YAML loader for the ATS portal client."""

import os
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, field_validator

DEFAULT_API_URL = "http://localhost:8080/api"
DEFAULT_FRONTEND_URL = "http://localhost:3000"

AppMode = Literal["development", "production"]


class ApiConfig(BaseModel):
    """REST backend connection settings."""

    base_url: str = DEFAULT_API_URL
    timeout_s: float = Field(default=30.0, gt=0.0)

    @field_validator("base_url")
    @classmethod
    def base_url_not_empty(cls, v: str) -> str:
        v = v.strip().rstrip("/")
        if not v:
            msg = "base_url must not be empty"
            raise ValueError(msg)
        return v


class ListConfig(BaseModel):
    """Filtered list behaviour."""

    debounce_ms: int = Field(default=300, ge=0, le=5000)

    @property
    def debounce_s(self) -> float:
        return self.debounce_ms / 1000.0


class ToastConfig(BaseModel):
    """Auto-dismiss durations (seconds) per notification type."""

    success_s: float = Field(default=4.0, gt=0.0)
    error_s: float = Field(default=5.0, gt=0.0)
    info_s: float = Field(default=4.0, gt=0.0)
    warning_s: float = Field(default=4.0, gt=0.0)

    def duration_for(self, kind: str) -> float:
        """Return the configured duration for a toast type."""
        durations = {
            "success": self.success_s,
            "error": self.error_s,
            "info": self.info_s,
            "warning": self.warning_s,
        }
        if kind not in durations:
            msg = f"Unknown toast type '{kind}'"
            raise ValueError(msg)
        return durations[kind]


class StorageConfig(BaseModel):
    """Durable session storage."""

    path: str = "data/session.db"


class Settings(BaseModel):
    """Top-level settings loaded from YAML and the environment."""

    api: ApiConfig = Field(default_factory=ApiConfig)
    lists: ListConfig = Field(default_factory=ListConfig)
    toasts: ToastConfig = Field(default_factory=ToastConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    app_mode: AppMode = "development"
    # Public site the embed snippet points at.
    frontend_url: str = DEFAULT_FRONTEND_URL

    @field_validator("app_mode", mode="before")
    @classmethod
    def normalize_mode(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @property
    def is_production(self) -> bool:
        return self.app_mode == "production"

    def mode_banner(self) -> str:
        """Banner text shown at the top of every dashboard."""
        return "PRODUCTION MODE" if self.is_production else "DEVELOPMENT MODE"

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Settings":
        """Load settings from a YAML file."""
        path = Path(path)
        if not path.exists():
            msg = f"Config file not found: {path}"
            raise FileNotFoundError(msg)
        raw: dict[str, Any] = yaml.safe_load(path.read_text()) or {}
        return cls.model_validate(raw)

    @classmethod
    def load(
        cls,
        path: str | Path | None = None,
        env: dict[str, str] | None = None,
    ) -> "Settings":
        """Load settings from YAML when present, then apply env overrides.

        ``ATS_API_URL`` overrides ``api.base_url`` and ``ATS_APP_MODE``
        overrides ``app_mode``. A missing file yields the defaults.
        """
        env = dict(os.environ) if env is None else env
        if path is not None and Path(path).exists():
            raw = yaml.safe_load(Path(path).read_text()) or {}
        else:
            raw = {}

        api_url = env.get("ATS_API_URL")
        if api_url:
            raw.setdefault("api", {})["base_url"] = api_url
        app_mode = env.get("ATS_APP_MODE")
        if app_mode:
            raw["app_mode"] = app_mode
        return cls.model_validate(raw)
