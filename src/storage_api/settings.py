from __future__ import annotations

from typing import Any, Literal

import structlog
from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_LogLevel = Literal["CRITICAL", "FATAL", "ERROR", "WARN", "WARNING", "INFO", "DEBUG", "NOTSET"]


class Settings(BaseSettings):
    """
    Typed application settings loaded from environment variables.
    STORAGE_INSTANCES expects a JSON object mapping instance names to records
    (for example: '{"files": {"provider": "gridfs", "database": "test"}}').
    """

    model_config = SettingsConfigDict(env_file=".env", extra="ignore", env_ignore_empty=True)

    # Storage instances
    STORAGE_INSTANCES: dict[str, dict[str, Any]] = {}
    STORAGE_DEFAULT_INSTANCE: str | None = None
    STORAGE_CALL_TIMEOUT_SECONDS: float | None = Field(default=None, gt=0.0)

    # Logging
    LOG_LEVEL: _LogLevel = "INFO"
    LOG_PLAIN_TEXT: bool = False

    @model_validator(mode="after")
    def _validate_default_instance(self) -> Settings:
        if (
            self.STORAGE_DEFAULT_INSTANCE
            and self.STORAGE_INSTANCES
            and self.STORAGE_DEFAULT_INSTANCE not in self.STORAGE_INSTANCES
        ):
            raise ValueError(
                f"STORAGE_DEFAULT_INSTANCE={self.STORAGE_DEFAULT_INSTANCE!r} "
                "is not one of STORAGE_INSTANCES"
            )
        return self

    def storage_settings(self) -> dict[str, Any]:
        """Return the facade settings table seeded from the environment."""
        table: dict[str, Any] = {}
        if self.STORAGE_DEFAULT_INSTANCE:
            table["default instance"] = self.STORAGE_DEFAULT_INSTANCE
        if self.STORAGE_CALL_TIMEOUT_SECONDS is not None:
            table["call timeout"] = self.STORAGE_CALL_TIMEOUT_SECONDS
        return table


try:
    settings = Settings()
except Exception as exc:
    structlog.get_logger("storage-api.settings").error(
        "settings_load_failed",
        component="settings",
        flow="startup",
        meta={"error_type": type(exc).__name__, "error": str(exc)},
    )
    raise
