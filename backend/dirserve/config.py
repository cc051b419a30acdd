"""dirserve configuration — Pydantic BaseSettings loaded from env / .env."""

from __future__ import annotations

import os
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_UPLOAD_LIMIT = 10 * 1024 * 1024  # 10 MiB


class Settings(BaseSettings):
    """Server settings, fixed for the lifetime of the process."""

    app_name: str = "dirserve"
    debug: bool = False
    log_level: str = "INFO"

    # Network
    host: str = "0.0.0.0"
    port: int = Field(default=8080, ge=1, le=65535)

    # Served tree
    root_dir: str = "./"

    # "username:password", empty disables Basic auth
    auth: str = ""

    # Max request body size for uploads, 0 disables uploads
    upload_limit: int = Field(default=DEFAULT_UPLOAD_LIMIT, ge=0)

    # Request log file, empty disables request logging
    log_file: str = ""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="DIRSERVE_",
        extra="ignore",
        frozen=True,
    )

    @field_validator("root_dir")
    @classmethod
    def _absolute_root(cls, value: str) -> str:
        return os.path.abspath(os.path.expanduser(value))

    @field_validator("auth")
    @classmethod
    def _check_auth(cls, value: str) -> str:
        if value and ":" not in value:
            raise ValueError("Invalid auth format. Use username:password")
        return value

    @property
    def credentials(self) -> tuple[str, str] | None:
        """(username, password) when auth is enabled, else None."""
        if not self.auth:
            return None
        username, password = self.auth.split(":", 1)
        return username, password

    @property
    def auth_enabled(self) -> bool:
        return self.credentials is not None

    @property
    def uploads_enabled(self) -> bool:
        return self.upload_limit > 0


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
