"""
Application settings.

All values can be overridden via environment variables prefixed with
``NOTEBRIDGE_`` or through a ``.env`` file in the working directory.

Order of precedence (highest → lowest):
    1. Explicit keyword arguments (tests, ``create_app(settings=...)``)
    2. Environment variables (``NOTEBRIDGE_DATABASE_URL``, etc.)
    3. ``.env`` file
    4. Defaults below

Manifesto:
    Configuration lives in one validated object.  A missing or short JWT
    secret fails at startup, not on the first login.

Tags:
    notebridge, core, settings, pydantic-settings, env

Doc-Types:
    api-reference, configuration
"""

from __future__ import annotations

import json
from functools import lru_cache
from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class NotebridgeSettings(BaseSettings):
    """Settings for the notebridge REST API."""

    model_config = SettingsConfigDict(
        env_prefix="NOTEBRIDGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Server ───────────────────────────────────────────────────────────
    host: str = Field(default="0.0.0.0", description="Bind address")
    port: int = Field(default=4000, description="Bind port")
    debug: bool = Field(default=False, description="Expose exception detail in 500 responses")

    # ── Observability ────────────────────────────────────────────────────
    log_level: str = Field(default="INFO", description="Log level")
    log_format: str = Field(default="json", description="json or console")

    # ── API ──────────────────────────────────────────────────────────────
    api_title: str = Field(default="notebridge API", description="OpenAPI title")
    api_version: str = Field(default="0.1.0", description="OpenAPI version string")
    cors_origins: Annotated[list[str], NoDecode] = Field(
        default=["http://localhost:8080"],
        description="Allowed CORS origins; ['*'] allows any origin",
    )

    # ── Database ─────────────────────────────────────────────────────────
    database_url: str = Field(
        default="sqlite:///notebridge.db",
        description="SQLAlchemy connection URL",
    )
    db_pool_size: int | None = None
    db_max_overflow: int | None = None

    # ── Auth ─────────────────────────────────────────────────────────────
    jwt_access_secret: str = Field(..., min_length=32, description="HMAC secret for access tokens")
    jwt_algorithm: str = "HS256"
    jwt_access_expires_minutes: int = Field(default=15, gt=0)
    refresh_token_ttl_days: int = Field(default=14, gt=0)
    bcrypt_rounds: int = Field(default=12, ge=4, le=16)

    # ── WatsonX ──────────────────────────────────────────────────────────
    watsonx_api_key: str | None = Field(default=None, description="IBM Cloud API key")
    watsonx_project_id: str | None = None
    watsonx_url: str = "https://eu-de.ml.cloud.ibm.com/ml/v1/text/chat?version=2023-05-29"
    iam_url: str = "https://iam.cloud.ibm.com/identity/token"
    watsonx_timeout_s: float = 120.0
    generation_model: str = "ibm/granite-4-h-small"
    vision_model: str = "meta-llama/llama-3-2-11b-vision-instruct"

    # ── Storage ──────────────────────────────────────────────────────────
    file_storage_dir: str = Field(default="./storage", description="Root for uploaded user files")

    # ── Rate limiting ────────────────────────────────────────────────────
    rate_limit_enabled: bool = False
    rate_limit_rpm: int = 120

    @field_validator("cors_origins", mode="before")
    @classmethod
    def _split_origins(cls, value: object) -> object:
        # accepts a JSON list or a comma-separated string
        if isinstance(value, str):
            if value.lstrip().startswith("["):
                return json.loads(value)
            return [part.strip() for part in value.split(",") if part.strip()]
        return value

    @property
    def allow_any_origin(self) -> bool:
        return self.cors_origins == ["*"]


@lru_cache(maxsize=1)
def get_settings() -> NotebridgeSettings:
    """Cached settings: loaded once per process."""
    return NotebridgeSettings()
