from __future__ import annotations

from functools import lru_cache
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """
    Application-level settings for the FastAPI service.

    This is separate from garment_erp.db.config.Settings, which focuses on the database layer.
    """

    # FastAPI metadata
    APP_NAME: str = Field(default="Garment ERP API")
    APP_DESCRIPTION: str = Field(
        default=(
            "Backend API for a garment manufacturing ERP. Covers customers and orders, "
            "cutting, batch stitching, picking, QC, inventory, procurement, invoicing and dispatch."
        )
    )
    APP_VERSION: str = Field(default="0.1.0")
    COMPANY_NAME: str = Field(default="Garment Works", description="Printed on generated documents")

    # CORS
    CORS_ORIGINS: List[str] = Field(
        default_factory=lambda: ["*"],
        description="Comma-separated list or JSON array of allowed origins. Default: *",
    )
    CORS_ALLOW_CREDENTIALS: bool = Field(default=True)
    CORS_ALLOW_METHODS: List[str] = Field(default_factory=lambda: ["*"])
    CORS_ALLOW_HEADERS: List[str] = Field(default_factory=lambda: ["*"])

    # Startup behavior
    RUN_MIGRATIONS_ON_STARTUP: bool = Field(
        default=True,
        description="If true, run Alembic migrations (upgrade head) at app startup.",
    )
    AUTO_SEED: bool = Field(
        default=False,
        description="If true, seed roles, sidebar, size types and reference data after migrations.",
    )

    # Auth
    JWT_SECRET_KEY: str = Field(default="change-me", description="HMAC secret for signing JWTs")
    JWT_ALGORITHM: str = Field(default="HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(default=60)
    REFRESH_TOKEN_EXPIRE_MINUTES: int = Field(default=60 * 24 * 7)

    # File storage
    STORAGE_ROOT: str = Field(default="storage", description="Directory holding uploaded blobs")
    STORAGE_PUBLIC_PATH: str = Field(default="/files", description="URL prefix blobs are served under")
    MAX_UPLOAD_MB: int = Field(default=100, ge=1)

    # Query cache
    CACHE_ENABLED: bool = Field(default=True)
    CACHE_MAX_ENTRIES: int = Field(default=500, ge=1)

    # Logging / environment
    LOG_LEVEL: str = Field(default="INFO")
    ENVIRONMENT: Optional[str] = Field(
        default=None, description="Environment label (dev/test/prod)"
    )

    # Automatically load from .env at runtime.
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def _parse_cors_origins(cls, v):
        """
        Accept both JSON array format and comma-separated formats for CORS origins.
        """
        if v is None:
            return ["*"]
        if isinstance(v, str):
            parts = [p.strip() for p in v.split(",") if p.strip()]
            return parts or ["*"]
        if isinstance(v, list):
            return v or ["*"]
        return ["*"]


# PUBLIC_INTERFACE
@lru_cache
def get_app_settings() -> AppSettings:
    """Return the process-wide AppSettings populated from environment variables."""
    return AppSettings()
