"""
==============================================================================
Application Settings Module
==============================================================================

Configuration management using Pydantic Settings.

This module implements the Singleton pattern to ensure a single global
configuration instance throughout the application lifecycle.

Features:
---------
- Environment variable loading with type validation
- .env file support for local development
- Computed properties for derived values
- Deployment variants selected by configuration:
  - blob_key_scope: one shared list ("global") or one list per caller
    address ("client")
  - sync_backend: remote endpoint over HTTP ("http"), the blob table
    in-process ("blob"), or a device-local file ("file")

Configuration Priority (highest to lowest):
------------------------------------------
1. Environment variables
2. .env file
3. Default values

==============================================================================
"""

from __future__ import annotations

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Module logger
logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Attributes:
        app_name: Display name for the application
        app_env: Environment mode (development/staging/production)
        debug: Enable debug mode for verbose logging
        host: Server bind address
        port: Server port number
        database_url: SQLAlchemy connection string for the blob table
        blob_key_scope: "global" (single shared list) or "client" (per address)
        sync_backend: Where scan sessions persist their list
        remote_url: Remote storage endpoint used by the "http" backend
        request_timeout_seconds: Timeout for remote push/pull calls
        refresh_interval_seconds: Periodic pull interval
        auto_refresh_enabled: Enable periodic pull for live sessions
        timestamp_format: strftime format for record timestamps
        view_cache_file: JSON file mirroring the last view state
        local_list_file: JSON file used by the "file" backend
        cors_origins: Allowed CORS origins (JSON array string)

    Example:
        >>> settings = Settings()
        >>> print(settings.app_name)
        'Barcode Scan List'
        >>> print(settings.is_production)
        False
    """

    # =========================================================================
    # PYDANTIC SETTINGS CONFIGURATION
    # =========================================================================
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        validate_default=True,
    )

    # =========================================================================
    # APPLICATION SETTINGS
    # =========================================================================
    app_name: str = Field(
        default="Barcode Scan List",
        description="Display name for the application"
    )

    app_env: str = Field(
        default="development",
        description="Environment mode: development, staging, production"
    )

    debug: bool = Field(
        default=False,
        description="Enable debug mode for verbose logging"
    )

    # =========================================================================
    # SERVER SETTINGS
    # =========================================================================
    host: str = Field(
        default="0.0.0.0",
        description="Server bind address"
    )

    port: int = Field(
        default=8000,
        ge=1,
        le=65535,
        description="Server port number"
    )

    # =========================================================================
    # STORAGE SETTINGS
    # =========================================================================
    database_url: str = Field(
        default="sqlite:///./storage/db/barcodes.db",
        description="SQLAlchemy database connection string"
    )

    blob_key_scope: str = Field(
        default="global",
        description="Blob key scope: global or client"
    )

    # =========================================================================
    # SYNC SETTINGS
    # =========================================================================
    sync_backend: str = Field(
        default="blob",
        description="Scan session persistence: http, blob or file"
    )

    remote_url: str = Field(
        default="http://localhost:8000/api/barcodes",
        description="Remote storage endpoint for the http backend"
    )

    request_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        le=120,
        description="Timeout for remote push/pull requests"
    )

    refresh_interval_seconds: float = Field(
        default=3.0,
        gt=0,
        le=3600,
        description="Periodic pull interval in seconds"
    )

    auto_refresh_enabled: bool = Field(
        default=True,
        description="Enable periodic pull for live scan sessions"
    )

    timestamp_format: str = Field(
        default="%-m/%-d/%Y, %-I:%M:%S %p",
        description="strftime format for record timestamps"
    )

    # =========================================================================
    # FILE PATH SETTINGS
    # =========================================================================
    view_cache_file: str = Field(
        default="storage/cache/view_state.json",
        description="Best-effort mirror of the last view state"
    )

    local_list_file: str = Field(
        default="storage/cache/barcodes.json",
        description="Barcode list file for the file backend"
    )

    # =========================================================================
    # CORS SETTINGS
    # =========================================================================
    cors_origins: str = Field(
        default='["*"]',
        description="Allowed CORS origins as JSON array string"
    )

    # =========================================================================
    # VALIDATORS
    # =========================================================================
    @field_validator("app_env")
    @classmethod
    def validate_app_env(cls, value: str) -> str:
        """
        Validate and normalize application environment.

        Unknown values fall back to "development" with a warning.
        """
        valid_envs = {"development", "staging", "production"}
        normalized = value.lower().strip()

        if normalized not in valid_envs:
            logger.warning(
                f"Unknown environment '{value}', defaulting to 'development'"
            )
            return "development"

        return normalized

    @field_validator("blob_key_scope")
    @classmethod
    def validate_blob_key_scope(cls, value: str) -> str:
        """
        Validate the blob key scope.

        Raises:
            ValueError: If scope is not "global" or "client"
        """
        normalized = value.lower().strip()
        if normalized not in {"global", "client"}:
            raise ValueError(
                f"Unsupported blob key scope: {value}. Supported: global, client"
            )
        return normalized

    @field_validator("sync_backend")
    @classmethod
    def validate_sync_backend(cls, value: str) -> str:
        """
        Validate the sync backend name.

        Raises:
            ValueError: If backend is not one of http, blob, file
        """
        supported = {"http", "blob", "file"}
        normalized = value.lower().strip()
        if normalized not in supported:
            raise ValueError(
                f"Unsupported sync backend: {value}. "
                f"Supported: {', '.join(sorted(supported))}"
            )
        return normalized

    # =========================================================================
    # COMPUTED PROPERTIES
    # =========================================================================
    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.app_env == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.app_env == "production"

    @property
    def view_cache_path(self) -> Path:
        """Get the view state cache file as Path object."""
        return Path(self.view_cache_file)

    @property
    def local_list_path(self) -> Path:
        """Get the local list file as Path object."""
        return Path(self.local_list_file)

    @property
    def cors_origins_list(self) -> List[str]:
        """
        Parse CORS origins from JSON string to list.

        Returns:
            List of allowed origin strings
        """
        try:
            origins = json.loads(self.cors_origins)
            if isinstance(origins, list):
                return origins
            return ["*"]
        except json.JSONDecodeError:
            logger.warning(
                f"Invalid CORS origins JSON: {self.cors_origins}, "
                "defaulting to ['*']"
            )
            return ["*"]

    # =========================================================================
    # UTILITY METHODS
    # =========================================================================
    def get_database_path(self) -> Optional[Path]:
        """
        Extract database file path for SQLite databases.

        Returns:
            Path to database file, or None for non-SQLite or in-memory databases
        """
        if self.database_url.startswith("sqlite:///"):
            db_path = self.database_url.replace("sqlite:///", "")
            if db_path.startswith("./"):
                db_path = db_path[2:]
            if not db_path or db_path == ":memory:":
                return None
            return Path(db_path)
        return None

    def ensure_directories(self) -> None:
        """
        Create all required directories.

        Creates:
        - Database directory (for SQLite)
        - Cache directory for view state and the local list
        """
        db_path = self.get_database_path()
        if db_path:
            db_path.parent.mkdir(parents=True, exist_ok=True)

        self.view_cache_path.parent.mkdir(parents=True, exist_ok=True)
        self.local_list_path.parent.mkdir(parents=True, exist_ok=True)

        logger.debug("Required directories created/verified")

    def __repr__(self) -> str:
        """String representation for debugging."""
        return (
            f"Settings(app_name={self.app_name!r}, "
            f"app_env={self.app_env!r}, "
            f"sync_backend={self.sync_backend!r}, "
            f"blob_key_scope={self.blob_key_scope!r})"
        )


# =============================================================================
# SINGLETON INSTANCE MANAGEMENT
# =============================================================================

@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get the global Settings instance (singleton pattern).

    Uses lru_cache to ensure only one Settings instance is created
    throughout the application lifecycle.

    Returns:
        Global Settings instance
    """
    settings = Settings()

    settings.ensure_directories()

    if settings.debug:
        logger.info(f"Configuration loaded: {settings}")

    return settings
