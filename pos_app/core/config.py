"""
Application Configuration Module

Centralizes all configuration using environment variables with Pydantic Settings.
Supports three modes:
    - DEVELOPMENT: Uses mock sync services (no PocketBase server needed)
    - STAGING: Uses a real PocketBase server with test data
    - PRODUCTION: Uses the live PocketBase server

The ENV_MODE variable controls which sync collaborators are instantiated,
so the terminal can be exercised fully offline on a laptop and pointed at
the real backend in the restaurant.

Usage:
    from pos_app.core.config import get_settings

    settings = get_settings()
    if settings.is_development:
        # Use mock services
    else:
        # Use PocketBase

Version: 1.0.0
"""

import logging
import sys
from enum import Enum
from typing import Optional
from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EnvironmentMode(str, Enum):
    """
    Application environment modes.

    Attributes:
        DEVELOPMENT: Local testing with mock sync services
        PRODUCTION: Live PocketBase backend
        STAGING: Real PocketBase backend with test data
    """
    DEVELOPMENT = "development"
    PRODUCTION = "production"
    STAGING = "staging"


class StoreBackend(str, Enum):
    """Local persistence backends."""
    MEMORY = "memory"
    JSON = "json"
    SQL = "sql"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables or .env file.
    Credentials for the sync backend are never stored here; the auth
    service keeps its token in memory only.

    Attributes:
        env_mode: Current environment (development/production/staging)
        debug: Enable verbose logging

        # Local persistence
        store_backend: Which key-value backend holds products and orders
        data_directory: Directory for the JSON store, database and reports
        store_filename: JSON store filename
        store_lock_timeout: Seconds to wait for the JSON store lock
        database_url: SQLAlchemy URL for the SQL backend

        # Business Configuration
        reporting_timezone: Timezone used to stamp and bucket orders
        currency: Display currency code
        default_display_order: Sentinel for products without a position

        # Cloud sync
        pocketbase_url: Base URL of the PocketBase server
        pocketbase_orders_collection: Collection mirroring confirmed orders
        pocketbase_users_collection: Auth collection
        sync_timeout_seconds: HTTP timeout for each remote call
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==========================================================================
    # ENVIRONMENT
    # ==========================================================================

    env_mode: EnvironmentMode = Field(
        default=EnvironmentMode.DEVELOPMENT,
        description="Application environment mode"
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode with verbose logging"
    )

    # ==========================================================================
    # APPLICATION
    # ==========================================================================

    app_name: str = Field(
        default="Restaurant POS",
        description="Application display name"
    )
    app_version: str = Field(
        default="1.0.0",
        description="Application version"
    )

    # ==========================================================================
    # LOCAL PERSISTENCE
    # ==========================================================================

    store_backend: StoreBackend = Field(
        default=StoreBackend.JSON,
        description="Key-value backend: memory, json or sql"
    )
    data_directory: str = Field(
        default="data",
        description="Directory for data files"
    )
    store_filename: str = Field(
        default="pos_store.json",
        description="JSON store filename"
    )
    store_lock_timeout: int = Field(
        default=30,
        description="Seconds to wait for file lock"
    )
    database_url: str = Field(
        default="sqlite:///data/pos_store.db",
        description="SQLAlchemy connection URL for the SQL backend"
    )

    # ==========================================================================
    # BUSINESS CONFIGURATION
    # ==========================================================================

    reporting_timezone: str = Field(
        default="Europe/Madrid",
        description="IANA timezone used to stamp and group orders"
    )
    currency: str = Field(
        default="EUR",
        description="Display currency"
    )
    default_display_order: int = Field(
        default=999,
        description="Display order assumed for products without one"
    )

    # ==========================================================================
    # POCKETBASE (CLOUD SYNC)
    # ==========================================================================

    pocketbase_url: Optional[str] = Field(
        default=None,
        description="PocketBase base URL (https://pb.example.com)"
    )
    pocketbase_orders_collection: str = Field(
        default="orders",
        description="Collection that mirrors confirmed orders"
    )
    pocketbase_users_collection: str = Field(
        default="users",
        description="Auth collection used for login"
    )
    sync_timeout_seconds: float = Field(
        default=10.0,
        description="Timeout for each remote request"
    )

    # ==========================================================================
    # REPORTS
    # ==========================================================================

    report_filename: str = Field(
        default="orders.xlsx",
        description="Excel export filename"
    )

    # ==========================================================================
    # VALIDATORS
    # ==========================================================================

    @field_validator("env_mode", mode="before")
    @classmethod
    def validate_env_mode(cls, v: str) -> EnvironmentMode:
        """Convert string to EnvironmentMode enum."""
        if isinstance(v, EnvironmentMode):
            return v
        try:
            return EnvironmentMode(v.lower())
        except ValueError:
            valid = [e.value for e in EnvironmentMode]
            raise ValueError(f"Invalid env_mode. Must be one of: {valid}")

    @field_validator("reporting_timezone")
    @classmethod
    def validate_reporting_timezone(cls, v: str) -> str:
        """Reject timezone names the tz database does not know."""
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"Unknown reporting timezone: {v}")
        return v

    # ==========================================================================
    # COMPUTED PROPERTIES
    # ==========================================================================

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.env_mode == EnvironmentMode.DEVELOPMENT

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.env_mode == EnvironmentMode.PRODUCTION

    @property
    def use_real_services(self) -> bool:
        """Check if the real PocketBase backend should be used."""
        return self.env_mode in (EnvironmentMode.PRODUCTION, EnvironmentMode.STAGING)

    @property
    def tzinfo(self) -> ZoneInfo:
        """Reporting timezone as a tzinfo object."""
        return ZoneInfo(self.reporting_timezone)

    # ==========================================================================
    # VALIDATION METHODS
    # ==========================================================================

    def validate_production_config(self) -> list[str]:
        """
        Validate that all required production settings are configured.

        Returns:
            List of missing configuration keys (empty if all present)
        """
        missing = []

        if self.use_real_services:
            if not self.pocketbase_url:
                missing.append("POCKETBASE_URL")

        return missing


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Settings are loaded once per process; tests call
    ``get_settings.cache_clear()`` after patching the environment.

    Returns:
        Settings: Configured application settings
    """
    return Settings()


# =============================================================================
# LOGGING CONFIGURATION
# =============================================================================

def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """
    Configure application-wide logging.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)

    Returns:
        Configured package logger
    """
    settings = get_settings()

    if settings.debug:
        level = logging.DEBUG

    log_format = "%(asctime)s │ %(levelname)-8s │ %(name)-25s │ %(message)s"
    date_format = "%Y-%m-%d %H:%M:%S"

    logging.basicConfig(
        level=level,
        format=log_format,
        datefmt=date_format,
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("filelock").setLevel(logging.WARNING)

    return logging.getLogger("pos_app")
