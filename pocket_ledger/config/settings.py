"""
Configuration Management for Pocket Ledger

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
This makes it easy to see what external dependencies exist and
ensures all required configuration is validated at startup.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Firestore rejects write batches with more operations than this.
FIRESTORE_MAX_BATCH_SIZE = 500


class FirestoreSettings(BaseSettings):
    """Google Cloud Firestore storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="FIRESTORE_",
        extra="ignore"
    )

    credentials_path: str = Field(
        ...,
        description="Path to Google service account credentials JSON"
    )
    project_id: str = Field(
        ...,
        description="Google Cloud project that owns the Firestore database"
    )
    database: str = Field(
        default="(default)",
        description="Firestore database name"
    )

    @field_validator('credentials_path')
    @classmethod
    def validate_credentials_path(cls, v: str) -> str:
        """Warn if credentials file doesn't exist (but don't fail - might be mounted later)."""
        if not Path(v).exists():
            import warnings
            warnings.warn(
                f"Google credentials file not found at {v}. "
                "Make sure it exists before running the application."
            )
        return v


class LedgerSettings(BaseSettings):
    """
    Ledger engine settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    default_currency: str = Field(
        default="USD",
        min_length=3,
        max_length=3,
        description="Currency for seeded default accounts"
    )

    # Read view windows
    recent_limit: int = Field(
        default=50,
        ge=1,
        le=1000,
        description="Default number of transactions in the recent list"
    )
    today_window: int = Field(
        default=100,
        ge=1,
        le=1000,
        description="How many recent transactions are scanned for today's view"
    )

    # Bulk purge
    purge_batch_size: int = Field(
        default=FIRESTORE_MAX_BATCH_SIZE,
        ge=1,
        le=FIRESTORE_MAX_BATCH_SIZE,
        description="Deletes per batch when purging a user's data"
    )

    @field_validator('default_currency')
    @classmethod
    def normalize_currency(cls, v: str) -> str:
        return v.upper()


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Note: These are loaded lazily to allow partial configuration

    @property
    def firestore(self) -> FirestoreSettings:
        return FirestoreSettings()

    @property
    def ledger(self) -> LedgerSettings:
        return LedgerSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    try:
        _ = settings.firestore
        results["firestore"] = True
    except Exception as e:
        results["firestore"] = False
        results["firestore_error"] = str(e)

    try:
        _ = settings.ledger
        results["ledger"] = True
    except Exception as e:
        results["ledger"] = False
        results["ledger_error"] = str(e)

    return results
