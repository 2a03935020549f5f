"""
Configuration Management for BudgetBee Core

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
This makes it easy to see which paths, constants and crypto parameters
the core depends on, and ensures they are validated at startup.
"""

import platform
import re
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from budgetbee import __version__
from budgetbee.models.transaction import CURRENCY_CODE_PATTERN


DEFAULT_CATEGORIES = (
    "Food,Transport,Shopping,Bills,Entertainment,"
    "Health,Education,Salary,Gift,Other"
)


class StoreSettings(BaseSettings):
    """Local key-value store configuration."""

    model_config = SettingsConfigDict(
        env_prefix="BUDGETBEE_STORE_",
        extra="ignore"
    )

    data_dir: Path = Field(
        default=Path.home() / ".budgetbee",
        description="Private application storage directory"
    )
    preferences_file: str = Field(
        default="BudgetBeePrefs.json",
        description="File name of the durable key-value store"
    )
    default_currency: str = Field(
        default="USD",
        min_length=3,
        max_length=3,
        description="Currency used when none has been selected"
    )
    transaction_categories: str = Field(
        default=DEFAULT_CATEGORIES,
        description="Comma-separated list of allowed transaction categories"
    )

    @field_validator('default_currency')
    @classmethod
    def normalize_currency(cls, v: str) -> str:
        code = v.strip().upper()
        if not re.match(CURRENCY_CODE_PATTERN, code):
            raise ValueError(f"Default currency must be a three-letter code: {v}")
        return code

    @property
    def categories_list(self) -> list[str]:
        """Get the category vocabulary as a list."""
        return [
            category.strip()
            for category in self.transaction_categories.split(",")
            if category.strip()
        ]

    @property
    def preferences_path(self) -> Path:
        return self.data_dir / self.preferences_file


class BackupSettings(BaseSettings):
    """
    Backup and restore configuration.

    NOTE: The key derivation passphrase and salt are embedded defaults.
    They protect backups against casual inspection only. Override them
    through the environment if real secrecy is required.
    """

    model_config = SettingsConfigDict(
        env_prefix="BUDGETBEE_BACKUP_",
        extra="ignore"
    )

    file_prefix: str = Field(
        default="BudgetBee",
        min_length=1,
        description="Prefix of backup file names"
    )
    directory_name: str = Field(
        default="backups",
        description="Backups subdirectory under the data directory"
    )
    staging_directory_name: str = Field(
        default="cache",
        description="Subdirectory used to stage restores from streams"
    )
    schema_version: int = Field(
        default=1,
        ge=1,
        description="Backup schema version written and accepted by this build"
    )

    # Key derivation
    kdf_passphrase: str = Field(
        default="BudgetBeeSalt",
        min_length=1,
        description="Application-embedded passphrase for backup encryption"
    )
    kdf_salt: str = Field(
        default="BudgetBeeSalt",
        min_length=8,
        description="Application-embedded salt for backup encryption"
    )
    kdf_iterations: int = Field(
        default=65536,
        ge=10000,
        description="PBKDF2 iteration count"
    )

    @field_validator('file_prefix')
    @classmethod
    def validate_file_prefix(cls, v: str) -> str:
        """File prefix ends up in file names, keep it path-safe."""
        if "/" in v or "\\" in v:
            raise ValueError(f"File prefix must not contain path separators: {v}")
        return v


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
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

    # Backup metadata
    app_version: str = Field(
        default=__version__,
        description="Version string stamped into backup metadata"
    )
    device_model: str = Field(
        default_factory=lambda: platform.node() or platform.machine() or "unknown",
        description="Device name stamped into backup metadata"
    )


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

    @property
    def store(self) -> StoreSettings:
        return StoreSettings()

    @property
    def backup(self) -> BackupSettings:
        return BackupSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


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

    for name in ("store", "backup", "app"):
        try:
            _ = getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
