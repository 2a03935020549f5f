"""Configuration package."""

from budgetbee.config.settings import (
    AppSettings,
    BackupSettings,
    Settings,
    StoreSettings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "BackupSettings",
    "Settings",
    "StoreSettings",
    "get_settings",
    "validate_all_settings",
]
