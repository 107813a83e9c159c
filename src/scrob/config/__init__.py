"""Configuration module for scrob."""

from .settings import (
    ApiSettings,
    BootstrapSettings,
    DatabaseSettings,
    IngestionSettings,
    ObservabilitySettings,
    SecuritySettings,
    Settings,
    get_settings,
)

__all__ = [
    "ApiSettings",
    "BootstrapSettings",
    "DatabaseSettings",
    "IngestionSettings",
    "ObservabilitySettings",
    "SecuritySettings",
    "Settings",
    "get_settings",
]
