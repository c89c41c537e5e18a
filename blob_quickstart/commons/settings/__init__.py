"""Settings management module."""

from blob_quickstart.commons.settings.loader import SettingsLoader, load_settings
from blob_quickstart.commons.settings.models import (
    AppSettings,
    Settings,
    StorageSettings,
    TelemetrySettings,
    WorkflowSettings,
)

__all__ = [
    # Loader
    "SettingsLoader",
    "load_settings",
    # Models
    "Settings",
    "AppSettings",
    "StorageSettings",
    "WorkflowSettings",
    "TelemetrySettings",
]
