"""Application identity and per-user locations for the log and settings."""
from __future__ import annotations

import os
from pathlib import Path

APP_NAME = "Tiled2Unity"
APP_VERSION = "1.0.0"
LOG_FILE_NAME = "tiled2unity.log"
SETTINGS_FILE_NAME = "settings.json"


def app_data_dir() -> Path:
    """Application-data directory for the current user (not created here)."""
    appdata = os.environ.get("APPDATA")
    if appdata:
        return Path(appdata) / APP_NAME
    return Path.home() / ".tiled2unity"
