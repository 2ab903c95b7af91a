"""
Persisted settings for Tiled2Unity
"""
import copy
import json
from pathlib import Path
from typing import Any, Dict
import logging

from tiled2unity.app import APP_NAME, APP_VERSION, SETTINGS_FILE_NAME, app_data_dir

logger = logging.getLogger(__name__)


class Config:
    """Durable key-value settings backed by a JSON file"""

    DEFAULT_CONFIG = {
        "app": {
            "name": APP_NAME,
            "version": APP_VERSION,
        },
        "export": {
            # 0 means no scale has been saved yet
            "lastVertexScale": 0.0,
        },
    }

    def __init__(self, config_path: str = None):
        """Initialize settings

        Args:
            config_path: Path to settings file. If None, uses the per-user app data directory.
        """
        if config_path is None:
            self.config_path = app_data_dir() / SETTINGS_FILE_NAME
        else:
            self.config_path = Path(config_path)

        self.config: Dict[str, Any] = {}
        self.load()

    def load(self):
        """Load settings from file, falling back to defaults"""
        if self.config_path.exists():
            try:
                with open(self.config_path, "r", encoding="utf-8") as f:
                    self.config = json.load(f)
                if not isinstance(self.config, dict):
                    raise ValueError("settings root must be an object")
                logger.info(f"Loaded settings from {self.config_path}")
                self._merge_defaults()
            except (OSError, ValueError) as e:
                logger.error(f"Failed to load settings: {e}. Using defaults.")
                self.config = copy.deepcopy(self.DEFAULT_CONFIG)
        else:
            logger.info("No settings file found. Using defaults.")
            self.config = copy.deepcopy(self.DEFAULT_CONFIG)

    def save(self):
        """Save settings to file"""
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_path, "w", encoding="utf-8") as f:
                json.dump(self.config, f, indent=2)
            logger.info(f"Saved settings to {self.config_path}")
        except OSError as e:
            logger.error(f"Failed to save settings: {e}")

    def get(self, key_path: str, default=None):
        """Get a value using dot notation

        Args:
            key_path: Dot-separated path (e.g., "export.lastVertexScale")
            default: Default value if key not found
        """
        value = self.config
        for key in key_path.split("."):
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default
        return value

    def set(self, key_path: str, value: Any):
        """Set a value using dot notation (in memory only)"""
        keys = key_path.split(".")
        target = self.config

        for key in keys[:-1]:
            if not isinstance(target.get(key), dict):
                target[key] = {}
            target = target[key]

        target[keys[-1]] = value

    def set_and_persist(self, key_path: str, value: Any):
        self.set(key_path, value)
        self.save()

    def _merge_defaults(self):
        """Merge loaded settings over defaults so every key exists"""

        def merge_dict(default: dict, loaded: dict) -> dict:
            result = copy.deepcopy(default)
            for key, value in loaded.items():
                if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                    result[key] = merge_dict(result[key], value)
                else:
                    result[key] = value
            return result

        self.config = merge_dict(self.DEFAULT_CONFIG, self.config)
