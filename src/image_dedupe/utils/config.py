"""Configuration management for image-dedupe."""

import copy
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class Config:
    """Manages user configuration and settings."""

    DEFAULT_CONFIG_DIR = Path.home() / ".image-dedupe"
    DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.json"

    DEFAULT_SETTINGS = {
        "comparison": {
            "max_width": 800,
            "max_height": 533,
            "pixel_tolerance": 0.1,  # Per-pixel colour delta tolerance (0-1)
            "max_diff_pixels": 200,  # Absolute count, not a percentage
        },
        "grouping": {"strategy": "anchor"},  # anchor, connected
        "report_dir": str(DEFAULT_CONFIG_DIR / "reports"),
        "log_dir": str(DEFAULT_CONFIG_DIR / "logs"),
        "protected_folders": [],
        "safety": {"use_recycle_bin": False},
    }

    def __init__(self, config_file: Optional[Path] = None):
        """
        Initialize configuration.

        Args:
            config_file: Path to config file (default: ~/.image-dedupe/config.json)
        """
        self.config_file = config_file or self.DEFAULT_CONFIG_FILE
        self.settings: Dict[str, Any] = {}
        self.load()

    def load(self) -> None:
        """Load configuration from file, falling back to defaults."""
        self.settings = copy.deepcopy(self.DEFAULT_SETTINGS)
        if not self.config_file.exists():
            logger.debug(f"No config file at {self.config_file}. Using defaults.")
            return

        try:
            with open(self.config_file, "r", encoding="utf-8") as f:
                loaded = json.load(f)
        except json.JSONDecodeError as e:
            logger.warning(f"Invalid config file: {e}. Using defaults.")
            return

        if not isinstance(loaded, dict):
            logger.warning(f"Config file {self.config_file} is not an object. Using defaults.")
            return

        _merge(self.settings, loaded)
        logger.debug(f"Loaded configuration from {self.config_file}")

    def save(self) -> None:
        """Save configuration to file."""
        self.config_file.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_file, "w", encoding="utf-8") as f:
            json.dump(self.settings, f, indent=2)
        logger.debug(f"Saved configuration to {self.config_file}")

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value.

        Args:
            key: Configuration key (supports dot notation, e.g., 'safety.use_recycle_bin')
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        keys = key.split(".")
        value = self.settings
        for k in keys:
            if isinstance(value, dict):
                value = value.get(k)
                if value is None:
                    return default
            else:
                return default
        return value

    def set(self, key: str, value: Any, persist: bool = True) -> None:
        """
        Set a configuration value.

        Args:
            key: Configuration key (supports dot notation)
            value: Value to set
            persist: Write the change to the config file (command-line
                overrides pass False so they only last for the run)
        """
        keys = key.split(".")
        target = self.settings
        for k in keys[:-1]:
            if k not in target or not isinstance(target[k], dict):
                target[k] = {}
            target = target[k]
        target[keys[-1]] = value
        if persist:
            self.save()

    def add_protected_folder(self, folder: str) -> None:
        """
        Add a folder to the protected folders list.

        Args:
            folder: Folder name or pattern to protect
        """
        protected = list(self.get("protected_folders", []))
        if folder not in protected:
            protected.append(folder)
            self.set("protected_folders", protected)
            logger.info(f"Added protected folder: {folder}")

    def remove_protected_folder(self, folder: str) -> None:
        """
        Remove a folder from the protected folders list.

        Args:
            folder: Folder name or pattern to unprotect
        """
        protected = list(self.get("protected_folders", []))
        if folder in protected:
            protected.remove(folder)
            self.set("protected_folders", protected)
            logger.info(f"Removed protected folder: {folder}")

    def is_path_protected(self, path: Path) -> bool:
        """
        Check if a path is in a protected folder.

        Args:
            path: Path to check

        Returns:
            True if path is protected
        """
        protected_folders = self.get("protected_folders", [])
        path_str = str(path).lower()
        return any(
            protected.lower() in path_str for protected in protected_folders
        )

    def get_report_dir(self) -> Path:
        """Get the directory duplicate reports are written to."""
        return Path(self.get("report_dir")).expanduser()

    def get_log_dir(self) -> Path:
        """Get the directory daily log files are written to."""
        return Path(self.get("log_dir")).expanduser()

    def comparator_config(self):
        """Build the pairwise comparator settings from the 'comparison' section."""
        from image_dedupe.core.comparator import ComparatorConfig

        return ComparatorConfig(
            max_width=int(self.get("comparison.max_width", 800)),
            max_height=int(self.get("comparison.max_height", 533)),
            pixel_tolerance=float(self.get("comparison.pixel_tolerance", 0.1)),
            max_diff_pixels=int(self.get("comparison.max_diff_pixels", 200)),
        )


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> None:
    """Recursively merge override into base in place."""
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _merge(base[key], value)
        else:
            base[key] = value
