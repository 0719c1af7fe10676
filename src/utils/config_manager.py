"""
Application Configuration Persistence
======================================

This module manages the serialization and deserialization of the toolbox
settings, so endpoints, the workspace folder and the Unity editor location
are preserved between runs.

Key Responsibilities:
---------------------
- File-System Persistence: Stores settings in a hidden JSON file in the
  user's home directory (`~/.quantum_asset_toolbox.json`).
- State Synchronization: Maps JSON keys to the fields of the
  `ToolboxSettings` dataclass, ignoring keys it does not know.
- Security Logging: Records save/load events through the logger with
  sensitive fields redacted.

Author: Quantum Asset Toolbox Project
"""

import json
import logging
from dataclasses import asdict, fields
from pathlib import Path
from typing import Optional

from src.core.session import ToolboxSettings
from src.utils.logger import log_config

CONFIG_PATH = Path.home() / ".quantum_asset_toolbox.json"


def save_settings(settings: ToolboxSettings, path: Optional[Path] = None) -> bool:
    """
    Persist settings to the configuration file as pretty-printed JSON.

    Args:
        settings: The settings to be saved.
        path: Target file (defaults to CONFIG_PATH).

    Returns:
        bool: True if the file was written.
    """
    logger = logging.getLogger(__name__)
    path = Path(path) if path is not None else CONFIG_PATH

    try:
        data = asdict(settings)
        log_config("Saving Settings", data, logger)

        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)

        logger.info(f"Settings saved successfully to {path}")
        return True

    except (OSError, TypeError) as e:
        logger.error(f"Failed to save settings: {e}", exc_info=True)
        return False


def load_settings(path: Optional[Path] = None) -> ToolboxSettings:
    """
    Load settings from the configuration file.

    Missing files and corrupt files both yield default settings; only known
    ToolboxSettings fields are applied.

    Args:
        path: Source file (defaults to CONFIG_PATH).

    Returns:
        ToolboxSettings: Loaded (or default) settings.
    """
    logger = logging.getLogger(__name__)
    path = Path(path) if path is not None else CONFIG_PATH
    settings = ToolboxSettings()

    if not path.exists():
        logger.info(f"No existing settings file found at {path}")
        return settings

    try:
        logger.info(f"Loading settings from {path}")

        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)

        if not isinstance(data, dict):
            logger.error(f"Settings file {path} does not contain an object, using defaults")
            return settings

        log_config("Loaded Settings", data, logger)

        known = {f.name for f in fields(ToolboxSettings)}
        for key, value in data.items():
            if key in known:
                setattr(settings, key, value)
            else:
                logger.debug(f"Ignoring unknown setting: {key}")

        logger.info("Settings loaded and applied successfully")

    except json.JSONDecodeError as e:
        logger.error(f"Settings file is corrupted: {e}", exc_info=True)
        return ToolboxSettings()
    except OSError as e:
        logger.error(f"Failed to load settings: {e}", exc_info=True)
        return ToolboxSettings()

    return settings
