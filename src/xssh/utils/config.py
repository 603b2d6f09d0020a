"""
Settings loading from YAML.
"""

import logging
from pathlib import Path
from typing import Optional

import yaml
from pydantic import ValidationError

from ..exceptions import SettingsError
from ..models import XsshSettings

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS_FILE = "~/.config/xssh/config.yaml"


def load_settings(config_file: Optional[str] = None) -> XsshSettings:
    """
    Load xssh settings from a YAML file.

    Args:
        config_file: Path to the YAML file. When omitted the default location
            is read if it exists, otherwise built-in defaults are used.

    Returns:
        XsshSettings: Validated settings

    Raises:
        SettingsError: If an explicit file is missing, or any file is malformed
    """
    path = Path(config_file or DEFAULT_SETTINGS_FILE).expanduser()

    if not path.exists():
        if config_file:
            raise SettingsError(f"Settings file not found at path: {path}")
        logger.debug(f"No settings file at {path}, using defaults")
        return XsshSettings()

    try:
        with open(path, "r") as file:
            data = yaml.safe_load(file)
    except OSError as e:
        raise SettingsError(f"Could not read settings file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise SettingsError(f"Error parsing YAML file {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise SettingsError(f"Settings file {path} must contain a mapping")

    try:
        settings = XsshSettings.model_validate(data)
    except ValidationError as e:
        raise SettingsError(f"Invalid settings in {path}:\n{e}") from e

    logger.debug(f"Loaded settings from {path}")
    return settings
