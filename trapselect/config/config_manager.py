"""
Configuration Manager for TrapSelect

This module provides a configuration layer that:
1. Loads settings from a JSON file, falling back to schema defaults
2. Provides type-safe access to configuration values
3. Validates values against the schema on load and on set

Usage:
    from trapselect.config import ConfigManager

    # Initialize
    config = ConfigManager('/path/to/trapselect.json')

    # Get values
    delay = config.get('COUNTING', 'DEBOUNCE_MS')

    # Set (validated) values and persist them
    config.set('COUNTING', 'DEBOUNCE_MS', 300)
    config.save()
"""

import copy
import json
import logging
import os
from typing import Any, Dict, List, Optional

from ..core.domain.exceptions import InvalidSettingError
from ..infrastructure.logging import ROOT_LOGGER_NAME, set_log_level
from .config_schema import (
    CONFIG_SCHEMA,
    get_default_config,
    get_schema_entry,
    validate_config_value,
)

logger = logging.getLogger('TrapSelect.Config')


class ConfigManager:
    """
    Configuration manager for TrapSelect.

    Provides type-safe access to configuration values with validation.
    Unknown sections and keys in the file are ignored; invalid values are
    replaced by their defaults and logged.
    """

    SCHEMA_VERSION = "1.0.0"

    # Shipped copy of the defaults, for users to start their own settings file from
    DEFAULT_FILE = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'config.default.json')

    def __init__(self, config_path: Optional[str] = None, auto_load: bool = True):
        """
        Initialize the configuration manager.

        Args:
            config_path: Path of the JSON settings file (None for defaults only)
            auto_load: Whether to automatically load configuration
        """
        self.config_path = config_path
        self._data: Dict[str, Any] = get_default_config()
        self._schema = CONFIG_SCHEMA

        if auto_load:
            self.load()

    # =========================================================================
    # Loading and Saving
    # =========================================================================

    def load(self) -> bool:
        """
        Load configuration from file.

        Returns:
            bool: True if a file was read, False if defaults are in use
        """
        self._data = get_default_config()
        if not self.config_path or not os.path.exists(self.config_path):
            logger.info("No configuration file, using defaults")
            return False

        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                stored = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Error loading configuration from {self.config_path}: {e}")
            return False

        self._merge(stored)
        logger.info(f"Loaded configuration from {self.config_path}")
        return True

    def _merge(self, stored: Dict[str, Any]) -> None:
        """Copy valid stored values over the defaults."""
        for section, values in stored.items():
            if section.startswith('_') or section not in self._data or not isinstance(values, dict):
                continue
            for key, value in values.items():
                entry = get_schema_entry(section, key)
                if not entry:
                    continue
                is_valid, message = validate_config_value(entry, value)
                if not is_valid:
                    logger.warning(f"Ignoring invalid setting {section}.{key}={value!r}: {message}")
                    continue
                self._data[section][key] = value

    def save(self, path: Optional[str] = None) -> bool:
        """
        Save configuration to file.

        Returns:
            bool: True if saved successfully
        """
        target = path or self.config_path
        if not target:
            return False
        try:
            directory = os.path.dirname(target)
            if directory:
                os.makedirs(directory, exist_ok=True)
            save_data = {"_schema_version": self.SCHEMA_VERSION, **self._data}
            with open(target, 'w', encoding='utf-8') as f:
                json.dump(save_data, f, indent=4)
        except OSError as e:
            logger.error(f"Error saving configuration to {target}: {e}")
            return False
        return True

    def reset_to_defaults(self) -> None:
        self._data = get_default_config()

    # =========================================================================
    # Access
    # =========================================================================

    def get(self, *keys: str, default: Any = None) -> Any:
        """
        Get a configuration value by path.

        Args:
            *keys: Path to the value (e.g., 'COUNTING', 'DEBOUNCE_MS')
            default: Default value if not found

        Returns:
            The configuration value or default
        """
        data = self._data
        for key in keys:
            if isinstance(data, dict):
                data = data.get(key)
                if data is None:
                    return default
            else:
                return default
        return data

    def set(self, section: str, key: str, value: Any) -> None:
        """
        Set a configuration value.

        Raises:
            InvalidSettingError: If the setting is unknown or the value is invalid
        """
        entry = get_schema_entry(section, key)
        if not entry:
            raise InvalidSettingError(f"Unknown setting: {section}.{key}")
        is_valid, message = validate_config_value(entry, value)
        if not is_valid:
            raise InvalidSettingError(f"{section}.{key}: {message}")
        self._data[section][key] = value

    def apply_log_level(self) -> None:
        """Apply LOGGING.LEVEL to the TrapSelect root logger."""
        set_log_level(ROOT_LOGGER_NAME, self.get('LOGGING', 'LEVEL', default='WARNING'))

    def get_choices(self, section: str, key: str) -> List[str]:
        """Available choices for a setting, or an empty list."""
        return list(get_schema_entry(section, key).get('choices', []))

    @property
    def data(self) -> Dict[str, Any]:
        """Deep copy of the current settings."""
        return copy.deepcopy(self._data)
