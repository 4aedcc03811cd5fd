"""
TrapSelect configuration: schema, defaults and the JSON-backed manager.
"""
from .config_schema import (
    CONFIG_SCHEMA,
    get_default_config,
    get_schema_entry,
    validate_config_value,
)
from .config_manager import ConfigManager

__all__ = [
    'CONFIG_SCHEMA',
    'get_default_config',
    'get_schema_entry',
    'validate_config_value',
    'ConfigManager',
]
