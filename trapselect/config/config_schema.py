"""
Configuration Schema for TrapSelect

This module defines the configuration schema with:
- Clear hierarchical structure
- Type validation
- Default values
- Metadata for UI rendering (choices, descriptions)

The schema is organized into logical sections:
- COUNTING: Debounced recount of matching files
- RECOGNITION: Detection floor and default confidence window
- SELECTION: Default combinator and relative path handling
- LOGGING: Log verbosity
"""

from typing import Any, Dict


# =============================================================================
# Configuration Schema Definition
# =============================================================================

CONFIG_SCHEMA = {
    # -------------------------------------------------------------------------
    # COUNTING
    # -------------------------------------------------------------------------
    "COUNTING": {
        "_section_meta": {
            "title": "File Count",
            "description": "How the count of matching files is refreshed while editing a selection"
        },
        "DEBOUNCE_MS": {
            "type": "range",
            "min": 0,
            "max": 10000,
            "default": 500,
            "description": "Quiet period (ms) after the last edit before files are recounted"
        }
    },

    # -------------------------------------------------------------------------
    # RECOGNITION
    # -------------------------------------------------------------------------
    "RECOGNITION": {
        "_section_meta": {
            "title": "Recognition",
            "description": "Detection and classification selection settings"
        },
        "MINIMUM_DETECTION_CONFIDENCE": {
            "type": "range",
            "min": 0.0,
            "max": 1.0,
            "default": 0.01,
            "description": "Detections below this confidence count as nothing found ('Empty')"
        },
        "DEFAULT_CONFIDENCE_LOW": {
            "type": "range",
            "min": 0.0,
            "max": 1.0,
            "default": 0.8,
            "description": "Lower bound of the confidence window after choosing a category"
        },
        "DEFAULT_CONFIDENCE_HIGH": {
            "type": "range",
            "min": 0.0,
            "max": 1.0,
            "default": 1.0,
            "description": "Upper bound of the confidence window after choosing a category"
        }
    },

    # -------------------------------------------------------------------------
    # SELECTION
    # -------------------------------------------------------------------------
    "SELECTION": {
        "_section_meta": {
            "title": "Selection",
            "description": "Combination of field terms and folder handling"
        },
        "DEFAULT_COMBINATOR": {
            "type": "choices",
            "choices": ["AND", "OR"],
            "default": "AND",
            "description": "How enabled field terms are joined in a new session"
        },
        "PATH_SEPARATOR": {
            "type": "choices",
            "choices": ["\\", "/"],
            "default": "\\",
            "description": "Separator used in stored relative paths"
        },
        "SUBTREE_FOLDER_MATCHING": {
            "type": "boolean",
            "default": True,
            "description": "Selecting a folder also selects its subfolders"
        }
    },

    # -------------------------------------------------------------------------
    # LOGGING
    # -------------------------------------------------------------------------
    "LOGGING": {
        "_section_meta": {
            "title": "Logging",
            "description": "Diagnostics"
        },
        "LEVEL": {
            "type": "choices",
            "choices": ["DEBUG", "INFO", "WARNING", "ERROR"],
            "default": "WARNING",
            "description": "Level of the TrapSelect root logger"
        }
    }
}


# =============================================================================
# Helper Functions
# =============================================================================

def get_default_config() -> Dict[str, Any]:
    """
    Generate a default configuration dictionary from the schema.

    Returns:
        dict: Configuration with all default values
    """
    config = {}

    def extract_defaults(schema: Dict, target: Dict):
        for key, value in schema.items():
            if key.startswith('_'):
                continue
            if isinstance(value, dict):
                if 'type' in value and 'default' in value:
                    target[key] = value['default']
                else:
                    target[key] = {}
                    extract_defaults(value, target[key])

    extract_defaults(CONFIG_SCHEMA, config)
    return config


def get_schema_entry(section: str, key: str) -> Dict[str, Any]:
    """Schema entry of a setting, or an empty dict if unknown."""
    return CONFIG_SCHEMA.get(section, {}).get(key, {})


def validate_config_value(schema_entry: Dict, value: Any) -> tuple[bool, str]:
    """
    Validate a configuration value against its schema.

    Args:
        schema_entry: Schema definition for the setting
        value: Value to validate

    Returns:
        tuple: (is_valid, error_message)
    """
    if 'type' not in schema_entry:
        return True, ""

    value_type = schema_entry['type']

    if value_type == 'boolean':
        if not isinstance(value, bool):
            return False, f"Expected boolean, got {type(value).__name__}"

    elif value_type == 'string':
        if not isinstance(value, str):
            return False, f"Expected string, got {type(value).__name__}"

    elif value_type == 'choices':
        choices = schema_entry.get('choices', [])
        if value not in choices:
            return False, f"Value must be one of: {choices}"

    elif value_type == 'range':
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return False, f"Expected number, got {type(value).__name__}"
        min_val = schema_entry.get('min', float('-inf'))
        max_val = schema_entry.get('max', float('inf'))
        if value < min_val or value > max_val:
            return False, f"Value must be between {min_val} and {max_val}"

    return True, ""


def get_setting_description(schema_entry: Dict) -> str:
    """Get the description for a setting."""
    return schema_entry.get('description', '')
