"""Toolkit configuration.

Settings are loaded from an optional YAML/JSON file, validated with Pydantic
and treated as read-only afterwards.
"""

from .loader import SettingsError, load_config_file, load_settings, validate_settings
from .schema import RetentionOptions, ToolkitSettings

__all__ = [
    "RetentionOptions",
    "SettingsError",
    "ToolkitSettings",
    "load_config_file",
    "load_settings",
    "validate_settings",
]
